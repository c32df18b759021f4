import logging

from raiders.core.config import settings
from raiders.game.errors import (
    GameRuleError,
    InsufficientCapacityError,
    InvalidUnitTypeError,
    UnitLimitReachedError,
)
from raiders.game.units import TROOP_CLASS_MAP, Troop, TroopName
from raiders.schemas import Rejection, TrainingOutcome, TroopRoster

logger = logging.getLogger(__name__)


class Barracks:
    """Validates troop training against per-troop limits and garrison space"""

    def __init__(self, garrison_capacity: int | None = None):
        if garrison_capacity is None:
            garrison_capacity = settings.GARRISON_CAPACITY
        if garrison_capacity < 0:
            raise ValueError("Garrison capacity cannot be negative")
        self.garrison_capacity = garrison_capacity

    @staticmethod
    def used_capacity(roster: TroopRoster) -> int:
        """Garrison space taken by all owned troops"""
        return sum(
            roster.count(troop_name) * troop_class.capacity_cost
            for troop_name, troop_class in TROOP_CLASS_MAP.items()
        )

    @staticmethod
    def total_damage(roster: TroopRoster) -> int:
        """Raid damage of all owned troops"""
        return sum(
            roster.count(troop_name) * troop_class.damage_per_unit
            for troop_name, troop_class in TROOP_CLASS_MAP.items()
        )

    def free_capacity(self, roster: TroopRoster) -> int:
        """Garrison space left, negative when over the ceiling"""
        return self.garrison_capacity - self.used_capacity(roster)

    @staticmethod
    def _get_troop_class(troop: TroopName | str) -> type[Troop]:
        try:
            return TROOP_CLASS_MAP[TroopName(troop)]
        except ValueError:
            raise InvalidUnitTypeError(f"Unknown troop type: {troop}") from None

    def train(self, roster: TroopRoster, troop: TroopName | str) -> TrainingOutcome:
        """
        Train one troop.

        Raises:
            InvalidUnitTypeError: Unknown troop name
            UnitLimitReachedError: The troop is already at its limit
            InsufficientCapacityError: Not enough garrison space left
        """
        troop_class = self._get_troop_class(troop)
        troop_name = troop_class.name
        owned = roster.count(troop_name)

        if owned >= troop_class.limit:
            raise UnitLimitReachedError(
                f"Maximum of {troop_class.limit} {troop_name.value} reached"
            )

        used = self.used_capacity(roster)
        if troop_class.capacity_cost > self.free_capacity(roster):
            raise InsufficientCapacityError(
                f"Not enough garrison capacity: {used}/{self.garrison_capacity} used,"
                f" {troop_name.value} needs {troop_class.capacity_cost}"
            )

        new_roster = roster.model_copy(update={troop_name.value: owned + 1})
        return TrainingOutcome(
            troop=troop_name,
            roster=new_roster,
            used_capacity=used + troop_class.capacity_cost,
        )

    def can_train(
        self, roster: TroopRoster, troop: TroopName | str
    ) -> TrainingOutcome | Rejection:
        """Train one troop, returning a Rejection instead of raising"""
        try:
            return self.train(roster, troop)
        except GameRuleError as e:
            logger.info("Training of %s rejected: %s", troop, e.detail)
            return Rejection(reason=e.reason, detail=e.detail)
