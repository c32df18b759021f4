import logging
from abc import ABC, abstractmethod
from enum import Enum

logger = logging.getLogger(__name__)


class UnitType(str, Enum):
    """Combat stance of a player, used for the rock-paper-scissors bonus"""

    INFANTRY = "Infantry"
    ARCHER = "Archer"
    CAVALRY = "Cavalry"


# Each stance beats the one it maps to
COUNTERS: dict[UnitType, UnitType] = {
    UnitType.INFANTRY: UnitType.ARCHER,
    UnitType.ARCHER: UnitType.CAVALRY,
    UnitType.CAVALRY: UnitType.INFANTRY,
}


class TroopName(str, Enum):
    ARCHERS = "archers"
    INFANTRY = "infantry"
    GIANTS = "giants"


class Troop(ABC):
    """Base class for all trainable troops"""

    @property
    @abstractmethod
    def name(self) -> TroopName:
        """Returns the name of the troop"""
        pass

    @property
    @abstractmethod
    def capacity_cost(self) -> int:
        """Returns the garrison capacity used by one unit"""
        pass

    @property
    @abstractmethod
    def damage_per_unit(self) -> int:
        """Returns the raid damage contributed by one unit"""
        pass

    @property
    @abstractmethod
    def limit(self) -> int:
        """Returns the maximum number of units a player may own"""
        pass


class CyberArcher(Troop):
    """Cheap ranged troop"""

    name = TroopName.ARCHERS
    capacity_cost = 5
    damage_per_unit = 3
    limit = 4


class NanoInfantry(Troop):
    """Standard melee troop"""

    name = TroopName.INFANTRY
    capacity_cost = 10
    damage_per_unit = 5
    limit = 3


class MechTitan(Troop):
    """Heavy troop, expensive in garrison space"""

    name = TroopName.GIANTS
    capacity_cost = 20
    damage_per_unit = 7
    limit = 3


# Map of troop names to their classes
TROOP_CLASS_MAP: dict[TroopName, type[Troop]] = {
    TroopName.ARCHERS: CyberArcher,
    TroopName.INFANTRY: NanoInfantry,
    TroopName.GIANTS: MechTitan,
}


def parse_unit_type(value: UnitType | str | None) -> UnitType | None:
    """Return the matching UnitType, or None when the value is absent or unknown"""
    if value is None:
        return None
    try:
        return UnitType(value)
    except ValueError:
        logger.debug("Unrecognised unit type %r", value)
        return None
