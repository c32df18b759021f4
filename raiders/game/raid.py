import logging
import math
import random
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import TypeVar

from raiders.core.config import settings
from raiders.game.barracks import Barracks
from raiders.game.combat import (
    NO_ADVANTAGE,
    destruction_percent,
    loot_amount,
    unit_advantage_multiplier,
    win_probability,
)
from raiders.game.errors import (
    GameRuleError,
    InsufficientStaminaError,
    OnCooldownError,
)
from raiders.game.stamina import as_utc, regenerate_state
from raiders.schemas import (
    PlayerCombatState,
    RaidOutcome,
    RaidPreview,
    Rejection,
    TroopRoster,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
RandomSource = Callable[[], float]
T = TypeVar("T")


def utc_now() -> datetime:
    return datetime.now(UTC)


class RaidResolver:
    """Class for resolving a raid of one player against another"""

    def __init__(
        self,
        clock: Clock = utc_now,
        rng: RandomSource = random.random,
        *,
        base_attack: int | None = None,
        attack_per_win: int | None = None,
        base_loot_reward: int | None = None,
        stamina_cost: int | None = None,
        loss_stamina_penalty: int | None = None,
        defense_penalty: float | None = None,
        fatigue_streak: int | None = None,
        fatigue_cooldown: timedelta | None = None,
        stamina_regen_rate: float | None = None,
    ):
        """
        Initialize raid resolver

        Args:
            clock: Returns the current time
            rng: Returns a uniform random number in [0, 1)

        Tuning arguments left as None fall back to the configured settings.
        """
        self.clock = clock
        self.rng = rng
        self.base_attack = _default(base_attack, settings.BASE_ATTACK)
        self.attack_per_win = _default(attack_per_win, settings.ATTACK_PER_WIN)
        self.base_loot_reward = _default(base_loot_reward, settings.BASE_LOOT_REWARD)
        self.stamina_cost = _default(stamina_cost, settings.RAID_STAMINA_COST)
        self.loss_stamina_penalty = _default(
            loss_stamina_penalty, settings.LOSS_STAMINA_PENALTY
        )
        self.defense_penalty = _default(defense_penalty, settings.DEFENSE_PENALTY)
        self.fatigue_streak = _default(fatigue_streak, settings.FATIGUE_STREAK)
        self.fatigue_cooldown = _default(
            fatigue_cooldown, timedelta(seconds=settings.fatigue_cooldown)
        )
        self.stamina_regen_rate = _default(
            stamina_regen_rate, settings.stamina_regen_rate
        )

    def resolve(
        self,
        attacker: PlayerCombatState,
        defender: PlayerCombatState,
        roster: TroopRoster | None = None,
    ) -> RaidOutcome | Rejection:
        """
        Resolve one raid attempt.

        Returns a RaidOutcome carrying updated copies of both players, or a
        Rejection when the attacker may not raid. The inputs are never modified.
        """
        now = self.clock()
        try:
            return self._resolve(attacker, defender, roster, now)
        except GameRuleError as e:
            logger.info("Raid rejected (%s): %s", e.reason.value, e.detail)
            return Rejection(reason=e.reason, detail=e.detail, retry_at=e.retry_at)

    def preview(
        self,
        attacker: PlayerCombatState,
        defender: PlayerCombatState,
        roster: TroopRoster | None = None,
    ) -> RaidPreview:
        """Estimate a raid without rolling or changing anything"""
        attack, multiplier = self.attack_power(attacker, defender, roster)
        defense = defender.defense_power
        return RaidPreview(
            attack_power=attack,
            defense_power=defense,
            win_probability=win_probability(attack, defense),
            unit_advantage_applied=multiplier > NO_ADVANTAGE,
            estimated_loot=loot_amount(self.base_loot_reward, attack, defense),
        )

    def attack_power(
        self,
        attacker: PlayerCombatState,
        defender: PlayerCombatState,
        roster: TroopRoster | None = None,
    ) -> tuple[float, float]:
        """
        Calculate the attacker's raid power.

        Returns:
            tuple: (attack_power, unit_advantage_multiplier)
        """
        base = attacker.win_count * self.attack_per_win + self.base_attack
        if roster is not None:
            base += Barracks.total_damage(roster)
        multiplier = unit_advantage_multiplier(attacker.unit_type, defender.unit_type)
        return base * multiplier, multiplier

    def _resolve(
        self,
        attacker: PlayerCombatState,
        defender: PlayerCombatState,
        roster: TroopRoster | None,
        now: datetime,
    ) -> RaidOutcome:
        # Eligibility
        attacker = self._check_eligibility(attacker, now)

        # Power
        attack, multiplier = self.attack_power(attacker, defender, roster)
        defense = defender.defense_power

        # Roll
        probability = win_probability(attack, defense)
        roll = self.rng()
        success = roll < probability

        # Outcome
        loot = 0
        cooldown_triggered = False
        if success:
            loot = loot_amount(self.base_loot_reward, attack, defense)
            streak = attacker.streak + 1
            attacker_update: dict = {
                "win_count": attacker.win_count + 1,
                "balance": attacker.balance + loot,
            }
            if streak >= self.fatigue_streak:
                attacker_update["cooldown_until"] = now + self.fatigue_cooldown
                streak = 0
                cooldown_triggered = True
            attacker_update["streak"] = streak
            attacker = attacker.model_copy(update=attacker_update)
            defender = defender.model_copy(
                update={
                    "balance": max(0, defender.balance - loot),
                    "defense_power": max(
                        0.0, defender.defense_power - self.defense_penalty
                    ),
                    "last_raid_time": now,
                }
            )
        else:
            attacker = attacker.model_copy(
                update={
                    "streak": 0,
                    "stamina": max(0, attacker.stamina - self.loss_stamina_penalty),
                }
            )

        logger.info(
            "Raid %s: attack %.1f vs defense %.1f, p=%.3f, roll=%.3f, loot=%d",
            "won" if success else "lost",
            attack,
            defense,
            probability,
            roll,
            loot,
        )
        if cooldown_triggered:
            logger.info("Fatigue cooldown until %s", attacker.cooldown_until)

        return RaidOutcome(
            success=success,
            win_probability=probability,
            unit_advantage_applied=multiplier > NO_ADVANTAGE,
            destruction_percent=destruction_percent(attack, defense),
            loot_amount=loot,
            attack_power=attack,
            defense_power=defense,
            roll=roll,
            cooldown_triggered=cooldown_triggered,
            resolved_at=now,
            updated_attacker=attacker,
            updated_defender=defender,
        )

    def _check_eligibility(
        self, attacker: PlayerCombatState, now: datetime
    ) -> PlayerCombatState:
        """Check cooldown and stamina, returning the attacker with the cost paid"""
        if attacker.cooldown_until and as_utc(attacker.cooldown_until) > as_utc(now):
            remaining = as_utc(attacker.cooldown_until) - as_utc(now)
            raise OnCooldownError(
                f"Army resting, cooldown: {math.ceil(remaining.total_seconds())}s",
                retry_at=attacker.cooldown_until,
            )

        attacker = regenerate_state(attacker, now, rate=self.stamina_regen_rate)
        if attacker.stamina < self.stamina_cost:
            raise InsufficientStaminaError(
                f"Insufficient stamina: {attacker.stamina}/{self.stamina_cost}"
            )

        return attacker.model_copy(
            update={"stamina": attacker.stamina - self.stamina_cost}
        )


def skip_cooldown(state: PlayerCombatState) -> PlayerCombatState:
    """Clear the fatigue cooldown and streak"""
    return state.model_copy(update={"cooldown_until": None, "streak": 0})


def refill_stamina(state: PlayerCombatState, now: datetime) -> PlayerCombatState:
    """Fill stamina to the maximum"""
    return state.model_copy(
        update={"stamina": state.max_stamina, "stamina_updated_at": now}
    )


def upgrade_defense(
    state: PlayerCombatState, amount: float | None = None
) -> PlayerCombatState:
    """
    Reinforce the player's defenses.

    Args:
        state: Player snapshot
        amount: Defense power to add, defaults to the configured upgrade

    Raises:
        ValueError: If amount is not positive
    """
    if amount is None:
        amount = settings.DEFENSE_UPGRADE_AMOUNT
    if amount <= 0:
        raise ValueError("Defense upgrade amount must be positive")
    return state.model_copy(update={"defense_power": state.defense_power + amount})


def _default(value: T | None, fallback: T) -> T:
    return fallback if value is None else value
