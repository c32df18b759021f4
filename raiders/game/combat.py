"""
Combat math for raids.

All functions are pure and accept any finite numbers. Constants follow the
live game balance:

- Win chance is a logistic curve over the power gap with steepness 0.1, so
  equal power gives exactly 50%.
- A countering stance multiplies attack power by 1.2.
- Loot grows with log10 of the power gap, so crushing a weak target pays only
  slightly more than beating an equal one, and never less than the base reward.
"""

import math

from raiders.game.units import COUNTERS, UnitType, parse_unit_type

WIN_PROBABILITY_STEEPNESS = 0.1
UNIT_ADVANTAGE_BONUS = 1.2
NO_ADVANTAGE = 1.0
LOOT_GAP_SCALE = 10


def win_probability(attack: float, defense: float) -> float:
    """
    Probability that the attacker wins.

    P = 1 / (1 + e^(-k * (attack - defense)))
    """
    z = WIN_PROBABILITY_STEEPNESS * (attack - defense)
    # Evaluate on the side that keeps exp() bounded
    if z >= 0:
        return 1.0 / (1.0 + math.exp(-z))
    exp_z = math.exp(z)
    return exp_z / (1.0 + exp_z)


def unit_advantage_multiplier(
    attacker_unit: UnitType | str | None, defender_unit: UnitType | str | None
) -> float:
    """Returns 1.2 when the attacker's stance counters the defender's, else 1.0"""
    attacker = parse_unit_type(attacker_unit)
    defender = parse_unit_type(defender_unit)
    if attacker is None or defender is None:
        return NO_ADVANTAGE
    if COUNTERS[attacker] == defender:
        return UNIT_ADVANTAGE_BONUS
    return NO_ADVANTAGE


def loot_amount(base_reward: float, attack: float, defense: float) -> int:
    """
    Loot for a won raid.

    Loot = floor(base * (log10(1 + max(0, attack - defense) / 10) + 1))
    """
    gap = max(0.0, attack - defense)
    multiplier = math.log10(1 + gap / LOOT_GAP_SCALE) + 1
    return math.floor(base_reward * multiplier)


def destruction_percent(attack: float, defense: float) -> float:
    """Attacker's share of the total power on the field, as a percentage"""
    attack = max(0.0, attack)
    defense = max(0.0, defense)
    total = attack + defense
    if total <= 0:
        return 0.0
    return round(min(100.0, 100.0 * attack / total), 1)
