import logging
import math
from datetime import UTC, datetime, timedelta

from raiders.core.config import settings
from raiders.schemas import PlayerCombatState

logger = logging.getLogger(__name__)


def as_utc(value: datetime) -> datetime:
    """Treat naive timestamps (as returned by SQLite) as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def regenerate(
    stamina: int,
    max_stamina: int,
    updated_at: datetime,
    now: datetime,
    rate: float | None = None,
) -> tuple[int, datetime]:
    """
    Regenerate stamina at a flat rate from updated_at until now.

    Only whole points are added. The returned timestamp advances by exactly the
    time those points cost, so partial progress carries over to the next call.
    Once the pool is full the timestamp is moved to now. The result always
    lies within [0, max_stamina].

    Args:
        stamina: Stamina at updated_at
        max_stamina: Upper bound of the pool
        updated_at: When stamina was last brought up to date
        now: Current time
        rate: Points per second, defaults to the configured rate

    Returns:
        tuple: (new_stamina, new_updated_at)
    """
    if rate is None:
        rate = settings.stamina_regen_rate
    assert rate > 0

    current = max(0, min(stamina, max_stamina))

    elapsed = (as_utc(now) - as_utc(updated_at)).total_seconds()
    if elapsed <= 0:
        return current, updated_at

    if current >= max_stamina:
        return max_stamina, now

    missing = max_stamina - current
    gained = math.floor(elapsed * rate)
    if gained <= 0:
        return current, updated_at

    if gained >= missing:
        return max_stamina, now

    seconds_used = gained / rate
    new_updated_at = updated_at + timedelta(seconds=seconds_used)
    return current + gained, new_updated_at


def regenerate_state(
    state: PlayerCombatState, now: datetime, rate: float | None = None
) -> PlayerCombatState:
    """Return a copy of the state with stamina brought up to now"""
    stamina, updated_at = regenerate(
        stamina=state.stamina,
        max_stamina=state.max_stamina,
        updated_at=state.stamina_updated_at,
        now=now,
        rate=rate,
    )
    if stamina == state.stamina and updated_at == state.stamina_updated_at:
        return state
    logger.debug("Stamina regenerated from %s to %s", state.stamina, stamina)
    return state.model_copy(
        update={"stamina": stamina, "stamina_updated_at": updated_at}
    )
