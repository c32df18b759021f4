from datetime import datetime

from raiders.schemas import RejectionReason


class GameRuleError(Exception):
    """
    Base exception for expected, recoverable rule violations.

    These never leave the engine: the public entry points turn them into a
    Rejection value for the caller.
    """

    reason: RejectionReason

    def __init__(self, detail: str, retry_at: datetime | None = None):
        super().__init__(detail)
        self.detail = detail
        self.retry_at = retry_at


class OnCooldownError(GameRuleError):
    """Exception raised when the attacker is resting after a win streak"""

    reason = RejectionReason.ON_COOLDOWN


class InsufficientStaminaError(GameRuleError):
    """Exception raised when there is not enough stamina to raid"""

    reason = RejectionReason.INSUFFICIENT_STAMINA


class InsufficientCapacityError(GameRuleError):
    """Exception raised when the garrison has no room for another troop"""

    reason = RejectionReason.INSUFFICIENT_CAPACITY


class UnitLimitReachedError(GameRuleError):
    """Exception raised when a troop type is already at its limit"""

    reason = RejectionReason.UNIT_LIMIT_REACHED


class InvalidUnitTypeError(GameRuleError):
    """Exception raised for an unknown troop name"""

    reason = RejectionReason.INVALID_UNIT_TYPE
