from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic import Field as PydanticField
from sqlmodel import Field, SQLModel

from raiders.game.units import TroopName, UnitType

# --- Player schemas --- #


class PlayerBasePublic(SQLModel):
    id: int = Field(primary_key=True)
    username: str = Field(min_length=3, max_length=24)
    unit_type: UnitType | None = Field(default=UnitType.INFANTRY)


class PlayerBasePrivate(PlayerBasePublic):
    win_count: int = Field(default=0, ge=0)
    streak: int = Field(default=0, ge=0)
    defense_power: float = Field(default=50.0, ge=0)
    balance: int = Field(default=1000, ge=0)

    stamina: int = Field(default=100, ge=0)
    max_stamina: int = Field(default=100, gt=0)

    archers: int = Field(default=0, ge=0)
    infantry: int = Field(default=0, ge=0)
    giants: int = Field(default=0, ge=0)


class PlayerCreate(SQLModel):
    username: str = Field(min_length=3, max_length=24)
    unit_type: UnitType = UnitType.INFANTRY


class PlayerOutPublic(SQLModel):
    id: int
    username: str
    unit_type: UnitType | None
    win_count: int
    defense_power: float


class PlayerOutPrivate(PlayerBasePrivate):
    stamina_updated_at: datetime
    cooldown_until: datetime | None
    last_raid_time: datetime | None


class PlayersOutPublicList(SQLModel):
    data: list[PlayerOutPublic]
    count: int


# --- Raid history schemas --- #


class RaidRecordPublic(SQLModel):
    id: int
    attacker_id: int
    defender_id: int
    created_at: datetime
    success: bool
    loot_amount: int
    destruction_percent: float


class RaidRecordsPublicList(SQLModel):
    data: list[RaidRecordPublic]
    count: int


# --- Requests --- #


class TroopTrainingRequest(SQLModel):
    troop: str


class RaidRequest(SQLModel):
    defender_id: int


# --- Engine values --- #


class RejectionReason(str, Enum):
    ON_COOLDOWN = "OnCooldown"
    INSUFFICIENT_STAMINA = "InsufficientStamina"
    INSUFFICIENT_CAPACITY = "InsufficientCapacity"
    UNIT_LIMIT_REACHED = "UnitLimitReached"
    INVALID_UNIT_TYPE = "InvalidUnitType"


class PlayerCombatState(BaseModel):
    """Snapshot of everything a raid reads or changes on one player"""

    model_config = ConfigDict(frozen=True)

    win_count: int = PydanticField(default=0, ge=0)
    defense_power: float = PydanticField(default=0.0, ge=0)
    unit_type: UnitType | None = None
    stamina: int = PydanticField(default=100, ge=0)
    max_stamina: int = PydanticField(default=100, gt=0)
    stamina_updated_at: datetime
    balance: int = PydanticField(default=0, ge=0)
    streak: int = PydanticField(default=0, ge=0)
    cooldown_until: datetime | None = None
    last_raid_time: datetime | None = None

    @model_validator(mode="after")
    def check_stamina_within_max(self) -> "PlayerCombatState":
        if self.stamina > self.max_stamina:
            raise ValueError(
                f"stamina {self.stamina} exceeds max_stamina {self.max_stamina}"
            )
        return self


class TroopRoster(BaseModel):
    """Owned troop counts"""

    model_config = ConfigDict(frozen=True)

    archers: int = PydanticField(default=0, ge=0)
    infantry: int = PydanticField(default=0, ge=0)
    giants: int = PydanticField(default=0, ge=0)

    def count(self, troop: TroopName) -> int:
        return getattr(self, troop.value)


class Rejection(BaseModel):
    """An expected rule violation, returned instead of an outcome"""

    model_config = ConfigDict(frozen=True)

    reason: RejectionReason
    detail: str
    retry_at: datetime | None = None


class TrainingOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    troop: TroopName
    roster: TroopRoster
    used_capacity: int


class RaidPreview(BaseModel):
    model_config = ConfigDict(frozen=True)

    attack_power: float
    defense_power: float
    win_probability: float
    unit_advantage_applied: bool
    estimated_loot: int


class RaidOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    win_probability: float = PydanticField(ge=0, le=1)
    unit_advantage_applied: bool
    destruction_percent: float = PydanticField(ge=0, le=100)
    loot_amount: int = PydanticField(ge=0)

    attack_power: float
    defense_power: float
    roll: float
    cooldown_triggered: bool = False
    resolved_at: datetime

    updated_attacker: PlayerCombatState
    updated_defender: PlayerCombatState
