from datetime import UTC, datetime

from sqlmodel import Field, SQLModel

from raiders.schemas import PlayerBasePrivate


class Player(PlayerBasePrivate, table=True):
    id: int | None = Field(default=None, primary_key=True)
    username: str = Field(unique=True, index=True, min_length=3, max_length=24)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    stamina_updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    cooldown_until: datetime | None = Field(default=None)
    last_raid_time: datetime | None = Field(default=None)


class RaidRecord(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    attacker_id: int = Field(foreign_key="player.id", index=True)
    defender_id: int = Field(foreign_key="player.id", index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    success: bool
    loot_amount: int = Field(default=0)
    destruction_percent: float = Field(default=0.0)
