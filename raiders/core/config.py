from typing import Literal

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "Yield Raiders"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: Literal["local", "test", "production"] = "local"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "sqlite:///./yield_raiders.db"

    # Multiplies regeneration speed and divides cooldowns
    GAME_SPEED: float = 1.0

    # Combat
    BASE_ATTACK: int = 100
    ATTACK_PER_WIN: int = 5
    BASE_LOOT_REWARD: int = 10
    DEFENSE_PENALTY: float = 10.0
    DEFENSE_UPGRADE_AMOUNT: float = 10.0

    # Stamina
    MAX_STAMINA: int = 100
    RAID_STAMINA_COST: int = 10
    LOSS_STAMINA_PENALTY: int = 10
    STAMINA_REGEN_PER_SECOND: float = 1 / 3

    # Fatigue
    FATIGUE_STREAK: int = 5
    FATIGUE_COOLDOWN_SECONDS: float = 10.0

    # Barracks
    GARRISON_CAPACITY: int = 100

    # New players
    STARTING_BALANCE: int = 1000
    STARTING_DEFENSE: float = 50.0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def stamina_regen_rate(self) -> float:
        """Stamina regenerated per second, adjusted by game speed"""
        return self.STAMINA_REGEN_PER_SECOND * self.GAME_SPEED

    @computed_field  # type: ignore[prop-decorator]
    @property
    def fatigue_cooldown(self) -> float:
        """Fatigue cooldown in seconds, adjusted by game speed"""
        return self.FATIGUE_COOLDOWN_SECONDS / self.GAME_SPEED


settings = Settings()
