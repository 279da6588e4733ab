from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in (value or "").split(",") if item.strip()]


class Settings(BaseSettings):
    # --- DB ---
    DATABASE_URL: str = "sqlite:///./billiards.sqlite"
    DB_ECHO: bool = False

    # --- HTTP ---
    API_PREFIX: str = "/api"
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 3000
    CORS_ORIGINS: str = "*"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # --- Players / rotation ---
    AUTO_INIT_PLAYERS: bool = True
    DEFAULT_PLAYERS: str = "Minh,Toàn,Hải"
    # Empty => rotate by registration order (player id)
    PAYER_PRIORITY: str = ""

    # "today", calendar month and year are computed in this zone
    TIMEZONE: str = "UTC"

    BADGES_ENABLED: bool = True

    RECENT_MATCHES_DEFAULT: int = 10
    LEADERBOARD_DEFAULT: int = 10

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("APP_PORT")
    @classmethod
    def _check_port(cls, v: int) -> int:
        if v < 1 or v > 65535:
            raise ValueError(f"Invalid port number: {v}")
        return v

    @field_validator("TIMEZONE")
    @classmethod
    def _check_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def cors_origins(self) -> list[str]:
        if not self.CORS_ORIGINS or self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return _split_csv(self.CORS_ORIGINS)

    @property
    def default_players(self) -> list[str]:
        return _split_csv(self.DEFAULT_PLAYERS)

    @property
    def payer_priority(self) -> list[str]:
        return _split_csv(self.PAYER_PRIORITY)

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.TIMEZONE)


settings = Settings()
