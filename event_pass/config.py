from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DB_PATH: Path = Path.home() / "event_pass.db"

    # Signs the bearer tokens issued by the auth service
    JWT_SECRET: str = "change-me"
    # Signs QR passes; falls back to JWT_SECRET when unset
    TOKEN_SECRET: str | None = None

    # Optional Telegram bot used to push notifications to users with a tg_id
    BOT_TOKEN: str | None = None

    HOST: str = "0.0.0.0"
    PORT: int = 5000
    TIMEZONE: str = "UTC"

    # Days a completed event (and its registrations) is kept before purge
    CLEANUP_GRACE_DAYS: int = 7
    REMINDER_LEAD_HOURS: int = 24
    REMINDER_WINDOW_MINUTES: int = 30
    NOTIFIER_TIMEOUT_SECONDS: float = 10.0

    LOG_LEVEL: str = "INFO"
    LOG_DIR: Path = Path(__file__).resolve().parent / "logs"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def token_secret(self) -> str:
        return self.TOKEN_SECRET or self.JWT_SECRET


settings = Settings()
