# backend/wedding_app/core/config_loader.py

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    JWT_SECRET_KEY: str = "supersecret"
    DB_PATH: str = "data.sqlite3"
    access_token_expire_minutes: int = 1440
    environment: str = "development"
    allowed_origins: str = "*"
    LOG_LEVEL: str = "DEBUG"
    LOG_DIR: str = "logs"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @property
    def cors_origins(self) -> list:
        origins = [o.strip() for o in self.allowed_origins.split(",") if o.strip()]
        return origins or ["*"]


settings = Settings()
