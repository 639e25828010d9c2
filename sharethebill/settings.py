import logging

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="SHARETHEBILL_", extra="ignore")

    db_url: str = ""

    notification_backend: str = "log"
    app_base_url: str = "http://localhost:8000"

    max_write_retries: int = 3

    log_level: str = "INFO"
    log_json: bool = False

    def get_db_url(self) -> str:
        if not self.db_url:
            raise RuntimeError(
                "SHARETHEBILL_DB_URL is not set. A durable store is required; "
                "set SHARETHEBILL_DB_URL in your environment or .env file."
            )
        return self.db_url


settings = Settings()
