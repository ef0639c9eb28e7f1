import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "Supermarket Chain API"
    debug: bool = False
    log_level: str = "INFO"

    # Import
    import_preview_limit: int = 25
    error_report_dir: str = "tmp/error_reports"

    # Reports
    top_products_limit: int = 5


@lru_cache()
def get_settings() -> Settings:
    return Settings()


def configure_logging(settings: Settings) -> None:
    level = logging.DEBUG if settings.debug else settings.log_level.upper()
    # basicConfig is a no-op once the root logger has handlers
    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
