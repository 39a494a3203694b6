from pydantic import field_validator
from pydantic_settings import BaseSettings

DEFAULT_LISTING_URL = (
    "https://www.booking.com/searchresults.html?dest_id=-2874130;dest_type=city"
)


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    elasticsearch_url: str = "http://localhost:9200"
    index_name: str = "booking"
    drop_on_startup: bool = False

    booking_root: str = "https://www.booking.com"
    country_code: str = "ru"
    listing_url: str = DEFAULT_LISTING_URL
    languages: list[str] = ["ru", "en"]
    primary_language: str = "en"

    crawl_concurrency: int = 4
    queue_size: int = 16
    fetch_timeout: float = 15.0

    log_level: str = "INFO"

    @field_validator("languages")
    @classmethod
    def _require_languages(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("at least one language is required")
        return value

    @field_validator("crawl_concurrency", "queue_size")
    @classmethod
    def _require_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be a positive integer")
        return value
