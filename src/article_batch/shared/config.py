from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level"
    )

    LOG_FORMAT: str = Field(
        default="console",
        description="Log renderer: 'console' for humans, 'json' for log shippers"
    )

    # newspaper4k extraction settings
    EXTRACTION_TIMEOUT: int = Field(
        default=30,
        description="Timeout for a single article extraction in seconds"
    )

    EXTRACTION_MAX_RETRIES: int = Field(
        default=2,
        description="Maximum number of retry attempts for timeouts and network errors"
    )

    EXTRACTION_RETRY_BASE_DELAY: float = Field(
        default=1.0,
        description="Base delay in seconds for exponential backoff"
    )

    EXTRACTION_RETRY_MULTIPLIER: float = Field(
        default=2.0,
        description="Multiplier for exponential backoff"
    )

    NEWSPAPER_LANGUAGE: str = Field(
        default="en",
        description="Language setting for newspaper4k"
    )

    USER_AGENT: str = Field(
        default=(
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
        ),
        description="User-Agent header sent unless overridden with --header"
    )

    # Batch settings
    DEFAULT_CONCURRENCY: int = Field(
        default=1,
        description="Concurrent extractions when --concurrency is not given"
    )

    DEFAULT_CONTENT_TYPE: str = Field(
        default="markdown",
        description="Content type when --format is not given"
    )

    URL_SEPARATOR: str = Field(
        default=r"[\r\n]+",
        description="Regular expression separating records in a URL-list file"
    )

    OUTPUT_DIR: str = Field(
        default=".",
        description="Directory for files named automatically from article titles"
    )

    SHOW_PROGRESS: bool = Field(
        default=True,
        description="Render a progress bar on stderr when it is a terminal"
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        valid_formats = ["console", "json"]
        if v.lower() not in valid_formats:
            raise ValueError(f"LOG_FORMAT must be one of {valid_formats}")
        return v.lower()

    @field_validator("EXTRACTION_TIMEOUT")
    @classmethod
    def validate_extraction_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("EXTRACTION_TIMEOUT must be positive")
        if v > 300:  # 5 minutes max
            raise ValueError("EXTRACTION_TIMEOUT must not exceed 300 seconds")
        return v

    @field_validator("EXTRACTION_MAX_RETRIES")
    @classmethod
    def validate_max_retries(cls, v: int) -> int:
        if v < 0:
            raise ValueError("EXTRACTION_MAX_RETRIES must be non-negative")
        if v > 10:
            raise ValueError("EXTRACTION_MAX_RETRIES must not exceed 10")
        return v

    @field_validator("EXTRACTION_RETRY_BASE_DELAY")
    @classmethod
    def validate_retry_base_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("EXTRACTION_RETRY_BASE_DELAY must be non-negative")
        return v

    @field_validator("EXTRACTION_RETRY_MULTIPLIER")
    @classmethod
    def validate_retry_multiplier(cls, v: float) -> float:
        if v < 1.0:
            raise ValueError("EXTRACTION_RETRY_MULTIPLIER must be at least 1.0")
        return v

    @field_validator("DEFAULT_CONCURRENCY")
    @classmethod
    def validate_default_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("DEFAULT_CONCURRENCY must be at least 1")
        if v > 64:
            raise ValueError("DEFAULT_CONCURRENCY must not exceed 64")
        return v

    @field_validator("DEFAULT_CONTENT_TYPE")
    @classmethod
    def validate_content_type(cls, v: str) -> str:
        valid_types = ["html", "markdown", "text"]
        if v.lower() not in valid_types:
            raise ValueError(f"DEFAULT_CONTENT_TYPE must be one of {valid_types}")
        return v.lower()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
