"""Core module: Settings, Miniflux response models, Notice and errors."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class MinifluxError(RuntimeError):
    """Raised when the Miniflux server cannot be queried."""


class NotificationError(RuntimeError):
    """Raised when a desktop notification could not be displayed."""


class Settings(BaseSettings):
    """Application configuration with environment variable support."""

    miniflux_url: str = "http://localhost:8080"
    miniflux_api_key: str
    poll_interval: float = Field(default=10.0, gt=0)
    request_timeout: float = Field(default=10.0, gt=0)
    entry_limit: int = Field(default=100, gt=0)
    max_entry_notifications: int = Field(default=5, ge=0)
    notification_timeout: int = -1
    app_name: str = "Miniflux"
    log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}

    @field_validator("miniflux_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


class Feed(BaseModel):
    """Feed an entry belongs to."""

    title: str = ""


class Entry(BaseModel):
    """A single Miniflux entry."""

    id: int
    title: str = ""
    author: str = ""
    hash: str
    url: str = ""
    feed: Feed = Field(default_factory=Feed)

    @property
    def source(self) -> str:
        """Author of the entry, or the feed title when the author is empty."""
        return self.author or self.feed.title


class Entries(BaseModel):
    """Response payload of ``GET /v1/entries``."""

    total: int = Field(ge=0)
    entries: list[Entry] = Field(default_factory=list)


class Notice(BaseModel):
    """A desktop notification to display."""

    summary: str
    body: str = ""
    url: str | None = None
