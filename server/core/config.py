"""Environment-driven configuration with Pydantic v2."""

from typing import Annotated, FrozenSet, List, Optional
from pathlib import Path
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode


class Settings(BaseSettings):
    """Application settings driven entirely by environment variables."""

    # Server Configuration
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1024, le=65535)
    debug: bool = Field(default=False)
    workers: int = Field(default=1, ge=1, le=8)

    # Security
    api_secret_keys: Annotated[FrozenSet[str], NoDecode] = Field(default_factory=frozenset)
    api_secret_key: Optional[str] = Field(default=None)  # Legacy single-key variable
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    public_base_url: Optional[str] = Field(default=None)

    # Backing store
    redis_url: str = Field(default="redis://localhost:6379/0")
    store_timeout_seconds: float = Field(default=5.0, gt=0, le=60)

    # Document lifecycle
    default_ttl_hours: float = Field(default=24, ge=1)
    min_ttl_hours: float = Field(default=1, gt=0)
    max_ttl_hours: float = Field(default=168, ge=1)
    max_content_length: int = Field(default=1_000_000, ge=1)

    # Identifier shape
    id_length: int = Field(default=12, ge=8, le=20)
    id_min_length: int = Field(default=8, ge=1)
    id_max_length: int = Field(default=20, ge=1)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")
    log_file: Optional[str] = Field(default=None)

    @field_validator("api_secret_keys", mode="before")
    @classmethod
    def parse_api_secret_keys(cls, v):
        """Split the comma-separated key list, dropping blanks."""
        if v is None:
            return frozenset()
        if isinstance(v, str):
            v = v.split(",")
        return frozenset(key.strip() for key in v if key and key.strip())

    @field_validator("log_file")
    @classmethod
    def validate_log_file(cls, v):
        """Ensure log directory exists."""
        if v:
            Path(v).parent.mkdir(parents=True, exist_ok=True)
        return v

    @model_validator(mode="after")
    def validate_bounds(self):
        if not self.min_ttl_hours <= self.default_ttl_hours <= self.max_ttl_hours:
            raise ValueError("default_ttl_hours must lie between min_ttl_hours and max_ttl_hours")
        if not self.id_min_length <= self.id_length <= self.id_max_length:
            raise ValueError("id_length must lie between id_min_length and id_max_length")
        return self

    @property
    def accepted_api_keys(self) -> FrozenSet[str]:
        """All configured secrets, including the legacy single key."""
        if self.api_secret_key and self.api_secret_key.strip():
            return self.api_secret_keys | {self.api_secret_key.strip()}
        return self.api_secret_keys

    model_config = {
        "env_file": "../.env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
        "env_parse_none_str": "none",
    }
