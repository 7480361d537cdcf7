"""Pydantic models describing DevMind configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator


class EnrichmentConfig(BaseModel):
    """Batching and import limits for the enrichment pipeline."""

    batch_size: int = 10
    import_limit: int = 50

    @model_validator(mode="after")
    def _validate_positive(self) -> "EnrichmentConfig":
        if self.batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if self.import_limit < 1:
            raise ValueError("import_limit must be >= 1")
        return self


class ClassifierConfig(BaseModel):
    """Connection settings for the OpenAI-compatible classification endpoint."""

    endpoint: str = "https://api.openai.com/v1/chat/completions"
    model: str = "gpt-4o-mini"
    api_key_env: str = "OPENAI_API_KEY"
    timeout: float = 60.0
    temperature: float = 0.0
    description_max_words: int = 15

    @field_validator("endpoint")
    @classmethod
    def _validate_endpoint(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError("endpoint must be an http(s) URL")
        return value

    @model_validator(mode="after")
    def _validate_limits(self) -> "ClassifierConfig":
        if self.timeout <= 0:
            raise ValueError("timeout must be > 0")
        if self.description_max_words < 1:
            raise ValueError("description_max_words must be >= 1")
        return self


class StorageConfig(BaseModel):
    """Where the serialized catalog lives.

    ``path`` is the SQLite database for the ``sqlite`` backend; the ``json``
    backend writes ``<key>.json`` into the directory containing ``path``.
    """

    backend: Literal["sqlite", "json"] = "sqlite"
    path: Path = Field(default=Path("data/catalog.db"))
    key: str = "my-ai-bookmarks"

    @field_validator("path", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path:
        return Path(value)

    @field_validator("key")
    @classmethod
    def _validate_key(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("storage key cannot be empty")
        return value

    def resolved_path(self, base_dir: Path) -> Path:
        """Return the storage path relative to the project root."""

        if not self.path.is_absolute():
            return (base_dir / self.path).resolve()
        return self.path


class GlobalConfig(BaseModel):
    """Top-level configuration document."""

    enrichment: EnrichmentConfig = Field(default_factory=EnrichmentConfig)
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    enable_progress_bar: bool = True


__all__ = [
    "ClassifierConfig",
    "EnrichmentConfig",
    "GlobalConfig",
    "StorageConfig",
]
