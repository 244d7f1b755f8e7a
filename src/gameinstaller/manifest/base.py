"""Base configuration for remote manifest models.

All manifest models inherit from ManifestModel which enforces:
- Models are immutable once parsed
- Unknown keys are ignored (remote schemas grow over time)
- Fields may be populated by their Python name or their JSON alias
"""

from __future__ import annotations

from typing import Any, TypeVar

import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from gameinstaller.errors import ParseError

ModelT = TypeVar("ModelT", bound="ManifestModel")


class ManifestModel(BaseModel):
    """Base class for all remote manifest documents."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    @classmethod
    def parse(cls: type[ModelT], data: bytes | str) -> ModelT:
        """
        Parse a JSON document into this model.

        Args:
            data: Raw JSON content.

        Returns:
            Validated model instance.

        Raises:
            ParseError: If the content is not JSON or violates the schema.
        """
        if isinstance(data, str):
            data = data.encode()
        try:
            raw = orjson.loads(data)
        except orjson.JSONDecodeError as e:
            msg = f"Malformed {cls.__name__} JSON: {e}"
            raise ParseError(msg) from e
        return cls.from_raw(raw)

    @classmethod
    def from_raw(cls: type[ModelT], raw: Any) -> ModelT:
        """Validate already-decoded JSON, wrapping schema errors in ParseError."""
        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            msg = f"Invalid {cls.__name__}: {e.error_count()} error(s): {e.errors()[0]['msg']}"
            raise ParseError(msg) from e

    def to_json(self) -> bytes:
        """Serialize to JSON bytes using orjson, keeping the remote key names."""
        return orjson.dumps(
            self.model_dump(mode="json", by_alias=True, exclude_none=True),
            option=orjson.OPT_INDENT_2,
        )


class DownloadEntry(ManifestModel):
    """Remote file with its declared integrity data."""

    url: str = Field(..., min_length=1, description="Download URL")
    size: int = Field(..., ge=0, description="Declared size in bytes")
    sha1: str | None = Field(default=None, description="Declared SHA-1 hex digest")
