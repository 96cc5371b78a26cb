"""
Pydantic models shared across the structkb core.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ModelType(str, Enum):
    """Which AI provider answers queries."""

    GEMINI = "GEMINI"        # Primary: search grounding + illustration
    DEEPSEEK = "DEEPSEEK"    # Secondary: plain text, user-supplied key


class Config(BaseModel):
    """User-selected provider settings, persisted as a single JSON value.

    Serialised with the camelCase names used on the wire and in storage
    (``modelType``, ``deepseekApiKey``).
    """

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, protected_namespaces=()
    )

    model_type: ModelType = Field(default=ModelType.GEMINI, alias="modelType")
    deepseek_api_key: str = Field(default="", alias="deepseekApiKey")

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class SourceRef(BaseModel):
    """A single web source referenced by a grounded answer."""

    model_config = ConfigDict(frozen=True)

    title: str
    uri: str


class QueryResult(BaseModel):
    """The unified content object shown for one query."""

    model_config = ConfigDict(frozen=True)

    text: str
    sources: tuple[SourceRef, ...] = ()
    #: ``data:image/png;base64,...`` URI, or ``None`` when no illustration.
    image: Optional[str] = None


class Category(BaseModel):
    """A sidebar group of related topics."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    icon: str
    items: tuple[str, ...]
