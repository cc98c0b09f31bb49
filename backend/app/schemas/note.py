"""Note schemas."""
import json
from typing import Any

from pydantic import BaseModel, Field, field_validator

from app.models.note import DEFAULT_NOTE_COLOR

COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"


class NoteCreate(BaseModel):
    """New note request."""

    title: str = Field(..., min_length=1, max_length=200)
    content: str = ""
    tags: list[str] = []
    is_pinned: bool = Field(False, alias="isPinned")
    color: str = Field(DEFAULT_NOTE_COLOR, pattern=COLOR_PATTERN)

    class Config:
        extra = "forbid"
        populate_by_name = True


class NoteUpdate(BaseModel):
    """Partial note update; omitted fields are left unchanged."""

    title: str | None = Field(None, min_length=1, max_length=200)
    content: str | None = None
    tags: list[str] | None = None
    is_pinned: bool | None = Field(None, alias="isPinned")
    color: str | None = Field(None, pattern=COLOR_PATTERN)

    class Config:
        extra = "forbid"
        populate_by_name = True


class NoteResponse(BaseModel):
    """Note response."""

    id: str
    title: str
    content: str
    tags: list[str]
    is_pinned: bool = Field(serialization_alias="isPinned")
    color: str
    created_at: str
    updated_at: str

    @field_validator("tags", mode="before")
    @classmethod
    def parse_tags(cls, v: Any) -> list[str]:
        if v is None:
            return []
        if isinstance(v, str):
            return json.loads(v)
        return v

    class Config:
        from_attributes = True
