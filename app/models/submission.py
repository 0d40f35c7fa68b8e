"""Submission models."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class SubmissionStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# Fields an administrator may change through an edit session
EDITABLE_FIELDS = ("title", "description", "material", "color", "function", "image_urls")


def _new_id() -> str:
    return uuid.uuid4().hex


class Submission(SQLModel, table=True):
    """A user-contributed IA project awaiting or past moderation."""

    id: str = Field(default_factory=_new_id, primary_key=True, max_length=32)
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    status: str = Field(
        default=SubmissionStatus.PENDING.value,
        max_length=16,
        index=True,
        description="pending|approved|rejected",
    )
    title: str = Field(default="", max_length=255)
    description: str = Field(default="")
    material: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    color: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    function: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    image_urls: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    pdf_url: Optional[str] = Field(default=None, max_length=1024)
    first_name: str = Field(default="", max_length=128)
    last_name: str = Field(default="", max_length=128)
    email: str = Field(default="", max_length=255)
    grade_level: str = Field(default="", max_length=32)


class SubmissionView(BaseModel):
    """Wire/dashboard representation of a submission (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: str
    status: SubmissionStatus
    title: str = ""
    description: str = ""
    material: list[str] = []
    color: list[str] = []
    function: list[str] = []
    image_urls: list[str] = []
    pdf_url: Optional[str] = None
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    grade_level: str = ""
    created_at: Optional[datetime] = None

    @property
    def thumbnail(self) -> str | None:
        return self.image_urls[0] if self.image_urls else None

    def editable_fields(self) -> dict:
        return {name: _copy(getattr(self, name)) for name in EDITABLE_FIELDS}


def _copy(value):
    return list(value) if isinstance(value, list) else value


__all__ = ["EDITABLE_FIELDS", "Submission", "SubmissionStatus", "SubmissionView"]
