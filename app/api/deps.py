"""API dependencies."""

from __future__ import annotations

import hmac
from collections.abc import Generator

from fastapi import HTTPException
from sqlmodel import Session

from app.core.config import settings
from app.db.session import get_session
from app.services.storage import BlobStorage


def get_db() -> Generator[Session, None, None]:
    with get_session() as session:
        yield session


def get_storage() -> BlobStorage:
    return BlobStorage()


def require_admin(password: str | None) -> None:
    """Check the shared administrator secret carried in a request body."""
    expected = settings.admin_password
    if not expected or not password or not hmac.compare_digest(password.encode(), expected.encode()):
        raise HTTPException(status_code=401, detail="Unauthorized")
