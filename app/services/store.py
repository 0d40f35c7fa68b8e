"""Direct store access used by the moderation dashboard."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Protocol

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from app.db.session import get_session
from app.models import SubmissionStatus, SubmissionView
from app.services import submission as submissions
from app.services.errors import ModerationError, StoreError
from app.services.storage import BlobStorage, StorageError

logger = logging.getLogger(__name__)


class SubmissionStore(Protocol):
    """Operations the dashboard needs from the persistent store.

    Every method either returns normally or raises ``StoreError``.
    """

    def list_by_status(self, status: SubmissionStatus) -> list[SubmissionView]: ...

    def get(self, submission_id: str) -> SubmissionView: ...

    def update_fields(self, submission_id: str, fields: Mapping[str, Any]) -> None: ...

    def delete_blob(self, path: str) -> None: ...

    def delete_record(self, submission_id: str) -> None: ...

    def remove_image_from_record(self, submission_id: str, image_url: str) -> list[str]: ...


class DatabaseStore:
    """In-process store backed by the SQL database and the blob bucket."""

    def __init__(self, engine: Engine | None = None, storage: BlobStorage | None = None) -> None:
        self.engine = engine
        self.storage = storage or BlobStorage()

    @contextmanager
    def _session(self, action: str) -> Iterator[Any]:
        try:
            with get_session(self.engine) as db:
                yield db
        except StoreError:
            raise
        except ModerationError as exc:
            raise StoreError(exc.reason) from exc
        except (SQLAlchemyError, StorageError) as exc:
            logger.error("Store %s failed: %s", action, exc)
            raise StoreError(f"Failed to {action}: {exc}") from exc

    def list_by_status(self, status: SubmissionStatus) -> list[SubmissionView]:
        with self._session("list submissions") as db:
            rows = submissions.list_submissions(status, session=db)
            return [SubmissionView.model_validate(row) for row in rows]

    def get(self, submission_id: str) -> SubmissionView:
        with self._session("fetch submission details") as db:
            return SubmissionView.model_validate(submissions.get_submission(submission_id, session=db))

    def update_fields(self, submission_id: str, fields: Mapping[str, Any]) -> None:
        with self._session("update submission") as db:
            submissions.update_fields(submission_id, fields, session=db)

    def delete_blob(self, path: str) -> None:
        """Delete one blob given its public URL or object key."""
        key = self.storage.path_from_url(path)
        if not key:
            raise StoreError(f"Not a stored object: {path}")
        try:
            self.storage.delete(key)
        except StorageError as exc:
            raise StoreError(str(exc)) from exc

    def delete_record(self, submission_id: str) -> None:
        with self._session("delete submission") as db:
            submissions.delete_record(submission_id, session=db)

    def remove_image_from_record(self, submission_id: str, image_url: str) -> list[str]:
        with self._session("delete image") as db:
            return submissions.remove_image(submission_id, image_url, self.storage, session=db)


__all__ = ["DatabaseStore", "SubmissionStore"]
