"""Submission persistence helpers shared by the API routes and the direct store."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping, TypeVar

from sqlmodel import Session, select

from app.core.vocabulary import TAG_CATEGORIES, unknown_tags
from app.db.session import get_session
from app.models import EDITABLE_FIELDS, Submission, SubmissionStatus
from app.services.errors import ImageNotFound, SubmissionNotFound, ValidationError
from app.services.moderation import ModerationAction, next_status
from app.services.storage import BlobStorage

logger = logging.getLogger(__name__)

T = TypeVar("T")

_LIST_FIELDS = ("material", "color", "function", "image_urls")


def _with_session(func: Callable[[Session], T], session: Session | None) -> T:
    if session is not None:
        return func(session)
    with get_session() as db:
        return func(db)


def validate_tags(category: str, values: Iterable[str]) -> list[str]:
    """Return ``values`` as a list after checking them against the vocabulary."""
    if category not in TAG_CATEGORIES:
        raise ValidationError(f"Unknown tag category: {category}")
    values = list(values)
    unknown = unknown_tags(category, values)
    if unknown:
        raise ValidationError(f"Unknown {category} tag(s): {', '.join(unknown)}")
    if len(set(values)) != len(values):
        raise ValidationError(f"Duplicate {category} tags")
    return values


def validate_image_urls(urls: Iterable[str]) -> list[str]:
    urls = list(urls)
    if len(set(urls)) != len(urls):
        raise ValidationError("Duplicate image URLs")
    if any(not url for url in urls):
        raise ValidationError("Empty image URL")
    return urls


def list_submissions(
    status: SubmissionStatus | str | None = None, session: Session | None = None
) -> list[Submission]:
    """List submissions, newest first, optionally restricted to one status."""

    def _list(db: Session) -> list[Submission]:
        stmt = select(Submission)
        if status is not None:
            stmt = stmt.where(Submission.status == SubmissionStatus(status).value)
        return list(db.exec(stmt.order_by(Submission.created_at.desc())).all())

    return _with_session(_list, session)


def _load(db: Session, submission_id: str) -> Submission:
    if not submission_id:
        raise ValidationError("Missing submission ID")
    record = db.get(Submission, submission_id)
    if not record:
        raise SubmissionNotFound(submission_id)
    return record


def get_submission(submission_id: str, session: Session | None = None) -> Submission:
    return _with_session(lambda db: _load(db, submission_id), session)


def create_submission(record: Submission, session: Session | None = None) -> Submission:
    """Persist a new submission; intake always starts in pending."""
    record.status = SubmissionStatus.PENDING.value
    for category in TAG_CATEGORIES:
        setattr(record, category, validate_tags(category, getattr(record, category)))
    record.image_urls = validate_image_urls(record.image_urls)

    def _create(db: Session) -> Submission:
        db.add(record)
        db.commit()
        db.refresh(record)
        logger.info("Created submission %s", record.id, extra={"submission_id": record.id})
        return record

    return _with_session(_create, session)


def apply_action(
    submission_id: str, action: ModerationAction | str, session: Session | None = None
) -> Submission:
    """Apply a status transition after checking it against the stored status."""

    def _apply(db: Session) -> Submission:
        record = _load(db, submission_id)
        target = next_status(record.status, action)
        if target is None:
            raise ValidationError("Permanent delete is not a status update")
        record.status = target.value
        db.add(record)
        db.commit()
        db.refresh(record)
        logger.info(
            "Submission %s is now %s",
            submission_id,
            target.value,
            extra={"submission_id": submission_id, "action": ModerationAction(action).value},
        )
        return record

    return _with_session(_apply, session)


def update_fields(
    submission_id: str, fields: Mapping[str, Any], session: Session | None = None
) -> Submission:
    """Write editable fields (and optionally ``status``) to one submission."""
    allowed = set(EDITABLE_FIELDS) | {"status"}
    extra = set(fields) - allowed
    if extra:
        raise ValidationError(f"Fields are not editable: {', '.join(sorted(extra))}")
    changes = dict(fields)
    if "status" in changes:
        try:
            changes["status"] = SubmissionStatus(changes["status"]).value
        except ValueError:
            raise ValidationError(f"Invalid status: {changes['status']}") from None
    for category in TAG_CATEGORIES:
        if category in changes:
            changes[category] = validate_tags(category, changes[category])
    if "image_urls" in changes:
        changes["image_urls"] = validate_image_urls(changes["image_urls"])

    def _update(db: Session) -> Submission:
        record = _load(db, submission_id)
        if "image_urls" in changes and set(changes["image_urls"]) != set(record.image_urls or []):
            # Images are only reordered here; removal goes through remove_image
            raise ValidationError("Image URLs must be a reordering of the submission's images")
        for name, value in changes.items():
            # JSON columns are only flagged dirty on reassignment
            setattr(record, name, list(value) if name in _LIST_FIELDS else value)
        db.add(record)
        db.commit()
        db.refresh(record)
        logger.info(
            "Updated submission %s (%s)",
            submission_id,
            ", ".join(sorted(changes)),
            extra={"submission_id": submission_id},
        )
        return record

    return _with_session(_update, session)


def remove_image(
    submission_id: str,
    image_url: str,
    storage: BlobStorage,
    session: Session | None = None,
) -> list[str]:
    """Delete one image blob and drop it from the record; return the new list."""

    def _remove(db: Session) -> list[str]:
        record = _load(db, submission_id)
        if image_url not in (record.image_urls or []):
            raise ImageNotFound(submission_id, image_url)
        key = storage.path_from_url(image_url)
        if key:
            storage.delete(key)
        else:
            logger.warning(
                "Image %s is not in bucket %s; only the reference is removed",
                image_url,
                storage.bucket,
                extra={"submission_id": submission_id},
            )
        record.image_urls = [url for url in record.image_urls if url != image_url]
        db.add(record)
        db.commit()
        db.refresh(record)
        return list(record.image_urls)

    return _with_session(_remove, session)


def delete_record(submission_id: str, session: Session | None = None) -> None:
    def _delete(db: Session) -> None:
        record = _load(db, submission_id)
        db.delete(record)
        db.commit()
        logger.info("Deleted submission %s", submission_id, extra={"submission_id": submission_id})

    _with_session(_delete, session)


def _matches(record: Submission, filters: Mapping[str, Iterable[str]]) -> bool:
    for category, wanted in filters.items():
        wanted = set(wanted)
        if wanted and not wanted.intersection(getattr(record, category) or []):
            return False
    return True


def gallery(
    filters: Mapping[str, Iterable[str]] | None = None,
    session: Session | None = None,
) -> list[Submission]:
    """Approved submissions matching every filtered category (any value within one)."""
    filters = {category: list(values) for category, values in (filters or {}).items() if values}
    for category, values in filters.items():
        validate_tags(category, set(values))
    records = list_submissions(SubmissionStatus.APPROVED, session=session)
    return [record for record in records if _matches(record, filters)]


def status_counts(session: Session | None = None) -> dict[str, int]:
    def _count(db: Session) -> dict[str, int]:
        counts = {status.value: 0 for status in SubmissionStatus}
        for status in db.exec(select(Submission.status)).all():
            counts[status] = counts.get(status, 0) + 1
        return counts

    return _with_session(_count, session)


__all__ = [
    "apply_action",
    "create_submission",
    "delete_record",
    "gallery",
    "get_submission",
    "list_submissions",
    "remove_image",
    "status_counts",
    "update_fields",
    "validate_image_urls",
    "validate_tags",
]
