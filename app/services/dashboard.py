"""Moderation dashboard controller.

One ``ModerationDashboard`` owns the three status-partitioned collections and
the optional edit session. Every mutation goes through its methods; remote
calls happen first and local collections are reconciled only on success.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from app.core.config import settings
from app.core.vocabulary import TAG_CATEGORIES, is_known_tag
from app.models import SubmissionStatus, SubmissionView
from app.services.errors import StoreError, ValidationError
from app.services.moderation import CONFIRM_PROMPTS, ModerationAction, next_status, source_statuses
from app.services.moderation_client import ModerationApiClient
from app.services.notifications import NOTIFICATIONS, NotificationLog
from app.services.store import SubmissionStore

logger = logging.getLogger(__name__)

# Statuses whose records can be edited or have their images reordered
EDITABLE_STATUSES = (SubmissionStatus.APPROVED, SubmissionStatus.PENDING)
TEXT_FIELDS = ("title", "description")


@dataclass
class OperationResult:
    action: str
    outcome: str  # ok|cancelled|invalid|failed
    message: str
    submission_id: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome == "ok"


@dataclass
class EditSession:
    submission_id: str
    status: SubmissionStatus
    draft: dict[str, Any] = field(default_factory=dict)


class ModerationDashboard:
    """Controller for the admin moderation views."""

    def __init__(
        self,
        api: ModerationApiClient,
        store: SubmissionStore,
        credential: str,
        confirm: Callable[[str], bool],
        notifications: NotificationLog | None = None,
    ) -> None:
        self.api = api
        self.store = store
        self.credential = credential
        self.confirm = confirm
        self.notifications = notifications or NOTIFICATIONS
        self.collections: dict[SubmissionStatus, list[SubmissionView]] = {
            status: [] for status in SubmissionStatus
        }
        self.session: Optional[EditSession] = None
        self._stale: set[SubmissionStatus] = set(SubmissionStatus)

    # --- Collections ---

    def collection(self, status: SubmissionStatus | str) -> list[SubmissionView]:
        return self.collections[SubmissionStatus(status)]

    def refresh(self, status: SubmissionStatus | str | None = None) -> OperationResult:
        """Refetch one collection (or all three) from the store."""
        statuses = [SubmissionStatus(status)] if status is not None else list(SubmissionStatus)
        try:
            loaded = {item: self.store.list_by_status(item) for item in statuses}
        except StoreError as exc:
            # Nothing is replaced unless every fetch succeeded
            return self._report("refresh", "failed", f"Error fetching IAs: {exc.reason}")
        self.collections.update(loaded)
        self._stale.difference_update(loaded)
        return self._report("refresh", "ok", "Submissions loaded", level="debug")

    def select_tab(self, status: SubmissionStatus | str) -> list[SubmissionView]:
        """Return a collection, refetching stale ones first."""
        status = SubmissionStatus(status)
        if self._stale:
            for item in list(self._stale):
                self.refresh(item)
        return self.collections[status]

    def is_stale(self, status: SubmissionStatus | str) -> bool:
        return SubmissionStatus(status) in self._stale

    def overview(self, limit: int | None = None) -> dict[str, Any]:
        limit = limit or settings.overview_limit
        pending = self.collections[SubmissionStatus.PENDING]
        approved = self.collections[SubmissionStatus.APPROVED]
        rejected = self.collections[SubmissionStatus.REJECTED]
        return {
            "counts": {status.value: len(items) for status, items in self.collections.items()},
            "recent": [*pending, *approved, *rejected][:limit],
            "pending": pending[:limit],
            "approved": approved[:limit],
            "rejected": rejected[:limit],
        }

    def _find(self, submission_id: str, statuses) -> tuple[SubmissionStatus, SubmissionView]:
        for status in statuses:
            for item in self.collections[status]:
                if item.id == submission_id:
                    return status, item
        raise ValidationError(f"Submission {submission_id} is not loaded")

    def _remove_from(self, status: SubmissionStatus, submission_id: str) -> None:
        self.collections[status] = [item for item in self.collections[status] if item.id != submission_id]

    def _replace_fields(self, status: SubmissionStatus, submission_id: str, fields: dict[str, Any]) -> None:
        self.collections[status] = [
            item.model_copy(update=_copy_fields(fields)) if item.id == submission_id else item
            for item in self.collections[status]
        ]

    # --- Status transitions ---

    def approve(self, submission_id: str | None) -> OperationResult:
        return self._transition(ModerationAction.APPROVE, submission_id)

    def reject(self, submission_id: str | None) -> OperationResult:
        return self._transition(ModerationAction.REJECT, submission_id)

    def move_to_pending(self, submission_id: str | None) -> OperationResult:
        return self._transition(ModerationAction.MOVE_TO_PENDING, submission_id)

    def permanent_delete(self, submission_id: str | None) -> OperationResult:
        return self._transition(ModerationAction.PERMANENT_DELETE, submission_id)

    def _transition(self, action: ModerationAction, submission_id: str | None) -> OperationResult:
        try:
            if not submission_id:
                raise ValidationError("Error: Missing submission ID")
            source, _ = self._find(submission_id, source_statuses(action))
            target = next_status(source, action)
        except ValidationError as exc:
            return self._report(action.value, "invalid", exc.reason, submission_id)

        if not self.confirm(CONFIRM_PROMPTS[action]):
            return self._report(action.value, "cancelled", "Cancelled", submission_id, level="debug")

        try:
            self._perform(action, submission_id)
        except StoreError as exc:
            return self._report(action.value, "failed", f"Error: {exc.reason}", submission_id)

        self._remove_from(source, submission_id)
        if target is not None:
            self._stale.add(target)
        if self.session and self.session.submission_id == submission_id:
            self.session = None
        return self._report(action.value, "ok", _SUCCESS_MESSAGES[action], submission_id)

    def _perform(self, action: ModerationAction, submission_id: str) -> None:
        if action == ModerationAction.APPROVE:
            self.api.approve(submission_id, self.credential)
        elif action == ModerationAction.REJECT:
            self.api.reject(submission_id, self.credential)
        elif action == ModerationAction.MOVE_TO_PENDING:
            self.store.update_fields(submission_id, {"status": SubmissionStatus.PENDING.value})
        else:
            self._purge(submission_id)

    def _purge(self, submission_id: str) -> None:
        record = self.store.get(submission_id)
        files = [url for url in [record.pdf_url, *record.image_urls] if url]
        for url in files:
            try:
                self.store.delete_blob(url)
            except StoreError as exc:
                # Row deletion still proceeds
                logger.warning(
                    "Error deleting file %s: %s",
                    url,
                    exc.reason,
                    extra={"submission_id": submission_id, "blob_path": url},
                )
        self.store.delete_record(submission_id)

    # --- Edit session ---

    def open_edit(self, submission_id: str | None) -> OperationResult:
        try:
            if not submission_id:
                raise ValidationError("Error: Missing submission ID")
            status, record = self._find(submission_id, list(SubmissionStatus))
            if status not in EDITABLE_STATUSES:
                raise ValidationError(f"Cannot edit a {status.value} submission")
        except ValidationError as exc:
            return self._report("edit", "invalid", exc.reason, submission_id)
        # Any previous draft is abandoned
        self.session = EditSession(submission_id=submission_id, status=status, draft=record.editable_fields())
        return self._report("edit", "ok", "Editing submission", submission_id, level="debug")

    def cancel(self) -> OperationResult:
        session, self.session = self.session, None
        return self._report(
            "cancel", "ok", "Edit cancelled", session.submission_id if session else None, level="debug"
        )

    def _require_session(self) -> EditSession:
        if self.session is None:
            raise ValidationError("No submission is being edited")
        return self.session

    def edit_field(self, name: str, value: str) -> OperationResult:
        try:
            session = self._require_session()
            if name not in TEXT_FIELDS:
                raise ValidationError(f"Field is not editable: {name}")
        except ValidationError as exc:
            return self._report("edit-field", "invalid", exc.reason)
        session.draft[name] = value
        return OperationResult("edit-field", "ok", f"{name} updated", session.submission_id)

    def toggle_tag(self, category: str, value: str) -> OperationResult:
        try:
            session = self._require_session()
            if category not in TAG_CATEGORIES or not is_known_tag(category, value):
                raise ValidationError(f"Unknown {category} tag: {value}")
        except ValidationError as exc:
            return self._report("toggle-tag", "invalid", exc.reason)
        tags = list(session.draft.get(category) or [])
        if value in tags:
            tags = [tag for tag in tags if tag != value]
        else:
            tags.append(value)
        session.draft[category] = tags
        return OperationResult("toggle-tag", "ok", f"{category} tags: {', '.join(tags)}", session.submission_id)

    def move_image(self, submission_id: str, image_url: str, direction: str) -> OperationResult:
        """Swap an image with its neighbour; applied to the displayed list at once."""
        try:
            if direction not in ("up", "down"):
                raise ValidationError(f"Unknown direction: {direction}")
            status, record = self._find(submission_id, EDITABLE_STATUSES)
        except ValidationError as exc:
            return self._report("move-image", "invalid", exc.reason, submission_id)

        images = list(record.image_urls)
        if image_url not in images:
            return OperationResult("move-image", "ok", "Image not found; order unchanged", submission_id)
        index = images.index(image_url)
        other = index - 1 if direction == "up" else index + 1
        if other < 0 or other >= len(images):
            return OperationResult("move-image", "ok", "Order unchanged", submission_id)
        images[index], images[other] = images[other], images[index]

        self._replace_fields(status, submission_id, {"image_urls": images})
        if self.session and self.session.submission_id == submission_id:
            self.session.draft["image_urls"] = list(images)
        return OperationResult("move-image", "ok", "Image moved", submission_id)

    def delete_image(self, image_url: str) -> OperationResult:
        try:
            session = self._require_session()
            if image_url not in (session.draft.get("image_urls") or []):
                raise ValidationError("Image is not part of this submission")
        except ValidationError as exc:
            return self._report("delete-image", "invalid", exc.reason)

        try:
            self.api.delete_submission_image(session.submission_id, image_url, self.credential)
        except StoreError as exc:
            return self._report("delete-image", "failed", f"Error deleting image: {exc.reason}", session.submission_id)

        remaining = [url for url in session.draft["image_urls"] if url != image_url]
        session.draft["image_urls"] = remaining
        try:
            _, record = self._find(session.submission_id, [session.status])
        except ValidationError:
            pass
        else:
            self._replace_fields(
                session.status,
                session.submission_id,
                {"image_urls": [url for url in record.image_urls if url != image_url]},
            )
        return self._report("delete-image", "ok", "Image deleted successfully!", session.submission_id)

    def save(self) -> OperationResult:
        try:
            session = self._require_session()
        except ValidationError as exc:
            return self._report("save", "invalid", exc.reason)

        try:
            self.api.update_submission(session.submission_id, session.draft, self.credential)
        except StoreError as exc:
            # Draft stays open for a retry
            return self._report("save", "failed", f"Error updating submission: {exc.reason}", session.submission_id)

        self._replace_fields(session.status, session.submission_id, session.draft)
        self.session = None
        return self._report("save", "ok", "Submission updated successfully!", session.submission_id)

    # --- Reporting ---

    def _report(
        self,
        action: str,
        outcome: str,
        message: str,
        submission_id: str | None = None,
        level: str | None = None,
    ) -> OperationResult:
        result = OperationResult(action=action, outcome=outcome, message=message, submission_id=submission_id)
        level = level or {"ok": "info", "cancelled": "info", "invalid": "warn", "failed": "error"}[outcome]
        log_level = {"debug": logging.DEBUG, "info": logging.INFO, "warn": logging.WARNING, "error": logging.ERROR}[level]
        logger.log(
            log_level,
            "%s %s: %s",
            action,
            outcome,
            message,
            extra={"submission_id": submission_id, "action": action},
        )
        if level != "debug":
            self.notifications.add(level, message, {"action": action, "id": submission_id, "outcome": outcome})
        return result


_SUCCESS_MESSAGES = {
    ModerationAction.APPROVE: "IA approved successfully!",
    ModerationAction.REJECT: "IA rejected successfully!",
    ModerationAction.MOVE_TO_PENDING: "Submission moved to pending successfully!",
    ModerationAction.PERMANENT_DELETE: "Submission permanently deleted!",
}


def _copy_fields(fields: dict[str, Any]) -> dict[str, Any]:
    return {name: list(value) if isinstance(value, list) else value for name, value in fields.items()}


__all__ = ["EditSession", "ModerationDashboard", "OperationResult"]
