"""Submission moderation state machine."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from app.models import SubmissionStatus
from app.services.errors import InvalidTransition


class ModerationAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    MOVE_TO_PENDING = "move-to-pending"
    PERMANENT_DELETE = "permanent-delete"


# (from, action) -> to; None is the terminal "deleted" pseudo-state
TRANSITIONS: dict[tuple[SubmissionStatus, ModerationAction], Optional[SubmissionStatus]] = {
    (SubmissionStatus.PENDING, ModerationAction.APPROVE): SubmissionStatus.APPROVED,
    (SubmissionStatus.PENDING, ModerationAction.REJECT): SubmissionStatus.REJECTED,
    (SubmissionStatus.APPROVED, ModerationAction.MOVE_TO_PENDING): SubmissionStatus.PENDING,
    (SubmissionStatus.REJECTED, ModerationAction.MOVE_TO_PENDING): SubmissionStatus.PENDING,
    (SubmissionStatus.REJECTED, ModerationAction.PERMANENT_DELETE): None,
}

CONFIRM_PROMPTS: dict[ModerationAction, str] = {
    ModerationAction.APPROVE: "Are you sure you want to approve this submission?",
    ModerationAction.REJECT: "Are you sure you want to reject this submission? This will mark it as rejected.",
    ModerationAction.MOVE_TO_PENDING: "Are you sure you want to move this submission back to pending review?",
    ModerationAction.PERMANENT_DELETE: (
        "Are you sure you want to permanently delete this submission? This cannot be undone."
    ),
}


def next_status(current: SubmissionStatus | str, action: ModerationAction | str) -> Optional[SubmissionStatus]:
    """Return the status reached by ``action``; raise if the move is not allowed."""
    status = SubmissionStatus(current)
    action = ModerationAction(action)
    key = (status, action)
    if key not in TRANSITIONS:
        raise InvalidTransition(status.value, action.value)
    return TRANSITIONS[key]


def allowed_actions(current: SubmissionStatus | str) -> list[ModerationAction]:
    status = SubmissionStatus(current)
    return [action for (source, action) in TRANSITIONS if source == status]


def source_statuses(action: ModerationAction | str) -> list[SubmissionStatus]:
    action = ModerationAction(action)
    return [source for (source, candidate) in TRANSITIONS if candidate == action]


__all__ = [
    "CONFIRM_PROMPTS",
    "ModerationAction",
    "TRANSITIONS",
    "allowed_actions",
    "next_status",
    "source_statuses",
]
