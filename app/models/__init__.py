"""Database models."""

from .submission import EDITABLE_FIELDS, Submission, SubmissionStatus, SubmissionView

__all__ = [
    "EDITABLE_FIELDS",
    "Submission",
    "SubmissionStatus",
    "SubmissionView",
]
