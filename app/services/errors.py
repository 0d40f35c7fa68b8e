"""Error taxonomy shared by the API, the store adapters and the dashboard."""

from __future__ import annotations


class ModerationError(Exception):
    """Base class; ``reason`` is the operator-facing message."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class ValidationError(ModerationError):
    """Rejected locally before any remote call is issued."""


class InvalidTransition(ValidationError):
    def __init__(self, status: str, action: str) -> None:
        super().__init__(f"Cannot {action} a submission that is {status}")
        self.status = status
        self.action = action


class SubmissionNotFound(ModerationError, LookupError):
    def __init__(self, submission_id: str) -> None:
        super().__init__(f"Submission not found: {submission_id}")
        self.submission_id = submission_id


class ImageNotFound(ModerationError, LookupError):
    def __init__(self, submission_id: str, image_url: str) -> None:
        super().__init__(f"Image not found on submission {submission_id}")
        self.submission_id = submission_id
        self.image_url = image_url


class StoreError(ModerationError):
    """A persistence or blob-store call reported failure."""


class RemoteError(StoreError):
    """The moderation API answered with a non-success response."""

    def __init__(self, reason: str, status_code: int | None = None) -> None:
        super().__init__(reason)
        self.status_code = status_code


__all__ = [
    "ImageNotFound",
    "InvalidTransition",
    "ModerationError",
    "RemoteError",
    "StoreError",
    "SubmissionNotFound",
    "ValidationError",
]
