"""Public submission intake: file checks, blob upload and record creation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Any, Mapping, Sequence

from PIL import Image, UnidentifiedImageError
from sqlmodel import Session

from app.core.config import settings
from app.core.vocabulary import TAG_CATEGORIES
from app.models import Submission
from app.services import submission as submissions
from app.services.errors import ValidationError
from app.services.storage import BlobStorage, StorageError, sanitize_filename

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("first_name", "last_name", "email", "grade_level", "title")


class UploadTooLarge(ValidationError):
    """A file exceeds ``settings.max_upload_bytes``."""


@dataclass
class UploadedFile:
    filename: str
    data: bytes
    content_type: str | None = None


def _check_size(upload: UploadedFile) -> None:
    if len(upload.data) > settings.max_upload_bytes:
        raise UploadTooLarge(f"File too large: {upload.filename}")
    if not upload.data:
        raise ValidationError(f"Empty file: {upload.filename}")


def verify_image(upload: UploadedFile) -> str:
    """Return the detected image format; raise if the bytes are not an allowed image."""
    _check_size(upload)
    try:
        with Image.open(BytesIO(upload.data)) as image:
            image.verify()
            image_format = image.format or ""
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        raise ValidationError(f"Invalid image file: {upload.filename}") from exc
    if image_format.upper() not in settings.allowed_image_formats:
        raise ValidationError(f"Unsupported image format {image_format}: {upload.filename}")
    return image_format


def verify_pdf(upload: UploadedFile) -> None:
    _check_size(upload)
    if not upload.data.startswith(b"%PDF"):
        raise ValidationError(f"Invalid PDF file: {upload.filename}")


def _validate_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    cleaned = {name: (value.strip() if isinstance(value, str) else value) for name, value in fields.items()}
    missing = [name for name in REQUIRED_FIELDS if not cleaned.get(name)]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")
    if "@" not in cleaned["email"]:
        raise ValidationError("Invalid email address")
    for category in TAG_CATEGORIES:
        cleaned[category] = submissions.validate_tags(category, cleaned.get(category) or [])
    return cleaned


def intake_submission(
    fields: Mapping[str, Any],
    images: Sequence[UploadedFile],
    pdf: UploadedFile | None = None,
    storage: BlobStorage | None = None,
    session: Session | None = None,
) -> Submission:
    """Validate an entry, upload its files and store it as pending."""
    storage = storage or BlobStorage()
    cleaned = _validate_fields(fields)
    if not images:
        raise ValidationError("At least one image is required")
    if len(images) > settings.max_images_per_submission:
        raise ValidationError(f"At most {settings.max_images_per_submission} images are allowed")
    for image in images:
        verify_image(image)
    if pdf is not None:
        verify_pdf(pdf)

    record = Submission(
        title=cleaned["title"],
        description=cleaned.get("description") or "",
        material=cleaned["material"],
        color=cleaned["color"],
        function=cleaned["function"],
        first_name=cleaned["first_name"],
        last_name=cleaned["last_name"],
        email=cleaned["email"],
        grade_level=cleaned["grade_level"],
    )
    stored: list[str] = []
    try:
        for index, image in enumerate(images):
            key = f"{record.id}/images/{index:02d}_{sanitize_filename(image.filename)}"
            record.image_urls = [*record.image_urls, storage.put(key, image.data)]
            stored.append(key)
        if pdf is not None:
            key = f"{record.id}/{sanitize_filename(pdf.filename)}"
            record.pdf_url = storage.put(key, pdf.data)
            stored.append(key)
        return submissions.create_submission(record, session=session)
    except Exception:
        for key in stored:
            try:
                storage.delete(key)
            except StorageError:
                logger.warning("Failed to clean up %s after intake error", key, extra={"blob_path": key})
        raise


__all__ = ["UploadTooLarge", "UploadedFile", "intake_submission", "verify_image", "verify_pdf"]
