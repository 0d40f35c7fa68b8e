"""Administrator moderation endpoints."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from sqlmodel import Session

from app.api.deps import get_db, get_storage, require_admin
from app.models import SubmissionView
from app.services import submission as submissions
from app.services.errors import InvalidTransition, ModerationError, ValidationError
from app.services.moderation import ModerationAction
from app.services.storage import BlobStorage, StorageError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["moderation"])


class AdminPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    password: str = ""


class UpdateSubmissionPayload(AdminPayload):
    title: str = Field(default="", max_length=255)
    description: str = ""
    material: list[str] = Field(default_factory=list)
    color: list[str] = Field(default_factory=list)
    function: list[str] = Field(default_factory=list)
    image_urls: list[str] = Field(default_factory=list, alias="imageUrls")

    @field_validator("material", "color", "function")
    @classmethod
    def _known_tags(cls, value: list[str], info: ValidationInfo) -> list[str]:
        try:
            return submissions.validate_tags(info.field_name, value)
        except ValidationError as exc:
            raise ValueError(exc.reason) from exc

    @field_validator("image_urls")
    @classmethod
    def _unique_images(cls, value: list[str]) -> list[str]:
        try:
            return submissions.validate_image_urls(value)
        except ValidationError as exc:
            raise ValueError(exc.reason) from exc


class DeleteImagePayload(AdminPayload):
    image_url: str = Field(default="", alias="imageUrl")


def _to_http(exc: ModerationError) -> HTTPException:
    if isinstance(exc, InvalidTransition):
        return HTTPException(status_code=409, detail=exc.reason)
    if isinstance(exc, LookupError):
        return HTTPException(status_code=404, detail=exc.reason)
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=422, detail=exc.reason)
    return HTTPException(status_code=500, detail=exc.reason)


def _view(record: Any) -> dict[str, Any]:
    return SubmissionView.model_validate(record).model_dump(by_alias=True, mode="json")


def _transition(payload: AdminPayload, action: ModerationAction, session: Session) -> dict[str, Any]:
    require_admin(payload.password)
    if not payload.id:
        raise HTTPException(status_code=400, detail="Missing submission ID")
    try:
        record = submissions.apply_action(payload.id, action, session=session)
    except ModerationError as exc:
        raise _to_http(exc) from exc
    return {"success": True, "submission": _view(record)}


@router.post("/approveIA")
def approve_ia(payload: AdminPayload, session: Session = Depends(get_db)) -> Any:
    """Move a pending submission to approved."""
    return _transition(payload, ModerationAction.APPROVE, session)


@router.post("/rejectIA")
def reject_ia(payload: AdminPayload, session: Session = Depends(get_db)) -> Any:
    """Move a pending submission to rejected."""
    return _transition(payload, ModerationAction.REJECT, session)


@router.post("/updateSubmission")
def update_submission(payload: UpdateSubmissionPayload, session: Session = Depends(get_db)) -> Any:
    require_admin(payload.password)
    if not payload.id:
        raise HTTPException(status_code=400, detail="Missing submission ID")
    # Only fields present in the body are written
    fields = payload.model_dump(
        include={"title", "description", "material", "color", "function", "image_urls"},
        exclude_unset=True,
    )
    try:
        record = submissions.update_fields(payload.id, fields, session=session)
    except ModerationError as exc:
        raise _to_http(exc) from exc
    return {"success": True, "submission": _view(record)}


@router.post("/deleteSubmissionImage")
def delete_submission_image(
    payload: DeleteImagePayload,
    session: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_storage),
) -> Any:
    require_admin(payload.password)
    if not payload.id or not payload.image_url:
        raise HTTPException(status_code=400, detail="Missing submission ID or image URL")
    try:
        image_urls = submissions.remove_image(payload.id, payload.image_url, storage, session=session)
    except ModerationError as exc:
        raise _to_http(exc) from exc
    except StorageError as exc:
        logger.error("Failed to delete image blob", exc_info=True, extra={"submission_id": payload.id})
        raise HTTPException(status_code=500, detail=f"Failed to delete image: {exc}") from exc
    return {"success": True, "imageUrls": image_urls}


__all__ = ["router"]
