"""Public intake and gallery endpoints."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from sqlmodel import Session

from app.api.deps import get_db, get_storage
from app.core.vocabulary import TAG_CATEGORIES
from app.models import SubmissionView
from app.services import submission as submissions
from app.services.errors import ValidationError
from app.services.intake import UploadedFile, UploadTooLarge, intake_submission
from app.services.storage import BlobStorage, StorageError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["submissions"])


async def _read(upload: UploadFile) -> UploadedFile:
    return UploadedFile(
        filename=upload.filename or "file",
        data=await upload.read(),
        content_type=upload.content_type,
    )


@router.post("/submitIA", status_code=201)
async def submit_ia(
    first_name: str = Form("", alias="firstName"),
    last_name: str = Form("", alias="lastName"),
    email: str = Form(""),
    grade_level: str = Form("", alias="gradeLevel"),
    title: str = Form(""),
    description: str = Form(""),
    material: List[str] = Form([]),
    color: List[str] = Form([]),
    function: List[str] = Form([]),
    images: List[UploadFile] = File([]),
    pdf: Optional[UploadFile] = File(None),
    session: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_storage),
) -> Any:
    """Accept a new IA entry; it starts in the pending queue."""
    fields = {
        "first_name": first_name,
        "last_name": last_name,
        "email": email,
        "grade_level": grade_level,
        "title": title,
        "description": description,
        "material": material,
        "color": color,
        "function": function,
    }
    image_files = [await _read(upload) for upload in images]
    pdf_file = await _read(pdf) if pdf is not None and pdf.filename else None
    try:
        record = intake_submission(fields, image_files, pdf=pdf_file, storage=storage, session=session)
    except UploadTooLarge as exc:
        raise HTTPException(status_code=413, detail=exc.reason) from exc
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.reason) from exc
    except StorageError as exc:
        logger.error("Failed to store submission files", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to store files: {exc}") from exc
    return {
        "success": True,
        "submission": SubmissionView.model_validate(record).model_dump(by_alias=True, mode="json"),
    }


@router.get("/gallery")
def list_gallery(
    material: List[str] = Query(default=[]),
    color: List[str] = Query(default=[]),
    function: List[str] = Query(default=[]),
    session: Session = Depends(get_db),
) -> Any:
    """Approved submissions, newest first, filtered by tags."""
    try:
        records = submissions.gallery(
            {"material": material, "color": color, "function": function}, session=session
        )
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.reason) from exc
    return {
        "submissions": [
            SubmissionView.model_validate(record).model_dump(by_alias=True, mode="json", exclude={"email"})
            for record in records
        ]
    }


@router.get("/vocabulary")
def vocabulary() -> dict[str, list[str]]:
    return {category: list(values) for category, values in TAG_CATEGORIES.items()}


__all__ = ["router"]
