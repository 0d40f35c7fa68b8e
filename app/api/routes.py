"""Root API routers."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.api.deps import get_db
from app.core.logging_config import get_log_buffer
from app.services import submission as submissions

logger = logging.getLogger(__name__)

health_router = APIRouter(tags=["system"])


@health_router.get("/health", summary="Service health probe")
def healthcheck(session: Session = Depends(get_db)) -> dict:
    """Return a heartbeat plus per-status submission counts."""

    try:
        counts = submissions.status_counts(session=session)
    except SQLAlchemyError:
        logger.error("Health check could not reach the database", exc_info=True)
        return {"status": "degraded", "database": "unavailable"}
    return {"status": "ok", "database": "ok", "submissions": counts}


@health_router.get("/logs")
def list_logs(
    limit: int = Query(100, ge=1, le=500),
    submission_id: str | None = Query(None, alias="submissionId"),
) -> dict[str, list[dict[str, str]]]:
    return {"logs": get_log_buffer(limit=limit, submission_id=submission_id)}
