import logging
from typing import Any, Mapping

import httpx

from app.core.config import settings
from app.models import EDITABLE_FIELDS, SubmissionView
from app.services.errors import RemoteError

logger = logging.getLogger(__name__)


class ModerationApiClient:
    """Thin wrapper around the moderation HTTP routes."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout or settings.api_timeout
        self._client = client or httpx.Client(base_url=self.base_url, timeout=self.timeout)

    def close(self) -> None:
        self._client.close()

    def _post(self, path: str, body: dict[str, Any], fallback: str) -> dict[str, Any]:
        try:
            logger.debug("Moderation request: POST %s id=%s", path, body.get("id"))
            response = self._client.post(path, json=body)
        except httpx.RequestError as exc:
            logger.error("Moderation API connection error: %s", exc)
            raise RemoteError(f"Failed to reach moderation API: {exc}") from exc

        if response.is_success:
            try:
                return response.json()
            except ValueError:
                return {}

        try:
            data = response.json()
        except ValueError:
            logger.error("Moderation API error (raw): %s", response.text)
            raise RemoteError(
                f"Server returned non-JSON response ({response.status_code}: {response.reason_phrase})",
                status_code=response.status_code,
            )
        message = data.get("error") if isinstance(data, dict) else None
        logger.error("Moderation API error: %s", message or fallback)
        raise RemoteError(message or fallback, status_code=response.status_code)

    def approve(self, submission_id: str, password: str) -> SubmissionView | None:
        data = self._post(
            "/approveIA",
            {"id": submission_id, "password": password},
            "Failed to approve submission",
        )
        return _submission(data)

    def reject(self, submission_id: str, password: str) -> SubmissionView | None:
        data = self._post(
            "/rejectIA",
            {"id": submission_id, "password": password},
            "Failed to reject submission",
        )
        return _submission(data)

    def update_submission(
        self, submission_id: str, fields: Mapping[str, Any], password: str
    ) -> SubmissionView | None:
        body: dict[str, Any] = {"id": submission_id, "password": password}
        for name in EDITABLE_FIELDS:
            if name in fields:
                body[_camel(name)] = fields[name]
        data = self._post("/updateSubmission", body, "Unknown error")
        return _submission(data)

    def delete_submission_image(self, submission_id: str, image_url: str, password: str) -> list[str]:
        data = self._post(
            "/deleteSubmissionImage",
            {"id": submission_id, "imageUrl": image_url, "password": password},
            "Unknown error",
        )
        return list(data.get("imageUrls") or [])


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _submission(data: dict[str, Any]) -> SubmissionView | None:
    payload = data.get("submission")
    return SubmissionView.model_validate(payload) if payload else None


__all__ = ["ModerationApiClient"]
