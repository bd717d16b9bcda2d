"""
HTTP client for the actor detection service.

The service extracts the frame, runs the vision model and answers with raw
detections in pixel space plus the frame size. Projection to world
coordinates happens on our side.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

import aiohttp

from common.config import (
    VISION_API_KEY,
    VISION_API_URL,
    VISION_MAX_RETRIES,
    VISION_REQUEST_TIMEOUT_SEC,
    VISION_RETRY_BACKOFF_SEC,
)
from common.types import DetectionRequest, DetectionResponse

logger = logging.getLogger(__name__)


class VisionRequestError(Exception):
    """Raised when the detection service answers with a non-success status."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class VisionClient(Protocol):
    @property
    def configured(self) -> bool: ...

    async def detect(self, request: DetectionRequest) -> DetectionResponse: ...


def build_payload(request: DetectionRequest, api_key: str) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "eventId": request.event_id,
        "videoUrl": request.video_url,
        "timestamp": request.timestamp,
        "cameraLat": request.camera.lat,
        "cameraLon": request.camera.lon,
        "cameraBearing": request.camera.bearing,
        "fovDegrees": request.fov_deg,
        "apiKey": api_key,
    }
    if request.intrinsics is not None:
        payload["cameraIntrinsics"] = request.intrinsics.model_dump()
    return payload


def _error_message(data: Any, timestamp: float, status: int) -> str:
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return f"Detection failed at {timestamp}s: {status}"


class HttpVisionClient:
    def __init__(
        self,
        base_url: str = VISION_API_URL,
        api_key: str = VISION_API_KEY,
        timeout_seconds: float = VISION_REQUEST_TIMEOUT_SEC,
        max_retries: int = VISION_MAX_RETRIES,
        backoff_seconds: float = VISION_RETRY_BACKOFF_SEC,
    ):
        self.base_url = base_url
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.max_retries = max(0, max_retries)
        self.backoff_seconds = backoff_seconds

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def _post_once(self, session: aiohttp.ClientSession, payload: dict) -> tuple[int, Any]:
        async with session.post(
            self.base_url,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            json=payload,
        ) as response:
            try:
                data = await response.json(content_type=None)
            except ValueError:
                data = None
            return response.status, data

    async def detect(self, request: DetectionRequest) -> DetectionResponse:
        """Request detections for one frame.

        Transport errors and 5xx answers are retried with exponential backoff;
        4xx answers fail straight away.
        """
        if not self.configured:
            raise VisionRequestError("Vision API key is missing", status=401)

        payload = build_payload(request, self.api_key)
        timeout_cfg = aiohttp.ClientTimeout(total=self.timeout_seconds)
        last_error: Exception | None = None

        async with aiohttp.ClientSession(timeout=timeout_cfg) as session:
            for attempt in range(self.max_retries + 1):
                try:
                    status, data = await self._post_once(session, payload)
                except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
                    last_error = exc
                else:
                    if status < 400:
                        return DetectionResponse.model_validate(data or {})
                    last_error = VisionRequestError(
                        _error_message(data, request.timestamp, status), status=status
                    )
                    if status < 500:
                        raise last_error

                if attempt == self.max_retries:
                    break
                delay = self.backoff_seconds * (2 ** attempt)
                logger.warning(
                    "Detection request for %s@%.1fs failed (%s), retrying in %.1fs",
                    request.event_id,
                    request.timestamp,
                    last_error,
                    delay,
                )
                await asyncio.sleep(delay)

        raise last_error
