"""Types for tracking session orchestration."""
from __future__ import annotations

import threading
from typing import Callable

from pydantic import BaseModel, Field

from actor_mapping_service.camera_config import CameraConfig
from common.types import CameraPose, TrackingProgress

PoseSource = Callable[[float], CameraPose]
ProgressCallback = Callable[[TrackingProgress], None]


class TrackingRequest(BaseModel):
    """One tracking run over a single event video."""

    event_id: str = Field(..., min_length=1)
    video_url: str = Field(..., min_length=1)
    video_duration_s: float = Field(..., gt=0, allow_inf_nan=False)
    camera: CameraConfig = Field(default_factory=CameraConfig)


class CancellationToken:
    """Cooperative cancellation flag, safe to set from another thread."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()
