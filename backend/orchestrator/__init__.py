"""Tracking session orchestration package."""

from .exceptions import (
    FrameDetectionError,
    MissingCredentialsError,
    TrackingAbortedError,
    TrackingCancelledError,
    TrackingError,
)
from .orchestrator import TrackingOrchestrator
from .types import CancellationToken, TrackingRequest

__all__ = [
    "CancellationToken",
    "FrameDetectionError",
    "MissingCredentialsError",
    "TrackingAbortedError",
    "TrackingCancelledError",
    "TrackingError",
    "TrackingOrchestrator",
    "TrackingRequest",
]
