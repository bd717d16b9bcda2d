"""Client side of the actor detection (vision model) service."""

from .client import HttpVisionClient, VisionClient, VisionRequestError

__all__ = [
    "HttpVisionClient",
    "VisionClient",
    "VisionRequestError",
]
