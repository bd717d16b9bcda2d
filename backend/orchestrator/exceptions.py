"""Custom exceptions for tracking sessions."""


class TrackingError(Exception):
    """Base tracking exception."""


class MissingCredentialsError(TrackingError):
    """Raised when no vision service credential is configured."""


class TrackingAbortedError(TrackingError):
    """A run that stopped before every keyframe was processed."""

    def __init__(self, message: str, frames_completed: int, total_frames: int):
        super().__init__(message)
        self.frames_completed = frames_completed
        self.total_frames = total_frames


class FrameDetectionError(TrackingAbortedError):
    """Raised when the detection request for one keyframe fails."""

    def __init__(self, message: str, timestamp: float, frames_completed: int, total_frames: int):
        super().__init__(message, frames_completed, total_frames)
        self.timestamp = timestamp


class TrackingCancelledError(TrackingAbortedError):
    """Raised when a run is cancelled between keyframes."""
