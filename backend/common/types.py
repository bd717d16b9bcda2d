"""
Pydantic models shared by projection, tracking and the orchestrator.

Wire names used by the vision service (camelCase) are accepted as aliases;
everything is serialized with the Python field names, which is also the
cache payload format.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ActorType = Literal[
    "car",
    "truck",
    "suv",
    "van",
    "bus",
    "motorcycle",
    "bicycle",
    "pedestrian",
    "animal",
    "scooter",
    "other_vehicle",
    "other",
]
Confidence = Literal["high", "medium", "low"]
TrackingStatus = Literal["detecting", "matching", "done", "error"]


class GeoPoint(BaseModel):
    lat: float
    lon: float


class BoundingBox(BaseModel):
    """Pixel-space box as reported by the vision model."""
    x_min: float
    y_min: float
    x_max: float
    y_max: float

    @property
    def center_x(self) -> float:
        return (self.x_min + self.x_max) / 2


class CameraIntrinsics(BaseModel):
    """Lens calibration. Focal length is normalized to the image width."""
    focal: float
    k1: float = 0.0
    k2: float = 0.0


class CameraPose(BaseModel):
    lat: float
    lon: float
    bearing: float  # degrees, 0 = north, clockwise


class RawDetection(BaseModel):
    """One actor seen in one frame, before projection."""

    type: ActorType
    label: str = ""
    confidence: Confidence
    bbox: BoundingBox
    estimated_distance_m: float = Field(..., alias="estimatedDistanceMeters")
    moving: bool | None = None
    description: str = ""

    model_config = ConfigDict(populate_by_name=True)


class WorldDetection(RawDetection):
    """A raw detection placed on the map. Distance is the clamped value."""

    world_position: GeoPoint = Field(..., alias="worldPosition")
    bearing_from_camera: float = Field(..., alias="bearingFromCamera")


class FrameResult(BaseModel):
    """All detections at one keyframe."""

    timestamp: float
    camera_position: GeoPoint
    camera_bearing: float
    fov_deg: float
    actors: list[WorldDetection] = Field(default_factory=list)
    detected_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class Observation(BaseModel):
    timestamp: float
    world_position: GeoPoint
    bbox: BoundingBox
    confidence: Confidence
    description: str = ""


class Track(BaseModel):
    """One actor's identity across keyframes."""

    track_id: str
    type: ActorType
    label: str
    color: str
    observations: list[Observation]
    first_seen: float
    last_seen: float


class TrackingSession(BaseModel):
    event_id: str
    keyframe_timestamps: list[float]
    frame_results: list[FrameResult]
    tracks: list[Track]


class TrackingProgress(BaseModel):
    current_frame: int
    total_frames: int
    status: TrackingStatus
    message: str


class DetectionRequest(BaseModel):
    """What the orchestrator asks the vision service for one keyframe."""

    event_id: str
    video_url: str
    timestamp: float
    camera: CameraPose
    fov_deg: float
    intrinsics: CameraIntrinsics | None = None


class DetectionResponse(BaseModel):
    actors: list[RawDetection] = Field(default_factory=list)
    frame_width: float | None = Field(None, alias="frameWidth")
    frame_height: float | None = Field(None, alias="frameHeight")

    model_config = ConfigDict(populate_by_name=True)
