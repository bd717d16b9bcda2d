"""Camera pose along a recorded GNSS track."""
from __future__ import annotations

from typing import Sequence

from pydantic import BaseModel

from common.types import CameraPose, GeoPoint

from .geo_utils import bearing_deg, lerp_fraction

HEADING_LOOKAHEAD_POINTS = 3


class GnssPoint(BaseModel):
    lat: float
    lon: float
    timestamp: float  # milliseconds


class GnssPoseSource:
    """Map video time to an interpolated camera pose.

    Video time is spread linearly over the GNSS time span. Position is
    interpolated between the bracketing samples; heading looks a few samples
    ahead so it does not jitter with GPS noise.
    """

    def __init__(
        self,
        points: Sequence[GnssPoint],
        video_duration_s: float,
        fallback: GeoPoint | None = None,
    ):
        self.points = list(points)
        self.video_duration_s = video_duration_s
        self.fallback = fallback

    def _fallback_pose(self) -> CameraPose:
        if self.fallback is not None:
            return CameraPose(lat=self.fallback.lat, lon=self.fallback.lon, bearing=0.0)
        if self.points:
            return CameraPose(lat=self.points[0].lat, lon=self.points[0].lon, bearing=0.0)
        return CameraPose(lat=0.0, lon=0.0, bearing=0.0)

    def _lower_index(self, gnss_time: float) -> int:
        lower = 0
        for i in range(len(self.points) - 1):
            lower = i
            if self.points[i + 1].timestamp >= gnss_time:
                break
        return lower

    def _heading(self, lower: int) -> float:
        pts = self.points
        end = min(lower + HEADING_LOOKAHEAD_POINTS, len(pts) - 1)
        if end > lower:
            return bearing_deg(pts[lower].lat, pts[lower].lon, pts[end].lat, pts[end].lon)
        prev = pts[max(0, lower - 1)]
        return bearing_deg(prev.lat, prev.lon, pts[lower].lat, pts[lower].lon)

    def __call__(self, timestamp: float) -> CameraPose:
        if len(self.points) < 2 or self.video_duration_s <= 0:
            return self._fallback_pose()

        start = self.points[0].timestamp
        end = self.points[-1].timestamp
        progress = max(0.0, min(1.0, timestamp / self.video_duration_s))
        gnss_time = start + progress * (end - start)

        lower = self._lower_index(gnss_time)
        upper = min(lower + 1, len(self.points) - 1)
        p1, p2 = self.points[lower], self.points[upper]
        t = lerp_fraction(gnss_time, p1.timestamp, p2.timestamp)

        return CameraPose(
            lat=p1.lat + (p2.lat - p1.lat) * t,
            lon=p1.lon + (p2.lon - p1.lon) * t,
            bearing=self._heading(lower),
        )
