"""Tests for detection data contracts: wire aliases and cache payloads."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from common.types import (
    BoundingBox,
    DetectionResponse,
    FrameResult,
    GeoPoint,
    RawDetection,
    TrackingSession,
    WorldDetection,
)


def _wire_actor(**overrides) -> dict:
    data = {
        "type": "pedestrian",
        "label": "person in yellow jacket",
        "confidence": "low",
        "bbox": {"x_min": 100, "y_min": 200, "x_max": 140, "y_max": 320},
        "estimatedDistanceMeters": 12.5,
        "moving": False,
        "description": "person waiting at crossing",
    }
    data.update(overrides)
    return data


class TestRawDetection:
    def test_parses_wire_names(self):
        d = RawDetection.model_validate(_wire_actor())
        assert d.estimated_distance_m == 12.5
        assert d.bbox.center_x == 120.0
        assert d.moving is False

    def test_accepts_field_names(self):
        d = RawDetection(
            type="car",
            confidence="high",
            bbox=BoundingBox(x_min=0, y_min=0, x_max=10, y_max=10),
            estimated_distance_m=5,
        )
        assert d.label == ""
        assert d.moving is None

    def test_rejects_unknown_type(self):
        with pytest.raises(ValidationError):
            RawDetection.model_validate(_wire_actor(type="spaceship"))

    def test_rejects_unknown_confidence(self):
        with pytest.raises(ValidationError):
            RawDetection.model_validate(_wire_actor(confidence="certain"))


class TestDetectionResponse:
    def test_frame_size_aliases(self):
        r = DetectionResponse.model_validate({"actors": [_wire_actor()], "frameWidth": 1920, "frameHeight": 1080})
        assert r.frame_width == 1920
        assert r.frame_height == 1080

    def test_defaults(self):
        r = DetectionResponse.model_validate({})
        assert r.actors == []
        assert r.frame_width is None


class TestCachePayloads:
    def _frame(self) -> FrameResult:
        raw = RawDetection.model_validate(_wire_actor())
        actor = WorldDetection(
            **raw.model_dump(),
            world_position=GeoPoint(lat=59.9, lon=10.7),
            bearing_from_camera=45.0,
        )
        return FrameResult(
            timestamp=1.5,
            camera_position=GeoPoint(lat=59.9, lon=10.7),
            camera_bearing=30.0,
            fov_deg=120.0,
            actors=[actor],
        )

    def test_frame_result_json_restores(self):
        frame = self._frame()
        assert FrameResult.model_validate_json(frame.model_dump_json()) == frame

    def test_detected_at_is_utc_iso(self):
        assert self._frame().detected_at.endswith("+00:00")

    def test_session_json_uses_field_names(self):
        session = TrackingSession(event_id="e", keyframe_timestamps=[1.5], frame_results=[self._frame()], tracks=[])
        dumped = session.model_dump()
        actor = dumped["frame_results"][0]["actors"][0]
        assert "world_position" in actor
        assert "estimated_distance_m" in actor
        assert TrackingSession.model_validate_json(session.model_dump_json()) == session
