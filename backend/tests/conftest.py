"""Shared test fixtures for backend tests.

Uses an in-memory cache and a fake detection service so tests run without
Redis or network access.
"""
from __future__ import annotations

import pytest

from actor_mapping_service.camera_config import CameraConfig
from common.types import CameraPose
from orchestrator import TrackingOrchestrator, TrackingRequest
from storage.cache import InMemoryCache
from tests.fakes import CAMERA_LAT, CAMERA_LON, FakeVisionClient, raw_actor


# ---------- Cache / collaborator fixtures ----------

@pytest.fixture()
def memory_cache() -> InMemoryCache:
    return InMemoryCache()


@pytest.fixture()
def fake_vision() -> FakeVisionClient:
    """Detection service that sees one red sedan straight ahead in every frame."""
    return FakeVisionClient(default_actors=[raw_actor()])


@pytest.fixture()
def static_pose():
    """Pose source for a parked camera facing north."""
    def _pose(timestamp: float) -> CameraPose:
        return CameraPose(lat=CAMERA_LAT, lon=CAMERA_LON, bearing=0.0)
    return _pose


# ---------- Orchestrator ----------

@pytest.fixture()
def orchestrator_factory(fake_vision, memory_cache):
    """Create a TrackingOrchestrator wired to the fake service and in-memory cache.

    Keyword overrides replace the vision client or the cache.
    """
    def _factory(**kwargs) -> TrackingOrchestrator:
        return TrackingOrchestrator(
            vision_client=kwargs.get("vision_client", fake_vision),
            cache=kwargs.get("cache", memory_cache),
        )

    return _factory


@pytest.fixture()
def tracking_request():
    """Factory for tracking requests; the default video yields 3 keyframes."""
    def _request(event_id: str = "evt-1", duration: float = 4.0, **camera) -> TrackingRequest:
        return TrackingRequest(
            event_id=event_id,
            video_url=f"https://videos.example.com/{event_id}.mp4",
            video_duration_s=duration,
            camera=CameraConfig(**camera),
        )
    return _request
