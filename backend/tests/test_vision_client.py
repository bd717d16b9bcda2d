"""Tests for the detection service HTTP client (retry and error handling)."""
from __future__ import annotations

from unittest.mock import AsyncMock, patch

import aiohttp
import pytest

from common.types import CameraIntrinsics, CameraPose, DetectionRequest
from vision.client import HttpVisionClient, VisionRequestError, build_payload

OK_BODY = {
    "actors": [
        {
            "type": "car",
            "label": "white van",
            "confidence": "medium",
            "bbox": {"x_min": 10, "y_min": 20, "x_max": 110, "y_max": 120},
            "estimatedDistanceMeters": 25,
            "moving": True,
            "description": "white van parked",
        }
    ],
    "frameWidth": 1920,
    "frameHeight": 1080,
}


def _request(**overrides) -> DetectionRequest:
    defaults = dict(
        event_id="evt-1",
        video_url="https://videos.example.com/evt-1.mp4",
        timestamp=1.5,
        camera=CameraPose(lat=10.0, lon=20.0, bearing=90.0),
        fov_deg=120.0,
    )
    defaults.update(overrides)
    return DetectionRequest(**defaults)


def _client(**kwargs) -> HttpVisionClient:
    kwargs.setdefault("base_url", "http://vision.test/api/detect-actors")
    kwargs.setdefault("api_key", "secret")
    kwargs.setdefault("max_retries", 2)
    kwargs.setdefault("backoff_seconds", 0.01)
    return HttpVisionClient(**kwargs)


class TestPayload:
    def test_camel_case_fields(self):
        payload = build_payload(_request(), "secret")
        assert payload == {
            "eventId": "evt-1",
            "videoUrl": "https://videos.example.com/evt-1.mp4",
            "timestamp": 1.5,
            "cameraLat": 10.0,
            "cameraLon": 20.0,
            "cameraBearing": 90.0,
            "fovDegrees": 120.0,
            "apiKey": "secret",
        }

    def test_intrinsics_included_when_set(self):
        payload = build_payload(_request(intrinsics=CameraIntrinsics(focal=0.4, k1=-0.2)), "k")
        assert payload["cameraIntrinsics"] == {"focal": 0.4, "k1": -0.2, "k2": 0.0}


class TestDetect:
    @pytest.mark.asyncio
    async def test_parses_response(self):
        client = _client()
        with patch.object(client, "_post_once", AsyncMock(return_value=(200, OK_BODY))):
            response = await client.detect(_request())
        assert response.frame_width == 1920
        assert len(response.actors) == 1
        assert response.actors[0].estimated_distance_m == 25
        assert response.actors[0].moving is True

    @pytest.mark.asyncio
    async def test_empty_body_means_no_actors(self):
        client = _client()
        with patch.object(client, "_post_once", AsyncMock(return_value=(200, None))):
            response = await client.detect(_request())
        assert response.actors == []
        assert response.frame_width is None

    @pytest.mark.asyncio
    async def test_missing_key_raises_without_request(self):
        client = _client(api_key="")
        post = AsyncMock()
        with patch.object(client, "_post_once", post):
            with pytest.raises(VisionRequestError) as exc_info:
                await client.detect(_request())
        assert exc_info.value.status == 401
        post.assert_not_called()

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self):
        client = _client()
        post = AsyncMock(return_value=(400, {"error": "bad timestamp"}))
        with patch.object(client, "_post_once", post):
            with pytest.raises(VisionRequestError, match="bad timestamp") as exc_info:
                await client.detect(_request())
        assert exc_info.value.status == 400
        assert post.await_count == 1

    @pytest.mark.asyncio
    async def test_server_error_retried_then_succeeds(self):
        client = _client()
        post = AsyncMock(side_effect=[(503, None), (200, OK_BODY)])
        with patch.object(client, "_post_once", post), \
                patch("vision.client.asyncio.sleep", AsyncMock()) as sleep:
            response = await client.detect(_request())
        assert len(response.actors) == 1
        assert post.await_count == 2
        sleep.assert_awaited_once_with(0.01)

    @pytest.mark.asyncio
    async def test_transport_error_retried_with_backoff(self):
        client = _client()
        post = AsyncMock(side_effect=[aiohttp.ClientConnectionError("reset"), aiohttp.ClientConnectionError("reset"), (200, OK_BODY)])
        with patch.object(client, "_post_once", post), \
                patch("vision.client.asyncio.sleep", AsyncMock()) as sleep:
            await client.detect(_request())
        assert [c.args[0] for c in sleep.await_args_list] == [0.01, 0.02]

    @pytest.mark.asyncio
    async def test_gives_up_after_retries(self):
        client = _client(max_retries=1)
        post = AsyncMock(return_value=(500, None))
        with patch.object(client, "_post_once", post), \
                patch("vision.client.asyncio.sleep", AsyncMock()):
            with pytest.raises(VisionRequestError) as exc_info:
                await client.detect(_request())
        assert exc_info.value.status == 500
        assert str(exc_info.value) == "Detection failed at 1.5s: 500"
        assert post.await_count == 2
