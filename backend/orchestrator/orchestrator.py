"""Tracking orchestrator: keyframe loop, caching and track assembly."""
from __future__ import annotations

import asyncio
import logging

from pydantic import BaseModel, ValidationError

from actor_mapping_service.pixel_projection.projection import project_detection
from common.types import (
    DetectionRequest,
    FrameResult,
    GeoPoint,
    TrackingProgress,
    TrackingSession,
)
from orchestrator.exceptions import (
    FrameDetectionError,
    MissingCredentialsError,
    TrackingCancelledError,
)
from orchestrator.types import (
    CancellationToken,
    PoseSource,
    ProgressCallback,
    TrackingRequest,
)
from storage.cache import TrackingCache, detection_cache_key, tracking_cache_key
from tracking import build_session, compute_keyframes
from vision.client import VisionClient

logger = logging.getLogger(__name__)

MISSING_CREDENTIALS_MESSAGE = "No vision API key configured"


class TrackingOrchestrator:
    """Run actor detection over a video's keyframes and stitch the results into tracks.

    Keyframes are processed strictly one after another so the vision service
    never sees more than one request from a run at a time. Cache backends are
    synchronous and are called from a worker thread.
    """

    def __init__(self, vision_client: VisionClient, cache: TrackingCache):
        self._vision = vision_client
        self._cache = cache

    # ---------- cache helpers (best effort) ----------

    async def _cache_read(self, key: str, model: type[BaseModel]):
        try:
            raw = await asyncio.to_thread(self._cache.get, key)
        except Exception as exc:
            logger.warning("Cache read failed for %s: %s", key, exc)
            return None
        if raw is None:
            return None
        try:
            return model.model_validate_json(raw)
        except (ValidationError, ValueError):
            logger.warning("Discarding unreadable cache entry %s", key)
            await self._cache_remove(key)
            return None

    async def _cache_write(self, key: str, value: BaseModel) -> None:
        try:
            await asyncio.to_thread(self._cache.set, key, value.model_dump_json())
        except Exception as exc:
            logger.warning("Cache write failed for %s: %s", key, exc)

    async def _cache_remove(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._cache.remove, key)
        except Exception as exc:
            logger.warning("Cache delete failed for %s: %s", key, exc)

    async def load_cached_session(self, event_id: str, keyframe_count: int) -> TrackingSession | None:
        """Return the cached session only if it was built from the same number of keyframes."""
        key = tracking_cache_key(event_id)
        session = await self._cache_read(key, TrackingSession)
        if session is None:
            return None
        if len(session.keyframe_timestamps) != keyframe_count:
            logger.info(
                "Dropping stale tracking cache for '%s' (%d keyframes, expected %d)",
                event_id,
                len(session.keyframe_timestamps),
                keyframe_count,
            )
            await self._cache_remove(key)
            return None
        return session

    async def clear(self, event_id: str) -> None:
        await self._cache_remove(tracking_cache_key(event_id))

    # ---------- per-keyframe work ----------

    async def _detect_frame(
        self,
        request: TrackingRequest,
        timestamp: float,
        pose_source: PoseSource,
    ) -> FrameResult:
        pose = pose_source(timestamp)
        camera = request.camera
        response = await self._vision.detect(DetectionRequest(
            event_id=request.event_id,
            video_url=request.video_url,
            timestamp=timestamp,
            camera=pose,
            fov_deg=camera.h_fov_deg,
            intrinsics=camera.intrinsics,
        ))
        frame_width = response.frame_width or camera.image_width
        actors = [
            project_detection(raw, pose, frame_width, camera.h_fov_deg, camera.intrinsics)
            for raw in response.actors
        ]
        return FrameResult(
            timestamp=timestamp,
            camera_position=GeoPoint(lat=pose.lat, lon=pose.lon),
            camera_bearing=pose.bearing,
            fov_deg=camera.h_fov_deg,
            actors=actors,
        )

    async def detect(
        self,
        request: TrackingRequest,
        timestamp: float,
        pose_source: PoseSource,
    ) -> FrameResult:
        """Detect and place actors at a single video timestamp.

        Shares the per-keyframe cache with ``track``: a cached frame is returned
        as is (no credential needed), a fresh one is written back.
        """
        frame_key = detection_cache_key(request.event_id, timestamp)
        frame = await self._cache_read(frame_key, FrameResult)
        if frame is not None:
            return frame

        if not self._vision.configured:
            raise MissingCredentialsError(MISSING_CREDENTIALS_MESSAGE)

        try:
            frame = await self._detect_frame(request, timestamp, pose_source)
        except Exception as exc:
            logger.exception("Detection failed for '%s' at %.1fs", request.event_id, timestamp)
            raise FrameDetectionError(
                f"Detection failed at {timestamp}s: {exc}",
                timestamp=timestamp,
                frames_completed=0,
                total_frames=1,
            ) from exc

        await self._cache_write(frame_key, frame)
        return frame

    async def track(
        self,
        request: TrackingRequest,
        pose_source: PoseSource,
        cancel_token: CancellationToken | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> TrackingSession:
        token = cancel_token or CancellationToken()

        def _emit(current: int, total: int, status: str, message: str) -> None:
            if on_progress is not None:
                on_progress(TrackingProgress(
                    current_frame=current,
                    total_frames=total,
                    status=status,
                    message=message,
                ))

        keyframes = compute_keyframes(request.video_duration_s)
        total = len(keyframes)

        cached = await self.load_cached_session(request.event_id, total)
        if cached is not None:
            logger.info("Loaded tracking session for '%s' from cache", request.event_id)
            count = len(cached.keyframe_timestamps)
            _emit(count, count, "done", "Loaded from cache")
            return cached

        if not self._vision.configured:
            _emit(0, total, "error", MISSING_CREDENTIALS_MESSAGE)
            raise MissingCredentialsError(MISSING_CREDENTIALS_MESSAGE)

        frame_results: list[FrameResult] = []
        for index, timestamp in enumerate(keyframes):
            if token.cancelled:
                raise TrackingCancelledError(
                    f"Tracking cancelled after {len(frame_results)}/{total} frames",
                    frames_completed=len(frame_results),
                    total_frames=total,
                )

            try:
                frame = await self.detect(request, timestamp, pose_source)
            except FrameDetectionError as exc:
                _emit(len(frame_results), total, "error", str(exc))
                raise FrameDetectionError(
                    str(exc),
                    timestamp=timestamp,
                    frames_completed=len(frame_results),
                    total_frames=total,
                ) from exc.__cause__

            frame_results.append(frame)
            _emit(index + 1, total, "detecting", f"Analyzed frame {index + 1}/{total}")

        if token.cancelled:
            raise TrackingCancelledError(
                f"Tracking cancelled after {total}/{total} frames",
                frames_completed=total,
                total_frames=total,
            )

        _emit(total, total, "matching", "Matching actors across frames...")
        session = build_session(frame_results, request.event_id)
        await self._cache_write(tracking_cache_key(request.event_id), session)

        n_tracks = len(session.tracks)
        _emit(
            total,
            total,
            "done",
            f"Tracked {n_tracks} actor{'s' if n_tracks != 1 else ''} across {total} frames",
        )
        logger.info(
            "Tracking for '%s' finished: %d tracks over %d keyframes",
            request.event_id,
            n_tracks,
            total,
        )
        return session
