"""
Track actors across one dashcam event video from the command line.

Reads the event's GNSS track from a JSON file (a list of
``{"lat", "lon", "timestamp"}`` objects, timestamp in milliseconds), runs a
tracking session against the detection service and writes the session JSON.
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import signal
from pathlib import Path

from pydantic import ValidationError

from actor_mapping_service.camera_config import DEFAULT_H_FOV_DEG, CameraConfig
from actor_mapping_service.pixel_projection.pose import GnssPoint, GnssPoseSource
from common.config import DEFAULT_OUTPUT_DIR
from common.types import CameraIntrinsics, TrackingProgress
from orchestrator import CancellationToken, TrackingError, TrackingOrchestrator, TrackingRequest
from storage.cache import InMemoryCache, RedisCache
from vision import HttpVisionClient

logger = logging.getLogger(__name__)


def load_gnss(path: Path) -> list[GnssPoint]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("gnssData", data.get("points", []))
    return [GnssPoint(**p) for p in data]


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Detect and track actors across an event video",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--event-id", required=True, help="Event identifier (cache namespace)")
    parser.add_argument("--video-url", required=True, help="Video URL passed to the detection service")
    parser.add_argument("--duration", type=float, required=True, help="Video duration in seconds")
    parser.add_argument("--gnss", type=Path, required=True, help="GNSS track JSON file")
    parser.add_argument("--fov", type=float, default=DEFAULT_H_FOV_DEG, help="Horizontal FOV in degrees")
    parser.add_argument(
        "--intrinsics",
        type=float,
        nargs=3,
        metavar=("FOCAL", "K1", "K2"),
        help="Lens calibration; omit to use the FOV-only model",
    )
    parser.add_argument("--redis", action="store_true", help="Cache results in Redis (REDIS_URL)")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Where to write the session JSON (default: output/tracking-<event>.json)",
    )
    return parser.parse_args()


def _log_progress(progress: TrackingProgress) -> None:
    logger.info("[%s] %d/%d %s", progress.status, progress.current_frame, progress.total_frames, progress.message)


async def run(args: argparse.Namespace) -> int:
    intrinsics = None
    if args.intrinsics:
        focal, k1, k2 = args.intrinsics
        intrinsics = CameraIntrinsics(focal=focal, k1=k1, k2=k2)

    try:
        request = TrackingRequest(
            event_id=args.event_id,
            video_url=args.video_url,
            video_duration_s=args.duration,
            camera=CameraConfig(h_fov_deg=args.fov, intrinsics=intrinsics),
        )
    except ValidationError as exc:
        logger.error("Invalid tracking request: %s", exc)
        return 2

    pose_source = GnssPoseSource(load_gnss(args.gnss), args.duration)
    cache = RedisCache() if args.redis else InMemoryCache()
    orchestrator = TrackingOrchestrator(HttpVisionClient(), cache)

    token = CancellationToken()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, token.cancel)
        handles_sigint = True
    except (NotImplementedError, RuntimeError, ValueError):
        # not supported on this platform or outside the main thread
        handles_sigint = False

    try:
        session = await orchestrator.track(request, pose_source, token, _log_progress)
    except TrackingError as exc:
        logger.error("Tracking failed: %s", exc)
        return 1
    finally:
        if handles_sigint:
            loop.remove_signal_handler(signal.SIGINT)
        if isinstance(cache, RedisCache):
            cache.close()

    output = args.output or DEFAULT_OUTPUT_DIR / f"tracking-{args.event_id}.json"
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(session.model_dump_json(indent=2), encoding="utf-8")
    logger.info("Wrote %d tracks to %s", len(session.tracks), output)
    return 0


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    return asyncio.run(run(parse_args()))


if __name__ == "__main__":
    raise SystemExit(main())
