# projection.py
from __future__ import annotations

import math

from actor_mapping_service.camera_config import DEFAULT_IMAGE_WIDTH
from common.types import (
    CameraIntrinsics,
    CameraPose,
    GeoPoint,
    RawDetection,
    WorldDetection,
)

from .geo_utils import destination_point

MIN_ACTOR_DISTANCE_M = 2.0  # guards against vision-model distance outliers
MAX_ACTOR_DISTANCE_M = 200.0
UNDISTORT_ITERATIONS = 5


def distort_point(xu: float, yu: float, k1: float, k2: float) -> tuple[float, float]:
    """Forward radial model: distorted = undistorted * (1 + k1*r^2 + k2*r^4)."""
    r2 = xu * xu + yu * yu
    scale = 1 + k1 * r2 + k2 * r2 * r2
    return xu * scale, yu * scale


def undistort_point(xd: float, yd: float, k1: float, k2: float) -> tuple[float, float]:
    """Invert the radial model by fixed-point iteration.

    Coordinates are normalized to the image width with the image center at 0,
    so the right edge sits at +0.5.
    """
    xu, yu = xd, yd
    for _ in range(UNDISTORT_ITERATIONS):
        r2 = xu * xu + yu * yu
        scale = 1 + k1 * r2 + k2 * r2 * r2
        xu = xd / scale
        yu = yd / scale
    return xu, yu


def pixel_to_bearing_offset(
    pixel_x: float,
    image_width: float,
    fov_deg: float,
    intrinsics: CameraIntrinsics | None = None,
) -> float:
    """Angle in degrees between the optical axis and a pixel column (right is positive)."""
    x_norm = pixel_x / image_width - 0.5

    if intrinsics is not None:
        x_undist, _ = undistort_point(x_norm, 0.0, intrinsics.k1, intrinsics.k2)
        return math.degrees(math.atan(x_undist / intrinsics.focal))

    # Pinhole focal length implied by the FOV: fov = 2 * atan(0.5 / focal)
    focal = 0.5 / math.tan(math.radians(fov_deg / 2))
    return math.degrees(math.atan(x_norm / focal))


def clamp_distance(distance_m: float) -> float:
    return max(MIN_ACTOR_DISTANCE_M, min(MAX_ACTOR_DISTANCE_M, distance_m))


def project_actor_to_world(
    bbox,
    distance_m: float,
    camera_lat: float,
    camera_lon: float,
    camera_bearing: float,
    image_width: float,
    fov_deg: float,
    intrinsics: CameraIntrinsics | None = None,
) -> dict[str, float]:
    offset = pixel_to_bearing_offset(bbox.center_x, image_width, fov_deg, intrinsics)
    bearing = (camera_bearing + offset + 360) % 360
    lat, lon = destination_point(camera_lat, camera_lon, bearing, clamp_distance(distance_m))

    return {
        "lat": lat,
        "lon": lon,
        "bearing": bearing,
    }


def project_detection(
    raw: RawDetection,
    pose: CameraPose,
    image_width: float | None,
    fov_deg: float,
    intrinsics: CameraIntrinsics | None = None,
) -> WorldDetection:
    """Place one raw detection on the map relative to the camera pose."""
    if not image_width or image_width <= 0:
        image_width = DEFAULT_IMAGE_WIDTH

    distance_m = clamp_distance(raw.estimated_distance_m)
    projected = project_actor_to_world(
        raw.bbox,
        distance_m,
        pose.lat,
        pose.lon,
        pose.bearing,
        image_width,
        fov_deg,
        intrinsics,
    )
    return WorldDetection(
        **raw.model_dump(exclude={"estimated_distance_m"}),
        estimated_distance_m=distance_m,
        world_position=GeoPoint(lat=projected["lat"], lon=projected["lon"]),
        bearing_from_camera=projected["bearing"],
    )
