# camera_config.py
from pydantic import BaseModel

from common.types import CameraIntrinsics

DEFAULT_IMAGE_WIDTH = 1280
DEFAULT_H_FOV_DEG = 120.0

class CameraConfig(BaseModel):
    image_width: int = DEFAULT_IMAGE_WIDTH
    image_height: int = 720
    h_fov_deg: float = DEFAULT_H_FOV_DEG
    intrinsics: CameraIntrinsics | None = None  # None -> FOV-only pinhole model
