"""Multi-keyframe actor tracking."""

from .keyframes import compute_keyframes
from .matching import build_session, build_tracks, label_similarity

__all__ = [
    "build_session",
    "build_tracks",
    "compute_keyframes",
    "label_similarity",
]
