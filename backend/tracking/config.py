"""Keyframe schedule and track matching configuration."""

# Keyframe schedule
KEYFRAME_START_SEC = 0.5
KEYFRAME_INTERVAL_SEC = 1.0
KEYFRAME_END_MARGIN_SEC = 0.5
KEYFRAME_TAIL_SEC = 1.0  # tail frame lands this far before the end of the video

# Frame-to-frame matching gates
MAX_MATCH_DISTANCE_M = 30.0
LABEL_SIMILARITY_WEIGHT = 0.3

# Cache key prefixes
DETECTION_CACHE_PREFIX = "actor-detection-"
TRACKING_CACHE_PREFIX = "actor-tracking-"

# Display palette, cycled in order of first appearance
TRACK_COLORS = (
    "#3b82f6",  # blue
    "#ef4444",  # red
    "#10b981",  # emerald
    "#f59e0b",  # amber
    "#8b5cf6",  # violet
    "#ec4899",  # pink
    "#06b6d4",  # cyan
    "#f97316",  # orange
    "#14b8a6",  # teal
    "#6366f1",  # indigo
)
