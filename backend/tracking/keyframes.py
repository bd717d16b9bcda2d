"""Fixed-cadence keyframe selection for actor tracking."""
from __future__ import annotations

import math

from tracking import config


def _round_tenth(value: float) -> float:
    # half-up, so 2.25 -> 2.3 regardless of float banker's rounding
    return math.floor(value * 10 + 0.5) / 10


def compute_keyframes(duration_s: float) -> list[float]:
    """Timestamps to sample for a video of ``duration_s`` seconds.

    One frame per interval starting at 0.5s while strictly before
    ``duration - 0.5``, plus a tail frame one second before the end when the
    regular schedule stops more than a second short of it.
    """
    if not math.isfinite(duration_s):
        raise ValueError(f"Video duration must be finite, got {duration_s}")
    timestamps: list[float] = []
    stop = duration_s - config.KEYFRAME_END_MARGIN_SEC
    index = 0
    while True:
        t = config.KEYFRAME_START_SEC + index * config.KEYFRAME_INTERVAL_SEC
        if t >= stop:
            break
        timestamps.append(_round_tenth(t))
        index += 1

    tail = max(duration_s - config.KEYFRAME_TAIL_SEC, config.KEYFRAME_START_SEC)
    if not timestamps or timestamps[-1] < tail - config.KEYFRAME_INTERVAL_SEC:
        timestamps.append(_round_tenth(tail))
    return timestamps
