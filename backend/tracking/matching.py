"""
Greedy frame-to-frame association of world-positioned detections.

Each keyframe's detections are matched against the tracks that were seen in
the previous keyframe. Pairs must share an actor type and lie within
``MAX_MATCH_DISTANCE_M`` of each other; surviving pairs are ranked by a cost
that mixes distance with label similarity and assigned greedily. A track
that finds no partner is closed for good, so a single missed keyframe ends
an identity.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List

from actor_mapping_service.pixel_projection.geo_utils import haversine_distance
from common.types import FrameResult, Observation, Track, TrackingSession, WorldDetection
from tracking import config


def label_similarity(a: str, b: str) -> float:
    """Jaccard overlap of the lower-cased word sets of two labels."""
    words_a = set(a.lower().split())
    words_b = set(b.lower().split())
    if not words_a and not words_b:
        return 1.0
    union = words_a | words_b
    return len(words_a & words_b) / len(union)


def match_cost(distance_m: float, similarity: float) -> float:
    return distance_m - similarity * config.LABEL_SIMILARITY_WEIGHT * config.MAX_MATCH_DISTANCE_M


@dataclass
class _OpenTrack:
    seq: int  # creation order
    type: str
    label: str
    observations: List[Observation] = field(default_factory=list)

    @property
    def last(self) -> Observation:
        return self.observations[-1]


def _observation(frame: FrameResult, actor: WorldDetection) -> Observation:
    return Observation(
        timestamp=frame.timestamp,
        world_position=actor.world_position,
        bbox=actor.bbox,
        confidence=actor.confidence,
        description=actor.description,
    )


def _candidates(open_tracks: List[_OpenTrack], actors: List[WorldDetection]) -> list[tuple[float, int, int]]:
    """Gated (cost, track index, detection index) triples, best first."""
    candidates: list[tuple[float, int, int]] = []
    for ti, track in enumerate(open_tracks):
        last = track.last.world_position
        for di, actor in enumerate(actors):
            if actor.type != track.type:
                continue
            dist = haversine_distance(last.lat, last.lon, actor.world_position.lat, actor.world_position.lon)
            if dist > config.MAX_MATCH_DISTANCE_M:
                continue
            sim = label_similarity(track.label, actor.label)
            candidates.append((match_cost(dist, sim), ti, di))

    # Exact cost ties go to the older track, then the earlier detection.
    candidates.sort()
    return candidates


def build_tracks(frame_results: Iterable[FrameResult]) -> list[Track]:
    """Stitch per-keyframe detections into tracks ordered by first appearance."""
    frames = sorted(frame_results, key=lambda f: f.timestamp)
    open_tracks: List[_OpenTrack] = []
    closed_tracks: List[_OpenTrack] = []
    next_id = 1

    for frame in frames:
        actors = frame.actors
        matched_tracks: set[int] = set()
        used_actors: set[int] = set()

        for _, ti, di in _candidates(open_tracks, actors):
            if ti in matched_tracks or di in used_actors:
                continue
            matched_tracks.add(ti)
            used_actors.add(di)
            open_tracks[ti].observations.append(_observation(frame, actors[di]))

        still_open: List[_OpenTrack] = []
        for ti, track in enumerate(open_tracks):
            if ti in matched_tracks:
                still_open.append(track)
            else:
                closed_tracks.append(track)
        open_tracks = still_open

        for di, actor in enumerate(actors):
            if di in used_actors:
                continue
            open_tracks.append(_OpenTrack(
                seq=next_id,
                type=actor.type,
                label=actor.label,
                observations=[_observation(frame, actor)],
            ))
            next_id += 1

    closed_tracks.extend(open_tracks)
    closed_tracks.sort(key=lambda t: (t.observations[0].timestamp, t.seq))

    return [
        Track(
            track_id=f"track-{t.seq}",
            type=t.type,
            label=t.label,
            color=config.TRACK_COLORS[i % len(config.TRACK_COLORS)],
            observations=t.observations,
            first_seen=t.observations[0].timestamp,
            last_seen=t.last.timestamp,
        )
        for i, t in enumerate(closed_tracks)
    ]


def build_session(frame_results: Iterable[FrameResult], event_id: str) -> TrackingSession:
    frames = sorted(frame_results, key=lambda f: f.timestamp)
    return TrackingSession(
        event_id=event_id,
        keyframe_timestamps=[f.timestamp for f in frames],
        frame_results=frames,
        tracks=build_tracks(frames),
    )
