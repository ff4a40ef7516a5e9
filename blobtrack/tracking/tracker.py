from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from blobtrack.core.logging import setup_json_logger
from blobtrack.tracking.matcher import (
    DEFAULT_ACCEPTANCE_THRESHOLD,
    Matcher,
    NearestNeighborMatcher,
    build_matcher,
)
from blobtrack.vision.detector import Observation


@dataclass
class Track:
    id: int
    history: List[Observation] = field(default_factory=list)

    @property
    def current(self) -> Observation:
        return self.history[-1]

    @property
    def position(self) -> Tuple[float, float]:
        return self.current.position

    @property
    def x(self) -> float:
        return self.current.x

    @property
    def y(self) -> float:
        return self.current.y

    @property
    def age(self) -> int:
        return len(self.history)

    def trail(self, length: Optional[int] = None) -> List[Tuple[float, float]]:
        """Positions oldest first, limited to the last ``length`` entries."""
        observations = self.history if length is None else self.history[-length:]
        return [obs.position for obs in observations]


@dataclass(frozen=True)
class TrackingConfig:
    acceptance_threshold: float = DEFAULT_ACCEPTANCE_THRESHOLD
    matcher: str = "nearest"

    @classmethod
    def from_dict(cls, tracking_cfg: Dict[str, Any]) -> "TrackingConfig":
        return cls(
            acceptance_threshold=float(
                tracking_cfg.get("acceptance_threshold", DEFAULT_ACCEPTANCE_THRESHOLD)
            ),
            matcher=str(tracking_cfg.get("matcher", "nearest")),
        )


class Tracker:
    """
    Assigns persistent ids to per-frame observations by looking one frame back.

    A track not continued in a frame is dropped; its id is never handed out again
    until ``reset`` is called.
    """

    def __init__(self, matcher: Optional[Matcher] = None) -> None:
        self.matcher = matcher or NearestNeighborMatcher()
        self.logger = setup_json_logger("tracker")
        self._tracks: List[Track] = []
        self._previous_observations: List[Observation] = []
        self._next_id = 0
        self._frame_count = 0

    @classmethod
    def from_config(cls, config: TrackingConfig) -> "Tracker":
        return cls(build_matcher(config.matcher, config.acceptance_threshold))

    @property
    def tracks(self) -> List[Track]:
        return list(self._tracks)

    @property
    def previous_observations(self) -> List[Observation]:
        return list(self._previous_observations)

    @property
    def next_id(self) -> int:
        return self._next_id

    @property
    def frame_count(self) -> int:
        return self._frame_count

    def step(self, observations: Sequence[Observation]) -> List[Track]:
        current = list(observations)
        prev_tracks = self._tracks
        correspondence = self.matcher.match(current, self._previous_observations)

        tracks: List[Track] = []
        # previous index -> history length before this step, for indices already continued
        continued: Dict[int, int] = {}
        births: List[int] = []
        for obs, prev_index in zip(current, correspondence):
            if prev_index is None:
                track = Track(id=self._next_id, history=[obs])
                births.append(track.id)
                self._next_id += 1
            elif prev_index in continued:
                # Greedy matching let a second observation claim the same track.
                source = prev_tracks[prev_index]
                track = Track(
                    id=source.id,
                    history=source.history[: continued[prev_index]] + [obs],
                )
            else:
                track = prev_tracks[prev_index]
                continued[prev_index] = len(track.history)
                track.history.append(obs)
            tracks.append(track)

        deaths = [t.id for idx, t in enumerate(prev_tracks) if idx not in continued]

        self._previous_observations = current
        self._tracks = tracks
        self._frame_count += 1

        if births or deaths:
            self.logger.debug(
                "tracks_changed",
                extra={"frame": self._frame_count, "born": births, "died": deaths},
            )
        return list(tracks)

    def reset(self) -> None:
        self.logger.info(
            "tracker_reset", extra={"live_tracks": len(self._tracks), "next_id": self._next_id}
        )
        self._tracks = []
        self._previous_observations = []
        self._next_id = 0
        self._frame_count = 0
