"""Frame-to-frame correspondence between two observation lists.

A correspondence holds one entry per current observation: the index of the
previous-frame observation it continues, or ``None`` when it continues nothing.
"""

from typing import List, Optional, Protocol, Sequence, Set

import numpy as np

from blobtrack.core.errors import ConfigError
from blobtrack.vision.detector import Observation


DEFAULT_ACCEPTANCE_THRESHOLD = 100.0

Correspondence = List[Optional[int]]


class Matcher(Protocol):
    acceptance_threshold: float

    def match(
        self, current: Sequence[Observation], previous: Sequence[Observation]
    ) -> Correspondence:
        ...


def _positions(observations: Sequence[Observation]) -> np.ndarray:
    return np.array([obs.position for obs in observations], dtype=np.float64).reshape(-1, 2)


def match_nearest(
    current: Sequence[Observation],
    previous: Sequence[Observation],
    acceptance_threshold: float = DEFAULT_ACCEPTANCE_THRESHOLD,
) -> Correspondence:
    """
    Greedy nearest-neighbor matching, evaluated per current observation in order.

    Every current observation takes its closest previous observation if that is
    strictly closer than the threshold. Exact ties go to the lowest previous
    index. Previous observations are never consumed, so several current
    observations may continue the same one.
    """
    if not previous:
        return [None] * len(current)

    prev_xy = _positions(previous)
    correspondence: Correspondence = []
    for obs in current:
        distances = np.hypot(prev_xy[:, 0] - obs.x, prev_xy[:, 1] - obs.y)
        # argmin returns the first minimum, which is the tie-break.
        best = int(np.argmin(distances))
        if distances[best] < acceptance_threshold:
            correspondence.append(best)
        else:
            correspondence.append(None)
    return correspondence


class NearestNeighborMatcher:
    def __init__(self, acceptance_threshold: float = DEFAULT_ACCEPTANCE_THRESHOLD) -> None:
        self.acceptance_threshold = acceptance_threshold

    def match(
        self, current: Sequence[Observation], previous: Sequence[Observation]
    ) -> Correspondence:
        return match_nearest(current, previous, self.acceptance_threshold)


class ExclusiveMatcher:
    """One-to-one greedy matching: closest pairs first, each side used at most once."""

    def __init__(self, acceptance_threshold: float = DEFAULT_ACCEPTANCE_THRESHOLD) -> None:
        self.acceptance_threshold = acceptance_threshold

    def match(
        self, current: Sequence[Observation], previous: Sequence[Observation]
    ) -> Correspondence:
        correspondence: Correspondence = [None] * len(current)
        if not current or not previous:
            return correspondence

        cur_xy = _positions(current)
        prev_xy = _positions(previous)
        distances = np.hypot(
            cur_xy[:, None, 0] - prev_xy[None, :, 0],
            cur_xy[:, None, 1] - prev_xy[None, :, 1],
        )

        potential_matches = []
        for c_idx, p_idx in zip(*np.nonzero(distances < self.acceptance_threshold)):
            potential_matches.append((float(distances[c_idx, p_idx]), int(c_idx), int(p_idx)))

        # Closest first; index order settles equal distances.
        potential_matches.sort()

        matched_previous: Set[int] = set()
        for _, c_idx, p_idx in potential_matches:
            if correspondence[c_idx] is not None or p_idx in matched_previous:
                continue
            correspondence[c_idx] = p_idx
            matched_previous.add(p_idx)
        return correspondence


MATCHERS = {
    "nearest": NearestNeighborMatcher,
    "exclusive": ExclusiveMatcher,
}


def build_matcher(name: str, acceptance_threshold: float) -> Matcher:
    if acceptance_threshold <= 0:
        raise ConfigError(
            f"acceptance_threshold must be positive, got {acceptance_threshold}",
            key="tracking.acceptance_threshold",
        )
    try:
        matcher_cls = MATCHERS[name]
    except KeyError:
        raise ConfigError(
            f"unknown matcher '{name}', expected one of {sorted(MATCHERS)}",
            key="tracking.matcher",
        ) from None
    return matcher_cls(acceptance_threshold)
