import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import cv2
import numpy as np

from blobtrack.core.logging import setup_json_logger


@dataclass(frozen=True)
class Observation:
    position: Tuple[float, float]
    size: float = 0.0

    @property
    def x(self) -> float:
        return self.position[0]

    @property
    def y(self) -> float:
        return self.position[1]

    def distance_to(self, other: "Observation") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


@dataclass(frozen=True)
class BlobDetectorConfig:
    min_area: float = 200.0
    max_area: float = 900.0
    min_dist_between_blobs: float = 100.0
    filter_by_circularity: bool = False
    filter_by_convexity: bool = False
    filter_by_inertia: bool = False
    filter_by_color: bool = False
    max_observations: Optional[int] = None

    @classmethod
    def from_dict(cls, detection_cfg: Dict[str, Any]) -> "BlobDetectorConfig":
        blob = detection_cfg.get("blob", {}) or {}
        return cls(
            min_area=float(blob.get("min_area", cls.min_area)),
            max_area=float(blob.get("max_area", cls.max_area)),
            min_dist_between_blobs=float(
                blob.get("min_dist_between_blobs", cls.min_dist_between_blobs)
            ),
            filter_by_circularity=bool(blob.get("filter_by_circularity", False)),
            filter_by_convexity=bool(blob.get("filter_by_convexity", False)),
            filter_by_inertia=bool(blob.get("filter_by_inertia", False)),
            filter_by_color=bool(blob.get("filter_by_color", False)),
            max_observations=detection_cfg.get("max_observations"),
        )


class Detector:
    def detect(self, image: Optional[np.ndarray]) -> List[Observation]:
        raise NotImplementedError


class StubDetector(Detector):
    def detect(self, image: Optional[np.ndarray]) -> List[Observation]:
        return []


class ScriptedDetector(Detector):
    """Replays a fixed sequence of per-frame observation lists, then reports nothing."""

    def __init__(self, frames: Iterable[Sequence[Observation]]) -> None:
        self._frames = [list(frame) for frame in frames]
        self._cursor = 0

    def detect(self, image: Optional[np.ndarray]) -> List[Observation]:
        if self._cursor >= len(self._frames):
            return []
        observations = self._frames[self._cursor]
        self._cursor += 1
        return observations


class BlobDetector(Detector):
    def __init__(self, config: Optional[BlobDetectorConfig] = None) -> None:
        self.config = config or BlobDetectorConfig()
        self.logger = setup_json_logger("blob_detector")
        self._detector = self._create_detector(self.config)

    @staticmethod
    def _create_detector(config: BlobDetectorConfig):
        params = cv2.SimpleBlobDetector_Params()

        params.filterByCircularity = config.filter_by_circularity
        params.filterByConvexity = config.filter_by_convexity
        params.filterByInertia = config.filter_by_inertia
        params.filterByColor = config.filter_by_color

        params.minDistBetweenBlobs = config.min_dist_between_blobs

        params.filterByArea = True
        params.minArea = config.min_area
        params.maxArea = config.max_area

        return cv2.SimpleBlobDetector_create(params)

    def detect(self, image: Optional[np.ndarray]) -> List[Observation]:
        # No image means preprocessing had nothing to offer this frame.
        if image is None:
            return []

        keypoints = self._detector.detect(image)
        observations = [
            Observation(position=(float(kp.pt[0]), float(kp.pt[1])), size=float(kp.size))
            for kp in keypoints
        ]

        limit = self.config.max_observations
        if limit is not None and len(observations) > limit:
            self.logger.warning(
                "observations_truncated", extra={"found": len(observations), "limit": limit}
            )
            observations = observations[:limit]
        return observations
