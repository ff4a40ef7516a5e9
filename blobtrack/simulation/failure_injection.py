import random
from typing import List, Optional

from blobtrack.vision.detector import Observation


class FailureInjector:
    def __init__(
        self,
        drop_frame_chance: float = 0.0,
        no_detection_chance: float = 0.0,
        lost_target_chance: float = 0.0,
        seed: Optional[int] = None,
    ) -> None:
        self.drop_frame_chance = drop_frame_chance
        self.no_detection_chance = no_detection_chance
        self.lost_target_chance = lost_target_chance
        self._rng = random.Random(seed)

    @classmethod
    def from_dict(cls, failure_cfg: dict) -> "FailureInjector":
        return cls(
            drop_frame_chance=float(failure_cfg.get("drop_frame_chance", 0.0)),
            no_detection_chance=float(failure_cfg.get("no_detection_chance", 0.0)),
            lost_target_chance=float(failure_cfg.get("lost_target_chance", 0.0)),
            seed=failure_cfg.get("seed"),
        )

    def maybe_drop_frame(self) -> bool:
        return self._rng.random() < self.drop_frame_chance

    def maybe_remove_detections(self, observations: List[Observation]) -> List[Observation]:
        if self._rng.random() < self.no_detection_chance:
            return []
        return observations

    def maybe_lose_target(self, observations: List[Observation]) -> List[Observation]:
        if not observations:
            return observations
        if self._rng.random() < self.lost_target_chance:
            return observations[1:]
        return observations
