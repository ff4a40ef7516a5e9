from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

import cv2
import numpy as np

from blobtrack.vision.camera import CameraSource, Frame


@dataclass
class SceneConfig:
    width: int = 640
    height: int = 480
    blobs: int = 3
    radius: int = 14
    speed_px: float = 4.0
    frames: Optional[int] = 300
    seed: Optional[int] = None

    @classmethod
    def from_dict(cls, scene_cfg: Dict[str, Any]) -> "SceneConfig":
        defaults = cls()
        return cls(
            width=int(scene_cfg.get("width", defaults.width)),
            height=int(scene_cfg.get("height", defaults.height)),
            blobs=int(scene_cfg.get("blobs", defaults.blobs)),
            radius=int(scene_cfg.get("radius", defaults.radius)),
            speed_px=float(scene_cfg.get("speed_px", defaults.speed_px)),
            frames=scene_cfg.get("frames", defaults.frames),
            seed=scene_cfg.get("seed", defaults.seed),
        )


class SyntheticSceneSource(CameraSource):
    """White discs drifting over a black canvas, bouncing off the edges."""

    def __init__(self, config: Optional[SceneConfig] = None) -> None:
        self.config = config or SceneConfig()

    def __iter__(self) -> Iterator[Frame]:
        cfg = self.config
        rng = np.random.default_rng(cfg.seed)
        margin = cfg.radius + 1
        positions = rng.uniform(
            (margin, margin), (cfg.width - margin, cfg.height - margin), size=(cfg.blobs, 2)
        )
        angles = rng.uniform(0.0, 2 * np.pi, size=cfg.blobs)
        velocities = np.stack([np.cos(angles), np.sin(angles)], axis=1) * cfg.speed_px

        index = 0
        while cfg.frames is None or index < cfg.frames:
            yield self.render(positions)
            positions = positions + velocities
            for axis, limit in ((0, cfg.width), (1, cfg.height)):
                out = (positions[:, axis] < margin) | (positions[:, axis] > limit - margin)
                velocities[out, axis] *= -1
                positions[:, axis] = np.clip(positions[:, axis], margin, limit - margin)
            index += 1

    def render(self, positions: np.ndarray) -> np.ndarray:
        points = [(int(round(x)), int(round(y))) for x, y in positions]
        return render_points(points, self.config.width, self.config.height, self.config.radius)


def render_points(points: List[tuple], width: int = 640, height: int = 480, radius: int = 14) -> np.ndarray:
    frame = np.zeros((height, width, 3), dtype=np.uint8)
    for x, y in points:
        cv2.circle(frame, (int(x), int(y)), radius, (255, 255, 255), -1)
    return frame
