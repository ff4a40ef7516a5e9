"""Background-subtraction modes applied to a grayscale frame before detection.

Each mode is its own type and carries the state it needs: the model-based mode
owns a MOG2 subtractor, the reference mode owns the captured reference frame.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

import cv2
import numpy as np

from blobtrack.core.errors import ConfigError
from blobtrack.core.logging import setup_json_logger


logger = setup_json_logger("preprocess")


@dataclass(frozen=True)
class ReferenceConfig:
    blur_kernel: int = 11
    threshold: int = 25

    @classmethod
    def from_dict(cls, detection_cfg: Dict[str, Any]) -> "ReferenceConfig":
        reference = detection_cfg.get("reference", {}) or {}
        return cls(
            blur_kernel=int(reference.get("blur_kernel", cls.blur_kernel)),
            threshold=int(reference.get("threshold", cls.threshold)),
        )


@dataclass
class NoSubtraction:
    name: str = field(default="none", init=False)


@dataclass
class ModelSubtraction:
    subtractor: Any = field(default_factory=cv2.createBackgroundSubtractorMOG2)
    name: str = field(default="model", init=False)


@dataclass
class ReferenceSubtraction:
    reference: Optional[np.ndarray] = None
    config: ReferenceConfig = field(default_factory=ReferenceConfig)
    name: str = field(default="reference", init=False)


SubtractionMode = Union[NoSubtraction, ModelSubtraction, ReferenceSubtraction]


def to_grayscale(frame: np.ndarray) -> np.ndarray:
    if frame.ndim == 2:
        return frame
    if frame.shape[2] == 4:
        return cv2.cvtColor(frame, cv2.COLOR_BGRA2GRAY)
    return cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)


def difference_from_reference(
    gray: np.ndarray, reference: np.ndarray, config: ReferenceConfig
) -> np.ndarray:
    kernel = (config.blur_kernel, config.blur_kernel)
    blurred = cv2.GaussianBlur(gray, kernel, 0)
    blurred_reference = cv2.GaussianBlur(reference, kernel, 0)
    diff = cv2.absdiff(blurred, blurred_reference)
    _, mask = cv2.threshold(diff, config.threshold, 255, cv2.THRESH_BINARY)
    return mask


def preprocess(gray: np.ndarray, mode: SubtractionMode) -> Optional[np.ndarray]:
    """Return the image to run detection on, or None when the mode cannot produce one."""
    if isinstance(mode, ModelSubtraction):
        return mode.subtractor.apply(gray)
    if isinstance(mode, ReferenceSubtraction):
        if mode.reference is None:
            logger.warning("no reference frame has been saved")
            return None
        return difference_from_reference(gray, mode.reference, mode.config)
    return gray


def build_mode(
    name: str,
    reference: Optional[np.ndarray] = None,
    reference_config: Optional[ReferenceConfig] = None,
) -> SubtractionMode:
    if name == "none":
        return NoSubtraction()
    if name == "model":
        return ModelSubtraction()
    if name == "reference":
        return ReferenceSubtraction(
            reference=None if reference is None else reference.copy(),
            config=reference_config or ReferenceConfig(),
        )
    raise ConfigError(
        f"unknown subtraction mode '{name}', expected none, model or reference",
        key="detection.subtraction",
    )
