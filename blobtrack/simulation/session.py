from typing import Iterable, List, Optional

import cv2
import numpy as np

from blobtrack.control.mode_switch import ModeSwitcher
from blobtrack.core.config_loader import load_config
from blobtrack.core.errors import ConfigError
from blobtrack.core.events import MODE_CHANGED, Event, EventBus
from blobtrack.core.logging import setup_json_logger
from blobtrack.emit.interfaces import TrackEmitter, emit_tracks
from blobtrack.emit.router import get_emitter
from blobtrack.simulation.failure_injection import FailureInjector
from blobtrack.simulation.scene import SceneConfig, SyntheticSceneSource
from blobtrack.tracking.tracker import Track, Tracker, TrackingConfig
from blobtrack.vision.camera import (
    CameraSource,
    Frame,
    ImageCameraSource,
    VideoCameraSource,
    WebcamCameraSource,
)
from blobtrack.vision.detector import BlobDetector, BlobDetectorConfig, Detector
from blobtrack.vision.preprocess import ReferenceConfig, build_mode, preprocess, to_grayscale
from blobtrack.vision.visualizer import ensure_bgr, overlay_tracks


class TrackingSession:
    def __init__(
        self,
        camera: CameraSource,
        detector: Detector,
        tracker: Tracker,
        emitter: TrackEmitter,
        modes: Optional[ModeSwitcher] = None,
        bus: Optional[EventBus] = None,
        failures: Optional[FailureInjector] = None,
        config: Optional[dict] = None,
    ) -> None:
        self.camera = camera
        self.detector = detector
        self.tracker = tracker
        self.emitter = emitter
        self.bus = bus or EventBus()
        self.modes = modes or ModeSwitcher(self.bus, build_mode("none"))
        self.failures = failures or FailureInjector()
        self.config = config or {}
        self.logger = setup_json_logger("session")
        self.tracks: List[Track] = []
        self.last_gray: Optional[np.ndarray] = None
        self.last_detection_image: Optional[np.ndarray] = None
        self.last_sent = 0
        self.bus.subscribe(MODE_CHANGED, self._on_mode_changed)

    def _on_mode_changed(self, event: Event) -> None:
        self.tracker.reset()
        self.tracks = []

    def process_frame(self, frame: np.ndarray) -> List[Track]:
        gray = to_grayscale(frame)
        self.last_gray = gray
        image = preprocess(gray, self.modes.mode)
        self.last_detection_image = image

        observations = self.detector.detect(image)
        observations = self.failures.maybe_remove_detections(observations)
        observations = self.failures.maybe_lose_target(observations)

        self.tracks = self.tracker.step(observations)
        self.last_sent = emit_tracks(self.emitter, self.tracks, self.logger)
        return self.tracks

    def run(self) -> None:
        visualization_cfg = self.config.get("settings", {}).get("visualization", {})
        visualize = visualization_cfg.get("enabled", False)
        window_name = visualization_cfg.get("window_name", "Blob Tracking")
        trail_length = int(visualization_cfg.get("trail_length", 30))

        self.logger.info("session_started", extra={"mode": self.modes.mode.name})
        try:
            for frame in self._frames():
                # Nothing new from upstream: skip the tick without touching the tracker.
                if frame is None or self.failures.maybe_drop_frame():
                    self.logger.debug("frame_skipped")
                    continue

                tracks = self.process_frame(frame)

                if visualize:
                    if self.modes.mode.name != "none" and self.last_detection_image is not None:
                        canvas = ensure_bgr(self.last_detection_image.copy())
                    else:
                        canvas = frame.copy()
                    overlay_tracks(canvas, tracks, self.modes.mode.name, trail_length)
                    cv2.imshow(window_name, canvas)
                    if not self.modes.handle_key(cv2.waitKey(1), self.last_gray):
                        break
        except KeyboardInterrupt:
            self.logger.info("session_interrupted")
        except Exception as exc:
            self.logger.error(f"session_error: {exc}", exc_info=True)
            raise
        finally:
            if visualize:
                cv2.destroyAllWindows()
            self.emitter.close()
            self.logger.info("session_stopped", extra={"frames": self.tracker.frame_count})

    def _frames(self) -> Iterable[Frame]:
        return iter(self.camera)


def build_camera(config: dict) -> CameraSource:
    camera_cfg = dict(config.get("simulation", {}).get("camera", {}) or {})
    if config.get("settings", {}).get("mode", "simulation") == "live":
        camera_cfg["source_type"] = "webcam"

    source_type = camera_cfg.get("source_type", "synthetic")
    if source_type == "webcam":
        return WebcamCameraSource(index=int(camera_cfg.get("index", 0)))
    if source_type == "video":
        return VideoCameraSource(path=camera_cfg.get("source_path", ""), loop=camera_cfg.get("loop", True))
    if source_type == "image":
        return ImageCameraSource(path=camera_cfg.get("source_path", ""), loop=camera_cfg.get("loop", True))
    if source_type == "synthetic":
        scene_cfg = config.get("simulation", {}).get("scene", {}) or {}
        return SyntheticSceneSource(SceneConfig.from_dict(scene_cfg))
    raise ConfigError(f"unknown camera source type '{source_type}'", key="simulation.camera.source_type")


def build_session_from_config(config: Optional[dict] = None) -> TrackingSession:
    config = config or load_config()
    detection_cfg = config.get("detection", {}) or {}

    bus = EventBus()
    reference_config = ReferenceConfig.from_dict(detection_cfg)
    modes = ModeSwitcher(
        bus,
        build_mode(detection_cfg.get("subtraction", "none"), reference_config=reference_config),
        reference_config=reference_config,
    )
    tracker = Tracker.from_config(TrackingConfig.from_dict(config.get("tracking", {}) or {}))
    failures = FailureInjector.from_dict(
        config.get("simulation", {}).get("failure_injection", {}) or {}
    )

    return TrackingSession(
        camera=build_camera(config),
        detector=BlobDetector(BlobDetectorConfig.from_dict(detection_cfg)),
        tracker=tracker,
        emitter=get_emitter(config),
        modes=modes,
        bus=bus,
        failures=failures,
        config=config,
    )
