from pathlib import Path
from typing import Iterator, Optional

import cv2
import numpy as np

from blobtrack.core.logging import setup_json_logger


Frame = Optional[np.ndarray]


class CameraSource:
    """Iterable of frames. A ``None`` item means no new frame was ready for that tick."""

    def __iter__(self) -> Iterator[Frame]:
        raise NotImplementedError


class VideoCameraSource(CameraSource):
    def __init__(self, path: str, loop: bool = True) -> None:
        self.path = path
        self.loop = loop
        self.logger = setup_json_logger("video_camera")

    def __iter__(self) -> Iterator[Frame]:
        while True:
            cap = cv2.VideoCapture(str(Path(self.path)))
            if not cap.isOpened():
                self.logger.error("video_source_unavailable", extra={"path": self.path})
                break

            try:
                while True:
                    ret, frame = cap.read()
                    if not ret:
                        break
                    yield frame
            finally:
                cap.release()

            if not self.loop:
                break


class ImageCameraSource(CameraSource):
    def __init__(self, path: str, loop: bool = True) -> None:
        self.path = path
        self.loop = loop
        self.logger = setup_json_logger("image_camera")

    def __iter__(self) -> Iterator[Frame]:
        while True:
            frame = cv2.imread(str(Path(self.path)))
            if frame is None:
                self.logger.error("image_source_unavailable", extra={"path": self.path})
                break

            yield frame

            if not self.loop:
                break


class WebcamCameraSource(CameraSource):
    def __init__(
        self,
        index: int = 0,
        width: int = 640,
        height: int = 480,
        max_missed_reads: int = 30,
    ) -> None:
        self.index = index
        self.width = width
        self.height = height
        self.max_missed_reads = max_missed_reads
        self.logger = setup_json_logger("webcam_camera")

    def __iter__(self) -> Iterator[Frame]:
        cap = cv2.VideoCapture(self.index)
        if not cap.isOpened():
            self.logger.error("webcam_unavailable", extra={"index": self.index})
            return

        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        missed = 0
        try:
            while True:
                ret, frame = cap.read()
                if not ret:
                    missed += 1
                    if missed > self.max_missed_reads:
                        self.logger.error(
                            "webcam_stopped_delivering", extra={"index": self.index, "missed": missed}
                        )
                        break
                    yield None
                    continue
                missed = 0
                yield frame
        finally:
            cap.release()
