from typing import List

import cv2
import numpy as np

from blobtrack.tracking.tracker import Track


TRAIL_COLOR = (0, 200, 255)
BLOB_COLOR = (0, 255, 0)
LABEL_COLOR = (255, 255, 255)


def ensure_bgr(image: np.ndarray) -> np.ndarray:
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    return image


def overlay_tracks(frame: np.ndarray, tracks: List[Track], mode_name: str, trail_length: int = 30) -> None:
    for track in tracks:
        trail = track.trail(trail_length)
        if len(trail) > 1:
            points = np.array(trail, dtype=np.int32).reshape(-1, 1, 2)
            cv2.polylines(frame, [points], False, TRAIL_COLOR, 1, cv2.LINE_AA)

        x, y = int(track.x), int(track.y)
        radius = max(int(track.current.size / 2), 2)
        cv2.circle(frame, (x, y), radius, BLOB_COLOR, 2, cv2.LINE_AA)
        cv2.putText(
            frame,
            str(track.id),
            (x + radius + 2, y - radius - 2),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.5,
            BLOB_COLOR,
            1,
            cv2.LINE_AA,
        )
    cv2.putText(frame, f"MODE: {mode_name}", (10, 20), cv2.FONT_HERSHEY_SIMPLEX, 0.6, LABEL_COLOR, 2)
