import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol

from blobtrack.core.errors import EmitterError
from blobtrack.core.logging import setup_json_logger
from blobtrack.tracking.tracker import Track


@dataclass(frozen=True)
class BlobMessage:
    id: int
    x: float
    y: float

    @classmethod
    def from_track(cls, track: Track) -> "BlobMessage":
        return cls(id=track.id, x=float(track.x), y=float(track.y))


class TrackEmitter(Protocol):
    def emit(self, message: BlobMessage) -> None:
        ...

    def close(self) -> None:
        ...


def emit_tracks(
    emitter: TrackEmitter, tracks: Iterable[Track], logger: Optional[logging.Logger] = None
) -> int:
    """
    Send one message per track, in track order. Returns the number delivered.

    A failed send is logged and the remaining tracks are still sent.
    """
    logger = logger or setup_json_logger("emitter")
    sent = 0
    for track in tracks:
        try:
            emitter.emit(BlobMessage.from_track(track))
        except EmitterError as exc:
            logger.error(
                "emit_failed",
                extra={"track_id": track.id, "destination": exc.destination, "error": str(exc)},
            )
            continue
        sent += 1
    return sent
