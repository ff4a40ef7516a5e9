from typing import List

from blobtrack.core.logging import setup_json_logger
from blobtrack.emit.interfaces import BlobMessage, TrackEmitter


class LoggingTrackEmitter(TrackEmitter):
    def __init__(self) -> None:
        self.logger = setup_json_logger("log_emitter")
        self.messages: List[BlobMessage] = []

    def emit(self, message: BlobMessage) -> None:
        self.messages.append(message)
        self.logger.debug("blob", extra={"id": message.id, "x": message.x, "y": message.y})

    def close(self) -> None:
        self.logger.info("log_emitter_closed", extra={"sent": len(self.messages)})
