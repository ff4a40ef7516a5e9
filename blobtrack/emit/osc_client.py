from pythonosc.udp_client import SimpleUDPClient

from blobtrack.core.errors import EmitterError
from blobtrack.core.logging import setup_json_logger
from blobtrack.emit.interfaces import BlobMessage, TrackEmitter


BLOB_OSC_ADDRESS = "/MakeItArt/Blobs"


class OscTrackEmitter(TrackEmitter):
    def __init__(self, host: str = "127.0.0.1", port: int = 8888, address: str = BLOB_OSC_ADDRESS) -> None:
        self.host = host
        self.port = port
        self.address = address
        self.logger = setup_json_logger("osc_emitter")
        self._client = SimpleUDPClient(host, port)

    def emit(self, message: BlobMessage) -> None:
        # Receivers expect every argument as a float, id included.
        args = [float(message.id), float(message.x), float(message.y)]
        try:
            self._client.send_message(self.address, args)
        except OSError as exc:
            raise EmitterError(f"osc send failed: {exc}", destination=f"{self.host}:{self.port}") from exc

    def close(self) -> None:
        # SimpleUDPClient exposes no close of its own.
        sock = getattr(self._client, "_sock", None)
        if sock is not None:
            sock.close()
        self.logger.info("osc_emitter_closed", extra={"host": self.host, "port": self.port})
