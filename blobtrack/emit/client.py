import requests

from blobtrack.core.errors import EmitterError
from blobtrack.emit.interfaces import BlobMessage, TrackEmitter


class HttpTrackEmitter(TrackEmitter):
    def __init__(self, base_url: str, timeout_s: float = 0.5) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self._session = requests.Session()

    def emit(self, message: BlobMessage) -> None:
        payload = {"id": message.id, "x": message.x, "y": message.y}
        try:
            response = self._session.post(f"{self.base_url}/blobs", json=payload, timeout=self.timeout_s)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise EmitterError(f"http emit failed: {exc}", destination=self.base_url) from exc

    def close(self) -> None:
        self._session.close()
