from blobtrack.core.errors import ConfigError
from blobtrack.emit.client import HttpTrackEmitter
from blobtrack.emit.interfaces import TrackEmitter
from blobtrack.emit.osc_client import BLOB_OSC_ADDRESS, OscTrackEmitter
from blobtrack.emit.sim_client import LoggingTrackEmitter


def get_emitter(config: dict) -> TrackEmitter:
    emitter_cfg = config.get("settings", {}).get("emitter", {}) or {}
    kind = emitter_cfg.get("kind", "log")
    if kind == "osc":
        osc_cfg = emitter_cfg.get("osc", {}) or {}
        return OscTrackEmitter(
            host=osc_cfg.get("host", "127.0.0.1"),
            port=int(osc_cfg.get("port", 8888)),
            address=osc_cfg.get("address", BLOB_OSC_ADDRESS),
        )
    if kind == "http":
        http_cfg = emitter_cfg.get("http", {}) or {}
        return HttpTrackEmitter(
            base_url=http_cfg.get("base_url", "http://127.0.0.1:8080"),
            timeout_s=float(http_cfg.get("timeout_s", 0.5)),
        )
    if kind == "log":
        return LoggingTrackEmitter()
    raise ConfigError(f"unknown emitter kind '{kind}', expected log, osc or http", key="settings.emitter.kind")
