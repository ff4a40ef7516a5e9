import json
import logging
from pathlib import Path

from blobtrack.core.config_loader import CONFIG_DIR, load_config, merge_dict
from blobtrack.core.logging import _JsonFormatter, setup_json_logger


def test_shipped_config_loads() -> None:
    config = load_config(CONFIG_DIR)
    assert config["tracking"]["acceptance_threshold"] == 100.0
    assert config["detection"]["blob"]["min_dist_between_blobs"] == 100.0
    assert config["settings"]["emitter"]["osc"]["address"] == "/MakeItArt/Blobs"


def test_missing_files_load_as_empty(tmp_path: Path) -> None:
    (tmp_path / "tracking.yaml").write_text("matcher: exclusive\n", encoding="utf-8")
    config = load_config(tmp_path)
    assert config["tracking"] == {"matcher": "exclusive"}
    assert config["settings"] == {}


def test_environment_overrides(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "settings.yaml").write_text("mode: simulation\n", encoding="utf-8")
    monkeypatch.setenv("BLOBTRACK_CONFIG_DIR", str(tmp_path))
    monkeypatch.setenv("BLOBTRACK_MODE", "live")
    assert load_config()["settings"]["mode"] == "live"


def test_overrides_merge_deeply() -> None:
    config = load_config(CONFIG_DIR, overrides={"settings": {"emitter": {"kind": "osc"}}})
    assert config["settings"]["emitter"]["kind"] == "osc"
    assert config["settings"]["emitter"]["osc"]["port"] == 8888


def test_merge_dict_does_not_mutate_base() -> None:
    base = {"a": {"b": 1, "c": 2}}
    merged = merge_dict(base, {"a": {"b": 5}})
    assert merged == {"a": {"b": 5, "c": 2}}
    assert base == {"a": {"b": 1, "c": 2}}


def test_json_formatter_includes_extra_fields() -> None:
    record = logging.makeLogRecord(
        {"name": "tracker", "levelname": "DEBUG", "msg": "tracks_changed", "born": [3], "died": []}
    )
    payload = json.loads(_JsonFormatter().format(record))
    assert payload == {
        "level": "DEBUG",
        "message": "tracks_changed",
        "logger": "tracker",
        "born": [3],
        "died": [],
    }


def test_setup_json_logger_is_idempotent() -> None:
    first = setup_json_logger("blobtrack-test", level="WARNING")
    second = setup_json_logger("blobtrack-test")
    assert first is second
    assert len(second.handlers) == 1
    assert second.propagate is False
