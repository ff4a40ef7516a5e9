import numpy as np
import pytest

from blobtrack.core.errors import ConfigError
from blobtrack.simulation.scene import render_points
from blobtrack.vision.detector import (
    BlobDetector,
    BlobDetectorConfig,
    Observation,
    ScriptedDetector,
    StubDetector,
)
from blobtrack.vision.preprocess import (
    ModelSubtraction,
    NoSubtraction,
    ReferenceConfig,
    ReferenceSubtraction,
    build_mode,
    preprocess,
    to_grayscale,
)


def _gray(points, radius=14):
    return to_grayscale(render_points(points, radius=radius))


def test_blob_detector_finds_discs() -> None:
    detector = BlobDetector()
    observations = detector.detect(_gray([(120, 100), (400, 300)]))

    assert len(observations) == 2
    found = sorted(obs.position for obs in observations)
    assert found[0] == pytest.approx((120, 100), abs=1.5)
    assert found[1] == pytest.approx((400, 300), abs=1.5)
    assert all(obs.size > 0 for obs in observations)


def test_blob_detector_filters_by_area() -> None:
    tiny = to_grayscale(render_points([(200, 200)], radius=4))
    assert BlobDetector().detect(tiny) == []


def test_blob_detector_without_image_reports_nothing() -> None:
    assert BlobDetector().detect(None) == []


def test_blob_detector_caps_observations() -> None:
    detector = BlobDetector(BlobDetectorConfig(max_observations=1))
    assert len(detector.detect(_gray([(120, 100), (400, 300)]))) == 1


def test_detector_config_from_dict() -> None:
    cfg = BlobDetectorConfig.from_dict(
        {"max_observations": 8, "blob": {"min_area": 50, "min_dist_between_blobs": 40}}
    )
    assert cfg.min_area == 50.0
    assert cfg.max_area == 900.0
    assert cfg.min_dist_between_blobs == 40.0
    assert cfg.max_observations == 8


def test_stub_and_scripted_detectors() -> None:
    assert StubDetector().detect(np.zeros((4, 4), dtype=np.uint8)) == []

    frames = [[Observation((1.0, 2.0), 3.0)], []]
    scripted = ScriptedDetector(frames)
    assert scripted.detect(None) == frames[0]
    assert scripted.detect(None) == []
    assert scripted.detect(None) == []


def test_observation_accessors() -> None:
    a = Observation(position=(3.0, 4.0), size=5.0)
    assert (a.x, a.y) == (3.0, 4.0)
    assert a.distance_to(Observation((0.0, 0.0))) == pytest.approx(5.0)


def test_no_subtraction_passes_frame_through() -> None:
    gray = _gray([(100, 100)])
    assert preprocess(gray, NoSubtraction()) is gray


def test_reference_subtraction_isolates_new_objects() -> None:
    # blurring widens the difference mask, so keep the disc well under max_area
    background = _gray([(100, 100)], radius=12)
    current = _gray([(100, 100), (400, 300)], radius=12)
    mode = build_mode("reference", reference=background)

    mask = preprocess(current, mode)
    assert mask.dtype == np.uint8
    assert set(np.unique(mask)) <= {0, 255}
    assert mask[300, 400] == 255
    assert mask[100, 100] == 0

    observations = BlobDetector().detect(mask)
    assert len(observations) == 1
    assert observations[0].position == pytest.approx((400, 300), abs=2.0)


def test_reference_subtraction_without_reference_yields_nothing() -> None:
    mode = ReferenceSubtraction()
    assert preprocess(_gray([(100, 100)]), mode) is None
    assert BlobDetector().detect(preprocess(_gray([(100, 100)]), mode)) == []


def test_build_mode_copies_reference() -> None:
    reference = _gray([])
    mode = build_mode("reference", reference=reference, reference_config=ReferenceConfig(threshold=40))
    reference[0, 0] = 255
    assert mode.reference[0, 0] == 0
    assert mode.config.threshold == 40


def test_model_subtraction_returns_mask() -> None:
    mode = build_mode("model")
    assert isinstance(mode, ModelSubtraction)
    mask = preprocess(_gray([(100, 100)]), mode)
    assert mask.shape == (480, 640)


def test_build_mode_rejects_unknown_name() -> None:
    with pytest.raises(ConfigError):
        build_mode("optical-flow")


def test_mode_names() -> None:
    assert [build_mode(n).name for n in ("none", "model", "reference")] == ["none", "model", "reference"]


def test_to_grayscale_keeps_single_channel() -> None:
    gray = np.zeros((5, 5), dtype=np.uint8)
    assert to_grayscale(gray) is gray
    assert to_grayscale(np.zeros((5, 5, 3), dtype=np.uint8)).shape == (5, 5)
