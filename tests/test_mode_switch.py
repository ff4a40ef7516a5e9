from unittest.mock import Mock

import numpy as np

from blobtrack.control.mode_switch import ModeSwitcher
from blobtrack.core.events import MODE_CHANGED, QUIT_REQUESTED, EventBus
from blobtrack.vision.preprocess import ModelSubtraction, NoSubtraction, ReferenceSubtraction


def _switcher():
    bus = EventBus()
    return bus, ModeSwitcher(bus, NoSubtraction())


def test_keys_select_modes() -> None:
    _, switcher = _switcher()
    switcher.handle_key(ord("2"))
    assert isinstance(switcher.mode, ModelSubtraction)
    switcher.handle_key(ord("1"))
    assert isinstance(switcher.mode, NoSubtraction)


def test_reference_key_captures_current_frame() -> None:
    _, switcher = _switcher()
    frame = np.full((4, 4), 9, dtype=np.uint8)

    switcher.handle_key(ord("3"), frame)

    assert isinstance(switcher.mode, ReferenceSubtraction)
    assert np.array_equal(switcher.mode.reference, frame)
    assert switcher.mode.reference is not frame


def test_switch_publishes_mode_changed() -> None:
    bus, switcher = _switcher()
    handler = Mock()
    bus.subscribe(MODE_CHANGED, handler)

    switcher.switch("model")

    event = handler.call_args[0][0]
    assert event.payload == {"from": "none", "to": "model"}


def test_quit_and_ignored_keys() -> None:
    bus, switcher = _switcher()
    quit_handler = Mock()
    changed = Mock()
    bus.subscribe(QUIT_REQUESTED, quit_handler)
    bus.subscribe(MODE_CHANGED, changed)

    assert switcher.handle_key(-1) is True
    assert switcher.handle_key(ord("x")) is True
    changed.assert_not_called()

    assert switcher.handle_key(ord("q")) is False
    quit_handler.assert_called_once()
