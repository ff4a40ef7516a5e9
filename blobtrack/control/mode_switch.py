from typing import Optional

import numpy as np

from blobtrack.core.events import MODE_CHANGED, QUIT_REQUESTED, Event, EventBus
from blobtrack.core.logging import log_state, setup_json_logger
from blobtrack.vision.preprocess import ReferenceConfig, SubtractionMode, build_mode


KEY_MODES = {
    "1": "none",
    "2": "model",
    "3": "reference",
}
QUIT_KEYS = {"q", "\x1b"}


class ModeSwitcher:
    """Holds the active background-subtraction mode and switches it on key presses."""

    def __init__(
        self,
        bus: EventBus,
        mode: SubtractionMode,
        reference_config: Optional[ReferenceConfig] = None,
    ) -> None:
        self.bus = bus
        self.mode = mode
        self.reference_config = reference_config or ReferenceConfig()
        self.logger = setup_json_logger("mode_switch")

    def switch(self, name: str, current_frame: Optional[np.ndarray] = None) -> SubtractionMode:
        previous = self.mode.name
        if name == "reference":
            if current_frame is None:
                self.logger.warning("reference_requested_without_frame")
            else:
                self.logger.info("saving current frame as background")
        self.mode = build_mode(name, reference=current_frame, reference_config=self.reference_config)
        log_state(self.logger, from_mode=previous, to_mode=self.mode.name)
        self.bus.publish(Event(MODE_CHANGED, {"from": previous, "to": self.mode.name}))
        return self.mode

    def handle_key(self, key: int, current_frame: Optional[np.ndarray] = None) -> bool:
        """Handle a key code as returned by cv2.waitKey. Returns False once quit is requested."""
        if key < 0:
            return True
        char = chr(key & 0xFF)
        if char in QUIT_KEYS:
            self.bus.publish(Event(QUIT_REQUESTED))
            return False
        name = KEY_MODES.get(char)
        if name is not None:
            self.switch(name, current_frame)
        return True
