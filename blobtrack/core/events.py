from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, DefaultDict, Dict, List


MODE_CHANGED = "mode_changed"
QUIT_REQUESTED = "quit_requested"


@dataclass
class Event:
    name: str
    payload: Dict[str, Any] = field(default_factory=dict)


class EventBus:
    def __init__(self) -> None:
        self._subscribers: DefaultDict[str, List[Callable[[Event], None]]] = defaultdict(list)

    def subscribe(self, name: str, handler: Callable[[Event], None]) -> None:
        self._subscribers[name].append(handler)

    def publish(self, event: Event) -> None:
        for handler in list(self._subscribers[event.name]):
            handler(event)
