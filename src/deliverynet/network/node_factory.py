"""Id allocation for vertices created during one generation run."""

from __future__ import annotations

from datetime import datetime

from .domain_types import HubNode, StopNode


class NodeFactory:
    """Issues monotonically increasing ids shared by hubs and stops.

    Not thread-safe. Each generation run creates its own factory so ids are unique
    within the run without any module-level state.
    """

    def __init__(self, counter: int = 1):
        if counter <= 0:
            raise ValueError("NodeFactory counter must start above zero.")
        self.counter = int(counter)

    def make_stop(self, timestamp: datetime) -> StopNode:
        node = StopNode(id=self.counter, timestamp=timestamp)
        self.counter += 1
        return node

    def make_hub(self) -> HubNode:
        node = HubNode(id=self.counter)
        self.counter += 1
        return node


__all__ = ["NodeFactory"]
