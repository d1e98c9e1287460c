"""Vertex and edge dataclasses shared across the network package."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple, Union


class NodeKind(str, Enum):
    HUB = "hub"
    STOP = "stop"


@dataclass(frozen=True)
class HubNode:
    """Dispatch origin. Carries no temporal attribute."""

    id: int

    @property
    def kind(self) -> NodeKind:
        return NodeKind.HUB

    def is_hub(self) -> bool:
        return True


@dataclass(frozen=True)
class StopNode:
    """Delivery point. Bare stops built from explicit id lists have no timestamp."""

    id: int
    timestamp: Optional[datetime] = None

    @property
    def kind(self) -> NodeKind:
        return NodeKind.STOP

    def is_hub(self) -> bool:
        return False


DeliveryNode = Union[HubNode, StopNode]


@dataclass(frozen=True)
class DeliveryEdge:
    """Directed, weighted connection between two vertices owned by a network."""

    source: DeliveryNode
    destination: DeliveryNode
    weight: float = 1.0

    @property
    def endpoints(self) -> Tuple[DeliveryNode, DeliveryNode]:
        return self.source, self.destination

    def reversed_edge(self) -> "DeliveryEdge":
        """Swap the endpoints. The weight is kept: reversal is purely structural."""
        return DeliveryEdge(source=self.destination, destination=self.source, weight=self.weight)

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.source.id}->{self.destination.id}"


__all__ = ["DeliveryEdge", "DeliveryNode", "HubNode", "NodeKind", "StopNode"]
