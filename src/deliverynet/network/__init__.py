"""Delivery network package exports."""

from .delivery_network import (
    DEFAULT_HUB_EDGE_WEIGHT,
    DeliveryNetwork,
    EdgeWeightBounds,
    make_delivery_network,
    new_delivery_network,
)
from .domain_types import DeliveryEdge, DeliveryNode, HubNode, NodeKind, StopNode
from .iterators import DeliveryEdges, DeliveryNodes
from .network_config import NetworkConfig
from .node_factory import NodeFactory

__all__ = [
    "DEFAULT_HUB_EDGE_WEIGHT",
    "DeliveryEdge",
    "DeliveryEdges",
    "DeliveryNetwork",
    "DeliveryNode",
    "DeliveryNodes",
    "EdgeWeightBounds",
    "HubNode",
    "NetworkConfig",
    "NodeFactory",
    "NodeKind",
    "StopNode",
    "make_delivery_network",
    "new_delivery_network",
]
