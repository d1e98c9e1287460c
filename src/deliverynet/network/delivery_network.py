"""Hub/stop delivery network: storage, query surface and the generative builder."""

from __future__ import annotations

import logging
from datetime import timedelta
from itertools import chain
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd
from numpy.random import Generator, default_rng

from deliverynet.errors import ConfigError
from deliverynet.sampling.distributions import TimestampDistribution
from deliverynet.sampling.sample_generator import SampleGenerator

from .domain_types import DeliveryEdge, DeliveryNode, HubNode, StopNode
from .iterators import DeliveryEdges, DeliveryNodes
from .node_factory import NodeFactory

logger = logging.getLogger(__name__)

EdgeWeightBounds = Tuple[timedelta, timedelta]
EdgeSpec = Union[Tuple[int, int], Tuple[int, int, float]]

DEFAULT_HUB_EDGE_WEIGHT = timedelta(hours=1).total_seconds()


class DeliveryNetwork:
    """Directed graph over hubs and timestamped stops.

    Vertices live in two id-keyed maps and outgoing edges in a per-vertex adjacency
    list. Ids are unique across both maps. The network is built once, either by
    :func:`make_delivery_network` or :func:`new_delivery_network`, and then only
    queried; it holds no locks.
    """

    def __init__(
        self,
        hubs: Optional[Mapping[int, HubNode]] = None,
        stops: Optional[Mapping[int, StopNode]] = None,
        adjacency: Optional[Mapping[int, Sequence[DeliveryEdge]]] = None,
    ) -> None:
        self.hubs: Dict[int, HubNode] = dict(hubs or {})
        self.stops: Dict[int, StopNode] = dict(stops or {})
        self.adjacency: Dict[int, List[DeliveryEdge]] = {
            node_id: list(edges) for node_id, edges in (adjacency or {}).items()
        }

    # ------------------------------------------------------------------ builders
    def _add_hub(self, hub: HubNode) -> None:
        self._check_unused_id(hub.id)
        self.hubs[hub.id] = hub

    def _add_stop(self, stop: StopNode) -> None:
        self._check_unused_id(stop.id)
        self.stops[stop.id] = stop

    def _check_unused_id(self, node_id: int) -> None:
        if node_id in self.hubs or node_id in self.stops:
            raise ConfigError(f"Node id {node_id} is already used in this network.")

    def _add_edge(self, edge: DeliveryEdge) -> None:
        src, dst = edge.source, edge.destination
        if self.node(src.id) is None or self.node(dst.id) is None:
            raise ConfigError(f"Edge {src.id}->{dst.id} references a node outside the network.")
        if src.id == dst.id:
            raise ConfigError(f"Self-loop edges are not stored (node {src.id}).")
        if (
            isinstance(src, StopNode)
            and isinstance(dst, StopNode)
            and src.timestamp is not None
            and dst.timestamp is not None
            and not src.timestamp < dst.timestamp
        ):
            raise ConfigError(
                f"Stop edge {src.id}->{dst.id} must run from an earlier to a later timestamp."
            )
        self.adjacency.setdefault(src.id, []).append(edge)

    # ---------------------------------------------------------------- properties
    @property
    def hub_count(self) -> int:
        return len(self.hubs)

    @property
    def stop_count(self) -> int:
        return len(self.stops)

    @property
    def edge_count(self) -> int:
        return sum(len(edges) for edges in self.adjacency.values())

    def __len__(self) -> int:
        return len(self.hubs) + len(self.stops)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.stops or node_id in self.hubs

    # ------------------------------------------------------------------- lookups
    def node(self, node_id: int) -> Optional[DeliveryNode]:
        """Resolve an id across both hub and stop maps; ``None`` if unknown."""
        stop = self.stops.get(node_id)
        if stop is not None:
            return stop
        return self.hubs.get(node_id)

    def edge(self, uid: int, vid: int) -> Optional[DeliveryEdge]:
        for edge in self.adjacency.get(uid, ()):
            if edge.destination.id == vid:
                return edge
        return None

    def weighted_edge(self, uid: int, vid: int) -> Optional[DeliveryEdge]:
        return self.edge(uid, vid)

    def has_edge_from_to(self, uid: int, vid: int) -> bool:
        return self.edge(uid, vid) is not None

    def has_edge_between(self, xid: int, yid: int) -> bool:
        """Direction-insensitive existence check."""
        return self.edge(xid, yid) is not None or self.edge(yid, xid) is not None

    def weight(self, uid: int, vid: int) -> Tuple[float, bool]:
        """Return ``(weight, found)``. ``weight(x, x)`` is ``(0.0, True)`` by convention."""
        if uid == vid:
            return 0.0, True
        edge = self.edge(uid, vid)
        if edge is None:
            return 0.0, False
        return edge.weight, True

    # --------------------------------------------------------------- collections
    def nodes(self) -> DeliveryNodes:
        return DeliveryNodes(chain(self.hubs.values(), self.stops.values()))

    def edges(self) -> DeliveryEdges:
        return DeliveryEdges(chain.from_iterable(self.adjacency.values()))

    def successors(self, node_id: int) -> DeliveryNodes:
        """Direct successors, in adjacency-list order."""
        return DeliveryNodes(edge.destination for edge in self.adjacency.get(node_id, ()))

    def predecessors(self, node_id: int) -> DeliveryNodes:
        """Direct predecessors. Scans every adjacency list, so cost grows with edge count."""
        return DeliveryNodes(
            edge.source
            for edge in chain.from_iterable(self.adjacency.values())
            if edge.destination.id == node_id
        )

    def get_stop_graph(self) -> "DeliveryNetwork":
        """Project onto stops: no hubs, only edges whose endpoints are both stops."""
        adjacency = {
            node_id: [edge for edge in edges if not edge.destination.is_hub()]
            for node_id, edges in self.adjacency.items()
            if node_id in self.stops
        }
        return DeliveryNetwork(stops=self.stops, adjacency=adjacency)

    def edges_frame(self) -> pd.DataFrame:
        """Tabular view of every stored edge, in ``edges()`` order."""
        rows = [
            {
                "source": edge.source.id,
                "destination": edge.destination.id,
                "source_kind": edge.source.kind.value,
                "destination_kind": edge.destination.kind.value,
                "weight": edge.weight,
            }
            for edge in self.edges()
        ]
        columns = ["source", "destination", "source_kind", "destination_kind", "weight"]
        return pd.DataFrame(rows, columns=columns)

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return (
            f"DeliveryNetwork(hubs={self.hub_count}, stops={self.stop_count}, "
            f"edges={self.edge_count})"
        )


# ========================================================================= builders ==
def new_delivery_network(
    stop_ids: Iterable[int],
    hub_ids: Iterable[int],
    edges: Iterable[EdgeSpec],
    default_weight: float = 1.0,
) -> DeliveryNetwork:
    """Build a network from explicit ids and ``(src, dst[, weight])`` pairs.

    Vertices are bare (stops carry no timestamp). Edges without their own weight
    use ``default_weight``. Unknown endpoints, self-loops and reused ids raise
    ``ConfigError``.
    """
    network = DeliveryNetwork()
    for stop_id in stop_ids:
        network._add_stop(StopNode(id=int(stop_id)))
    for hub_id in hub_ids:
        network._add_hub(HubNode(id=int(hub_id)))

    for spec in edges:
        if len(spec) == 3:
            src_id, dst_id, weight = spec  # type: ignore[misc]
        elif len(spec) == 2:
            src_id, dst_id = spec  # type: ignore[misc]
            weight = default_weight
        else:
            raise ConfigError(f"Edge specification must be (src, dst[, weight]), got {spec!r}")
        src, dst = network.node(src_id), network.node(dst_id)
        if src is None or dst is None:
            raise ConfigError(f"Edge {src_id}->{dst_id} references an unknown node id.")
        network._add_edge(DeliveryEdge(source=src, destination=dst, weight=float(weight)))
    return network


def make_delivery_network(
    hub_count: int,
    stop_count: int,
    distribution: Optional[TimestampDistribution],
    edge_weight_bounds: Optional[EdgeWeightBounds] = None,
    rng: Optional[Generator] = None,
) -> DeliveryNetwork:
    """Generate a fully wired hub/stop network.

    Every hub is linked to every stop in both directions (``2 * H * S`` edges). Stops
    are then ordered by timestamp with a stable sort, so ties keep allocation order,
    and each strictly earlier stop gets an edge to each later stop weighted by the
    elapsed seconds. Equal timestamps produce no edge, which keeps the stop subgraph
    acyclic.

    Hub edges weigh one hour unless ``edge_weight_bounds`` is given, in which case
    each hub->stop weight is drawn uniformly (in seconds) from the bounds and its
    stop->hub reverse carries the same weight.
    """
    sampler = SampleGenerator(distribution)
    hub_count = as_count(hub_count, "Hub count")
    stop_count = as_count(stop_count, "Stop count")
    if hub_count < 0 or stop_count < 0:
        raise ConfigError("Hub and stop counts must be non-negative.")
    hub_weight = _hub_weight_sampler(edge_weight_bounds, rng)

    network = DeliveryNetwork()
    factory = NodeFactory()

    hubs = [factory.make_hub() for _ in range(hub_count)]
    for hub in hubs:
        network._add_hub(hub)
        network.adjacency[hub.id] = []

    stops: List[StopNode] = []
    for timestamp in sampler.sample(stop_count):
        stop = factory.make_stop(timestamp)
        network._add_stop(stop)
        network.adjacency[stop.id] = []
        stops.append(stop)
    logger.debug(
        "Allocated %d hubs and %d stops (ids 1..%d)", len(hubs), len(stops), factory.counter - 1
    )

    for stop in stops:
        for hub in hubs:
            outbound = DeliveryEdge(source=hub, destination=stop, weight=hub_weight())
            network._add_edge(outbound)
            network._add_edge(outbound.reversed_edge())

    ordered = sorted(stops, key=lambda stop: stop.timestamp)
    ties = 0
    for i, later in enumerate(ordered):
        for j in range(i):
            earlier = ordered[j]
            if earlier.timestamp < later.timestamp:
                elapsed = (later.timestamp - earlier.timestamp).total_seconds()
                network._add_edge(DeliveryEdge(source=earlier, destination=later, weight=elapsed))
            else:
                ties += 1
    if ties:
        logger.debug("Skipped %d stop pairs sharing a timestamp", ties)

    logger.info(
        "Generated delivery network: %d hubs, %d stops, %d edges",
        network.hub_count,
        network.stop_count,
        network.edge_count,
    )
    return network


def as_count(value: object, label: str) -> int:
    """Return ``value`` as an int, rejecting anything that is not a whole number."""
    try:
        count = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError) as exc:
        raise ConfigError(f"{label} must be a whole number, got {value!r}.") from exc
    if count != value:
        raise ConfigError(f"{label} must be a whole number, got {value!r}.")
    return count


def _hub_weight_sampler(
    bounds: Optional[EdgeWeightBounds], rng: Optional[Generator]
):
    if bounds is None:
        return lambda: DEFAULT_HUB_EDGE_WEIGHT
    try:
        short, long = bounds
    except (TypeError, ValueError) as exc:
        raise ConfigError("Edge weight bounds must be a (short, long) pair.") from exc
    short_s, long_s = short.total_seconds(), long.total_seconds()
    if short_s < 0 or long_s < short_s:
        raise ConfigError("Edge weight bounds must satisfy 0 <= short <= long.")
    generator = rng or default_rng()
    return lambda: float(generator.uniform(short_s, long_s))


__all__ = [
    "DEFAULT_HUB_EDGE_WEIGHT",
    "DeliveryNetwork",
    "EdgeWeightBounds",
    "make_delivery_network",
    "new_delivery_network",
]
