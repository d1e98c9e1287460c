from __future__ import annotations

import logging
from datetime import datetime, timedelta
from math import comb
from typing import Callable, Iterable, List

import pytest
from numpy.random import default_rng

from deliverynet.errors import ConfigError
from deliverynet.network import (
    DEFAULT_HUB_EDGE_WEIGHT,
    DeliveryNetwork,
    make_delivery_network,
)
from deliverynet.sampling import uniform_timestamp

T0 = datetime(2022, 3, 29, 0, 0, 0)


def _sequence_distribution(timestamps: Iterable[datetime]) -> Callable[[], datetime]:
    iterator = iter(list(timestamps))
    return lambda: next(iterator)


def _distinct(n: int) -> Callable[[], datetime]:
    # Deliberately out of order so the sort step matters.
    offsets = (list(range(n))[::2] + list(range(n))[1::2])[::-1]
    return _sequence_distribution(T0 + timedelta(minutes=o) for o in offsets)


def _hub_stop_edges(network: DeliveryNetwork) -> List:
    return [e for e in network.edges() if e.source.is_hub() != e.destination.is_hub()]


def _stop_stop_edges(network: DeliveryNetwork) -> List:
    return [e for e in network.edges() if not e.source.is_hub() and not e.destination.is_hub()]


def test_two_hubs_three_stops():
    network = make_delivery_network(2, 3, _distinct(3))

    assert network.hub_count == 2
    assert network.stop_count == 3
    assert network.edge_count == 2 * 2 * 3 + 3
    assert len(network.edges()) == 15
    assert len(network.nodes()) == 5


def test_stops_only_network_is_a_pure_dag():
    network = make_delivery_network(0, 3, _distinct(3))

    assert network.hub_count == 0
    assert network.stop_count == 3
    assert len(network.edges()) == 3
    assert len(_stop_stop_edges(network)) == 3


def test_missing_distribution_raises_config_error():
    with pytest.raises(ConfigError):
        make_delivery_network(2, 3, None)


def test_negative_counts_raise_config_error():
    with pytest.raises(ConfigError):
        make_delivery_network(-1, 3, _distinct(3))


def test_ids_start_at_one_with_hubs_first():
    network = make_delivery_network(2, 3, _distinct(3))
    assert sorted(network.hubs) == [1, 2]
    assert sorted(network.stops) == [3, 4, 5]


@pytest.mark.parametrize("hubs, stops", [(1, 1), (3, 5), (4, 12), (0, 0), (5, 0)])
def test_edge_counts_on_random_networks(hubs, stops):
    distro = uniform_timestamp(T0, timedelta(hours=24), rng=default_rng(hubs * 100 + stops))
    network = make_delivery_network(hubs, stops, distro)

    assert len(_hub_stop_edges(network)) == 2 * hubs * stops
    timestamps = [stop.timestamp for stop in network.stops.values()]
    stop_edges = _stop_stop_edges(network)
    assert len(stop_edges) <= comb(stops, 2)
    if len(set(timestamps)) == len(timestamps):
        assert len(stop_edges) == comb(stops, 2)


def test_stop_edges_run_forward_in_time_weighted_by_elapsed_seconds():
    distro = uniform_timestamp(T0, timedelta(hours=24), rng=default_rng(3))
    network = make_delivery_network(2, 10, distro)

    for edge in _stop_stop_edges(network):
        src, dst = edge.source, edge.destination
        assert src.timestamp < dst.timestamp
        assert edge.weight == (dst.timestamp - src.timestamp).total_seconds()
        assert edge.weight > 0


def test_every_hub_links_to_every_stop_both_ways():
    network = make_delivery_network(2, 4, _distinct(4))

    for hub_id in network.hubs:
        for stop_id in network.stops:
            assert network.has_edge_from_to(hub_id, stop_id)
            assert network.has_edge_from_to(stop_id, hub_id)
            assert network.weight(hub_id, stop_id) == (DEFAULT_HUB_EDGE_WEIGHT, True)
            assert network.weight(stop_id, hub_id) == (DEFAULT_HUB_EDGE_WEIGHT, True)


def test_equal_timestamps_produce_no_edge():
    same = T0 + timedelta(hours=5)
    network = make_delivery_network(
        0, 3, _sequence_distribution([same, T0, same])
    )
    # Stops 1 and 3 tie: only the edges out of the earliest stop remain.
    assert {(e.source.id, e.destination.id) for e in network.edges()} == {(2, 1), (2, 3)}
    assert not network.has_edge_between(1, 3)


def test_stop_adjacency_is_ordered_by_destination_time():
    network = make_delivery_network(1, 4, _distinct(4))
    earliest = min(network.stops.values(), key=lambda stop: stop.timestamp)

    outgoing = network.adjacency[earliest.id]
    assert outgoing[0].destination.is_hub()
    later = [edge.destination.timestamp for edge in outgoing[1:]]
    assert later == sorted(later)
    assert len(later) == 3


def test_edge_weight_bounds_draw_hub_weights_in_range():
    bounds = (timedelta(minutes=30), timedelta(hours=6))
    network = make_delivery_network(
        3, 4, _distinct(4), edge_weight_bounds=bounds, rng=default_rng(5)
    )

    low, high = (b.total_seconds() for b in bounds)
    for edge in _hub_stop_edges(network):
        assert low <= edge.weight <= high
        reverse_weight, found = network.weight(edge.destination.id, edge.source.id)
        assert found and reverse_weight == edge.weight


@pytest.mark.parametrize(
    "bounds",
    [
        (timedelta(hours=2), timedelta(hours=1)),
        (timedelta(minutes=-5), timedelta(hours=1)),
    ],
)
def test_invalid_edge_weight_bounds(bounds):
    with pytest.raises(ConfigError):
        make_delivery_network(1, 2, _distinct(2), edge_weight_bounds=bounds)


def test_stop_graph_of_generated_network():
    network = make_delivery_network(2, 3, _distinct(3))
    stop_graph = network.get_stop_graph()

    assert stop_graph.hub_count == 0
    assert set(stop_graph.stops) == set(network.stops)
    expected = {(e.source.id, e.destination.id) for e in _stop_stop_edges(network)}
    assert {(e.source.id, e.destination.id) for e in stop_graph.edges()} == expected
    assert len(expected) == 3


def test_nodes_and_edges_iterators_replay_after_reset():
    network = make_delivery_network(2, 5, _distinct(5))
    edges = network.edges()
    first = list(edges)
    edges.reset()
    assert list(edges) == first
    assert len(first) == 2 * 2 * 5 + comb(5, 2)


@pytest.mark.parametrize("hubs, stops", [(2.7, 3), (2, 3.5), ("2", 3)])
def test_non_whole_counts_raise_config_error(hubs, stops):
    with pytest.raises(ConfigError, match="whole number"):
        make_delivery_network(hubs, stops, _distinct(3))


def test_whole_float_counts_are_accepted():
    network = make_delivery_network(2.0, 3.0, _distinct(3))
    assert network.hub_count == 2
    assert network.stop_count == 3


def test_allocation_is_logged_as_counts(caplog):
    with caplog.at_level(logging.DEBUG, logger="deliverynet.network.delivery_network"):
        make_delivery_network(2, 3, _distinct(3))
    assert "Allocated 2 hubs and 3 stops (ids 1..5)" in caplog.text
