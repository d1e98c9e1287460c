"""Restartable cursors over fixed snapshots of network vertices and edges.

Both iterators share one contract. The snapshot is captured as a tuple when the
iterator is built, so later changes to the source containers never leak into a
traversal. The cursor starts *before* the first element:

* ``advance()`` moves to the next element and returns True while the cursor still
  points at one. Once it returns False the iterator is exhausted and further calls
  keep returning False.
* ``current()`` peeks at the element under the cursor, or ``None`` before the first
  advance and after exhaustion.
* ``len()`` counts the elements not yet reached: the full snapshot before the first
  advance, ``length - cursor - 1`` while positioned, and 0 once exhausted.
* ``reset()`` rewinds to the initial state; replays are identical.

Plain ``for`` iteration advances the same cursor, so a partially consumed
iterator resumes where it left off.
"""

from __future__ import annotations

from typing import Generic, Iterable, Iterator, Optional, Tuple, TypeVar

from .domain_types import DeliveryEdge, DeliveryNode

T = TypeVar("T")


class _SnapshotIterator(Generic[T]):
    def __init__(self, payload: Iterable[T] = ()):
        self._payload: Tuple[T, ...] = tuple(payload)
        self._cursor = -1

    @property
    def payload(self) -> Tuple[T, ...]:
        return self._payload

    def advance(self) -> bool:
        if self._cursor < len(self._payload):
            self._cursor += 1
        return self._cursor < len(self._payload)

    def current(self) -> Optional[T]:
        if 0 <= self._cursor < len(self._payload):
            return self._payload[self._cursor]
        return None

    def reset(self) -> None:
        self._cursor = -1

    def __len__(self) -> int:
        if self._cursor < 0:
            return len(self._payload)
        return max(len(self._payload) - self._cursor - 1, 0)

    def __iter__(self) -> Iterator[T]:
        while self.advance():
            yield self._payload[self._cursor]

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"{type(self).__name__}(size={len(self._payload)}, cursor={self._cursor})"


class DeliveryNodes(_SnapshotIterator[DeliveryNode]):
    """Cursor over vertices. ``DeliveryNetwork.nodes()`` lists hubs before stops."""

    def node(self) -> Optional[DeliveryNode]:
        return self.current()


class DeliveryEdges(_SnapshotIterator[DeliveryEdge]):
    """Cursor over edges with both an unweighted and a weighted view of each item."""

    def edge(self) -> Optional[DeliveryEdge]:
        return self.current()

    def weighted_edge(self) -> Optional[DeliveryEdge]:
        return self.current()

    def weight(self) -> Optional[float]:
        edge = self.current()
        return edge.weight if edge is not None else None

    def source(self) -> Optional[DeliveryNode]:
        edge = self.current()
        return edge.source if edge is not None else None

    def destination(self) -> Optional[DeliveryNode]:
        edge = self.current()
        return edge.destination if edge is not None else None


__all__ = ["DeliveryEdges", "DeliveryNodes"]
