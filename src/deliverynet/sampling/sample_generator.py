"""Background producer that streams distribution samples through a rendezvous channel."""

from __future__ import annotations

import logging
import threading
from typing import Generic, Iterator, List, Optional, Tuple, TypeVar

from deliverynet.errors import ConfigError

from .distributions import SampleDistribution

logger = logging.getLogger(__name__)

T = TypeVar("T")

_EMPTY = object()


class SampleStream(Generic[T]):
    """Unbuffered hand-off between one producer thread and its consumer.

    ``send`` blocks until the consumer has taken the value. ``cancel`` withdraws
    any value still waiting in the hand-off slot, so nothing is delivered after it
    returns; the producer is then expected to ``close`` the stream.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._slot: object = _EMPTY
        self._closed = False
        self._cancelled = False
        self._error: Optional[BaseException] = None

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    @property
    def cancelled(self) -> bool:
        with self._cond:
            return self._cancelled

    # ---------------------------------------------------------------- producer
    def send(self, value: T) -> bool:
        """Block until ``value`` is received. Returns False if cancelled first."""
        with self._cond:
            if self._closed:
                raise RuntimeError("send on closed sample stream")
            if self._cancelled:
                return False
            self._slot = value
            self._cond.notify_all()
            while self._slot is not _EMPTY:
                if self._cancelled:
                    self._slot = _EMPTY
                    return False
                self._cond.wait()
            return True

    def close(self, error: Optional[BaseException] = None) -> None:
        """Mark the stream finished. A second close is a programming error."""
        with self._cond:
            if self._closed:
                raise RuntimeError("sample stream closed twice")
            self._closed = True
            self._error = error
            self._cond.notify_all()

    # ---------------------------------------------------------------- consumer
    def cancel(self) -> None:
        with self._cond:
            self._cancelled = True
            self._slot = _EMPTY
            self._cond.notify_all()

    def receive(self, timeout: Optional[float] = None) -> Tuple[Optional[T], bool]:
        """Take the next sample.

        Returns ``(value, True)`` on delivery and ``(None, False)`` once the stream
        is closed. Raises ``TimeoutError`` if nothing arrives within ``timeout``
        seconds, and re-raises the producer's exception if the distribution failed.
        """
        with self._cond:
            ready = self._cond.wait_for(
                lambda: self._slot is not _EMPTY or self._closed, timeout
            )
            if not ready:
                raise TimeoutError(f"no sample received within {timeout} seconds")
            if self._slot is not _EMPTY:
                value = self._slot
                self._slot = _EMPTY
                self._cond.notify_all()
                return value, True  # type: ignore[return-value]
            if self._error is not None:
                raise self._error
            return None, False

    def __iter__(self) -> Iterator[T]:
        while True:
            value, ok = self.receive()
            if not ok:
                return
            yield value  # type: ignore[misc]

    def __enter__(self) -> "SampleStream[T]":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cancel()


class SampleGenerator(Generic[T]):
    """Wraps a distribution and streams ``n`` draws from a background thread.

    Call ``stop()`` (or cancel the returned stream) when abandoning a stream before
    it is drained; otherwise its producer stays blocked on the next hand-off.
    """

    def __init__(self, distribution: Optional[SampleDistribution[T]]):
        if distribution is None or not callable(distribution):
            raise ConfigError("Must receive a non-null sample distribution.")
        self.distribution = distribution
        self._streams: List[SampleStream[T]] = []
        self._lock = threading.Lock()

    def sample(self, n: int) -> SampleStream[T]:
        """Start a producer for ``n`` samples and return the stream it writes to."""
        if n < 0:
            raise ConfigError("Sample count must be non-negative.")
        stream: SampleStream[T] = SampleStream()
        with self._lock:
            self._streams = [s for s in self._streams if not s.closed]
            self._streams.append(stream)
        producer = threading.Thread(
            target=self._produce,
            args=(int(n), stream),
            name="sample-producer",
            daemon=True,
        )
        producer.start()
        return stream

    def stop(self) -> None:
        """Cancel every stream this generator started that is still open."""
        with self._lock:
            streams, self._streams = self._streams, []
        for stream in streams:
            stream.cancel()

    def _produce(self, n: int, stream: SampleStream[T]) -> None:
        logger.debug("Sample producer started for %d samples", n)
        produced = 0
        error: Optional[BaseException] = None
        try:
            for _ in range(n):
                if stream.cancelled:
                    break
                if not stream.send(self.distribution()):
                    break
                produced += 1
        except Exception as exc:
            error = exc
        finally:
            stream.close(error)
            logger.debug("Sample producer finished after %d/%d samples", produced, n)


__all__ = ["SampleGenerator", "SampleStream"]
