"""A thread-safe pool of connections for one database context."""

from __future__ import annotations

import dataclasses
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, Optional

try:
    from typing import Protocol
except ImportError:  # pragma: no cover
    Protocol = object  # type: ignore[assignment,misc]

from .types import (
    DEFAULT_ACQUIRE_TIMEOUT,
    DEFAULT_CONNECTION_CACHE,
    DEFAULT_CONNECTION_LIMIT,
    DEFAULT_CONNECTION_TIMEOUT,
    DEFAULT_IDLE_TIMEOUT,
    DEFAULT_MIN_CONNECTIONS,
)

_CLEANUP_INTERVAL = 1.0


class PooledConnection(Protocol):
    """What the pool needs from a connection."""

    def is_alive(self) -> bool: ...

    def is_long_idle(self) -> bool: ...

    def validate_with_ping(self) -> bool: ...

    def update_last_used(self) -> None: ...

    def close(self) -> None: ...


@dataclass
class PoolConfiguration:
    """Pool limits and timeouts; timeouts are in seconds."""

    connection_limit: int = DEFAULT_CONNECTION_LIMIT
    connection_cache: bool = DEFAULT_CONNECTION_CACHE
    connection_timeout: int = DEFAULT_CONNECTION_TIMEOUT
    idle_timeout: int = DEFAULT_IDLE_TIMEOUT
    min_connections: int = DEFAULT_MIN_CONNECTIONS
    acquire_timeout: int = DEFAULT_ACQUIRE_TIMEOUT


@dataclass
class PoolStatistics:
    """Counters describing a pool's use."""

    total_connections: int = 0
    idle_connections: int = 0
    active_connections: int = 0
    connections_created: int = 0
    connections_closed: int = 0
    acquire_count: int = 0
    acquire_timeout_count: int = 0
    acquire_wait_total_ms: int = 0


@dataclass
class _IdleEntry:
    connection: PooledConnection
    connection_id: int
    last_released: float


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


class ConnectionPool:
    """Hands out connections made by a factory and keeps released ones for reuse.

    The factory returns a new connection, or None when one cannot be made.
    A background thread closes connections idle longer than idle_timeout,
    keeping at least min_connections in total.
    """

    def __init__(
        self,
        context_name: str,
        config: Optional[PoolConfiguration],
        factory: Callable[[], Optional[PooledConnection]],
    ) -> None:
        self.context_name = context_name
        self.config = config if config is not None else PoolConfiguration()
        self._factory = factory
        self._idle: Deque[_IdleEntry] = deque()
        self._active: Dict[int, PooledConnection] = {}
        self._cond = threading.Condition(threading.Lock())
        self._stats = PoolStatistics()
        self._next_id = 1
        self._shutdown = threading.Event()
        self._cleanup_thread = threading.Thread(
            target=self._cleanup_loop, name=f"pool-cleanup-{context_name}", daemon=True
        )
        self._cleanup_thread.start()

    def __enter__(self) -> "ConnectionPool":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    def _take_id(self) -> int:
        conn_id = self._next_id
        self._next_id += 1
        return conn_id

    def acquire(self, timeout_ms: Optional[int] = None) -> Optional[PooledConnection]:
        """Return a connection, or None on timeout or after shutdown.

        timeout_ms of None uses the configured acquire timeout; 0 does not wait.
        """
        if self._shutdown.is_set():
            return None
        if timeout_ms is None or timeout_ms < 0:
            timeout_ms = self.config.acquire_timeout * 1000

        start = time.monotonic()
        with self._cond:
            self._stats.acquire_count += 1
            while True:
                conn = self._try_acquire_idle()
                if conn is not None:
                    self._stats.acquire_wait_total_ms += _elapsed_ms(start)
                    return conn

                if self._stats.total_connections < self.config.connection_limit:
                    self._cond.release()
                    try:
                        conn = self._factory()
                    finally:
                        self._cond.acquire()
                    if conn is not None:
                        self._active[self._take_id()] = conn
                        self._stats.total_connections += 1
                        self._stats.active_connections += 1
                        self._stats.connections_created += 1
                        self._stats.acquire_wait_total_ms += _elapsed_ms(start)
                        return conn

                if timeout_ms == 0:
                    self._stats.acquire_timeout_count += 1
                    return None

                elapsed = _elapsed_ms(start)
                if elapsed >= timeout_ms:
                    self._stats.acquire_timeout_count += 1
                    self._stats.acquire_wait_total_ms += elapsed
                    return None

                self._cond.wait((timeout_ms - elapsed) / 1000)
                if self._shutdown.is_set():
                    return None

    def release(self, conn: Optional[PooledConnection]) -> None:
        """Return a connection to the pool, closing it if it cannot be reused."""
        if conn is None or self._shutdown.is_set():
            return
        with self._cond:
            found_id = 0
            for conn_id, active in self._active.items():
                if active is conn:
                    found_id = conn_id
                    del self._active[conn_id]
                    self._stats.active_connections -= 1
                    break

            if not self.config.connection_cache or not conn.is_alive():
                conn.close()
                self._stats.connections_closed += 1
                self._stats.total_connections -= 1
                self._cond.notify()
                return

            self._idle.append(
                _IdleEntry(conn, found_id or self._take_id(), time.monotonic())
            )
            self._stats.idle_connections += 1
            self._cond.notify()

    def stats(self) -> PoolStatistics:
        """Return a snapshot of the pool's counters."""
        with self._cond:
            return dataclasses.replace(self._stats)

    def shutdown(self) -> None:
        """Stop the cleanup thread and close every connection."""
        self._shutdown.set()
        with self._cond:
            self._cond.notify_all()
        if self._cleanup_thread.is_alive() and self._cleanup_thread is not threading.current_thread():
            self._cleanup_thread.join()

        with self._cond:
            while self._idle:
                entry = self._idle.popleft()
                entry.connection.close()
                self._stats.connections_closed += 1
            for conn in self._active.values():
                conn.close()
                self._stats.connections_closed += 1
            self._active.clear()
            self._stats.total_connections = 0
            self._stats.idle_connections = 0
            self._stats.active_connections = 0

    def _try_acquire_idle(self) -> Optional[PooledConnection]:
        # Caller holds the lock.
        while self._idle:
            entry = self._idle.popleft()
            self._stats.idle_connections -= 1
            if self._validate(entry.connection):
                self._active[entry.connection_id] = entry.connection
                self._stats.active_connections += 1
                entry.connection.update_last_used()
                return entry.connection
            entry.connection.close()
            self._stats.connections_closed += 1
            self._stats.total_connections -= 1
        return None

    @staticmethod
    def _validate(conn: PooledConnection) -> bool:
        if conn is None or not conn.is_alive():
            return False
        if conn.is_long_idle():
            return conn.validate_with_ping()
        return True

    def _cleanup_loop(self) -> None:
        while not self._shutdown.wait(_CLEANUP_INTERVAL):
            with self._cond:
                if self.config.idle_timeout <= 0:
                    continue
                self._close_expired(time.monotonic())

    def _close_expired(self, now: float) -> None:
        # Caller holds the lock.
        to_keep = max(self.config.min_connections - self._stats.active_connections, 0)
        remaining: Deque[_IdleEntry] = deque()
        while self._idle:
            entry = self._idle.popleft()
            idle_seconds = int(now - entry.last_released)
            if idle_seconds > self.config.idle_timeout and len(remaining) >= to_keep:
                entry.connection.close()
                self._stats.connections_closed += 1
                self._stats.total_connections -= 1
                self._stats.idle_connections -= 1
            else:
                remaining.append(entry)
        self._idle = remaining