"""In-memory registry of blocked suffixes with time-windowed open/close."""

import logging
import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional, Union

from .common import audit_log, parse_non_negative_int
from .exceptions import InvalidMinutesError, InvalidSuffixError, PersistenceError
from .hosts import HostRecord, HostStatus
from .store import HostStore

logger = logging.getLogger(__name__)


# =============================================================================
# READER/WRITER LOCK
# =============================================================================


class ReadWriteLock:
    """Shared/exclusive lock built on a condition variable.

    Any number of readers may hold the lock together; a writer holds it
    alone. Waiting writers block new readers so mutations are not starved
    by a steady stream of validations.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


# =============================================================================
# REGISTRY
# =============================================================================


class Registry:
    """Ordered table of host records guarded by a reader/writer lock.

    Validations share the lock; add/open/close take it exclusively. After
    each mutation the full record set is written to the store, outside the
    exclusive section so readers are not stalled on file I/O.
    """

    def __init__(
        self,
        store: Optional[HostStore] = None,
        clock: Callable[[], int] = time.time_ns,
    ) -> None:
        """
        Initialize an empty registry.

        Args:
            store: Optional snapshot store. Without one nothing is persisted.
            clock: Returns the current time in nanoseconds since the epoch
        """
        self._store = store
        self._clock = clock
        self._hosts: List[HostRecord] = []
        self._lock = ReadWriteLock()
        self._save_lock = threading.Lock()

    # -------------------------------------------------------------------------
    # persistence
    # -------------------------------------------------------------------------

    def load(self) -> int:
        """
        Replace the in-memory records with the stored snapshot.

        Load failures are logged and leave the registry empty.

        Returns:
            Number of records loaded
        """
        records: List[HostRecord] = []
        if self._store is not None:
            try:
                records = self._store.load()
            except PersistenceError as e:
                logger.error(f"Could not load hosts, starting empty: {e}")
                records = []

        with self._lock.write_locked():
            self._hosts = records
        logger.info(f"Registry loaded with {len(records)} host(s)")
        return len(records)

    def _copy_records(self) -> List[HostRecord]:
        with self._lock.read_locked():
            return [HostRecord(h.suffix, h.close_time) for h in self._hosts]

    def save(self) -> bool:
        """
        Write the current record set to the store.

        Saves are serialised and each one snapshots the newest state, so
        the file always ends with the latest mutation. Failures are logged;
        the in-memory state stays authoritative.

        Returns:
            True if the snapshot was written
        """
        if self._store is None:
            return False

        with self._save_lock:
            records = self._copy_records()
            try:
                self._store.save(records)
            except PersistenceError as e:
                logger.error(f"Could not save hosts: {e}")
                return False
        return True

    # -------------------------------------------------------------------------
    # mutations
    # -------------------------------------------------------------------------

    def add(self, suffix: str) -> None:
        """
        Append a new closed record for suffix.

        Duplicates are allowed; open/close only ever touch the first one.

        Raises:
            InvalidSuffixError: If suffix is empty
        """
        if not isinstance(suffix, str) or not suffix.strip():
            raise InvalidSuffixError("suffix must be a non-empty string")

        with self._lock.write_locked():
            self._hosts.append(HostRecord(suffix))

        logger.info(f"add {suffix}")
        audit_log("ADD", suffix)
        self.save()

    def open(self, suffix: str, minutes: Union[int, str]) -> bool:
        """
        Open the first record whose suffix equals suffix for minutes.

        Args:
            suffix: Exact suffix of the record to open
            minutes: Length of the open window, a non-negative integer

        Returns:
            True if a record was opened, False if none matched

        Raises:
            InvalidMinutesError: If minutes is not a non-negative integer
        """
        try:
            mins = parse_non_negative_int(minutes, "minutes")
        except ValueError as e:
            raise InvalidMinutesError(str(e))

        with self._lock.write_locked():
            host = self._find(suffix)
            if host is not None:
                host.open_for(mins, self._clock())

        if host is None:
            logger.debug(f"open {suffix}: no such host")
            return False

        logger.info(f"open {suffix} for {mins} min")
        audit_log("OPEN", f"{suffix} {mins}m")
        self.save()
        return True

    def close(self, suffix: str) -> bool:
        """
        Close the first record whose suffix equals suffix.

        Returns:
            True if a record was closed, False if none matched
        """
        with self._lock.write_locked():
            host = self._find(suffix)
            if host is not None:
                host.close()

        if host is None:
            logger.debug(f"close {suffix}: no such host")
            return False

        logger.info(f"close {suffix}")
        audit_log("CLOSE", suffix)
        self.save()
        return True

    def _find(self, suffix: str) -> Optional[HostRecord]:
        # caller holds the lock
        for host in self._hosts:
            if host.suffix == suffix:
                return host
        return None

    # -------------------------------------------------------------------------
    # queries
    # -------------------------------------------------------------------------

    def validate(self, hostname: str) -> bool:
        """
        Decide whether traffic to hostname is allowed.

        Any matching record that is currently closed blocks the host,
        regardless of other open matches.

        Returns:
            True if allowed, False if blocked
        """
        with self._lock.read_locked():
            now = self._clock()
            for host in self._hosts:
                if host.matches(hostname) and host.is_closed(now):
                    return False
        return True

    def snapshot(self) -> List[HostStatus]:
        """Current records with their derived state, in registry order."""
        with self._lock.read_locked():
            now = self._clock()
            return [
                HostStatus(
                    suffix=h.suffix,
                    closed=h.is_closed(now),
                    mins_remaining=h.mins_remaining(now),
                )
                for h in self._hosts
            ]

    def records(self) -> List[HostRecord]:
        """Copies of the raw records, in registry order."""
        return self._copy_records()

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._hosts)
