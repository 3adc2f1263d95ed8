"""Non-blocking store guards and the readiness flag.

Readers never wait: ``try_hold`` either takes the guard immediately or raises
``BusyError``. The producer uses ``hold`` and may block for as long as a rescan
takes; readers observing that simply get ``Busy`` and retry.
"""

import threading
from collections.abc import Generator, Iterable
from contextlib import ExitStack, contextmanager

import structlog

from db.enums import LedgerStore
from rewardledger.services.errors import BusyError

logger = structlog.get_logger(__name__)

BUSY_MESSAGE: str = "Rewards database is busy..Try it again!"


class NonBlockingGuard:
    """Mutual exclusion for one store; readers only ever try-acquire."""

    def __init__(self, store: LedgerStore) -> None:
        self.store: LedgerStore = store
        self._lock = threading.Lock()

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def try_hold(self) -> Generator[None, None, None]:
        if not self._lock.acquire(blocking=False):
            logger.debug("guard_busy", store=self.store.value)
            raise BusyError(BUSY_MESSAGE)
        try:
            yield
        finally:
            self._lock.release()

    @contextmanager
    def hold(self, timeout: float | None = None) -> Generator[None, None, None]:
        """Blocking acquire for the write side."""
        acquired: bool = (
            self._lock.acquire() if timeout is None else self._lock.acquire(timeout=timeout)
        )
        if not acquired:
            raise BusyError(BUSY_MESSAGE)
        try:
            yield
        finally:
            self._lock.release()


class GuardSet:
    """One guard per ledger store."""

    def __init__(self) -> None:
        self._guards: dict[LedgerStore, NonBlockingGuard] = {
            store: NonBlockingGuard(store) for store in LedgerStore
        }

    def __getitem__(self, store: LedgerStore) -> NonBlockingGuard:
        return self._guards[store]

    @contextmanager
    def try_hold(self, *stores: LedgerStore) -> Generator[None, None, None]:
        """Try-acquire ``stores`` in order; release everything taken on failure."""
        with ExitStack() as stack:
            for store in stores:
                stack.enter_context(self._guards[store].try_hold())
            yield

    @contextmanager
    def hold(self, stores: Iterable[LedgerStore]) -> Generator[None, None, None]:
        # fixed enum order so two writers can't deadlock
        wanted: set[LedgerStore] = set(stores)
        ordered: list[LedgerStore] = [s for s in LedgerStore if s in wanted]
        with ExitStack() as stack:
            for store in ordered:
                stack.enter_context(self._guards[store].hold())
            yield


class ReadinessFlag:
    """Producer-maintained "ledger is caught up with the network" signal."""

    def __init__(self, synced: bool = False) -> None:
        self._event = threading.Event()
        if synced:
            self._event.set()

    def is_synced(self) -> bool:
        return self._event.is_set()

    def set(self, synced: bool) -> None:
        if synced:
            self._event.set()
        else:
            self._event.clear()
