"""Persisted user preferences: search history, favorites and network mode."""

import asyncio
import json
import logging
import threading
from collections.abc import Callable

from .models import HISTORY_LIMIT, NetworkMode, PreferenceState
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

STORAGE_KEY = "wallet-lookup-preferences"

Listener = Callable[[PreferenceState], None]


class PreferenceStore:
    """
    Search history, favorites and network mode, written through to a
    key-value store.

    Reads always come from memory. Each mutation updates memory at once and
    schedules a write of the full document; writes run one at a time on the
    event loop, so the stored document never goes back to an older state.
    Call ``flush()`` to wait until everything changed so far is stored.
    """

    def __init__(
        self,
        backend: KeyValueStore,
        state: PreferenceState | None = None,
        key: str = STORAGE_KEY,
    ):
        self.backend = backend
        self.key = key
        self._state = state or PreferenceState()
        self._lock = threading.RLock()
        self._listeners: list[Listener] = []

        self._version = 0
        self._written_version = 0
        self._writer: asyncio.Task | None = None
        self._write_lock = asyncio.Lock()
        self.last_write_error: Exception | None = None

    @classmethod
    async def load(cls, backend: KeyValueStore, key: str = STORAGE_KEY) -> "PreferenceStore":
        """
        Rehydrate the store from the backend.

        A missing key, unreadable storage or a corrupt document all give the
        default state; startup never fails because of stored preferences.
        """
        state = PreferenceState()
        try:
            raw = await backend.get(key)
            if raw is not None:
                state = PreferenceState.from_dict(json.loads(raw))
        except Exception as e:
            logger.warning("Could not restore preferences (%s), using defaults", e)
            state = PreferenceState()

        return cls(backend, state=state, key=key)

    # -- reads ---------------------------------------------------------------

    @property
    def search_history(self) -> tuple[str, ...]:
        return tuple(self._state.search_history)

    @property
    def favorites(self) -> tuple[str, ...]:
        return tuple(self._state.favorites)

    @property
    def network_mode(self) -> NetworkMode:
        return self._state.network_mode

    @property
    def state(self) -> PreferenceState:
        """A copy of the current state."""
        with self._lock:
            return self._snapshot()

    def is_favorite(self, address: str) -> bool:
        return address in self._state.favorites

    # -- mutations -----------------------------------------------------------

    def add_favorite(self, address: str) -> None:
        with self._lock:
            if address in self._state.favorites:
                return
            self._state.favorites.insert(0, address)
            self._changed()

    def remove_favorite(self, address: str) -> None:
        with self._lock:
            if address not in self._state.favorites:
                return
            self._state.favorites.remove(address)
            self._changed()

    def toggle_favorite(self, address: str) -> bool:
        """Flip favorite membership; returns True if now a favorite."""
        with self._lock:
            if address in self._state.favorites:
                self._state.favorites.remove(address)
                now_favorite = False
            else:
                self._state.favorites.insert(0, address)
                now_favorite = True
            self._changed()
        return now_favorite

    def add_to_history(self, address: str) -> None:
        """Move (or insert) an address to the front, keeping the newest 20."""
        with self._lock:
            history = [a for a in self._state.search_history if a != address]
            history.insert(0, address)
            self._state.search_history = history[:HISTORY_LIMIT]
            self._changed()

    def clear_history(self) -> None:
        with self._lock:
            if not self._state.search_history:
                return
            self._state.search_history = []
            self._changed()

    def toggle_network_mode(self) -> NetworkMode:
        with self._lock:
            self._state.network_mode = self._state.network_mode.toggled()
            mode = self._state.network_mode
            self._changed()
        return mode

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with the new state after every change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -- persistence ---------------------------------------------------------

    def _snapshot(self) -> PreferenceState:
        return PreferenceState(
            search_history=list(self._state.search_history),
            favorites=list(self._state.favorites),
            network_mode=self._state.network_mode,
        )

    def _changed(self) -> None:
        """Must be called with the lock held."""
        self._version += 1
        self._schedule_write()
        snapshot = self._snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Preference listener %r failed", listener)

    def _schedule_write(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop: written on the next flush()
            return
        if self._writer is None or self._writer.done():
            self._writer = loop.create_task(self._drain())

    async def _drain(self) -> None:
        async with self._write_lock:
            while self._written_version < self._version:
                with self._lock:
                    version = self._version
                    payload = json.dumps(self._snapshot().to_dict())
                try:
                    await self.backend.set(self.key, payload)
                except Exception as e:
                    # Stays dirty; the next change or flush() rewrites the whole document
                    logger.warning("Could not persist preferences: %s", e)
                    self.last_write_error = e
                    return
                self.last_write_error = None
                self._written_version = version

    @property
    def dirty(self) -> bool:
        """True while some change has not been written yet."""
        return self._written_version < self._version

    async def flush(self) -> None:
        """Wait until every change made so far has been written."""
        writer = self._writer
        if writer is not None and not writer.done():
            await asyncio.shield(writer)
        if self.dirty:
            await self._drain()
