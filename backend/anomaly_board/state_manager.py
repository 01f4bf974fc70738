"""
Keyed state store for per-date crowding requests.

Each mutation replaces the whole mapping with a new read-only snapshot, so
a snapshot handed to a consumer never changes underneath it.
"""

import logging
from threading import RLock
from types import MappingProxyType
from typing import Callable, Mapping

from .models import CrowdingRequestState

logger = logging.getLogger(__name__)

CrowdingSnapshot = Mapping[str, CrowdingRequestState]
StateListener = Callable[[str, CrowdingRequestState, CrowdingSnapshot], None]

IDLE_STATE = CrowdingRequestState()


class CrowdingStateStore:
    """
    Maps trigger dates to crowding request states.

    Entries persist until overwritten by a new trigger for the same date.
    Listeners are called after every ``set`` with the key, the new state and
    the new snapshot.
    """

    def __init__(self):
        self._lock = RLock()
        self._states: CrowdingSnapshot = MappingProxyType({})
        self._generations: dict[str, int] = {}
        self._listeners: list[StateListener] = []

    def get(self, key: str) -> CrowdingRequestState:
        """Get state for key, ``idle`` if it was never triggered."""
        return self._states.get(key, IDLE_STATE)

    def snapshot(self) -> CrowdingSnapshot:
        return self._states

    def set(self, key: str, state: CrowdingRequestState) -> CrowdingSnapshot:
        """
        Store state for key.

        Args:
            key: Trigger date
            state: New request state

        Returns:
            The new immutable snapshot
        """
        with self._lock:
            updated = dict(self._states)
            updated[key] = state
            self._states = MappingProxyType(updated)
            snapshot = self._states
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(key, state, snapshot)
            except Exception as e:
                logger.error(f"Crowding state listener failed for {key}: {e}")
        return snapshot

    def next_generation(self, key: str) -> int:
        """Issue the next request generation for key."""
        with self._lock:
            generation = self._generations.get(key, 0) + 1
            self._generations[key] = generation
            return generation

    def is_latest(self, key: str, generation: int) -> bool:
        with self._lock:
            return self._generations.get(key, 0) == generation

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a change listener.

        Returns:
            Callable that removes the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe
