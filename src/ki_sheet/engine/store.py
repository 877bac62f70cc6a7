"""The single shared character snapshot.

Every change replaces the snapshot wholesale: the new value is normalized
over the default schema, persisted (unless told not to), and then every
subscriber is notified with the new state. Readers get copies, so nothing
outside the store can mutate the live snapshot.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from typing import Any, Protocol

from ki_sheet.models.character import CharacterState, normalize_state


log = logging.getLogger(__name__)

Subscriber = Callable[[CharacterState], None]
Updater = Callable[[CharacterState], Any]


class SheetStorage(Protocol):
    def load_current(self) -> Any: ...

    def save_current(self, state: dict[str, Any]) -> None: ...


class SheetStore:
    """Owns the live CharacterState; get/set/subscribe."""

    __slots__ = ("_state", "_storage", "_subscribers", "_version")

    def __init__(
        self,
        initial: CharacterState | None = None,
        storage: SheetStorage | None = None,
    ) -> None:
        self._state = normalize_state(initial)
        self._storage = storage
        self._subscribers: list[Subscriber] = []
        self._version = 0

    @property
    def version(self) -> int:
        """Bumped on every replacement."""
        return self._version

    def get(self) -> CharacterState:
        """A deep copy of the current snapshot."""
        return copy.deepcopy(self._state)

    def subscribe(self, fn: Subscriber) -> Callable[[], None]:
        """Register *fn*; returns a callable that unsubscribes it."""
        self._subscribers.append(fn)

        def unsubscribe() -> None:
            if fn in self._subscribers:
                self._subscribers.remove(fn)

        return unsubscribe

    def set(
        self,
        next_state: CharacterState | dict | Updater,
        *,
        skip_save: bool = False,
    ) -> CharacterState:
        """Replace the snapshot.

        *next_state* may be a state, a plain dict, or a callable taking a
        copy of the current state and returning either.
        """
        if callable(next_state):
            next_state = next_state(self.get())
        self._replace(normalize_state(next_state), save=not skip_save)
        return self.get()

    def load(self) -> CharacterState:
        """Load the persisted sheet, or defaults if there is none."""
        raw = self._storage.load_current() if self._storage is not None else None
        if raw is None:
            log.info("No saved sheet found; starting from defaults")
        elif not isinstance(raw, dict):
            log.warning("Saved sheet is not an object; starting from defaults")
        self._replace(normalize_state(raw), save=True)
        return self.get()

    def reset(self) -> CharacterState:
        self._replace(CharacterState(), save=True)
        return self.get()

    def _replace(self, state: CharacterState, *, save: bool) -> None:
        self._state = state
        self._version += 1
        if save:
            self._persist()
        snapshot = self.get()
        for fn in list(self._subscribers):
            fn(snapshot)

    def _persist(self) -> None:
        if self._storage is None:
            return
        try:
            self._storage.save_current(self._state.to_dict())
        except OSError as exc:
            log.error("Could not save sheet: %s", exc)
