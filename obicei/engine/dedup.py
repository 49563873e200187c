"""Dedup ledger - at most one notification per scope per calendar day."""

import logging
from typing import Any, Protocol

from obicei.utils.constants import FIRED_KEY

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str, default: Any = None) -> Any:
        ...

    def set(self, key: str, value: Any) -> None:
        ...


class DedupLedger:
    """Set of scopes already fired on the current day.

    ``roll`` must be the first step of every tick: when the date moved on
    since the last tick the whole set is cleared before any scope is
    evaluated, so a reminder due at 00:00 is never blocked by yesterday's
    entry.

    With a ``store`` the ledger survives restarts; without one it lives in
    memory (the server path).
    """

    def __init__(self, store: KeyValueStore | None = None):
        self.store = store
        saved = store.get(FIRED_KEY, {}) if store is not None else {}
        self._date: str = saved.get("date", "")
        self._fired: set[str] = set(saved.get("fired", []))

    @property
    def date(self) -> str:
        return self._date

    def roll(self, today: str) -> None:
        """Start a new day if ``today`` differs from the last seen date."""
        if today == self._date:
            return
        if self._fired:
            logger.debug(f"Day rolled over {self._date} -> {today}, clearing {len(self._fired)} keys")
        self._date = today
        self._fired.clear()
        self._persist()

    def has_fired(self, scope: str) -> bool:
        return scope in self._fired

    def mark_fired(self, scope: str) -> None:
        self._fired.add(scope)
        self._persist()

    def _persist(self) -> None:
        if self.store is not None:
            self.store.set(FIRED_KEY, {"date": self._date, "fired": sorted(self._fired)})
