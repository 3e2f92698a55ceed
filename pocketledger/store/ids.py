"""Time-derived entity ids."""

from datetime import datetime
from typing import Callable, Iterable


class IdFactory:
    """
    Issues millisecond-timestamp ids that never repeat.

    Two ids requested within the same millisecond (a goal contribution
    creates a transaction right after the user's previous one) are bumped
    past the last issued value.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._clock = clock
        self._last = 0

    def observe(self, ids: Iterable[str]) -> None:
        """Register ids loaded from storage so new ones sort after them."""
        for value in ids:
            if value.isdigit():
                self._last = max(self._last, int(value))

    def next_id(self) -> str:
        candidate = int(self._clock().timestamp() * 1000)
        if candidate <= self._last:
            candidate = self._last + 1
        self._last = candidate
        return str(candidate)
