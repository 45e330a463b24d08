"""
Keyboard selection over the current match list.

The navigator only knows positions and how many of them are selectable.
It never holds Items, so it cannot go stale when the list underneath it
changes shape; the console re-sizes it instead.

    active_index == -1   nothing highlighted
    0 <= active_index    highlighted row
"""

from enum import Enum
from typing import Optional


class NavKey(str, Enum):
    """Key identifiers the console reacts to (DOM `KeyboardEvent.key` values)."""
    DOWN = "ArrowDown"
    UP = "ArrowUp"
    ENTER = "Enter"
    ESCAPE = "Escape"


class SelectionNavigator:
    """State machine for the highlighted row."""

    def __init__(self, count: int = 0):
        self._count = max(0, count)
        self._active = -1

    @property
    def active_index(self) -> int:
        return self._active

    @property
    def count(self) -> int:
        return self._count

    def reset(self, count: Optional[int] = None) -> None:
        """Clear the highlight; optionally adopt a new match count."""
        if count is not None:
            self._count = max(0, count)
        self._active = -1

    def resize(self, count: int) -> None:
        """Adopt a new match count, keeping the highlight if still in range."""
        self._count = max(0, count)
        if self._active >= self._count:
            self._active = -1

    def next(self) -> int:
        if self._count == 0:
            self._active = -1
        else:
            self._active = (self._active + 1) % self._count
        return self._active

    def prev(self) -> int:
        if self._count == 0:
            self._active = -1
        elif self._active <= 0:
            self._active = self._count - 1
        else:
            self._active -= 1
        return self._active

    def commit(self) -> Optional[int]:
        """
        Take the highlighted position, if any, and reset.

        Returns:
            The committed index, or None if nothing selectable is highlighted
        """
        index = self._active
        if index < 0 or index >= self._count:
            return None
        self._active = -1
        return index

    def handle_key(self, key: str) -> Optional[int]:
        """
        Apply a key press.

        Returns:
            The committed index on Enter, otherwise None
        """
        if key == NavKey.DOWN.value:
            self.next()
        elif key == NavKey.UP.value:
            self.prev()
        elif key == NavKey.ENTER.value:
            return self.commit()
        elif key == NavKey.ESCAPE.value:
            self.reset()
        return None
