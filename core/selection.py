"""
Selection model: which entry of the Filtered View is current.

The index is always inside `[0, len(view) - 1]`, or None when the view is
empty. Movement clamps at both ends; it never wraps.
"""
from typing import Optional, Sequence


class SelectionModel:
    """A clamped cursor over a sequence of node ids."""

    def __init__(self, view: Sequence[str] = ()):
        self._view: Sequence[str] = view
        self._index: Optional[int] = 0 if view else None

    @property
    def index(self) -> Optional[int]:
        return self._index

    @property
    def view(self) -> Sequence[str]:
        return self._view

    def _clamp(self, i: int) -> Optional[int]:
        if not self._view:
            return None
        return max(0, min(i, len(self._view) - 1))

    def current(self) -> Optional[str]:
        """The selected node id, or None when the view is empty."""
        if self._index is None:
            return None
        return self._view[self._index]

    def move_by(self, delta: int) -> Optional[str]:
        """Move the cursor by `delta`, holding at the first/last entry."""
        if self._index is not None:
            self._index = self._clamp(self._index + delta)
        return self.current()

    def set_index(self, i: int) -> Optional[str]:
        """Jump to `i`, clamped into range. No-op on an empty view."""
        self._index = self._clamp(i)
        return self.current()

    def rebind(self, view: Sequence[str]) -> Optional[str]:
        """
        Point the selection at a new view.

        Keeps the previously selected id when it is still present,
        otherwise falls back to the first entry (or empty).
        """
        previous = self.current()
        self._view = view

        if previous is not None:
            try:
                self._index = list(view).index(previous)
                return previous
            except ValueError:
                pass

        self._index = 0 if view else None
        return self.current()

    def __repr__(self) -> str:
        return f"SelectionModel(index={self._index}, size={len(self._view)})"
