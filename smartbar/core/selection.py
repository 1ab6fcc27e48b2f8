"""SuggestionList: visible suggestions plus keyboard/mouse selection index."""

from __future__ import annotations

from ..types import Suggestion, SuggestionSource

NO_SELECTION = -1


class SuggestionList:
    """Two states: hidden (no suggestions) and visible with an index.

    Index ``-1`` means nothing is selected and the raw text is authoritative.
    Arrow keys stop at the ends instead of wrapping.
    """

    def __init__(self) -> None:
        self._items: list[Suggestion] = []
        self._visible = False
        self.index = NO_SELECTION
        self.source: SuggestionSource | None = None

    @property
    def visible(self) -> bool:
        return self._visible

    @property
    def items(self) -> list[Suggestion]:
        return list(self._items) if self._visible else []

    @property
    def selected(self) -> Suggestion | None:
        if self._visible and 0 <= self.index < len(self._items):
            return self._items[self.index]
        return None

    def show(self, suggestions: list[Suggestion], source: SuggestionSource = SuggestionSource.LIVE) -> None:
        self._items = list(suggestions)
        self._visible = bool(self._items)
        self.index = NO_SELECTION
        self.source = source if self._visible else None

    def hide(self) -> None:
        self._items = []
        self._visible = False
        self.index = NO_SELECTION
        self.source = None

    def move_down(self) -> int:
        if self._visible and self.index < len(self._items) - 1:
            self.index += 1
        return self.index

    def move_up(self) -> int:
        if self._visible and self.index > NO_SELECTION:
            self.index -= 1
        return self.index

    def hover(self, index: int) -> int:
        if self._visible and 0 <= index < len(self._items):
            self.index = index
        return self.index

    def mouse_leave(self, user_has_edited: bool) -> int:
        """Pointer left the list. Keyboard navigation never calls this."""
        if self._visible and not user_has_edited:
            self.index = NO_SELECTION
        return self.index
