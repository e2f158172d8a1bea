# model/window.py

"""
ViewWindowManager bounds how many records are handed to the rendering
layer. It keeps a prefix of the full result set whose length is capped by
`limit`, and moves that cap as the user scrolls: reaching the bottom edge
of the window grows it by one batch, returning to the top edge resets it.

The position is derived only from ids that are inside the current window;
an on-screen row outside the first/last `edge_size` rows counts as MIDDLE.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Sequence, Set

from utils.logger import get_logger
from .record import Record

logger = get_logger(__name__)


class ScrollPosition(Enum):
    NEAR_TOP = "near_top"
    MIDDLE = "middle"
    NEAR_BOTTOM = "near_bottom"

    def __str__(self) -> str:
        return self.value


@dataclass(slots=True)
class ViewWindowManager:
    """
    Maintains the visible window over an ordered result set.

    Attributes:
      base_size: Initial limit, and the amount the limit grows by.
      edge_size: Number of rows at each end of the window that define
                 the NEAR_TOP and NEAR_BOTTOM positions.
      limit: Current cap on the window length.
      scroll_position: Last computed position.
      visible_record_ids: Ids of the rows currently on screen.
    """
    base_size: int = 100
    edge_size: int = 5
    limit: int = field(init=False)
    scroll_position: ScrollPosition = field(init=False, default=ScrollPosition.NEAR_TOP)
    visible_record_ids: Set[str] = field(init=False, default_factory=set)

    _records: List[Record] = field(init=False, default_factory=list)
    _window: List[Record] = field(init=False, default_factory=list)

    def __post_init__(self):
        if self.base_size <= 0:
            raise ValueError(f"base_size must be positive, got {self.base_size}")
        self.limit = self.base_size

    @property
    def window(self) -> List[Record]:
        """The visible prefix, in result set order."""
        return list(self._window)

    @property
    def records(self) -> List[Record]:
        """The full result set the window is taken from."""
        return list(self._records)

    def on_result_set_changed(self, records: Sequence[Record], is_mandatory: bool) -> bool:
        """
        Adopts a new result set. The window is recomputed when the change is
        mandatory or the list is scrolled near the top; otherwise the old
        window stays as is so an in-flight scroll is not disturbed.

        Returns:
            True if the window was recomputed.
        """
        self._records = list(records)
        if is_mandatory or self.scroll_position is ScrollPosition.NEAR_TOP:
            self._refresh_window()
            return True
        return False

    def on_item_appear(self, rid: str) -> bool:
        """Marks a row as on screen. Returns True if the window changed."""
        self.visible_record_ids.add(rid)
        return self._refresh_scroll_position()

    def on_item_disappear(self, rid: str) -> bool:
        """Marks a row as off screen. Returns True if the window changed."""
        self.visible_record_ids.discard(rid)
        return self._refresh_scroll_position()

    def reset(self) -> None:
        """Forgets the scroll state and returns to the initial limit."""
        self.visible_record_ids.clear()
        self.scroll_position = ScrollPosition.NEAR_TOP
        self.limit = self.base_size
        self._refresh_window()

    def _compute_scroll_position(self) -> ScrollPosition:
        head = self._window[: self.edge_size]
        if any(r.rid in self.visible_record_ids for r in head):
            return ScrollPosition.NEAR_TOP
        tail = self._window[-self.edge_size:]
        if any(r.rid in self.visible_record_ids for r in tail):
            return ScrollPosition.NEAR_BOTTOM
        return ScrollPosition.MIDDLE

    def _refresh_scroll_position(self) -> bool:
        position = self._compute_scroll_position()
        if position is self.scroll_position:
            return False

        self.scroll_position = position
        if position is ScrollPosition.NEAR_TOP:
            self.limit = self.base_size
        elif position is ScrollPosition.NEAR_BOTTOM:
            self.limit += self.base_size
        else:
            # Recomputing mid-list is expensive and breaks scroll gestures
            return False

        self._refresh_window()
        return True

    def _refresh_window(self) -> None:
        self._window = self._records[: self.limit]
        logger.window_changed(str(self.scroll_position), self.limit, len(self._window))

    def __len__(self) -> int:
        return len(self._window)

    def __iter__(self):
        return iter(self._window)
