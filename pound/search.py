# Pound is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Incremental search over the rendered rows of a buffer.

The engine is driven one keystroke at a time by a prompt loop that also
passes the current query. Matches are shown by overlaying ``SEARCH_MATCH``
tags on the matched row; the overlay is undone before every new attempt so
it never outlives the keystroke that produced it.
"""

import logging
from enum import Enum
from typing import Iterable, List, Optional, Tuple, TYPE_CHECKING

from .highlight import HighlightTag

if TYPE_CHECKING:
    from .buffer import TextBuffer
    from .cursor import CursorViewport

logger = logging.getLogger("pound.search")


class SearchDirection(Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


class SearchKey(Enum):
    ESCAPE = "escape"
    ENTER = "enter"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    OTHER = "other"


class SearchEngine:
    """
    Search state: last match position, navigation direction and the saved
    highlight of the row currently carrying the match overlay.
    """

    def __init__(self) -> None:
        self.y_index = 0
        self.x_index = 0
        self.y_direction: Optional[SearchDirection] = None
        self.x_direction: Optional[SearchDirection] = None
        self.previous_highlight: Optional[Tuple[int, List[HighlightTag]]] = None

    @property
    def active(self) -> bool:
        return self.previous_highlight is not None

    def reset(self) -> None:
        """Forget the previous match and any saved overlay tags."""
        self.y_index = 0
        self.x_index = 0
        self.y_direction = None
        self.x_direction = None
        self.previous_highlight = None

    def restore_highlight(self, buffer: "TextBuffer") -> None:
        if self.previous_highlight is None:
            return
        index, highlight = self.previous_highlight
        self.previous_highlight = None
        if index < buffer.number_of_rows():
            row = buffer.get_editor_row(index)
            if len(highlight) == len(row.render):
                row.highlight = highlight

    def _set_direction(self, key: SearchKey) -> None:
        self.y_direction = None
        self.x_direction = None
        if key is SearchKey.DOWN:
            self.y_direction = SearchDirection.FORWARD
        elif key is SearchKey.UP:
            self.y_direction = SearchDirection.BACKWARD
        elif key is SearchKey.LEFT:
            self.x_direction = SearchDirection.BACKWARD
        elif key is SearchKey.RIGHT:
            self.x_direction = SearchDirection.FORWARD

    def _candidate_rows(self, cursor_row: int, number_of_rows: int) -> Iterable[int]:
        if self.y_direction is SearchDirection.FORWARD:
            return range(self.y_index + 1, number_of_rows)
        if self.y_direction is SearchDirection.BACKWARD:
            return range(min(self.y_index, number_of_rows) - 1, -1, -1)
        if self.x_direction is not None:
            return [self.y_index] if self.y_index < number_of_rows else []
        # fresh search: the cursor row first, then wrap around
        start = max(0, min(cursor_row, number_of_rows - 1))
        return list(range(start, number_of_rows)) + list(range(0, start))

    def _find_in_row(self, render: str, query: str) -> int:
        if self.x_direction is SearchDirection.FORWARD:
            return render.find(query, min(len(render), self.x_index + 1))
        if self.x_direction is SearchDirection.BACKWARD:
            return render.rfind(query, 0, self.x_index)
        return render.find(query)

    def on_key(self, buffer: "TextBuffer", cursor: "CursorViewport", query: str, key: SearchKey) -> bool:
        """
        Process one prompt keystroke.

        Args:
            buffer (TextBuffer): Buffer being searched.
            cursor (CursorViewport): Moved to the match when one is found.
            query (str): Current prompt input.
            key (SearchKey): The keystroke; ESCAPE and ENTER end the session.

        Returns:
            bool: True if a match was found and the cursor moved.
        """
        self.restore_highlight(buffer)
        if key in (SearchKey.ESCAPE, SearchKey.ENTER):
            self.reset()
            return False

        self._set_direction(key)
        number_of_rows = buffer.number_of_rows()
        if not query or number_of_rows == 0:
            return False

        for row_index in self._candidate_rows(cursor.cursor_y, number_of_rows):
            row = buffer.get_editor_row(row_index)
            index = self._find_in_row(row.render, query)
            if index < 0:
                continue

            self.previous_highlight = (row_index, list(row.highlight))
            for i in range(index, index + len(query)):
                row.highlight[i] = HighlightTag.SEARCH_MATCH
            self.y_index = row_index
            self.x_index = index
            cursor.cursor_y = row_index
            cursor.cursor_x = row.raw_x(index)
            # an offset past the end makes the next scroll() recompute it
            cursor.row_offset = number_of_rows
            logger.debug("Search '%s' matched at row %d, render column %d.", query, row_index, index)
            return True

        logger.debug("Search '%s' (%s/%s): no match.", query,
                     self.y_direction and self.y_direction.value, self.x_direction and self.x_direction.value)
        return False
