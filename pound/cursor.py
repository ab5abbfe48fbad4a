# Pound is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Cursor position and viewport geometry."""

import logging
from enum import Enum
from typing import NamedTuple, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .buffer import TextBuffer

logger = logging.getLogger("pound.cursor")


class Direction(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    HOME = "home"
    END = "end"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"


class CursorSnapshot(NamedTuple):
    cursor_x: int
    cursor_y: int
    row_offset: int
    column_offset: int
    render_x: int


class CursorViewport:
    """
    Cursor in raw coordinates plus the visible window over the buffer.

    ``cursor_y`` ranges over ``[0, number_of_rows]``; the value
    ``number_of_rows`` is the position past the last line where typing
    appends a new row. ``render_x`` is derived from ``cursor_x`` by
    ``scroll()`` and is never authoritative.
    """

    def __init__(self, screen_columns: int, screen_rows: int) -> None:
        self.cursor_x = 0
        self.cursor_y = 0
        self.render_x = 0
        self.row_offset = 0
        self.column_offset = 0
        self.screen_columns = max(1, screen_columns)
        self.screen_rows = max(1, screen_rows)

    def __repr__(self) -> str:
        return (f"CursorViewport(cursor=({self.cursor_y},{self.cursor_x}), "
                f"offset=({self.row_offset},{self.column_offset}))")

    def resize(self, screen_columns: int, screen_rows: int) -> None:
        self.screen_columns = max(1, screen_columns)
        self.screen_rows = max(1, screen_rows)
        logger.debug("Viewport resized to %dx%d.", self.screen_columns, self.screen_rows)

    def set_position(self, row: int, col: int) -> None:
        self.cursor_y = row
        self.cursor_x = col

    def snapshot(self) -> CursorSnapshot:
        return CursorSnapshot(self.cursor_x, self.cursor_y, self.row_offset, self.column_offset, self.render_x)

    def restore(self, snapshot: CursorSnapshot) -> None:
        (self.cursor_x, self.cursor_y, self.row_offset,
         self.column_offset, self.render_x) = snapshot

    def _move(self, direction: Direction, buffer: "TextBuffer") -> None:
        number_of_rows = buffer.number_of_rows()

        if direction is Direction.UP:
            self.cursor_y = max(self.cursor_y - 1, 0)
        elif direction is Direction.DOWN:
            if self.cursor_y < number_of_rows - 1:
                self.cursor_y += 1
        elif direction is Direction.LEFT:
            if self.cursor_x > 0:
                self.cursor_x -= 1
            elif self.cursor_y > 0:
                self.cursor_y -= 1
                self.cursor_x = buffer.row_length(self.cursor_y)
        elif direction is Direction.RIGHT:
            row_length = buffer.row_length(self.cursor_y)
            if self.cursor_x < row_length:
                self.cursor_x += 1
            elif self.cursor_x == row_length and self.cursor_y < number_of_rows - 1:
                self.cursor_y += 1
                self.cursor_x = 0
        elif direction is Direction.HOME:
            self.cursor_x = 0
        elif direction is Direction.END:
            if self.cursor_y < number_of_rows:
                self.cursor_x = buffer.row_length(self.cursor_y)

        self.cursor_x = max(0, min(self.cursor_x, buffer.row_length(self.cursor_y)))

    def move_cursor(self, direction: Direction, buffer: "TextBuffer") -> None:
        """
        Apply one directional move request.

        PAGE_UP jumps to the top of the viewport and PAGE_DOWN to its bottom
        row (limited to the last row); both then replay UP or DOWN
        ``screen_rows`` times so the usual clamping applies.
        """
        if direction in (Direction.PAGE_UP, Direction.PAGE_DOWN):
            if direction is Direction.PAGE_UP:
                self.cursor_y = self.row_offset
                step = Direction.UP
            else:
                last_row = max(buffer.number_of_rows() - 1, 0)
                self.cursor_y = min(self.row_offset + self.screen_rows - 1, last_row)
                step = Direction.DOWN
            for _ in range(self.screen_rows):
                self._move(step, buffer)
        else:
            self._move(direction, buffer)
        logger.debug("cursor %s -> (%d,%d)", direction.value, self.cursor_y, self.cursor_x)

    def scroll(self, buffer: "TextBuffer") -> None:
        """
        Recompute ``render_x`` and the smallest scroll change that keeps the
        cursor inside the window. Run once per rendered frame.
        """
        self.render_x = 0
        if self.cursor_y < buffer.number_of_rows():
            self.render_x = buffer.get_editor_row(self.cursor_y).render_x(self.cursor_x)

        self.row_offset = min(self.row_offset, self.cursor_y)
        if self.cursor_y >= self.row_offset + self.screen_rows:
            self.row_offset = self.cursor_y - self.screen_rows + 1

        self.column_offset = min(self.column_offset, self.render_x)
        if self.render_x >= self.column_offset + self.screen_columns:
            self.column_offset = self.render_x - self.screen_columns + 1

    def screen_position(self) -> Tuple[int, int]:
        """Terminal cursor position as (column, row) relative to the viewport."""
        return self.render_x - self.column_offset, self.cursor_y - self.row_offset
