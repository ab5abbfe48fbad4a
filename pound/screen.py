# Pound is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Frame painting onto a curses window.

``DrawScreen`` only reads editor state; the caller owns the terminal (raw
mode, ``initscr``/``endwin``) and passes the window in. Tests pass a
``MagicMock`` in its place.
"""

import curses
import logging
from typing import Any, Dict, Optional, TYPE_CHECKING

from wcwidth import wcswidth, wcwidth

from . import __version__
from .highlight import HighlightTag, color_segments

if TYPE_CHECKING:
    from .editor import PoundEditor

logger = logging.getLogger("pound.screen")

WELCOME_MESSAGE = f"Pound Editor --- Version {__version__}"

COLOR_NAMES: Dict[str, int] = {
    "default": -1,
    "black": curses.COLOR_BLACK,
    "red": curses.COLOR_RED,
    "green": curses.COLOR_GREEN,
    "yellow": curses.COLOR_YELLOW,
    "blue": curses.COLOR_BLUE,
    "magenta": curses.COLOR_MAGENTA,
    "cyan": curses.COLOR_CYAN,
    "white": curses.COLOR_WHITE,
}


# ─────────────────────── Width helpers ───────────────────────
def char_width(ch: str) -> int:
    """Terminal cells taken by *ch*; non-printable characters count as one."""
    w = wcwidth(ch)
    return w if w >= 0 else 1


def string_width(s: str) -> int:
    width = wcswidth(s)
    if width >= 0:
        return width
    return sum(char_width(ch) for ch in s)


def truncate_string(s: str, max_width: int) -> str:
    """
    Return *s* clipped to visual width *max_width*.

    Wide characters (e.g. CJK) are never split; a character that would
    overflow the limit is dropped together with everything after it.
    """
    result = []
    consumed = 0
    for ch in s:
        w = char_width(ch)
        if consumed + w > max_width:
            break
        result.append(ch)
        consumed += w
    return "".join(result)


def init_colors(config: Optional[Dict[str, Any]]) -> Dict[HighlightTag, int]:
    """
    Build the highlight tag -> curses attribute map from ``[colors]``.

    Needs an initialised terminal (call after ``curses.initscr``). Unknown
    color names fall back to the terminal default; terminals without color
    support get plain attributes, with search matches in reverse video.
    """
    if not curses.has_colors():
        logger.warning("Terminal has no color support. Using default attributes.")
        colors = {tag: curses.A_NORMAL for tag in HighlightTag}
        colors[HighlightTag.SEARCH_MATCH] = curses.A_REVERSE
        return colors

    curses.start_color()
    curses.use_default_colors()
    user_colors = (config or {}).get("colors", {})

    colors: Dict[HighlightTag, int] = {}
    for pair_id, tag in enumerate(HighlightTag, start=1):
        name = str(user_colors.get(tag.value, "default")).lower()
        fg = COLOR_NAMES.get(name)
        if fg is None:
            logger.warning("Unknown color '%s' for %s - using default.", name, tag.value)
            fg = -1
        try:
            curses.init_pair(pair_id, fg, -1)
            colors[tag] = curses.color_pair(pair_id)
            logger.debug(f"Color '{tag.value}': {name} -> pair {pair_id}")
        except curses.error as e:
            logger.error(f"Failed to initialise color for '{tag.value}': {e}")
            colors[tag] = curses.A_NORMAL
    return colors


class DrawScreen:
    """
    Paints one frame of a ``PoundEditor``: text rows, status bar, message bar,
    then moves the terminal cursor.

    Args:
        editor (PoundEditor): Session to draw.
        window: curses window (``stdscr``) to paint on.
        colors (dict | None): HighlightTag -> curses attribute, usually from
            ``init_colors``. Missing tags are drawn with ``A_NORMAL``.
    """

    def __init__(self, editor: "PoundEditor", window: Any,
                 colors: Optional[Dict[HighlightTag, int]] = None) -> None:
        self.editor = editor
        self.window = window
        self.colors = colors or {}

    def _attr(self, tag: HighlightTag) -> int:
        return self.colors.get(tag, curses.A_NORMAL)

    def _draw_welcome(self, screen_row: int, columns: int) -> None:
        welcome = truncate_string(WELCOME_MESSAGE, columns)
        padding = (columns - string_width(welcome)) // 2
        line = ("~" + " " * (padding - 1) if padding else "") + welcome
        self.window.addstr(screen_row, 0, line)

    def _draw_row(self, screen_row: int, file_row: int, columns: int) -> None:
        cursor = self.editor.cursor
        text, tags = self.editor.buffer.visible_slice(file_row, cursor.column_offset, columns)
        x = 0
        for segment, tag in color_segments(text, tags):
            clipped = truncate_string(segment, columns - x)
            if not clipped:
                break
            self.window.addstr(screen_row, x, clipped, self._attr(tag))
            x += string_width(clipped)

    def _draw_rows(self) -> None:
        buffer = self.editor.buffer
        cursor = self.editor.cursor
        columns, rows = cursor.screen_columns, cursor.screen_rows
        for i in range(rows):
            self.window.move(i, 0)
            self.window.clrtoeol()
            file_row = i + cursor.row_offset
            if file_row < buffer.number_of_rows():
                self._draw_row(i, file_row, columns)
            elif buffer.number_of_rows() == 0 and i == rows // 3:
                self._draw_welcome(i, columns)
            else:
                self.window.addstr(i, 0, "~")

    def _draw_status_bar(self) -> None:
        columns = self.editor.cursor.screen_columns
        y = self.editor.cursor.screen_rows
        left, right = self.editor.status_bar()
        left = truncate_string(left, columns)
        gap = columns - string_width(left) - string_width(right)
        if gap >= 0:
            line = left + " " * gap + right
        else:
            line = left + " " * (columns - string_width(left))
        self.window.move(y, 0)
        self.window.clrtoeol()
        self.window.addstr(y, 0, line, curses.A_REVERSE)

    def _draw_message_bar(self) -> None:
        columns = self.editor.cursor.screen_columns
        y = self.editor.cursor.screen_rows + 1
        self.window.move(y, 0)
        self.window.clrtoeol()
        message = self.editor.status.message()
        if message:
            # the bottom-right cell cannot be written without a curses error
            self.window.addstr(y, 0, truncate_string(message, columns - 1))

    def _position_cursor(self) -> None:
        x, y = self.editor.cursor.screen_position()
        self.window.move(y, x)

    def draw(self) -> bool:
        """
        Paint a full frame.

        Returns:
            bool: False if curses reported an error; the error is logged and
                shown in the message bar on the next frame.
        """
        try:
            self.editor.scroll()
            self._draw_rows()
            self._draw_status_bar()
            self._draw_message_bar()
            self._position_cursor()
            self.window.refresh()
        except curses.error as e:
            logger.error(f"Curses error in DrawScreen.draw(): {e}", exc_info=True)
            self.editor.status.set_message(f"Draw error: {str(e)[:80]}")
            return False
        return True
