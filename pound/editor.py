# Pound is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Editing session: one buffer, its cursor, search state and status message.

``PoundEditor`` is what a key loop talks to. It turns decoded keys into
buffer mutations and cursor moves, and turns buffer-level exceptions into
status-bar messages so that nothing below it has to know about the screen.
"""

import logging
import os
from typing import Any, Dict, List, Optional, Tuple

from .buffer import FileType, TextBuffer
from .config import get_tab_stop, load_config
from .cursor import CursorSnapshot, CursorViewport, Direction
from .errors import NoFileNameError
from .highlight import BUILTIN_LANGUAGES, LanguageRules, rules_from_config
from .search import SearchEngine, SearchKey
from .status import StatusMessage

logger = logging.getLogger("pound.editor")

# status bar + message bar
RESERVED_ROWS = 2
SEARCH_PROMPT = "Search: {} (Use ESC / Arrows / Enter)"


class PoundEditor:
    """
    Editing session facade.

    Args:
        config (dict | None): Merged configuration; ``load_config()`` is used
            when omitted.
        screen_size (Tuple[int, int]): Terminal size as (columns, rows). Two
            rows are kept for the status and message bars.

    Raises:
        RuleTableError: If a ``[syntax.*]`` config section is malformed.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 screen_size: Tuple[int, int] = (80, 24)) -> None:
        self.config = config if config is not None else load_config()
        editor_config = self.config.get("editor", {})
        self.tab_stop = get_tab_stop(self.config)
        self.status = StatusMessage(
            editor_config.get("help_message"),
            timeout=float(editor_config.get("status_timeout", 5.0)),
        )
        # user tables come first so they can take over a built-in extension
        self.languages: List[LanguageRules] = (
            rules_from_config(self.config.get("syntax", {})) + list(BUILTIN_LANGUAGES)
        )

        columns, rows = screen_size
        self.cursor = CursorViewport(columns, rows - RESERVED_ROWS)
        self.search = SearchEngine()
        self._search_snapshot: Optional[CursorSnapshot] = None
        self.buffer = self._new_buffer()
        logger.debug("PoundEditor initialised: %dx%d, tab_stop=%d, %d rule tables.",
                     columns, rows, self.tab_stop, len(self.languages))

    def _new_buffer(self, lines=None, filename: Optional[str] = None) -> TextBuffer:
        return TextBuffer.from_lines(lines or [], filename=filename, languages=self.languages,
                                     tab_stop=self.tab_stop, status=self.status)

    # ─────────────────────── Files ───────────────────────
    def open_file(self, path: str) -> bool:
        """
        Replace the current buffer with *path*.

        A regular file is loaded, a directory becomes a read-only listing of
        its entries and a path that does not exist yet becomes an empty buffer
        with that name, created on the first save.

        Returns:
            bool: True if the buffer was replaced, False if reading failed
                (the error is shown in the status bar).
        """
        logger.debug(f"open_file called with '{path}'")
        try:
            if os.path.isdir(path):
                buffer = TextBuffer.from_directory(path, languages=self.languages,
                                                  tab_stop=self.tab_stop, status=self.status)
            elif os.path.exists(path):
                buffer = TextBuffer.from_file(path, languages=self.languages,
                                              tab_stop=self.tab_stop, status=self.status)
            else:
                buffer = self._new_buffer(filename=path)
                logger.info("'%s' does not exist yet; editing a new buffer.", path)
        except OSError as e:
            self.status.set_message(f"Error opening '{os.path.basename(path)}': {e.strerror or e}")
            return False

        self.buffer = buffer
        self.cursor.set_position(0, 0)
        self.cursor.row_offset = 0
        self.cursor.column_offset = 0
        self._search_snapshot = None
        self.search.reset()
        return True

    def _write(self, filename: Optional[str] = None) -> bool:
        try:
            written = self.buffer.save_as(filename) if filename else self.buffer.save()
        except NoFileNameError:
            self.status.set_message("Save aborted: no file name")
            logger.debug("Save requested for an unnamed buffer.")
            return False
        except OSError as e:
            self.status.set_message(f"Error saving file: {e.strerror or e}")
            return False
        self.status.set_message(f"{written} bytes written to disk")
        return True

    def save(self) -> bool:
        """
        Write the buffer and report the outcome in the status bar.

        Returns:
            bool: True if the file was written.
        """
        return self._write()

    def save_as(self, filename: str) -> bool:
        """Rename the buffer to *filename*, re-detect its syntax and save."""
        if not filename:
            self.status.set_message("Save aborted: no file name")
            return False
        return self._write(filename)

    # ─────────────────────── Editing ───────────────────────
    def insert_char(self, ch: str) -> None:
        self.cursor.cursor_y, self.cursor.cursor_x = self.buffer.insert_char(
            self.cursor.cursor_y, self.cursor.cursor_x, ch)

    def insert_newline(self) -> None:
        self.cursor.cursor_y, self.cursor.cursor_x = self.buffer.insert_newline(
            self.cursor.cursor_y, self.cursor.cursor_x)

    def delete_char(self) -> None:
        """Backspace."""
        self.cursor.cursor_y, self.cursor.cursor_x = self.buffer.delete_char(
            self.cursor.cursor_y, self.cursor.cursor_x)

    def delete_forward(self) -> None:
        """Delete key: step right, then backspace."""
        if not self.buffer.read_only:
            before = (self.cursor.cursor_y, self.cursor.cursor_x)
            self.cursor.move_cursor(Direction.RIGHT, self.buffer)
            if (self.cursor.cursor_y, self.cursor.cursor_x) == before:
                return
        # on a read-only buffer this only posts the rejection message
        self.delete_char()

    def handle_enter(self) -> bool:
        """
        Open the entry under the cursor in a directory listing, otherwise
        break the line.

        Returns:
            bool: True if a listing entry was opened.
        """
        if self.buffer.file_type is FileType.DIRECTORY:
            if self.cursor.cursor_y < self.buffer.number_of_rows():
                return self.open_file(self.buffer.get_row(self.cursor.cursor_y))
            return False
        self.insert_newline()
        return False

    def move_cursor(self, direction: Direction) -> None:
        self.cursor.move_cursor(direction, self.buffer)

    # ─────────────────────── Search ───────────────────────
    def start_search(self) -> str:
        """Begin a search session; returns the prompt text to show."""
        self._search_snapshot = self.cursor.snapshot()
        self.search.restore_highlight(self.buffer)
        self.search.reset()
        return SEARCH_PROMPT

    def search_keypress(self, query: str, key: SearchKey) -> bool:
        """
        Feed one prompt keystroke to the search engine.

        ESC ends the session and puts the cursor back where the search
        started; ENTER ends it and leaves the cursor on the last match.
        """
        if self._search_snapshot is None:
            self._search_snapshot = self.cursor.snapshot()
        found = self.search.on_key(self.buffer, self.cursor, query, key)
        if key is SearchKey.ESCAPE:
            self.cursor.restore(self._search_snapshot)
            self._search_snapshot = None
        elif key is SearchKey.ENTER:
            self._search_snapshot = None
        return found

    # ─────────────────────── Viewport ───────────────────────
    def scroll(self) -> None:
        self.cursor.scroll(self.buffer)

    def resize(self, columns: int, rows: int) -> None:
        self.cursor.resize(columns, rows - RESERVED_ROWS)

    @property
    def screen_columns(self) -> int:
        return self.cursor.screen_columns

    @property
    def screen_rows(self) -> int:
        return self.cursor.screen_rows

    def status_bar(self) -> Tuple[str, str]:
        """Left and right halves of the status bar."""
        name = os.path.basename(self.buffer.filename) if self.buffer.filename else "[No Name]"
        modified = "(modified)" if self.buffer.dirty > 0 else ""
        number_of_rows = self.buffer.number_of_rows()
        left = f"{name} {modified} -- {number_of_rows} lines"
        right = f"{self.buffer.syntax_name or 'no ft'} | {self.cursor.cursor_y + 1}/{number_of_rows}"
        return left, right
