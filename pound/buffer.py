# Pound is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
The text buffer: an ordered list of rows plus file identity and edit state.

Every mutating operation takes the position it applies to and returns the
cursor position that results from it, so the caller (normally
``PoundEditor``) owns the cursor while the buffer owns the text. After each
mutation the affected rows are re-rendered and re-highlighted, cascading the
multiline-comment state forward as needed.
"""

import logging
import os
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

import chardet

from .errors import NoFileNameError
from .highlight import HighlightEngine, HighlightTag, LanguageRules, detect_syntax
from .render import TAB_STOP
from .row import Row
from .status import StatusMessage

logger = logging.getLogger("pound.buffer")

READ_ONLY_MESSAGE = "Failed to edit readonly buffer"
# chardet guesses below this confidence are ignored in favour of UTF-8
MIN_ENCODING_CONFIDENCE = 0.75
CHARDET_SAMPLE_SIZE = 20 * 1024


class EditMode(Enum):
    EDITABLE = "editable"
    READ_ONLY = "read_only"


class FileType(Enum):
    FILE = "file"
    DIRECTORY = "directory"


def split_lines(text: str) -> List[str]:
    """Split file content into lines, dropping one trailing newline and any '\\r' before '\\n'."""
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def detect_encoding(data: bytes) -> str:
    """
    Guess the encoding of *data* with chardet.

    Low-confidence guesses and plain ASCII resolve to UTF-8 so that text typed
    into the buffer later can always be saved.
    """
    if not data:
        return "utf-8"
    result = chardet.detect(data[:CHARDET_SAMPLE_SIZE])
    encoding = result.get("encoding")
    confidence = result.get("confidence") or 0.0
    logger.debug(f"Chardet detected encoding '{encoding}' with confidence {confidence:.2f}.")
    if not encoding or confidence < MIN_ENCODING_CONFIDENCE or encoding.lower() == "ascii":
        return "utf-8"
    return encoding.lower()


class TextBuffer:
    """
    Ordered collection of ``Row`` objects with file identity and dirty count.

    Attributes:
        rows (List[Row]): Rows in line order.
        filename (Optional[str]): Backing file; None for a new unsaved buffer.
        edit_mode (EditMode): EDITABLE, or READ_ONLY for directory listings.
        file_type (FileType): FILE or DIRECTORY.
        dirty (int): Number of successful mutations since the last save.
        encoding (str): Encoding used when saving.
        status (StatusMessage): Receives read-only rejection messages.
        highlighter (HighlightEngine): Scanner bound to the buffer's syntax.
    """

    def __init__(
            self,
            lines: Optional[Iterable[str]] = None,
            filename: Optional[str] = None,
            syntax: Optional[LanguageRules] = None,
            edit_mode: EditMode = EditMode.EDITABLE,
            file_type: FileType = FileType.FILE,
            tab_stop: int = TAB_STOP,
            encoding: str = "utf-8",
            status: Optional[StatusMessage] = None,
            languages: Optional[Sequence[LanguageRules]] = None,
    ) -> None:
        self.tab_stop = tab_stop
        self.filename = filename
        self.edit_mode = edit_mode
        self.file_type = file_type
        self.encoding = encoding
        self.dirty = 0
        self.status = status if status is not None else StatusMessage()
        self.languages = languages
        self.rows: List[Row] = []
        for line in lines or ():
            if "\n" in line:
                raise ValueError(f"line contains a newline: {line!r}")
            self.rows.append(Row(line, tab_stop))
        self.highlighter = HighlightEngine(syntax)
        self.highlighter.highlight_all(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    def __repr__(self) -> str:
        return f"TextBuffer(filename={self.filename!r}, rows={len(self.rows)}, dirty={self.dirty})"

    # ─────────────────────── Construction ───────────────────────
    @classmethod
    def from_lines(cls, lines: Iterable[str], filename: Optional[str] = None,
                   languages: Optional[Sequence[LanguageRules]] = None, **kwargs) -> "TextBuffer":
        """Build an editable buffer, choosing the syntax from *filename*."""
        syntax = detect_syntax(filename, languages)
        return cls(lines, filename=filename, syntax=syntax, languages=languages, **kwargs)

    @classmethod
    def from_file(cls, path: str, languages: Optional[Sequence[LanguageRules]] = None,
                  **kwargs) -> "TextBuffer":
        """
        Load *path* into a new buffer.

        The encoding is detected with chardet; undecodable bytes are replaced.

        Raises:
            OSError: If the file cannot be read.
        """
        try:
            with open(path, "rb") as fh:
                data = fh.read()
        except OSError as e:
            logger.error(f"Failed to read '{path}': {e}", exc_info=True)
            raise
        encoding = detect_encoding(data)
        text = data.decode(encoding, errors="replace")
        buffer = cls.from_lines(split_lines(text), filename=path, languages=languages,
                                encoding=encoding, **kwargs)
        logger.info("Loaded '%s' (%d rows, encoding %s, syntax %s).",
                    path, len(buffer.rows), encoding, buffer.syntax_name or "none")
        return buffer

    @classmethod
    def from_directory(cls, path: str, **kwargs) -> "TextBuffer":
        """
        Synthesize a read-only listing of *path*, one entry path per row.

        Raises:
            OSError: If the directory cannot be listed.
        """
        try:
            entries = sorted(os.listdir(path))
        except OSError as e:
            logger.error(f"Failed to list directory '{path}': {e}", exc_info=True)
            raise
        lines = [os.path.join(path, name) for name in entries]
        logger.info("Listing '%s' (%d entries).", path, len(lines))
        return cls(lines, filename=None, syntax=None, edit_mode=EditMode.READ_ONLY,
                   file_type=FileType.DIRECTORY, **kwargs)

    # ─────────────────────── Read access ───────────────────────
    @property
    def syntax(self) -> Optional[LanguageRules]:
        return self.highlighter.syntax

    @property
    def syntax_name(self) -> Optional[str]:
        return self.highlighter.file_type

    @property
    def read_only(self) -> bool:
        return self.edit_mode is EditMode.READ_ONLY

    def number_of_rows(self) -> int:
        return len(self.rows)

    def get_row(self, at: int) -> str:
        return self.rows[at].raw

    def get_render(self, at: int) -> str:
        return self.rows[at].render

    def get_editor_row(self, at: int) -> Row:
        return self.rows[at]

    def row_length(self, at: int) -> int:
        """Raw length of row *at*; 0 for the position past the last row."""
        if 0 <= at < len(self.rows):
            return len(self.rows[at])
        return 0

    def visible_slice(self, at: int, column_offset: int, width: int) -> Tuple[str, List[HighlightTag]]:
        """
        Return the rendered text and tags of row *at* visible in a window
        starting at *column_offset* and *width* columns wide.
        """
        row = self.rows[at]
        length = min(max(len(row.render) - column_offset, 0), max(width, 0))
        start = column_offset if length else 0
        return row.render[start:start + length], row.highlight[start:start + length]

    # ─────────────────────── Mutation ───────────────────────
    def _writable(self) -> bool:
        if self.edit_mode is EditMode.READ_ONLY:
            self.status.set_message(READ_ONLY_MESSAGE)
            logger.debug("Rejected edit on read-only buffer.")
            return False
        return True

    def _insert_row(self, at: int, contents: str = "") -> None:
        self.rows.insert(at, Row(contents, self.tab_stop))
        self.highlighter.update_syntax(self.rows, at)

    def insert_char(self, row: int, col: int, ch: str) -> Tuple[int, int]:
        """
        Insert *ch* at (*row*, *col*), appending a row first when *row* is
        one past the last row.

        Returns:
            Tuple[int, int]: The cursor position after the inserted character.
        """
        if len(ch) != 1 or ch in "\r\n":
            raise ValueError(f"insert_char expects a single non-newline character, got {ch!r}")
        if not self._writable():
            return row, col

        row = max(0, min(row, len(self.rows)))
        if row == len(self.rows):
            self._insert_row(len(self.rows))
            self.dirty += 1
        target = self.rows[row]
        col = max(0, min(col, len(target)))
        target.insert_char(col, ch)
        self.highlighter.update_syntax(self.rows, row)
        self.dirty += 1
        return row, col + 1

    def delete_char(self, row: int, col: int) -> Tuple[int, int]:
        """
        Delete the character before (*row*, *col*).

        At column 0 the row is joined onto the previous one and the cursor
        lands at the previous row's former length. No-op at the start of the
        buffer and past the last row.
        """
        if not self._writable():
            return row, col
        if row < 0 or row >= len(self.rows):
            return row, col
        col = max(0, min(col, len(self.rows[row])))
        if row == 0 and col == 0:
            return row, col

        if col > 0:
            self.rows[row].delete_char(col - 1)
            self.highlighter.update_syntax(self.rows, row)
            new_position = (row, col - 1)
        else:
            previous = self.rows[row - 1]
            join_col = len(previous)
            current = self.rows.pop(row)
            previous.append_text(current.raw)
            self.highlighter.update_syntax(self.rows, row - 1)
            new_position = (row - 1, join_col)
            logger.debug("Joined row %d onto row %d at column %d.", row, row - 1, join_col)

        self.dirty += 1
        return new_position

    def insert_newline(self, row: int, col: int) -> Tuple[int, int]:
        """
        Break the line at (*row*, *col*).

        At column 0 an empty row is inserted before *row*; otherwise the row
        is split and its tail becomes the next row. The cursor moves to the
        start of the following row.
        """
        if not self._writable():
            return row, col

        row = max(0, min(row, len(self.rows)))
        if col <= 0 or row == len(self.rows):
            self._insert_row(row)
        else:
            target = self.rows[row]
            tail = target.split_off(min(col, len(target)))
            self.rows.insert(row + 1, Row(tail, self.tab_stop))
            self.highlighter.update_syntax(self.rows, row)
            self.highlighter.update_syntax(self.rows, row + 1)
        self.dirty += 1
        return row + 1, 0

    def set_syntax(self, syntax: Optional[LanguageRules]) -> None:
        """Switch rule table and re-highlight every row."""
        self.highlighter = HighlightEngine(syntax)
        self.highlighter.highlight_all(self.rows)
        logger.debug("Syntax set to %s.", syntax.file_type if syntax else "none")

    # ─────────────────────── Persistence ───────────────────────
    def contents(self) -> str:
        return "\n".join(row.raw for row in self.rows)

    def save(self) -> int:
        """
        Write all rows, joined by single newlines, over the backing file.

        Returns:
            int: Number of bytes written.

        Raises:
            NoFileNameError: If the buffer has no file name. Nothing changes.
            OSError: If writing fails. ``dirty`` is left untouched.
        """
        if not self.filename:
            raise NoFileNameError()
        data = self.contents().encode(self.encoding, errors="replace")
        try:
            with open(self.filename, "wb") as fh:
                fh.write(data)
        except OSError as e:
            logger.error(f"Failed to write file '{self.filename}': {e}", exc_info=True)
            raise
        self.dirty = 0
        logger.info("%d bytes written to '%s'.", len(data), self.filename)
        return len(data)

    def save_as(self, filename: str) -> int:
        """Name the buffer *filename*, re-detect its syntax and save it."""
        self.filename = filename
        self.set_syntax(detect_syntax(filename, self.languages))
        return self.save()
