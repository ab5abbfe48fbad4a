# Pound is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""A single buffer line: raw text, rendered text and highlight tags."""

from typing import List

from .highlight import HighlightTag
from .render import TAB_STOP, raw_to_render_col, render_line, render_to_raw_col


class Row:
    """
    One line of text with its raw, rendered and highlight-tagged forms.

    Every raw mutation re-renders the row immediately and resets the tags to
    ``NORMAL`` so a stale tag array is never paired with new rendered
    content. The owning buffer's highlighter then recomputes the real tags.

    Attributes:
        raw (str): Raw content, no embedded newlines.
        render (str): ``raw`` with tabs expanded.
        highlight (List[HighlightTag]): One tag per character of ``render``.
        continues_comment (bool): Row ends inside an open multiline comment.
        starts_in_comment (bool): Seed state used by the last highlight scan.
        tab_stop (int): Tab stop used for rendering.
    """

    __slots__ = ("raw", "render", "highlight", "continues_comment", "starts_in_comment", "tab_stop")

    def __init__(self, raw: str = "", tab_stop: int = TAB_STOP) -> None:
        self.raw = raw
        self.tab_stop = tab_stop
        self.render = ""
        self.highlight: List[HighlightTag] = []
        self.continues_comment = False
        self.starts_in_comment = False
        self.update_render()

    def __repr__(self) -> str:
        return f"Row({self.raw!r})"

    def __len__(self) -> int:
        return len(self.raw)

    def update_render(self) -> None:
        self.render = render_line(self.raw, self.tab_stop)
        self.highlight = [HighlightTag.NORMAL] * len(self.render)

    def insert_char(self, at: int, ch: str) -> None:
        at = max(0, min(at, len(self.raw)))
        self.raw = self.raw[:at] + ch + self.raw[at:]
        self.update_render()

    def delete_char(self, at: int) -> str:
        """Delete the raw character at *at* and return it ('' when out of range)."""
        if not 0 <= at < len(self.raw):
            return ""
        deleted = self.raw[at]
        self.raw = self.raw[:at] + self.raw[at + 1:]
        self.update_render()
        return deleted

    def append_text(self, text: str) -> None:
        self.raw += text
        self.update_render()

    def split_off(self, at: int) -> str:
        """Truncate the row at *at* and return the removed tail."""
        at = max(0, min(at, len(self.raw)))
        tail = self.raw[at:]
        self.raw = self.raw[:at]
        self.update_render()
        return tail

    def render_x(self, cursor_x: int) -> int:
        return raw_to_render_col(self.raw, cursor_x, self.tab_stop)

    def raw_x(self, render_x: int) -> int:
        return render_to_raw_col(self.raw, render_x, self.tab_stop)
