# Pound is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Render mapping between raw line content and its tab-expanded display form.

All functions here are pure. A tab advances the display column to the next
multiple of ``tab_stop``; every other character occupies exactly one column.
"""

TAB_STOP = 8


def _check_tab_stop(tab_stop: int) -> None:
    if tab_stop < 1:
        raise ValueError(f"tab_stop must be positive, got {tab_stop}")


def _advance(render_col: int, ch: str, tab_stop: int) -> int:
    """Return the render column that follows *ch* when it starts at *render_col*."""
    if ch == "\t":
        return render_col + (tab_stop - render_col % tab_stop)
    return render_col + 1


def render_line(raw: str, tab_stop: int = TAB_STOP) -> str:
    """
    Expand every tab in *raw* to spaces.

    Args:
        raw (str): Raw row content (no newlines).
        tab_stop (int): Tab stop width.

    Returns:
        str: The rendered row.

    Example:
        >>> render_line("a\\tb", 4)
        'a   b'
    """
    _check_tab_stop(tab_stop)
    if "\t" not in raw:
        return raw

    parts = []
    column = 0
    for ch in raw:
        if ch == "\t":
            width = tab_stop - column % tab_stop
            parts.append(" " * width)
            column += width
        else:
            parts.append(ch)
            column += 1
    return "".join(parts)


def raw_to_render_col(raw: str, raw_col: int, tab_stop: int = TAB_STOP) -> int:
    """Sum the display width of every raw character before *raw_col*."""
    _check_tab_stop(tab_stop)
    render_col = 0
    for ch in raw[:max(raw_col, 0)]:
        render_col = _advance(render_col, ch, tab_stop)
    return render_col


def render_to_raw_col(raw: str, render_col: int, tab_stop: int = TAB_STOP) -> int:
    """
    Map a render column back to a raw column.

    Walks *raw* accumulating rendered width and returns the first raw index
    whose cumulative width exceeds *render_col*, so a render column that falls
    inside an expanded tab maps to that tab.

    A *render_col* at or beyond the end of the rendered line maps to
    ``len(raw)`` (the end-of-line cursor position), and an empty line always
    maps to 0.
    """
    _check_tab_stop(tab_stop)
    current = 0
    for raw_col, ch in enumerate(raw):
        current = _advance(current, ch, tab_stop)
        if current > render_col:
            return raw_col
    return len(raw)
