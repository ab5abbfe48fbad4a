# Pound is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Incremental syntax highlighting driven by per-language rule tables.

A language is described by a ``LanguageRules`` table (keyword groups, comment
tokens, file extensions). One generic scanner, ``HighlightEngine``, tags every
rendered character of a row and carries multiline-comment state from row to
row. When a row's comment state changes, the following rows are re-scanned
until the state stabilises (the *cascade*).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Final, Iterable, List, Optional, Sequence, Tuple, TYPE_CHECKING

from pygments.lexers import get_lexer_for_filename
from pygments.util import ClassNotFound

from .errors import RuleTableError

if TYPE_CHECKING:
    from .row import Row

logger = logging.getLogger("pound.highlight")


class HighlightTag(Enum):
    """Category assigned to one rendered character."""

    NORMAL = "normal"
    NUMBER = "number"
    STRING = "string"
    CHAR_LITERAL = "char_literal"
    COMMENT = "comment"
    MULTILINE_COMMENT = "multiline_comment"
    SEARCH_MATCH = "search_match"
    # keyword categories
    KEYWORD = "keyword"
    TYPE = "type"
    CONSTANT = "constant"


KEYWORD_CATEGORIES: Final = frozenset({HighlightTag.KEYWORD, HighlightTag.TYPE, HighlightTag.CONSTANT})

SEPARATORS: Final = frozenset(",.[]()+-/*=~%<>\"';&")
_DIGITS: Final = frozenset("0123456789")


def is_separator(ch: str) -> bool:
    """Whitespace or one of the fixed punctuation characters."""
    return ch.isspace() or ch in SEPARATORS


@dataclass(frozen=True)
class LanguageRules:
    """
    Static highlight rules for one language.

    Attributes:
        file_type (str): Language name shown in the status bar.
        extensions (Tuple[str, ...]): File extensions without the leading dot.
        comment_start (str): Single-line comment token ("" for none).
        multiline_comment (Optional[Tuple[str, str]]): (start, end) tokens.
        keywords (Tuple[Tuple[HighlightTag, Tuple[str, ...]], ...]): Ordered
            keyword groups; the first group containing a match wins.

    Raises:
        RuleTableError: If the table is malformed.
    """

    file_type: str
    extensions: Tuple[str, ...]
    comment_start: str = ""
    multiline_comment: Optional[Tuple[str, str]] = None
    keywords: Tuple[Tuple[HighlightTag, Tuple[str, ...]], ...] = ()

    def __post_init__(self) -> None:
        if not self.file_type:
            raise RuleTableError("rule table needs a file_type")
        if not self.extensions or any(not ext for ext in self.extensions):
            raise RuleTableError(f"{self.file_type}: extensions must be non-empty strings")
        if self.multiline_comment is not None:
            if len(self.multiline_comment) != 2 or not all(self.multiline_comment):
                raise RuleTableError(f"{self.file_type}: multiline_comment needs non-empty start and end tokens")
            if self.comment_start and self.multiline_comment[0].startswith(self.comment_start):
                raise RuleTableError(f"{self.file_type}: multiline_comment start {self.multiline_comment[0]!r} "
                                     f"is shadowed by comment_start {self.comment_start!r}")
        for category, words in self.keywords:
            if category not in KEYWORD_CATEGORIES:
                raise RuleTableError(f"{self.file_type}: {category!r} is not a keyword category")
            for word in words:
                if not word or any(ch.isspace() for ch in word):
                    raise RuleTableError(f"{self.file_type}: invalid keyword {word!r}")

    def matches_extension(self, extension: str) -> bool:
        return extension.lstrip(".") in self.extensions


RUST: Final = LanguageRules(
    file_type="rust",
    extensions=("rs",),
    comment_start="//",
    multiline_comment=("/*", "*/"),
    keywords=(
        (HighlightTag.KEYWORD, (
            "mod", "unsafe", "extern", "crate", "use", "type", "struct", "enum", "union", "const", "static",
            "mut", "let", "if", "else", "impl", "trait", "for", "fn", "self", "Self", "while", "true", "false",
            "in", "continue", "break", "loop", "match",
        )),
        (HighlightTag.TYPE, (
            "isize", "i8", "i16", "i32", "i64", "usize", "u8", "u16", "u32", "u64", "f32", "f64",
            "char", "str", "bool",
        )),
    ),
)

C: Final = LanguageRules(
    file_type="c",
    extensions=("c", "h"),
    comment_start="//",
    multiline_comment=("/*", "*/"),
    keywords=(
        (HighlightTag.KEYWORD, (
            "switch", "if", "while", "for", "break", "continue", "return", "else", "struct", "union",
            "typedef", "static", "enum", "case", "do", "goto", "sizeof", "const", "volatile", "extern",
            "register", "default",
        )),
        (HighlightTag.TYPE, ("int", "long", "double", "float", "char", "unsigned", "signed", "void", "short")),
        (HighlightTag.CONSTANT, ("NULL",)),
    ),
)

PYTHON: Final = LanguageRules(
    file_type="python",
    extensions=("py", "pyw"),
    comment_start="#",
    keywords=(
        (HighlightTag.KEYWORD, (
            "and", "as", "assert", "async", "await", "break", "class", "continue", "def", "del", "elif",
            "else", "except", "finally", "for", "from", "global", "if", "import", "in", "is", "lambda",
            "nonlocal", "not", "or", "pass", "raise", "return", "try", "while", "with", "yield",
        )),
        (HighlightTag.TYPE, ("int", "float", "str", "bool", "bytes", "list", "dict", "tuple", "set", "object")),
        (HighlightTag.CONSTANT, ("True", "False", "None")),
    ),
)

JAVASCRIPT: Final = LanguageRules(
    file_type="javascript",
    extensions=("js", "mjs", "cjs", "jsx"),
    comment_start="//",
    multiline_comment=("/*", "*/"),
    keywords=(
        (HighlightTag.KEYWORD, (
            "break", "case", "catch", "class", "const", "continue", "debugger", "default", "delete", "do",
            "else", "export", "extends", "finally", "for", "function", "if", "import", "in", "instanceof",
            "let", "new", "return", "super", "switch", "this", "throw", "try", "typeof", "var", "void",
            "while", "with", "yield", "async", "await", "of",
        )),
        (HighlightTag.CONSTANT, ("true", "false", "null", "undefined", "NaN", "Infinity")),
    ),
)

GO: Final = LanguageRules(
    file_type="go",
    extensions=("go",),
    comment_start="//",
    multiline_comment=("/*", "*/"),
    keywords=(
        (HighlightTag.KEYWORD, (
            "break", "case", "chan", "const", "continue", "default", "defer", "else", "fallthrough", "for",
            "func", "go", "goto", "if", "import", "interface", "map", "package", "range", "return", "select",
            "struct", "switch", "type", "var",
        )),
        (HighlightTag.TYPE, (
            "bool", "byte", "error", "float32", "float64", "int", "int8", "int16", "int32", "int64", "rune",
            "string", "uint", "uint8", "uint16", "uint32", "uint64", "uintptr",
        )),
        (HighlightTag.CONSTANT, ("true", "false", "nil", "iota")),
    ),
)

BUILTIN_LANGUAGES: Final[Tuple[LanguageRules, ...]] = (RUST, C, PYTHON, JAVASCRIPT, GO)


def rules_from_config(syntax_config: Dict[str, Any]) -> List[LanguageRules]:
    """
    Build rule tables from the ``[syntax.<name>]`` sections of the config.

    Each section accepts ``extensions`` (list), ``comment_start`` (str),
    ``multiline_comment`` (two-element list) and ``keywords``, a table mapping
    a keyword category name ("keyword", "type", "constant") to a word list.
    Keyword groups keep the order in which they appear in the file.

    Raises:
        RuleTableError: On any malformed section. Called once at startup so
            bad configuration is rejected before any buffer is highlighted.
    """
    languages: List[LanguageRules] = []
    for name, section in syntax_config.items():
        if not isinstance(section, dict):
            raise RuleTableError(f"[syntax.{name}] must be a table")
        groups = []
        for category_name, words in section.get("keywords", {}).items():
            try:
                category = HighlightTag(category_name)
            except ValueError:
                raise RuleTableError(f"[syntax.{name}]: unknown keyword category {category_name!r}") from None
            if not isinstance(words, list) or not all(isinstance(w, str) for w in words):
                raise RuleTableError(f"[syntax.{name}]: keywords.{category_name} must be a list of strings")
            groups.append((category, tuple(words)))
        multiline = section.get("multiline_comment")
        languages.append(LanguageRules(
            file_type=name,
            extensions=tuple(ext.lstrip(".") for ext in section.get("extensions", ())),
            comment_start=section.get("comment_start", ""),
            multiline_comment=tuple(multiline) if multiline else None,
            keywords=tuple(groups),
        ))
        logger.info("Loaded rule table '%s' from config (%d keyword groups).", name, len(groups))
    return languages


def select_syntax(extension: str, languages: Optional[Sequence[LanguageRules]] = None) -> Optional[LanguageRules]:
    """Return the rule table registered for *extension*, or None."""
    if not extension:
        return None
    for rules in languages if languages is not None else BUILTIN_LANGUAGES:
        if rules.matches_extension(extension):
            return rules
    return None


def detect_syntax(filename: Optional[str],
                  languages: Optional[Sequence[LanguageRules]] = None) -> Optional[LanguageRules]:
    """
    Resolve the rule table for *filename*.

    The extension is tried first. When no table claims it, the pygments lexer
    registry is asked which language the file name belongs to, and the
    lexer's name and aliases are matched against the tables' ``file_type``.
    This picks up names the tables do not list (``foo.rs.in``, ``x.jsm``).
    """
    if not filename:
        return None
    candidates = languages if languages is not None else BUILTIN_LANGUAGES
    rules = select_syntax(os.path.splitext(filename)[1], candidates)
    if rules is not None:
        return rules

    try:
        lexer = get_lexer_for_filename(os.path.basename(filename))
    except ClassNotFound:
        logger.debug("No lexer for '%s'; highlighting disabled.", filename)
        return None

    names = {lexer.name.lower(), *lexer.aliases}
    for rules in candidates:
        if rules.file_type in names:
            logger.debug("Pygments resolved '%s' to rule table '%s'.", filename, rules.file_type)
            return rules
    logger.debug("Lexer '%s' for '%s' has no rule table.", lexer.name, filename)
    return None


def color_segments(render: str, highlight: Sequence[HighlightTag]) -> List[Tuple[str, HighlightTag]]:
    """Group a rendered slice into runs of equally tagged text."""
    segments: List[Tuple[str, HighlightTag]] = []
    start = 0
    for i in range(1, len(render) + 1):
        if i == len(render) or highlight[i] is not highlight[start]:
            segments.append((render[start:i], highlight[start]))
            start = i
    return segments


class HighlightEngine:
    """
    Generic scanner parameterised by a ``LanguageRules`` table.

    ``syntax`` is None for buffers without highlighting; every character is
    then tagged ``NORMAL`` so the tag/render length invariant still holds.
    """

    def __init__(self, syntax: Optional[LanguageRules] = None) -> None:
        self.syntax = syntax

    @property
    def file_type(self) -> Optional[str]:
        return self.syntax.file_type if self.syntax else None

    def _match_keyword(self, render: str, i: int) -> Optional[Tuple[HighlightTag, int]]:
        for category, words in self.syntax.keywords:
            for word in words:
                end = i + len(word)
                if not render.startswith(word, i):
                    continue
                if end == len(render) or is_separator(render[end]):
                    return category, len(word)
        return None

    def scan(self, render: str, in_comment: bool) -> Tuple[List[HighlightTag], bool]:
        """
        Tag one rendered line.

        Args:
            render (str): Rendered row content.
            in_comment (bool): Whether the line starts inside a multiline comment.

        Returns:
            Tuple[List[HighlightTag], bool]: The tags and whether the line
            ends inside a multiline comment.
        """
        rules = self.syntax
        if rules is None:
            return [HighlightTag.NORMAL] * len(render), False

        tags: List[HighlightTag] = []
        add = tags.append
        length = len(render)
        comment_start = rules.comment_start
        multiline = rules.multiline_comment
        in_string: Optional[str] = None
        previous_separator = True
        i = 0

        while i < length:
            c = render[i]
            previous_tag = tags[i - 1] if i > 0 else HighlightTag.NORMAL

            if in_string is None and comment_start and not in_comment:
                if render.startswith(comment_start, i):
                    tags.extend([HighlightTag.COMMENT] * (length - i))
                    break

            if multiline is not None and in_string is None:
                ml_start, ml_end = multiline
                if in_comment:
                    add(HighlightTag.MULTILINE_COMMENT)
                    if render.startswith(ml_end, i):
                        tags.extend([HighlightTag.MULTILINE_COMMENT] * (len(ml_end) - 1))
                        i += len(ml_end)
                        previous_separator = True
                        in_comment = False
                    else:
                        i += 1
                    continue
                if render.startswith(ml_start, i):
                    tags.extend([HighlightTag.MULTILINE_COMMENT] * len(ml_start))
                    i += len(ml_start)
                    in_comment = True
                    continue

            if in_string is not None:
                tag = HighlightTag.STRING if in_string == '"' else HighlightTag.CHAR_LITERAL
                add(tag)
                if c == "\\" and i + 1 < length:
                    add(tag)
                    i += 2
                    continue
                if c == in_string:
                    in_string = None
                i += 1
                previous_separator = True
                continue
            if c in ('"', "'"):
                in_string = c
                add(HighlightTag.STRING if c == '"' else HighlightTag.CHAR_LITERAL)
                i += 1
                continue

            if ((c in _DIGITS and (previous_separator or previous_tag is HighlightTag.NUMBER))
                    or (c == "." and previous_tag is HighlightTag.NUMBER)):
                add(HighlightTag.NUMBER)
                i += 1
                previous_separator = False
                continue

            if previous_separator:
                keyword = self._match_keyword(render, i)
                if keyword is not None:
                    category, word_length = keyword
                    tags.extend([category] * word_length)
                    i += word_length
                    previous_separator = False
                    continue

            add(HighlightTag.NORMAL)
            previous_separator = is_separator(c)
            i += 1

        return tags, in_comment

    def highlight_row(self, rows: List["Row"], at: int) -> bool:
        """
        Re-tag ``rows[at]``, seeding the comment state from the previous row.

        Only ``rows[at]`` is written. Returns True if the row's
        ``continues_comment`` flag changed.
        """
        row = rows[at]
        seed = at > 0 and rows[at - 1].continues_comment
        row.highlight, in_comment = self.scan(row.render, seed)
        row.starts_in_comment = seed
        assert len(row.render) == len(row.highlight), (
            f"highlight length {len(row.highlight)} != render length {len(row.render)} on row {at}"
        )
        changed = row.continues_comment != in_comment
        row.continues_comment = in_comment
        return changed

    def update_syntax(self, rows: List["Row"], at: int) -> int:
        """
        Re-highlight ``rows[at]`` and cascade forward.

        The loop moves to the next row while that row was scanned with a seed
        that no longer matches the comment state of the row just re-tagged,
        and stops at the end of the buffer. Returns the number of rows scanned.
        """
        scanned = 0
        while 0 <= at < len(rows):
            self.highlight_row(rows, at)
            scanned += 1
            following = at + 1
            if following >= len(rows) or rows[following].starts_in_comment == rows[at].continues_comment:
                break
            at = following
        if scanned > 1:
            logger.debug("Highlight cascade re-scanned %d rows ending at row %d.", scanned, at)
        return scanned

    def highlight_all(self, rows: Iterable["Row"]) -> None:
        rows = list(rows)
        for at in range(len(rows)):
            self.highlight_row(rows, at)
