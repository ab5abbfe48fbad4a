# pound/__init__.py

__version__ = "0.1.0"

from .buffer import EditMode, FileType, TextBuffer
from .config import deep_merge, load_config, setup_logging
from .cursor import CursorViewport, Direction
from .editor import PoundEditor
from .errors import NoFileNameError, PoundError, RuleTableError
from .highlight import HighlightEngine, HighlightTag, LanguageRules, detect_syntax, select_syntax
from .render import raw_to_render_col, render_line, render_to_raw_col
from .screen import DrawScreen, init_colors
from .search import SearchEngine, SearchKey

# Expose the engine's main components at package level
__all__ = [
    'CursorViewport',
    'Direction',
    'DrawScreen',
    'EditMode',
    'FileType',
    'HighlightEngine',
    'HighlightTag',
    'LanguageRules',
    'NoFileNameError',
    'PoundEditor',
    'PoundError',
    'RuleTableError',
    'SearchEngine',
    'SearchKey',
    'TextBuffer',
    'deep_merge',
    'detect_syntax',
    'init_colors',
    'load_config',
    'raw_to_render_col',
    'render_line',
    'render_to_raw_col',
    'select_syntax',
    'setup_logging',
]
