# Pound is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Configuration loading and logging setup for the Pound buffer engine."""

import logging
import logging.handlers
import os
import sys
import tempfile
from typing import Any, Dict, Optional

import toml


DEFAULT_CONFIG_PATH = "config.toml"


# --- Dictionary Deep Merge Utility ---
def deep_merge(base: Dict[Any, Any], override: Dict[Any, Any]) -> Dict[Any, Any]:
    """
    Recursively merges the `override` dictionary into the `base` dictionary.

    If a key exists in both dictionaries and both values are dictionaries,
    the merge is performed recursively. Otherwise, the value from `override`
    replaces the value from `base`. Neither input is modified.

    Args:
        base (Dict[Any, Any]): The base dictionary.
        override (Dict[Any, Any]): The dictionary whose values win.

    Returns:
        Dict[Any, Any]: A new dictionary containing the merged result.

    Example:
        >>> deep_merge({'editor': {'tab_stop': 8, 'x': 1}}, {'editor': {'tab_stop': 4}})
        {'editor': {'tab_stop': 4, 'x': 1}}
    """
    result = dict(base)
    for key, override_value in override.items():
        base_value = result.get(key)
        if isinstance(base_value, dict) and isinstance(override_value, dict):
            result[key] = deep_merge(base_value, override_value)
        else:
            result[key] = override_value
    return result


def default_config() -> Dict[str, Any]:
    """Returns a fresh copy of the built-in configuration."""
    return {
        "editor": {
            "tab_stop": 8,
            "status_timeout": 5.0,
            "help_message": "HELP: Ctrl-S = Save | Ctrl-Q = Quit | Ctrl-F = Find | Ctrl-O = Open",
        },
        # Highlight tag name -> curses color name
        "colors": {
            "normal": "default",
            "number": "cyan",
            "string": "green",
            "char_literal": "green",
            "comment": "white",
            "multiline_comment": "white",
            "search_match": "blue",
            "keyword": "yellow",
            "type": "magenta",
            "constant": "red",
        },
        # User rule tables, e.g.
        # [syntax.lua]
        # extensions = ["lua"]
        # comment_start = "--"
        # multiline_comment = ["--[[", "]]"]
        # keywords = { keyword = ["local", "function"], constant = ["nil"] }
        "syntax": {},
        "logging": {
            "file_level": "DEBUG",
            "console_level": "WARNING",
            "log_to_console": False,
            "log_file": "pound.log",
        },
    }


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    """
    Loads the configuration from a TOML file and merges it onto the defaults.

    Every problem (missing file, TOML syntax error, I/O error) is logged and
    resolved by falling back to the defaults, so this function never raises.
    Rule tables found under ``[syntax.*]`` are *not* validated here; that
    happens when the highlighter builds them (see ``rules_from_config``).

    Args:
        config_path (str): Path of the user configuration file.

    Returns:
        dict: The merged configuration.
    """
    minimal_default = default_config()
    user_config: dict = {}

    if os.path.exists(config_path):
        try:
            with open(config_path, "r", encoding="utf-8") as fh:
                user_config = toml.loads(fh.read())
            logging.debug("Loaded user config from %s", config_path)
        except FileNotFoundError:
            logging.warning("Config file %s vanished - using defaults.", config_path)
        except toml.TomlDecodeError as exc:
            logging.error("TOML parse error in %s: %s - using defaults.", config_path, exc)
        except OSError as exc:
            logging.error("Could not read %s: %s - using defaults.", config_path, exc)
    else:
        logging.debug("Config file %s not found - using defaults.", config_path)

    final_config: dict = deep_merge(minimal_default, user_config)

    # Ensure every default section/key exists even when the user replaced a
    # section with a non-table value.
    for section, default_val in minimal_default.items():
        if not isinstance(final_config.get(section), dict) and isinstance(default_val, dict):
            logging.warning("Config section [%s] is not a table - using defaults.", section)
            final_config[section] = default_val
            continue
        if isinstance(default_val, dict):
            for sub_key, sub_val in default_val.items():
                final_config[section].setdefault(sub_key, sub_val)

    logging.debug("Final configuration loaded successfully.")
    return final_config


def get_tab_stop(config: Optional[Dict[str, Any]]) -> int:
    """Returns the configured tab stop, falling back to 8 on bad values."""
    if not config:
        return 8
    value = config.get("editor", {}).get("tab_stop", 8)
    try:
        tab_stop = int(value)
        if tab_stop < 1:
            raise ValueError(value)
    except (TypeError, ValueError):
        logging.warning("Invalid tab_stop %r in config - defaulting to 8.", value)
        return 8
    return tab_stop


# --- Logging Setup Function ---
def setup_logging(config: Optional[Dict[str, Any]] = None) -> None:
    """
    Configures application-wide logging handlers and log levels.

    Two independent handlers are installed on the root logger:

    1. **File handler** - rotating log file (``[logging] log_file``, default
       *pound.log*) capturing everything from ``file_level`` upward.
    2. **Console handler** - optional ``stderr`` output whose threshold is
       ``console_level``. Disabled by default because the terminal belongs
       to the editor while it runs.

    Existing root handlers are cleared so repeated calls (e.g. in unit tests)
    do not duplicate records. The function never raises; problems creating
    the log file are reported on stderr and logging continues best-effort.

    Args:
        config (dict | None): Application configuration; only the
            ``["logging"]`` section is consulted.
    """
    if config is None:
        config = {}
    logging_config = config.get("logging", {})
    log_filename = logging_config.get("log_file", "pound.log")
    log_file_level_str = str(logging_config.get("file_level", "DEBUG")).upper()
    log_file_level = getattr(logging, log_file_level_str, logging.DEBUG)

    log_dir = os.path.dirname(log_filename)
    if log_dir and not os.path.exists(log_dir):
        try:
            os.makedirs(log_dir)
        except OSError as e_mkdir:
            print(f"Error creating log directory '{log_dir}': {e_mkdir}", file=sys.stderr)
            log_filename = os.path.join(tempfile.gettempdir(), "pound.log")
            print(f"Logging to temporary file: '{log_filename}'", file=sys.stderr)

    file_formatter = logging.Formatter(
        "%(asctime)s - %(levelname)-8s - %(name)-15s - %(message)s (%(filename)s:%(lineno)d)"
    )
    file_handler = None
    try:
        file_handler = logging.handlers.RotatingFileHandler(
            log_filename, maxBytes=2 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        file_handler.setFormatter(file_formatter)
        file_handler.setLevel(log_file_level)
    except OSError as e_fh:
        print(f"Error setting up file logger for '{log_filename}': {e_fh}. File logging disabled.",
              file=sys.stderr)

    console_handler = None
    if logging_config.get("log_to_console", False):
        console_level_str = str(logging_config.get("console_level", "WARNING")).upper()
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter("%(levelname)-8s - %(name)-12s - %(message)s"))
        console_handler.setLevel(getattr(logging, console_level_str, logging.WARNING))

    root_logger = logging.getLogger()
    root_logger.handlers = []
    if file_handler:
        root_logger.addHandler(file_handler)
    if console_handler:
        root_logger.addHandler(console_handler)
    root_logger.setLevel(log_file_level)

    logging.info("Logging setup complete. Root logger level: %s.", logging.getLevelName(root_logger.level))
    if file_handler:
        logging.info(f"File logging to '{log_filename}' at level: {logging.getLevelName(file_handler.level)}.")
