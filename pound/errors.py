# Pound is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Exception types raised by the buffer engine."""


class PoundError(Exception):
    """Base class for all errors raised by Pound."""


class NoFileNameError(PoundError):
    """Raised by ``TextBuffer.save()`` when the buffer has no file name."""

    def __init__(self, message: str = "no file name specified"):
        super().__init__(message)


class RuleTableError(PoundError, ValueError):
    """A syntax rule table is malformed (configuration error, rejected at startup)."""
