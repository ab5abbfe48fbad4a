# Pound is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""User-visible status line message with an expiry."""

import logging
import time
from typing import Optional

logger = logging.getLogger("pound.status")


class StatusMessage:
    """
    Holds the message shown in the editor's message bar.

    A message is visible for ``timeout`` seconds after it was set; after that
    ``message()`` returns None and the bar is drawn empty.
    """

    def __init__(self, initial: Optional[str] = None, timeout: float = 5.0) -> None:
        self.timeout = timeout
        self._message: Optional[str] = None
        self._set_time = 0.0
        if initial:
            self.set_message(initial)

    def set_message(self, message: str) -> None:
        if message != self._message:
            logger.debug("Status message: '%s'", message)
        self._message = message
        self._set_time = time.monotonic()

    def message(self) -> Optional[str]:
        if self._message is None:
            return None
        if time.monotonic() - self._set_time > self.timeout:
            self._message = None
            return None
        return self._message

    def clear(self) -> None:
        self._message = None
