"""Toast messages and the status line shown over the rendered field."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger("gesture_galaxy.notifications")


@dataclass
class Toast:
    message: str
    expires_at: float


class ToastBoard:
    """Shows one short-lived message at a time; a new message replaces the old."""

    def __init__(self, duration: float = 2.0):
        self.duration = duration
        self._current: Optional[Toast] = None

    def show(self, message: str, now: Optional[float] = None):
        now = time.monotonic() if now is None else now
        self._current = Toast(message=message, expires_at=now + self.duration)

    def active(self, now: Optional[float] = None) -> Optional[Toast]:
        """The toast still on screen at `now`, if any."""
        now = time.monotonic() if now is None else now
        if self._current is not None and now >= self._current.expires_at:
            self._current = None
        return self._current


class StatusLine:
    """Single status text with an active/inactive indicator."""

    def __init__(self, text: str = "Initializing", active: bool = False):
        self.text = text
        self.active = active

    def update(self, text: str, active: bool):
        if text != self.text:
            logger.info("Status: %s", text)
        self.text = text
        self.active = active
