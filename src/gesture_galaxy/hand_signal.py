"""Hand landmarks → compact hand signal (palm position + pinch flag)."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Union

import numpy as np

logger = logging.getLogger("gesture_galaxy.hand_signal")

# MediaPipe hand landmark indices used here
THUMB_TIP = 4
INDEX_TIP = 8
PALM_CENTER = 9  # middle finger MCP, roughly the middle of the palm

NUM_LANDMARKS = 21

LandmarkSet = Union[np.ndarray, Sequence[Any]]


@dataclass(frozen=True)
class HandSignal:
    """Latest observation of the tracked hand."""
    palm_position: tuple[float, float]  # centered, y up, in [-1, 1]
    pinch_active: bool
    pinch_distance: float = math.inf

    @property
    def palm(self) -> np.ndarray:
        return np.array(self.palm_position, dtype=np.float64)


class SignalMailbox:
    """Single-slot, latest-value-wins handoff between inference and render.

    The inference side overwrites the slot; the render side reads whatever
    was written last. `version` increases on every post so readers can tell
    a fresh signal from one they have already consumed.
    """

    def __init__(self):
        self._signal: Optional[HandSignal] = None
        self._version = 0

    def post(self, signal: HandSignal):
        self._signal = signal
        self._version += 1

    @property
    def latest(self) -> Optional[HandSignal]:
        return self._signal

    @property
    def version(self) -> int:
        return self._version


def _as_xy(landmarks: LandmarkSet) -> Optional[np.ndarray]:
    """Convert a landmark set into a (21, 2) float array, or None if unusable.

    Ragged or non-numeric sets are unusable, and so are sets whose thumb tip,
    index tip or palm center is not finite.
    """
    if isinstance(landmarks, np.ndarray):
        arr = landmarks
    else:
        try:
            arr = np.array([[lm.x, lm.y] for lm in landmarks], dtype=np.float64)
        except AttributeError:
            try:
                arr = np.asarray(landmarks, dtype=np.float64)
            except (TypeError, ValueError):
                return None

    if arr.ndim != 2 or arr.shape[0] < NUM_LANDMARKS or arr.shape[1] < 2:
        return None
    try:
        xy = arr[:, :2].astype(np.float64)
    except (TypeError, ValueError):
        return None
    if not np.isfinite(xy[[THUMB_TIP, INDEX_TIP, PALM_CENTER]]).all():
        return None
    return xy


class HandSignalProcessor:
    """Turns one landmark set per inference callback into a HandSignal.

    Landmarks are normalized image coordinates in [0, 1]² with y pointing
    down. The palm center is remapped to [-1, 1]² with y pointing up.
    When no hand is seen, nothing changes: the last signal stays in place.
    """

    def __init__(self, pinch_threshold: float = 0.05, mailbox: Optional[SignalMailbox] = None):
        self.pinch_threshold = pinch_threshold
        self.mailbox = mailbox or SignalMailbox()

    @property
    def latest(self) -> Optional[HandSignal]:
        return self.mailbox.latest

    def process(self, landmarks: Optional[LandmarkSet]) -> Optional[HandSignal]:
        """Process one inference result.

        Args:
            landmarks: A set of 21 landmarks (array of shape (21, 2|3) or a
                       sequence of objects with .x/.y), or None if no hand
                       was detected.

        Returns:
            The new HandSignal, or None if the set was absent or unusable
            (the previous signal is retained).
        """
        if landmarks is None:
            return None

        xy = _as_xy(landmarks)
        if xy is None:
            logger.debug("Ignoring malformed landmark set")
            return None

        px, py = xy[PALM_CENTER]
        palm = (float(px * 2.0 - 1.0), float(-(py * 2.0 - 1.0)))

        distance = float(np.linalg.norm(xy[THUMB_TIP] - xy[INDEX_TIP]))
        pinch = bool(math.isfinite(distance) and distance < self.pinch_threshold)

        signal = HandSignal(palm_position=palm, pinch_active=pinch, pinch_distance=distance)
        self.mailbox.post(signal)
        return signal
