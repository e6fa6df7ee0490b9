"""Session recording and replay of hand input.

A session is the stream of inference callbacks (a landmark set, or nothing
when no hand was seen) plus manual key events, each stamped with the time
since the recording started. Replaying a session through a controller
reproduces the interaction without a camera:

    player = SessionPlayer.load("session.json")
    for frame in player.play():
        player.apply(frame, controller)
        controller.tick()
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Iterator, Optional

import numpy as np

logger = logging.getLogger("gesture_galaxy.recorder")

FORMAT_VERSION = 1


@dataclass
class RecordedFrame:
    """One inference callback in a recording."""
    timestamp: float  # seconds from recording start
    landmarks: Optional[list[list[float]]]  # (21, 2|3) as nested lists, or None
    keys: list[str] = field(default_factory=list)  # keys pressed since last frame

    @classmethod
    def from_json(cls, data: dict) -> RecordedFrame:
        return cls(
            timestamp=float(data["timestamp"]),
            landmarks=data.get("landmarks"),
            keys=list(data.get("keys", [])),
        )

    def as_arrays(self) -> RecordedFrame:
        """Copy with landmarks as a float32 array, ready for the controller."""
        landmarks = None if self.landmarks is None else np.array(self.landmarks, dtype=np.float32)
        return RecordedFrame(self.timestamp, landmarks, list(self.keys))


def _span(frames: list[RecordedFrame]) -> float:
    return frames[-1].timestamp if frames else 0.0


class SessionRecorder:
    """Collects inference results and key presses between start() and stop().

    Frames added outside a start/stop window are dropped.
    """

    def __init__(self):
        self._frames: list[RecordedFrame] = []
        self._started_at: Optional[float] = None

    def start(self):
        self._frames = []
        self._started_at = time.monotonic()

    def stop(self) -> int:
        """Close the window. Returns the number of frames captured."""
        self._started_at = None
        return len(self._frames)

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def duration(self) -> float:
        return _span(self._frames)

    def add_frame(
        self,
        landmarks: Optional[np.ndarray],
        keys: Optional[list[str]] = None,
        timestamp: Optional[float] = None,
    ):
        """Add one inference result (None when no hand was detected)."""
        if self._started_at is None:
            return
        if timestamp is None:
            timestamp = time.monotonic() - self._started_at
        stored = None if landmarks is None else np.asarray(landmarks).tolist()
        self._frames.append(RecordedFrame(timestamp, stored, list(keys or [])))

    def save(self, path: str | Path):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        session = {
            "version": FORMAT_VERSION,
            "duration": self.duration,
            "frames": [asdict(f) for f in self._frames],
        }
        path.write_text(json.dumps(session))
        logger.info("Recorded %d frames (%.1fs) to %s", len(self._frames), self.duration, path)


class SessionPlayer:
    """Feeds a recorded session back through a controller."""

    def __init__(self, frames: list[RecordedFrame]):
        self._frames = frames

    @classmethod
    def load(cls, path: str | Path) -> SessionPlayer:
        data = json.loads(Path(path).read_text())
        if data.get("version") != FORMAT_VERSION:
            raise ValueError(f"Unsupported recording version: {data.get('version')!r}")
        return cls([RecordedFrame.from_json(f) for f in data["frames"]])

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def duration(self) -> float:
        return _span(self._frames)

    def play(self) -> Iterator[RecordedFrame]:
        """Yield every frame immediately."""
        for frame in self._frames:
            yield frame.as_arrays()

    def play_realtime(self, speed: float = 1.0) -> Iterator[RecordedFrame]:
        """Yield frames paced to their timestamps, divided by `speed`."""
        origin = time.monotonic()
        for frame in self.play():
            wait = origin + frame.timestamp / speed - time.monotonic()
            if wait > 0:
                time.sleep(wait)
            yield frame

    @staticmethod
    def apply(frame: RecordedFrame, controller) -> None:
        """Feed a frame's keys and landmarks into a GalaxyController."""
        for key in frame.keys:
            controller.handle_key(key)
        controller.on_landmarks(frame.landmarks)
