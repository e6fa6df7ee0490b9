"""Hand landmark inference using MediaPipe."""

import logging
from typing import Optional

import numpy as np

try:
    import mediapipe as mp
except ImportError:
    mp = None

logger = logging.getLogger("gesture_galaxy.detector")


class HandDetector:
    """Finds one hand per frame and returns its 21 landmarks.

    Each landmark is (x, y, z) with x, y normalized to [0, 1] relative to
    the image. Only the first detected hand is reported.
    """

    def __init__(
        self,
        max_hands: int = 1,
        model_complexity: int = 1,
        min_detection_confidence: float = 0.7,
        min_tracking_confidence: float = 0.5,
    ):
        if mp is None:
            raise ImportError(
                "mediapipe is required. Install with: pip install 'gesture-galaxy[camera]'"
            )

        self._hands = mp.solutions.hands.Hands(
            static_image_mode=False,
            max_num_hands=max_hands,
            model_complexity=model_complexity,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )
        logger.info("MediaPipe Hands ready (complexity=%d)", model_complexity)

    @classmethod
    def from_settings(cls, app) -> "HandDetector":
        return cls(
            max_hands=app.max_hands,
            model_complexity=app.model_complexity,
            min_detection_confidence=app.min_detection_confidence,
            min_tracking_confidence=app.min_tracking_confidence,
        )

    def detect(self, frame_rgb: np.ndarray) -> Optional[np.ndarray]:
        """Detect a hand and return its landmarks.

        Args:
            frame_rgb: RGB image as numpy array (H, W, 3), uint8.

        Returns:
            Landmark array of shape (21, 3), or None if no hand was found.
        """
        results = self._hands.process(frame_rgb)

        if not results.multi_hand_landmarks:
            return None

        hand = results.multi_hand_landmarks[0]
        return np.array([[lm.x, lm.y, lm.z] for lm in hand.landmark], dtype=np.float32)

    def close(self):
        """Release MediaPipe resources."""
        self._hands.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
