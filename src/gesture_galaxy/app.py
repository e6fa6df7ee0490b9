"""Live app: camera → hand inference → controller → renderer → window.

Everything runs on one thread. Each loop iteration delivers the inference
result to the controller, then runs one render tick, so the two callbacks
never overlap.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

import cv2

from gesture_galaxy.config import Settings
from gesture_galaxy.controller import GalaxyController
from gesture_galaxy.detector import HandDetector
from gesture_galaxy.notifications import StatusLine, ToastBoard
from gesture_galaxy.recorder import SessionRecorder
from gesture_galaxy.renderer import ParticleRenderer

logger = logging.getLogger("gesture_galaxy.app")

WINDOW_NAME = "Gesture Galaxy"
QUIT_KEYS = {ord("q"), 27}  # q, Esc


class CameraError(RuntimeError):
    """Raised when the camera cannot be opened or stops delivering frames."""


def open_camera(index: int, width: int, height: int) -> cv2.VideoCapture:
    cap = cv2.VideoCapture(index)
    if not cap.isOpened():
        raise CameraError(f"Could not open camera {index}")
    cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
    logger.info("Camera %d opened", index)
    return cap


class GalaxyApp:
    """Owns the collaborators around a GalaxyController and runs the loop."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        recorder: Optional[SessionRecorder] = None,
    ):
        self.settings = settings or Settings()
        self.controller = GalaxyController(self.settings)
        self.renderer = ParticleRenderer(self.settings.app)
        self.toasts = ToastBoard(self.settings.app.toast_seconds)
        self.status = StatusLine()
        self.recorder = recorder
        self.controller.on_notify(self.toasts.show)

    def run(self, max_frames: int = 0) -> int:
        """Run until the window is closed or `max_frames` frames were shown.

        Returns the number of frames rendered. Camera or model failures are
        reported once through the status line and re-raised; there is no retry.
        """
        app_cfg = self.settings.app
        try:
            cap = open_camera(app_cfg.camera_index, app_cfg.camera_width, app_cfg.camera_height)
        except CameraError as e:
            self._fail(e)
            raise
        try:
            detector = HandDetector.from_settings(app_cfg)
        except ImportError as e:
            cap.release()
            self._fail(e)
            raise

        self.status.update("Ready", True)
        if self.recorder:
            self.recorder.start()

        frames = 0
        pending_keys: list[str] = []
        try:
            while True:
                ret, video = cap.read()
                if not ret:
                    raise CameraError("Camera stopped delivering frames")

                video = cv2.flip(video, 1)
                landmarks = detector.detect(cv2.cvtColor(video, cv2.COLOR_BGR2RGB))
                self.controller.on_landmarks(landmarks)
                if self.recorder:
                    self.recorder.add_frame(landmarks, pending_keys)
                pending_keys = []

                transform = self.controller.tick()
                image = self.renderer.render(
                    self.controller.field,
                    transform,
                    video=video if app_cfg.show_video else None,
                    landmarks=landmarks,
                    toast=self.toasts.active(),
                    status=self.status,
                )
                cv2.imshow(WINDOW_NAME, image)
                frames += 1

                code = cv2.waitKey(1) & 0xFF
                if code in QUIT_KEYS:
                    break
                if code != 0xFF and self.controller.handle_key(chr(code)):
                    pending_keys.append(chr(code))

                if max_frames and frames >= max_frames:
                    break
        except CameraError as e:
            self._fail(e)
            raise
        finally:
            if self.recorder:
                if pending_keys:
                    self.recorder.add_frame(None, pending_keys)
                self.recorder.stop()
            cap.release()
            detector.close()
            cv2.destroyAllWindows()

        return frames

    def _fail(self, error: Exception):
        logger.error("Startup or camera failure: %s", error)
        self.status.update("Error", False)
        self.toasts.show(f"Error: {error}")

    def preview(self, seconds: float = 0.0) -> int:
        """Show the field without a camera; keys still toggle and reset."""
        self.status.update("Preview", True)
        start = time.monotonic()
        frames = 0
        try:
            while True:
                transform = self.controller.tick()
                image = self.renderer.render(
                    self.controller.field, transform,
                    toast=self.toasts.active(), status=self.status,
                )
                cv2.imshow(WINDOW_NAME, image)
                frames += 1

                code = cv2.waitKey(16) & 0xFF
                if code in QUIT_KEYS:
                    break
                if code != 0xFF:
                    self.controller.handle_key(chr(code))
                if seconds and time.monotonic() - start >= seconds:
                    break
        finally:
            cv2.destroyAllWindows()
        return frames

