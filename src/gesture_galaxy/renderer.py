"""Software point renderer for the particle field (numpy + OpenCV).

Projection follows a perspective camera sitting on the +z axis and looking
at the origin. The field is scaled, then rotated about y (yaw) and x
(pitch), matching an XYZ Euler rotation of the field object.
"""

from __future__ import annotations

import math
from typing import Optional

import cv2
import numpy as np

from gesture_galaxy.config import AppConfig
from gesture_galaxy.field import ParticleField
from gesture_galaxy.motion import FrameTransform
from gesture_galaxy.notifications import StatusLine, Toast

NEAR_PLANE = 0.1

# Pairs of landmark indices forming the hand skeleton
HAND_CONNECTIONS = (
    (0, 1), (1, 2), (2, 3), (3, 4),
    (0, 5), (5, 6), (6, 7), (7, 8),
    (5, 9), (9, 10), (10, 11), (11, 12),
    (9, 13), (13, 14), (14, 15), (15, 16),
    (13, 17), (17, 18), (18, 19), (19, 20),
    (0, 17),
)


def rotation_matrix(pitch: float, yaw: float) -> np.ndarray:
    """Rx(pitch) @ Ry(yaw)."""
    cp, sp = math.cos(pitch), math.sin(pitch)
    cy, sy = math.cos(yaw), math.sin(yaw)
    rx = np.array([[1, 0, 0], [0, cp, -sp], [0, sp, cp]])
    ry = np.array([[cy, 0, sy], [0, 1, 0], [-sy, 0, cy]])
    return rx @ ry


class ParticleRenderer:
    """Draws the field into a BGR image of the configured window size."""

    def __init__(self, app: Optional[AppConfig] = None):
        self.app = app or AppConfig()
        self.width = self.app.window_width
        self.height = self.app.window_height
        self.focal = (self.height / 2.0) / math.tan(math.radians(self.app.fov_degrees) / 2.0)
        self._background = np.array(self.app.background_rgb, dtype=np.float32)
        self._kernel = np.ones((3, 3), dtype=np.uint8)
        self._colors: Optional[np.ndarray] = None

    def project(self, positions: np.ndarray, transform: FrameTransform) -> tuple[np.ndarray, np.ndarray]:
        """Project field-space points to pixel coordinates.

        Returns:
            (pixels, visible): integer pixel coords of shape (N, 2) as (x, y),
            and a boolean mask of points in front of the camera and on screen.
        """
        rot = rotation_matrix(transform.pitch, transform.yaw)
        world = (positions.astype(np.float64) * transform.scale) @ rot.T

        depth = self.app.camera_distance - world[:, 2]
        in_front = depth > NEAR_PLANE
        safe_depth = np.where(in_front, depth, 1.0)

        sx = self.width / 2.0 + self.focal * world[:, 0] / safe_depth
        sy = self.height / 2.0 - self.focal * world[:, 1] / safe_depth
        pixels = np.stack([np.round(sx), np.round(sy)], axis=-1).astype(np.int64)

        on_screen = (
            (pixels[:, 0] >= 0) & (pixels[:, 0] < self.width)
            & (pixels[:, 1] >= 0) & (pixels[:, 1] < self.height)
        )
        return pixels, in_front & on_screen

    def render(
        self,
        field: ParticleField,
        transform: FrameTransform,
        video: Optional[np.ndarray] = None,
        landmarks: Optional[np.ndarray] = None,
        toast: Optional[Toast] = None,
        status: Optional[StatusLine] = None,
    ) -> np.ndarray:
        """Render one frame.

        Args:
            field: Particle buffers.
            transform: Scale and rotation from the motion integrator.
            video: Optional BGR camera frame shown picture-in-picture.
            landmarks: Optional (21, 2|3) hand landmarks drawn over the video.
            toast: Optional message to show at the bottom.
            status: Optional status line shown at the top left.

        Returns:
            BGR uint8 image of shape (height, width, 3).
        """
        if self._colors is None or transform.colors_dirty:
            self._colors = field.colors.astype(np.float32) * self.app.point_opacity
            field.colors_dirty = False

        pixels, visible = self.project(field.positions, transform)
        px = pixels[visible]

        # Additive blending
        layer = np.zeros((self.height, self.width, 3), dtype=np.float32)
        np.add.at(layer, (px[:, 1], px[:, 0]), self._colors[visible])
        layer = cv2.dilate(layer, self._kernel)

        rgb = np.clip(layer + self._background, 0.0, 1.0)
        frame = cv2.cvtColor(np.rint(rgb * 255).astype(np.uint8), cv2.COLOR_RGB2BGR)

        if video is not None:
            self._draw_video(frame, video, landmarks)
        if status is not None:
            self._draw_status(frame, status)
        if toast is not None:
            self._draw_toast(frame, toast.message)
        return frame

    def _draw_video(self, frame: np.ndarray, video: np.ndarray, landmarks: Optional[np.ndarray]):
        w = self.width // 4
        h = max(1, int(video.shape[0] * w / video.shape[1]))
        thumb = cv2.resize(video, (w, h))
        if landmarks is not None:
            draw_hand(thumb, landmarks)
        y0 = self.height - h - 10
        x0 = self.width - w - 10
        if y0 < 0 or x0 < 0:
            return
        frame[y0:y0 + h, x0:x0 + w] = thumb

    def _draw_status(self, frame: np.ndarray, status: StatusLine):
        color = (0, 220, 0) if status.active else (0, 0, 220)
        cv2.circle(frame, (20, 24), 6, color, -1)
        cv2.putText(frame, status.text, (34, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.6, (230, 230, 230), 1)

    def _draw_toast(self, frame: np.ndarray, message: str):
        (tw, th), _ = cv2.getTextSize(message, cv2.FONT_HERSHEY_SIMPLEX, 0.9, 2)
        x = (self.width - tw) // 2
        y = self.height - 40
        cv2.rectangle(frame, (x - 12, y - th - 12), (x + tw + 12, y + 12), (60, 30, 30), -1)
        cv2.putText(frame, message, (x, y), cv2.FONT_HERSHEY_SIMPLEX, 0.9, (255, 255, 255), 2)


def draw_hand(image: np.ndarray, landmarks: np.ndarray):
    """Draw the hand skeleton onto a BGR image in place."""
    h, w = image.shape[:2]
    pts = [(int(lm[0] * w), int(lm[1] * h)) for lm in landmarks]
    for a, b in HAND_CONNECTIONS:
        cv2.line(image, pts[a], pts[b], (0, 255, 0), 2)
    for p in pts:
        cv2.circle(image, p, 3, (0, 0, 255), -1)
