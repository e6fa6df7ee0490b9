"""Per-frame motion integration: scale easing, spin, damping, color cycling."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from gesture_galaxy.config import FieldConfig
from gesture_galaxy.field import ParticleField
from gesture_galaxy.hand_signal import HandSignal, SignalMailbox
from gesture_galaxy.toggle import ToggleStateMachine


@dataclass
class MotionState:
    """Mutable motion of the field between frames.

    Both 2D vectors are ordered like the palm position they come from:
    component 0 (horizontal palm offset) spins the field about its vertical
    axis (yaw), component 1 (vertical palm offset) about its horizontal
    axis (pitch). So `rotation_velocity` holds the (pitch rate, yaw rate)
    pair as (yaw rate, pitch rate), and `rotation` holds (yaw, pitch).
    """
    rotation_velocity: np.ndarray = field(default_factory=lambda: np.zeros(2))
    rotation: np.ndarray = field(default_factory=lambda: np.zeros(2))
    expand_factor: float = 1.0
    signal_version: int = 0  # mailbox version last consumed

    @property
    def yaw(self) -> float:
        return float(self.rotation[0])

    @property
    def pitch(self) -> float:
        return float(self.rotation[1])


@dataclass
class FrameTransform:
    """What the renderer needs for one frame."""
    scale: float
    pitch: float
    yaw: float
    colors_dirty: bool = False


@dataclass
class GalaxyContext:
    """Everything the callbacks share, owned by the controller."""
    field: ParticleField
    mailbox: SignalMailbox
    toggle: ToggleStateMachine
    motion: MotionState


class MotionIntegrator:
    """Advances MotionState once per display tick.

    Order within a tick:
        1. ease expand_factor toward the toggle target
        2. take a new rotation command if the mailbox has a fresh signal
        3. rotation += rotation_velocity
        4. rotation_velocity *= damping
        5. recolor the field while the latest signal is pinching
    """

    def __init__(self, config: FieldConfig):
        self.config = config

    def steer(self, motion: MotionState, signal: HandSignal):
        """Set the spin rate from the palm offset (a direct command, not added)."""
        motion.rotation_velocity = signal.palm * self.config.rotation_gain

    def step(self, ctx: GalaxyContext, now: Optional[float] = None) -> FrameTransform:
        """Run one tick and return the transform to render."""
        now = time.time() if now is None else now
        motion = ctx.motion
        cfg = self.config

        motion.expand_factor += (ctx.toggle.target - motion.expand_factor) * cfg.expand_speed

        signal = ctx.mailbox.latest
        if signal is not None and ctx.mailbox.version != motion.signal_version:
            self.steer(motion, signal)
            motion.signal_version = ctx.mailbox.version

        motion.rotation = motion.rotation + motion.rotation_velocity
        motion.rotation_velocity = motion.rotation_velocity * cfg.rotation_damping

        if signal is not None and signal.pinch_active:
            ctx.field.cycle_colors(now * cfg.color_cycle_rate, cfg.saturation, cfg.lightness)

        return FrameTransform(
            scale=motion.expand_factor,
            pitch=motion.pitch,
            yaw=motion.yaw,
            colors_dirty=ctx.field.colors_dirty,
        )
