"""Procedural spiral particle field.

Particles are spread along `spiral_arms` interleaved arms of a flat spiral
disk. Each particle draws a parameter t in [0, 1) that sets both how far
along its arm it sits and how far it is from the center, so the radius of
every particle is exactly t * max_radius.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from gesture_galaxy.config import FieldConfig

logger = logging.getLogger("gesture_galaxy.field")


def hsl_to_rgb(hue: np.ndarray, saturation: float, lightness: float) -> np.ndarray:
    """Vectorized HSL to RGB conversion.

    Args:
        hue: Array of hues in [0, 1), any shape.
        saturation: Saturation in [0, 1].
        lightness: Lightness in [0, 1].

    Returns:
        Array of shape hue.shape + (3,) with RGB components in [0, 1].
    """
    hue = np.mod(np.asarray(hue, dtype=np.float64), 1.0)
    if lightness <= 0.5:
        q = lightness * (1.0 + saturation)
    else:
        q = lightness + saturation - lightness * saturation
    p = 2.0 * lightness - q

    def channel(t: np.ndarray) -> np.ndarray:
        t = np.mod(t, 1.0)
        out = np.full_like(t, p)
        out = np.where(t < 1.0 / 6.0, p + (q - p) * 6.0 * t, out)
        out = np.where((t >= 1.0 / 6.0) & (t < 0.5), q, out)
        out = np.where((t >= 0.5) & (t < 2.0 / 3.0), p + (q - p) * (2.0 / 3.0 - t) * 6.0, out)
        return out

    return np.stack(
        [channel(hue + 1.0 / 3.0), channel(hue), channel(hue - 1.0 / 3.0)],
        axis=-1,
    )


@dataclass
class ParticleField:
    """Particle buffers handed to the renderer.

    `positions` is read-only once generated. `colors` is rewritten in place
    while a pinch is held; `colors_dirty` is raised whenever that happens and
    cleared by whoever uploads the buffer.
    """
    positions: np.ndarray  # (count, 3) float32
    colors: np.ndarray  # (count, 3) float32, RGB in [0, 1]
    t: np.ndarray  # (count,) spiral parameter per particle
    arms: np.ndarray  # (count,) arm index per particle
    spiral_arms: int
    spiral_tightness: float
    max_radius: float
    colors_dirty: bool = False

    def __post_init__(self):
        n = len(self.positions)
        if len(self.colors) != n or len(self.t) != n or len(self.arms) != n:
            raise ValueError("particle buffers must all have the same length")

    @property
    def count(self) -> int:
        return len(self.positions)

    @property
    def planar_radius(self) -> np.ndarray:
        """Distance of each particle from the spiral axis (in the x/z plane)."""
        return np.hypot(self.positions[:, 0], self.positions[:, 2])

    def cycle_colors(self, hue_shift: float, saturation: float, lightness: float):
        """Paint a rainbow sweep over the field, offset by `hue_shift` turns.

        Particle i gets hue (i / count + hue_shift) mod 1.
        """
        hue = np.arange(self.count, dtype=np.float64) / self.count + hue_shift
        self.colors[:] = hsl_to_rgb(hue, saturation, lightness)
        self.colors_dirty = True


def generate_field(
    config: FieldConfig,
    rng: Optional[np.random.Generator] = None,
) -> ParticleField:
    """Build the initial spiral field.

    Args:
        config: Field constants (count, arms, radius, colors).
        rng: Random generator. A fresh unseeded one is used when omitted, so
             two calls give different jitter but the same statistical shape.

    Returns:
        A fully populated ParticleField.
    """
    rng = rng or np.random.default_rng()
    n = config.particle_count
    arms = config.spiral_arms

    t = rng.random(n)
    index = np.arange(n)
    arm = index % arms

    angle = t * 2.0 * math.pi * arms
    radius = t * config.max_radius
    arm_offset = arm * (2.0 * math.pi / arms)

    positions = np.empty((n, 3), dtype=np.float32)
    positions[:, 0] = np.cos(angle + arm_offset) * radius
    positions[:, 1] = (rng.random(n) - 0.5) * config.vertical_jitter
    positions[:, 2] = np.sin(angle + arm_offset) * radius
    positions.flags.writeable = False

    # Hue drifts from the core outward and wraps around the color wheel
    hue = (t * 0.3 + 0.5) % 1.0
    colors = hsl_to_rgb(hue, config.saturation, config.lightness).astype(np.float32)

    field = ParticleField(
        positions=positions,
        colors=colors,
        t=t,
        arms=arm,
        spiral_arms=arms,
        spiral_tightness=config.spiral_tightness,
        max_radius=config.max_radius,
    )
    logger.info("Generated spiral field: %d particles, %d arms", n, arms)
    return field
