"""Tests for the spiral particle field generator."""

import colorsys
import math

import numpy as np
import pytest

from gesture_galaxy.config import FieldConfig
from gesture_galaxy.field import ParticleField, generate_field, hsl_to_rgb


def small_config(**overrides) -> FieldConfig:
    params = {"particle_count": 2000}
    params.update(overrides)
    return FieldConfig(**params)


class TestHslToRgb:
    @pytest.mark.parametrize("hue", [0.0, 0.1, 0.25, 0.5, 0.66, 0.8, 0.99])
    def test_matches_colorsys(self, hue):
        rgb = hsl_to_rgb(np.array([hue]), 0.8, 0.6)[0]
        expected = colorsys.hls_to_rgb(hue, 0.6, 0.8)
        np.testing.assert_allclose(rgb, expected, atol=1e-9)

    def test_dark_lightness(self):
        rgb = hsl_to_rgb(np.array([0.3]), 0.5, 0.3)[0]
        np.testing.assert_allclose(rgb, colorsys.hls_to_rgb(0.3, 0.3, 0.5), atol=1e-9)

    def test_hue_wraps(self):
        a = hsl_to_rgb(np.array([0.2]), 0.8, 0.6)
        b = hsl_to_rgb(np.array([1.2]), 0.8, 0.6)
        np.testing.assert_allclose(a, b, atol=1e-9)

    def test_shape(self):
        assert hsl_to_rgb(np.zeros(7), 0.8, 0.6).shape == (7, 3)


class TestGenerateField:
    def test_buffer_lengths(self):
        field = generate_field(small_config())
        assert field.count == 2000
        assert field.positions.shape == (2000, 3)
        assert field.colors.shape == (2000, 3)
        assert field.positions.dtype == np.float32

    def test_radius_follows_t(self):
        cfg = small_config()
        field = generate_field(cfg, np.random.default_rng(0))
        np.testing.assert_allclose(field.planar_radius, field.t * cfg.max_radius, atol=1e-5)

    def test_radius_within_max(self):
        cfg = small_config(max_radius=1.5)
        field = generate_field(cfg)
        assert field.planar_radius.max() <= 1.5 + 1e-5

    def test_arm_assignment_uniform(self):
        cfg = small_config(particle_count=1000, spiral_arms=5)
        field = generate_field(cfg)
        counts = np.bincount(field.arms, minlength=5)
        assert counts.tolist() == [200] * 5
        assert field.arms[7] == 7 % 5

    def test_particles_lie_on_their_arm(self):
        cfg = small_config(spiral_arms=3)
        field = generate_field(cfg, np.random.default_rng(1))
        idx = np.arange(field.count)
        angle = field.t * 2 * math.pi * 3 + (idx % 3) * (2 * math.pi / 3)
        expected_x = np.cos(angle) * field.t * cfg.max_radius
        expected_z = np.sin(angle) * field.t * cfg.max_radius
        np.testing.assert_allclose(field.positions[:, 0], expected_x, atol=1e-5)
        np.testing.assert_allclose(field.positions[:, 2], expected_z, atol=1e-5)

    def test_thin_disk(self):
        field = generate_field(small_config())
        y = field.positions[:, 1]
        assert y.min() >= -0.25
        assert y.max() <= 0.25

    def test_colors_follow_t(self):
        cfg = small_config()
        field = generate_field(cfg, np.random.default_rng(2))
        for i in (0, 10, 500):
            hue = (field.t[i] * 0.3 + 0.5) % 1.0
            expected = colorsys.hls_to_rgb(hue, cfg.lightness, cfg.saturation)
            np.testing.assert_allclose(field.colors[i], expected, atol=1e-6)

    def test_colors_in_unit_range(self):
        field = generate_field(small_config())
        assert field.colors.min() >= 0.0
        assert field.colors.max() <= 1.0

    def test_randomized_between_calls(self):
        a = generate_field(small_config())
        b = generate_field(small_config())
        assert not np.array_equal(a.positions, b.positions)

    def test_seeded_is_reproducible(self):
        a = generate_field(small_config(), np.random.default_rng(42))
        b = generate_field(small_config(), np.random.default_rng(42))
        np.testing.assert_array_equal(a.positions, b.positions)

    def test_positions_read_only(self):
        field = generate_field(small_config())
        with pytest.raises(ValueError):
            field.positions[0, 0] = 1.0

    def test_keeps_generation_params(self):
        field = generate_field(small_config(spiral_arms=4, max_radius=2.0))
        assert field.spiral_arms == 4
        assert field.max_radius == 2.0
        assert field.spiral_tightness == 0.3


class TestCycleColors:
    def test_rainbow_sweep(self):
        field = generate_field(small_config(particle_count=100))
        field.cycle_colors(0.25, 0.8, 0.6)
        for i in (0, 33, 99):
            hue = (i / 100 + 0.25) % 1.0
            np.testing.assert_allclose(field.colors[i], colorsys.hls_to_rgb(hue, 0.6, 0.8), atol=1e-6)
        assert field.colors_dirty

    def test_in_place(self):
        field = generate_field(small_config(particle_count=100))
        buf = field.colors
        field.cycle_colors(0.5, 0.8, 0.6)
        assert field.colors is buf

    def test_mismatched_buffers_rejected(self):
        with pytest.raises(ValueError):
            ParticleField(
                positions=np.zeros((3, 3)),
                colors=np.zeros((2, 3)),
                t=np.zeros(3),
                arms=np.zeros(3, dtype=int),
                spiral_arms=1,
                spiral_tightness=0.3,
                max_radius=1.0,
            )
