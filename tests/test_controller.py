"""End-to-end tests for the controller: landmarks in, motion out."""

import numpy as np
import pytest

from gesture_galaxy.config import FieldConfig, Settings
from gesture_galaxy.controller import MSG_CONTRACTING, MSG_EXPANDING, MSG_RESET, GalaxyController
from gesture_galaxy.toggle import ExpandState


def make_hand(palm=(0.5, 0.5), pinch=False) -> np.ndarray:
    lm = np.zeros((21, 3), dtype=np.float32)
    lm[9, :2] = palm
    lm[4, :2] = (0.40, 0.40)
    lm[8, :2] = (0.41, 0.40) if pinch else (0.60, 0.40)
    return lm


@pytest.fixture
def controller():
    settings = Settings(field=FieldConfig(particle_count=300))
    ctrl = GalaxyController(settings, rng=np.random.default_rng(0))
    ctrl.messages = []
    ctrl.on_notify(ctrl.messages.append)
    return ctrl


class TestPinchFlow:
    def test_pinch_expands(self, controller):
        controller.on_landmarks(make_hand(pinch=True))
        assert controller.target == 2.0
        assert controller.messages == [MSG_EXPANDING]

    def test_held_pinch_toggles_once(self, controller):
        for _ in range(20):
            controller.on_landmarks(make_hand(pinch=True))
            controller.tick(now=0.0)
        assert controller.target == 2.0
        assert controller.messages == [MSG_EXPANDING]

    def test_second_pinch_contracts(self, controller):
        controller.on_landmarks(make_hand(pinch=True))
        controller.on_landmarks(make_hand(pinch=False))
        controller.on_landmarks(make_hand(pinch=True))
        assert controller.target == 1.0
        assert controller.messages == [MSG_EXPANDING, MSG_CONTRACTING]

    def test_lost_hand_keeps_pinch(self, controller):
        controller.on_landmarks(make_hand(pinch=True))
        controller.on_landmarks(None)
        controller.on_landmarks(make_hand(pinch=True))
        # Hand disappearing is not a release, so no second toggle
        assert controller.target == 2.0

    def test_scenario_expand_ten_ticks(self, controller):
        controller.on_landmarks(make_hand(pinch=True))
        for _ in range(10):
            controller.tick(now=0.0)
        assert controller.motion.expand_factor == pytest.approx(1.401, abs=1e-3)


class TestSpin:
    def test_scenario_palm_offset(self, controller):
        # palm (0.5, -0.3) in centered coordinates
        controller.on_landmarks(make_hand(palm=(0.75, 0.65)))
        controller.tick(now=0.0)
        np.testing.assert_allclose(controller.motion.rotation, [0.01, -0.006], atol=1e-8)
        np.testing.assert_allclose(controller.motion.rotation_velocity, [0.0095, -0.0057], atol=1e-8)

    def test_spin_persists_when_hand_leaves(self, controller):
        controller.on_landmarks(make_hand(palm=(1.0, 0.5)))
        controller.tick(now=0.0)
        for _ in range(5):
            controller.on_landmarks(None)
            controller.tick(now=0.0)
        assert controller.motion.rotation_velocity[0] == pytest.approx(0.02 * 0.95 ** 6)
        assert controller.motion.yaw > 0.0

    def test_centered_hand_stops_spin(self, controller):
        controller.on_landmarks(make_hand(palm=(1.0, 0.5)))
        controller.tick(now=0.0)
        controller.on_landmarks(make_hand(palm=(0.5, 0.5)))
        controller.tick(now=0.0)
        np.testing.assert_allclose(controller.motion.rotation_velocity, [0.0, 0.0])

    def test_non_finite_palm_does_not_poison_spin(self, controller):
        controller.on_landmarks(make_hand(palm=(1.0, 0.5)))
        controller.tick(now=0.0)
        bad = make_hand()
        bad[9, 1] = np.nan
        controller.on_landmarks(bad)
        for _ in range(5):
            controller.tick(now=0.0)
        assert np.isfinite(controller.motion.rotation).all()
        assert np.isfinite(controller.motion.rotation_velocity).all()
        assert controller.motion.rotation_velocity[0] == pytest.approx(0.02 * 0.95 ** 6)


class TestManualTriggers:
    def test_space_toggles(self, controller):
        assert controller.handle_key(" ") is True
        assert controller.target == 2.0
        controller.handle_key(" ")
        assert controller.target == 1.0
        assert controller.messages == [MSG_EXPANDING, MSG_CONTRACTING]

    def test_toggle_returns_state(self, controller):
        assert controller.toggle() == ExpandState.EXPANDED

    def test_unbound_key(self, controller):
        assert controller.handle_key("x") is False
        assert controller.messages == []

    @pytest.mark.parametrize("key", ["r", "R"])
    def test_reset_clears_motion(self, controller, key):
        controller.toggle()
        controller.on_landmarks(make_hand(palm=(0.9, 0.1)))
        for _ in range(5):
            controller.tick(now=0.0)

        controller.handle_key(key)

        assert controller.target == 1.0
        np.testing.assert_array_equal(controller.motion.rotation_velocity, [0.0, 0.0])
        np.testing.assert_array_equal(controller.motion.rotation, [0.0, 0.0])
        assert controller.messages[-1] == MSG_RESET

    def test_reset_from_normal(self, controller):
        controller.reset()
        assert controller.target == 1.0
        assert controller.messages == [MSG_RESET]

    def test_reset_does_not_snap_scale(self, controller):
        controller.toggle()
        for _ in range(20):
            controller.tick(now=0.0)
        scale = controller.motion.expand_factor
        controller.reset()
        controller.tick(now=0.0)
        assert 1.0 < controller.motion.expand_factor < scale

    def test_stale_signal_does_not_restart_spin_after_reset(self, controller):
        controller.on_landmarks(make_hand(palm=(0.9, 0.5)))
        controller.tick(now=0.0)
        controller.reset()
        controller.tick(now=0.0)
        np.testing.assert_array_equal(controller.motion.rotation_velocity, [0.0, 0.0])


class TestColors:
    def test_pinch_hold_recolors(self, controller):
        before = controller.field.colors.copy()
        controller.on_landmarks(make_hand(pinch=True))
        transform = controller.tick(now=4.0)
        assert transform.colors_dirty
        assert not np.allclose(before, controller.field.colors)

    def test_uses_given_field(self):
        from gesture_galaxy.field import generate_field

        field = generate_field(FieldConfig(particle_count=10))
        assert GalaxyController(field=field).field is field
