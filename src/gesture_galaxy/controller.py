"""Top-level controller wiring hand input, the toggle and motion together.

The controller owns a single GalaxyContext and exposes the two callbacks
the outside world drives:

    controller = GalaxyController(settings)
    controller.on_notify(print)

    # inference callback, whenever the hand model produces a result
    controller.on_landmarks(landmarks_or_none)

    # render callback, once per display frame
    transform = controller.tick()

Both run on the same thread and never overlap, so no locking is needed.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

import numpy as np

from gesture_galaxy.config import Settings
from gesture_galaxy.field import ParticleField, generate_field
from gesture_galaxy.hand_signal import HandSignal, HandSignalProcessor, LandmarkSet, SignalMailbox
from gesture_galaxy.motion import FrameTransform, GalaxyContext, MotionIntegrator, MotionState
from gesture_galaxy.toggle import ExpandState, ToggleStateMachine, Trigger

logger = logging.getLogger("gesture_galaxy.controller")

MSG_EXPANDING = "Expanding!"
MSG_CONTRACTING = "Contracting!"
MSG_RESET = "View reset!"

TOGGLE_KEYS = {" "}
RESET_KEYS = {"r", "R"}


class GalaxyController:
    """Owns the shared state and routes input events to the components."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        field: Optional[ParticleField] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.settings = settings or Settings()
        cfg = self.settings.field

        mailbox = SignalMailbox()
        self.context = GalaxyContext(
            field=field if field is not None else generate_field(cfg, rng),
            mailbox=mailbox,
            toggle=ToggleStateMachine(),
            motion=MotionState(),
        )
        self.processor = HandSignalProcessor(cfg.pinch_threshold, mailbox)
        self.integrator = MotionIntegrator(cfg)

        self._notify_callbacks: list[Callable[[str], None]] = []
        self.context.toggle.on_transition(self._on_transition)

    def on_notify(self, callback: Callable[[str], None]):
        """Register a callback for user-facing notification messages."""
        self._notify_callbacks.append(callback)

    def _notify(self, message: str):
        logger.info(message)
        for cb in self._notify_callbacks:
            cb(message)

    def _on_transition(self, old: ExpandState, new: ExpandState, trigger: Trigger):
        if trigger == Trigger.RESET:
            return
        self._notify(MSG_EXPANDING if new == ExpandState.EXPANDED else MSG_CONTRACTING)

    # --- callbacks ---------------------------------------------------------

    def on_landmarks(self, landmarks: Optional[LandmarkSet]) -> Optional[HandSignal]:
        """Inference callback. `landmarks` is None when no hand was found."""
        signal = self.processor.process(landmarks)
        if signal is not None:
            self.context.toggle.observe_pinch(signal.pinch_active)
        return signal

    def tick(self, now: Optional[float] = None) -> FrameTransform:
        """Render callback. Advances motion by one frame."""
        return self.integrator.step(self.context, now)

    # --- manual triggers ---------------------------------------------------

    def toggle(self) -> ExpandState:
        """Manual equivalent of a pinch."""
        return self.context.toggle.fire(Trigger.MANUAL)

    def reset(self):
        """Back to the normal size with no spin and no accumulated rotation."""
        self.context.toggle.fire(Trigger.RESET)
        motion = self.context.motion
        motion.rotation = np.zeros(2)
        motion.rotation_velocity = np.zeros(2)
        self._notify(MSG_RESET)

    def handle_key(self, key: str) -> bool:
        """Dispatch a key press. Returns True if the key was bound."""
        if key in TOGGLE_KEYS:
            self.toggle()
            return True
        if key in RESET_KEYS:
            self.reset()
            return True
        return False

    # --- read-only views ---------------------------------------------------

    @property
    def field(self) -> ParticleField:
        return self.context.field

    @property
    def motion(self) -> MotionState:
        return self.context.motion

    @property
    def target(self) -> float:
        return self.context.toggle.target

    @property
    def hand_signal(self) -> Optional[HandSignal]:
        return self.context.mailbox.latest
