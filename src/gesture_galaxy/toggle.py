"""Expand/contract toggle driven by pinch rising edges and manual triggers."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable

logger = logging.getLogger("gesture_galaxy.toggle")


class ExpandState(Enum):
    """Field size states. The value is the scale target for the state."""
    NORMAL = 1.0
    EXPANDED = 2.0


class Trigger(Enum):
    PINCH = "pinch"  # rising edge of the pinch flag
    MANUAL = "manual"  # e.g. a key press; behaves like a pinch
    RESET = "reset"


# (state, trigger) → next state
TRANSITIONS: dict[tuple[ExpandState, Trigger], ExpandState] = {
    (ExpandState.NORMAL, Trigger.PINCH): ExpandState.EXPANDED,
    (ExpandState.NORMAL, Trigger.MANUAL): ExpandState.EXPANDED,
    (ExpandState.NORMAL, Trigger.RESET): ExpandState.NORMAL,
    (ExpandState.EXPANDED, Trigger.PINCH): ExpandState.NORMAL,
    (ExpandState.EXPANDED, Trigger.MANUAL): ExpandState.NORMAL,
    (ExpandState.EXPANDED, Trigger.RESET): ExpandState.NORMAL,
}


class ToggleStateMachine:
    """Two-state machine flipping the expand target.

    Pinches are fed in as raw per-callback booleans via `observe_pinch`;
    only a False → True change fires a transition, so holding a pinch for
    any number of frames toggles exactly once.

    Usage:
        fsm = ToggleStateMachine()
        fsm.on_transition(lambda old, new, trigger: print(new))
        fsm.observe_pinch(True)   # → EXPANDED
        fsm.observe_pinch(True)   # held, no change
        fsm.observe_pinch(False)
        fsm.fire(Trigger.MANUAL)  # → NORMAL
    """

    def __init__(self):
        self._state = ExpandState.NORMAL
        self._was_pinching = False
        self._listeners: list[Callable[[ExpandState, ExpandState, Trigger], None]] = []

    def on_transition(self, callback: Callable[[ExpandState, ExpandState, Trigger], None]):
        """Register a callback invoked after every fired trigger."""
        self._listeners.append(callback)

    @property
    def state(self) -> ExpandState:
        return self._state

    @property
    def target(self) -> float:
        return self._state.value

    @property
    def was_pinching(self) -> bool:
        return self._was_pinching

    def fire(self, trigger: Trigger) -> ExpandState:
        """Apply a trigger and return the new state."""
        old = self._state
        self._state = TRANSITIONS[(old, trigger)]
        logger.debug("Toggle %s: %s -> %s", trigger.value, old.name, self._state.name)

        for cb in self._listeners:
            cb(old, self._state, trigger)
        return self._state

    def observe_pinch(self, pinch_active: bool) -> bool:
        """Feed the latest pinch flag. Returns True if it was a rising edge."""
        rising = pinch_active and not self._was_pinching
        self._was_pinching = pinch_active
        if rising:
            self.fire(Trigger.PINCH)
        return rising
