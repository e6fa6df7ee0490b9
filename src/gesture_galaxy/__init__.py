"""Gesture Galaxy - a spiral particle field steered by hand gestures."""

__version__ = "0.1.0"

from gesture_galaxy.config import AppConfig, ConfigError, FieldConfig, Settings, load_settings
from gesture_galaxy.field import ParticleField, generate_field, hsl_to_rgb
from gesture_galaxy.hand_signal import HandSignal, HandSignalProcessor, SignalMailbox
from gesture_galaxy.toggle import ExpandState, ToggleStateMachine, Trigger
from gesture_galaxy.motion import FrameTransform, GalaxyContext, MotionIntegrator, MotionState
from gesture_galaxy.controller import GalaxyController
from gesture_galaxy.recorder import SessionRecorder, SessionPlayer
