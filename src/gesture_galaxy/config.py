"""Static configuration for the particle field and the live app.

Settings are loaded once at startup and are read-only afterwards. A YAML
file may override any subset of the defaults:

    field:
      particle_count: 20000
      pinch_threshold: 0.04
    app:
      camera_index: 1
"""

from __future__ import annotations

import logging
import string
from dataclasses import asdict, dataclass, fields
from dataclasses import field as dataclass_field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger("gesture_galaxy.config")


class ConfigError(ValueError):
    """Raised when a configuration file or value is invalid."""


def _check_types(obj):
    """Reject values whose type does not match the field annotation.

    YAML gives ints for whole numbers, so floats also accept ints. Bools are
    never accepted as numbers.
    """
    for f in fields(obj):
        value = getattr(obj, f.name)
        if f.type == "int":
            ok = isinstance(value, int) and not isinstance(value, bool)
        elif f.type == "float":
            ok = isinstance(value, (int, float)) and not isinstance(value, bool)
        elif f.type == "bool":
            ok = isinstance(value, bool)
        else:
            ok = isinstance(value, str)
        if not ok:
            raise ConfigError(f"{f.name} must be {f.type}, got {value!r}")


@dataclass(frozen=True)
class FieldConfig:
    """Constants driving field generation and the motion integrator."""
    particle_count: int = 15000
    spiral_arms: int = 5
    spiral_tightness: float = 0.3
    max_radius: float = 3.0
    expand_speed: float = 0.05
    rotation_damping: float = 0.95
    pinch_threshold: float = 0.05
    rotation_gain: float = 0.02
    color_cycle_rate: float = 0.1  # hue turns per second while pinching
    saturation: float = 0.8
    lightness: float = 0.6
    vertical_jitter: float = 0.5  # total thickness of the disk

    def __post_init__(self):
        _check_types(self)
        if self.particle_count <= 0:
            raise ConfigError(f"particle_count must be positive, got {self.particle_count}")
        if self.spiral_arms <= 0:
            raise ConfigError(f"spiral_arms must be positive, got {self.spiral_arms}")
        if self.max_radius <= 0:
            raise ConfigError(f"max_radius must be positive, got {self.max_radius}")
        if not 0.0 < self.expand_speed <= 1.0:
            raise ConfigError(f"expand_speed must be in (0, 1], got {self.expand_speed}")
        if not 0.0 < self.rotation_damping <= 1.0:
            raise ConfigError(f"rotation_damping must be in (0, 1], got {self.rotation_damping}")
        if self.pinch_threshold < 0:
            raise ConfigError(f"pinch_threshold must be >= 0, got {self.pinch_threshold}")
        for name in ("saturation", "lightness"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigError(f"{name} must be in [0, 1], got {value}")


@dataclass(frozen=True)
class AppConfig:
    """Camera, inference and window settings for the live app."""
    camera_index: int = 0
    camera_width: int = 640
    camera_height: int = 480
    window_width: int = 1280
    window_height: int = 720
    max_hands: int = 1
    model_complexity: int = 1
    min_detection_confidence: float = 0.7
    min_tracking_confidence: float = 0.5
    fov_degrees: float = 75.0
    camera_distance: float = 5.0
    point_opacity: float = 0.8
    background_color: str = "#0f0f23"
    toast_seconds: float = 2.0
    show_video: bool = True

    def __post_init__(self):
        _check_types(self)
        if self.window_width <= 0 or self.window_height <= 0:
            raise ConfigError("window size must be positive")
        if not 0.0 < self.fov_degrees < 180.0:
            raise ConfigError(f"fov_degrees must be in (0, 180), got {self.fov_degrees}")
        if self.camera_distance <= 0:
            raise ConfigError(f"camera_distance must be positive, got {self.camera_distance}")
        if not _is_hex_color(self.background_color):
            raise ConfigError(f"background_color must look like '#rrggbb', got {self.background_color!r}")

    @property
    def background_rgb(self) -> tuple[float, float, float]:
        """Background color as RGB floats in [0, 1]."""
        h = self.background_color.lstrip("#")
        return tuple(int(h[i:i + 2], 16) / 255.0 for i in (0, 2, 4))  # type: ignore[return-value]


def _is_hex_color(value: str) -> bool:
    return len(value) == 7 and value[0] == "#" and all(c in string.hexdigits for c in value[1:])


def _build(cls, data: dict[str, Any] | None, section: str):
    data = data or {}
    if not isinstance(data, dict):
        raise ConfigError(f"'{section}' section must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown keys in '{section}': {', '.join(unknown)}")
    try:
        return cls(**data)
    except TypeError as e:
        raise ConfigError(str(e)) from e


@dataclass(frozen=True)
class Settings:
    """Process-wide settings: field constants plus app settings."""
    field: FieldConfig = dataclass_field(default_factory=FieldConfig)
    app: AppConfig = dataclass_field(default_factory=AppConfig)

    def to_dict(self) -> dict:
        return {"field": asdict(self.field), "app": asdict(self.app)}

    @classmethod
    def from_dict(cls, data: dict) -> Settings:
        unknown = sorted(set(data) - {"field", "app"})
        if unknown:
            raise ConfigError(f"Unknown config sections: {', '.join(unknown)}")
        return cls(
            field=_build(FieldConfig, data.get("field"), "field"),
            app=_build(AppConfig, data.get("app"), "app"),
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> Settings:
        """Load settings from a YAML file. Missing keys keep their defaults."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigError(f"{path}: top level must be a mapping")

        settings = cls.from_dict(data)
        logger.info("Loaded settings from %s", path)
        return settings

    def to_yaml(self, path: str | Path):
        """Write settings to a YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from `path`, or return the defaults when no path is given."""
    if path is None:
        return Settings()
    return Settings.from_yaml(path)
