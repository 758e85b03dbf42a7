from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from camera import CLIP_CONVERSIONS

logger = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    """Raised when strict config loading fails."""


@dataclass
class BoundsConfig:
    min_distance: Optional[float] = 1.1
    max_distance: Optional[float] = None
    min_pitch: Optional[float] = None
    max_pitch: Optional[float] = None


@dataclass
class CameraConfig:
    distance: float = 2.0
    pitch: float = 0.0
    yaw: float = 0.0
    target: tuple[float, float, float] = (0.0, 0.0, 0.0)
    fovy: float = 45.0
    znear: float = 0.1
    zfar: float = 100.0
    clip_space: str = "opengl"
    bounds: BoundsConfig = field(default_factory=BoundsConfig)


@dataclass
class ControllerConfig:
    rotate_speed: float = 0.0025
    zoom_speed: float = 0.1


@dataclass
class WindowConfig:
    width: int = 1280
    height: int = 720
    title: str = "Orbit Viewer"
    show_overlay: bool = True


@dataclass
class LightConfig:
    position: tuple[float, float, float] = (2.0, 2.0, 2.0)
    color: tuple[float, float, float] = (1.0, 1.0, 1.0)


@dataclass
class ViewerConfig:
    camera: CameraConfig = field(default_factory=CameraConfig)
    controller: ControllerConfig = field(default_factory=ControllerConfig)
    window: WindowConfig = field(default_factory=WindowConfig)
    light: LightConfig = field(default_factory=LightConfig)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge dictionaries (override wins)."""
    out: dict[str, Any] = dict(base)
    for k, v in override.items():
        if isinstance(v, Mapping) and isinstance(out.get(k), Mapping):
            out[k] = deep_merge(dict(out[k]), v)
        else:
            out[k] = v
    return out


def _build(cls, values: Mapping[str, Any]):
    kwargs = {}
    for f in fields(cls):
        if f.name not in values:
            continue
        value = values[f.name]
        default = getattr(cls(), f.name)
        if is_dataclass(default):
            value = _build(type(default), value)
        elif isinstance(default, tuple):
            value = tuple(value)
        kwargs[f.name] = value
    return cls(**kwargs)


def config_from_dict(values: Mapping[str, Any]) -> ViewerConfig:
    """Build a ViewerConfig from a (possibly partial) nested mapping. Unknown keys are ignored."""
    merged = deep_merge(ViewerConfig().to_dict(), values)
    config = _build(ViewerConfig, merged)
    _validate_camera(config.camera)
    return config


def _validate_camera(camera: CameraConfig) -> None:
    """Reject values OrbitCamera would refuse, so loading can fall back instead of crashing later."""
    try:
        distance = float(camera.distance)
        znear = float(camera.znear)
        zfar = float(camera.zfar)
        fovy = float(camera.fovy)
        target = tuple(float(v) for v in camera.target)
        float(camera.pitch)
        float(camera.yaw)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid camera settings: {e}") from e

    if distance <= 0:
        raise ConfigError(f"camera.distance must be > 0, got {distance}")
    if len(target) != 3:
        raise ConfigError(f"camera.target must have 3 components, got {len(target)}")
    if not 0 < znear < zfar:
        raise ConfigError(f"camera expects 0 < znear < zfar, got znear={znear}, zfar={zfar}")
    if not 0 < fovy < 180:
        raise ConfigError(f"camera.fovy must be in (0, 180) degrees, got {fovy}")
    if camera.clip_space not in CLIP_CONVERSIONS:
        raise ConfigError(
            f"Unknown camera.clip_space {camera.clip_space!r}, expected one of {sorted(CLIP_CONVERSIONS)}"
        )

    b = camera.bounds
    if b.min_distance is not None and b.max_distance is not None and b.min_distance > b.max_distance:
        raise ConfigError(f"camera.bounds.min_distance {b.min_distance} > max_distance {b.max_distance}")
    if b.min_pitch is not None and b.max_pitch is not None and b.min_pitch > b.max_pitch:
        raise ConfigError(f"camera.bounds.min_pitch {b.min_pitch} > max_pitch {b.max_pitch}")


def load_config(path: Path | str | None, *, strict: bool = False) -> ViewerConfig:
    """
    Load viewer settings from a JSON object file layered over the defaults.

    - path=None: defaults
    - strict=True: missing/broken/non-object file -> raise ConfigError
    - strict=False: log a warning and fall back to defaults
    """
    if path is None:
        return ViewerConfig()

    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ConfigError(f"Config JSON must be an object at top-level: {path}")
        config = config_from_dict(data)
    except (OSError, ValueError, TypeError, ConfigError) as e:
        if strict:
            if isinstance(e, ConfigError):
                raise
            raise ConfigError(f"Failed to load config from {path}: {e}") from e
        logger.warning("Failed to load config from %s (%s), using defaults", path, e)
        return ViewerConfig()

    logger.info("Loaded config from %s", path)
    return config
