"""Engine tunables and their YAML loader.

Every build reads its sampling ranges and resolution from an
:class:`EngineConfig`. The defaults reproduce the stock viewer; a YAML file
can override any subset of fields::

    resolution: 80
    surface_clamp: [-20, 20]

Environment Variables:
    FORMULAGRAPH_CONFIG: path to a YAML file used by :func:`load_config`
                         when no explicit path is given.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

__all__ = [
    "FORMULAGRAPH_CONFIG",
    "EngineConfig",
    "DEFAULT_CONFIG",
    "load_config",
]

FORMULAGRAPH_CONFIG = "FORMULAGRAPH_CONFIG"


@dataclass(frozen=True)
class EngineConfig:
    """Sampling and clamping parameters for geometry builds."""

    resolution: int = 50                    # samples per sweep / grid cells per side
    min_resolution: int = 2
    max_resolution: int = 500
    function_range: float = 10.0            # 2D functions sweep [-range, range]
    function_clamp: Tuple[float, float] = (-100.0, 100.0)
    surface_size: float = 10.0              # surface grid spans [-size/2, size/2]^2
    surface_clamp: Tuple[float, float] = (-10.0, 10.0)
    t_min: float = 0.0
    t_max: float = 2 * math.pi
    theta_max: float = 2 * math.pi
    pole_bisection_steps: int = 24
    placeholder_size: float = 2.0

    def __post_init__(self) -> None:
        if self.min_resolution < 1 or self.max_resolution < self.min_resolution:
            raise ValueError("resolution bounds must satisfy 1 <= min <= max")
        for name in ("function_clamp", "surface_clamp"):
            low, high = getattr(self, name)
            if low >= high:
                raise ValueError(f"{name} must be an increasing (low, high) pair")
        if self.function_range <= 0 or self.surface_size <= 0:
            raise ValueError("sampling ranges must be positive")

    def clamp_resolution(self, value: Optional[float]) -> int:
        """Resolution to use for a build, falling back to the default."""
        if value is None or not math.isfinite(value) or value <= 0:
            value = self.resolution
        return int(min(self.max_resolution, max(self.min_resolution, round(value))))

    @property
    def surface_extent(self) -> float:
        return self.surface_size / 2.0


DEFAULT_CONFIG = EngineConfig()


def _coerce(name: str, value: Any) -> Any:
    if name in ("function_clamp", "surface_clamp"):
        if not isinstance(value, (list, tuple)) or len(value) != 2:
            raise ValueError(f"'{name}' must be a two-element list")
        return (float(value[0]), float(value[1]))
    if name in ("resolution", "min_resolution", "max_resolution", "pole_bisection_steps"):
        return int(value)
    return float(value)


def load_config(path: Optional[Path] = None) -> EngineConfig:
    """Load engine settings from YAML.

    Args:
        path: YAML file to read. Defaults to ``$FORMULAGRAPH_CONFIG``; with
              neither set the default configuration is returned.

    Raises:
        FileNotFoundError: If the configured file does not exist
        ValueError: If the file is not a mapping or names unknown settings
    """
    if path is None:
        env_path = os.environ.get(FORMULAGRAPH_CONFIG)
        if not env_path:
            return DEFAULT_CONFIG
        path = Path(env_path).expanduser()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Invalid config format in {path}: expected mapping at root")

    known = {f.name for f in fields(EngineConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown config setting(s) in {path}: {unknown}")

    overrides: Dict[str, Any] = {name: _coerce(name, value) for name, value in data.items()}
    return replace(DEFAULT_CONFIG, **overrides)
