"""
Configuration management for polyimage
"""

import copy
import operator
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from polyimage.errors import InvalidConfiguration

MIN_ORDER = 1
MAX_ORDER = 6
MIN_WINDOW_SIZE = 3

DEFAULT_CONFIG = {
    "poly_image": {
        "order": 3,
        "window_size": 13,
        "downsample": 1,
        "backend": "filter"
    },
    "logging": {
        "level": "INFO",
        "log_file": None
    }
}


def _as_int(value: Any, name: str) -> int:
    """Coerce an integral value, rejecting bools and floats."""
    if isinstance(value, bool):
        raise InvalidConfiguration(f"{name} must be an integer, got {value!r}")
    try:
        return operator.index(value)
    except TypeError:
        raise InvalidConfiguration(f"{name} must be an integer, got {value!r}") from None


def validate_order(order: Any) -> int:
    order = _as_int(order, "order")
    if not MIN_ORDER <= order <= MAX_ORDER:
        raise InvalidConfiguration(
            f"order must be in [{MIN_ORDER}, {MAX_ORDER}], got {order}")
    return order


def validate_window_size(window_size: Any) -> int:
    window_size = _as_int(window_size, "window_size")
    if window_size < MIN_WINDOW_SIZE or window_size % 2 == 0:
        raise InvalidConfiguration(
            f"window_size must be odd and >= {MIN_WINDOW_SIZE}, got {window_size}")
    return window_size


def validate_downsample(downsample: Any) -> int:
    downsample = _as_int(downsample, "downsample")
    if downsample < 1:
        raise InvalidConfiguration(f"downsample must be >= 1, got {downsample}")
    return downsample


@dataclass(frozen=True)
class PolyConfig:
    """Immutable polynomial feature configuration."""

    order: int = DEFAULT_CONFIG["poly_image"]["order"]
    window_size: int = DEFAULT_CONFIG["poly_image"]["window_size"]
    downsample: int = DEFAULT_CONFIG["poly_image"]["downsample"]

    def __post_init__(self):
        # frozen dataclass: normalized values are written through object.__setattr__
        object.__setattr__(self, "order", validate_order(self.order))
        object.__setattr__(self, "window_size", validate_window_size(self.window_size))
        object.__setattr__(self, "downsample", validate_downsample(self.downsample))

    @property
    def margin(self) -> int:
        """Distance from the window centre to its edge."""
        return (self.window_size - 1) // 2

    def with_fit(self, order: int, window_size: int) -> "PolyConfig":
        """Return a copy with a new order and window size."""
        return PolyConfig(order=order, window_size=window_size, downsample=self.downsample)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PolyConfig":
        defaults = DEFAULT_CONFIG["poly_image"]
        return cls(
            order=data.get("order", defaults["order"]),
            window_size=data.get("window_size", defaults["window_size"]),
            downsample=data.get("downsample", defaults["downsample"]),
        )


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def load_config(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load configuration, merging a YAML file over the defaults.

    Args:
        path: Optional path to a YAML file

    Returns:
        Merged configuration dictionary
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    if path is None:
        return config

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, 'r') as f:
        loaded = yaml.safe_load(f)

    if loaded is None:
        return config
    if not isinstance(loaded, dict):
        raise InvalidConfiguration(f"Configuration in {path} must be a mapping")

    unknown = set(loaded) - set(DEFAULT_CONFIG)
    if unknown:
        raise InvalidConfiguration(f"Unknown configuration sections: {sorted(unknown)}")
    for section, value in loaded.items():
        if not isinstance(value, dict):
            raise InvalidConfiguration(f"Section '{section}' must be a mapping")

    return _merge(config, loaded)
