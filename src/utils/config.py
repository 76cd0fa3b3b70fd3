"""Configuration loader.

Reads configuration files in YAML format and maps them onto the
tunables of the geometry routines.  The default configuration lives in
``configs/geometry.yaml`` at the project root; every key is optional
and falls back to the defaults of :class:`GeometryConfig`.
"""

import math
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..geometry.errors import InvalidArgumentError


DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "configs" / "geometry.yaml"


def load_config(path: Union[str, Path]) -> Dict[str, Any]:
    """Load a YAML configuration file into a dictionary.

    Parameters
    ----------
    path : str or Path
        Path to the YAML configuration file.

    Returns
    -------
    dict
        Parsed configuration dictionary.  Returns an empty dict if the
        file does not exist or is empty.
    """
    cfg_path = Path(path)
    if not cfg_path.is_file():
        return {}
    with open(cfg_path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise InvalidArgumentError(f"configuration root must be a mapping, got {type(data).__name__}")
    return data


@dataclass(frozen=True)
class GeometryConfig:
    """Tunables shared by flattening, offsetting, clothoid fitting and indexing."""

    flatten_max_depth: int = 16
    """Maximum number of bisection levels during adaptive flattening."""

    offset_kink_angle: float = 0.75 * math.pi
    """Turn angle (radians) above which a vertex is treated as a kink
    instead of being mitered."""

    offset_max_offset_step: float = 0.1
    """Maximum change of a variable offset between consecutive samples (m)."""

    offset_max_resample: int = 1000
    """Ceiling on the number of samples inserted into a single segment."""

    relative_epsilon: float = 1e-9
    """Duplicate-point epsilon relative to the coordinate magnitude."""

    clothoid_max_iterations: int = 100
    """Iteration ceiling of the two-pose clothoid root finder."""

    clothoid_tolerance: float = 1e-12
    """Residual below which the two-pose clothoid fit is converged."""

    spatial_minimum_cell_size: float = 10.0
    """Default minimum cell size of a spatial index (m)."""

    def __post_init__(self):
        if self.flatten_max_depth < 1:
            raise InvalidArgumentError(f"flatten.max_depth must be >= 1, got {self.flatten_max_depth}")
        if not 0.0 < self.offset_kink_angle < math.pi:
            raise InvalidArgumentError(f"offset.kink_angle must be in (0, pi), got {self.offset_kink_angle}")
        if self.offset_max_offset_step <= 0.0:
            raise InvalidArgumentError(
                f"offset.max_offset_step must be > 0, got {self.offset_max_offset_step}")
        if self.offset_max_resample < 1:
            raise InvalidArgumentError(f"offset.max_resample must be >= 1, got {self.offset_max_resample}")
        if self.relative_epsilon <= 0.0:
            raise InvalidArgumentError(f"relative_epsilon must be > 0, got {self.relative_epsilon}")
        if self.clothoid_max_iterations < 1:
            raise InvalidArgumentError(
                f"clothoid.max_iterations must be >= 1, got {self.clothoid_max_iterations}")
        if self.clothoid_tolerance <= 0.0:
            raise InvalidArgumentError(f"clothoid.tolerance must be > 0, got {self.clothoid_tolerance}")
        if self.spatial_minimum_cell_size <= 0.0:
            raise InvalidArgumentError(
                f"spatial.minimum_cell_size must be > 0, got {self.spatial_minimum_cell_size}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GeometryConfig":
        """Build a configuration from a nested dictionary.

        Sections map onto field prefixes, so ``{"offset": {"kink_angle": 2.5}}``
        sets ``offset_kink_angle``.  Top-level scalar keys are matched
        directly.

        Parameters
        ----------
        data : dict
            Parsed YAML document.

        Returns
        -------
        GeometryConfig
            Configuration with defaults for missing keys.
        """
        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in (data or {}).items():
            if isinstance(value, dict):
                for sub_key, sub_value in value.items():
                    name = f"{key}_{sub_key}"
                    if name not in known:
                        raise InvalidArgumentError(f"unknown configuration key '{key}.{sub_key}'")
                    values[name] = sub_value
            elif key in known:
                values[key] = value
            else:
                raise InvalidArgumentError(f"unknown configuration key '{key}'")
        return cls(**values)

    @classmethod
    def from_file(cls, path: Optional[Union[str, Path]] = None) -> "GeometryConfig":
        """Load a configuration file, defaulting to ``configs/geometry.yaml``."""
        return cls.from_dict(load_config(path or DEFAULT_CONFIG_PATH))


DEFAULT_CONFIG = GeometryConfig()
