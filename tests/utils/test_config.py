"""Unit tests for the configuration loader."""

import math
import tempfile
from pathlib import Path

import pytest

from src.geometry.errors import InvalidArgumentError
from src.utils.config import DEFAULT_CONFIG, GeometryConfig, load_config


class TestGeometryConfig:
    """Test suite for GeometryConfig."""

    def test_defaults(self):
        """Test the built-in defaults."""
        assert DEFAULT_CONFIG.flatten_max_depth == 16
        assert DEFAULT_CONFIG.offset_kink_angle == pytest.approx(0.75 * math.pi)
        assert DEFAULT_CONFIG.spatial_minimum_cell_size == 10.0

    def test_from_dict_sections(self):
        """Test that sections map onto prefixed fields."""
        config = GeometryConfig.from_dict({
            "offset": {"kink_angle": 2.0, "max_resample": 50},
            "relative_epsilon": 1e-8,
        })
        assert config.offset_kink_angle == 2.0
        assert config.offset_max_resample == 50
        assert config.relative_epsilon == 1e-8
        assert config.clothoid_max_iterations == 100

    def test_unknown_key(self):
        """Test that misspelt keys raise."""
        with pytest.raises(InvalidArgumentError):
            GeometryConfig.from_dict({"offset": {"kink": 2.0}})
        with pytest.raises(InvalidArgumentError):
            GeometryConfig.from_dict({"epsilon": 1e-8})

    def test_invalid_values(self):
        """Test that out-of-range values raise."""
        with pytest.raises(InvalidArgumentError):
            GeometryConfig(offset_kink_angle=math.pi)
        with pytest.raises(InvalidArgumentError):
            GeometryConfig(flatten_max_depth=0)
        with pytest.raises(InvalidArgumentError):
            GeometryConfig(spatial_minimum_cell_size=0.0)

    def test_default_file(self):
        """Test loading the bundled configuration file."""
        config = GeometryConfig.from_file()
        assert config.flatten_max_depth == DEFAULT_CONFIG.flatten_max_depth
        assert config.offset_kink_angle == pytest.approx(DEFAULT_CONFIG.offset_kink_angle)
        assert config.clothoid_tolerance == DEFAULT_CONFIG.clothoid_tolerance

    def test_from_file(self):
        """Test loading a custom YAML file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "custom.yaml"
            path.write_text("flatten:\n  max_depth: 8\nspatial:\n  minimum_cell_size: 2.5\n")
            config = GeometryConfig.from_file(path)
        assert config.flatten_max_depth == 8
        assert config.spatial_minimum_cell_size == 2.5

    def test_missing_file(self):
        """Test that a missing file gives an empty mapping."""
        assert load_config("/nonexistent/geometry.yaml") == {}
