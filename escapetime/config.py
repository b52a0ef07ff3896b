"""
Render configuration.

Defaults come from the packaged settings.json; a user settings file and
command line options are layered on top. Every value is validated before
any computation starts.
"""

import json
import logging
import math
import os
from dataclasses import dataclass, fields, replace

from .colormaps import get_palette, list_palette_names
from .compute import MAX_ITERATIONS, Evaluator
from .viewport import Viewport


logger = logging.getLogger(__name__)

SETTINGS_PATH = os.path.join(os.path.dirname(__file__), 'settings.json')


class ConfigurationError(ValueError):
    """Raised for an invalid render configuration."""


def load_settings(path=None):
    """
    Load settings from a JSON file.

    Args:
        path: Settings file (default: the packaged settings.json)

    Returns:
        dict of settings, empty when the file is missing or malformed
    """
    settings_path = path or SETTINGS_PATH
    try:
        with open(settings_path, 'r') as f:
            settings = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        logger.warning("Could not load %s: %s", settings_path, e)
        return {}
    if not isinstance(settings, dict):
        logger.warning("Ignoring %s: top level is not an object", settings_path)
        return {}
    return settings


@dataclass(frozen=True)
class RenderConfig:
    """
    Everything a render needs besides the core functions themselves.

    center_re/center_im/scale of None mean "fit the classic overview".
    workers of None means one worker per CPU.
    """

    width: int = 800
    height: int = 600
    center_re: float = None
    center_im: float = None
    scale: float = None
    max_iterations: int = 256
    escape_radius_squared: float = 4.0
    evaluator: str = "optimized"
    palette: str = "Classic"
    smooth: bool = True
    workers: int = None

    @classmethod
    def from_mapping(cls, mapping):
        """
        Build a config from a dict, ignoring None values and unknown keys.

        Unknown keys are logged at debug level.
        """
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in mapping.items():
            if key not in known:
                logger.debug("Ignoring unknown setting %r", key)
                continue
            if value is not None:
                values[key] = value
        return cls(**values)

    def merged(self, overrides):
        """Return a copy with the non-None entries of overrides applied."""
        known = {f.name for f in fields(self)}
        return replace(self, **{k: v for k, v in overrides.items() if k in known and v is not None})

    def validate(self):
        """
        Check every value.

        Returns:
            self, to allow chaining

        Raises:
            ConfigurationError describing the first invalid value
        """
        for name in ("width", "height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
        if isinstance(self.max_iterations, bool) or not isinstance(self.max_iterations, int) \
                or self.max_iterations <= 0:
            raise ConfigurationError(
                f"max_iterations must be a positive integer, got {self.max_iterations!r}")
        if self.max_iterations > MAX_ITERATIONS:
            raise ConfigurationError(
                f"max_iterations must be <= {MAX_ITERATIONS}, got {self.max_iterations}")
        if not _positive_finite(self.escape_radius_squared):
            raise ConfigurationError(
                f"escape_radius_squared must be positive, got {self.escape_radius_squared!r}")
        if self.scale is not None and not _positive_finite(self.scale):
            raise ConfigurationError(f"scale must be positive, got {self.scale!r}")
        for name in ("center_re", "center_im"):
            value = getattr(self, name)
            if value is not None and not (_is_number(value) and math.isfinite(value)):
                raise ConfigurationError(f"{name} must be a finite number, got {value!r}")
        if self.workers is not None and (isinstance(self.workers, bool)
                                         or not isinstance(self.workers, int) or self.workers <= 0):
            raise ConfigurationError(f"workers must be a positive integer, got {self.workers!r}")
        try:
            Evaluator.parse(self.evaluator)
        except ValueError as e:
            raise ConfigurationError(str(e)) from None
        if str(self.palette).lower() not in [n.lower() for n in list_palette_names()]:
            raise ConfigurationError(
                f"unknown palette {self.palette!r}, expected one of {list_palette_names()}")
        return self

    def viewport(self):
        """The Viewport described by this config."""
        default = Viewport.default(self.width, self.height)
        center = complex(
            default.center.real if self.center_re is None else self.center_re,
            default.center.imag if self.center_im is None else self.center_im,
        )
        scale = default.scale if self.scale is None else self.scale
        return Viewport(center=center, scale=scale, width=self.width, height=self.height)

    def evaluator_choice(self):
        return Evaluator.parse(self.evaluator)

    def palette_choice(self):
        return get_palette(self.palette)


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _positive_finite(value):
    return _is_number(value) and math.isfinite(value) and value > 0


def load_config(path=None, overrides=None):
    """
    Packaged defaults, then the settings file at path, then overrides.

    Returns:
        A validated RenderConfig
    """
    config = RenderConfig.from_mapping(load_settings())
    if path is not None:
        config = config.merged(load_settings(path))
    if overrides:
        config = config.merged(overrides)
    return config.validate()
