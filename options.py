# options.py
"""
Resolves the layered engine options into one effective configuration.

The effective options are built from three sources, later ones winning
key by key: the built-in defaults, the named theme, and the options the
caller passes in. The result is validated and turned into an
EffectiveConfiguration, with strategy names replaced by the functions
they refer to. Any problem is a configuration error and is raised, never
papered over with a default.
"""
import logging
import numpy as np
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Optional

from constants import (
    DEFAULT_OPTIONS, THEMES, PARTICLE_CLASSES, REQUIRED_PARAMETERS,
    TRANSLATION_PARAMETERS,
)
from projection import PROJECTORS
from simulation import GENERATION_STRATEGIES, PARTICLE_GENERATORS
from utils import deep_merge

# --- Data Contracts ---
#
# resolve_options(overrides: Optional[Mapping], defaults: Mapping,
#                 themes: Mapping) -> EffectiveConfiguration:
#   - Inputs:
#     - overrides: Caller options. May name a "theme".
#     - defaults: Base options; must define every option.
#     - themes: Theme name -> partial options.
#   - Outputs: A validated EffectiveConfiguration.
#   - Side Effects: None. Neither the defaults nor the theme table is
#     modified.
#   - Raises: ConfigurationError on an unknown theme, option, strategy or
#     particle class, and on a malformed parameter range.
#
# EffectiveConfiguration.set_option(name: str, value: Any) -> None:
#   - Side Effects: Updates one live option between frames.
#   - Raises: ConfigurationError for unknown names, invalid values, and
#     options that can only change through a reset.


class ConfigurationError(ValueError):
    """Raised when engine options cannot be resolved into a usable configuration."""


class ParameterRange(NamedTuple):
    min: float
    max: float


# Options that define the shape of the pool or of its particles. Changing
# them requires a full reset.
RESET_OPTIONS = frozenset({"theme", "max_particles", "particle_parameters", "particle_classes"})

# Option key -> registry of the named strategies it may select.
_STRATEGY_REGISTRIES: Dict[str, Mapping[str, Callable]] = {
    "func_get_num_particles_to_generate": GENERATION_STRATEGIES,
    "func_generate_particle": PARTICLE_GENERATORS,
    "func_project_particle": PROJECTORS,
}


def _config_error(msg: str) -> ConfigurationError:
    logging.error(f"Configuration error: {msg}")
    return ConfigurationError(msg)


@dataclass(eq=False)
class EffectiveConfiguration:
    """
    The fully merged, validated options a running engine works from.
    """
    running: bool
    theme: str
    background_style: Dict[str, str]
    particle_classes: List[str]
    max_particles: int
    particle_generation_time_ms: float
    max_time_offscreen_ms: float
    fade_out_time_ms: float
    gravity: np.ndarray
    seed: Optional[int]
    get_num_particles_to_generate: Callable
    generate_particle: Callable
    project_particle: Callable
    particle_parameters: Dict[str, ParameterRange]
    # The merged option dict this configuration was built from.
    options: Dict[str, Any] = field(default_factory=dict, repr=False)

    def set_option(self, name: str, value: Any) -> None:
        """
        Applies a single option change to the live configuration.
        """
        if name not in self.options:
            raise _config_error(f"Unknown option '{name}'.")
        if name in RESET_OPTIONS:
            raise _config_error(f"Option '{name}' can only be changed through reset().")

        options = dict(self.options)
        if isinstance(value, Mapping) and isinstance(options[name], Mapping):
            options[name] = deep_merge(options[name], value)
        else:
            options[name] = value
        updated = _build_configuration(options)
        for attr in _SIMPLE_FIELDS + tuple(_STRATEGY_FIELDS.values()) + ("gravity",):
            setattr(self, attr, getattr(updated, attr))
        self.options = updated.options
        logging.info(f"Option '{name}' set to {value!r}.")


# Option key -> EffectiveConfiguration attribute, for the strategy options.
_STRATEGY_FIELDS = {
    "func_get_num_particles_to_generate": "get_num_particles_to_generate",
    "func_generate_particle": "generate_particle",
    "func_project_particle": "project_particle",
}

_SIMPLE_FIELDS = (
    "running", "theme", "background_style", "particle_classes", "max_particles",
    "particle_generation_time_ms", "max_time_offscreen_ms", "fade_out_time_ms", "seed",
)


def resolve_options(overrides: Optional[Mapping[str, Any]] = None,
                    defaults: Mapping[str, Any] = DEFAULT_OPTIONS,
                    themes: Mapping[str, Mapping[str, Any]] = THEMES) -> EffectiveConfiguration:
    """
    Merges defaults, the selected theme and the overrides, then validates.

    Args:
        overrides: Caller-supplied options. May be None.
        defaults: The base option set.
        themes: The table of named themes.

    Returns:
        EffectiveConfiguration: The merged configuration.
    """
    overrides = overrides or {}
    theme_name = overrides.get('theme', defaults['theme'])
    if theme_name not in themes:
        raise _config_error(f"Unknown theme '{theme_name}'. Known themes: {sorted(themes)}.")

    merged = deep_merge(defaults, themes[theme_name])
    merged = deep_merge(merged, overrides)
    merged['theme'] = theme_name

    unknown = sorted(set(merged) - set(defaults))
    if unknown:
        raise _config_error(f"Unknown option(s): {unknown}.")

    config = _build_configuration(merged)
    logging.debug(
        f"Options resolved for theme '{theme_name}': "
        f"{config.max_particles} particles, classes {config.particle_classes}."
    )
    return config


def _build_configuration(options: Dict[str, Any]) -> EffectiveConfiguration:
    """Validates a merged option dict and converts it into typed fields."""
    max_particles = options['max_particles']
    if not isinstance(max_particles, int) or isinstance(max_particles, bool) or max_particles <= 0:
        raise _config_error(f"max_particles must be a positive integer, got {max_particles!r}.")

    particle_classes = list(options['particle_classes'])
    if not particle_classes:
        raise _config_error("particle_classes must name at least one class.")
    missing_classes = [name for name in particle_classes if name not in PARTICLE_CLASSES]
    if missing_classes:
        raise _config_error(f"Unknown particle class(es): {missing_classes}.")

    for key in ('particle_generation_time_ms', 'max_time_offscreen_ms', 'fade_out_time_ms'):
        if not _is_number(options[key]):
            raise _config_error(f"{key} must be a number, got {options[key]!r}.")

    strategies = {
        attr: _resolve_strategy(key, options[key]) for key, attr in _STRATEGY_FIELDS.items()
    }

    return EffectiveConfiguration(
        running=bool(options['running']),
        theme=options['theme'],
        background_style=dict(options['background_style']),
        particle_classes=particle_classes,
        max_particles=max_particles,
        particle_generation_time_ms=float(options['particle_generation_time_ms']),
        max_time_offscreen_ms=float(options['max_time_offscreen_ms']),
        fade_out_time_ms=float(options['fade_out_time_ms']),
        gravity=_parse_gravity(options['gravity']),
        seed=options['seed'],
        particle_parameters=_parse_parameters(options['particle_parameters']),
        options=options,
        **strategies,
    )


def _resolve_strategy(option_name: str, value: Any) -> Callable:
    if callable(value):
        return value
    registry = _STRATEGY_REGISTRIES.get(option_name, {})
    if value not in registry:
        raise _config_error(
            f"Unknown strategy '{value}' for {option_name}. Known: {sorted(registry)}."
        )
    return registry[value]


def _parse_gravity(gravity: Any) -> np.ndarray:
    if not isinstance(gravity, Mapping) or any(axis not in gravity for axis in 'xyz'):
        raise _config_error(f"gravity must define x, y and z, got {gravity!r}.")
    if not all(_is_number(gravity[axis]) for axis in 'xyz'):
        raise _config_error(f"gravity components must be numbers, got {gravity!r}.")
    return np.array([gravity['x'], gravity['y'], gravity['z']], dtype=np.float64)


def _parse_parameters(parameters: Mapping[str, Any]) -> Dict[str, ParameterRange]:
    missing = [name for name in REQUIRED_PARAMETERS if name not in parameters]
    if missing:
        raise _config_error(f"particle_parameters is missing required parameter(s): {missing}.")

    present = [name for name in TRANSLATION_PARAMETERS if name in parameters]
    if present and len(present) != len(TRANSLATION_PARAMETERS):
        raise _config_error(
            f"Translation parameters must be given together as {TRANSLATION_PARAMETERS}, got {present}."
        )

    ranges = {}
    for name, spec in parameters.items():
        if name not in REQUIRED_PARAMETERS and name not in TRANSLATION_PARAMETERS:
            raise _config_error(f"Unknown particle parameter '{name}'.")
        if not isinstance(spec, Mapping) or 'min' not in spec or 'max' not in spec:
            raise _config_error(f"Parameter '{name}' needs both 'min' and 'max', got {spec!r}.")
        if not (_is_number(spec['min']) and _is_number(spec['max'])):
            raise _config_error(f"Parameter '{name}' bounds must be numbers, got {spec!r}.")
        ranges[name] = ParameterRange(float(spec['min']), float(spec['max']))
    return ranges


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
