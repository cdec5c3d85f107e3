"""Tests for option resolution and live option updates."""

import numpy as np
import pytest

from constants import DEFAULT_OPTIONS, THEMES
from options import ConfigurationError, ParameterRange, resolve_options
from projection import project_depth_fade, project_perspective
from simulation import burst_count, fixed_rate_count, generate_random_particle


def test_defaults_resolve_to_falling_stars():
    config = resolve_options()

    assert config.theme == "fallingStars"
    assert config.running is True
    assert config.max_particles == 50
    assert config.particle_parameters['y'] == ParameterRange(-1.1, -1.1)
    np.testing.assert_array_equal(config.gravity, [0.0, 0.6, 0.0])
    assert config.get_num_particles_to_generate is fixed_rate_count
    assert config.generate_particle is generate_random_particle
    assert config.project_particle is project_perspective


def test_theme_overrides_defaults():
    config = resolve_options({'theme': 'starBurst'})

    assert config.theme == "starBurst"
    assert config.particle_parameters['y'] == ParameterRange(1.0, 1.0)
    assert config.particle_parameters['vy'] == ParameterRange(-1.5, -2.5)
    # Not part of the theme, so still the default.
    assert config.particle_classes == ["red-star", "blue-star", "yellow-star"]


def test_star_field_selects_depth_projection_and_translation():
    config = resolve_options({'theme': 'starField'})

    assert config.project_particle is project_depth_fade
    assert config.fade_out_time_ms == 0
    assert config.particle_parameters['tz'] == ParameterRange(-3.0, -3.0)
    np.testing.assert_array_equal(config.gravity, [0.0, 0.0, 0.0])


def test_overrides_beat_theme_and_merge_nested_ranges():
    config = resolve_options({
        'theme': 'starBurst',
        'max_particles': 5,
        'particle_parameters': {'x': {'min': -2}},
    })

    assert config.max_particles == 5
    # Only 'min' was overridden; 'max' comes from the theme.
    assert config.particle_parameters['x'] == ParameterRange(-2.0, 0.0)
    assert config.particle_parameters['y'] == ParameterRange(1.0, 1.0)


def test_lists_replace_instead_of_merging():
    config = resolve_options({'particle_classes': ['white-star']})
    assert config.particle_classes == ['white-star']


def test_strategies_may_be_given_by_name_or_callable():
    def never(simulation, elapsed):
        return 0

    config = resolve_options({
        'func_get_num_particles_to_generate': never,
        'func_project_particle': 'depth_fade',
    })
    assert config.get_num_particles_to_generate is never
    assert config.project_particle is project_depth_fade

    config = resolve_options({'func_get_num_particles_to_generate': 'burst'})
    assert config.get_num_particles_to_generate is burst_count


def test_resolving_never_mutates_shared_tables():
    config = resolve_options({'theme': 'starBurst', 'particle_parameters': {'x': {'min': -9}}})
    config.options['particle_parameters']['y']['min'] = 42
    config.options['background_style']['background-color'] = 'red'

    assert DEFAULT_OPTIONS['particle_parameters']['x'] == {'min': -1, 'max': 1}
    assert DEFAULT_OPTIONS['background_style'] == {'background-color': 'black'}
    assert THEMES['starBurst']['particle_parameters']['y'] == {'min': 1, 'max': 1}


@pytest.mark.parametrize("overrides, message", [
    ({'theme': 'noSuchTheme'}, "Unknown theme"),
    ({'colour': 'red'}, "Unknown option"),
    ({'particle_parameters': {'x': {'min': 0, 'max': None}}}, "must be numbers"),
    ({'particle_classes': ['green-star']}, "Unknown particle class"),
    ({'particle_classes': []}, "at least one class"),
    ({'max_particles': 0}, "positive integer"),
    ({'func_project_particle': 'orthographic'}, "Unknown strategy"),
    ({'gravity': [0, 1, 0]}, "gravity must define"),
    ({'particle_parameters': {'wobble': {'min': 0, 'max': 1}}}, "Unknown particle parameter"),
    ({'particle_parameters': {'tx': {'min': 0, 'max': 0}}}, "Translation parameters"),
])
def test_configuration_errors_surface(overrides, message):
    with pytest.raises(ConfigurationError, match=message):
        resolve_options(overrides)


def test_range_missing_a_bound_is_an_error():
    themes = dict(THEMES)
    themes['broken'] = {'particle_parameters': {'z': {'max': 1}}}
    defaults = dict(DEFAULT_OPTIONS)
    defaults['particle_parameters'] = {
        name: spec for name, spec in DEFAULT_OPTIONS['particle_parameters'].items() if name != 'z'
    }

    with pytest.raises(ConfigurationError, match="needs both 'min' and 'max'"):
        resolve_options({'theme': 'broken'}, defaults=defaults, themes=themes)


def test_configuration_error_is_a_value_error():
    assert issubclass(ConfigurationError, ValueError)


def test_set_option_updates_one_field():
    config = resolve_options()
    config.set_option('fade_out_time_ms', 500)
    config.set_option('gravity', {'y': 2})

    assert config.fade_out_time_ms == 500.0
    np.testing.assert_array_equal(config.gravity, [0.0, 2.0, 0.0])
    assert config.options['fade_out_time_ms'] == 500
    assert config.theme == "fallingStars"


def test_set_option_resolves_strategy_names():
    config = resolve_options()
    config.set_option('func_project_particle', 'depth_fade')
    assert config.project_particle is project_depth_fade


@pytest.mark.parametrize("name, value, message", [
    ('theme', 'starBurst', "only be changed through reset"),
    ('max_particles', 10, "only be changed through reset"),
    ('speed', 1, "Unknown option"),
    ('fade_out_time_ms', 'slow', "must be a number"),
])
def test_set_option_rejects_bad_updates(name, value, message):
    config = resolve_options()
    with pytest.raises(ConfigurationError, match=message):
        config.set_option(name, value)
    assert config.fade_out_time_ms == 3000.0
