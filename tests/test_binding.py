"""Tests for syncing observed options into a running engine."""

import pytest

from binding import OptionsBinding, option_differs
from engine import FrameState, ParticleEngine
from options import ConfigurationError, ParameterRange


@pytest.fixture
def engine(container, scheduler, clock):
    return ParticleEngine(
        container, {'theme': 'fallingStars', 'particle_generation_time_ms': 0},
        scheduler=scheduler, clock=clock,
    )


def run_frames(clock, scheduler, count):
    for _ in range(count):
        clock.advance(16)
        scheduler.run_pending()


def test_option_differs_merges_mappings():
    current = {'x': 0.0, 'y': 0.6, 'z': 0.0}
    assert not option_differs(current, {'y': 0.6})
    assert option_differs(current, {'y': 1})
    assert not option_differs('starBurst', 'starBurst')
    assert option_differs(True, False)


def test_unchanged_options_do_nothing(engine, clock, scheduler):
    run_frames(clock, scheduler, 3)
    live = engine.live_count

    reset = OptionsBinding(engine).update({'theme': 'fallingStars', 'gravity': {'y': 0.6}})

    assert reset is False
    assert engine.live_count == live


def test_plain_field_is_written_without_reset(engine, clock, scheduler):
    run_frames(clock, scheduler, 3)
    live = engine.live_count

    reset = OptionsBinding(engine).update({'theme': 'fallingStars', 'fade_out_time_ms': 1200})

    assert reset is False
    assert engine.config.fade_out_time_ms == 1200.0
    assert engine.live_count == live


def test_theme_change_triggers_reset(engine, clock, scheduler):
    run_frames(clock, scheduler, 3)

    reset = OptionsBinding(engine).update({'theme': 'starBurst'})

    assert reset is True
    assert engine.config.theme == 'starBurst'
    assert engine.config.particle_parameters['y'] == ParameterRange(1.0, 1.0)
    assert engine.live_count == 0


def test_capacity_change_triggers_reset(engine):
    reset = OptionsBinding(engine).update({'max_particles': 7})

    assert reset is True
    assert engine.particles.capacity == 7


def test_running_false_stops_and_true_restarts(engine, clock, scheduler):
    binding = OptionsBinding(engine)
    binding.update({'running': False})
    run_frames(clock, scheduler, 1)
    assert engine.config.running is False
    assert engine.state is FrameState.STOPPED

    binding.update({'running': True})

    assert engine.config.running is True
    assert engine.state is FrameState.SCHEDULED
    assert scheduler.pending


def test_invalid_field_surfaces(engine):
    with pytest.raises(ConfigurationError):
        OptionsBinding(engine).update({'sparkle': True})
    with pytest.raises(ConfigurationError):
        OptionsBinding(engine).update({'theme': 'sparkles'})
    assert engine.config.theme == 'fallingStars'
