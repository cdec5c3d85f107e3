"""
Pytest configuration and shared fixtures for the particle engine tests.

Provides:
- Path setup so the flat top-level modules import without installation
- A controllable millisecond clock
- A headless container and a manual frame scheduler
- A factory for particles with explicit parameters
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from container import Container, ParticleElement  # noqa: E402
from engine import FrameScheduler  # noqa: E402
from particle import Particle  # noqa: E402


class FakeClock:
    """A millisecond clock that only moves when told to."""

    def __init__(self, start=0.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms
        return self.now


# Parameters of a particle that sits still in the middle of the screen.
STILL_PARAMS = {
    'x': 0.0, 'y': 0.0, 'z': 1.0,
    'vx': 0.0, 'vy': 0.0, 'vz': 0.0,
    'rotation': 0.0, 'angular_velocity': 0.0,
    'scale': 1.0, 'opacity': 1.0,
}

# Options for an engine whose particles appear at the centre and never move.
STILL_OPTIONS = {
    'gravity': {'x': 0, 'y': 0, 'z': 0},
    'particle_parameters': {
        name: {'min': value, 'max': value} for name, value in STILL_PARAMS.items()
    },
}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler():
    return FrameScheduler()


@pytest.fixture
def container():
    return Container(800, 600)


@pytest.fixture
def make_particle():
    """Builds a particle from STILL_PARAMS with the given overrides."""
    def _make(create_time_ms=0.0, index=0, **overrides):
        params = dict(STILL_PARAMS)
        params.update(overrides)
        element = ParticleElement(index)
        element.bind('red-star')
        return Particle(params, element, 'red-star', create_time_ms)
    return _make
