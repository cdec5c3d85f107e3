"""Tests for the physics integrator."""

import numpy as np
import pytest

from simulation import apply_forces

NO_GRAVITY = np.zeros(3)


def snapshot(particle):
    return (
        particle.position.copy(),
        particle.velocity.copy(),
        particle.rotation,
    )


def test_zero_elapsed_is_a_no_op(make_particle):
    particle = make_particle(x=0.3, y=-0.2, z=0.7, vx=1.5, vy=-2.0, vz=0.1,
                             angular_velocity=90.0, rotation=12.0, tx=1, ty=2, tz=3)
    before = snapshot(particle)

    apply_forces(particle, 0, np.array([0.0, 0.6, 0.0]))

    after = snapshot(particle)
    np.testing.assert_array_equal(after[0], before[0])
    np.testing.assert_array_equal(after[1], before[1])
    assert after[2] == before[2]


def test_velocity_and_spin_scale_with_seconds(make_particle):
    particle = make_particle(vx=2.0, vy=-1.0, vz=0.5, angular_velocity=100.0)

    apply_forces(particle, 500, NO_GRAVITY)

    np.testing.assert_allclose(particle.position, [1.0, -0.5, 1.25])
    assert particle.rotation == pytest.approx(50.0)


def test_position_uses_velocity_from_before_gravity(make_particle):
    particle = make_particle()

    apply_forces(particle, 1000, np.array([0.0, 1.0, 0.0]))

    np.testing.assert_array_equal(particle.position, [0.0, 0.0, 1.0])
    np.testing.assert_array_equal(particle.velocity, [0.0, 1.0, 0.0])


def test_translation_adds_constant_drift(make_particle):
    particle = make_particle(z=15.0, tx=0.0, ty=0.0, tz=-3.0)

    apply_forces(particle, 1000, NO_GRAVITY)

    np.testing.assert_allclose(particle.position, [0.0, 0.0, 12.0])


@pytest.mark.parametrize("elapsed_ms", [0.0, 16.0, 33.3, 1000.0])
def test_two_half_steps_match_one_full_step_without_gravity(make_particle, elapsed_ms):
    params = dict(x=0.1, y=-0.4, z=0.8, vx=0.3, vy=1.2, vz=-0.2,
                  angular_velocity=-75.0, tx=0.5, ty=0.0, tz=-1.0)
    halves = make_particle(**params)
    whole = make_particle(**params)

    apply_forces(halves, elapsed_ms / 2, NO_GRAVITY)
    apply_forces(halves, elapsed_ms / 2, NO_GRAVITY)
    apply_forces(whole, elapsed_ms, NO_GRAVITY)

    np.testing.assert_allclose(halves.position, whole.position)
    np.testing.assert_allclose(halves.velocity, whole.velocity)
    assert halves.rotation == pytest.approx(whole.rotation)


def test_velocity_is_linear_under_gravity(make_particle):
    gravity = np.array([0.0, 0.6, -0.1])
    halves = make_particle(vy=0.5)
    whole = make_particle(vy=0.5)

    apply_forces(halves, 250, gravity)
    apply_forces(halves, 250, gravity)
    apply_forces(whole, 500, gravity)

    np.testing.assert_allclose(halves.velocity, whole.velocity)
    # Explicit Euler: the split step picks up g * t^2 / 4 of extra travel.
    np.testing.assert_allclose(halves.position - whole.position, gravity * 0.5 ** 2 / 4)
