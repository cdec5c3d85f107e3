# simulation.py
"""
Handles the per-frame particle lifecycle and physics.

This module defines the Simulation class, which advances the particle pool
by one frame: it destroys dead or long-lost particles, integrates and
renders the survivors, and generates new particles into free slots. It
also holds the physics integrator and the default generation strategies.
"""
import logging
import numpy as np
from typing import Callable, Dict, TYPE_CHECKING
from numba import jit

from container import Container, ParticleElement
from particle import Particle, ParticleSystem
from utils import rand_range, rand_range_int

if TYPE_CHECKING:
    from options import EffectiveConfiguration

# --- Data Contracts ---
#
# apply_forces(particle: Particle, elapsed_ms: float, gravity: np.ndarray) -> None:
#   - Side Effects: Advances the particle's position, velocity and rotation
#     by elapsed_ms. Position moves with the velocity from before the step.
#   - Invariants: elapsed_ms == 0 leaves every field unchanged.
#
# class Simulation:
#   - __init__(self, particles: ParticleSystem, config: EffectiveConfiguration,
#              container: Container, rng: np.random.Generator):
#     - Inputs:
#       - particles: The slot pool. Its capacity must equal
#         len(container.elements).
#       - config: The effective configuration (read every frame).
#       - container: Supplies the viewport size and one element per slot.
#       - rng: The engine's random generator.
#
#   - step(self, elapsed_ms: float, now_ms: float) -> None:
#     - Side Effects: Runs the destroy, animate and generate passes, in
#       that order, against the pool and its elements.
#     - Invariants: particles.live_count == occupied slots <= capacity.

_NO_TRANSLATION = np.zeros(3, dtype=np.float64)


@jit(nopython=True)
def _apply_forces_numba(position, velocity, gravity, translation, has_translation, s):
    """
    Numba-jitted explicit Euler step on the particle's vectors, in place.
    """
    for k in range(3):
        position[k] += velocity[k] * s
    for k in range(3):
        velocity[k] += gravity[k] * s
    if has_translation:
        for k in range(3):
            position[k] += translation[k] * s


def apply_forces(particle: Particle, elapsed_ms: float, gravity: np.ndarray) -> None:
    """
    Applies velocity, spin, gravity and constant translation for elapsed_ms.
    """
    s = elapsed_ms / 1000.0
    has_translation = particle.translation is not None
    translation = particle.translation if has_translation else _NO_TRANSLATION
    _apply_forces_numba(particle.position, particle.velocity, gravity, translation, has_translation, s)
    particle.rotation += particle.angular_velocity * s


# --- Generation Strategies ---
#
# A count strategy is called as fn(simulation, elapsed_since_generate_ms)
# and returns how many particles to create this frame. A particle
# generator is called as fn(simulation, element, index, now_ms) and
# returns the new Particle bound to `element`.

def fixed_rate_count(simulation: "Simulation", elapsed_since_generate_ms: float) -> int:
    """One particle whenever the generation interval has passed."""
    if elapsed_since_generate_ms > simulation.config.particle_generation_time_ms:
        return 1
    return 0


def burst_count(simulation: "Simulation", elapsed_since_generate_ms: float) -> int:
    """One particle per whole generation interval elapsed, to catch up after slow frames."""
    interval = simulation.config.particle_generation_time_ms
    if interval <= 0:
        return 1
    return int(elapsed_since_generate_ms // interval)


def generate_random_particle(simulation: "Simulation", element: ParticleElement,
                             index: int, now_ms: float) -> Particle:
    """Picks a random class and samples every parameter from its range."""
    config = simulation.config
    rng = simulation.rng
    particle_class = config.particle_classes[rand_range_int(rng, 0, len(config.particle_classes))]
    element.bind(particle_class)

    params = {
        name: rand_range(rng, bounds.min, bounds.max)
        for name, bounds in config.particle_parameters.items()
    }
    return Particle(params, element, particle_class, now_ms)


GENERATION_STRATEGIES: Dict[str, Callable[..., int]] = {
    "fixed_rate": fixed_rate_count,
    "burst": burst_count,
}

PARTICLE_GENERATORS: Dict[str, Callable[..., Particle]] = {
    "random": generate_random_particle,
}


class Simulation:
    """
    Runs the destroy, animate and generate passes over the particle pool.
    """
    def __init__(self, particles: ParticleSystem, config: "EffectiveConfiguration",
                 container: Container, rng: np.random.Generator):
        """
        Initializes the simulation for one configuration.

        Args:
            particles (ParticleSystem): The slot pool to manage.
            config (EffectiveConfiguration): The effective configuration.
            container (Container): The visual container with one element per slot.
            rng (np.random.Generator): Source of all randomness.
        """
        self.particles = particles
        self.config = config
        self.container = container
        self.elements = container.elements
        self.rng = rng

        if len(self.elements) != particles.capacity:
            msg = (
                f"Container provides {len(self.elements)} elements for a pool of "
                f"{particles.capacity} slots."
            )
            logging.critical(msg)
            raise ValueError(msg)

        # Running totals, read by the frame loop for throttled status logging.
        self.generated_total = 0
        self.destroyed_total = 0

        logging.info(
            f"Simulation initialized: theme '{config.theme}', "
            f"{particles.capacity} slots."
        )

    def step(self, elapsed_ms: float, now_ms: float) -> None:
        """
        Executes one frame: destroy, then animate, then generate.
        """
        self.destroy_particles(now_ms)
        self.animate_particles(elapsed_ms, now_ms)
        self.generate_particles(now_ms)

    def destroy_particles(self, now_ms: float) -> None:
        """Frees every slot whose particle died or stayed off-screen too long."""
        max_offscreen = self.config.max_time_offscreen_ms
        for index, particle in list(self.particles.occupied()):
            expired = (
                particle.offscreen_since_ms is not None
                and now_ms - particle.offscreen_since_ms > max_offscreen
            )
            if not particle.live or expired:
                self.particles.free(index)
                self.destroyed_total += 1

    def animate_particles(self, elapsed_ms: float, now_ms: float) -> None:
        """Integrates and renders every particle in the pool."""
        gravity = self.config.gravity
        for _, particle in self.particles.occupied():
            apply_forces(particle, elapsed_ms, gravity)
            self.render_particle(particle, now_ms)

    def generate_particles(self, now_ms: float) -> None:
        """Creates new particles in the lowest free slots, as the count strategy asks."""
        if not self.config.running or self.particles.is_full():
            return

        elapsed_since_generate = now_ms - self.particles.last_generate_time_ms
        num_generate = self.config.get_num_particles_to_generate(self, elapsed_since_generate)
        if num_generate <= 0:
            return
        self.particles.last_generate_time_ms = now_ms

        for _ in range(num_generate):
            if self.particles.is_full():
                break
            index = self.particles.first_free_slot()
            if index is None:
                logging.warning(
                    f"No free slot with {self.particles.live_count}/{self.particles.capacity} "
                    f"particles live. Skipping generation."
                )
                continue
            particle = self.config.generate_particle(self, self.elements[index], index, now_ms)
            self.particles.assign(index, particle)
            self.generated_total += 1
            # Render straight away so the element never shows a stale transform.
            self.render_particle(particle, now_ms)

    def render_particle(self, particle: Particle, now_ms: float) -> None:
        """
        Projects a particle and writes the result to its element.

        An element whose scaled bounds are entirely outside the viewport (or
        whose particle is behind the viewer) is hidden and its off-screen
        timer started. It is shown again, timer cleared, once back in view.
        """
        width = self.container.width
        height = self.container.height
        result = self.config.project_particle(particle, width, height, self.config, now_ms)

        half_w = particle.width * result.scale / 2
        half_h = particle.height * result.scale / 2
        offscreen = (
            particle.z < 0
            or result.x + half_w < 0
            or result.x - half_w > width
            or result.y + half_h < 0
            or result.y - half_h > height
        )

        element = particle.element
        if offscreen:
            if particle.offscreen_since_ms is None:
                element.hide()
                particle.offscreen_since_ms = now_ms
            return

        if particle.offscreen_since_ms is not None:
            element.show()
            particle.offscreen_since_ms = None
        element.set_transform(result.x, result.y, result.scale, result.rotation, result.opacity)
