# engine.py
"""
The public particle engine and its frame driver.

ParticleEngine binds a visual container, resolves its options, owns the
simulation and drives it once per display refresh. Frames are requested
from a FrameScheduler, which stands in for the host's refresh callback:
the host drains it once per refresh, and the engine re-requests a frame
at the end of every tick for as long as it has work to do.
"""
import logging
import numpy as np
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from constants import PARTICLE_CLASSES
from container import Container
from options import EffectiveConfiguration, resolve_options
from particle import ParticleSystem
from simulation import Simulation
from utils import now_ms

# --- Data Contracts ---
#
# class ParticleEngine:
#   - __init__(self, container: Container, options: Optional[Mapping] = None,
#              scheduler: Optional[FrameScheduler] = None,
#              clock: Optional[Callable[[], float]] = None):
#     - Inputs:
#       - container: Where particle elements live; supplies the viewport size.
#       - options: Caller overrides for resolve_options().
#       - scheduler: Host refresh scheduler. A private one is created if omitted.
#       - clock: Millisecond clock. Defaults to utils.now_ms.
#     - Side Effects: Resolves options, provisions the pool and the
#       container's elements, and schedules the first frame if running.
#     - Raises: ConfigurationError for bad options; nothing is provisioned.
#
#   - display_frame(self) -> None:
#     - Side Effects: Runs one tick (destroy, animate, generate) and either
#       requests the next frame or stops.
#     - Invariants: At most one frame is ever pending.


class FrameState(Enum):
    STOPPED = "stopped"
    SCHEDULED = "scheduled"
    TICKING = "ticking"


def should_continue(running: bool, live_count: int) -> bool:
    """The frame loop keeps going while generating or while particles remain."""
    return running or live_count > 0


class FrameScheduler:
    """
    Holds at most one pending frame callback until the host runs it.
    """
    def __init__(self):
        self._pending: Optional[Callable[[], None]] = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def request(self, callback: Callable[[], None]) -> bool:
        """Queues `callback` for the next refresh. Returns False if one is already queued."""
        if self._pending is not None:
            return False
        self._pending = callback
        return True

    def run_pending(self) -> bool:
        """Runs the pending callback, if any. Returns whether one ran."""
        callback = self._pending
        self._pending = None
        if callback is None:
            return False
        callback()
        return True


class ParticleEngine:
    """
    A particle animation bound to one visual container.
    """
    def __init__(self, container: Container, options: Optional[Mapping[str, Any]] = None,
                 scheduler: Optional[FrameScheduler] = None,
                 clock: Optional[Callable[[], float]] = None):
        self.container = container
        self.scheduler = scheduler if scheduler is not None else FrameScheduler()
        self.clock = clock if clock is not None else now_ms
        self.state = FrameState.STOPPED
        self.frame_count = 0

        self.last_time_ms = self.clock()
        self._last_generate_time_ms = self.last_time_ms
        self.config: Optional[EffectiveConfiguration] = None
        self.simulation: Optional[Simulation] = None

        self.reset(options or {})
        logging.info(
            f"ParticleEngine created ({container.width}x{container.height}), "
            f"theme '{self.config.theme}'."
        )

    @property
    def options(self) -> EffectiveConfiguration:
        return self.config

    @property
    def particles(self) -> ParticleSystem:
        return self.simulation.particles

    @property
    def live_count(self) -> int:
        return self.simulation.particles.live_count

    def start(self) -> None:
        """Resumes generating particles and makes sure frames are being driven."""
        self.config.set_option('running', True)
        self._schedule()

    def stop(self) -> None:
        """
        Stops generating particles.

        Particles already on screen keep animating until they die or leave
        the screen; the frame loop stops by itself once the pool is empty.
        """
        self.config.set_option('running', False)

    def reset(self, options: Mapping[str, Any]) -> None:
        """
        Rebuilds everything from `options`: configuration, pool and elements.

        The new configuration is resolved first, so a configuration error
        leaves the engine exactly as it was.
        """
        config = resolve_options(options)

        if self.simulation is not None:
            self._last_generate_time_ms = self.simulation.particles.last_generate_time_ms
            self.simulation.particles.clear()

        particles = ParticleSystem(config.max_particles)
        particles.last_generate_time_ms = self._last_generate_time_ms

        visuals = {name: PARTICLE_CLASSES[name] for name in config.particle_classes}
        self.container.reset(config.background_style, visuals, config.max_particles)

        self.config = config
        self.simulation = Simulation(particles, config, self.container, np.random.default_rng(config.seed))
        logging.info(
            f"Engine reset: theme '{config.theme}', {config.max_particles} slots, "
            f"running={config.running}."
        )

        if config.running:
            self._schedule()

    def display_frame(self) -> None:
        """
        Runs one tick and re-arms the frame loop if there is more to do.
        """
        if not should_continue(self.config.running, self.live_count):
            self.state = FrameState.STOPPED
            return

        self.state = FrameState.TICKING
        now = self.clock()
        elapsed_ms = now - self.last_time_ms
        self.last_time_ms = now

        self.simulation.step(elapsed_ms, now)
        self.frame_count += 1

        if should_continue(self.config.running, self.live_count):
            self.state = FrameState.SCHEDULED
            self.scheduler.request(self.display_frame)
        else:
            self.state = FrameState.STOPPED
            logging.info(f"Frame loop stopped after {self.frame_count} frames: pool drained.")

    def _schedule(self) -> None:
        if self.state is not FrameState.STOPPED:
            # Either a frame is pending or a tick in progress will re-arm itself.
            return
        # Don't count the time spent stopped as animation time.
        self.last_time_ms = self.clock()
        self.state = FrameState.SCHEDULED
        self.scheduler.request(self.display_frame)
        logging.debug("Frame loop scheduled.")
