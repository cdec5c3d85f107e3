# particle.py
"""
Particle state and the fixed-capacity pool that owns it.

This module defines the Particle class, which holds the kinematic and
appearance state of one simulated particle, and the ParticleSystem class,
an index-addressed arena of slots. Each slot is either free (None) or owns
exactly one live Particle. The stepping logic that fills and empties the
slots lives in simulation.py.
"""
import logging
import numpy as np
from typing import Dict, Iterator, List, Optional, Tuple

from container import ParticleElement

# --- Data Contracts ---
#
# class Particle:
#   - __init__(self, params: Dict[str, float], element: ParticleElement,
#              particle_class: str, create_time_ms: float):
#     - Inputs:
#       - params: One sampled value per particle parameter. Must contain
#         x, y, z, vx, vy, vz, rotation, angular_velocity, scale, opacity.
#         tx, ty, tz are optional and all-or-nothing.
#       - element: The visual element bound to this particle's slot.
#     - Invariants:
#       - self.position and self.velocity are float64 arrays of shape (3,).
#       - self.translation is None or a float64 array of shape (3,).
#       - self.offscreen_since_ms is None while the particle is on-screen.
#
# class ParticleSystem:
#   - __init__(self, capacity: int):
#     - Side Effects: Allocates `capacity` free slots.
#     - Invariants:
#       - len(self.slots) == capacity at all times.
#       - self.live_count == number of non-None slots <= capacity.

class Particle:
    """
    One simulated particle: position, motion, appearance and lifecycle flags.
    """
    def __init__(self, params: Dict[str, float], element: ParticleElement,
                 particle_class: str, create_time_ms: float):
        self.position = np.array([params['x'], params['y'], params['z']], dtype=np.float64)
        self.velocity = np.array([params['vx'], params['vy'], params['vz']], dtype=np.float64)
        self.translation: Optional[np.ndarray] = None
        if 'tx' in params:
            self.translation = np.array([params['tx'], params['ty'], params['tz']], dtype=np.float64)

        self.rotation = float(params['rotation'])
        self.angular_velocity = float(params['angular_velocity'])
        self.scale = float(params['scale'])
        self.opacity = float(params['opacity'])

        self.create_time_ms = create_time_ms
        self.live = True
        self.offscreen_since_ms: Optional[float] = None

        self.particle_class = particle_class
        self.element = element
        self.width = element.width
        self.height = element.height

    @property
    def x(self) -> float:
        return float(self.position[0])

    @property
    def y(self) -> float:
        return float(self.position[1])

    @property
    def z(self) -> float:
        return float(self.position[2])

    def __repr__(self) -> str:
        return (
            f"Particle(class={self.particle_class!r}, position={self.position.tolist()}, "
            f"live={self.live}, offscreen_since_ms={self.offscreen_since_ms})"
        )


class ParticleSystem:
    """
    A fixed array of particle slots with a running count of occupied ones.
    """
    def __init__(self, capacity: int):
        """
        Initializes the pool with every slot free.

        Args:
            capacity (int): The number of slots. Never changes afterwards.
        """
        self.capacity = capacity
        self.slots: List[Optional[Particle]] = [None] * capacity
        self.live_count = 0
        self.last_generate_time_ms = 0.0

        logging.debug(f"ParticleSystem allocated with {capacity} slots.")

    def occupied(self) -> Iterator[Tuple[int, Particle]]:
        """Yields (index, particle) for every occupied slot, in index order."""
        for index, particle in enumerate(self.slots):
            if particle is not None:
                yield index, particle

    def first_free_slot(self) -> Optional[int]:
        """Returns the lowest free index, or None when every slot is taken."""
        for index, particle in enumerate(self.slots):
            if particle is None:
                return index
        return None

    def assign(self, index: int, particle: Particle) -> None:
        """Places a particle into a free slot."""
        if self.slots[index] is not None:
            raise ValueError(f"Slot {index} is already occupied.")
        self.slots[index] = particle
        self.live_count += 1

    def free(self, index: int) -> Particle:
        """Empties an occupied slot and clears its element's live marker."""
        particle = self.slots[index]
        if particle is None:
            raise ValueError(f"Slot {index} is already free.")
        particle.element.live = False
        self.slots[index] = None
        self.live_count -= 1
        return particle

    def clear(self) -> None:
        """Frees every slot at once."""
        for index, _ in list(self.occupied()):
            self.free(index)
        self.live_count = 0

    def is_full(self) -> bool:
        return self.live_count >= self.capacity
