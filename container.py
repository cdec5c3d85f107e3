# container.py
"""
The visual container the engine renders into.

A Container holds the background style, the visuals for each particle
class in use and one ParticleElement per pool slot. The engine only ever
writes element state; drawing it is the host's job (see visualization.py,
which subclasses Container for pygame). The base class is fully usable
on its own as a headless container.
"""
import logging
from typing import Dict, List, Mapping, Optional

from constants import PARTICLE_WIDTH, PARTICLE_HEIGHT, ParticleVisual


class ParticleElement:
    """
    The visual node bound to one pool slot.

    `live` mirrors whether the slot holds a particle. `hidden` is toggled by
    the off-screen check. The element is drawn only when it is live and not
    hidden.
    """
    def __init__(self, index: int, width: int = PARTICLE_WIDTH, height: int = PARTICLE_HEIGHT):
        self.index = index
        self.width = width
        self.height = height
        self.live = False
        self.hidden = False
        self.particle_class: Optional[str] = None
        self.x = 0.0
        self.y = 0.0
        self.scale = 1.0
        self.rotation = 0.0
        self.opacity = 1.0

    @property
    def displayed(self) -> bool:
        return self.live and not self.hidden

    def bind(self, particle_class: str) -> None:
        """Marks the element live with a new class, dropping any previous state."""
        self.particle_class = particle_class
        self.live = True
        self.hidden = False

    def hide(self) -> None:
        self.hidden = True

    def show(self) -> None:
        self.hidden = False

    def set_transform(self, x: float, y: float, scale: float, rotation: float, opacity: float) -> None:
        self.x = x
        self.y = y
        self.scale = scale
        self.rotation = rotation
        self.opacity = opacity


class Container:
    """
    A headless visual container of a fixed size.
    """
    def __init__(self, width: int, height: int):
        self._width = width
        self._height = height
        self.background_style: Dict[str, str] = {}
        self.visuals: Dict[str, ParticleVisual] = {}
        self.elements: List[ParticleElement] = []

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def reset(self, background_style: Mapping[str, str],
              visuals: Mapping[str, ParticleVisual], count: int) -> List[ParticleElement]:
        """
        Discards all children and provisions `count` fresh elements.

        Args:
            background_style: Style properties for the background layer.
            visuals: The visual descriptor of each particle class in use.
            count: Number of particle elements to create.

        Returns:
            The new elements, one per pool slot, in slot order.
        """
        self.background_style = dict(background_style)
        self.visuals = dict(visuals)
        self.elements = [ParticleElement(i) for i in range(count)]
        logging.debug(
            f"Container reset: {count} elements, classes {sorted(self.visuals)}."
        )
        return self.elements
