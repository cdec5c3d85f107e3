# projection.py
"""
Projects particles from simulation space onto the screen.

Simulation space is pseudo-3D: (-1, -1, 1) lands on the upper-left corner
of the viewport and (1, 1, 1) on the lower-right one, with larger z further
away. Projection is a plain perspective divide by z.

Projectors are pluggable. Each is a function with the signature of
`project_perspective`, selected by name through the PROJECTORS registry
(the `func_project_particle` option).
"""
from typing import Callable, Dict, NamedTuple, TYPE_CHECKING

if TYPE_CHECKING:
    from options import EffectiveConfiguration
    from particle import Particle

# --- Data Contracts ---
#
# project_perspective(particle, width, height, config, now_ms) -> Projection:
#   - Inputs:
#     - particle: The particle to project. z must not be 0.
#     - width, height: Viewport size in pixels.
#     - config: The effective configuration (fade_out_time_ms is read).
#     - now_ms: Current time on the engine clock.
#   - Outputs: Screen-space centre, scale, rotation and opacity.
#   - Side Effects: When fading is enabled and the particle is older than
#     fade_out_time_ms, sets particle.live = False. Nothing else is touched.


class Projection(NamedTuple):
    x: float
    y: float
    scale: float
    rotation: float
    opacity: float


def project_perspective(particle: "Particle", width: float, height: float,
                        config: "EffectiveConfiguration", now_ms: float) -> Projection:
    """
    Perspective divide with optional age-based fade-out.
    """
    s = min(width, height) / 2
    z = particle.z
    opacity = particle.opacity

    if config.fade_out_time_ms > 0:
        elapsed = now_ms - particle.create_time_ms
        if elapsed > config.fade_out_time_ms:
            opacity = 0.0
            particle.live = False
        else:
            opacity *= 1 - elapsed / config.fade_out_time_ms

    return Projection(
        x=width / 2 + s * particle.x / z,
        y=height / 2 + s * particle.y / z,
        scale=particle.scale / z,
        rotation=particle.rotation,
        opacity=opacity,
    )


def project_depth_fade(particle: "Particle", width: float, height: float,
                       config: "EffectiveConfiguration", now_ms: float) -> Projection:
    """
    Perspective divide where opacity follows depth instead of age.

    Particles fade in as they approach from z = 20 towards the viewer.
    """
    result = project_perspective(particle, width, height, config, now_ms)
    return result._replace(opacity=max(0.0, 1 - particle.z / 20))


PROJECTORS: Dict[str, Callable[..., Projection]] = {
    "perspective": project_perspective,
    "depth_fade": project_depth_fade,
}
