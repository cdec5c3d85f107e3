# constants.py
"""
Application-level constants.

These values are static and do not change between runs. They cover the
rendering framework (window size, frame rate, element size) and the shared
read-only tables the engine merges its configuration from: the default
options, the named themes and the catalog of particle visuals.

Nothing in this module is ever written to at runtime. The option resolver
deep-copies what it needs before merging.
"""
from types import MappingProxyType
from typing import NamedTuple

# Visualization settings
# Set to True to run in borderless fullscreen mode.
# Set to False to run in a fixed-size window (WINDOW_WIDTH x WINDOW_HEIGHT).
FULLSCREEN = False
WINDOW_WIDTH = 1280
WINDOW_HEIGHT = 720
FPS = 60
WINDOW_CAPTION = "Particle Fun Time"

# Unscaled size of one particle element, in pixels.
PARTICLE_WIDTH = 20
PARTICLE_HEIGHT = 20

# Fallback when a background style names no usable colour.
BACKGROUND_COLOR = (0, 0, 0)

# Parameters every particle samples on creation.
REQUIRED_PARAMETERS = (
    "x", "y", "z", "scale", "rotation", "opacity",
    "vx", "vy", "vz", "angular_velocity",
)
# Optional constant translation, applied on top of velocity.
TRANSLATION_PARAMETERS = ("tx", "ty", "tz")


class ParticleVisual(NamedTuple):
    """How a particle class looks: an inline SVG image or a plain style rule."""
    kind: str  # "svg" or "style"
    source: str


_STAR_PATH = "m25,1 6,17h18l-14,11 5,17-15-10-15,10 5-17-14-11h18z"


def _star_svg(fill: str, title: str) -> str:
    return (
        '<svg xmlns="http://www.w3.org/2000/svg" width="20" height="20" viewBox="0 0 51 48">'
        f'<title>{title}</title>'
        f'<path fill="{fill}" stroke="#000" d="{_STAR_PATH}"/>'
        '</svg>'
    )


# Catalog of every particle class a theme may reference.
PARTICLE_CLASSES = MappingProxyType({
    "red-star": ParticleVisual("svg", _star_svg("#ff0000", "Red Five Pointed Star")),
    "blue-star": ParticleVisual("svg", _star_svg("#0000ff", "Blue Five Pointed Star")),
    "yellow-star": ParticleVisual("svg", _star_svg("#ffff00", "Yellow Five Pointed Star")),
    "white-star": ParticleVisual("svg", _star_svg("#ffffff", "White Five Pointed Star")),
    "blue-rectangle": ParticleVisual("style", "background-color: blue"),
})

# --- Default Options ---
# Every option the engine understands. Themes and caller overrides are
# merged on top of this, key by key.
DEFAULT_OPTIONS = MappingProxyType({
    # Are we generating particles? Controlled with start()/stop().
    "running": True,
    # Name of the theme in use, looked up in THEMES.
    "theme": "fallingStars",
    # Style properties for the background layer.
    "background_style": {"background-color": "black"},
    # Classes (keys of PARTICLE_CLASSES) a new particle picks from at random.
    "particle_classes": ["red-star", "blue-star", "yellow-star"],
    # Pool capacity.
    "max_particles": 50,
    # Time between generating particles.
    "particle_generation_time_ms": 50,
    # How long a particle may stay off-screen before its slot is recycled.
    "max_time_offscreen_ms": 1000,
    # If > 0, particles fade to 0 opacity over this period and then die.
    "fade_out_time_ms": 3000,
    # Added to every particle's velocity, per second.
    "gravity": {"x": 0.0, "y": 0.6, "z": 0.0},
    # Seed for the engine's random generator. None draws fresh entropy.
    "seed": None,
    # Strategy names (or callables) for the pluggable steps of a frame.
    "func_get_num_particles_to_generate": "fixed_rate",
    "func_generate_particle": "random",
    "func_project_particle": "perspective",
    # Sampling range for each particle parameter.
    "particle_parameters": {
        "x": {"min": -1, "max": 1},
        "y": {"min": -1.1, "max": -1.1},
        "z": {"min": 0.5, "max": 1},
        "scale": {"min": 1, "max": 1},
        "rotation": {"min": 0, "max": 360},  # degrees
        "opacity": {"min": 1, "max": 1},
        "vx": {"min": 0, "max": 0},
        "vy": {"min": 0, "max": 0},
        "vz": {"min": 0, "max": 0},
        "angular_velocity": {"min": -100, "max": 100},  # spin, degrees per second
    },
})

# --- Themes ---
THEMES = MappingProxyType({
    "fallingStars": {},

    "starBurst": {
        "particle_parameters": {
            "x": {"min": 0, "max": 0},
            "y": {"min": 1, "max": 1},
            "z": {"min": 1, "max": 1},
            "scale": {"min": 1, "max": 1},
            "rotation": {"min": 0, "max": 360},
            "opacity": {"min": 1, "max": 1},
            "vx": {"min": -0.5, "max": 0.5},
            "vy": {"min": -1.5, "max": -2.5},
            "vz": {"min": -0.5, "max": -0.2},
            "angular_velocity": {"min": -200, "max": 200},
        },
    },

    # Stars spawn far away and fly towards the viewer at a constant speed.
    "starField": {
        "particle_generation_time_ms": 25,
        "gravity": {"x": 0.0, "y": 0.0, "z": 0.0},
        "particle_classes": ["white-star"],
        "fade_out_time_ms": 0,
        "func_project_particle": "depth_fade",
        "particle_parameters": {
            "x": {"min": -10, "max": 10},
            "y": {"min": -10, "max": 10},
            "z": {"min": 15, "max": 15},
            "scale": {"min": 1, "max": 2},
            "rotation": {"min": -720, "max": 720},
            "opacity": {"min": 1, "max": 1},
            "vx": {"min": 0, "max": 0},
            "vy": {"min": 0, "max": 0},
            "vz": {"min": 0, "max": 0},
            "tx": {"min": 0, "max": 0},
            "ty": {"min": 0, "max": 0},
            "tz": {"min": -3, "max": -3},
            "angular_velocity": {"min": -100, "max": 100},
        },
    },
})

# Keys 1..3 in the viewer select these themes.
THEME_HOTKEYS = ("fallingStars", "starBurst", "starField")
