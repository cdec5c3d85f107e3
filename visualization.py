# visualization.py
"""
Draws the particle engine's container with Pygame.
"""
import io
import logging
import pygame
from typing import Any, Dict, List, Mapping, Optional, TYPE_CHECKING

from constants import (
    BACKGROUND_COLOR, FPS, FULLSCREEN, WINDOW_WIDTH, WINDOW_HEIGHT, WINDOW_CAPTION,
    PARTICLE_WIDTH, PARTICLE_HEIGHT, THEME_HOTKEYS, ParticleVisual,
)
from container import Container, ParticleElement

if TYPE_CHECKING:
    from binding import OptionsBinding
    from engine import ParticleEngine


# --- Data Contracts ---
#
# class Visualizer(Container):
#   - __init__(self, fullscreen: bool = FULLSCREEN, width: int = WINDOW_WIDTH,
#              height: int = WINDOW_HEIGHT, fps: int = FPS):
#     - Side Effects: Initializes Pygame and creates a display surface.
#       The container's size is the display surface's size.
#
#   - reset(self, background_style, visuals, count) -> List[ParticleElement]:
#     - Side Effects: As Container.reset, plus rebuilds the background
#       colour and one sprite surface per particle class.
#
#   - draw(self, engine: ParticleEngine, binding: OptionsBinding,
#          user_options: Dict[str, Any]) -> bool:
#     - Outputs:
#       - bool: False if the user has quit, True otherwise.
#     - Side Effects: Handles Pygame events (keyboard controls edit
#       `user_options` and push them through the binding), then renders
#       the background, every displayed particle element and a status line.

class Visualizer(Container):
    """
    A Pygame window acting as the engine's visual container.
    """
    def __init__(self, fullscreen: bool = FULLSCREEN, width: int = WINDOW_WIDTH,
                 height: int = WINDOW_HEIGHT, fps: int = FPS):
        pygame.init()
        pygame.font.init()

        if fullscreen:
            display_info = pygame.display.Info()
            width, height = display_info.current_w, display_info.current_h
            self.screen = pygame.display.set_mode((width, height), pygame.FULLSCREEN)
        else:
            self.screen = pygame.display.set_mode((width, height))
        super().__init__(width, height)

        pygame.display.set_caption(WINDOW_CAPTION)
        self.clock = pygame.time.Clock()
        self.fps = fps

        self.background_color = pygame.Color(*BACKGROUND_COLOR)
        self.sprites: Dict[str, pygame.Surface] = {}

        try:
            self.font_main = pygame.font.SysFont("Segoe UI", 14)
        except pygame.error:
            logging.warning("Segoe UI font not found, falling back to default sans-serif.")
            self.font_main = pygame.font.SysFont(None, 18)
        self.text_color = (200, 200, 200)

        logging.info(f"Visualizer initialized with Pygame display ({width}x{height}).")

    @property
    def width(self) -> int:
        return self.screen.get_width()

    @property
    def height(self) -> int:
        return self.screen.get_height()

    def reset(self, background_style: Mapping[str, str],
              visuals: Mapping[str, ParticleVisual], count: int) -> List[ParticleElement]:
        elements = super().reset(background_style, visuals, count)
        self.background_color = self._parse_background(background_style)
        self.sprites = {name: self._build_sprite(name, visual) for name, visual in visuals.items()}
        return elements

    def _parse_background(self, background_style: Mapping[str, str]) -> pygame.Color:
        value = background_style.get('background-color')
        if value is None:
            return pygame.Color(*BACKGROUND_COLOR)
        try:
            return pygame.Color(value)
        except ValueError as e:
            logging.warning(f"Unusable background colour {value!r} ({e}). Using the default.")
            return pygame.Color(*BACKGROUND_COLOR)

    def _build_sprite(self, name: str, visual: ParticleVisual) -> pygame.Surface:
        """Renders one particle class into a surface of the element size."""
        size = (PARTICLE_WIDTH, PARTICLE_HEIGHT)
        if visual.kind == "svg":
            image = pygame.image.load(io.BytesIO(visual.source.encode("utf-8")), f"{name}.svg")
            return pygame.transform.smoothscale(image.convert_alpha(), size)

        sprite = pygame.Surface(size, pygame.SRCALPHA)
        style = _parse_style(visual.source)
        color = style.get('background-color')
        try:
            sprite.fill(pygame.Color(color) if color else pygame.Color("white"))
        except ValueError as e:
            logging.error(f"Could not parse style for particle class '{name}': {e}. Drawing it white.")
            sprite.fill(pygame.Color("white"))
        return sprite

    def _handle_events(self, engine: "ParticleEngine", binding: "OptionsBinding",
                       user_options: Dict[str, Any]) -> bool:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type != pygame.KEYDOWN:
                continue
            if event.key == pygame.K_ESCAPE:
                return False
            if event.key == pygame.K_SPACE:
                user_options['running'] = not engine.config.running
                binding.update(user_options)
            elif event.key == pygame.K_r:
                engine.reset(user_options)
            elif pygame.K_1 <= event.key < pygame.K_1 + len(THEME_HOTKEYS):
                user_options['theme'] = THEME_HOTKEYS[event.key - pygame.K_1]
                binding.update(user_options)
        return True

    def _draw_element(self, element: ParticleElement) -> None:
        sprite = self.sprites.get(element.particle_class)
        if sprite is None or element.scale <= 0:
            return
        # CSS rotates clockwise for positive angles, Pygame counterclockwise.
        image = pygame.transform.rotozoom(sprite, -element.rotation, element.scale)
        image.set_alpha(int(max(0.0, min(1.0, element.opacity)) * 255))
        self.screen.blit(image, image.get_rect(center=(element.x, element.y)))

    def _draw_status(self, engine: "ParticleEngine") -> None:
        config = engine.config
        status = (
            f"{config.theme}  |  {engine.live_count}/{config.max_particles} particles  |  "
            f"{'running' if config.running else 'stopped'}  |  "
            f"{self.clock.get_fps():.0f} fps  |  SPACE start/stop, 1-3 theme, R reset"
        )
        text_surf = self.font_main.render(status, True, self.text_color)
        self.screen.blit(text_surf, (10, self.height - text_surf.get_height() - 8))

    def draw(self, engine: "ParticleEngine", binding: "OptionsBinding",
             user_options: Dict[str, Any]) -> bool:
        """
        Handles input and renders one frame.
        """
        if not self._handle_events(engine, binding, user_options):
            return False

        self.screen.fill(self.background_color)
        for element in self.elements:
            if element.displayed:
                self._draw_element(element)
        self._draw_status(engine)

        pygame.display.flip()
        self.clock.tick(self.fps)
        return True

    def close(self):
        """Shuts down Pygame."""
        pygame.quit()
        logging.info("Pygame shut down.")


def _parse_style(source: str) -> Dict[str, str]:
    """Parses a 'prop: value; prop: value' style rule into a dict."""
    style = {}
    for declaration in source.split(';'):
        if ':' in declaration:
            key, value = declaration.split(':', 1)
            style[key.strip()] = value.strip()
    return style
