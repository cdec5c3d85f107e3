# binding.py
"""
Keeps an engine in sync with an externally observed options object.

A reactive host (a UI panel, a settings file watcher, the keyboard handler
in the viewer) holds its own options mapping, the same kind of overrides
the engine was created with, and calls OptionsBinding.update() whenever it
may have changed. Changed fields are written into the engine one by one;
changes that alter the shape of the particles (the theme above all)
trigger a full reset with the observed options instead.
"""
import logging
from typing import Any, Mapping

from engine import ParticleEngine
from options import RESET_OPTIONS
from utils import deep_merge


def option_differs(current: Any, observed: Any) -> bool:
    """
    Whether an observed option value would change the current one.

    Mappings are compared after merging, so a partial override that
    restates current values is not a change.
    """
    if isinstance(current, Mapping) and isinstance(observed, Mapping):
        return deep_merge(current, observed) != dict(current)
    return current != observed


class OptionsBinding:
    """
    Link between observed caller options and a running engine.
    """
    def __init__(self, engine: ParticleEngine):
        self.engine = engine

    def update(self, observed: Mapping[str, Any]) -> bool:
        """
        Applies every field of `observed` that differs from the engine.

        Returns:
            bool: True if the change required a full reset.
        """
        current = self.engine.config.options
        needs_reset = False

        for name, value in observed.items():
            if name in current and not option_differs(current[name], value):
                continue
            logging.info(f"Option '{name}' changed to {value!r}.")
            if name in RESET_OPTIONS:
                needs_reset = True
            elif name == 'running':
                if value:
                    self.engine.start()
                else:
                    self.engine.stop()
            else:
                self.engine.config.set_option(name, value)

        if needs_reset:
            self.engine.reset(observed)
        return needs_reset
