"""
Abstract Base Class for Reaction-Diffusion Engines

Engines own a pair of concentration grids on a toroidal (wrap-around)
width x height domain. The session and the viewer only talk to this
interface, so a second model could sit beside Gray-Scott unchanged.
"""

from abc import ABC, abstractmethod
from numbers import Integral

import numpy as np

from .errors import InvalidDimensions


def check_dimensions(width, height):
    """Return (width, height) as ints or raise InvalidDimensions.

    Non-integers are rejected rather than rounded; bool is not a size.
    """
    for n in (width, height):
        if isinstance(n, bool) or not isinstance(n, Integral) or n <= 0:
            raise InvalidDimensions(width, height)
    return int(width), int(height)


class FieldEngine(ABC):
    """Base class for two-species field engines."""

    engine_name = ""   # e.g. "gray_scott"
    engine_label = ""  # e.g. "Gray-Scott"

    def __init__(self, width=256, height=256):
        self.width, self.height = check_dimensions(width, height)
        self.generation = 0

    @property
    def shape(self):
        return (self.height, self.width)

    @property
    @abstractmethod
    def world(self):
        """The display species as a (height, width) array."""

    @abstractmethod
    def step(self):
        """Advance one time step. Returns the world (display) state."""

    def step_n(self, n):
        """Advance n steps strictly in sequence. Returns final state."""
        for _ in range(n):
            self.step()
        return self.world

    @abstractmethod
    def set_params(self, **params):
        """Update engine parameters."""

    @abstractmethod
    def get_params(self):
        """Return dict of current parameter values."""

    @abstractmethod
    def seed(self, seed_pattern="center", rng=None):
        """Re-initialise the grids with a seed pattern."""

    def _falloff(self, cx, cy, radius):
        """Squared linear falloff around (cx, cy), measured on the torus."""
        Y, X = np.ogrid[:self.height, :self.width]
        dx = np.abs(X - cx)
        dy = np.abs(Y - cy)
        dx = np.minimum(dx, self.width - dx)
        dy = np.minimum(dy, self.height - dy)
        dist = np.sqrt(dx ** 2 + dy ** 2)
        return np.clip(1.0 - dist / radius, 0, 1) ** 2

    @abstractmethod
    def add_blob(self, cx, cy, radius=10):
        """Paint the active species at (cx, cy)."""

    @abstractmethod
    def remove_blob(self, cx, cy, radius=10):
        """Erase the active species at (cx, cy)."""

    @abstractmethod
    def clear(self):
        """Return every cell to the rest state."""

    @property
    def stats(self):
        """Return current world statistics."""
        world = self.world
        return {
            "generation": self.generation,
            "mass": float(world.sum()),
            "mean": float(world.mean()),
            "max": float(world.max()),
            "active_pct": float((world > 0.01).sum()) / world.size * 100,
        }

    @classmethod
    @abstractmethod
    def get_slider_defs(cls):
        """Return list of slider definitions for the control panel.

        Each entry is a dict:
            {"key": "f", "label": "Feed (F)", "section": "REACTION",
             "min": 0.0, "max": 0.1, "default": 0.035, "fmt": ".4f"}
        """
