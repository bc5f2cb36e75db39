"""
Session configuration.

Everything a session needs at creation is carried in one SessionConfig
value and handed to Simulation explicitly; nothing here is global.
"""

import dataclasses

from .gray_scott import DEFAULT_PARAMS, Params, SeedPattern


RESOLUTIONS = (128, 256, 512)
MIN_STEPS_PER_TICK = 1
MAX_STEPS_PER_TICK = 10

DEFAULT_PALETTE = "Electric Yellow"
COLOR_MODES = ("u", "v", "uv", "difference")


def clamp_steps_per_tick(n):
    return max(MIN_STEPS_PER_TICK, min(MAX_STEPS_PER_TICK, int(n)))


@dataclasses.dataclass
class SessionConfig:
    """Initial inputs of one simulation session."""

    width: int = 256
    height: int = 256
    params: Params = DEFAULT_PARAMS
    steps_per_tick: int = 1
    seed_pattern: SeedPattern = SeedPattern.CENTER
    palette: str = DEFAULT_PALETTE
    dt: float = 1.0
    color_mode: str = "uv"

    def __post_init__(self):
        self.seed_pattern = SeedPattern.parse(self.seed_pattern)
        self.steps_per_tick = clamp_steps_per_tick(self.steps_per_tick)

    @property
    def resolution(self):
        """Square grids only are persisted; report the width."""
        return self.width

    def replace(self, **changes):
        return dataclasses.replace(self, **changes)
