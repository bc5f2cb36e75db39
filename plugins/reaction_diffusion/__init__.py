"""
Gray-Scott reaction-diffusion on a toroidal grid, with a frame-driven
play/pause loop and an optional pygame viewer.
"""

from .config import SessionConfig
from .errors import InvalidDimensions, NotInitialized
from .gray_scott import (
    DEFAULT_PARAMS, Field, GrayScott, Params, SeedPattern,
    create_field, reset_field, step_field,
)
from .simulation import FrameScheduler, LoopState, Simulation
