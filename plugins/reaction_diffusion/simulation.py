"""
Simulation: headless session core with no pygame dependency.

Owns one Gray-Scott engine and drives it from the host's frame clock:
while running, every presented frame performs ``steps_per_tick`` engine
steps, one render, and re-arms the next frame request. Pausing cancels
the pending request, so no tick ever fires after pause().

Usage:
    from reaction_diffusion import FrameScheduler, SessionConfig, Simulation
    frames = FrameScheduler()
    sim = Simulation(SessionConfig(width=128, height=128), scheduler=frames)
    sim.play()
    frames.present()            # once per drawn frame
    rgb = sim.render_rgb()      # (H, W, 3) uint8
"""

import enum
import logging
import time
from collections import deque

from .config import SessionConfig, clamp_steps_per_tick
from .engine_base import check_dimensions
from .errors import NotInitialized
from .gray_scott import GrayScott, SeedPattern
from .palettes import get_colormap, map_to_rgb
from .presets import get_preset


logger = logging.getLogger(__name__)


class LoopState(enum.Enum):
    STOPPED = "stopped"
    RUNNING = "running"


class FrameScheduler:
    """Display-refresh stand-in: callbacks run once per presented frame.

    ``request_frame`` queues a callback for the next frame and returns a
    handle; ``cancel_frame`` drops it (unknown or None handles are
    ignored). The host calls ``present()`` after each drawn frame. Only
    callbacks pending when present() starts are run; anything requested
    from inside a callback waits for the following frame.
    """

    def __init__(self):
        self._pending = {}
        self._next_handle = 1

    def request_frame(self, callback):
        handle = self._next_handle
        self._next_handle += 1
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle):
        self._pending.pop(handle, None)

    @property
    def pending(self):
        return len(self._pending)

    def present(self, timestamp=None):
        """Run this frame's callbacks. Returns how many fired."""
        if timestamp is None:
            timestamp = time.perf_counter()
        fired = 0
        for handle in list(self._pending):
            # A callback may cancel one queued after it
            callback = self._pending.pop(handle, None)
            if callback is None:
                continue
            callback(timestamp)
            fired += 1
        return fired


class FPSMeter:
    """Rolling-average frame rate over the last ``sample_size`` intervals.

    Intervals of 1 ms or less, or of a second or more, are ignored
    (duplicate timestamps, resumes after a long pause).
    """

    def __init__(self, sample_size=10):
        self.samples = deque(maxlen=sample_size)
        self._last = None
        self.fps = 0

    def tick(self, timestamp):
        if self._last is not None:
            delta = timestamp - self._last
            if 0.001 < delta < 1.0:
                self.samples.append(delta)
                self.fps = round(len(self.samples) / sum(self.samples))
        self._last = timestamp
        return self.fps

    def reset(self):
        self.samples.clear()
        self._last = None
        self.fps = 0


class Simulation:
    """One session: a field engine plus its play/pause loop.

    Render listeners are called as ``listener(u, v)`` after every batch of
    steps, reset and reseed. They receive the live arrays and must not
    write to them.
    """

    def __init__(self, config=None, scheduler=None, rng=None):
        self.config = config if config is not None else SessionConfig()
        self.scheduler = scheduler if scheduler is not None else FrameScheduler()
        self.rng = rng
        self.state = LoopState.STOPPED
        self.steps_per_tick = clamp_steps_per_tick(self.config.steps_per_tick)
        self.seed_pattern = SeedPattern.parse(self.config.seed_pattern)
        self.palette = self.config.palette
        self.color_mode = self.config.color_mode
        self.visible = True
        self.preset_key = None
        self.fps = FPSMeter()
        self._frame_handle = None
        self._listeners = []
        self.engine = self._create_engine(self.config.width, self.config.height)

    def _create_engine(self, width, height):
        return GrayScott(
            width, height,
            params=self.config.params,
            dt=self.config.dt,
            seed_pattern=self.seed_pattern,
            rng=self.rng,
        )

    def _require_engine(self):
        if self.engine is None:
            raise NotInitialized("No field exists for this session")
        return self.engine

    # --- State -----------------------------------------------------------

    @property
    def running(self):
        return self.state is LoopState.RUNNING

    @property
    def field(self):
        return self._require_engine().field

    @property
    def params(self):
        return self._require_engine().params

    @property
    def width(self):
        return self._require_engine().width

    @property
    def height(self):
        return self._require_engine().height

    @property
    def generation(self):
        return self._require_engine().generation

    # --- Render listeners -----------------------------------------------

    def add_render_listener(self, listener):
        self._listeners.append(listener)

    def remove_render_listener(self, listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def render(self):
        """Hand the current (u, v) to every render listener."""
        field = self.field
        for listener in list(self._listeners):
            listener(field.u, field.v)

    # --- Loop control ----------------------------------------------------

    def play(self):
        self._require_engine()
        if self.state is LoopState.RUNNING:
            return
        self.state = LoopState.RUNNING
        self._arm()

    def pause(self):
        if self.state is LoopState.STOPPED:
            return
        self.state = LoopState.STOPPED
        self.scheduler.cancel_frame(self._frame_handle)
        self._frame_handle = None
        self.fps.reset()

    def toggle(self):
        if self.running:
            self.pause()
        else:
            self.play()

    def _arm(self):
        self._frame_handle = self.scheduler.request_frame(self._on_frame)

    def _on_frame(self, timestamp):
        self._frame_handle = None
        if self.state is not LoopState.RUNNING or self.engine is None:
            return
        self.fps.tick(timestamp)
        self._advance()
        self.render()
        # A listener may have paused us during render
        if self.state is LoopState.RUNNING and self._frame_handle is None:
            self._arm()

    def _advance(self):
        engine = self._require_engine()
        for _ in range(self.steps_per_tick):
            engine.step()

    def step(self):
        """One batch of steps and one render, whatever the loop state."""
        self._advance()
        self.render()

    def reset(self):
        """Re-seed with the session's seed pattern."""
        self._require_engine().seed(self.seed_pattern)
        self.render()

    def random_seed(self):
        """Re-seed with the random pattern regardless of configuration."""
        self._require_engine().seed(SeedPattern.RANDOM)
        self.render()

    def paint(self, cx, cy, radius=10, erase=False):
        """Brush V into (or out of) the field around grid cell (cx, cy)."""
        engine = self._require_engine()
        if erase:
            engine.remove_blob(cx, cy, radius)
        else:
            engine.add_blob(cx, cy, radius)
        if not self.running:
            self.render()

    def set_visible(self, visible):
        """Host visibility changes. Hiding pauses; showing does not resume."""
        self.visible = bool(visible)
        if not self.visible and self.running:
            logger.info("View hidden, pausing simulation")
            self.pause()

    # --- Configuration ---------------------------------------------------

    def update_params(self, **changes):
        """Replace the parameter snapshot; the next engine step uses it."""
        engine = self._require_engine()
        engine.params = engine.params.replace(**changes)
        return engine.params

    def set_params(self, params):
        self._require_engine().params = params

    def set_steps_per_tick(self, n):
        self.steps_per_tick = clamp_steps_per_tick(n)

    def set_seed_pattern(self, seed_pattern):
        self.seed_pattern = SeedPattern.parse(seed_pattern)

    def set_palette(self, name):
        get_colormap(name)
        self.palette = name
        if self.engine is not None:
            self.render()

    def set_color_mode(self, mode):
        self.color_mode = mode
        if self.engine is not None:
            self.render()

    def resize(self, width, height):
        """Replace the field when the grid size changes.

        The old content is discarded (no resampling); the new field is
        seeded with the session's pattern. Returns True if rebuilt.
        """
        width, height = check_dimensions(width, height)
        engine = self._require_engine()
        if (width, height) == (engine.width, engine.height):
            return False
        logger.debug("Resizing field %dx%d -> %dx%d",
                     engine.width, engine.height, width, height)
        params = engine.params
        self.engine = self._create_engine(width, height)
        self.engine.params = params
        self.render()
        return True

    def apply_preset(self, key):
        """Load a preset's params and seed pattern, then reseed."""
        preset = get_preset(key)
        if preset is None:
            return False
        self.preset_key = key
        self.seed_pattern = preset["seed"]
        self.set_params(preset["params"])
        self.reset()
        return True

    def to_config(self):
        """SessionConfig describing the session as it is now."""
        engine = self._require_engine()
        return self.config.replace(
            width=engine.width,
            height=engine.height,
            params=engine.params,
            steps_per_tick=self.steps_per_tick,
            seed_pattern=self.seed_pattern,
            palette=self.palette,
            dt=engine.dt,
            color_mode=self.color_mode,
        )

    # --- Output ------------------------------------------------------------

    def snapshot(self):
        """Independent copy of the current field."""
        return self.field.copy()

    def render_rgb(self, palette=None, mode=None):
        """Current field as an (H, W, 3) uint8 image."""
        field = self.field
        lut = get_colormap(palette or self.palette)
        return map_to_rgb(field.u, field.v, lut, mode or self.color_mode)

    def close(self):
        """Stop the loop and release the field."""
        self.pause()
        self.engine = None
        self._listeners.clear()
