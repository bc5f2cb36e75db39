"""
Gray-Scott Reaction-Diffusion Engine

Two chemical species (U, V) react and diffuse on a 2D torus:
  U + 2V -> 3V  (autocatalytic reaction)
  U is continuously fed in, V is continuously removed.

Equations (explicit Euler, 5-point periodic laplacian):
  U' = clip(U + dt * (Du * lap(U) - U*V^2 + F*(1-U)), 0, 1)
  V' = clip(V + dt * (Dv * lap(V) + U*V^2 - (F+k)*V), 0, 1)

Every new value is computed from the pre-step grids. The engine writes
into a second pair of buffers and swaps them in, so no cell ever sees a
neighbour that has already been updated in the same pass.

References:
  Pearson, "Complex Patterns in a Simple System" (1993)
"""

import dataclasses
import enum

import numpy as np

from .engine_base import FieldEngine, check_dimensions


DTYPE = np.float32

# Rest state and seeded state of a cell
REST_U, REST_V = 1.0, 0.0
SEED_U, SEED_V = 0.5, 0.25


class SeedPattern(str, enum.Enum):
    """Initial perturbation layout."""

    CENTER = "center"
    RANDOM = "random"
    MULTIPLE = "multiple"

    @classmethod
    def parse(cls, value):
        """Accept a SeedPattern or its (case-insensitive) string value."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(p.value for p in cls)
            raise ValueError(f"Unknown seed pattern {value!r} (expected one of: {valid})") from None


@dataclasses.dataclass(frozen=True)
class Params:
    """Gray-Scott coefficients.

    Frozen: an update replaces the whole value, so a step always reads
    all four coefficients from one consistent snapshot.
    """

    du: float = 0.16
    dv: float = 0.08
    f: float = 0.035
    k: float = 0.065

    def __post_init__(self):
        for name in ("du", "dv", "f", "k"):
            object.__setattr__(self, name, float(getattr(self, name)))

    def replace(self, **changes):
        changes = {key: val for key, val in changes.items() if val is not None}
        return dataclasses.replace(self, **changes)

    def as_dict(self):
        return dataclasses.asdict(self)


DEFAULT_PARAMS = Params()


class Field:
    """The two concentration grids of one simulation.

    u and v are (height, width) row-major arrays; ``field.u.ravel()`` is
    the flat cell order. They are always created and reset together.
    """

    __slots__ = ("width", "height", "u", "v")

    def __init__(self, width, height, u, v):
        self.width = width
        self.height = height
        self.u = u
        self.v = v

    @property
    def shape(self):
        return (self.height, self.width)

    @property
    def size(self):
        return self.width * self.height

    def copy(self):
        return Field(self.width, self.height, self.u.copy(), self.v.copy())

    def __repr__(self):
        return f"Field({self.width}x{self.height})"


def _seed_circles(width, height, pattern, rng):
    """Yield (cx, cy, radius) for each perturbation of a seed pattern."""
    if pattern is SeedPattern.CENTER:
        yield width // 2, height // 2, min(width, height) * 0.1
    elif pattern is SeedPattern.RANDOM:
        for _ in range(int(rng.integers(3, 8))):
            cx = int(rng.integers(0, width))
            cy = int(rng.integers(0, height))
            yield cx, cy, float(rng.uniform(5.0, 15.0))
    elif pattern is SeedPattern.MULTIPLE:
        spacing_x = width / 4
        spacing_y = height / 4
        radius = min(spacing_x, spacing_y) * 0.15
        for j in range(1, 4):
            for i in range(1, 4):
                yield int(i * spacing_x), int(j * spacing_y), radius


def _fill_seed(u, v, pattern, rng):
    """Write the rest state plus the seed pattern into u and v in place.

    Circles are clipped at the grid edge; later circles overwrite earlier
    ones.
    """
    height, width = u.shape
    u.fill(REST_U)
    v.fill(REST_V)
    Y, X = np.ogrid[:height, :width]
    for cx, cy, radius in _seed_circles(width, height, pattern, rng):
        mask = np.sqrt((X - cx) ** 2 + (Y - cy) ** 2) < radius
        u[mask] = SEED_U
        v[mask] = SEED_V


def create_field(width, height, seed_pattern=SeedPattern.CENTER, rng=None):
    """Allocate a width x height field at rest and apply a seed pattern.

    Raises InvalidDimensions unless both sizes are positive integers.
    ``rng`` (a numpy Generator) only matters for the random pattern.
    """
    width, height = check_dimensions(width, height)
    pattern = SeedPattern.parse(seed_pattern)
    if rng is None:
        rng = np.random.default_rng()
    u = np.empty((height, width), dtype=DTYPE)
    v = np.empty((height, width), dtype=DTYPE)
    _fill_seed(u, v, pattern, rng)
    return Field(width, height, u, v)


def reset_field(field, seed_pattern=SeedPattern.CENTER, rng=None):
    """Re-seed an existing field in place, keeping its size and arrays."""
    pattern = SeedPattern.parse(seed_pattern)
    if rng is None:
        rng = np.random.default_rng()
    _fill_seed(field.u, field.v, pattern, rng)


def laplacian(grid, out=None, padded=None):
    """5-point periodic laplacian: N + S + E + W - 4*C.

    Uses one wrap-padded copy instead of four np.roll calls. ``out`` and
    ``padded`` (shape + 2 on each axis) may be pre-allocated.
    """
    h, w = grid.shape
    if out is None:
        out = np.empty_like(grid)
    if padded is None:
        padded = np.empty((h + 2, w + 2), dtype=grid.dtype)
    p = padded
    p[1:-1, 1:-1] = grid
    p[0, 1:-1] = grid[-1, :]
    p[-1, 1:-1] = grid[0, :]
    p[1:-1, 0] = grid[:, -1]
    p[1:-1, -1] = grid[:, 0]

    np.add(p[:-2, 1:-1], p[2:, 1:-1], out=out)
    out += p[1:-1, :-2]
    out += p[1:-1, 2:]
    out -= 4.0 * grid
    return out


class Workspace:
    """Scratch buffers for one grid size, reused across steps."""

    def __init__(self, shape):
        h, w = shape
        self.shape = (h, w)
        self.padded = np.empty((h + 2, w + 2), dtype=DTYPE)
        self.lap_u = np.empty((h, w), dtype=DTYPE)
        self.lap_v = np.empty((h, w), dtype=DTYPE)
        self.uvv = np.empty((h, w), dtype=DTYPE)
        self.tmp = np.empty((h, w), dtype=DTYPE)
        # Back buffers swapped with the field each step
        self.u_next = np.empty((h, w), dtype=DTYPE)
        self.v_next = np.empty((h, w), dtype=DTYPE)


def step_field(field, params, dt=1.0, work=None):
    """Advance the field by one explicit Euler step.

    Reads ``params`` once up front. Results go into back buffers that are
    then swapped with ``field.u``/``field.v``. Overflow from extreme
    coefficients saturates at the clamp; a cell whose update is undefined
    (inf - inf) keeps its previous value.
    """
    if work is None or work.shape != field.shape:
        work = Workspace(field.shape)
    du, dv, f, k = params.du, params.dv, params.f, params.k
    u, v = field.u, field.v
    lap_u, lap_v, uvv, tmp = work.lap_u, work.lap_v, work.uvv, work.tmp

    with np.errstate(over="ignore", invalid="ignore"):
        laplacian(u, lap_u, work.padded)
        laplacian(v, lap_v, work.padded)

        # uvv = U * V * V
        np.multiply(v, v, out=uvv)
        uvv *= u

        # dU = Du*lap_U - uvv + F*(1-U)
        lap_u *= du
        lap_u -= uvv
        np.subtract(1.0, u, out=tmp)
        tmp *= f
        lap_u += tmp
        lap_u *= dt
        np.add(u, lap_u, out=work.u_next)

        # dV = Dv*lap_V + uvv - (F+k)*V
        lap_v *= dv
        lap_v += uvv
        np.multiply(v, f + k, out=tmp)
        lap_v -= tmp
        lap_v *= dt
        np.add(v, lap_v, out=work.v_next)

    np.clip(work.u_next, 0.0, 1.0, out=work.u_next)
    np.clip(work.v_next, 0.0, 1.0, out=work.v_next)
    np.copyto(work.u_next, u, where=np.isnan(work.u_next))
    np.copyto(work.v_next, v, where=np.isnan(work.v_next))

    field.u, work.u_next = work.u_next, u
    field.v, work.v_next = work.v_next, v
    return field


class GrayScott(FieldEngine):

    engine_name = "gray_scott"
    engine_label = "Gray-Scott"

    def __init__(self, width=256, height=256, params=None, dt=1.0,
                 seed_pattern=SeedPattern.CENTER, rng=None):
        super().__init__(width, height)
        self.params = params if params is not None else DEFAULT_PARAMS
        self.dt = float(dt)
        self.rng = rng if rng is not None else np.random.default_rng()
        self.field = create_field(self.width, self.height, seed_pattern, self.rng)
        self._work = Workspace(self.field.shape)

    @property
    def u(self):
        return self.field.u

    @property
    def v(self):
        return self.field.v

    @property
    def world(self):
        # Display: V concentration
        return self.field.v

    def step(self):
        """Advance one time step using the params in effect right now."""
        params = self.params
        step_field(self.field, params, self.dt, self._work)
        self.generation += 1
        return self.field.v

    def set_params(self, du=None, dv=None, f=None, k=None, **kwargs):
        self.params = self.params.replace(du=du, dv=dv, f=f, k=k)

    def get_params(self):
        return self.params.as_dict()

    def seed(self, seed_pattern=SeedPattern.CENTER, rng=None):
        reset_field(self.field, seed_pattern, rng if rng is not None else self.rng)
        self.generation = 0

    def add_blob(self, cx, cy, radius=10):
        """Seed V at a brush position, consuming U."""
        influence = self._falloff(cx, cy, radius)
        self.field.v += (influence * 0.25).astype(DTYPE)
        self.field.u -= (influence * 0.25).astype(DTYPE)
        np.clip(self.field.u, 0.0, 1.0, out=self.field.u)
        np.clip(self.field.v, 0.0, 1.0, out=self.field.v)

    def remove_blob(self, cx, cy, radius=10):
        """Remove V at a brush position, restore U."""
        influence = self._falloff(cx, cy, radius)
        self.field.v -= (influence * 0.5).astype(DTYPE)
        self.field.u += (influence * 0.25).astype(DTYPE)
        np.clip(self.field.u, 0.0, 1.0, out=self.field.u)
        np.clip(self.field.v, 0.0, 1.0, out=self.field.v)

    def clear(self):
        self.field.u[:] = REST_U
        self.field.v[:] = REST_V
        self.generation = 0

    @classmethod
    def get_slider_defs(cls):
        return [
            {"key": "f", "label": "Feed (F)", "section": "REACTION",
             "min": 0.0, "max": 0.1, "default": DEFAULT_PARAMS.f, "fmt": ".4f", "step": 0.001},
            {"key": "k", "label": "Kill (k)", "section": "REACTION",
             "min": 0.0, "max": 0.1, "default": DEFAULT_PARAMS.k, "fmt": ".4f", "step": 0.001},
            {"key": "du", "label": "Diffuse U", "section": "DIFFUSION",
             "min": 0.0, "max": 0.3, "default": DEFAULT_PARAMS.du, "fmt": ".4f", "step": 0.001},
            {"key": "dv", "label": "Diffuse V", "section": "DIFFUSION",
             "min": 0.0, "max": 0.3, "default": DEFAULT_PARAMS.dv, "fmt": ".4f", "step": 0.001},
        ]
