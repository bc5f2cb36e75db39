#!/usr/bin/env python3
"""
Tests for the Gray-Scott field engine.

Verifies:
1. Seeding geometry and the [0, 1] bound for every seed pattern
2. Dimension checks
3. The step matches a cell-by-cell reference built from the pre-step grid
4. Clamping under extreme coefficients
5. Determinism, mass conservation and periodic wrap
6. Reset back to a fresh field
"""

import numpy as np
import pytest

from reaction_diffusion.errors import InvalidDimensions
from reaction_diffusion.gray_scott import (
    DEFAULT_PARAMS, GrayScott, Params, SeedPattern,
    create_field, laplacian, reset_field, step_field,
)


SIZES = [(1, 1), (3, 7), (4, 4), (32, 20), (64, 64)]


def _in_unit_range(field):
    return (field.u.min() >= 0.0 and field.u.max() <= 1.0
            and field.v.min() >= 0.0 and field.v.max() <= 1.0)


def _reference_step(u, v, params, dt):
    """Slow per-cell Gray-Scott step reading only the old grids."""
    h, w = u.shape
    u_new = np.empty((h, w), dtype=np.float64)
    v_new = np.empty((h, w), dtype=np.float64)
    for y in range(h):
        for x in range(w):
            def lap(g):
                return (g[(y - 1) % h, x] + g[(y + 1) % h, x]
                        + g[y, (x - 1) % w] + g[y, (x + 1) % w] - 4 * g[y, x])
            uu, vv = float(u[y, x]), float(v[y, x])
            r = uu * vv * vv
            du_dt = params.du * lap(u) - r + params.f * (1 - uu)
            dv_dt = params.dv * lap(v) + r - (params.f + params.k) * vv
            u_new[y, x] = max(0.0, min(1.0, uu + dt * du_dt))
            v_new[y, x] = max(0.0, min(1.0, vv + dt * dv_dt))
    return u_new, v_new


def test_create_bounds_all_patterns():
    """Every pattern at every size starts inside [0, 1] with matching shapes."""
    print("Testing create() bounds...")
    rng = np.random.default_rng(7)
    for width, height in SIZES:
        for pattern in SeedPattern:
            field = create_field(width, height, pattern, rng=rng)
            assert field.u.shape == field.v.shape == (height, width)
            assert field.u.size == field.v.size == width * height
            assert _in_unit_range(field), f"{pattern} {width}x{height} out of range"
    print("  ✓ all seeds bounded")


def test_create_rejects_bad_dimensions():
    print("Testing dimension checks...")
    for width, height in [(0, 4), (4, 0), (-3, 4), (2.5, 4), ("4", 4), (True, 4), (None, 4)]:
        with pytest.raises(InvalidDimensions):
            create_field(width, height)
    # InvalidDimensions is still a ValueError for callers that expect one
    with pytest.raises(ValueError):
        GrayScott(0, 10)
    assert create_field(np.int64(5), 6).shape == (6, 5)
    print("  ✓ non-positive and non-integer sizes rejected")


def test_center_seed_geometry():
    field = create_field(20, 20, "center")
    # radius 2 around (10, 10): the 3x3 block strictly inside the circle
    seeded = field.v == np.float32(0.25)
    assert seeded.sum() == 9
    assert seeded[9:12, 9:12].all()
    assert np.all(field.u[seeded] == np.float32(0.5))
    assert np.all(field.u[~seeded] == 1.0)
    assert np.all(field.v[~seeded] == 0.0)


def test_center_seed_uses_floor_center_on_odd_grid():
    field = create_field(21, 31, SeedPattern.CENTER)
    # radius 2.1 around (x=10, y=15)
    assert field.v[15, 10] == np.float32(0.25)
    assert field.v[15, 12] == np.float32(0.25)
    assert field.v[15, 13] == 0.0


def test_multiple_seed_three_by_three():
    field = create_field(40, 40, SeedPattern.MULTIPLE)
    # spacing 10, radius 1.5: a 3x3 block of cells around each of 9 centres
    assert (field.v > 0).sum() == 81
    for cy in (10, 20, 30):
        for cx in (10, 20, 30):
            assert field.v[cy, cx] == np.float32(0.25)
            assert (field.v[cy - 1:cy + 2, cx - 1:cx + 2] > 0).all()


def test_random_seed_reproducible_with_generator():
    a = create_field(64, 64, SeedPattern.RANDOM, rng=np.random.default_rng(123))
    b = create_field(64, 64, SeedPattern.RANDOM, rng=np.random.default_rng(123))
    assert np.array_equal(a.u, b.u) and np.array_equal(a.v, b.v)
    assert (a.v > 0).any()
    assert set(np.unique(a.v)) <= {np.float32(0.0), np.float32(0.25)}


def test_random_seed_clips_at_edges():
    """Circles near an edge are cut off rather than wrapped."""
    for seed in range(20):
        field = create_field(8, 8, SeedPattern.RANDOM, rng=np.random.default_rng(seed))
        assert _in_unit_range(field)
        assert (field.v > 0).any()


def test_laplacian_periodic():
    grid = np.zeros((5, 6), dtype=np.float32)
    grid[0, 0] = 1.0
    lap = laplacian(grid)
    assert lap[0, 0] == -4.0
    for y, x in [(1, 0), (4, 0), (0, 1), (0, 5)]:
        assert lap[y, x] == 1.0, (y, x)
    assert lap.sum() == pytest.approx(0.0, abs=1e-6)


def test_step_matches_reference():
    """Vectorised step equals a per-cell update that reads only old values."""
    print("Testing step() against reference...")
    rng = np.random.default_rng(0)
    field = create_field(6, 5)
    field.u[:] = rng.random(field.shape, dtype=np.float32)
    field.v[:] = rng.random(field.shape, dtype=np.float32)
    params = Params(du=0.21, dv=0.105, f=0.055, k=0.062)
    expected_u, expected_v = _reference_step(field.u.copy(), field.v.copy(), params, 0.8)

    step_field(field, params, dt=0.8)
    np.testing.assert_allclose(field.u, expected_u, atol=2e-6)
    np.testing.assert_allclose(field.v, expected_v, atol=2e-6)
    print("  ✓ step is a full double-buffered update")


def test_step_clamps_extreme_parameters():
    print("Testing clamp invariant...")
    extremes = [
        (Params(du=5.0, dv=5.0, f=2.0, k=3.0), 10.0),
        (Params(du=-4.0, dv=-4.0, f=-1.0, k=-1.0), 5.0),
        (Params(du=1e30, dv=-1e30, f=1e30, k=1e30), 1e30),
        (Params(du=1e300, dv=1e300, f=-1e300, k=1e300), 1e300),
        (DEFAULT_PARAMS, 0.0),
        (DEFAULT_PARAMS, -50.0),
    ]
    for params, dt in extremes:
        field = create_field(16, 16, SeedPattern.MULTIPLE)
        for _ in range(5):
            step_field(field, params, dt)
            assert not np.isnan(field.u).any() and not np.isnan(field.v).any()
            assert _in_unit_range(field), (params, dt)
    print("  ✓ values stay inside [0, 1]")


def test_deterministic_for_fixed_patterns():
    params = Params(du=0.16, dv=0.08, f=0.06, k=0.062)
    for pattern in (SeedPattern.CENTER, SeedPattern.MULTIPLE):
        runs = []
        for _ in range(2):
            field = create_field(48, 40, pattern)
            for _ in range(30):
                step_field(field, params, 1.0)
            runs.append(field)
        assert np.array_equal(runs[0].u, runs[1].u)
        assert np.array_equal(runs[0].v, runs[1].v)


def test_diffusion_conserves_mass():
    """With f = k = 0 and no V the periodic laplacian only moves U around."""
    field = create_field(16, 16)
    field.u[:] = 1.0
    field.v[:] = 0.0
    field.u[5, 7] = 0.0
    params = Params(du=0.2, dv=0.1, f=0.0, k=0.0)
    total = float(field.u.sum(dtype=np.float64))
    for _ in range(100):
        step_field(field, params, 1.0)
        assert float(field.u.sum(dtype=np.float64)) == pytest.approx(total, abs=1e-3)
    assert np.all(field.v == 0.0)
    # and the dip has actually spread out
    assert field.u[5, 7] > 0.5


def test_wrap_matches_interior_shift():
    """A bump at x=0 reaches x=w-1 exactly as a bump at x=1 reaches x=0."""
    print("Testing periodic wiring...")
    params = DEFAULT_PARAMS
    a = create_field(12, 9)
    b = create_field(12, 9)
    for f in (a, b):
        f.u[:] = 1.0
        f.v[:] = 0.0
    a.u[0, 0], a.v[0, 0] = 0.5, 0.25
    b.u[0, 1], b.v[0, 1] = 0.5, 0.25

    for _ in range(3):
        step_field(a, params, 1.0)
        step_field(b, params, 1.0)

    assert a.v[0, 11] > 0.0
    assert a.v[0, 11] == b.v[0, 0]
    assert a.v[8, 0] == b.v[8, 1]
    assert np.array_equal(np.roll(b.v, -1, axis=1), a.v)
    assert np.array_equal(np.roll(b.u, -1, axis=1), a.u)
    print("  ✓ edges see the opposite edge")


def test_small_grid_center_stays_elevated():
    field = create_field(4, 4, SeedPattern.CENTER)
    step_field(field, Params(du=0.16, dv=0.08, f=0.035, k=0.065), dt=1.0)
    corners = field.v[[0, 0, 3, 3], [0, 3, 0, 3]]
    block = field.v[1:3, 1:3]
    assert field.v[2, 2] > corners.max()
    assert block.mean() > corners.max()
    assert np.all(block >= corners.max())


def test_reset_restores_fresh_field():
    print("Testing reset()...")
    params = Params(du=0.16, dv=0.08, f=0.062, k=0.062)
    for pattern in (SeedPattern.CENTER, SeedPattern.MULTIPLE):
        field = create_field(32, 32, pattern)
        for _ in range(200):
            step_field(field, params, 1.0)
        fresh = create_field(32, 32, pattern)
        assert not np.array_equal(field.v, fresh.v)

        u_before, v_before = field.u, field.v
        reset_field(field, pattern)
        assert field.u is u_before and field.v is v_before
        assert np.array_equal(field.u, fresh.u)
        assert np.array_equal(field.v, fresh.v)
    print("  ✓ reset matches create")


def test_engine_wrapper():
    engine = GrayScott(24, 16, seed_pattern="multiple")
    assert engine.world is engine.v
    engine.step_n(3)
    assert engine.generation == 3

    engine.set_params(f=0.05)
    assert engine.params == Params(du=0.16, dv=0.08, f=0.05, k=0.065)
    assert engine.get_params()["f"] == 0.05

    engine.add_blob(0, 0, radius=4)
    assert engine.v[0, 0] > 0.2
    assert engine.v[15, 23] > 0.0  # brush wraps like the grid
    engine.remove_blob(0, 0, radius=4)
    assert engine.v.min() >= 0.0 and engine.u.max() <= 1.0

    engine.seed("center")
    assert engine.generation == 0
    assert np.array_equal(engine.v, create_field(24, 16, "center").v)

    engine.clear()
    assert np.all(engine.u == 1.0) and np.all(engine.v == 0.0)
    assert engine.stats["mass"] == 0.0


def test_params_snapshot_is_immutable():
    params = Params(du=1, dv=0, f=0, k=0)
    assert isinstance(params.du, float)
    with pytest.raises(AttributeError):
        params.f = 0.5
    updated = params.replace(f=0.5, k=None)
    assert updated.f == 0.5 and updated.k == 0.0
    assert params.f == 0.0


def test_seed_pattern_parse():
    assert SeedPattern.parse("Center") is SeedPattern.CENTER
    assert SeedPattern.parse(SeedPattern.RANDOM) is SeedPattern.RANDOM
    with pytest.raises(ValueError):
        SeedPattern.parse("spiral")


if __name__ == "__main__":
    print("\n=== Testing Gray-Scott Engine ===\n")

    test_create_bounds_all_patterns()
    test_create_rejects_bad_dimensions()
    test_step_matches_reference()
    test_step_clamps_extreme_parameters()
    test_wrap_matches_interior_shift()
    test_reset_restores_fresh_field()

    print("\n✓ All tests passed!\n")
