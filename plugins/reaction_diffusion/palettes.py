"""
Color Palettes for Reaction-Diffusion Visualization

Maps a cell's (u, v) pair to RGB. A palette is a function of a scalar
t in [0, 1] returning float RGB in [0, 255]; the scalar comes from
combining the two species with one of the color modes below. Whole grids
go through a cached (256, 3) uint8 lookup table built from the same
function, while map_cell evaluates the function directly. Tuned for
black backgrounds, so every mapped color gets a brightness boost.
"""

import numpy as np


_T = np.linspace(0.0, 1.0, 256)


def _rgb(t, r, g, b):
    return np.stack([np.broadcast_to(np.asarray(c, dtype=np.float64), t.shape)
                     for c in (r, g, b)], axis=-1)


def _to_lut(rgb):
    return np.clip(np.rint(rgb), 0, 255).astype(np.uint8)


def _interpolate_colors(t, stops):
    """
    Smoothstep interpolation between color stops.

    Args:
        t: positions in [0, 1] to evaluate
        stops: List of (position, (r, g, b)) where position is [0, 1]
    """
    positions = np.array([s[0] for s in stops])
    colors = np.array([s[1] for s in stops], dtype=np.float64)
    seg = np.clip(np.searchsorted(positions, t, side="right") - 1, 0, len(stops) - 2)
    span = positions[seg + 1] - positions[seg]
    frac = np.where(span > 0, (t - positions[seg]) / np.where(span > 0, span, 1), 0.0)
    frac = frac * frac * (3 - 2 * frac)  # smoothstep
    return colors[seg] + np.expand_dims(frac, -1) * (colors[seg + 1] - colors[seg])


# --- Palette Definitions ---

def electric_yellow(t):
    """High contrast yellow to cyan."""
    lo = t < 0.5
    s = np.where(lo, t * 2, (t - 0.5) * 2)
    return _rgb(
        t,
        np.where(lo, 255, 255 * (1 - s)),
        np.where(lo, 255 * s, 255),
        np.where(lo, 0, 255 * s),
    )


def neon_gold(t):
    intensity = t ** 0.7
    return _rgb(t, 255 * intensity, 215 * intensity, 0)


def plasma_fire(t):
    """Yellow/orange/red gradient."""
    g = np.where(t < 0.33, 255 * (t / 0.33),
                 np.where(t < 0.66, 255, 255 - (t - 0.66) / 0.34 * 100))
    b = np.where(t < 0.33, 0,
                 np.where(t < 0.66, (t - 0.33) / 0.33 * 100, (t - 0.66) / 0.34 * 50))
    return _rgb(t, 255, g, b)


def cyber_yellow(t):
    """Electric yellow with cyan highlights."""
    phase = t * np.pi * 2
    r = np.sin(phase) * 0.5 + 0.5
    g = np.sin(phase + np.pi * 0.3) * 0.5 + 0.5
    b = np.clip(np.sin(phase + np.pi) * 0.3 + 0.2, 0, None)
    return _rgb(t, r ** 0.5 * 255, g ** 0.5 * 255, b ** 0.5 * 200)


def aurora_gold(t):
    """Yellow/green/cyan aurora."""
    phase = t * np.pi * 3
    r = np.sin(phase) * 0.4 + 0.6
    g = np.sin(phase + np.pi * 0.3) * 0.4 + 0.6
    b = np.sin(phase + np.pi * 1.5) * 0.3 + 0.3
    return _rgb(t, r ** 0.6 * 255, g ** 0.6 * 255, b ** 0.6 * 200)


def solar_flare(t):
    lo = t < 0.6
    return _rgb(
        t,
        255,
        np.where(lo, 200 + (t / 0.6) * 55, 255),
        np.where(lo, (t / 0.6) * 100, 100 + (t - 0.6) / 0.4 * 155),
    )


def monochrome(t):
    intensity = t ** 0.6 * 255
    return _rgb(t, intensity, intensity, intensity)


def fire(t):
    """Black through red to yellow-white fire."""
    return _interpolate_colors(t, [
        (0.00, (0, 0, 0)),
        (0.25, (90, 10, 0)),
        (0.50, (210, 60, 5)),
        (0.75, (250, 170, 40)),
        (1.00, (255, 250, 210)),
    ])


def cool(t):
    """Deep blue through cyan to white."""
    return _interpolate_colors(t, [
        (0.00, (0, 2, 15)),
        (0.30, (10, 40, 120)),
        (0.60, (20, 150, 210)),
        (1.00, (220, 250, 255)),
    ])


def green(t):
    return _interpolate_colors(t, [
        (0.00, (2, 6, 2)),
        (0.35, (20, 70, 25)),
        (0.70, (70, 190, 60)),
        (1.00, (200, 255, 170)),
    ])


# Registry of all palettes
PALETTES = {
    "Electric Yellow": electric_yellow,
    "Neon Gold": neon_gold,
    "Plasma Fire": plasma_fire,
    "Cyber Yellow": cyber_yellow,
    "Aurora Gold": aurora_gold,
    "Solar Flare": solar_flare,
    "Monochrome": monochrome,
    "Fire": fire,
    "Cool": cool,
    "Green": green,
}

PALETTE_ORDER = list(PALETTES.keys())

BRIGHTNESS_BOOST = 1.2

_lut_cache = {}


def get_colormap(name):
    """Get a palette LUT (256, 3) uint8 array by name. KeyError if unknown."""
    lut = _lut_cache.get(name)
    if lut is None:
        lut = _lut_cache[name] = _to_lut(PALETTES[name](_T))
    return lut


def combine(u, v, mode="uv"):
    """Reduce (u, v) to the scalar that indexes the palette.

    Modes: "u", "v", "uv" (weighted blend with gamma), "difference".
    Unknown modes fall back to "uv".
    """
    u = np.asarray(u, dtype=np.float32)
    v = np.asarray(v, dtype=np.float32)
    if mode == "u":
        return u
    if mode == "v":
        return v
    if mode == "difference":
        return np.abs(u - v)
    return np.clip(u * 0.6 + v * 0.4, 0, None) ** 0.7


def apply_colormap(field, lut, boost=BRIGHTNESS_BOOST):
    """
    Apply a palette LUT to a float field.

    Args:
        field: numpy array with values in [0, 1]
        lut: (256, 3) uint8 palette lookup table
        boost: brightness multiplier, clipped at 255

    Returns:
        (..., 3) uint8 RGB image
    """
    indices = np.rint(np.clip(field, 0, 1) * 255).astype(np.uint8)
    rgb = lut[indices]
    if boost != 1.0:
        rgb = np.minimum(np.rint(rgb * boost), 255).astype(np.uint8)
    return rgb


def map_to_rgb(u, v, lut, mode="uv"):
    """(H, W) u and v grids to an (H, W, 3) uint8 image."""
    return apply_colormap(combine(u, v, mode), lut)


def map_cell(u, v, palette="Electric Yellow", mode="uv", boost=BRIGHTNESS_BOOST):
    """Color of a single cell as an (r, g, b) tuple of ints.

    Evaluates the palette function at the exact combined value rather
    than through the 256-entry table. KeyError if the palette is unknown.
    """
    value = np.clip(np.float64(combine(u, v, mode)), 0.0, 1.0)
    rgb = PALETTES[palette](np.asarray(value))
    rgb = np.minimum(np.rint(rgb * boost), 255)
    return tuple(int(c) for c in np.clip(rgb, 0, 255))
