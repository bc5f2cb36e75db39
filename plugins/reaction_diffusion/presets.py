"""
Gray-Scott Parameter Presets

Each preset is a set of (du, dv, f, k) coefficients known to produce a
recognisable pattern, plus the seed pattern it looks best from.
"""

from .gray_scott import Params, SeedPattern


PRESETS = {
    "leopard": {
        "name": "Leopard Spots",
        "description": "Classic spotted pattern resembling animal coat markings",
        "params": Params(du=0.16, dv=0.08, f=0.035, k=0.065),
        "seed": SeedPattern.CENTER,
    },
    "zebra": {
        "name": "Zebra Stripes",
        "description": "Parallel stripes forming wave-like patterns",
        "params": Params(du=0.14, dv=0.06, f=0.025, k=0.06),
        "seed": SeedPattern.CENTER,
    },
    "coral": {
        "name": "Coral Reefs",
        "description": "Branching, organic structures like coral formations",
        "params": Params(du=0.16, dv=0.08, f=0.062, k=0.062),
        "seed": SeedPattern.RANDOM,
    },
    "fingerprint": {
        "name": "Fingerprint",
        "description": "Swirling patterns reminiscent of fingerprints",
        "params": Params(du=0.19, dv=0.05, f=0.06, k=0.062),
        "seed": SeedPattern.MULTIPLE,
    },
    "waves": {
        "name": "Waves",
        "description": "Oscillating wave patterns",
        "params": Params(du=0.16, dv=0.08, f=0.04, k=0.06),
        "seed": SeedPattern.CENTER,
    },
    "maze": {
        "name": "Maze",
        "description": "Labyrinth-like interconnected patterns",
        "params": Params(du=0.14, dv=0.06, f=0.03, k=0.055),
        "seed": SeedPattern.MULTIPLE,
    },
    "pulsing": {
        "name": "Pulsing Spots",
        "description": "Dynamic spots that pulse and merge",
        "params": Params(du=0.16, dv=0.08, f=0.05, k=0.065),
        "seed": SeedPattern.RANDOM,
    },
    "spirals": {
        "name": "Spirals",
        "description": "Rotating spiral patterns",
        "params": Params(du=0.18, dv=0.09, f=0.045, k=0.06),
        "seed": SeedPattern.CENTER,
    },
}

PRESET_ORDER = list(PRESETS.keys())


def get_preset(name):
    """Look up a preset by key or by display name. None if unknown."""
    if name in PRESETS:
        return PRESETS[name]
    for preset in PRESETS.values():
        if preset["name"] == name:
            return preset
    return None


def list_presets():
    """Return list of (key, name, description) tuples."""
    return [(k, PRESETS[k]["name"], PRESETS[k]["description"]) for k in PRESET_ORDER]
