"""
PNG export of a rendered frame (no pygame needed).
"""

import os
import time

import numpy as np
from PIL import Image


def default_export_name():
    return f"reaction-diffusion-{int(time.time() * 1000)}.png"


def save_png(rgb, path):
    """Write an (H, W, 3) uint8 buffer to ``path``. Returns the path."""
    rgb = np.asarray(rgb)
    if rgb.ndim != 3 or rgb.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {rgb.shape}")
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    Image.fromarray(rgb.astype(np.uint8)).save(path)
    return path
