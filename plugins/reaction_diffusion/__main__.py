"""
Reaction-Diffusion Viewer - Entry Point

Usage:
    python -m reaction_diffusion [preset] [--size N] [--window WxH]
                                 [--steps N] [--state FILE] [--link QUERY]
                                 [--snap N] [--out DIR] [--list]

Examples:
    python -m reaction_diffusion
    python -m reaction_diffusion maze --size 512
    python -m reaction_diffusion --link "f=0.062&k=0.062&seed=random"
    python -m reaction_diffusion all --snap 2000 --size 128

--state FILE loads the saved session (if valid) and saves it on quit.
--snap N runs N frames headless and writes PNGs instead of opening a window.

Use --list to see all available presets.
"""

import os
import sys

from .config import RESOLUTIONS, SessionConfig
from .export import save_png
from .persistence import config_from_state, load_state, query_to_state
from .presets import PRESET_ORDER, list_presets
from .simulation import FrameScheduler, Simulation


_NUMERIC_FLAGS = ("--size", "--window", "--steps", "--snap")


def _int_value(text):
    try:
        return int(text, 10)
    except ValueError:
        return None


def _window_value(text):
    """Parse "WxH" into (w, h), or None."""
    parts = text.lower().split("x")
    if len(parts) != 2:
        return None
    w, h = _int_value(parts[0]), _int_value(parts[1])
    if w is None or h is None or w <= 0 or h <= 0:
        return None
    return w, h


def snap(preset, config, frames, out_dir):
    """Headless mode: run N frames per preset, save PNGs, exit."""
    presets_to_snap = PRESET_ORDER if preset == "all" else [preset]

    for pkey in presets_to_snap:
        scheduler = FrameScheduler()
        sim = Simulation(config, scheduler=scheduler)
        if pkey is not None:
            sim.apply_preset(pkey)
        label = pkey or "session"

        print(f"  {label}: running {frames} frames...", end="", flush=True)
        sim.play()
        for i in range(frames):
            scheduler.present(i / 60.0)
        sim.pause()

        path = os.path.join(out_dir, f"rd_{label}.png")
        save_png(sim.render_rgb(), path)
        save_png(sim.render_rgb(), os.path.join(out_dir, "latest.png"))
        print(f" saved: {path}")
        sim.close()


def main(argv=None):
    preset = None
    size = None
    steps = None
    win_w, win_h = 900, 900
    snap_frames = 0
    state_path = None
    link = None
    out_dir = os.path.join(os.getcwd(), "screenshots")

    args = sys.argv[1:] if argv is None else list(argv)
    i = 0
    while i < len(args):
        arg = args[i]
        if arg in _NUMERIC_FLAGS and i + 1 < len(args):
            value = _window_value(args[i + 1]) if arg == "--window" else _int_value(args[i + 1])
            if value is None:
                print(f"Unknown argument: {arg} {args[i + 1]}")
                print("Expected an integer (WxH for --window)")
                return 2
            if arg == "--size":
                size = value
            elif arg == "--window":
                win_w, win_h = value
            elif arg == "--steps":
                steps = value
            else:
                snap_frames = value
            i += 2
        elif arg == "--state" and i + 1 < len(args):
            state_path = args[i + 1]
            i += 2
        elif arg == "--link" and i + 1 < len(args):
            link = args[i + 1]
            i += 2
        elif arg == "--out" and i + 1 < len(args):
            out_dir = args[i + 1]
            i += 2
        elif arg == "--list":
            print("\nAvailable presets:\n")
            for key, name, desc in list_presets():
                print(f"    {key:12s} {name:16s} {desc}")
            print()
            return 0
        elif arg in ("--help", "-h"):
            print(__doc__)
            return 0
        elif arg in PRESET_ORDER or arg == "all":
            preset = arg
            i += 1
        else:
            print(f"Unknown argument: {arg}")
            print("Use --list to see available presets")
            return 2

    # Saved session first, then link overrides, then explicit flags
    config = SessionConfig()
    if state_path:
        saved = load_state(state_path)
        if saved is not None:
            config = config_from_state(saved, config)
    if link:
        config = config_from_state(query_to_state(link), config)
    if size is not None:
        if size <= 0:
            print(f"Grid size must be positive, got {size}")
            return 2
        config = config.replace(width=size, height=size)
    if steps is not None:
        config = config.replace(steps_per_tick=steps)

    if snap_frames > 0:
        print(f"Headless snap mode: {preset or 'session'} @ "
              f"{config.width}x{config.height}, {snap_frames} frames")
        snap(preset, config, snap_frames, out_dir)
        return 0

    if preset == "all":
        preset = None
    if config.width not in RESOLUTIONS:
        print(f"Note: {config.width}x{config.height} is not one of the panel "
              f"resolutions {RESOLUTIONS}")

    print("Starting Reaction-Diffusion Viewer")
    print(f"  Preset: {preset or 'custom'}")
    print(f"  Grid: {config.width}x{config.height}")
    print(f"  Window: {win_w}x{win_h}")
    print()

    # pygame is only needed for the window
    from .viewer import Viewer

    viewer = Viewer(
        width=win_w,
        height=win_h,
        config=config,
        start_preset=preset,
        export_dir=out_dir,
        state_path=state_path,
    )
    viewer.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
