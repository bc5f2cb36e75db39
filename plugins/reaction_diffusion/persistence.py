"""
Session persistence: a versioned JSON record on disk, and a query-string
form of the same record for shareable links.

Record layout (version 1):
    {"version": 1,
     "params": {"du": .., "dv": .., "f": .., "k": ..},
     "resolution": 256, "palette": "Fire",
     "steps_per_tick": 1, "seed_pattern": "center"}

The record is a pydantic schema. Range checks live here rather than in
the engine, which accepts any finite coefficients.
"""

import json
import logging
from typing import Annotated
from urllib.parse import parse_qs, urlencode

from pydantic import (
    AfterValidator, BaseModel, Field, StrictInt, TypeAdapter, ValidationError,
)

from .config import (
    MAX_STEPS_PER_TICK, MIN_STEPS_PER_TICK, RESOLUTIONS, SessionConfig,
)
from .gray_scott import Params, SeedPattern
from .palettes import PALETTES


logger = logging.getLogger(__name__)

CURRENT_VERSION = 1

# Palette names accepted from older links
PALETTE_ALIASES = {
    "Inferno": "Fire",
    "Electric": "Cool",
    "Plasma": "Green",
}

PARAM_KEYS = ("du", "dv", "f", "k")


def _known_resolution(value):
    if value not in RESOLUTIONS:
        raise ValueError(f"resolution must be one of {RESOLUTIONS}")
    return value


def _known_palette(value):
    if value not in PALETTES:
        raise ValueError(f"unknown palette {value!r}")
    return value


# Strict ints: 256.0 and true are not resolutions or step counts
Coefficient = Annotated[float, Field(ge=0.0, le=1.0, allow_inf_nan=False)]
Resolution = Annotated[StrictInt, AfterValidator(_known_resolution)]
StepsPerTick = Annotated[StrictInt, Field(ge=MIN_STEPS_PER_TICK, le=MAX_STEPS_PER_TICK)]
PaletteName = Annotated[str, AfterValidator(_known_palette)]


class ParamsModel(BaseModel):
    du: Coefficient
    dv: Coefficient
    f: Coefficient
    k: Coefficient


class SessionRecord(BaseModel):
    """One saved session."""

    version: StrictInt
    params: ParamsModel
    resolution: Resolution
    palette: PaletteName
    steps_per_tick: StepsPerTick
    seed_pattern: SeedPattern = SeedPattern.CENTER


_RESOLUTION = TypeAdapter(Resolution)
_STEPS = TypeAdapter(StepsPerTick)
_PALETTE = TypeAdapter(PaletteName)
_SEED = TypeAdapter(SeedPattern)


def _validate(adapter, value):
    """Validated value, or None if it fails the schema."""
    try:
        return adapter.validate_python(value)
    except ValidationError:
        return None


def validate_state(state):
    """True if a decoded record has the right structure and ranges."""
    try:
        SessionRecord.model_validate(state)
    except ValidationError:
        return False
    return True


def state_from_config(config):
    return {
        "version": CURRENT_VERSION,
        "params": config.params.as_dict(),
        "resolution": config.resolution,
        "palette": config.palette,
        "steps_per_tick": config.steps_per_tick,
        "seed_pattern": SeedPattern.parse(config.seed_pattern).value,
    }


def config_from_state(state, base=None):
    """Merge a (possibly partial) record over a base SessionConfig."""
    config = base if base is not None else SessionConfig()
    changes = {}
    if "params" in state:
        changes["params"] = Params(**{k: state["params"][k] for k in PARAM_KEYS})
    if "resolution" in state:
        changes["width"] = changes["height"] = state["resolution"]
    if "palette" in state:
        changes["palette"] = state["palette"]
    if "steps_per_tick" in state:
        changes["steps_per_tick"] = state["steps_per_tick"]
    if "seed_pattern" in state:
        changes["seed_pattern"] = SeedPattern.parse(state["seed_pattern"])
    return config.replace(**changes)


def load_state(path):
    """Read a record from disk. Returns None if missing or unusable."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            text = fh.read()
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Error loading state from %s: %s", path, e)
        return None

    try:
        record = SessionRecord.model_validate_json(text)
    except ValidationError as e:
        logger.warning("Ignoring invalid state in %s: %s", path, e)
        return None
    if record.version != CURRENT_VERSION:
        logger.warning("State version mismatch: %s vs %s",
                       record.version, CURRENT_VERSION)
        return None
    return record.model_dump(mode="json")


def save_state(path, config):
    """Write the session config as a versioned record. Returns success."""
    state = state_from_config(config)
    try:
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(state, fh, indent=2)
    except OSError as e:
        logger.warning("Error saving state to %s: %s", path, e)
        return False
    return True


def state_to_query(state):
    """Encode a (possibly partial) record as a URL query string."""
    query = {}
    if "params" in state:
        for key in PARAM_KEYS:
            query[key] = repr(float(state["params"][key]))
    if "resolution" in state:
        query["resolution"] = str(state["resolution"])
    if state.get("palette"):
        query["palette"] = state["palette"]
    if "steps_per_tick" in state:
        query["speed"] = str(state["steps_per_tick"])
    if state.get("seed_pattern"):
        query["seed"] = SeedPattern.parse(state["seed_pattern"]).value
    return urlencode(query)


def _parse_int(text):
    try:
        return int(text, 10)
    except (TypeError, ValueError):
        return None


def query_to_state(query):
    """Decode a query string into a partial record.

    Each field is checked against the record schema on its own; invalid
    ones are dropped, so a link with a bad palette still carries its
    parameters. The four coefficients travel together: all or none.
    """
    qs = {key: values[0] for key, values in parse_qs(query.lstrip("?")).items()}
    state = {}

    try:
        params = ParamsModel.model_validate({key: qs.get(key) for key in PARAM_KEYS})
    except ValidationError:
        pass
    else:
        state["params"] = params.model_dump()

    resolution = _validate(_RESOLUTION, _parse_int(qs.get("resolution")))
    if resolution is not None:
        state["resolution"] = resolution

    palette = qs.get("palette")
    if palette:
        palette = _validate(_PALETTE, PALETTE_ALIASES.get(palette, palette))
        if palette is not None:
            state["palette"] = palette

    speed = _validate(_STEPS, _parse_int(qs.get("speed")))
    if speed is not None:
        state["steps_per_tick"] = speed

    seed = _validate(_SEED, qs.get("seed"))
    if seed is not None:
        state["seed_pattern"] = seed.value

    return state
