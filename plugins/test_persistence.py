#!/usr/bin/env python3
"""
Tests for saved sessions and shareable links.

Verifies:
1. A saved config loads back into an equal config
2. Missing, corrupt, outdated or out-of-range files load as None
3. Query strings keep every valid field and drop the invalid ones
"""

import json
import logging
import os
import tempfile

import pytest
from pydantic import ValidationError

from reaction_diffusion.config import SessionConfig
from reaction_diffusion.gray_scott import Params, SeedPattern
from reaction_diffusion.persistence import (
    CURRENT_VERSION, ParamsModel, SessionRecord, config_from_state, load_state,
    query_to_state, save_state, state_from_config, state_to_query, validate_state,
)


def _config():
    return SessionConfig(
        width=128, height=128,
        params=Params(du=0.2, dv=0.1, f=0.055, k=0.062),
        steps_per_tick=3,
        seed_pattern="random",
        palette="Cool",
    )


def _write(path, payload):
    with open(path, "w", encoding="utf-8") as fh:
        if isinstance(payload, str):
            fh.write(payload)
        else:
            json.dump(payload, fh)


def test_save_and_load_round_trip():
    print("Testing save/load...")
    config = _config()
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "session.json")
        assert save_state(path, config) is True
        state = load_state(path)

    assert state["version"] == CURRENT_VERSION
    assert state["resolution"] == 128
    assert state["seed_pattern"] == "random"

    restored = config_from_state(state)
    assert restored.params == config.params
    assert (restored.width, restored.height) == (128, 128)
    assert restored.steps_per_tick == 3
    assert restored.seed_pattern is SeedPattern.RANDOM
    assert restored.palette == "Cool"
    print("  ✓ config survives a round trip")


def test_load_missing_file_is_quiet(caplog):
    with tempfile.TemporaryDirectory() as tmp:
        with caplog.at_level(logging.WARNING):
            assert load_state(os.path.join(tmp, "nope.json")) is None
    assert caplog.records == []


def test_load_rejects_unusable_files(caplog):
    print("Testing rejected files...")
    good = state_from_config(_config())
    bad_payloads = [
        "{not json",
        [1, 2, 3],
        dict(good, version=2),
        {k: v for k, v in good.items() if k != "version"},
        dict(good, resolution=300),
        dict(good, resolution=256.0),
        dict(good, palette="Inferno"),
        dict(good, steps_per_tick=11),
        dict(good, steps_per_tick=True),
        dict(good, seed_pattern="spiral"),
        dict(good, params=dict(good["params"], f=1.5)),
        dict(good, params={"du": 0.1, "dv": 0.1, "f": 0.1}),
    ]
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "session.json")
        for payload in bad_payloads:
            _write(path, payload)
            with caplog.at_level(logging.WARNING, logger="reaction_diffusion.persistence"):
                assert load_state(path) is None, payload
        _write(path, good)
        assert load_state(path) == good
    assert any(r.levelno == logging.WARNING for r in caplog.records)
    print("  ✓ bad files load as None")


def test_save_to_unwritable_path_returns_false():
    with tempfile.TemporaryDirectory() as tmp:
        assert save_state(os.path.join(tmp, "missing", "dir", "s.json"), _config()) is False


def test_validate_state_seed_is_optional():
    state = state_from_config(_config())
    del state["seed_pattern"]
    assert validate_state(state)
    assert not validate_state("not a dict")


def test_record_schema_ranges():
    good = state_from_config(_config())
    record = SessionRecord.model_validate(good)
    assert record.seed_pattern is SeedPattern.RANDOM
    assert record.params.f == 0.055

    with pytest.raises(ValidationError):
        SessionRecord.model_validate(dict(good, resolution=256.0))
    with pytest.raises(ValidationError):
        SessionRecord.model_validate(dict(good, steps_per_tick=0))
    with pytest.raises(ValidationError):
        SessionRecord.model_validate_json('{"version": 1}')

    # JSON integers are fine for coefficients; infinities are not
    assert ParamsModel.model_validate_json('{"du": 1, "dv": 0, "f": 0, "k": 0}').du == 1.0
    for bad in ("inf", "-0.1", "1.01", "x"):
        with pytest.raises(ValidationError):
            ParamsModel.model_validate({"du": bad, "dv": 0.1, "f": 0.1, "k": 0.1})
    assert query_to_state("du=inf&dv=0.1&f=0.05&k=0.06") == {}


def test_query_round_trip():
    print("Testing links...")
    state = state_from_config(_config())
    query = state_to_query(state)
    for key in ("du=", "dv=", "f=", "k=", "resolution=128", "palette=Cool",
                "speed=3", "seed=random"):
        assert key in query, key

    decoded = query_to_state("?" + query)
    expected = dict(state)
    del expected["version"]
    assert decoded == expected
    print("  ✓ links decode to the same record")


def test_query_drops_invalid_fields_independently():
    decoded = query_to_state(
        "du=0.2&dv=0.1&f=0.05&k=0.06&resolution=300&palette=Nope&speed=0&seed=spiral"
    )
    assert decoded == {"params": {"du": 0.2, "dv": 0.1, "f": 0.05, "k": 0.06}}

    decoded = query_to_state("du=2&dv=0.1&f=0.05&k=0.06&resolution=512&speed=10")
    assert "params" not in decoded
    assert decoded == {"resolution": 512, "steps_per_tick": 10}

    # coefficients travel together
    assert query_to_state("f=0.05&k=0.06") == {}
    assert query_to_state("du=nan&dv=0.1&f=0.05&k=0.06") == {}
    assert query_to_state("") == {}


def test_query_palette_aliases():
    assert query_to_state("palette=Inferno") == {"palette": "Fire"}
    assert query_to_state("palette=Electric") == {"palette": "Cool"}
    assert query_to_state("palette=Plasma") == {"palette": "Green"}
    assert query_to_state("palette=Electric+Yellow") == {"palette": "Electric Yellow"}


def test_partial_state_merges_over_base():
    base = _config()
    merged = config_from_state({"palette": "Fire", "steps_per_tick": 7}, base)
    assert merged.palette == "Fire"
    assert merged.steps_per_tick == 7
    assert merged.params == base.params
    assert merged.width == 128
    assert base.palette == "Cool"


if __name__ == "__main__":
    print("\n=== Testing Persistence ===\n")

    test_save_and_load_round_trip()
    test_query_round_trip()
    test_query_drops_invalid_fields_independently()

    print("\n✓ All tests passed!\n")
