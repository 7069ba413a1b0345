"""Simulation helpers for the mint module: store decoding, random genesis and param changes."""

from __future__ import annotations

import json
import logging
import random
from collections.abc import Callable
from dataclasses import dataclass

from hubchain.mint.types import (
    KEY_INFLATION,
    MINT_DENOM,
    MINTER_KEY,
    MODULE_NAME,
    GenesisState,
    Minter,
    Params,
)
from hubchain.sdk import Dec

INFLATION = "inflation"

KVPair = tuple[bytes, bytes]

_logger = logging.getLogger(f"hubchain.{MODULE_NAME}.simulation")


def new_decode_store() -> Callable[[KVPair, KVPair], str]:
    """Return a function that renders two stored mint values side by side."""

    def decode(kv_a: KVPair, kv_b: KVPair) -> str:
        key_a, value_a = kv_a
        _, value_b = kv_b
        if bytes(key_a) == MINTER_KEY:
            minter_a = Minter.from_json(json.loads(value_a))
            minter_b = Minter.from_json(json.loads(value_b))
            return f"{minter_a}\n{minter_b}"
        raise ValueError(f"invalid mint key {bytes(key_a).hex().upper()}")

    return decode


def gen_inflation(rng: random.Random) -> Dec:
    """A random inflation rate between 0.00 and 0.98 in steps of 0.01."""
    return Dec.from_prec(rng.randrange(99), 2)


def randomized_gen_state(rng: random.Random) -> GenesisState:
    """Generate a mint genesis state with a random inflation rate."""
    params = Params(mint_denom=MINT_DENOM, inflation=gen_inflation(rng))
    genesis = GenesisState(Minter.default(), params)
    _logger.info(
        "Selected randomly generated %s parameters:\n%s",
        MODULE_NAME,
        json.dumps(genesis.to_json(), indent=1),
    )
    return genesis


@dataclass(frozen=True)
class ParamChange:
    """A parameter that simulated governance proposals may change."""

    subspace: str
    key: str
    simulate_value: Callable[[random.Random], str]


def param_changes(rng: random.Random) -> list[ParamChange]:
    """Parameters of the mint module that param change proposals may modify."""
    return [
        ParamChange(
            subspace=MODULE_NAME,
            key=KEY_INFLATION.decode(),
            simulate_value=lambda r: f'"{gen_inflation(r)}"',
        )
    ]