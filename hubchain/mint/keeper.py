"""Mint keeper: the minter, module parameters and coin minting."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence

from hubchain.errors import UnknownRequestError
from hubchain.mint.types import (
    DEFAULT_PARAM_SPACE,
    MINTER_KEY,
    MODULE_NAME,
    PARAM_SET_PAIRS,
    QUERY_PARAMETERS,
    STORE_KEY,
    Minter,
    Params,
)
from hubchain.sdk import Bank, Coins, Context, Dec, KVStore, sorted_json

FEE_COLLECTOR_NAME = "fee_collector"
PARAMS_STORE_KEY = "params"


class MintKeeper:
    """Keeps the minter and parameters and mints through the bank."""

    def __init__(
        self,
        bank: Bank,
        fee_collector_name: str = FEE_COLLECTOR_NAME,
        store_key: str = STORE_KEY,
        param_space: str = DEFAULT_PARAM_SPACE,
    ) -> None:
        if bank.module_address(MODULE_NAME) is None:
            raise RuntimeError("the mint module account has not been set")
        self.bank = bank
        self.fee_collector_name = fee_collector_name
        self.store_key = store_key
        self.param_space = param_space
        self.logger = logging.getLogger(f"hubchain.{MODULE_NAME}")

    def _store(self, ctx: Context) -> KVStore:
        return ctx.store(self.store_key)

    def _param_key(self, key: bytes) -> bytes:
        return f"{self.param_space}/".encode() + key

    def get_minter(self, ctx: Context) -> Minter:
        raw = self._store(ctx).get(MINTER_KEY)
        if raw is None:
            raise LookupError("Stored minter should not have been nil")
        return Minter.from_json(json.loads(raw))

    def set_minter(self, ctx: Context, minter: Minter) -> None:
        self._store(ctx).set(MINTER_KEY, sorted_json(minter.to_json()))

    def mint_coins(self, ctx: Context, coins: Coins) -> None:
        """Mint coins into the mint module account; nothing happens for no coins."""
        if coins.is_empty():
            return
        self.bank.mint_coins(MODULE_NAME, coins)

    def add_collected_fees(self, ctx: Context, coins: Coins) -> None:
        """Move coins from the mint module account to the fee collector."""
        self.bank.send_coins_from_module_to_module(MODULE_NAME, self.fee_collector_name, coins)

    def get_params(self, ctx: Context) -> Params:
        store = ctx.store(PARAMS_STORE_KEY)
        values: dict[str, object] = {}
        for key, attr, _ in PARAM_SET_PAIRS:
            raw = store.get(self._param_key(key))
            if raw is None:
                raise LookupError(f"parameter {key.decode()} not set")
            values[attr] = json.loads(raw)
        return Params(
            mint_denom=str(values["mint_denom"]),
            inflation=Dec.from_str(str(values["inflation"])),
        )

    def set_params(self, ctx: Context, params: Params) -> None:
        """Validate and store every parameter."""
        store = ctx.store(PARAMS_STORE_KEY)
        for key, attr, validator in PARAM_SET_PAIRS:
            value = getattr(params, attr)
            try:
                validator(value)
            except (TypeError, ValueError) as err:
                raise ValueError(f"value from ParamSetPair is invalid: {err}") from err
            store.set(self._param_key(key), json.dumps(str(value)).encode("utf-8"))

    def params(self, ctx: Context) -> Params:
        """Answer the parameters query."""
        return self.get_params(ctx)


def query(keeper: MintKeeper, ctx: Context, path: Sequence[str]) -> bytes:
    """Answer a legacy query path with indented JSON."""
    if path and path[0] == QUERY_PARAMETERS:
        return json.dumps(keeper.get_params(ctx).to_json(), indent=2).encode("utf-8")
    route = path[0] if path else ""
    raise UnknownRequestError(f"unknown query path: {route}")