"""Mint module: block provisioning, genesis handling and the module wiring."""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Sequence

from hubchain.errors import ModuleError
from hubchain.mint.keeper import MintKeeper, query
from hubchain.mint.types import (
    ATTRIBUTE_KEY_INFLATION_TIME,
    ATTRIBUTE_KEY_LAST_INFLATION_TIME,
    ATTRIBUTE_KEY_MINT_COIN,
    EVENT_TYPE_MINT,
    MODULE_NAME,
    ROUTER_KEY,
    GenesisState,
)
from hubchain.sdk import Coins, Context, Event


def begin_blocker(ctx: Context, keeper: MintKeeper) -> None:
    """Mint this block's provision and hand it to the fee collector."""
    block_time = ctx.block_time
    minter = keeper.get_minter(ctx)
    if ctx.block_height <= 1:
        # no inflation in the first block
        keeper.set_minter(ctx, dataclasses.replace(minter, last_update=block_time))
        return

    params = keeper.get_params(ctx)
    keeper.logger.info(
        "Mint parameters inflation_rate=%s mint_denom=%s", params.inflation, params.mint_denom
    )

    minted_coin = minter.block_provision(params)
    keeper.logger.info("Mint result block_provisions=%s time=%s", minted_coin, block_time)

    minted_coins = Coins([minted_coin])
    keeper.mint_coins(ctx, minted_coins)
    keeper.add_collected_fees(ctx, minted_coins)

    last_inflation_time = minter.last_update
    keeper.set_minter(ctx, dataclasses.replace(minter, last_update=block_time))

    ctx.event_manager.emit(
        Event(
            EVENT_TYPE_MINT,
            (
                (ATTRIBUTE_KEY_LAST_INFLATION_TIME, str(last_inflation_time)),
                (ATTRIBUTE_KEY_INFLATION_TIME, str(block_time)),
                (ATTRIBUTE_KEY_MINT_COIN, str(minted_coin.amount)),
            ),
        )
    )


def validate_genesis(data: GenesisState) -> None:
    """Raise unless the inflation base is positive and the parameters are valid."""
    if not data.minter.inflation_base > 0:
        raise ValueError("base inflation must be positive")
    data.params.validate()


def init_genesis(ctx: Context, keeper: MintKeeper, data: GenesisState) -> None:
    """Validate the genesis state and store its minter and parameters."""
    try:
        validate_genesis(data)
    except (ValueError, ModuleError) as err:
        raise ValueError(f"failed to initialize mint genesis state: {err}") from err
    keeper.set_minter(ctx, data.minter)
    keeper.set_params(ctx, data.params)


def export_genesis(ctx: Context, keeper: MintKeeper) -> GenesisState:
    return GenesisState(keeper.get_minter(ctx), keeper.get_params(ctx))


def _parse_genesis(data: dict | str | bytes) -> GenesisState:
    try:
        if isinstance(data, (str, bytes)):
            data = json.loads(data)
        return GenesisState.from_json(data)
    except (ValueError, TypeError, KeyError, AttributeError) as err:
        raise ValueError(f"failed to unmarshal {MODULE_NAME} genesis state: {err}") from err


class MintModule:
    """The mint module as seen by the application."""

    name = MODULE_NAME
    querier_route = ROUTER_KEY
    consensus_version = 1

    def __init__(self, keeper: MintKeeper) -> None:
        self.keeper = keeper

    def default_genesis(self) -> dict:
        return GenesisState.default().to_json()

    def validate_genesis(self, data: dict | str | bytes) -> None:
        """Decode the raw genesis data and check it."""
        validate_genesis(_parse_genesis(data))

    def init_genesis(self, ctx: Context, data: dict | str | bytes) -> list:
        """Load the genesis state; returns no validator updates."""
        init_genesis(ctx, self.keeper, _parse_genesis(data))
        return []

    def export_genesis(self, ctx: Context) -> dict:
        return export_genesis(ctx, self.keeper).to_json()

    def begin_block(self, ctx: Context) -> None:
        begin_blocker(ctx, self.keeper)

    def query(self, ctx: Context, path: Sequence[str]) -> bytes:
        return query(self.keeper, ctx, path)