import json
from datetime import datetime, timezone

import pytest

from hubchain.errors import InvalidMintInflationError, UnknownRequestError
from hubchain.mint.keeper import MintKeeper
from hubchain.mint.module import (
    MintModule,
    begin_blocker,
    export_genesis,
    init_genesis,
    validate_genesis,
)
from hubchain.mint.types import GenesisState, Minter, Params
from hubchain.sdk import MINTER, AccAddress, Bank, Coins, Context, Dec

PERMISSIONS = {"fee_collector": None, "mint": [MINTER]}


@pytest.fixture
def keeper():
    return MintKeeper(Bank(PERMISSIONS))


def _prepared(keeper, height):
    ctx = Context(block_height=height, block_time=datetime(2022, 3, 1, tzinfo=timezone.utc))
    keeper.set_params(ctx, Params("stake", Dec.from_prec(4, 2)))
    keeper.set_minter(ctx, Minter.default())
    return ctx


def test_begin_blocker_mints_to_fee_collector(keeper):
    ctx = _prepared(keeper, 2)
    begin_blocker(ctx, keeper)
    minter = keeper.get_minter(ctx)
    params = keeper.get_params(ctx)
    mint_coin = minter.block_provision(params)
    fee_collector = AccAddress.module_address("fee_collector")
    assert keeper.bank.balances(fee_collector) == Coins([mint_coin])
    assert minter.last_update == ctx.block_time
    event = ctx.event_manager.events[-1]
    assert event.type == "mint"
    assert dict(event.attributes)["mint_coin"] == str(mint_coin.amount)


def test_begin_blocker_first_block_does_not_mint(keeper):
    ctx = _prepared(keeper, 1)
    begin_blocker(ctx, keeper)
    assert keeper.get_minter(ctx).last_update == ctx.block_time
    assert keeper.bank.balances(AccAddress.module_address("fee_collector")).is_empty()
    assert ctx.event_manager.events == []


def test_export_genesis_matches_default(keeper):
    ctx = Context()
    init_genesis(ctx, keeper, GenesisState.default())
    assert export_genesis(ctx, keeper) == GenesisState.default()


def test_validate_genesis_requires_positive_base():
    data = GenesisState(Minter(datetime(1970, 1, 1, tzinfo=timezone.utc), 0), Params.default())
    with pytest.raises(ValueError, match="base inflation must be positive"):
        validate_genesis(data)


def test_validate_genesis_rejects_high_inflation():
    data = GenesisState(Minter.default(), Params("stake", Dec.from_prec(3, 1)))
    with pytest.raises(InvalidMintInflationError):
        validate_genesis(data)


def test_init_genesis_wraps_invalid_state(keeper):
    data = GenesisState(Minter.default(), Params("stake", Dec.from_prec(3, 1)))
    with pytest.raises(ValueError, match="failed to initialize mint genesis state"):
        init_genesis(Context(), keeper, data)


def test_module_genesis_round_trip(keeper):
    module = MintModule(keeper)
    ctx = Context()
    assert module.init_genesis(ctx, json.dumps(module.default_genesis())) == []
    assert module.export_genesis(ctx) == module.default_genesis()


def test_module_validate_genesis_rejects_garbage(keeper):
    with pytest.raises(ValueError, match="failed to unmarshal mint genesis state"):
        MintModule(keeper).validate_genesis("not json")


def test_module_query(keeper):
    module = MintModule(keeper)
    ctx = Context()
    module.init_genesis(ctx, module.default_genesis())
    result = json.loads(module.query(ctx, ["parameters"]))
    assert result == {"mint_denom": "stake", "inflation": "0.040000000000000000"}
    with pytest.raises(UnknownRequestError):
        module.query(ctx, ["other"])


def test_module_begin_block(keeper):
    ctx = _prepared(keeper, 5)
    module = MintModule(keeper)
    module.begin_block(ctx)
    expected = keeper.get_minter(ctx).block_provision(keeper.get_params(ctx))
    assert keeper.bank.balances(AccAddress.module_address("fee_collector")) == Coins([expected])