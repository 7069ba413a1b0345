import json

import pytest

from hubchain.errors import SuperExistsError, UnknownRequestError
from hubchain.guardian.keeper import GuardianKeeper
from hubchain.guardian.module import (
    GuardianModule,
    export_genesis,
    init_genesis,
    new_handler,
    validate_genesis,
)
from hubchain.guardian.types import AccountType, GenesisState, MsgAddSuper, MsgDeleteSuper, Super
from hubchain.sdk import AccAddress, Context, Event, address_hash

ADDRS = [AccAddress(address_hash(f"member-{i}".encode())) for i in range(3)]


@pytest.fixture
def keeper():
    return GuardianKeeper()


@pytest.fixture
def ctx():
    return Context()


def _genesis():
    return GenesisState((Super.create("root", AccountType.GENESIS, ADDRS[0], ADDRS[0]),))


def test_export_default_genesis(keeper, ctx):
    assert export_genesis(ctx, keeper) == GenesisState.default()


def test_genesis_round_trip(keeper, ctx):
    init_genesis(ctx, keeper, _genesis())
    assert export_genesis(ctx, keeper) == _genesis()


def test_validate_genesis_rejects_bad_address():
    bad = GenesisState((Super("d", AccountType.GENESIS, "bogus", str(ADDRS[0])),))
    with pytest.raises(ValueError):
        validate_genesis(bad)


def test_init_genesis_rejects_bad_added_by(keeper, ctx):
    bad = GenesisState((Super("d", AccountType.GENESIS, str(ADDRS[0]), ""),))
    with pytest.raises(ValueError, match="failed to initialize guardian genesis state"):
        init_genesis(ctx, keeper, bad)


def test_handler_add_and_delete(keeper, ctx):
    init_genesis(ctx, keeper, _genesis())
    handle = new_handler(keeper)
    events = handle(ctx, MsgAddSuper.create("new", ADDRS[1], ADDRS[0]))
    assert [e.type for e in events] == ["message", "add_super"]
    assert keeper.authorized(ctx, ADDRS[1])
    events = handle(ctx, MsgDeleteSuper.create(ADDRS[1], ADDRS[0]))
    assert events[-1] == Event(
        "delete_super", (("address", str(ADDRS[1])), ("deleted_by", str(ADDRS[0])))
    )
    assert not keeper.authorized(ctx, ADDRS[1])
    assert ctx.event_manager.events == []


def test_handler_unknown_message(keeper, ctx):
    with pytest.raises(UnknownRequestError, match="unrecognized bank message type"):
        new_handler(keeper)(ctx, object())


def test_module_default_genesis(keeper):
    assert GuardianModule(keeper).default_genesis() == {"supers": []}


def test_module_genesis_json_round_trip(keeper, ctx):
    module = GuardianModule(keeper)
    raw = json.dumps(_genesis().to_json())
    assert module.init_genesis(ctx, raw) == []
    assert module.export_genesis(ctx) == _genesis().to_json()


def test_module_validate_genesis_bad_json(keeper):
    with pytest.raises(ValueError, match="failed to unmarshal guardian genesis state"):
        GuardianModule(keeper).validate_genesis("{not json")


def test_module_handle_and_query(keeper, ctx):
    module = GuardianModule(keeper)
    module.init_genesis(ctx, _genesis().to_json())
    module.handle(ctx, MsgAddSuper.create("new", ADDRS[2], ADDRS[0]))
    with pytest.raises(SuperExistsError):
        module.handle(ctx, MsgAddSuper.create("new", ADDRS[2], ADDRS[0]))
    supers = {Super.from_json(s).address for s in json.loads(module.query(ctx, ["supers"]))}
    assert supers == {str(ADDRS[0]), str(ADDRS[2])}
    with pytest.raises(UnknownRequestError):
        module.query(ctx, ["other"])