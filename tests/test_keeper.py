import json

import pytest

from hubchain.errors import (
    DeleteGenesisSuperError,
    SuperExistsError,
    UnknownOperatorError,
    UnknownRequestError,
    UnknownSuperError,
)
from hubchain.guardian.keeper import GuardianKeeper, MsgServer, query
from hubchain.guardian.types import AccountType, MsgAddSuper, MsgDeleteSuper, Super
from hubchain.sdk import AccAddress, Context, Event, address_hash

ADDRS = [AccAddress(address_hash(f"account-{i}".encode())) for i in range(4)]


@pytest.fixture
def keeper():
    return GuardianKeeper()


@pytest.fixture
def ctx():
    return Context()


def test_add_super(keeper, ctx):
    super_ = Super.create("test", AccountType.GENESIS, ADDRS[0], ADDRS[1])
    keeper.add_super(ctx, super_)
    assert keeper.get_super(ctx, ADDRS[0]) == super_
    supers = list(keeper.iter_supers(ctx))
    assert supers == [super_]


def test_delete_super(keeper, ctx):
    super_ = Super.create("test", AccountType.GENESIS, ADDRS[0], ADDRS[1])
    keeper.add_super(ctx, super_)
    assert keeper.get_super(ctx, ADDRS[0]) == super_
    keeper.delete_super(ctx, AccAddress.from_bech32(super_.address))
    assert keeper.get_super(ctx, ADDRS[0]) is None


def test_authorized(keeper, ctx):
    keeper.add_super(ctx, Super.create("test", AccountType.ORDINARY, ADDRS[0], ADDRS[1]))
    assert keeper.authorized(ctx, ADDRS[0]) is True
    assert keeper.authorized(ctx, ADDRS[2]) is False


def test_query_supers(keeper, ctx):
    super_ = Super.create("test", AccountType.GENESIS, ADDRS[0], ADDRS[1])
    keeper.add_super(ctx, super_)
    res = query(keeper, ctx, ["supers"])
    supers = [Super.from_json(s) for s in json.loads(res)]
    assert supers == [super_]


def test_query_empty_is_null(keeper, ctx):
    assert json.loads(query(keeper, ctx, ["supers"])) is None


def test_query_unknown_path(keeper, ctx):
    with pytest.raises(UnknownRequestError, match="unknown query path: other"):
        query(keeper, ctx, ["other"])


def test_grpc_supers(keeper, ctx):
    guardian = Super.create("test", AccountType.ORDINARY, ADDRS[0], ADDRS[0])
    assert keeper.supers(ctx).supers == ()
    keeper.add_super(ctx, guardian)
    page = keeper.supers(ctx)
    assert len(page.supers) == 1
    assert page.supers[0] == guardian


def test_supers_pagination(keeper, ctx):
    for addr in ADDRS[:3]:
        keeper.add_super(ctx, Super.create("d", AccountType.ORDINARY, addr, ADDRS[3]))
    first = keeper.supers(ctx, limit=2)
    assert len(first.supers) == 2
    assert first.total == 3
    assert first.next_key is not None
    rest = keeper.supers(ctx, limit=2, offset=2)
    assert len(rest.supers) == 1
    assert rest.next_key is None
    got = {s.address for s in first.supers + rest.supers}
    assert got == {str(a) for a in ADDRS[:3]}


def test_supers_negative_offset(keeper, ctx):
    with pytest.raises(ValueError):
        keeper.supers(ctx, offset=-1)


@pytest.fixture
def server(keeper, ctx):
    keeper.add_super(ctx, Super.create("root", AccountType.GENESIS, ADDRS[0], ADDRS[0]))
    return MsgServer(keeper)


def test_msg_add_super(server, keeper, ctx):
    server.add_super(ctx, MsgAddSuper.create("new", ADDRS[1], ADDRS[0]))
    added = keeper.get_super(ctx, ADDRS[1])
    assert added == Super.create("new", AccountType.ORDINARY, ADDRS[1], ADDRS[0])
    assert ctx.event_manager.events[-2:] == [
        Event("message", (("module", "guardian"), ("sender", str(ADDRS[0])))),
        Event("add_super", (("address", str(ADDRS[1])), ("added_by", str(ADDRS[0])))),
    ]


def test_msg_add_existing_super(server, ctx):
    server.add_super(ctx, MsgAddSuper.create("new", ADDRS[1], ADDRS[0]))
    with pytest.raises(SuperExistsError):
        server.add_super(ctx, MsgAddSuper.create("new", ADDRS[1], ADDRS[0]))


def test_msg_add_by_ordinary_super(server, ctx):
    server.add_super(ctx, MsgAddSuper.create("new", ADDRS[1], ADDRS[0]))
    with pytest.raises(UnknownOperatorError) as info:
        server.add_super(ctx, MsgAddSuper.create("x", ADDRS[2], ADDRS[1]))
    assert str(info.value) == f"{ADDRS[1]}: unknown operator"


def test_msg_add_by_unknown(server, ctx):
    with pytest.raises(UnknownOperatorError):
        server.add_super(ctx, MsgAddSuper.create("x", ADDRS[2], ADDRS[3]))


def test_msg_add_invalid_address(server, ctx):
    with pytest.raises(ValueError):
        server.add_super(ctx, MsgAddSuper("x", "not-an-address", str(ADDRS[0])))


def test_msg_delete_super(server, keeper, ctx):
    server.add_super(ctx, MsgAddSuper.create("new", ADDRS[1], ADDRS[0]))
    server.delete_super(ctx, MsgDeleteSuper.create(ADDRS[1], ADDRS[0]))
    assert keeper.get_super(ctx, ADDRS[1]) is None
    assert ctx.event_manager.events[-1] == Event(
        "delete_super", (("address", str(ADDRS[1])), ("deleted_by", str(ADDRS[0])))
    )


def test_msg_delete_unknown_super(server, ctx):
    with pytest.raises(UnknownSuperError):
        server.delete_super(ctx, MsgDeleteSuper.create(ADDRS[2], ADDRS[0]))


def test_msg_delete_genesis_super(server, keeper, ctx):
    with pytest.raises(DeleteGenesisSuperError):
        server.delete_super(ctx, MsgDeleteSuper.create(ADDRS[0], ADDRS[0]))
    assert keeper.get_super(ctx, ADDRS[0]) is not None and keeper.authorized(ctx, ADDRS[0])


def test_msg_delete_by_unknown(server, ctx):
    with pytest.raises(UnknownOperatorError):
        server.delete_super(ctx, MsgDeleteSuper.create(ADDRS[0], ADDRS[3]))