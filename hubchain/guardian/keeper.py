"""Guardian keeper: storage of supers, the message server and the legacy querier."""

from __future__ import annotations

import json
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from hubchain.errors import (
    DeleteGenesisSuperError,
    SuperExistsError,
    UnknownOperatorError,
    UnknownRequestError,
    UnknownSuperError,
)
from hubchain.guardian.types import (
    ATTRIBUTE_KEY_ADDED_BY,
    ATTRIBUTE_KEY_DELETED_BY,
    ATTRIBUTE_KEY_SUPER_ADDRESS,
    ATTRIBUTE_VALUE_CATEGORY,
    EVENT_TYPE_ADD_SUPER,
    EVENT_TYPE_DELETE_SUPER,
    QUERY_SUPERS,
    STORE_KEY,
    SUPER_KEY,
    AccountType,
    MsgAddSuper,
    MsgDeleteSuper,
    Super,
    super_key,
)
from hubchain.sdk import AccAddress, Context, Event, KVStore, sorted_json

EVENT_TYPE_MESSAGE = "message"
ATTRIBUTE_KEY_MODULE = "module"
ATTRIBUTE_KEY_SENDER = "sender"

DEFAULT_PAGE_LIMIT = 100


def _encode(super_: Super) -> bytes:
    return sorted_json(super_.to_json())


def _decode(raw: bytes) -> Super:
    return Super.from_json(json.loads(raw))


@dataclass(frozen=True)
class SupersPage:
    """One page of supers, the key that starts the next page, and the overall count."""

    supers: tuple[Super, ...]
    next_key: bytes | None
    total: int


class GuardianKeeper:
    """Keeps the supers of the guardian module in its own store."""

    def __init__(self, store_key: str = STORE_KEY) -> None:
        self.store_key = store_key

    def _store(self, ctx: Context) -> KVStore:
        return ctx.store(self.store_key)

    def add_super(self, ctx: Context, super_: Super) -> None:
        """Store a super under its address, replacing any existing entry."""
        try:
            address = AccAddress.from_bech32(super_.address)
        except ValueError:
            address = AccAddress(b"")
        self._store(ctx).set(super_key(address), _encode(super_))

    def delete_super(self, ctx: Context, address: bytes) -> None:
        self._store(ctx).delete(super_key(address))

    def get_super(self, ctx: Context, address: bytes) -> Super | None:
        """Return the super stored for the address, or None."""
        raw = self._store(ctx).get(super_key(address))
        return _decode(raw) if raw is not None else None

    def iter_supers(self, ctx: Context) -> Iterator[Super]:
        """Yield every stored super in key order."""
        for _, raw in self._store(ctx).iterate(SUPER_KEY):
            yield _decode(raw)

    def authorized(self, ctx: Context, address: bytes) -> bool:
        return self.get_super(ctx, address) is not None

    def supers(self, ctx: Context, limit: int | None = None, offset: int = 0) -> SupersPage:
        """Return a page of supers; a limit of None or 0 means the default of 100."""
        if limit is None or limit == 0:
            limit = DEFAULT_PAGE_LIMIT
        if limit < 0 or offset < 0:
            raise ValueError("paginate: limit and offset must not be negative")
        items = list(self._store(ctx).iterate())
        window = items[offset : offset + limit]
        following = items[offset + limit : offset + limit + 1]
        return SupersPage(
            supers=tuple(_decode(raw) for _, raw in window),
            next_key=following[0][0] if following else None,
            total=len(items),
        )


def _require_genesis_super(keeper: GuardianKeeper, ctx: Context, operator: AccAddress, label: str) -> None:
    found = keeper.get_super(ctx, operator)
    if found is None or found.account_type != AccountType.GENESIS:
        raise UnknownOperatorError(label)


class MsgServer:
    """Executes guardian messages against a keeper."""

    def __init__(self, keeper: GuardianKeeper) -> None:
        self.keeper = keeper

    def add_super(self, ctx: Context, msg: MsgAddSuper) -> None:
        added_by = AccAddress.from_bech32(msg.added_by)
        address = AccAddress.from_bech32(msg.address)
        _require_genesis_super(self.keeper, ctx, added_by, msg.added_by)
        if self.keeper.get_super(ctx, address) is not None:
            raise SuperExistsError(msg.address)
        self.keeper.add_super(
            ctx, Super.create(msg.description, AccountType.ORDINARY, address, added_by)
        )
        ctx.event_manager.emit(
            Event(
                EVENT_TYPE_MESSAGE,
                (
                    (ATTRIBUTE_KEY_MODULE, ATTRIBUTE_VALUE_CATEGORY),
                    (ATTRIBUTE_KEY_SENDER, msg.added_by),
                ),
            ),
            Event(
                EVENT_TYPE_ADD_SUPER,
                (
                    (ATTRIBUTE_KEY_SUPER_ADDRESS, msg.address),
                    (ATTRIBUTE_KEY_ADDED_BY, msg.added_by),
                ),
            ),
        )

    def delete_super(self, ctx: Context, msg: MsgDeleteSuper) -> None:
        deleted_by = AccAddress.from_bech32(msg.deleted_by)
        address = AccAddress.from_bech32(msg.address)
        _require_genesis_super(self.keeper, ctx, deleted_by, msg.deleted_by)
        existing = self.keeper.get_super(ctx, address)
        if existing is None:
            raise UnknownSuperError(msg.address)
        if existing.account_type == AccountType.GENESIS:
            raise DeleteGenesisSuperError(msg.address)
        self.keeper.delete_super(ctx, address)
        ctx.event_manager.emit(
            Event(
                EVENT_TYPE_MESSAGE,
                (
                    (ATTRIBUTE_KEY_MODULE, ATTRIBUTE_VALUE_CATEGORY),
                    (ATTRIBUTE_KEY_SENDER, msg.deleted_by),
                ),
            ),
            Event(
                EVENT_TYPE_DELETE_SUPER,
                (
                    (ATTRIBUTE_KEY_SUPER_ADDRESS, msg.address),
                    (ATTRIBUTE_KEY_DELETED_BY, msg.deleted_by),
                ),
            ),
        )


def query(keeper: GuardianKeeper, ctx: Context, path: Sequence[str]) -> bytes:
    """Answer a legacy query path with indented JSON."""
    if path and path[0] == QUERY_SUPERS:
        supers = [s.to_json() for s in keeper.iter_supers(ctx)]
        return json.dumps(supers or None, indent=2).encode("utf-8")
    route = path[0] if path else ""
    raise UnknownRequestError(f"unknown query path: {route}")