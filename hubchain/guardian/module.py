"""Guardian module: genesis handling, message routing and the module wiring."""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Callable, Sequence

from hubchain.errors import UnknownRequestError
from hubchain.guardian.keeper import GuardianKeeper, MsgServer, query
from hubchain.guardian.types import (
    MODULE_NAME,
    ROUTER_KEY,
    GenesisState,
    MsgAddSuper,
    MsgDeleteSuper,
)
from hubchain.sdk import AccAddress, Context, Event, EventManager

Handler = Callable[[Context, object], list[Event]]


def validate_genesis(data: GenesisState) -> None:
    """Raise ValueError unless every super has valid addresses."""
    for super_ in data.supers:
        AccAddress.from_bech32(super_.address)
        AccAddress.from_bech32(super_.added_by)


def init_genesis(ctx: Context, keeper: GuardianKeeper, data: GenesisState) -> None:
    """Validate the genesis state and store its supers."""
    try:
        validate_genesis(data)
    except ValueError as err:
        raise ValueError(f"failed to initialize guardian genesis state: {err}") from err
    for super_ in data.supers:
        keeper.add_super(ctx, super_)


def export_genesis(ctx: Context, keeper: GuardianKeeper) -> GenesisState:
    return GenesisState(tuple(keeper.iter_supers(ctx)))


def new_handler(keeper: GuardianKeeper) -> Handler:
    """Return a handler that runs guardian messages and returns their events."""
    server = MsgServer(keeper)

    def handle(ctx: Context, msg: object) -> list[Event]:
        ctx = dataclasses.replace(ctx, event_manager=EventManager())
        if isinstance(msg, MsgAddSuper):
            server.add_super(ctx, msg)
        elif isinstance(msg, MsgDeleteSuper):
            server.delete_super(ctx, msg)
        else:
            raise UnknownRequestError(f"unrecognized bank message type: {type(msg).__name__}")
        return list(ctx.event_manager.events)

    return handle


def _parse_genesis(data: dict | str | bytes) -> GenesisState:
    try:
        if isinstance(data, (str, bytes)):
            data = json.loads(data)
        return GenesisState.from_json(data)
    except (ValueError, TypeError, AttributeError) as err:
        raise ValueError(f"failed to unmarshal {MODULE_NAME} genesis state: {err}") from err


class GuardianModule:
    """The guardian module as seen by the application."""

    name = MODULE_NAME
    route = ROUTER_KEY
    querier_route = ROUTER_KEY
    consensus_version = 1

    def __init__(self, keeper: GuardianKeeper) -> None:
        self.keeper = keeper
        self._handler = new_handler(keeper)

    def default_genesis(self) -> dict:
        return GenesisState.default().to_json()

    def validate_genesis(self, data: dict | str | bytes) -> None:
        """Check that the raw genesis data can be decoded."""
        _parse_genesis(data)

    def init_genesis(self, ctx: Context, data: dict | str | bytes) -> list:
        """Load the genesis state; returns no validator updates."""
        init_genesis(ctx, self.keeper, _parse_genesis(data))
        return []

    def export_genesis(self, ctx: Context) -> dict:
        return export_genesis(ctx, self.keeper).to_json()

    def handle(self, ctx: Context, msg: object) -> list[Event]:
        return self._handler(ctx, msg)

    def query(self, ctx: Context, path: Sequence[str]) -> bytes:
        return query(self.keeper, ctx, path)