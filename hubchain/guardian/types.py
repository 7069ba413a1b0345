"""Guardian types: store keys, events, supers, genesis state and messages."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from hubchain.errors import InvalidAddressError, InvalidRequestError
from hubchain.sdk import AccAddress, amino_json, sorted_json

MODULE_NAME = "guardian"
STORE_KEY = MODULE_NAME
ROUTER_KEY = MODULE_NAME
QUERIER_ROUTE = STORE_KEY
QUERY_SUPERS = "supers"

SUPER_KEY = b"\x00"

EVENT_TYPE_ADD_SUPER = "add_super"
EVENT_TYPE_DELETE_SUPER = "delete_super"
ATTRIBUTE_KEY_SUPER_ADDRESS = "address"
ATTRIBUTE_KEY_ADDED_BY = "added_by"
ATTRIBUTE_KEY_DELETED_BY = "deleted_by"
ATTRIBUTE_VALUE_CATEGORY = MODULE_NAME

TYPE_MSG_ADD_SUPER = "add_super"
TYPE_MSG_DELETE_SUPER = "delete_super"

AMINO_MSG_ADD_SUPER = "irishub/guardian/MsgAddSuper"
AMINO_MSG_DELETE_SUPER = "irishub/guardian/MsgDeleteSuper"

MAX_DESCRIPTION_LENGTH = 70


def super_key(address: bytes) -> bytes:
    """Store key under which the super with this address is kept."""
    return SUPER_KEY + bytes(address)


class AccountType(enum.IntEnum):
    GENESIS = 0
    ORDINARY = 1


def account_type_from_string(text: str) -> AccountType:
    """Parse "Genesis" or "Ordinary" into an account type."""
    mapping = {"Genesis": AccountType.GENESIS, "Ordinary": AccountType.ORDINARY}
    try:
        return mapping[text]
    except KeyError:
        raise ValueError(f"'{text}' is not a valid account type") from None


def _account_type_from_json(value: object) -> AccountType:
    if isinstance(value, str):
        try:
            return AccountType[value]
        except KeyError:
            raise ValueError(f"'{value}' is not a valid account type") from None
    return AccountType(value)


@dataclass(frozen=True)
class Super:
    """A privileged account, recorded with who added it."""

    description: str
    account_type: AccountType
    address: str
    added_by: str

    @classmethod
    def create(
        cls, description: str, account_type: AccountType, address: AccAddress, added_by: AccAddress
    ) -> Super:
        return cls(description, AccountType(account_type), str(address), str(added_by))

    def to_json(self) -> dict:
        return {
            "description": self.description,
            "account_type": self.account_type.name,
            "address": self.address,
            "added_by": self.added_by,
        }

    @classmethod
    def from_json(cls, data: dict) -> Super:
        return cls(
            description=data.get("description", ""),
            account_type=_account_type_from_json(data.get("account_type", 0)),
            address=data.get("address", ""),
            added_by=data.get("added_by", ""),
        )


@dataclass(frozen=True)
class GenesisState:
    """Supers present when the chain starts."""

    supers: tuple[Super, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "supers", tuple(self.supers))

    @classmethod
    def default(cls) -> GenesisState:
        return cls()

    def to_json(self) -> dict:
        return {"supers": [s.to_json() for s in self.supers]}

    @classmethod
    def from_json(cls, data: dict) -> GenesisState:
        return cls(tuple(Super.from_json(s) for s in data.get("supers") or ()))


def _check_address(text: str, label: str) -> None:
    try:
        AccAddress.from_bech32(text)
    except ValueError as err:
        raise InvalidAddressError(f"invalid {label} ({err})") from err


@dataclass(frozen=True)
class MsgAddSuper:
    """Request by a genesis super to add an ordinary super."""

    description: str
    address: str
    added_by: str

    @classmethod
    def create(cls, description: str, address: AccAddress, added_by: AccAddress) -> MsgAddSuper:
        return cls(description, str(address), str(added_by))

    def route(self) -> str:
        return ROUTER_KEY

    def type(self) -> str:
        return TYPE_MSG_ADD_SUPER

    def sign_bytes(self) -> bytes:
        return sorted_json(
            amino_json(
                AMINO_MSG_ADD_SUPER,
                {"description": self.description, "address": self.address, "added_by": self.added_by},
            )
        )

    def validate_basic(self) -> None:
        if not self.description:
            raise InvalidRequestError("description missing")
        _check_address(self.address, "address")
        _check_address(self.added_by, "operator address")
        length = len(self.description.encode("utf-8"))
        if length > MAX_DESCRIPTION_LENGTH:
            raise InvalidRequestError(
                f"invalid website length; got: {length}, max: {MAX_DESCRIPTION_LENGTH}"
            )

    def signers(self) -> list[AccAddress]:
        return [AccAddress.from_bech32(self.added_by)]


@dataclass(frozen=True)
class MsgDeleteSuper:
    """Request by a genesis super to remove an ordinary super."""

    address: str
    deleted_by: str

    @classmethod
    def create(cls, address: AccAddress, deleted_by: AccAddress) -> MsgDeleteSuper:
        return cls(str(address), str(deleted_by))

    def route(self) -> str:
        return ROUTER_KEY

    def type(self) -> str:
        return TYPE_MSG_DELETE_SUPER

    def sign_bytes(self) -> bytes:
        return sorted_json(
            amino_json(AMINO_MSG_DELETE_SUPER, {"address": self.address, "deleted_by": self.deleted_by})
        )

    def validate_basic(self) -> None:
        _check_address(self.address, "address")
        _check_address(self.deleted_by, "operator address")

    def signers(self) -> list[AccAddress]:
        return [AccAddress.from_bech32(self.deleted_by)]