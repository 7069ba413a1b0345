"""Core ledger primitives: addresses, decimals, coins, stores, events and a bank."""

from __future__ import annotations

import dataclasses
import hashlib
import json
import re
from collections import defaultdict
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone

ACCOUNT_PREFIX = "iaa"
DEFAULT_BOND_DENOM = "stake"

MINTER = "minter"
BURNER = "burner"
STAKING = "staking"

DEC_PRECISION = 18
_DEC_UNIT = 10**DEC_PRECISION
_MAX_ADDRESS_LENGTH = 255
_MAX_BECH32_LENGTH = 1023

_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
_GENERATOR = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)
_DENOM_RE = re.compile(r"[a-zA-Z][a-zA-Z0-9/:._-]{2,127}")
_DEC_RE = re.compile(r"(-?)(\d+)(?:\.(\d+))?")


# ----------------------------------------------------------------------------
# bech32


def _polymod(values: Iterable[int]) -> int:
    chk = 1
    for value in values:
        top = chk >> 25
        chk = ((chk & 0x1FFFFFF) << 5) ^ value
        for i, gen in enumerate(_GENERATOR):
            if (top >> i) & 1:
                chk ^= gen
    return chk


def _hrp_expand(hrp: str) -> list[int]:
    return [ord(c) >> 5 for c in hrp] + [0] + [ord(c) & 31 for c in hrp]


def _convert_bits(data: Iterable[int], from_bits: int, to_bits: int, pad: bool) -> list[int]:
    acc = 0
    bits = 0
    out: list[int] = []
    maxv = (1 << to_bits) - 1
    max_acc = (1 << (from_bits + to_bits - 1)) - 1
    for value in data:
        if value < 0 or value >> from_bits:
            raise ValueError("invalid data range")
        acc = ((acc << from_bits) | value) & max_acc
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            out.append((acc >> bits) & maxv)
    if pad:
        if bits:
            out.append((acc << (to_bits - bits)) & maxv)
    elif bits >= from_bits or (acc << (to_bits - bits)) & maxv:
        raise ValueError("invalid padding in bech32 data")
    return out


def bech32_encode(hrp: str, data: bytes) -> str:
    """Encode raw bytes under a human-readable prefix."""
    hrp = hrp.lower()
    values = _convert_bits(data, 8, 5, True)
    polymod = _polymod(_hrp_expand(hrp) + values + [0] * 6) ^ 1
    checksum = [(polymod >> 5 * (5 - i)) & 31 for i in range(6)]
    return hrp + "1" + "".join(_CHARSET[v] for v in values + checksum)


def bech32_decode(text: str) -> tuple[str, bytes]:
    """Decode a bech32 string into its prefix and raw bytes."""
    if len(text) > _MAX_BECH32_LENGTH:
        raise ValueError(f"invalid bech32 string length {len(text)}")
    if any(ord(c) < 33 or ord(c) > 126 for c in text):
        raise ValueError("invalid character in bech32 string")
    if text.lower() != text and text.upper() != text:
        raise ValueError("string not all lowercase or all uppercase")
    text = text.lower()
    pos = text.rfind("1")
    if pos < 1 or pos + 7 > len(text):
        raise ValueError("invalid index of 1")
    hrp = text[:pos]
    try:
        values = [_CHARSET.index(c) for c in text[pos + 1 :]]
    except ValueError as err:
        raise ValueError("invalid character not part of charset") from err
    if _polymod(_hrp_expand(hrp) + values) != 1:
        raise ValueError("checksum failed")
    return hrp, bytes(_convert_bits(values[:-6], 5, 8, False))


def address_hash(data: bytes) -> bytes:
    """Return the 20-byte truncated SHA-256 used for addresses."""
    return hashlib.sha256(data).digest()[:20]


def validate_denom(denom: str) -> None:
    """Raise ValueError unless the denomination is well formed."""
    if not _DENOM_RE.fullmatch(denom):
        raise ValueError(f"invalid denom: {denom}")


def sorted_json(data: object) -> bytes:
    """Serialise to compact JSON with sorted keys and HTML-safe escaping."""
    text = json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    for char, escape in (
        ("<", "\\u003c"),
        (">", "\\u003e"),
        ("&", "\\u0026"),
        ("\u2028", "\\u2028"),
        ("\u2029", "\\u2029"),
    ):
        text = text.replace(char, escape)
    return text.encode("utf-8")


def amino_json(type_name: str, value: Mapping[str, object]) -> dict:
    """Wrap a message in its registered type name, omitting empty fields."""
    return {
        "type": type_name,
        "value": {k: v for k, v in value.items() if v not in ("", None)},
    }


# ----------------------------------------------------------------------------
# addresses


def _verify_address_format(data: bytes) -> None:
    if not data:
        raise ValueError("addresses cannot be empty")
    if len(data) > _MAX_ADDRESS_LENGTH:
        raise ValueError(f"address max length is {_MAX_ADDRESS_LENGTH}, got {len(data)}")


class AccAddress(bytes):
    """An account address: raw bytes shown as bech32 with the account prefix."""

    __slots__ = ()

    @classmethod
    def from_bech32(cls, text: str) -> AccAddress:
        if not text.strip():
            raise ValueError("empty address string is not allowed")
        hrp, data = bech32_decode(text)
        if hrp != ACCOUNT_PREFIX:
            raise ValueError(f"invalid Bech32 prefix; expected {ACCOUNT_PREFIX}, got {hrp}")
        _verify_address_format(data)
        return cls(data)

    @classmethod
    def from_hex(cls, text: str) -> AccAddress:
        if not text:
            raise ValueError("decoding Bech32 address failed: must provide an address")
        try:
            return cls(bytes.fromhex(text))
        except ValueError as err:
            raise ValueError(f"invalid hex address: {text}") from err

    @classmethod
    def module_address(cls, name: str) -> AccAddress:
        return cls(address_hash(name.encode("utf-8")))

    def __str__(self) -> str:
        return bech32_encode(ACCOUNT_PREFIX, self) if self else ""

    def __repr__(self) -> str:
        return f"AccAddress({self.hex().upper()})"


# ----------------------------------------------------------------------------
# decimals and coins


def _quo(a: int, b: int) -> int:
    """Integer division truncated toward zero."""
    if b == 0:
        raise ZeroDivisionError("division by zero")
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


@dataclass(frozen=True, order=True)
class Dec:
    """Fixed-point decimal with 18 fractional digits; `scaled` is value * 10**18."""

    scaled: int = 0

    @classmethod
    def from_prec(cls, value: int, prec: int) -> Dec:
        if not 0 <= prec <= DEC_PRECISION:
            raise ValueError(f"precision must be between 0 and {DEC_PRECISION}, got {prec}")
        return cls(value * 10 ** (DEC_PRECISION - prec))

    @classmethod
    def from_str(cls, text: str) -> Dec:
        match = _DEC_RE.fullmatch(text.strip())
        if not match:
            raise ValueError(f"invalid decimal string: {text!r}")
        sign, whole, frac = match.groups()
        frac = frac or ""
        if len(frac) > DEC_PRECISION:
            raise ValueError(f"too much precision, maximum {DEC_PRECISION}, provided {len(frac)}")
        scaled = int(whole + frac.ljust(DEC_PRECISION, "0"))
        return cls(-scaled if sign else scaled)

    def mul_int(self, value: int) -> Dec:
        return Dec(self.scaled * value)

    def quo_int(self, value: int) -> Dec:
        return Dec(_quo(self.scaled, value))

    def truncate(self) -> int:
        return _quo(self.scaled, _DEC_UNIT)

    def __str__(self) -> str:
        whole, frac = divmod(abs(self.scaled), _DEC_UNIT)
        sign = "-" if self.scaled < 0 else ""
        return f"{sign}{whole}.{frac:0{DEC_PRECISION}d}"


@dataclass(frozen=True)
class Coin:
    """An amount of a single denomination."""

    denom: str
    amount: int

    def __post_init__(self) -> None:
        validate_denom(self.denom)
        if self.amount < 0:
            raise ValueError(f"negative coin amount: {self.amount}")

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"


class Coins:
    """A sorted set of non-zero coins with distinct denominations."""

    __slots__ = ("_coins",)

    def __init__(self, coins: Iterable[Coin] = ()) -> None:
        kept = sorted((c for c in coins if c.amount), key=lambda c: c.denom)
        denoms = [c.denom for c in kept]
        if len(set(denoms)) != len(denoms):
            raise ValueError(f"duplicate denomination in {denoms}")
        self._coins = tuple(kept)

    def add(self, *args: Coin) -> Coins:
        totals: dict[str, int] = {c.denom: c.amount for c in self._coins}
        for coin in args:
            totals[coin.denom] = totals.get(coin.denom, 0) + coin.amount
        return Coins(Coin(denom, amount) for denom, amount in totals.items())

    def amount_of(self, denom: str) -> int:
        return next((c.amount for c in self._coins if c.denom == denom), 0)

    def is_empty(self) -> bool:
        return not self._coins

    def __iter__(self) -> Iterator[Coin]:
        return iter(self._coins)

    def __len__(self) -> int:
        return len(self._coins)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Coins):
            return NotImplemented
        return self._coins == other._coins

    def __hash__(self) -> int:
        return hash(self._coins)

    def __str__(self) -> str:
        return ",".join(str(c) for c in self._coins)

    def __repr__(self) -> str:
        return f"Coins({list(self._coins)!r})"


# ----------------------------------------------------------------------------
# events, stores and context


@dataclass(frozen=True)
class Event:
    """A typed event with ordered key/value attributes."""

    type: str
    attributes: tuple[tuple[str, str], ...] = ()


@dataclass
class EventManager:
    """Collects events emitted while handling a block or message."""

    events: list[Event] = field(default_factory=list)

    def emit(self, *args: Event) -> None:
        self.events.extend(args)


class KVStore:
    """An in-memory ordered key/value store of bytes."""

    def __init__(self) -> None:
        self._data: dict[bytes, bytes] = {}

    def get(self, key: bytes) -> bytes | None:
        return self._data.get(bytes(key))

    def set(self, key: bytes, value: bytes) -> None:
        if value is None:
            raise ValueError("value is nil")
        self._data[bytes(key)] = bytes(value)

    def delete(self, key: bytes) -> None:
        self._data.pop(bytes(key), None)

    def iterate(self, prefix: bytes = b"", reverse: bool = False) -> Iterator[tuple[bytes, bytes]]:
        keys = sorted((k for k in self._data if k.startswith(prefix)), reverse=reverse)
        for key in keys:
            if key in self._data:
                yield key, self._data[key]


@dataclass
class Context:
    """Execution context: block information, named stores and an event manager."""

    block_height: int = 0
    block_time: datetime = field(default_factory=lambda: datetime(1970, 1, 1, tzinfo=timezone.utc))
    event_manager: EventManager = field(default_factory=EventManager)
    stores: dict[str, KVStore] = field(default_factory=dict, repr=False)

    def store(self, name: str) -> KVStore:
        return self.stores.setdefault(name, KVStore())

    def with_block_height(self, height: int) -> Context:
        return dataclasses.replace(self, block_height=height)


# ----------------------------------------------------------------------------
# bank


class Bank:
    """In-memory balances with module accounts and their permissions."""

    def __init__(self, permissions: Mapping[str, Iterable[str] | None]) -> None:
        self._permissions = {name: frozenset(perms or ()) for name, perms in permissions.items()}
        self._balances: dict[bytes, dict[str, int]] = defaultdict(dict)

    def module_address(self, name: str) -> AccAddress | None:
        if name not in self._permissions:
            return None
        return AccAddress.module_address(name)

    def _module(self, name: str) -> AccAddress:
        address = self.module_address(name)
        if address is None:
            raise LookupError(f"module account {name} does not exist")
        return address

    def mint_coins(self, module: str, coins: Coins) -> None:
        address = self._module(module)
        if MINTER not in self._permissions[module]:
            raise PermissionError(f"module account {module} does not have permissions to mint tokens")
        self._credit(address, coins)

    def send_coins_from_module_to_module(self, sender: str, recipient: str, coins: Coins) -> None:
        self._transfer(self._module(sender), self._module(recipient), coins)

    def send_coins_from_module_to_account(self, sender: str, address: AccAddress, coins: Coins) -> None:
        self._transfer(self._module(sender), address, coins)

    def balances(self, address: bytes) -> Coins:
        held = self._balances.get(bytes(address), {})
        return Coins(Coin(denom, amount) for denom, amount in held.items())

    def _credit(self, address: bytes, coins: Coins) -> None:
        held = self._balances[bytes(address)]
        for coin in coins:
            held[coin.denom] = held.get(coin.denom, 0) + coin.amount

    def _transfer(self, sender: bytes, recipient: bytes, coins: Coins) -> None:
        held = self._balances[bytes(sender)]
        for coin in coins:
            have = held.get(coin.denom, 0)
            if have < coin.amount:
                raise ValueError(f"{have}{coin.denom} is smaller than {coin}: insufficient funds")
        for coin in coins:
            held[coin.denom] -= coin.amount
            if not held[coin.denom]:
                del held[coin.denom]
        self._credit(recipient, coins)