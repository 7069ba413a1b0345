"""Mint types: store keys, events, the minter, parameters and genesis state."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone

import yaml

from hubchain.errors import InvalidMintDenomError, InvalidMintInflationError
from hubchain.sdk import DEFAULT_BOND_DENOM, Coin, Dec, validate_denom

MODULE_NAME = "mint"
STORE_KEY = MODULE_NAME
ROUTER_KEY = MODULE_NAME
QUERIER_ROUTE = MODULE_NAME

QUERY_PARAMETERS = "parameters"
QUERY_INFLATION = "inflation"

MINTER_KEY = b"\x00"

EVENT_TYPE_MINT = "mint"
ATTRIBUTE_KEY_LAST_INFLATION_TIME = "last_inflation_time"
ATTRIBUTE_KEY_INFLATION_TIME = "inflation_time"
ATTRIBUTE_KEY_MINT_COIN = "mint_coin"

DEFAULT_PARAM_SPACE = "mint"
MINT_DENOM = DEFAULT_BOND_DENOM

KEY_INFLATION = b"Inflation"
KEY_MINT_DENOM = b"MintDenom"

# 5 seconds a block, 8766 hours a year (365.25 * 24)
BLOCKS_PER_YEAR = 60 * 60 * 8766 // 5
INITIAL_ISSUE = 20 * 10**8

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
MAX_INFLATION = Dec.from_prec(2, 1)

_FRACTION_RE = re.compile(r"\.(\d+)")


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _format_time(moment: datetime) -> str:
    return moment.isoformat().replace("+00:00", "Z")


def _parse_time(text: str) -> datetime:
    text = text.strip().replace("Z", "+00:00")
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    return datetime.fromisoformat(text)


@dataclass(frozen=True)
class Params:
    """Inflation rate and the denomination that is minted."""

    mint_denom: str = MINT_DENOM
    inflation: Dec = field(default_factory=lambda: Dec.from_prec(4, 2))

    @classmethod
    def default(cls) -> Params:
        return cls(mint_denom=MINT_DENOM, inflation=Dec.from_prec(4, 2))

    def validate(self) -> None:
        """Raise unless the inflation is in [0, 0.2] and the denom is set."""
        if self.inflation > MAX_INFLATION or self.inflation < Dec(0):
            raise InvalidMintInflationError(
                f"Mint inflation [{self.inflation}] should be between [0, 0.2] "
            )
        if not self.mint_denom:
            raise InvalidMintDenomError(f"Mint denom [{self.mint_denom}] should not be empty")

    def __str__(self) -> str:
        return yaml.safe_dump(
            {"mint_denom": self.mint_denom, "inflation": str(self.inflation)},
            sort_keys=False,
        )

    def to_json(self) -> dict:
        return {"mint_denom": self.mint_denom, "inflation": str(self.inflation)}

    @classmethod
    def from_json(cls, data: dict) -> Params:
        return cls(
            mint_denom=data.get("mint_denom", ""),
            inflation=Dec.from_str(data.get("inflation") or "0"),
        )


@dataclass(frozen=True)
class Minter:
    """The time of the last mint and the base amount inflation applies to."""

    last_update: datetime
    inflation_base: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "last_update", _as_utc(self.last_update))

    @classmethod
    def default(cls) -> Minter:
        return cls(EPOCH, INITIAL_ISSUE * 10**6)

    def next_annual_provisions(self, params: Params) -> Dec:
        """Amount to be minted over a year at the current inflation."""
        return params.inflation.mul_int(self.inflation_base)

    def block_provision(self, params: Params) -> Coin:
        """Coin to be minted in a single block."""
        provisions = self.next_annual_provisions(params)
        return Coin(params.mint_denom, provisions.quo_int(BLOCKS_PER_YEAR).truncate())

    def to_json(self) -> dict:
        return {
            "last_update": _format_time(self.last_update),
            "inflation_base": str(self.inflation_base),
        }

    @classmethod
    def from_json(cls, data: dict) -> Minter:
        return cls(
            last_update=_parse_time(data["last_update"]),
            inflation_base=int(data["inflation_base"]),
        )


def validate_minter(minter: Minter) -> None:
    """Raise ValueError if the minter predates the epoch or has no positive base."""
    if minter.last_update < EPOCH:
        raise ValueError(
            f"minter last update time({minter.last_update}) should not be a time "
            "before January 1, 1970 UTC"
        )
    if not minter.inflation_base > 0:
        raise ValueError(
            f"minter inflation basement ({minter.inflation_base}) should be positive"
        )


def validate_inflation(value: object) -> None:
    """Parameter-store check for the inflation rate."""
    if not isinstance(value, Dec):
        raise TypeError(f"invalid parameter type: {type(value).__name__}")
    if value > MAX_INFLATION or value < Dec(0):
        raise ValueError(f"Mint inflation [{value}] should be between [0, 0.2] ")


def validate_mint_denom(value: object) -> None:
    """Parameter-store check for the minted denomination."""
    if not isinstance(value, str):
        raise TypeError(f"invalid parameter type: {type(value).__name__}")
    if not value.strip():
        raise ValueError("mint denom cannot be blank")
    validate_denom(value)


PARAM_SET_PAIRS = (
    (KEY_INFLATION, "inflation", validate_inflation),
    (KEY_MINT_DENOM, "mint_denom", validate_mint_denom),
)


@dataclass(frozen=True)
class GenesisState:
    """Mint state at chain start."""

    minter: Minter = field(default_factory=Minter.default)
    params: Params = field(default_factory=Params.default)

    @classmethod
    def default(cls) -> GenesisState:
        return cls(Minter.default(), Params.default())

    def to_json(self) -> dict:
        return {"minter": self.minter.to_json(), "params": self.params.to_json()}

    @classmethod
    def from_json(cls, data: dict) -> GenesisState:
        return cls(Minter.from_json(data["minter"]), Params.from_json(data["params"]))


def validate_genesis(data: GenesisState) -> None:
    """Check the parameters and the minter of a genesis state."""
    data.params.validate()
    validate_minter(data.minter)