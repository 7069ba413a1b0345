"""Registered module errors, each identified by a codespace and a code."""

from __future__ import annotations


class ModuleError(Exception):
    """Base error; an optional message is shown before the description."""

    codespace = "undefined"
    code = 1
    description = "internal"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.message}: {self.description}" if self.message else self.description


class UnknownRequestError(ModuleError):
    codespace = "sdk"
    code = 6
    description = "unknown request"


class InvalidAddressError(ModuleError):
    codespace = "sdk"
    code = 7
    description = "invalid address"


class InvalidRequestError(ModuleError):
    codespace = "sdk"
    code = 18
    description = "invalid request"


class UnknownOperatorError(ModuleError):
    codespace = "guardian"
    code = 2
    description = "unknown operator"


class UnknownSuperError(ModuleError):
    codespace = "guardian"
    code = 3
    description = "unknown super"


class SuperExistsError(ModuleError):
    codespace = "guardian"
    code = 4
    description = "super already exists"


class DeleteGenesisSuperError(ModuleError):
    codespace = "guardian"
    code = 5
    description = "can't delete genesis super"


class InvalidMintInflationError(ModuleError):
    codespace = "mint"
    code = 2
    description = "invalid mint inflation"


class InvalidMintDenomError(ModuleError):
    codespace = "mint"
    code = 3
    description = "invalid mint denom"