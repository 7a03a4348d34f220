"""Composer error types.

Every error raised by the composer before a network call derives from
ComposerError. Each carries a machine readable ``code`` (see constants)
plus the fields needed to act on it without re-deriving state.
"""

from __future__ import annotations

from typing import Any

from .constants import (
    ERR_COMPOSER_FROZEN,
    ERR_CONFIGURATION,
    ERR_DEPLOY_FAILED,
    ERR_FEE_LIMIT_EXCEEDED,
    ERR_MISSING_KEYREG_FIELD,
    ERR_MISSING_PROGRAM,
    ERR_MISSING_SIGNER,
    ERR_UNSUPPORTED_METHOD_ARG,
    ERR_UNSUPPORTED_TXN_KIND,
)


class ComposerError(ValueError):
    """Base class for errors raised while composing a transaction group."""

    code = "composer_error"


class ConfigurationError(ComposerError):
    """Mutually exclusive or otherwise invalid intent options were set.

    Attributes:
        fields: Names of the offending fields.
    """

    code = ERR_CONFIGURATION

    def __init__(self, message: str, fields: list[str] | None = None):
        super().__init__(message)
        self.fields = fields or []


class FeeLimitExceeded(ComposerError):
    """Computed fee is above the caller's ceiling.

    Attributes:
        fee: The computed fee in microalgos.
        max_fee: The ceiling that was exceeded.
    """

    code = ERR_FEE_LIMIT_EXCEEDED

    def __init__(self, fee: int, max_fee: int):
        super().__init__(f"Transaction fee {fee} is greater than max_fee {max_fee}")
        self.fee = fee
        self.max_fee = max_fee


class MissingProgram(ComposerError):
    """Application creation without both approval and clear programs.

    Attributes:
        missing: Names of the missing programs.
    """

    code = ERR_MISSING_PROGRAM

    def __init__(self, missing: list[str]):
        super().__init__(
            "approval_program and clear_program are required for application "
            f"creation, missing: {', '.join(missing)}"
        )
        self.missing = missing


class MissingKeyRegField(ConfigurationError):
    """Online key registration without all participation fields."""

    code = ERR_MISSING_KEYREG_FIELD

    def __init__(self, missing: list[str]):
        super().__init__(
            f"Online key registration requires: {', '.join(missing)}", missing
        )
        self.missing = missing


class UnsupportedMethodArgument(ComposerError):
    """ABI argument is neither a plain value nor a resolvable transaction.

    Attributes:
        index: Position of the argument in the caller's argument list.
        value: The offending value.
    """

    code = ERR_UNSUPPORTED_METHOD_ARG

    def __init__(self, index: int, value: Any, arg_type: str | None = None):
        detail = f" for declared type {arg_type}" if arg_type else ""
        super().__init__(
            f"Unsupported method argument at index {index}{detail}: {value!r}"
        )
        self.index = index
        self.value = value
        self.arg_type = arg_type


class UnsupportedTransactionKind(ComposerError):
    """Intent with no registered builder. Indicates an internal bug."""

    code = ERR_UNSUPPORTED_TXN_KIND

    def __init__(self, kind: Any):
        super().__init__(f"Unsupported transaction kind: {kind}")
        self.kind = kind


class ComposerFrozenError(ComposerError):
    """An intent was added after the group was built."""

    code = ERR_COMPOSER_FROZEN

    def __init__(self) -> None:
        super().__init__(
            "Transaction group has already been built; create a new composer "
            "to add more transactions"
        )


class MissingSignerError(ComposerError):
    """No signer is registered for an address and no default is set."""

    code = ERR_MISSING_SIGNER

    def __init__(self, address: str, available: list[str] | None = None):
        super().__init__(
            f"No signer found for address {address}. "
            f"Available: {available or []}"
        )
        self.address = address
        self.available = available or []


class DeployError(ComposerError):
    """Deployment refused by the configured policy.

    Attributes:
        reason: Short description of what changed.
    """

    code = ERR_DEPLOY_FAILED

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason
