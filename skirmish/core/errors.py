"""
Error types raised by the combat core.

Configuration errors describe broken static data (the operation cannot be
completed without guessing a combat-critical number). Contract violations
describe programming errors made by a caller. Neither is recoverable at this
layer, and both are reported through catchery before they are raised.
"""

import math
from typing import Any, NoReturn

from catchery import log_error


class SkirmishError(Exception):
    """Base class for every error raised by the combat core."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context or {}


class ConfigurationError(SkirmishError):
    """Static data (mob template, camp, bind zone) is missing or invalid."""


class ContractViolationError(SkirmishError):
    """A caller passed a non-finite number or a missing callback."""


def raise_configuration_error(
    message: str, context: dict[str, Any] | None = None
) -> NoReturn:
    """
    Reports and raises a configuration error.

    Args:
        message (str):
            Human readable description of what is misconfigured.
        context (dict[str, Any] | None):
            Identifiers that help locate the broken record.

    Raises:
        ConfigurationError: Always.

    """
    log_error(message, context or {})
    raise ConfigurationError(message, context)


def require_finite(value: Any, name: str) -> float:
    """
    Checks that a value is a finite real number.

    Args:
        value (Any):
            The value to check.
        name (str):
            Parameter name used in the error message.

    Returns:
        float:
            The value, unchanged, when it is finite.

    Raises:
        ContractViolationError: If the value is not a finite number.

    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ContractViolationError(
            f"{name} must be a finite number, got {value!r}", {name: value}
        )
    if not math.isfinite(value):
        raise ContractViolationError(
            f"{name} must be a finite number, got {value!r}", {name: value}
        )
    return value


def require_callable(value: Any, name: str) -> None:
    """Raises ContractViolationError unless `value` is callable."""
    if not callable(value):
        raise ContractViolationError(f"{name} must be callable", {name: value})
