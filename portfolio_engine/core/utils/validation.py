"""
Validation utilities for core domain models.

Provides consistent validation across the application.
"""

from decimal import Decimal
from typing import Any

from portfolio_engine.core.exceptions.engine import ValidationError
from portfolio_engine.core.types.financial import ZERO, to_decimal


def validate_symbol(symbol: Any, param_name: str = "symbol") -> str:
    """Validate and normalize an instrument symbol.

    Args:
        symbol: Value to validate
        param_name: Parameter name for error messages

    Returns:
        The upper-cased, stripped symbol

    Raises:
        ValidationError: If symbol is not a non-empty string
    """
    if not isinstance(symbol, str):
        raise ValidationError(f"{param_name} must be a string, got {type(symbol).__name__}")
    normalized = symbol.strip().upper()
    if not normalized:
        raise ValidationError(f"{param_name} must not be empty")
    return normalized


def validate_decimal(value: Any, param_name: str) -> Decimal:
    """Validate that a value converts to a finite Decimal.

    Raises:
        ValidationError: If value is not numeric
    """
    try:
        return to_decimal(value)
    except ValueError as e:
        raise ValidationError(f"{param_name} must be numeric: {e}") from e


def validate_positive(value: Decimal, param_name: str) -> Decimal:
    """Validate that a numeric value is positive.

    Args:
        value: Value to validate
        param_name: Parameter name for error messages

    Returns:
        The validated value

    Raises:
        ValidationError: If value is not positive
    """
    if value <= ZERO:
        raise ValidationError(f"{param_name} must be positive, got {value}")
    return value


def validate_non_negative(value: Decimal, param_name: str) -> Decimal:
    """Validate that a numeric value is zero or positive.

    Raises:
        ValidationError: If value is negative
    """
    if value < ZERO:
        raise ValidationError(f"{param_name} must be non-negative, got {value}")
    return value
