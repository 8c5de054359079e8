"""
Core type definitions and utilities.
"""

# Re-export financial utilities for easy access
from .financial import (
    HUNDRED,
    ONE,
    PERCENTAGE_DECIMALS,
    ZERO,
    calculate_notional_value,
    calculate_percentage,
    parse_decimal_or_zero,
    round_percentage,
    safe_decimal_comparison,
    to_decimal,
)

__all__ = [
    # Utility functions
    "to_decimal",
    "parse_decimal_or_zero",
    "round_percentage",
    "calculate_notional_value",
    "calculate_percentage",
    "safe_decimal_comparison",
    # Constants
    "PERCENTAGE_DECIMALS",
    "ZERO",
    "ONE",
    "HUNDRED",
]
