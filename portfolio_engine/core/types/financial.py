"""
Financial data types for portfolio accounting.

All money, quantities and percentages are carried as Decimal so that the
cost-basis bookkeeping and the allocation percentages are reproducible across
refreshes. Feed and ledger payloads arrive as JSON numbers or as formatted
strings ("1,234.5"), so conversion is lenient about thousands separators.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

# Financial calculation precision (number of decimal places)
PERCENTAGE_DECIMALS = 2  # 2 decimal places for displayed percentages

# Common financial values as Decimal constants
ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")


def to_decimal(value: str | int | float | Decimal) -> Decimal:
    """Convert various numeric types to Decimal.

    Floats go through ``str`` so that 0.1 becomes Decimal("0.1") rather than
    its binary expansion.

    Args:
        value: Numeric value to convert

    Returns:
        Decimal representation of the value

    Raises:
        ValueError: If the value is not numeric or not finite

    Examples:
        >>> to_decimal(50000)
        Decimal('50000')
        >>> to_decimal('1,234.5')
        Decimal('1234.5')
    """
    if isinstance(value, bool):
        raise ValueError(f"Boolean is not a numeric value: {value}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.replace(",", "").strip())
        except InvalidOperation as e:
            raise ValueError(f"Not a numeric value: {value!r}") from e
    else:
        raise ValueError(f"Unsupported numeric type: {type(value).__name__}")

    if not result.is_finite():
        raise ValueError(f"Numeric value must be finite, got {value!r}")
    return result


def parse_decimal_or_zero(value: object) -> Decimal:
    """Convert a value to Decimal, falling back to zero when it is unparsable.

    Used by sorting, where a missing or garbled numeric field must still
    produce a comparable key.
    """
    try:
        return to_decimal(value)  # type: ignore[arg-type]
    except ValueError:
        return ZERO


def round_percentage(percentage: Decimal) -> Decimal:
    """Round percentage to display precision.

    Args:
        percentage: Percentage value to round

    Returns:
        Rounded percentage as Decimal
    """
    return percentage.quantize(Decimal(1).scaleb(-PERCENTAGE_DECIMALS), rounding=ROUND_HALF_UP)


def calculate_notional_value(quantity: Decimal, price: Decimal) -> Decimal:
    """Calculate the market value of a quantity at a price.

    Args:
        quantity: Held quantity
        price: Unit price

    Returns:
        Notional value as Decimal
    """
    return quantity * price


def calculate_percentage(part: Decimal, whole: Decimal) -> Decimal:
    """Calculate ``part`` as a percentage of ``whole``.

    Returns zero when ``whole`` is not positive instead of raising, so that an
    empty portfolio reads as 0 % everywhere.
    """
    if whole <= ZERO:
        return ZERO
    return part / whole * HUNDRED


def safe_decimal_comparison(a: Decimal, b: Decimal, tolerance: Decimal = Decimal("0.01")) -> bool:
    """Compare Decimals with tolerance for rounding differences.

    Args:
        a: First value to compare
        b: Second value to compare
        tolerance: Acceptable difference (default: 0.01)

    Returns:
        True if values are equal within tolerance

    Examples:
        >>> safe_decimal_comparison(Decimal("99.995"), Decimal("100"))
        True
    """
    return abs(a - b) <= tolerance
