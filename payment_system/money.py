"""
Amount Handling Module

Converts caller-supplied amounts to Decimal with a fixed minor-unit
precision. NEVER uses float for balances; float input is converted through
its shortest string representation.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, getcontext
from typing import Union

from .errors import InvalidAmount

# Set global decimal context for financial precision
getcontext().prec = 28

AmountLike = Union[Decimal, int, float, str]

ZERO = Decimal('0')


def quantum(precision: int) -> Decimal:
    """Smallest representable amount for the given precision"""
    return Decimal('0.1') ** precision if precision > 0 else Decimal('1')


def to_amount(value: AmountLike, precision: int = 2) -> Decimal:
    """
    Convert a value to a Decimal amount with exactly ``precision`` places

    Amounts are never rounded: a value finer than one minor unit is
    rejected so the ledger moves exactly what the caller asked for.

    Args:
        value: Decimal, int, float or numeric string
        precision: Minor-unit decimal places

    Returns:
        Decimal with ``precision`` decimal places

    Raises:
        InvalidAmount: If the value is not a finite number or has more
            decimal places than ``precision``
    """
    # bool is an int subclass and never a meaningful amount
    if value is None or isinstance(value, bool):
        raise InvalidAmount(f"Amount must be a number, got {value!r}")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float, str)):
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise InvalidAmount(f"Cannot convert {value!r} to an amount")
    else:
        raise InvalidAmount(f"Amount must be a number, got {type(value).__name__}")

    if not amount.is_finite():
        raise InvalidAmount(f"Amount must be finite, got {value!r}")

    try:
        quantized = amount.quantize(quantum(precision))
    except InvalidOperation:
        raise InvalidAmount(f"Amount {value!r} exceeds supported precision")

    if quantized != amount:
        raise InvalidAmount(
            f"Amount {value!r} has more than {precision} decimal places",
            amount=amount
        )
    return quantized


def require_positive(amount: Decimal) -> Decimal:
    if amount <= ZERO:
        raise InvalidAmount(f"Amount must be positive, got {amount}", amount=amount)
    return amount


def require_non_negative(amount: Decimal) -> Decimal:
    if amount < ZERO:
        raise InvalidAmount(f"Amount must not be negative, got {amount}", amount=amount)
    return amount


def format_amount(amount: Decimal, precision: int = 2) -> str:
    """Format for display with thousands separators"""
    display = amount.quantize(quantum(precision), rounding=ROUND_HALF_UP)
    return f"{display:,.{precision}f}"
