"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

from bankledger.domain.errors import ValidationError, amount_not_positive, amount_too_large

CENT = Decimal("0.01")
# Largest value a Numeric(12, 2) money column holds
MAX_AMOUNT = Decimal("9999999999.99")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "-123.45"
    - "1,234.56"
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols and thousands separators
    amount_str = re.sub(r"[$€£¥]", "", amount_str)
    amount_str = amount_str.replace(",", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}") from e
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}': not a finite number")
    return -amount if is_negative else amount


def positive_amount(value, field: str = "Amount") -> Decimal:
    """Coerce value to a strictly positive Decimal rounded to cents.

    Accepts Decimal, int, float (via its string form) or amount strings.

    Raises:
        ValidationError: If value is missing, unparsable, zero, negative or
            larger than MAX_AMOUNT
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(amount_not_positive(field))
    try:
        if isinstance(value, Decimal):
            amount = value
        elif isinstance(value, str):
            amount = parse_amount(value)
        else:
            amount = Decimal(str(value))
    except (ValueError, InvalidOperation):
        raise ValidationError(amount_not_positive(field)) from None
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(amount_not_positive(field))
    if amount > MAX_AMOUNT:
        raise ValidationError(amount_too_large(field, MAX_AMOUNT))
    amount = amount.quantize(CENT)
    if amount <= 0:
        raise ValidationError(amount_not_positive(field))
    return amount


def in_money_range(value: Decimal) -> bool:
    """Return True if value fits a money column, sign included."""
    return value.is_finite() and -MAX_AMOUNT <= value <= MAX_AMOUNT
