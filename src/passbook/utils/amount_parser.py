"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "₹123.45", "Rs. 123.45", "INR 123.45"
    - "1,234.56" and Indian grouping like "1,23,456.78"
    - "-123.45" and "(123.45)" (negative)

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

    # Remove currency markers
    amount_str = re.sub(r"(?i)^\s*(inr|rs\.?)", "", amount_str)
    amount_str = re.sub(r"[₹$€£¥]", "", amount_str)

    # Remove grouping commas
    amount_str = amount_str.replace(",", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e!r}") from e
    if is_negative:
        amount = -amount
    return amount


def parse_positive_amount(amount_str: str) -> Decimal:
    """Parse a transaction amount, which must be greater than zero.

    The value is not rounded; the transaction service rejects fractions of a
    paisa.

    Raises:
        ValueError: If the string cannot be parsed or the amount is not positive
    """
    amount = parse_amount(amount_str)
    if amount <= 0:
        raise ValueError(f"Amount must be greater than zero, got {amount}")
    return amount
