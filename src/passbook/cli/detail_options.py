"""CLI helpers for turning ``--detail key=value`` pairs into detail records."""

from dataclasses import fields
from decimal import Decimal
from typing import Any, Mapping, Optional

from passbook.domain.entities import DETAIL_CLASSES, TransactionDetails
from passbook.domain.enums import BankChargeType, TransactionType, TransferMode
from passbook.domain.rules import required_detail_kind
from passbook.utils.amount_parser import parse_amount
from passbook.utils.date_parser import parse_optional_date

_DECIMAL_FIELDS = frozenset({"bounce_charge", "charge_amount"})
_ENUM_FIELDS = {"transfer_mode": TransferMode, "charge_type": BankChargeType}


def _convert(name: str, raw: str) -> Any:
    if name.endswith("_date"):
        return parse_optional_date(raw)
    if not raw.strip():
        return None
    if name in _DECIMAL_FIELDS:
        return parse_amount(raw)
    if name in _ENUM_FIELDS:
        enum_type = _ENUM_FIELDS[name]
        try:
            return enum_type(raw.strip().lower())
        except ValueError:
            allowed = ", ".join(m.value for m in enum_type)
            raise ValueError(f"Invalid {name} '{raw}' (allowed: {allowed})") from None
    return raw.strip()


def parse_detail_pairs(pairs: tuple[str, ...]) -> dict[str, str]:
    """Split ``key=value`` strings into a dict.

    Raises:
        ValueError: If a pair has no '='
    """
    result = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Invalid detail '{pair}', expected key=value")
        result[key.strip().lower().replace("-", "_")] = value
    return result


def build_details(
    transaction_type: TransactionType, pairs: tuple[str, ...], partial: bool = False
) -> Optional[TransactionDetails]:
    """Build the detail record a transaction type takes from CLI pairs.

    Args:
        transaction_type: Canonical transaction type
        pairs: Raw ``key=value`` strings
        partial: When True (updates), return None if no pairs were given

    Raises:
        ValueError: On unknown keys or unparseable values
    """
    values = parse_detail_pairs(pairs)
    if partial and not values:
        return None
    return details_from_mapping(transaction_type, values)


def details_from_mapping(transaction_type: TransactionType, values: Mapping[str, Any]) -> TransactionDetails:
    """Build a detail record from field names and raw values.

    Values may be strings or numbers (as read from JSON); None leaves the
    field unset.

    Raises:
        ValueError: On unknown keys or unparseable values
    """
    values = {key.strip().lower().replace("-", "_"): raw for key, raw in values.items()}
    detail_class = DETAIL_CLASSES[required_detail_kind(transaction_type)]
    known = {f.name for f in fields(detail_class)}
    unknown = set(values) - known
    if unknown:
        raise ValueError(
            f"Unknown detail field(s) for {transaction_type.value}: {', '.join(sorted(unknown))} "
            f"(allowed: {', '.join(sorted(known))})"
        )
    return detail_class(**{name: _convert(name, str(raw)) for name, raw in values.items() if raw is not None})


def format_details(details: Optional[TransactionDetails]) -> list[str]:
    """Render the populated fields of a detail record, one per line."""
    if details is None:
        return []
    lines = []
    for f in fields(details):
        value = getattr(details, f.name)
        if value is None:
            continue
        if isinstance(value, Decimal):
            value = f"{value:,.2f}"
        elif hasattr(value, "value"):
            value = value.value
        lines.append(f"{f.name.replace('_', ' ').capitalize()}: {value}")
    return lines
