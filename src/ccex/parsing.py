"""Field extraction helpers for venue JSON payloads.

Venues mix JSON numbers and numeric strings for the same kind of field, so
every numeric value goes through to_decimal. Missing or malformed fields
raise ParseError naming the field.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from ccex.exceptions import ParseError
from ccex.models import BoardOrder, BoardSide


def to_decimal(value: Any, name: str = "value") -> Decimal:
    """Convert a JSON number or numeric string to Decimal."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or value is None:
        raise ParseError(f"{name} is not a number: {value!r}")
    if isinstance(value, (int, str)):
        try:
            result = Decimal(value.strip() if isinstance(value, str) else value)
        except InvalidOperation as exc:
            raise ParseError(f"{name} is not a number: {value!r}") from exc
        if not result.is_finite():
            raise ParseError(f"{name} is not a finite number: {value!r}")
        return result
    raise ParseError(f"{name} is not a number: {value!r}")


def field(obj: Any, key: str) -> Any:
    """Return obj[key], raising ParseError when obj is not an object or lacks key."""
    if not isinstance(obj, dict) or key not in obj:
        raise ParseError(f"{key} is not parsed")
    return obj[key]


def path(obj: Any, dotted: str) -> Any:
    """Follow a dotted key path, e.g. path(payload, "data.ticker")."""
    for key in dotted.split("."):
        obj = field(obj, key)
    return obj


def decimal_field(obj: Any, key: str) -> Decimal:
    return to_decimal(field(obj, key), key)


def string_field(obj: Any, key: str) -> str:
    value = field(obj, key)
    if not isinstance(value, str):
        raise ParseError(f"{key} is not a string: {value!r}")
    return value


def bool_field(obj: Any, key: str) -> bool:
    value = field(obj, key)
    if not isinstance(value, bool):
        raise ParseError(f"{key} is not a boolean: {value!r}")
    return value


def list_field(obj: Any, dotted: str) -> list[Any]:
    value = path(obj, dotted)
    if not isinstance(value, list):
        raise ParseError(f"{dotted} is not a list")
    return value


def as_list(value: Any, name: str) -> list[Any]:
    if not isinstance(value, list):
        raise ParseError(f"{name} is not a list")
    return value


def parse_levels(
    rows: Any,
    side: BoardSide,
    price_index: int = 0,
    amount_index: int = 1,
) -> list[BoardOrder]:
    """Parse order book rows shaped like [price, amount, ...]."""
    levels = []
    for row in as_list(rows, f"{side.value}s"):
        if not isinstance(row, list) or len(row) <= max(price_index, amount_index):
            raise ParseError(f"malformed {side.value} level: {row!r}")
        levels.append(
            BoardOrder(
                side=side,
                price=to_decimal(row[price_index], "price"),
                amount=to_decimal(row[amount_index], "amount"),
            )
        )
    return levels


def parse_object_levels(
    rows: Any, side: BoardSide, price_key: str, amount_key: str
) -> list[BoardOrder]:
    """Parse order book rows shaped like {"price": ..., "size": ...}."""
    return [
        BoardOrder(
            side=side,
            price=decimal_field(row, price_key),
            amount=decimal_field(row, amount_key),
        )
        for row in as_list(rows, f"{side.value}s")
    ]


def optional_decimal(obj: Any, key: str, default: Decimal = Decimal("0")) -> Decimal:
    """Like decimal_field, but a missing or null field yields default."""
    if not isinstance(obj, dict):
        raise ParseError(f"{key} is not parsed")
    value = obj.get(key)
    if value is None:
        return default
    return to_decimal(value, key)
