"""Value coercion and the accumulate-merge rule.

Text found in attributes and element content is coerced to booleans, null
and numbers here. Numbers keep the precision of their literal: integers are
Python ``int`` and decimal literals are :class:`decimal.Decimal`, with
:func:`number_kind` reporting which fixed-width type an integer would need.
"""

import json
import math
import re
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Dict, Optional

# Numeric literal grammars
DECIMAL_PATTERN = re.compile(r"-?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
INTEGER_PATTERN = re.compile(r"-?[0-9]+")
HEX_FLOAT_PATTERN = re.compile(
    r"-?0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)[pP][+-]?[0-9]+[fFdD]?"
)
FLOAT_SUFFIX_PATTERN = re.compile(r"(-?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)[fFdD]")

INT32_BITS = 31
INT64_BITS = 63


class NumberKind(Enum):
    """Narrowest numeric type able to hold a parsed number exactly."""
    INT32 = "int32"
    INT64 = "int64"
    BIG_INTEGER = "big_integer"
    DECIMAL = "decimal"
    FLOAT = "float"


def number_kind(value: Any) -> NumberKind:
    """Report the narrowed numeric subtype of ``value``.

    Integers are classified by their two's-complement bit length, so
    ``-2**31`` is still ``INT32``.

    Raises:
        TypeError: If ``value`` is not a number produced by coercion
    """
    if isinstance(value, bool):
        raise TypeError("bool is not a numeric tree value")
    if isinstance(value, int):
        bits = (~value).bit_length() if value < 0 else value.bit_length()
        if bits <= INT32_BITS:
            return NumberKind.INT32
        if bits <= INT64_BITS:
            return NumberKind.INT64
        return NumberKind.BIG_INTEGER
    if isinstance(value, Decimal):
        return NumberKind.DECIMAL
    if isinstance(value, float):
        return NumberKind.FLOAT
    raise TypeError(f"{type(value).__name__} is not a numeric tree value")


def _is_ascii_digit(char: str) -> bool:
    return "0" <= char <= "9"


def is_decimal_notation(text: str) -> bool:
    """Check whether a numeric literal must be read as a decimal."""
    return "." in text or "e" in text or "E" in text or text == "-0"


def string_to_number(text: str) -> Any:
    """Parse a numeric literal.

    Decimal notation yields a :class:`Decimal`, except that negative zero
    becomes ``-0.0`` so its sign survives. Literals with an ``f`` or ``d``
    type suffix and hexadecimal floats fall back to ``float``. Integers with
    redundant leading zeros are rejected.

    Raises:
        ValueError: If ``text`` is not a valid number
    """
    if not text or not (_is_ascii_digit(text[0]) or text[0] == "-"):
        raise ValueError(f"val [{text}] is not a valid number.")

    if is_decimal_notation(text):
        if DECIMAL_PATTERN.fullmatch(text):
            try:
                number = Decimal(text)
            except InvalidOperation:
                raise ValueError(f"val [{text}] is not a valid number.") from None
            if text[0] == "-" and number.is_zero():
                return -0.0
            return number
        return _string_to_float(text)

    if len(text) > 1 and text[0] == "0" and _is_ascii_digit(text[1]):
        raise ValueError(f"val [{text}] has a leading zero.")
    if len(text) > 2 and text[0] == "-" and text[1] == "0" and _is_ascii_digit(text[2]):
        raise ValueError(f"val [{text}] has a leading zero.")
    if not INTEGER_PATTERN.fullmatch(text):
        raise ValueError(f"val [{text}] is not a valid number.")
    # int(str) is capped at sys.get_int_max_str_digits(); Decimal is not
    return int(Decimal(text))


def _string_to_float(text: str) -> float:
    match = FLOAT_SUFFIX_PATTERN.fullmatch(text)
    if match:
        number = float(match.group(1))
    elif HEX_FLOAT_PATTERN.fullmatch(text):
        number = float.fromhex(text.rstrip("fFdD"))
    else:
        raise ValueError(f"val [{text}] is not a valid number.")
    if math.isnan(number) or math.isinf(number):
        raise ValueError(f"val [{text}] is not a valid number.")
    return number


def string_to_value(text: str, converter: Optional[Callable[[str], Any]] = None) -> Any:
    """Coerce a text value to its most specific tree value.

    A converter, when given, fully replaces the default rules. Otherwise
    ``true``/``false``/``null`` (any case) become ``True``/``False``/``None``
    and numeric-looking text becomes a number; anything else, including text
    that only looks numeric, stays a string.

    Example:
        >>> string_to_value("1234"), string_to_value("00"), string_to_value("TRUE")
        (1234, '00', True)
    """
    if converter is not None:
        return converter(text)
    if text == "":
        return text
    lowered = text.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if lowered == "null":
        return None
    if _is_ascii_digit(text[0]) or text[0] == "-":
        try:
            return string_to_number(text)
        except ValueError:
            return text
    return text


def integer_text(value: int) -> str:
    """Render an integer in decimal digits regardless of its length."""
    return str(Decimal(value))


def accumulate(obj: Dict[str, Any], key: str, value: Any) -> None:
    """Merge ``value`` into ``obj`` under ``key`` without overwriting.

    The first write stores the value (a list is wrapped so later writes append
    beside it), the second promotes the existing value into a two-element
    list, and further writes append.
    """
    if key not in obj:
        obj[key] = [value] if isinstance(value, list) else value
        return
    existing = obj[key]
    if isinstance(existing, list):
        existing.append(value)
    else:
        obj[key] = [existing, value]


def to_json_string(value: Any) -> str:
    """Render a tree value as compact JSON text.

    Decimals are written with their exact digits and negative zero keeps its
    sign, which :func:`json.dumps` cannot do for :class:`Decimal`.

    Raises:
        ValueError: If the tree contains a non-finite float
    """
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, int):
        return integer_text(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise ValueError("JSON does not allow non-finite numbers")
        return repr(value)
    if isinstance(value, str):
        return _quote(value)
    if isinstance(value, dict):
        members = (f"{_quote(str(key))}:{to_json_string(item)}" for key, item in value.items())
        return "{" + ",".join(members) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(to_json_string(item) for item in value) + "]"
    return _quote(str(value))


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)
