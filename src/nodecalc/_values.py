"""Typed values flowing between nodes."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import StrEnum
from typing import ClassVar, Self

logger = logging.getLogger(__name__)

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

_INTEGER_LITERAL = re.compile(r"[+-]?[0-9]+")
_ESCAPE_SEQUENCE = re.compile(r"\\(.)", re.DOTALL)
_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "0": "\0",
    "\\": "\\",
    '"': '"',
    "'": "'",
}


class ValueKind(StrEnum):
    """The kind of value a port carries.

    Connections are type-checked by comparing kinds. The color is only used
    for presentation.
    """

    color: tuple[int, int, int]

    def __new__(cls, value: str, color: tuple[int, int, int]) -> Self:
        """Create a new kind member with its display color."""
        obj = str.__new__(cls, value)
        obj._value_ = value
        obj.color = color
        return obj

    INTEGER = ("integer", (68, 139, 211))
    TEXT = ("text", (38, 209, 111))

    @property
    def style(self) -> str:
        """Rich style string for this kind."""
        r, g, b = self.color
        return f"rgb({r},{g},{b})"

    def zero(self) -> Value:
        """Return the default value of this kind."""
        match self:
            case ValueKind.INTEGER:
                return Integer()
            case ValueKind.TEXT:
                return Text()


@dataclass(frozen=True, slots=True)
class Integer:
    """A signed integer value."""

    kind: ClassVar[ValueKind] = ValueKind.INTEGER

    value: int = 0


@dataclass(frozen=True, slots=True)
class Text:
    """A text value."""

    kind: ClassVar[ValueKind] = ValueKind.TEXT

    value: str = ""


Value = Integer | Text


@dataclass(frozen=True, slots=True)
class ParsedLiteral:
    """Outcome of parsing literal text into a value.

    Attributes:
        value: The parsed value, or the kind's zero value on failure.
        fallback: True when the text could not be parsed and the zero value
            was substituted.

    """

    value: Value
    fallback: bool = False


def coerce_to_integer(value: Value) -> int:
    """Return the integer payload, or 0 if the value is not an integer."""
    match value:
        case Integer(payload):
            return payload
        case _:
            return 0


def coerce_to_text(value: Value) -> str:
    """Return the text payload, or an empty string if the value is not text."""
    match value:
        case Text(payload):
            return payload
        case _:
            return ""


def fix_escape_chars(text: str) -> str:
    r"""Replace escape sequences such as ``\n`` with the characters they denote.

    Unknown sequences are kept as written.
    """
    return _ESCAPE_SEQUENCE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(0)), text)


def _parse_integer(text: str) -> int | None:
    if _INTEGER_LITERAL.fullmatch(text) is None:
        return None
    number = int(text)
    if not _INT64_MIN <= number <= _INT64_MAX:
        return None
    return number


def parse_literal(template: Value, text: str) -> ParsedLiteral:
    """Parse text into a new value of the same kind as ``template``.

    Integers must be written as plain signed decimals that fit in 64 bits.
    Anything else falls back to 0. Text is taken verbatim after escape
    sequences are normalized. This function never raises.

    Args:
        template: An existing value whose kind selects the parser.
        text: The literal text to parse.

    Returns:
        The parsed literal and whether the fallback value was used.

    """
    match template:
        case Integer():
            number = _parse_integer(text)
            if number is None:
                logger.debug("Could not parse %r as an integer, using 0", text)
                return ParsedLiteral(template.kind.zero(), fallback=True)
            return ParsedLiteral(Integer(number))
        case Text():
            return ParsedLiteral(Text(fix_escape_chars(text)))


def display_text(value: Value) -> str:
    """Return the human readable form of a value."""
    match value:
        case Integer(payload):
            return str(payload)
        case Text(payload):
            return payload


def make_value(kind: ValueKind, payload: int | str) -> Value:
    """Build a value of ``kind`` from a raw payload.

    Raises:
        TypeError: If the payload type does not match the kind.

    """
    match kind:
        case ValueKind.INTEGER if isinstance(payload, int) and not isinstance(payload, bool):
            return Integer(payload)
        case ValueKind.TEXT if isinstance(payload, str):
            return Text(payload)
    msg = f"Payload {payload!r} is not a valid {kind} value"
    raise TypeError(msg)
