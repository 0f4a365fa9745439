"""Secondary acceptance checks for structurally matched spans.

A validator receives the matched text and returns True if the span is a
real hit.  Kinds without an entry in VALIDATORS accept every match.
"""

from __future__ import annotations

from .types import Validator

CC_MIN_DIGITS = 13
CC_MAX_DIGITS = 19


def only_digits(text: str) -> str:
    return "".join(ch for ch in text if "0" <= ch <= "9")


def luhn_ok(digits: str) -> bool:
    """Luhn checksum over a string of ASCII digits."""
    total = 0
    for i, ch in enumerate(reversed(digits)):
        n = ord(ch) - 48
        if i % 2 == 1:
            n *= 2
            if n > 9:
                n -= 9
        total += n
    return total % 10 == 0


def is_card_number(text: str) -> bool:
    digits = only_digits(text)
    if not CC_MIN_DIGITS <= len(digits) <= CC_MAX_DIGITS:
        return False
    return luhn_ok(digits)


VALIDATORS: dict[str, Validator] = {
    "cc": is_card_number,
}


def get_validator(kind: str) -> Validator | None:
    return VALIDATORS.get(kind)
