"""Pattern registry — built-in detectors and custom pattern compilation.

Built-in rules are purely lexical.  The only secondary check lives in
``validators`` (Luhn for card numbers).  The phone rule is deliberately
loose and will also catch long bare digit runs.
"""

from __future__ import annotations
import re

from .types import ConfigurationError, RegexRule

# Each entry: kind -> compiled regex.  Insertion order is the canonical
# redaction order for built-ins.
_BUILTINS: dict[str, re.Pattern] = {
    # Email — case-insensitive local@domain.tld
    "email": re.compile(
        r"\b[A-Z0-9._%+\-]+@[A-Z0-9.\-]+\.[A-Z]{2,}\b",
        re.IGNORECASE | re.ASCII,
    ),

    # Card number — 13 to 19 digits with optional space/dash separators
    "cc": re.compile(
        r"\b(?:\d[ -]*?){13,19}\b", re.ASCII
    ),

    # Phone — optional country code and area group, then 3-5 + 4 digits
    "phone": re.compile(
        r"\b(?:\+?\d{1,3}[\s\-.]?)?"
        r"(?:\(?\d{2,4}\)?[\s\-.]?)?"
        r"\d{3,5}[\s\-.]?\d{4}\b",
        re.ASCII,
    ),

    # Brazil (enabled through the "br" locale pack)
    "cpf": re.compile(r"\b\d{3}\.\d{3}\.\d{3}-\d{2}\b", re.ASCII),
    "cnpj": re.compile(r"\b\d{2}\.\d{3}\.\d{3}/\d{4}-\d{2}\b", re.ASCII),
    "rg": re.compile(r"\b\d{1,2}\.\d{3}\.\d{3}-\d\b", re.ASCII),
    "cep": re.compile(r"\b\d{5}-?\d{3}\b", re.ASCII),

    # IPv4 — dotted quad, octets 0-255
    "ipv4": re.compile(
        r"\b(?:(?:25[0-5]|2[0-4]\d|1?\d?\d)\.){3}"
        r"(?:25[0-5]|2[0-4]\d|1?\d?\d)\b",
        re.ASCII,
    ),

    # IPv6 — full form, eight upper-case hextets
    "ipv6": re.compile(
        r"\b(?:[A-F0-9]{1,4}:){7}[A-F0-9]{1,4}\b", re.ASCII
    ),

    # IBAN — country code, check digits, BBAN
    "iban": re.compile(r"\b[A-Z]{2}\d{2}[A-Z0-9]{11,30}\b", re.ASCII),
}

BUILTIN_KINDS: tuple[str, ...] = tuple(_BUILTINS)

DEFAULT_KINDS: frozenset[str] = frozenset(
    {"email", "cc", "phone", "ipv4", "ipv6", "iban"}
)

LOCALE_PACKS: dict[str, tuple[str, ...]] = {
    "br": ("cpf", "cnpj", "cep", "rg"),
}


def builtin_rule(kind: str) -> RegexRule | None:
    """Return the built-in rule for ``kind``, or None if there isn't one."""
    pattern = _BUILTINS.get(kind)
    if pattern is None:
        return None
    return RegexRule(kind=kind, pattern=pattern)


def compile_custom(kind: str, source: str) -> RegexRule:
    """Compile a user-supplied pattern.

    Raises ConfigurationError naming ``kind`` when the source is invalid.
    """
    try:
        pattern = re.compile(source)
    except re.error as e:
        raise ConfigurationError(
            f"invalid custom regex for {kind!r}: {e}", kind=kind
        ) from e
    return RegexRule(kind=kind, pattern=pattern)
