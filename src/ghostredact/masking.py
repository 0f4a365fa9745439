"""Replacement strategies — what a match turns into.

    hash  → <KIND:0123456789abcdef>   (first 8 bytes of sha256(salt + text))
    tag   → <KIND>
    mask  → kind-specific partial mask, <KIND> for kinds without one

Any mode other than "hash" or "tag" behaves as "mask".
"""

from __future__ import annotations
import hashlib
from typing import Callable

from .validators import only_digits

MODES = ("mask", "hash", "tag")
DEFAULT_MODE = "mask"
MASK_CHAR = "*"


def tag(kind: str) -> str:
    return f"<{kind.upper()}>"


def hash_token(kind: str, text: str, salt: str = "") -> str:
    digest = hashlib.sha256((salt + text).encode("utf-8")).digest()
    return f"<{kind.upper()}:{digest[:8].hex()}>"


def mask_email(text: str) -> str:
    """Keep the first character of the local part and the whole domain."""
    at = text.find("@")
    if at <= 1:
        return tag("email")
    return text[0] + MASK_CHAR * (at - 1) + text[at:]


def mask_card(text: str) -> str:
    """Show only the last four digits; separators are dropped."""
    digits = only_digits(text)
    if len(digits) < 4:
        return tag("cc")
    return MASK_CHAR * (len(digits) - 4) + digits[-4:]


def mask_keep_last_digits(text: str, keep: int = 4, char: str = MASK_CHAR) -> str:
    """Mask every digit except the last ``keep``; everything else verbatim."""
    out = list(text)
    seen = 0
    for i in range(len(out) - 1, -1, -1):
        if "0" <= out[i] <= "9":
            if seen < keep:
                seen += 1
            else:
                out[i] = char
    return "".join(out)


# Kinds with a bespoke mask.  Everything else (customs included) gets a tag.
MASKERS: dict[str, Callable[[str], str]] = {
    "email": mask_email,
    "cc": mask_card,
    "phone": mask_keep_last_digits,
}


def mask(kind: str, text: str) -> str:
    masker = MASKERS.get(kind)
    if masker is None:
        return tag(kind)
    return masker(text)


def replace(mode: str, kind: str, text: str, salt: str = "") -> str:
    """Produce the substitute for ``text`` matched as ``kind``."""
    if mode == "hash":
        return hash_token(kind, text, salt)
    if mode == "tag":
        return tag(kind)
    return mask(kind, text)


def make_replacer(mode: str, salt: str = "") -> Callable[[str, str], str]:
    """Bind mode and salt, returning a ``(kind, text) -> str`` callable."""
    def _replace(kind: str, text: str) -> str:
        return replace(mode, kind, text, salt)
    return _replace
