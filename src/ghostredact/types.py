"""Core types."""

from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Callable, Iterator, Protocol


class ConfigurationError(ValueError):
    """Raised when a redactor cannot be built from its configuration."""

    def __init__(self, message: str, *, kind: str | None = None) -> None:
        super().__init__(message)
        self.kind = kind


class MatchingRule(Protocol):
    """Anything that can enumerate candidate matches of one kind."""

    def finditer(self, text: str) -> Iterator[re.Match]: ...


@dataclass(frozen=True, slots=True)
class RegexRule:
    """A compiled pattern bound to a single kind."""
    kind: str
    pattern: re.Pattern

    def finditer(self, text: str) -> Iterator[re.Match]:
        return self.pattern.finditer(text)


Validator = Callable[[str], bool]
Replacer = Callable[[str, str], str]    # (kind, matched text) -> substitute
