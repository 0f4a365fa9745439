"""Redactor — the main API.  Ordered regex passes with per-kind counting.

Usage:
    from ghostredact import Redactor, RedactorConfig

    redactor = Redactor(RedactorConfig(mode="tag", locale="br"))

    redactor.redact("Email me at john@acme.com")   # "Email me at <EMAIL>"
    redactor.snapshot_counts()                     # {"email": 1}

Each kind runs as one stage over the output of the previous stage, so a
later kind only ever sees text already rewritten by earlier kinds.
"""

from __future__ import annotations
import logging
from collections import Counter, deque
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from itertools import islice
from typing import Any, Iterable, Iterator, Mapping

from .masking import DEFAULT_MODE, make_replacer
from .patterns import (
    BUILTIN_KINDS,
    DEFAULT_KINDS,
    LOCALE_PACKS,
    builtin_rule,
    compile_custom,
)
from .types import MatchingRule, Replacer, Validator
from .validators import get_validator

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class RedactorConfig:
    """Configuration for the Redactor."""
    mode: str = DEFAULT_MODE          # mask | hash | tag
    salt: str = ""                    # only used by hash mode
    # Explicit kinds, comma-separated or iterable.  Blank = defaults.
    types: str | Iterable[str] = ""
    # Locale packs, e.g. "br".  These add kinds, never remove them.
    locale: str | Iterable[str] = ""
    # kind name -> regex source.  Always enabled.
    custom: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Stage:
    """One pass of the pipeline: a kind with its rule, check and replacer."""
    kind: str
    rule: MatchingRule
    validator: Validator | None
    replace: Replacer

    def apply(self, text: str, counts: Counter) -> str:
        parts: list[str] = []
        last = 0
        prev_end = -1
        for m in self.rule.finditer(text):
            start, end = m.span()
            # An empty match touching the previous match is not a new match
            if start == end == prev_end:
                continue
            prev_end = end
            found = m.group()
            if self.validator is not None and not self.validator(found):
                continue
            parts.append(text[last:start])
            parts.append(self.replace(self.kind, found))
            last = end
            counts[self.kind] += 1
        if not parts:
            return text
        parts.append(text[last:])
        return "".join(parts)


def _split(value: str | Iterable[str] | None) -> list[str]:
    """Comma string or iterable → trimmed, lower-cased, non-empty names."""
    if not value:
        return []
    items = value.split(",") if isinstance(value, str) else value
    names = []
    for item in items:
        item = item.strip().lower()
        if item:
            names.append(item)
    return names


def resolve_policy(
    config: RedactorConfig,
) -> tuple[set[str], dict[str, MatchingRule], list[str]]:
    """Work out which kinds are enabled and bind each to its rule.

    Returns (enabled kinds, kind -> rule, custom kinds in declaration order).
    Raises ConfigurationError if a custom pattern fails to compile.
    """
    explicit = _split(config.types)
    enabled: set[str] = set(explicit) if explicit else set(DEFAULT_KINDS)

    for pack in _split(config.locale):
        kinds = LOCALE_PACKS.get(pack)
        if kinds is None:
            LOG.debug("ignoring unknown locale pack %r", pack)
            continue
        enabled.update(kinds)

    rules: dict[str, MatchingRule] = {}
    for name in enabled:
        rule = builtin_rule(name)
        if rule is not None:
            rules[name] = rule

    customs: list[str] = []
    for name, source in (config.custom or {}).items():
        name = name.strip()
        source = source.strip()
        if not name or not source:
            continue
        rules[name] = compile_custom(name, source)
        enabled.add(name)
        customs.append(name)

    for name in sorted(enabled - rules.keys()):
        LOG.debug("no rule for kind %r; it will never match", name)

    return enabled, rules, customs


def plan_order(rules: Mapping[str, MatchingRule], customs: Iterable[str]) -> tuple[str, ...]:
    """Built-ins in canonical order, then customs; each kind at most once."""
    order: list[str] = []
    seen: set[str] = set()
    for kind in (*BUILTIN_KINDS, *customs):
        if kind in rules and kind not in seen:
            seen.add(kind)
            order.append(kind)
    return tuple(order)


class Redactor:
    """Ordered, counting redaction engine.

    Built once per run.  ``redact`` is safe to call repeatedly; counts keep
    accumulating for the lifetime of the instance.
    """

    def __init__(self, config: RedactorConfig | None = None) -> None:
        self.config = config or RedactorConfig()
        _, rules, customs = resolve_policy(self.config)
        replace = make_replacer(self.config.mode, self.config.salt)
        self._stages: tuple[Stage, ...] = tuple(
            Stage(kind, rules[kind], get_validator(kind), replace)
            for kind in plan_order(rules, customs)
        )
        self._counts: Counter = Counter()
        LOG.debug("redaction order: %s (mode=%s)", ", ".join(self.kinds), self.config.mode)

    @property
    def kinds(self) -> tuple[str, ...]:
        """Kinds in the order they are applied."""
        return tuple(s.kind for s in self._stages)

    def redact(self, text: str) -> str:
        """Redact a single string, updating the per-kind counts."""
        return self._apply(text, self._counts)

    def _apply(self, text: str, counts: Counter) -> str:
        for stage in self._stages:
            text = stage.apply(text, counts)
        return text

    def snapshot_counts(self) -> dict[str, int]:
        """Return a copy of kind → number of replacements so far."""
        return dict(self._counts)

    counts = snapshot_counts

    def redact_document(self, obj: Any) -> Any:
        """Redact every string leaf of a nested dict/list structure.

        Returns a new structure; the input is not mutated.  Keys, numbers,
        booleans and None pass through unchanged.
        """
        if isinstance(obj, str):
            return self.redact(obj)
        if isinstance(obj, dict):
            return {k: self.redact_document(v) for k, v in obj.items()}
        if isinstance(obj, list):
            return [self.redact_document(v) for v in obj]
        return obj

    def redact_lines(
        self,
        lines: Iterable[str],
        *,
        workers: int = 1,
        chunk_size: int = 256,
    ) -> Iterator[str]:
        """Redact lines lazily, preserving order.

        With ``workers > 1`` chunks of lines run on a thread pool.  Each
        chunk counts into its own Counter, merged into the engine's counts
        as results are consumed.
        """
        if workers <= 1:
            for line in lines:
                yield self.redact(line)
            return

        with ThreadPoolExecutor(max_workers=workers) as pool:
            pending: deque[Future] = deque()
            it = iter(lines)
            while True:
                chunk = list(islice(it, chunk_size))
                if not chunk:
                    break
                pending.append(pool.submit(self._redact_chunk, chunk))
                # Bound the amount of buffered work
                if len(pending) >= workers * 2:
                    yield from self._collect(pending.popleft())
            while pending:
                yield from self._collect(pending.popleft())

    def _redact_chunk(self, chunk: list[str]) -> tuple[list[str], Counter]:
        local: Counter = Counter()
        return [self._apply(line, local) for line in chunk], local

    def _collect(self, future: Future) -> list[str]:
        out, local = future.result()
        self._counts.update(local)
        return out
