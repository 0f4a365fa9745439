"""JSON reading/writing that leaves number literals exactly as written.

``json.load`` would turn ``1e2`` into ``100.0`` and round long floats.
Numbers are instead kept as ``JSONNumber`` holding their source text, which
the redactor walker passes through (it only rewrites ``str`` leaves) and
``dumps`` writes back verbatim.
"""

from __future__ import annotations
import json
from dataclasses import dataclass
from typing import IO, Any, Iterator


@dataclass(frozen=True, slots=True)
class JSONNumber:
    """A JSON number literal, kept as text."""
    text: str

    def __str__(self) -> str:
        return self.text


def load(src: IO[str]) -> Any:
    return json.load(
        src,
        parse_int=JSONNumber,
        parse_float=JSONNumber,
        parse_constant=JSONNumber,
    )


def loads(text: str) -> Any:
    return json.loads(
        text,
        parse_int=JSONNumber,
        parse_float=JSONNumber,
        parse_constant=JSONNumber,
    )


def _encode_str(s: str) -> str:
    return json.dumps(s, ensure_ascii=False)


def _iterencode(obj: Any, indent: str, level: int) -> Iterator[str]:
    if isinstance(obj, JSONNumber):
        yield obj.text
    elif isinstance(obj, str):
        yield _encode_str(obj)
    elif obj is None or isinstance(obj, (bool, int, float)):
        yield json.dumps(obj)
    elif isinstance(obj, dict):
        if not obj:
            yield "{}"
            return
        inner = indent * (level + 1)
        yield "{"
        for i, (key, value) in enumerate(obj.items()):
            yield ",\n" if i else "\n"
            yield inner + _encode_str(str(key)) + ": "
            yield from _iterencode(value, indent, level + 1)
        yield "\n" + indent * level + "}"
    elif isinstance(obj, (list, tuple)):
        if not obj:
            yield "[]"
            return
        inner = indent * (level + 1)
        yield "["
        for i, value in enumerate(obj):
            yield ",\n" if i else "\n"
            yield inner
            yield from _iterencode(value, indent, level + 1)
        yield "\n" + indent * level + "]"
    else:
        raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def dumps(obj: Any, *, indent: int = 2) -> str:
    """Serialize like ``json.dumps(obj, indent=indent, ensure_ascii=False)``."""
    return "".join(_iterencode(obj, " " * indent, 0))


def dump(obj: Any, dst: IO[str], *, indent: int = 2) -> None:
    for chunk in _iterencode(obj, " " * indent, 0):
        dst.write(chunk)
