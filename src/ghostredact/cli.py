"""CLI interface for ghostredact.

Usage:
    # Redact a log file line by line, masking matches
    ghostredact --in app.log --out app.redacted.log

    # Redact every string in a JSON document, hashing matches
    ghostredact --format json --mode hash --salt s3cret < event.json

    # Brazilian identifiers plus custom patterns, counts to stderr
    ghostredact --locale br --custom patterns.yaml --report - < input.txt

    # Same thing, but driven by a YAML config file
    ghostredact --config ghostredact.yaml < input.txt

GHOSTREDACT_MODE and GHOSTREDACT_SALT supply --mode/--salt when the flags
are not given.  Flags and environment override values from --config.

Exit status: 0 on success, 1 on configuration/input errors, 2 on an
unknown --format.
"""

from __future__ import annotations
import argparse
import contextlib
import dataclasses
import json
import logging
import os
import sys
from typing import IO, Iterator

from . import jsonio
from .config import load_custom_patterns, load_from_yaml
from .masking import MODES
from .redactor import Redactor, RedactorConfig
from .types import ConfigurationError

LOG = logging.getLogger(__name__)

FORMATS = ("text", "json")
# Invalid UTF-8 is carried through as lone surrogates and written back as-is
BYTE_ERRORS = "surrogateescape"


def _build_config(args: argparse.Namespace) -> RedactorConfig:
    config = load_from_yaml(args.config) if args.config else RedactorConfig()

    overrides: dict = {}
    mode = args.mode or os.environ.get("GHOSTREDACT_MODE", "")
    if mode:
        overrides["mode"] = mode.lower()
    salt = args.salt if args.salt is not None else os.environ.get("GHOSTREDACT_SALT", "")
    if salt:
        overrides["salt"] = salt
    if args.types:
        overrides["types"] = args.types.lower()
    if args.locale:
        overrides["locale"] = args.locale.lower()
    if args.custom and args.custom.strip():
        custom = dict(config.custom)
        custom.update(load_custom_patterns(args.custom))
        overrides["custom"] = custom

    config = dataclasses.replace(config, **overrides)
    if config.mode not in MODES:
        LOG.warning("unknown mode %r; falling back to mask", config.mode)
    return config


def _passthrough(stream: IO[str]) -> IO[str]:
    """Let undecodable bytes on a standard stream round-trip unchanged."""
    reconfigure = getattr(stream, "reconfigure", None)
    if reconfigure is not None:
        reconfigure(errors=BYTE_ERRORS)
    return stream


def _read_lines(stream: IO[str]) -> Iterator[str]:
    """Yield lines without their terminator (\\n or \\r\\n)."""
    for line in stream:
        if line.endswith("\n"):
            line = line[:-1]
            if line.endswith("\r"):
                line = line[:-1]
        yield line


def cmd_text(redactor: Redactor, src: IO[str], dst: IO[str], threads: int) -> None:
    """Redact plain text line by line."""
    for line in redactor.redact_lines(_read_lines(src), workers=threads):
        dst.write(line)
        dst.write("\n")


def cmd_json(redactor: Redactor, src: IO[str], dst: IO[str]) -> None:
    """Redact every string value of a JSON document.  Numbers keep their
    original spelling."""
    data = jsonio.load(src)
    jsonio.dump(redactor.redact_document(data), dst, indent=2)
    dst.write("\n")


def write_report(dest: str, counts: dict[str, int]) -> None:
    """Write counts as JSON to ``dest`` ("-" means stderr)."""
    body = json.dumps(counts, indent=2, sort_keys=True, ensure_ascii=False)
    if dest == "-":
        sys.stderr.write(body + "\n")
        return
    with open(dest, "w", encoding="utf-8") as f:
        f.write(body)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ghostredact",
        description="Redact PII from text or JSON",
    )
    parser.add_argument("--in", dest="in_path", default="", help="Input file (default: stdin)")
    parser.add_argument("--out", dest="out_path", default="", help="Output file (default: stdout)")
    parser.add_argument("--format", default="text", help="Input format: text|json")
    parser.add_argument("--mode", default="", help="Redaction mode: mask|hash|tag")
    parser.add_argument("--salt", default=None, help="Salt (used when mode=hash)")
    parser.add_argument(
        "--types", default="",
        help="Comma-separated detectors to enable (blank = defaults). "
             "Known: email,phone,cc,ipv4,ipv6,iban,cpf,cnpj,cep,rg",
    )
    parser.add_argument("--locale", default="", help="Comma-separated locale packs, e.g. 'br'")
    parser.add_argument("--threads", type=int, default=os.cpu_count() or 1,
                        help="Worker threads for text mode")
    parser.add_argument("--report", default="", help="Report file (JSON). Use '-' for stderr")
    parser.add_argument("--custom", default="", help="JSON/YAML file with custom patterns")
    parser.add_argument("--config", default="", help="YAML config file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    fmt = args.format.lower()
    if fmt not in FORMATS:
        LOG.error("unknown --format %r; use text or json", args.format)
        return 2

    try:
        redactor = Redactor(_build_config(args))
    except ConfigurationError as e:
        LOG.error("configuration error: %s", e)
        return 1
    except OSError as e:
        LOG.error("cannot read configuration: %s", e)
        return 1

    try:
        with contextlib.ExitStack() as stack:
            src: IO[str] = _passthrough(sys.stdin)
            if args.in_path and args.in_path != "-":
                src = stack.enter_context(open(
                    args.in_path, encoding="utf-8", errors=BYTE_ERRORS, newline="",
                ))
            dst: IO[str] = _passthrough(sys.stdout)
            if args.out_path and args.out_path != "-":
                dst = stack.enter_context(open(
                    args.out_path, "w", encoding="utf-8", errors=BYTE_ERRORS,
                ))

            if fmt == "text":
                cmd_text(redactor, src, dst, args.threads)
            else:
                cmd_json(redactor, src, dst)
    except json.JSONDecodeError as e:
        LOG.error("invalid JSON input: %s", e)
        return 1
    except UnicodeError as e:
        LOG.error("cannot encode output: %s", e)
        return 1
    except OSError as e:
        LOG.error("%s", e)
        return 1

    if args.report:
        try:
            write_report(args.report, redactor.snapshot_counts())
        except OSError as e:
            LOG.error("report error: %s", e)
            return 1

    LOG.info("redacted: %s", redactor.snapshot_counts())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
