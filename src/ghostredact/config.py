"""Config loaders for ghostredact.

Custom pattern files (JSON or YAML):

    patterns:
      - name: employee_id
        regex: 'EMP-\\d{6}'
      - name: ticket
        regex: 'TCK[0-9]{8}'

Tool config (YAML or a plain dict, optionally nested under "ghostredact"):

    ghostredact:
      mode: hash
      salt: s3cret
      types: email,cc
      locale: br
      custom:
        - name: employee_id
          regex: 'EMP-\\d{6}'
      custom_file: patterns.yaml
"""

from __future__ import annotations
import json
from pathlib import Path
from typing import Any

from .masking import DEFAULT_MODE
from .redactor import RedactorConfig
from .types import ConfigurationError

CUSTOM_EXTENSIONS = (".json", ".yaml", ".yml")


def _read_structured(path: Path) -> Any:
    ext = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if ext == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"{path}: invalid JSON: {e}") from e
    if ext in (".yaml", ".yml"):
        import yaml  # optional dependency
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"{path}: invalid YAML: {e}") from e
    raise ConfigurationError(
        f"{path}: unsupported file extension (use .json, .yaml, or .yml)"
    )


def parse_patterns(entries: Any) -> dict[str, str]:
    """Normalize ``[{name, regex}, ...]`` or ``{name: regex}`` to a dict.

    Blank names or regexes are dropped.  First declaration of a name keeps
    its position; a later one with the same name replaces its regex.
    """
    if entries is None:
        return {}
    if isinstance(entries, dict):
        pairs = list(entries.items())
    elif isinstance(entries, list):
        pairs = []
        for entry in entries:
            if not isinstance(entry, dict):
                raise ConfigurationError(f"pattern entry must be a mapping, got {entry!r}")
            pairs.append((entry.get("name"), entry.get("regex")))
    else:
        raise ConfigurationError("patterns must be a list of {name, regex} entries")

    out: dict[str, str] = {}
    for name, regex in pairs:
        name = str(name or "").strip()
        regex = str(regex or "").strip()
        if name and regex:
            out[name] = regex
    return out


def load_custom_patterns(path: str | Path) -> dict[str, str]:
    """Load user-defined patterns from a .json/.yaml/.yml file."""
    path = Path(path).expanduser()
    data = _read_structured(path)
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: expected a top-level 'patterns' key")
    patterns = parse_patterns(data.get("patterns"))
    if not patterns:
        raise ConfigurationError(f"{path}: no patterns found in custom file")
    return patterns


def _as_list_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple, set)):
        return ",".join(str(v) for v in value)
    return str(value)


def load_config(data: dict[str, Any], *, base_dir: str | Path | None = None) -> RedactorConfig:
    """Normalize a config dict (from YAML or inline) into a RedactorConfig."""
    # Support nested under "ghostredact" key or flat
    if "ghostredact" in data:
        data = data["ghostredact"] or {}

    custom: dict[str, str] = {}
    if data.get("custom_file"):
        custom_path = Path(data["custom_file"]).expanduser()
        if base_dir is not None and not custom_path.is_absolute():
            custom_path = Path(base_dir) / custom_path
        custom.update(load_custom_patterns(custom_path))
    custom.update(parse_patterns(data.get("custom")))

    return RedactorConfig(
        mode=str(data.get("mode") or DEFAULT_MODE).lower(),
        salt=str(data.get("salt") or ""),
        types=_as_list_string(data.get("types")).lower(),
        locale=_as_list_string(data.get("locale")).lower(),
        custom=custom,
    )


def load_from_yaml(path: str | Path) -> RedactorConfig:
    """Load config from a YAML file.  Relative custom_file paths resolve
    against the config file's directory."""
    import yaml  # optional dependency
    path = Path(path).expanduser()
    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"{path}: invalid YAML: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: expected a mapping at the top level")
    return load_config(data, base_dir=path.parent)
