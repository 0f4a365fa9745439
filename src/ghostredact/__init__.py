"""ghostredact — deterministic PII redaction for text and JSON."""

from .redactor import Redactor, RedactorConfig
from .config import load_config, load_custom_patterns, load_from_yaml
from .types import ConfigurationError, MatchingRule, RegexRule

__all__ = [
    "Redactor", "RedactorConfig",
    "load_config", "load_custom_patterns", "load_from_yaml",
    "ConfigurationError", "MatchingRule", "RegexRule",
]
__version__ = "0.1.0"
