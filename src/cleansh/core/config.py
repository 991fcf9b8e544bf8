#!/usr/bin/env python3
"""
CLEANSH CONFIGURATION
---------------------
Resolves the rule knobs and the severity table once, at startup,
from the `clean:` section of a YAML project file (arty.yml by default):

    clean:
      rules:
        max_line_length: 100
        indent_size: 2
      severity:
        deprecated_syntax: error

The resulting RuleConfig is passed explicitly to every component;
nothing here is a process-wide singleton.

Author: cleansh maintainers
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ruamel.yaml import YAML, YAMLError
from ruamel.yaml.comments import CommentedMap

from cleansh.core.errors import ConfigError
from cleansh.core.models import Rule, Severity

logger = logging.getLogger("cleansh.config")

DEFAULT_CONFIG_FILE = "arty.yml"

DEFAULT_RULES: Dict[str, Union[bool, int]] = {
    "max_line_length": 100,
    "indent_size": 2,
    "use_spaces": True,
    "use_double_brackets": True,
    "space_around_operators": True,
    "space_after_comma": True,
    "space_before_brace": True,
    "quote_variables": True,
}

DEFAULT_SEVERITY: Dict[str, Severity] = {
    Rule.MISSING_QUOTES.value: Severity.INFO,
    Rule.LINE_LENGTH.value: Severity.WARNING,
    Rule.DEPRECATED_SYNTAX.value: Severity.ERROR,
    Rule.SPACING_ISSUES.value: Severity.WARNING,
    Rule.BRACKET_STYLE.value: Severity.WARNING,
    Rule.INDENTATION.value: Severity.WARNING,
}

# Which boolean knob switches each rule on or off.
# line_length is always active; its knob is numeric.
RULE_KNOBS: Dict[str, Optional[str]] = {
    Rule.LINE_LENGTH.value: None,
    Rule.BRACKET_STYLE.value: "use_double_brackets",
    Rule.DEPRECATED_SYNTAX.value: "use_double_brackets",
    Rule.SPACING_ISSUES.value: "space_around_operators",
    Rule.MISSING_QUOTES.value: "quote_variables",
    Rule.INDENTATION.value: "use_spaces",
    Rule.BRACE_SPACING.value: "space_before_brace",
    Rule.COMMA_SPACING.value: "space_after_comma",
}


@dataclass(frozen=True)
class RuleConfig:
    """
    Read-only view of the resolved configuration.

    `rules` holds the boolean/numeric knobs, `severity` maps a rule
    identifier to the severity its issues are reported with.
    """
    rules: Dict[str, Union[bool, int]] = field(default_factory=lambda: dict(DEFAULT_RULES))
    severity: Dict[str, Severity] = field(default_factory=lambda: dict(DEFAULT_SEVERITY))

    def get_bool(self, key: str) -> bool:
        value = self.rules.get(key, DEFAULT_RULES.get(key, False))
        return bool(value)

    def get_int(self, key: str) -> int:
        value = self.rules.get(key, DEFAULT_RULES.get(key, 0))
        return int(value)

    def get_severity(self, rule: str) -> Severity:
        return self.severity.get(rule, DEFAULT_SEVERITY.get(rule, Severity.WARNING))

    def is_rule_enabled(self, rule: str) -> bool:
        knob = RULE_KNOBS.get(rule)
        if knob is None:
            return True
        return self.get_bool(knob)

    @property
    def max_line_length(self) -> int:
        return self.get_int("max_line_length")

    @property
    def indent_size(self) -> int:
        return self.get_int("indent_size")

    @classmethod
    def from_mapping(cls, data: Any) -> "RuleConfig":
        """
        Builds a config from the parsed `clean:` mapping.
        Unknown keys are ignored; malformed values keep their defaults.
        """
        rules = dict(DEFAULT_RULES)
        severity = dict(DEFAULT_SEVERITY)

        if not isinstance(data, dict):
            return cls(rules=rules, severity=severity)

        raw_rules = data.get("rules") or {}
        if isinstance(raw_rules, dict):
            for key, value in raw_rules.items():
                if key not in DEFAULT_RULES:
                    logger.debug(f"Ignoring unknown rule knob '{key}'")
                    continue
                coerced = _coerce_knob(key, value)
                if coerced is not None:
                    rules[key] = coerced

        raw_severity = data.get("severity") or {}
        if isinstance(raw_severity, dict):
            for rule, value in raw_severity.items():
                try:
                    severity[str(rule)] = Severity.parse(value)
                except ValueError:
                    logger.warning(f"Invalid severity '{value}' for rule '{rule}', keeping default")

        return cls(rules=rules, severity=severity)


def _coerce_knob(key: str, value: Any) -> Optional[Union[bool, int]]:
    default = DEFAULT_RULES[key]
    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
        if str(value).strip().lower() in ("true", "yes", "on", "1"):
            return True
        if str(value).strip().lower() in ("false", "no", "off", "0"):
            return False
    else:
        try:
            number = int(value)
        except (TypeError, ValueError):
            number = None
        if number is not None and number > 0:
            return number
    logger.warning(f"Invalid value '{value}' for '{key}', keeping default {default}")
    return None


def read_config_file(config_path: Union[str, Path]) -> Any:
    """
    Parses the YAML file and returns its `clean:` section (or None).
    Raises ConfigError when the file exists but is not valid YAML.
    """
    yaml = YAML(typ="safe")
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            document = yaml.load(f)
    except (YAMLError, UnicodeDecodeError) as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}")
    except OSError as e:
        raise ConfigError(f"Cannot read {config_path}: {e}")

    if not isinstance(document, dict):
        return None
    return document.get("clean")


def load_config(config_path: Optional[Union[str, Path]] = None) -> RuleConfig:
    """
    Loads configuration from a YAML file, falling back to defaults.

    A missing file is normal and silent; an invalid one is reported
    as a warning and the defaults are used.
    """
    path = Path(config_path or DEFAULT_CONFIG_FILE)
    if not path.is_file():
        logger.debug(f"No configuration file at {path}, using defaults")
        return RuleConfig()

    try:
        section = read_config_file(path)
    except ConfigError as e:
        logger.warning(f"{e.message}. Using default configuration.")
        return RuleConfig()

    logger.debug(f"Configuration loaded from {path}")
    return RuleConfig.from_mapping(section)


def write_default_config(config_path: Union[str, Path] = DEFAULT_CONFIG_FILE) -> Path:
    """Writes a documented default `clean:` section to a new YAML file."""
    path = Path(config_path)
    if path.exists():
        raise ConfigError(f"Refusing to overwrite existing file: {path}")

    rules = CommentedMap(DEFAULT_RULES)
    severity = CommentedMap((rule, level.value) for rule, level in DEFAULT_SEVERITY.items())
    clean = CommentedMap([("rules", rules), ("severity", severity)])
    clean.yaml_set_comment_before_after_key("severity", before="error severities fail the lint run", indent=2)
    document = CommentedMap([("clean", clean)])
    document.yaml_set_start_comment("cleansh configuration")

    yaml = YAML(typ="rt")
    yaml.indent(mapping=2, sequence=4, offset=2)
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(document, f)
    return path
