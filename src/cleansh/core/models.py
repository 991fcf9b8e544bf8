#!/usr/bin/env python3
"""
CLEANSH CORE MODELS
-------------------
Defines the fundamental data structures shared by the classifier,
the rule engine and the file driver. These models represent the
lowest level of script abstraction: one physical line at a time.

Author: cleansh maintainers
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List


class LineContext(str, Enum):
    """
    Lexical classification of a whole line.

    Declaration order is the classification priority: the first
    matching context wins (see healing.lexer.classify_line).
    """
    EMPTY = "empty"
    SHEBANG = "shebang"
    COMMENT = "comment"
    HEREDOC_START = "heredoc_start"
    REGEX = "regex"
    ARITHMETIC = "arithmetic"
    SUBSTITUTION = "substitution"
    EXPANSION = "expansion"
    BRACE_EXPANSION = "brace_expansion"
    NORMAL = "normal"


class Severity(str, Enum):
    """Issue severity. Only ERROR affects the exit status."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @classmethod
    def parse(cls, value: str) -> "Severity":
        return cls(str(value).strip().lower())


class Rule(str, Enum):
    """Identifiers of every style rule, as used in issues and config."""
    LINE_LENGTH = "line_length"
    BRACKET_STYLE = "bracket_style"
    DEPRECATED_SYNTAX = "deprecated_syntax"
    SPACING_ISSUES = "spacing_issues"
    MISSING_QUOTES = "missing_quotes"
    INDENTATION = "indentation"
    BRACE_SPACING = "brace_spacing"
    COMMA_SPACING = "comma_spacing"


class DriverState(str, Enum):
    """States of the per-file formatting state machine."""
    NORMAL = "NORMAL"
    IN_HEREDOC = "IN_HEREDOC"
    IN_CONTINUATION = "IN_CONTINUATION"


@dataclass(frozen=True)
class Line:
    """
    The atomic unit of a shell script.

    A Line is never mutated; fixers return a new text which the
    driver wraps into a fresh Line when it needs one.
    """
    number: int             # 1-based position in the source file
    text: str               # Raw content without the trailing newline


@dataclass
class Issue:
    """A single style violation reported in lint mode."""
    severity: Severity
    rule: str
    line_number: int
    message: str

    def __post_init__(self):
        if self.line_number < 1:
            raise ValueError("Line number must be positive")


@dataclass
class ParsedLine:
    """One record of the parse/debug dump."""
    line_number: int
    context: LineContext
    tokens: List[str] = field(default_factory=list)
    in_heredoc: bool = False    # Body line of an open heredoc
    heredoc_end: bool = False   # The delimiter line closing a heredoc
    glob: bool = False          # Contains *, ? or [...]
