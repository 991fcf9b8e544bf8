#!/usr/bin/env python3
"""
CLEANSH STYLE CHECKS - Lint Mode
--------------------------------
The StyleChecker evaluates one line at a time against the configured
style rules and reports violations as Issue records. It never edits.

Severity is looked up from the configuration by rule name, so a team
can promote or demote any rule without touching the checks.

Author: cleansh maintainers
"""

import re
from typing import List, Optional

from cleansh.core.config import RuleConfig
from cleansh.core.models import Issue, LineContext, Rule
from cleansh.healing.lexer import classify_line, leading_whitespace, scan_quote_state
from cleansh.rules.fixers import (
    OPERATOR_AFTER_TEST_PATTERN,
    OPERATOR_BEFORE_TEST_PATTERN,
    SINGLE_BRACKET_PATTERN,
    find_test_commands,
    is_guarded,
    is_unquoted_span,
)

UNQUOTED_ASSIGNMENT_PATTERN = re.compile(r"=\s*\$[a-zA-Z_]")
QUOTED_ASSIGNMENT_PATTERN = re.compile(r"=\s*[\"']")


class StyleChecker:
    """
    Runs the active checks in a fixed order. Issues for one line come
    out in that order: length, brackets, operators, quoting, indentation.
    """

    def __init__(self, config: RuleConfig):
        self.config = config
        self.active_checks = [
            self._check_line_length,
            self._check_bracket_style,
            self._check_operator_spacing,
            self._check_variable_quoting,
            self._check_indentation,
        ]

    def check_line(self, line: str, line_number: int) -> List[Issue]:
        """Returns every issue found on one line (outside heredocs)."""
        if classify_line(line) in (LineContext.EMPTY, LineContext.SHEBANG):
            return []

        issues = []
        for check in self.active_checks:
            issue = check(line, line_number)
            if issue:
                issues.append(issue)
        return issues

    def _issue(self, rule: Rule, line_number: int, message: str) -> Issue:
        return Issue(
            severity=self.config.get_severity(rule.value),
            rule=rule.value,
            line_number=line_number,
            message=message,
        )

    def _check_line_length(self, line: str, line_number: int) -> Optional[Issue]:
        """Length is independent of context: comments and strings count too."""
        limit = self.config.max_line_length
        if len(line) > limit:
            return self._issue(
                Rule.LINE_LENGTH, line_number,
                f"Line exceeds maximum length of {limit} characters (current: {len(line)})"
            )
        return None

    def _check_bracket_style(self, line: str, line_number: int) -> Optional[Issue]:
        if is_guarded(line, Rule.BRACKET_STYLE.value, self.config):
            return None

        for match in SINGLE_BRACKET_PATTERN.finditer(line):
            if is_unquoted_span(line, match):
                return self._issue(Rule.BRACKET_STYLE, line_number, "Use [[ ]] instead of [ ]")

        if not self.config.is_rule_enabled(Rule.DEPRECATED_SYNTAX.value):
            return None
        if next(find_test_commands(line), None) is not None:
            return self._issue(
                Rule.DEPRECATED_SYNTAX, line_number, "Use [[ ]] instead of 'test' command"
            )
        return None

    def _check_operator_spacing(self, line: str, line_number: int) -> Optional[Issue]:
        if is_guarded(line, Rule.SPACING_ISSUES.value, self.config):
            return None

        for operator in ("&&", "||"):
            after = OPERATOR_AFTER_TEST_PATTERN.search(line)
            before = OPERATOR_BEFORE_TEST_PATTERN.search(line)
            if (after and after.group(1) == operator) or (before and before.group(1) == operator):
                return self._issue(
                    Rule.SPACING_ISSUES, line_number, f"Missing space around {operator} operator"
                )
        return None

    def _check_variable_quoting(self, line: str, line_number: int) -> Optional[Issue]:
        """Informational: a bare `= $var` assignment. Never auto-fixed."""
        if is_guarded(line, Rule.MISSING_QUOTES.value, self.config):
            return None

        match = UNQUOTED_ASSIGNMENT_PATTERN.search(line)
        if not match or QUOTED_ASSIGNMENT_PATTERN.search(line):
            return None
        if scan_quote_state(line, match.start()):
            return None
        return self._issue(Rule.MISSING_QUOTES, line_number, "Consider quoting variable assignments")

    def _check_indentation(self, line: str, line_number: int) -> Optional[Issue]:
        if not self.config.is_rule_enabled(Rule.INDENTATION.value):
            return None
        if classify_line(line) == LineContext.COMMENT:
            return None
        if "\t" in leading_whitespace(line):
            return self._issue(
                Rule.INDENTATION, line_number, "Use spaces instead of tabs for indentation"
            )
        return None
