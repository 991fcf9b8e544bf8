#!/usr/bin/env python3
"""
CLEANSH STYLE FIXERS - Format Mode
----------------------------------
Each fixer takes one line and returns it corrected, or unchanged when
the rule is disabled, the line is protected, or nothing matches.

Every fixer is idempotent: its detection pattern never matches its own
output, so running the formatter twice changes nothing the second time.

Author: cleansh maintainers
"""

import re
from typing import Callable, Iterator, List, Optional, Tuple

from cleansh.core.config import RuleConfig
from cleansh.core.models import LineContext, Rule
from cleansh.healing.lexer import (
    classify_line,
    code_part,
    has_line_continuation,
    has_protected_special_chars,
    is_brace_expansion,
    is_protected_context,
    scan_quote_state,
)

# `[ expr ]` that is not part of `[[ ]]`, an array subscript or `$[ ]`
SINGLE_BRACKET_PATTERN = re.compile(r"(?<![\[\w$])\[(\s+)([^\[\]]*?)(\s+)\](?!\])")
# `[[ expr ]` closed by a single bracket before an operator or end of command
MIXED_BRACKET_PATTERN = re.compile(r"(\[\[[^\]]*\s)\](?!\])(?=\s*(?:&&|\|\||;|$))")
TEST_WORD_PATTERN = re.compile(r"(?<![\w\-./$])test\s+")
TEST_TERMINATOR_PATTERN = re.compile(r";\s*(then|do)\b")
# What may precede a command word: start of line, a separator, or a keyword
COMMAND_POSITION_PATTERN = re.compile(r"(^|[;&|(!{]|\b(if|elif|while|until|then|do|else))\s*$")
# Control operators end the `test` expression; the expression can't be rewritten whole
CONTROL_OPERATOR_PATTERN = re.compile(r"[;&|]")
# -a / -o mean something else inside [[ ]]
POSIX_CONNECTIVE_PATTERN = re.compile(r"\s-[ao]\s")
OPERATOR_AFTER_TEST_PATTERN = re.compile(r"\]\](&&|\|\|)")
OPERATOR_BEFORE_TEST_PATTERN = re.compile(r"(&&|\|\|)\[\[")
BRACE_PATTERN = re.compile(r"(\)|\bthen|\bdo)\{")
COMMA_PATTERN = re.compile(r",(?=\S)")
WRAP_POINT_PATTERN = re.compile(r"\s(&&|\|\|)\s")


def is_guarded(line: str, rule: str, config: RuleConfig) -> bool:
    """
    The shared skip sequence: disabled rule, protected context,
    then operator-like characters inside a quoted string.
    """
    if not config.is_rule_enabled(rule):
        return True
    if is_protected_context(line):
        return True
    return has_protected_special_chars(line)


def is_unquoted_span(line: str, match: re.Match) -> bool:
    """Both ends of the match lie outside quoted strings."""
    if scan_quote_state(line, match.start()):
        return False
    return not scan_quote_state(line, max(match.start(), match.end() - 1))


def _has_unquoted(text: str, pattern: re.Pattern) -> bool:
    return any(not scan_quote_state(text, m.start()) for m in pattern.finditer(text))


def find_test_commands(line: str) -> Iterator[Tuple[re.Match, Optional[re.Match]]]:
    """
    Yields every unquoted `test` command word together with the
    `; then` / `; do` that ends its expression, or None when the first
    unquoted `;` after it is something else.
    """
    for word in TEST_WORD_PATTERN.finditer(line):
        if scan_quote_state(line, word.start()):
            continue
        if not COMMAND_POSITION_PATTERN.search(line[:word.start()]):
            continue
        terminator = None
        for semicolon in re.finditer(";", line[word.end():]):
            index = word.end() + semicolon.start()
            if scan_quote_state(line, index):
                continue
            terminator = TEST_TERMINATOR_PATTERN.match(line, index)
            break
        yield word, terminator


def _convert_test_commands(line: str) -> str:
    pieces = []
    cursor = 0
    for word, terminator in find_test_commands(line):
        if terminator is None or word.start() < cursor:
            continue
        expr = line[word.end():terminator.start()].rstrip()
        if not expr or POSIX_CONNECTIVE_PATTERN.search(f" {expr} "):
            continue
        if _has_unquoted(expr, CONTROL_OPERATOR_PATTERN):
            continue
        pieces.append(line[cursor:word.start()])
        pieces.append(f"[[ {expr} ]]; {terminator.group(1)}")
        cursor = terminator.end()
    pieces.append(line[cursor:])
    return "".join(pieces)


def _outside_quotes(line: str, pattern: re.Pattern, replace: Callable[[re.Match], str]) -> str:
    def _sub(match):
        if not is_unquoted_span(line, match):
            return match.group(0)
        return replace(match)
    return pattern.sub(_sub, line)


def fix_brackets(line: str, config: RuleConfig) -> str:
    """
    `[ expr ]` -> `[[ expr ]]`, `test expr; then` -> `[[ expr ]]; then`,
    and `[[ expr ] &&` -> `[[ expr ]] &&`.
    """
    if is_guarded(line, Rule.BRACKET_STYLE.value, config):
        return line

    def _single(match):
        if POSIX_CONNECTIVE_PATTERN.search(match.group(2)):
            return match.group(0)
        return f"[[{match.group(1)}{match.group(2)}{match.group(3)}]]"

    fixed = _convert_test_commands(line)
    fixed = _outside_quotes(fixed, SINGLE_BRACKET_PATTERN, _single)
    fixed = _outside_quotes(fixed, MIXED_BRACKET_PATTERN, lambda m: f"{m.group(1)}]]")
    return fixed


def fix_operator_spacing(line: str, config: RuleConfig) -> str:
    """`]]&&[[` -> `]] && [[`; only the missing side gets a space."""
    if is_guarded(line, Rule.SPACING_ISSUES.value, config):
        return line
    if "=~" in line:
        return line
    fixed = OPERATOR_AFTER_TEST_PATTERN.sub(r"]] \1", line)
    return OPERATOR_BEFORE_TEST_PATTERN.sub(r"\1 [[", fixed)


def fix_brace_spacing(line: str, config: RuleConfig) -> str:
    """`){`, `then{`, `do{` get a space before the brace."""
    if is_guarded(line, Rule.BRACE_SPACING.value, config):
        return line
    return _outside_quotes(line, BRACE_PATTERN, lambda m: f"{m.group(1)} {{")


def fix_comma_spacing(line: str, config: RuleConfig) -> str:
    """One space after each comma outside quotes, except in brace expansions."""
    if is_guarded(line, Rule.COMMA_SPACING.value, config):
        return line
    if is_brace_expansion(line):
        return line
    return _outside_quotes(line, COMMA_PATTERN, lambda m: ", ")


def fix_indentation(line: str, indent_level: int, config: RuleConfig, in_heredoc: bool = False) -> str:
    """
    Replaces leading whitespace with `indent_level * indent_size` spaces.
    Heredoc bodies, comments, shebangs and blank lines are left as they are.
    """
    if not config.is_rule_enabled(Rule.INDENTATION.value) or in_heredoc:
        return line
    if classify_line(line) in (LineContext.EMPTY, LineContext.SHEBANG, LineContext.COMMENT):
        return line
    trimmed = line.lstrip()
    if not trimmed:
        return line
    return " " * (indent_level * config.indent_size) + trimmed


def wrap_long_line(line: str, config: RuleConfig) -> List[str]:
    """
    Splits an over-long line at its rightmost `&&` or `||` into
    `part1 <op> \\` and a continuation line one indent step deeper.

    Lines without a safe split point stay as they are. Pipes are never
    used as split points: `... \\` followed by `| ...` reads like a
    doubled operator on the next pass.
    """
    if len(line) <= config.max_line_length:
        return [line]
    if is_guarded(line, Rule.LINE_LENGTH.value, config):
        return [line]
    if has_line_continuation(line) or "=~" in line:
        return [line]

    # A trailing comment rides along with the tail, never provides a split point
    code = code_part(line)
    split = None
    for match in WRAP_POINT_PATTERN.finditer(code):
        if not scan_quote_state(code, match.start()):
            split = match
    if split is None:
        return [line]

    head = line[:split.start()].rstrip()
    tail = line[split.end():].strip()
    if not head.strip() or not code[split.end():].strip():
        return [line]

    indent = line[:len(line) - len(line.lstrip())]
    step = " " * config.indent_size
    return [f"{head} {split.group(1)} \\", f"{indent}{step}{tail}"]


# Content fixers in application order. Brackets run before operator
# spacing so the spacing pass sees the final `[[ ]]` shapes.
CONTENT_FIXERS: List[Tuple[str, Callable[[str, RuleConfig], str]]] = [
    (Rule.BRACKET_STYLE.value, fix_brackets),
    (Rule.SPACING_ISSUES.value, fix_operator_spacing),
    (Rule.BRACE_SPACING.value, fix_brace_spacing),
    (Rule.COMMA_SPACING.value, fix_comma_spacing),
]


def format_line(line: str, indent_level: int, config: RuleConfig,
                in_heredoc: bool = False, wrap: bool = True) -> List[str]:
    """
    Runs every fixer over one line and returns the output line(s):
    one line, or two when the line was wrapped. Lines that belong to a
    continuation group are never wrapped (`wrap=False`).
    """
    if in_heredoc:
        return [line]
    context = classify_line(line)
    if context in (LineContext.EMPTY, LineContext.SHEBANG, LineContext.COMMENT):
        return [line]

    fixed = line
    for _, fixer in CONTENT_FIXERS:
        fixed = fixer(fixed, config)

    fixed = fix_indentation(fixed, indent_level, config)
    if not wrap:
        return [fixed]
    return wrap_long_line(fixed, config)
