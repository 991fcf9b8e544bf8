#!/usr/bin/env python3
"""
CLEANSH LEXER - Context Classifier
----------------------------------
Decides which lexical context a line (or a position inside it) belongs
to: quoted string, comment, heredoc marker, or one of the protected
shell forms (regex test, arithmetic, command substitution, parameter
expansion, brace expansion).

The checks are structural regex tests rather than a real tokenizer.
Everything the rule engine needs goes through the functions of this
module, so a proper lexer can replace them without touching the rules.

Author: cleansh maintainers
"""

import re
from typing import Optional

from cleansh.core.models import LineContext

# `<<`, `<<-`, then an identifier, a quoted word or an all-caps word.
# A third `<` on either side is a here-string, not a heredoc.
HEREDOC_PATTERN = re.compile(
    r"(?<!<)<<-?(?!<)[ \t]*([A-Za-z_][A-Za-z0-9_]*|'[^']+'|\"[^\"]+\"|[A-Z]+)"
)
REGEX_PATTERN = re.compile(r"\[\[.*=~.*\]\]")
ARITHMETIC_PATTERN = re.compile(r"\$\(\(")
SUBSTITUTION_PATTERN = re.compile(r"\$\(|`")
EXPANSION_PATTERN = re.compile(r"\$\{[^}]+\}")
BRACE_LIST_PATTERN = re.compile(r"\{[^}]*,[^}]*\}")
BRACE_RANGE_PATTERN = re.compile(r"\{[0-9]+\.\.[0-9]+\}")
GLOB_PATTERN = re.compile(r"\*|\?|\[[^\]]+\]")
COMMENT_PATTERN = re.compile(r"^\s*#")

PROTECTED_CONTEXTS = frozenset({
    LineContext.SHEBANG,
    LineContext.COMMENT,
    LineContext.HEREDOC_START,
    LineContext.REGEX,
    LineContext.ARITHMETIC,
    LineContext.SUBSTITUTION,
    LineContext.EXPANSION,
    LineContext.BRACE_EXPANSION,
})


def scan_quote_state(text: str, upto: Optional[int] = None) -> bool:
    """
    Returns True when position `upto` of `text` lies inside an open
    single- or double-quoted string. Scans `text[:upto]` once.
    """
    end = len(text) if upto is None else max(0, min(upto, len(text)))
    quote = ""
    escaped = False
    for char in text[:end]:
        if escaped:
            escaped = False
            continue
        if char == "\\":
            escaped = True
            continue
        if not quote:
            if char in ('"', "'"):
                quote = char
        elif char == quote:
            quote = ""
    return bool(quote)


def has_protected_special_chars(line: str) -> bool:
    """
    True if a `[`, `&&` or `||` appears inside a quoted string.
    Fixers leave such lines alone so string content is never rewritten.
    """
    quote = ""
    prev = ""
    for i, char in enumerate(line):
        if prev != "\\" and char in ('"', "'"):
            if not quote:
                quote = char
            elif char == quote:
                quote = ""
        if quote:
            pair = line[i:i + 2]
            if char == "[" or pair in ("&&", "||"):
                return True
        prev = char
    return False


def _find_heredoc_match(line: str) -> Optional[re.Match]:
    for match in HEREDOC_PATTERN.finditer(line):
        if not scan_quote_state(line, match.start()):
            return match
    return None


def detect_heredoc_start(line: str) -> bool:
    """True if the line opens a heredoc (outside of any quoted string)."""
    return _find_heredoc_match(line) is not None


def extract_heredoc_delimiter(line: str) -> str:
    """
    Returns the heredoc delimiter word with its quotes removed.
    Quoting changes how the body expands, not how its end is matched.
    """
    match = _find_heredoc_match(line)
    if not match:
        return ""
    return match.group(1).replace("'", "").replace('"', "")


def is_heredoc_end(line: str, delimiter: str) -> bool:
    return bool(delimiter) and line.strip() == delimiter


def is_comment(line: str) -> bool:
    return bool(COMMENT_PATTERN.match(line))


def is_regex_context(line: str) -> bool:
    return bool(REGEX_PATTERN.search(line))


def is_arithmetic_expansion(line: str) -> bool:
    return bool(ARITHMETIC_PATTERN.search(line))


def is_command_substitution(line: str) -> bool:
    return bool(SUBSTITUTION_PATTERN.search(line))


def is_parameter_expansion(line: str) -> bool:
    return bool(EXPANSION_PATTERN.search(line))


def is_brace_expansion(line: str) -> bool:
    return bool(BRACE_LIST_PATTERN.search(line) or BRACE_RANGE_PATTERN.search(line))


def is_glob_pattern(line: str) -> bool:
    return bool(GLOB_PATTERN.search(line))


def classify_line(line: str) -> LineContext:
    """
    Classifies a whole line. The first matching context wins, in the
    order empty, shebang, comment, heredoc start, regex, arithmetic,
    substitution, expansion, brace expansion.
    """
    if not line:
        return LineContext.EMPTY
    if line.startswith("#!"):
        return LineContext.SHEBANG
    if is_comment(line):
        return LineContext.COMMENT
    if detect_heredoc_start(line):
        return LineContext.HEREDOC_START
    if is_regex_context(line):
        return LineContext.REGEX
    if is_arithmetic_expansion(line):
        return LineContext.ARITHMETIC
    if is_command_substitution(line):
        return LineContext.SUBSTITUTION
    if is_parameter_expansion(line):
        return LineContext.EXPANSION
    if is_brace_expansion(line):
        return LineContext.BRACE_EXPANSION
    return LineContext.NORMAL


def is_protected_context(line: str) -> bool:
    """True when no content fixer may touch the line."""
    return classify_line(line) in PROTECTED_CONTEXTS


def find_comment_split(line: str) -> int:
    """
    Index of the `#` that starts a trailing comment, or -1.
    Hashes inside quotes or glued to a word (`$#`, `${#x}`) don't count.
    """
    quote = ""
    escaped = False
    for i, char in enumerate(line):
        if escaped:
            escaped = False
            continue
        if char == "\\":
            escaped = True
            continue
        if not quote and char in ('"', "'"):
            quote = char
        elif char == quote:
            quote = ""
        elif char == "#" and not quote:
            if i == 0 or line[i - 1].isspace():
                return i
    return -1


def code_part(line: str) -> str:
    """The line with any trailing comment removed."""
    split_idx = find_comment_split(line)
    return line[:split_idx] if split_idx != -1 else line


def strip_continuation(line: str) -> str:
    """Removes the trailing continuation backslash (and whitespace around it)."""
    body = line.rstrip()
    if has_line_continuation(body):
        body = body[:-1]
    return body.rstrip()


def has_line_continuation(line: str) -> bool:
    """
    True if the line ends with an unescaped backslash, ignoring
    trailing whitespace. `\\\\` at the end is a literal backslash.
    """
    body = line.rstrip()
    trailing = len(body) - len(body.rstrip("\\"))
    return trailing % 2 == 1


def leading_whitespace(line: str) -> str:
    return line[:len(line) - len(line.lstrip())]
