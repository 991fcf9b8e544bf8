#!/usr/bin/env python3
"""
CLEANSH SCANNER - Debug Tokenizer
---------------------------------
Splits lines into whitespace-separated words (quoted strings stay in
one piece) and labels each line with its context. The result backs the
`parse` command, a human-readable dump that nothing else consumes.

Author: cleansh maintainers
"""

from typing import Iterable, List

from cleansh.core.models import LineContext, ParsedLine
from cleansh.healing.context import ParseState
from cleansh.healing.lexer import (
    classify_line,
    extract_heredoc_delimiter,
    is_glob_pattern,
    is_heredoc_end,
)


class ShellScanner:
    """
    Produces one ParsedLine per source line. Heredoc bodies are
    reported as a single raw token and flagged, never tokenized.
    """

    def tokenize(self, line: str) -> List[str]:
        """
        Word-splits a line outside quotes. Quote characters stay part
        of their token; a backslash keeps the next character literal.
        """
        tokens = []
        current = ""
        quote = ""
        escaped = False

        for char in line:
            if escaped:
                current += char
                escaped = False
                continue
            if char == "\\" and quote != "'":
                current += char
                escaped = True
                continue
            if quote:
                current += char
                if char == quote:
                    quote = ""
                continue
            if char in ('"', "'"):
                quote = char
                current += char
                continue
            if char.isspace():
                if current:
                    tokens.append(current)
                    current = ""
                continue
            current += char

        if current:
            tokens.append(current)
        return tokens

    def scan(self, lines: Iterable[str]) -> List[ParsedLine]:
        state = ParseState()
        records = []

        for number, text in enumerate(lines, 1):
            if state.in_heredoc:
                if is_heredoc_end(text, state.heredoc_delimiter):
                    state.leave_heredoc()
                    records.append(ParsedLine(number, LineContext.NORMAL, [text.strip()], heredoc_end=True))
                else:
                    records.append(ParsedLine(number, LineContext.NORMAL, [text], in_heredoc=True))
                continue

            context = classify_line(text)
            if context == LineContext.HEREDOC_START:
                state.enter_heredoc(extract_heredoc_delimiter(text))

            if context in (LineContext.EMPTY, LineContext.SHEBANG, LineContext.COMMENT):
                tokens = [text] if text else []
            else:
                tokens = self.tokenize(text)
            records.append(ParsedLine(number, context, tokens, glob=is_glob_pattern(text)))

        return records


def render_dump(path: str, records: List[ParsedLine]) -> str:
    """Formats scanned records the way the `parse` command prints them."""
    out = [f"=== AST for {path} ===", ""]
    for record in records:
        flags = []
        if record.in_heredoc:
            flags.append("heredoc body")
        if record.heredoc_end:
            flags.append("heredoc end")
        if record.glob:
            flags.append("glob")
        suffix = f" ({', '.join(flags)})" if flags else ""
        out.append(f"Line {record.line_number}: {record.context.value}{suffix}")

        label = record.context.value.upper() if record.context in (
            LineContext.SHEBANG, LineContext.COMMENT) else "TOKEN"
        for token in record.tokens:
            out.append(f"  {label}:{token}")
    return "\n".join(out)
