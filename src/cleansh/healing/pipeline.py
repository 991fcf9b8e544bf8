#!/usr/bin/env python3
"""
CLEANSH PIPELINE - The Line Driver
----------------------------------
Walks a script's lines exactly once, carrying a ParseState forward,
and feeds every line that is safe to touch to the rule engine.

States:
    NORMAL          -> lines go to the checks / fixers one at a time
    IN_HEREDOC      -> heredoc start, body and terminator pass through untouched
    IN_CONTINUATION -> lines ending in a backslash are buffered until the
                       command ends, then emitted as a group

Lint and format share the heredoc tracking; only format buffers
continuations, since lint looks at each physical line on its own.

Author: cleansh maintainers
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, List

from cleansh.core.config import RuleConfig
from cleansh.core.models import Issue, Line, LineContext
from cleansh.healing.context import ParseState
from cleansh.healing.lexer import (
    classify_line,
    extract_heredoc_delimiter,
    has_line_continuation,
    is_comment,
    is_heredoc_end,
    leading_whitespace,
    strip_continuation,
)
from cleansh.rules.checks import StyleChecker
from cleansh.rules.fixers import format_line

TRAILING_PIPE_PATTERN = re.compile(r"(?<!\|)\|\s*$")
LEADING_PIPE_PATTERN = re.compile(r"^\|\s")
DUPLICATE_PIPE_PATTERN = re.compile(r"(?<!\|)\|\s+\|(?!\|)\s*")


@dataclass
class FormatResult:
    """Output of one format run: the rewritten lines and the fix count."""
    lines: List[str] = field(default_factory=list)
    fixes: int = 0


class CleanPipeline:
    """
    The Orchestrator: threads ParseState through the lines in source
    order. Cross-line state only moves forward; nothing is re-read.
    """

    def __init__(self, config: RuleConfig):
        self.config = config
        self.checker = StyleChecker(config)

    def lint(self, lines: Iterable[str]) -> List[Issue]:
        """Returns issues ordered by line number, then by check order."""
        state = ParseState()
        issues = []

        for number, text in enumerate(lines, 1):
            if state.in_heredoc:
                if is_heredoc_end(text, state.heredoc_delimiter):
                    state.leave_heredoc()
                continue

            if classify_line(text) == LineContext.HEREDOC_START:
                state.enter_heredoc(extract_heredoc_delimiter(text))
                continue

            issues.extend(self.checker.check_line(text, number))

        return issues

    def format(self, lines: Iterable[str]) -> FormatResult:
        """Rewrites the lines; heredoc blocks come out byte-for-byte."""
        state = ParseState()
        result = FormatResult()

        for number, text in enumerate(lines, 1):
            line = Line(number, text)

            # --- IN_HEREDOC: verbatim until the delimiter line ---
            if state.in_heredoc:
                result.lines.append(text)
                if is_heredoc_end(text, state.heredoc_delimiter):
                    state.leave_heredoc()
                continue

            # --- NORMAL -> IN_HEREDOC: checked before continuations ---
            if classify_line(text) == LineContext.HEREDOC_START:
                self._flush_group(state, state.take_continuation(), result)
                state.enter_heredoc(extract_heredoc_delimiter(text))
                result.lines.append(text)
                continue

            # --- NORMAL / IN_CONTINUATION: keep buffering ---
            if has_line_continuation(text) and not is_comment(text):
                state.continuation_buffer.append(line)
                continue

            # --- IN_CONTINUATION -> NORMAL: the command ends here ---
            if state.continuation_buffer:
                self._close_continuation(state, line, result)
                continue

            self._process(state, text, result)

        # A file may end in the middle of a continuation
        self._flush_group(state, state.take_continuation(), result)
        return result

    def _process(self, state: ParseState, text: str, result: FormatResult,
                 extra_indent: int = 0, wrap: bool = True) -> bool:
        state.dedent_before(text)
        fixed = format_line(text, state.indent_level + extra_indent, self.config, wrap=wrap)
        state.indent_after(text)

        result.lines.extend(fixed)
        changed = fixed != [text]
        if changed:
            result.fixes += 1
        return changed

    def _flush_group(self, state: ParseState, group: List[Line], result: FormatResult):
        """
        Formats a continuation group line by line, keeping its line
        breaks. Lines after the first sit one indent step deeper.
        """
        for i, line in enumerate(group):
            self._process(state, line.text, result, extra_indent=0 if i == 0 else 1, wrap=False)

    def _close_continuation(self, state: ParseState, terminal: Line, result: FormatResult):
        buffered = state.take_continuation()

        if not self._has_duplicate_pipe(buffered, terminal):
            self._flush_group(state, buffered + [terminal], result)
            return

        joined = self._join_group(buffered, terminal)
        if not self._process(state, joined, result):
            result.fixes += 1

    def _has_duplicate_pipe(self, buffered: List[Line], terminal: Line) -> bool:
        """
        The narrow repair case: `cmd | \\` followed by `| next`, or two
        pipes separated only by whitespace on the closing line.
        """
        previous = strip_continuation(buffered[-1].text)
        closing = terminal.text.lstrip()
        if TRAILING_PIPE_PATTERN.search(previous) and LEADING_PIPE_PATTERN.match(closing):
            return True
        return bool(DUPLICATE_PIPE_PATTERN.search(closing))

    def _join_group(self, buffered: List[Line], terminal: Line) -> str:
        pieces = [strip_continuation(line.text).strip() for line in buffered]
        pieces.append(terminal.text.strip())
        joined = " ".join(piece for piece in pieces if piece)
        joined = DUPLICATE_PIPE_PATTERN.sub("| ", joined)
        return leading_whitespace(buffered[0].text) + joined
