#!/usr/bin/env python3
"""
CLEANSH VALIDATOR - The Judge
-----------------------------
The final safety gate before a formatted script is written to disk.
It compares the formatted lines with the original and refuses output
that is empty or that altered any heredoc block.

Author: cleansh maintainers
"""

import logging
from typing import List, Tuple

from cleansh.core.models import LineContext
from cleansh.healing.context import ParseState
from cleansh.healing.lexer import classify_line, extract_heredoc_delimiter, is_heredoc_end

# Standardized logging for audit trails
logger = logging.getLogger("cleansh.validator")


class FormatValidator:
    """
    Provides the 'Self-Abort' signal: when validation fails the engine
    keeps the original file untouched.
    """

    def extract_heredocs(self, lines: List[str]) -> List[List[str]]:
        """Returns every heredoc block (start line, body, terminator)."""
        state = ParseState()
        blocks = []
        current: List[str] = []

        for text in lines:
            if state.in_heredoc:
                current.append(text)
                if is_heredoc_end(text, state.heredoc_delimiter):
                    state.leave_heredoc()
                    blocks.append(current)
                    current = []
                continue
            if classify_line(text) == LineContext.HEREDOC_START:
                state.enter_heredoc(extract_heredoc_delimiter(text))
                current = [text]

        # Unterminated heredoc runs to end of file
        if current:
            blocks.append(current)
        return blocks

    def validate(self, original: List[str], formatted: List[str]) -> Tuple[bool, str]:
        if not formatted:
            return False, "Generated empty file"

        before = self.extract_heredocs(original)
        after = self.extract_heredocs(formatted)
        if before != after:
            logger.debug(f"Heredoc blocks differ: {len(before)} before, {len(after)} after")
            return False, "Heredoc content changed during formatting"

        return True, "Formatted output passes the safety checks."
