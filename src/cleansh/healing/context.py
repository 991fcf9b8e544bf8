#!/usr/bin/env python3
"""
CLEANSH PARSE STATE
-------------------
The cross-line memory of one file-processing run: heredoc tracking,
indentation depth and the pending backslash-continuation buffer.

Created once per file by the pipeline, discarded at end of file.

Author: cleansh maintainers
"""

import re
from dataclasses import dataclass, field
from typing import List

from cleansh.core.models import DriverState, Line
from cleansh.healing.lexer import code_part

# else/elif close the previous branch and open the next one
CLOSING_PATTERN = re.compile(r"^(\}|(fi|done|esac|else|elif)\b)")
OPENING_PATTERN = re.compile(r"((^|[\s;])(then|do|else)|\{)$")
FUNCTION_HEADER_PATTERN = re.compile(r"^(function\s+)?[a-zA-Z_][a-zA-Z0-9_]*\(\)\s*$")
# `case ... in` opens the block that `esac` closes
CASE_PATTERN = re.compile(r"^case\s.*\sin$")


@dataclass
class ParseState:
    """
    Mutable, file-scoped state threaded through the line loop.

    At most one multi-line construct is in progress at a time:
    heredoc tracking is checked before continuation buffering.
    """
    in_heredoc: bool = False
    heredoc_delimiter: str = ""
    indent_level: int = 0
    continuation_buffer: List[Line] = field(default_factory=list)

    @property
    def state(self) -> DriverState:
        if self.in_heredoc:
            return DriverState.IN_HEREDOC
        if self.continuation_buffer:
            return DriverState.IN_CONTINUATION
        return DriverState.NORMAL

    def enter_heredoc(self, delimiter: str):
        self.in_heredoc = True
        self.heredoc_delimiter = delimiter

    def leave_heredoc(self):
        self.in_heredoc = False
        self.heredoc_delimiter = ""

    def take_continuation(self) -> List[Line]:
        """Returns the buffered lines and empties the buffer."""
        buffered = self.continuation_buffer
        self.continuation_buffer = []
        return buffered

    def dedent_before(self, text: str):
        """Closing tokens dedent the line that carries them."""
        if CLOSING_PATTERN.match(code_part(text).strip()):
            self.indent_level = max(0, self.indent_level - 1)

    def indent_after(self, text: str):
        """Opening tokens and function headers indent the following lines."""
        trimmed = code_part(text).strip()
        if (OPENING_PATTERN.search(trimmed) or FUNCTION_HEADER_PATTERN.match(trimmed)
                or CASE_PATTERN.match(trimmed)):
            self.indent_level += 1
