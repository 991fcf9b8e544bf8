from cleansh.core.models import LineContext, ParsedLine
from cleansh.healing.scanner import ShellScanner, render_dump


def test_tokenize_keeps_quoted_words_together():
    scanner = ShellScanner()
    assert scanner.tokenize('echo "a b" \'c d\' e\\ f') == ['echo', '"a b"', "'c d'", "e\\ f"]
    assert scanner.tokenize("   ") == []


def test_render_dump():
    records = [
        ParsedLine(1, LineContext.SHEBANG, ["#!/bin/sh"]),
        ParsedLine(2, LineContext.HEREDOC_START, ["cat", "<<EOF"]),
        ParsedLine(3, LineContext.NORMAL, ["body *"], in_heredoc=True),
        ParsedLine(4, LineContext.NORMAL, ["EOF"], heredoc_end=True),
        ParsedLine(5, LineContext.NORMAL, ["ls", "*.sh"], glob=True),
    ]
    assert render_dump("run.sh", records).splitlines() == [
        "=== AST for run.sh ===",
        "",
        "Line 1: shebang",
        "  SHEBANG:#!/bin/sh",
        "Line 2: heredoc_start",
        "  TOKEN:cat",
        "  TOKEN:<<EOF",
        "Line 3: normal (heredoc body)",
        "  TOKEN:body *",
        "Line 4: normal (heredoc end)",
        "  TOKEN:EOF",
        "Line 5: normal (glob)",
        "  TOKEN:ls",
        "  TOKEN:*.sh",
    ]
