"""Property-based tests for the formatter's safety guarantees."""

from hypothesis import given, strategies as st

from cleansh.core.config import RuleConfig
from cleansh.healing.pipeline import CleanPipeline
from cleansh.rules.checks import StyleChecker
from cleansh.rules.fixers import format_line

CONFIG = RuleConfig()

SCRIPT_LINES = [
    "",
    "#!/bin/bash",
    "# a comment with [ brackets ] and a,b",
    "if [ -f x ]; then",
    "if test -n \"$y\"; then",
    "elif [[ -d z ]]; then",
    "else",
    "fi",
    "for i in {1..3}; do",
    "while true; do",
    "done",
    "main(){",
    "}",
    "case \"$1\" in",
    "a) echo a ;;",
    "esac",
    "[[ -f a ]]&&[[ -f b ]]",
    "\techo tabbed",
    "echo a,b,c",
    "x=$y",
    "n=$((n + 1))",
    "echo \"[ quoted ]\" && [ -f q ]",
    "make all \\",
    "--quiet",
    "cat file | \\",
    "| grep x",
    "cat <<EOF",
    "EOF",
    "echo " + "a" * 60 + " && echo " + "b" * 60,
]

script_strategy = st.lists(st.sampled_from(SCRIPT_LINES), max_size=30)
body_line_strategy = st.text(
    alphabet=st.characters(exclude_categories=("Cs",)), max_size=40
).filter(lambda s: s.strip() != "EOF")


def _format(lines):
    return CleanPipeline(CONFIG).format(lines)


@given(script_strategy)
def test_format_is_idempotent(lines):
    first = _format(lines)
    second = _format(first.lines)
    assert second.lines == first.lines
    assert second.fixes == 0


@given(
    st.lists(st.sampled_from(SCRIPT_LINES[:22]), max_size=10),
    st.lists(body_line_strategy, max_size=10),
)
def test_heredoc_body_is_never_modified(prefix, body):
    lines = prefix + ["cat <<EOF"] + body + ["EOF", "echo a,b"]
    formatted = _format(lines).lines
    start = formatted.index("cat <<EOF")
    assert formatted[start:start + len(body) + 2] == ["cat <<EOF"] + body + ["EOF"]


@given(
    st.sampled_from(["", "  ", "\t"]),
    st.text(alphabet=st.characters(exclude_categories=("Cs", "Zl", "Zp", "Cc")), max_size=60),
    st.integers(min_value=0, max_value=5),
)
def test_comment_lines_are_never_modified(indent, text, level):
    line = f"{indent}#{text}"
    assert format_line(line, level, CONFIG) == [line]
    assert StyleChecker(CONFIG).check_line(line, 1) == []


# Quote-safe fragments: operators, brackets and keywords, no quotes or expansions
QUOTED_TOKENS = ["[", "]", ";", " then", "&&", "||", ",", "|", "{", "}", "(", ")", "test ", "do", " ", "a", "b ]"]
quoted_strategy = st.lists(st.sampled_from(QUOTED_TOKENS), max_size=10).map("".join)


@given(
    st.sampled_from([
        'if [ -n "{}" ]; then',
        'if test -n "{}"; then',
        'echo "{}",x',
        '[[ -f "{}" ]]&&[[ -d y ]]',
    ]),
    quoted_strategy,
)
def test_quoted_strings_are_never_modified(template, text):
    line = template.format(text)
    formatted = "\n".join(format_line(line, 0, CONFIG))
    assert f'"{text}"' in formatted
