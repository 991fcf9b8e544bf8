import os
import stat

import pytest

from cleansh.core.engine import CleanEngine
from cleansh.core.errors import InputError
from cleansh.core.models import LineContext, Severity


@pytest.fixture
def engine(config):
    return CleanEngine(config)


def test_lint_file_success_ignores_warnings(engine, write_script):
    path = write_script("#!/bin/bash\nif [ -f x ]; then\n\techo hi\nfi\n")
    issues, success = engine.lint_file(path)
    assert success is True
    assert [i.severity for i in issues] == [Severity.WARNING, Severity.WARNING]


def test_lint_file_fails_on_error_severity(engine, write_script):
    path = write_script("if test -f x; then\n  echo hi\nfi\n")
    issues, success = engine.lint_file(path)
    assert success is False
    assert issues[0].rule == "deprecated_syntax"


def test_check_file_matches_lint(engine, write_script):
    path = write_script("x=$y\n")
    assert engine.check_file(path) == engine.lint_file(path)


def test_missing_file_is_reported_not_raised(engine, tmp_path):
    issues, success = engine.lint_file(tmp_path / "absent.sh")
    assert issues == []
    assert success is False

    fixes, success = engine.format_file(tmp_path / "absent.sh")
    assert (fixes, success) == (0, False)


def test_directory_is_not_a_script(engine, tmp_path):
    with pytest.raises(InputError):
        engine.read_lines(tmp_path)


def test_bom_is_stripped(engine, tmp_path):
    path = tmp_path / "bom.sh"
    path.write_bytes(b"\xef\xbb\xbf#!/bin/sh\necho hi\n")
    assert engine.read_lines(path) == ["#!/bin/sh", "echo hi"]


def test_format_rewrites_in_place(engine, write_script):
    path = write_script("#!/bin/bash\nif [ -f x ]; then\necho hi\nfi\n")
    fixes, success = engine.format_file(path)
    assert success is True
    assert fixes == 2
    assert path.read_text() == "#!/bin/bash\nif [[ -f x ]]; then\n  echo hi\nfi\n"
    assert not list(path.parent.glob("*.cleansh.tmp"))


def test_format_preserves_permissions(engine, write_script):
    path = write_script("main(){\necho hi\n}\n")
    os.chmod(path, 0o750)
    engine.format_file(path)
    assert stat.S_IMODE(path.stat().st_mode) == 0o750


def test_format_is_idempotent_on_disk(engine, write_script):
    path = write_script("for f in a b; do\nif test -n \"$f\"; then\n[[ -f a ]]&&echo ok\nfi\ndone\n")
    engine.format_file(path)
    first = path.read_text()
    fixes, success = engine.format_file(path)
    assert success is True
    assert fixes == 0
    assert path.read_text() == first


def test_dry_run_leaves_file_untouched(engine, write_script):
    content = "if [ -f x ]; then\necho hi\nfi\n"
    path = write_script(content)
    report = engine.format_report(path, dry_run=True)
    assert report["status"] == "PREVIEW"
    assert report["written"] is False
    assert report["content"][0] == "if [[ -f x ]]; then"
    assert path.read_text() == content


def test_empty_file_is_a_generation_error(engine, write_script):
    path = write_script("")
    report = engine.format_report(path)
    assert report["success"] is False
    assert report["status"] == "FAILED"
    assert report["error"] == "Generated empty file"
    assert path.read_text() == ""


def test_heredoc_survives_formatting(engine, write_script):
    content = "cat <<EOF\n\t[ keep ]  a,b\nEOF\necho a,b\n"
    path = write_script(content)
    engine.format_file(path)
    assert path.read_text() == "cat <<EOF\n\t[ keep ]  a,b\nEOF\necho a, b\n"


def test_only_newline_splits_lines(engine, tmp_path):
    path = tmp_path / "separators.sh"
    path.write_bytes("a\x0cb\nc\u2028d\re\n".encode("utf-8"))
    assert engine.read_lines(path) == ["a\x0cb", "c\u2028d\re"]


def test_heredoc_with_unusual_separators_survives_on_disk(engine, tmp_path):
    path = tmp_path / "separators.sh"
    body = "x\x0cy\u2028z\rw\x85v"
    path.write_bytes(f"cat <<EOF\n{body}\nEOF\necho a,b\n".encode("utf-8"))
    fixes, success = engine.format_file(path)
    assert (fixes, success) == (1, True)
    assert path.read_bytes() == f"cat <<EOF\n{body}\nEOF\necho a, b\n".encode("utf-8")


def test_crlf_line_endings_are_kept(engine, tmp_path):
    path = tmp_path / "dos.sh"
    path.write_bytes(b"if [ -f x ]; then\r\necho hi\r\nfi\r\n")
    engine.format_file(path)
    assert path.read_bytes() == b"if [[ -f x ]]; then\r\n  echo hi\r\nfi\r\n"


def test_validator_rejects_changed_heredoc(engine):
    original = ["cat <<EOF", "body", "EOF"]
    valid, reason = engine.validator.validate(original, ["cat <<EOF", "changed", "EOF"])
    assert valid is False
    assert reason == "Heredoc content changed during formatting"
    assert engine.validator.validate(original, list(original))[0] is True


def test_parse_file(engine, write_script):
    path = write_script("#!/bin/sh\ncat <<END\nraw  text\nEND\nls *.sh\n")
    records = engine.parse_file(path)
    assert [r.context for r in records] == [
        LineContext.SHEBANG,
        LineContext.HEREDOC_START,
        LineContext.NORMAL,
        LineContext.NORMAL,
        LineContext.NORMAL,
    ]
    assert records[2].in_heredoc and records[2].tokens == ["raw  text"]
    assert records[3].heredoc_end
    assert records[4].glob and records[4].tokens == ["ls", "*.sh"]


def test_parse_missing_file_raises(engine, tmp_path):
    with pytest.raises(InputError):
        engine.parse_file(tmp_path / "absent.sh")


def test_generate_summary(engine, write_script):
    good = write_script("echo ok\n", "good.sh")
    bad = write_script("test -f x; then\n", "bad.sh")
    reports = []
    for path in (good, bad):
        issues, success = engine.lint_file(path)
        reports.append({"file_path": str(path), "issues": issues, "success": success})
    summary = engine.generate_summary(reports)
    assert summary["total_files"] == 2
    assert summary["successful"] == 1
    assert summary["failed"] == 1
    assert summary["errors"] == 1
    assert engine.generate_summary([])["total_files"] == 0
