import pytest

from cleansh.cli.main import CleanCLI


@pytest.fixture
def run(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    def _run(*argv):
        return CleanCLI().run(list(argv))

    return _run


def test_lint_clean_file_exits_zero(run, write_script):
    path = write_script("#!/bin/bash\nif [[ -f x ]]; then\n  echo hi\nfi\n")
    assert run("lint", "--no-color", str(path)) == 0


def test_lint_error_exits_one(run, write_script, capsys):
    path = write_script("if test -f x; then\n  echo hi\nfi\n")
    assert run("lint", "--no-color", str(path)) == 1
    out = capsys.readouterr().out
    assert "[ERROR] Line 1: Use [[ ]] instead of 'test' command" in out


def test_check_is_read_only(run, write_script):
    content = "if [ -f x ]; then\necho hi\nfi\n"
    path = write_script(content)
    assert run("check", str(path)) == 0
    assert path.read_text() == content


def test_format_directory(run, tmp_path, write_script):
    first = write_script("if [ -f x ]; then\necho hi\nfi\n", "one.sh")
    second = write_script("echo a,b\n", "two.sh")
    write_script("not touched,\n", "notes.txt")
    assert run("format", "--no-color", str(tmp_path)) == 0
    assert first.read_text() == "if [[ -f x ]]; then\n  echo hi\nfi\n"
    assert second.read_text() == "echo a, b\n"
    assert (tmp_path / "notes.txt").read_text() == "not touched,\n"


def test_format_dry_run_with_diff(run, write_script, capsys):
    content = "echo a,b\n"
    path = write_script(content)
    assert run("format", "--dry-run", "--diff", "--no-color", str(path)) == 0
    assert path.read_text() == content
    assert "+echo a, b" in capsys.readouterr().out


def test_missing_file_fails_but_batch_continues(run, write_script, tmp_path):
    path = write_script("echo a,b\n")
    assert run("format", str(tmp_path / "absent.sh"), str(path)) == 1
    assert path.read_text() == "echo a, b\n"


def test_parse_dump(run, write_script, capsys):
    path = write_script("#!/bin/sh\necho hi\n")
    assert run("parse", "--no-color", str(path)) == 0
    out = capsys.readouterr().out
    assert f"=== AST for {path} ===" in out
    assert "Line 2: normal" in out
    assert "  TOKEN:echo" in out


def test_init_writes_config_once(run, tmp_path):
    assert run("init") == 0
    assert (tmp_path / "arty.yml").is_file()
    assert run("init") == 1


def test_config_option_is_applied(run, write_script, tmp_path):
    config = tmp_path / "custom.yml"
    config.write_text("clean:\n  severity:\n    bracket_style: error\n")
    path = write_script("if [ -f x ]; then\n  echo hi\nfi\n")
    assert run("lint", str(path)) == 0
    assert run("lint", "-c", str(config), str(path)) == 1


def test_global_options_before_subcommand(run, write_script, tmp_path, capsys):
    config = tmp_path / "custom.yml"
    config.write_text("clean:\n  severity:\n    bracket_style: error\n")
    path = write_script("if [ -f x ]; then\n  echo hi\nfi\n")
    assert run("-c", str(config), "lint", str(path)) == 1
    assert run("--no-color", "-c", str(config), "lint", str(path)) == 1
    assert "[ERROR] Line 1: Use [[ ]] instead of [ ]" in capsys.readouterr().out


def test_subcommand_option_overrides_global(run, write_script, tmp_path):
    config = tmp_path / "custom.yml"
    config.write_text("clean:\n  severity:\n    bracket_style: error\n")
    path = write_script("if [ -f x ]; then\n  echo hi\nfi\n")
    assert run("-c", "absent.yml", "lint", "-c", str(config), str(path)) == 1
    assert run("-c", str(config), "lint", "-c", "absent.yml", str(path)) == 0


def test_global_ext_applies_to_directories(run, tmp_path, write_script):
    script = write_script("echo a,b\n", "job.bash")
    assert run("--ext", ".bash", "format", str(tmp_path)) == 0
    assert script.read_text() == "echo a, b\n"


def test_no_command_prints_help(run):
    assert run() == 1
