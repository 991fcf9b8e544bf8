"""pytest configuration and shared fixtures for cleansh tests."""

from pathlib import Path

from hypothesis import HealthCheck, Verbosity, settings
import pytest

from cleansh.core.config import RuleConfig

settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
    verbosity=Verbosity.normal,
)

settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
    verbosity=Verbosity.verbose,
)

settings.register_profile(
    "dev",
    max_examples=20,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
    verbosity=Verbosity.normal,
)

settings.load_profile("default")


@pytest.fixture
def config() -> RuleConfig:
    """Default configuration: 100 columns, 2-space indents, every rule on."""
    return RuleConfig()


@pytest.fixture
def write_script(tmp_path):
    """Writes a script into tmp_path and returns its path."""

    def _write(content: str, name: str = "script.sh") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write
