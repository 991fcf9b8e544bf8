#!/usr/bin/env python3
"""
CLEANSH ERROR TAXONOMY
----------------------
Exceptions raised by the file driver and the configuration layer.
The classifier and the rules never raise: a line they cannot make
sense of is simply "no match".

Author: cleansh maintainers
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit codes used by the CLI wrapper."""
    SUCCESS = 0
    FAILURE = 1


class CleanError(Exception):
    """Base exception for all cleansh errors."""

    def __init__(self, message: str, exit_code: ExitCode = ExitCode.FAILURE):
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code


class InputError(CleanError):
    """The script could not be read: missing, a directory, or undecodable."""


class GenerationError(CleanError):
    """Formatting produced output that must not be written to disk."""


class ConfigError(CleanError):
    """The configuration file exists but cannot be used."""
