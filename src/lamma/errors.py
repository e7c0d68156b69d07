"""Custom exceptions for the lamma CLI."""

from __future__ import annotations

from pathlib import Path


class LammaError(Exception):
    """Base exception for all lamma operations."""

    def __init__(self, message: str, *, exit_code: int = 1):
        super().__init__(message)
        self.exit_code = exit_code


class ParseError(LammaError):
    """A config file exists but its expected directives are missing or malformed."""


class ProcessQueryError(LammaError):
    """Querying the process table failed."""


class PhpVersionNotFoundError(LammaError):
    """No discovered PHP-FPM pool matches the requested version."""

    def __init__(self, version: str):
        super().__init__(f"PHP version {version} not found in PHP versions.")
        self.version = version


class ExternalCommandError(LammaError):
    """A shelled-out tool exited non-zero."""

    def __init__(self, cmd: list[str], returncode: int, stderr: str = ""):
        super().__init__(
            f"Command failed ({returncode}): {' '.join(cmd)}\nstderr: {stderr.strip()}"
        )
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr


class FileSystemError(LammaError):
    """Reading or writing a config/hosts file failed."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path


class DatabaseError(LammaError):
    """MySQL operation failed."""


class SiteExistsError(LammaError):
    """A vhost or document root for the site already exists."""


class SiteNotFoundError(LammaError):
    """The requested site does not exist."""
