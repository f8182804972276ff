"""Exception types raised by depscope."""

from __future__ import annotations


class DepscopeError(RuntimeError):
    """Base class for depscope errors."""


class ConfigError(DepscopeError):
    """Raised when the run cannot start (bad repository path, bad options)."""


class ToolError(DepscopeError):
    """Raised when an external build tool exits unsuccessfully."""

    def __init__(self, command: list[str], returncode: int | None, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip().splitlines()[-1] if stderr.strip() else "no output"
        super().__init__(f"{command[0]} exited with {returncode}: {detail}")
