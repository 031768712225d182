"""Exception types shared across the start pipeline."""

from __future__ import annotations


class FatalError(Exception):
    """Raised when the start pipeline must abort.

    The message is user-facing. An empty message means the reason has already
    been printed and the CLI should exit quietly with a non-zero status.
    """

    def __init__(self, message: str = "") -> None:
        self.message = message
        super().__init__(message)


class ShellCommandError(Exception):
    """Raised when a spawned subprocess fails to start or exits non-zero."""

    def __init__(
        self,
        message: str,
        command: str = "",
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)
