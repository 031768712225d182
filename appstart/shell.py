"""Subprocess runner with an alterable ``PATH``.

Every external tool (git, the package manager, the integration CLI) is
spawned through a :class:`Shell` so that, once a project directory exists,
locally installed binaries in ``node_modules/.bin`` are resolved first.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Sequence
from pathlib import Path

from appstart.errors import ShellCommandError
from appstart.utils import run_command

logger = logging.getLogger(__name__)


def prepend_node_modules_bin_to_path(project_dir: str | Path, path: str) -> str:
    """Return *path* with ``<project_dir>/node_modules/.bin`` in front."""
    bin_dir = str(Path(project_dir) / "node_modules" / ".bin")
    return f"{bin_dir}{os.pathsep}{path}" if path else bin_dir


class Shell:
    """Spawns subprocesses with a consistent environment.

    Attributes:
        alter_path: Optional function applied to ``PATH`` before each spawn.
    """

    def __init__(self) -> None:
        self.alter_path: Callable[[str], str] | None = None

    def environ(self) -> dict[str, str]:
        env = dict(os.environ)
        if self.alter_path is not None:
            env["PATH"] = self.alter_path(env.get("PATH", ""))
        return env

    async def run(
        self,
        command: str,
        args: Sequence[str],
        *,
        cwd: str | Path | None = None,
        stream: bool = True,
    ) -> str:
        """Run ``command args...`` and return its stdout.

        With ``stream=True`` the child inherits the terminal (stdout is not
        captured and the return value is empty).

        Raises:
            ShellCommandError: If the command cannot be started or exits
                with a non-zero code.
        """
        cmd = [command, *args]
        cmd_str = " ".join(cmd)
        logger.debug("Running %s (cwd=%s)", cmd_str, cwd)

        try:
            returncode, stdout, stderr = await run_command(
                cmd, cwd=cwd, capture=not stream, env=self.environ()
            )
        except (FileNotFoundError, PermissionError) as exc:
            raise ShellCommandError(
                f"Command not found: {command}", command=cmd_str
            ) from exc

        if returncode != 0:
            raise ShellCommandError(
                f"Command failed (exit {returncode}): {cmd_str}\n{stderr}".rstrip(),
                command=cmd_str,
                returncode=returncode,
                stderr=stderr,
            )
        return stdout

    async def output(
        self, command: str, args: Sequence[str], *, cwd: str | Path | None = None
    ) -> str:
        """Run a command with captured output. Shorthand for ``run(stream=False)``."""
        return await self.run(command, args, cwd=cwd, stream=False)
