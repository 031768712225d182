"""Thin git client used for cloning and for initialising new projects."""

from __future__ import annotations

from pathlib import Path

from appstart.errors import ShellCommandError
from appstart.shell import Shell

GIT_INSTALL_DOCS = "https://git-scm.com/book/en/v2/Getting-Started-Installing-Git"


class GitClient:
    """Runs git through a :class:`~appstart.shell.Shell`.

    Failing commands raise :class:`~appstart.errors.ShellCommandError`; callers
    decide whether that is fatal.
    """

    def __init__(self, shell: Shell) -> None:
        self.shell = shell
        self._installed: bool | None = None

    async def is_installed(self) -> bool:
        """Return ``True`` if a working ``git`` is on ``PATH``. Probed once."""
        if self._installed is None:
            try:
                await self.shell.output("git", ["--version"])
            except ShellCommandError:
                self._installed = False
            else:
                self._installed = True
        return self._installed

    async def top_level(self, cwd: str | Path) -> Path | None:
        """Return the root of the repository enclosing *cwd*, if any."""
        try:
            root = await self.shell.output("git", ["rev-parse", "--show-toplevel"], cwd=cwd)
        except ShellCommandError:
            return None
        return Path(root) if root else None

    async def clone(self, url: str, dest: str | Path) -> None:
        await self.shell.run("git", ["clone", url, str(dest), "--progress"])

    async def init(self, cwd: str | Path) -> None:
        await self.shell.run("git", ["init"], cwd=cwd)

    async def add_all(self, cwd: str | Path) -> None:
        await self.shell.run("git", ["add", "-A"], cwd=cwd)

    async def commit(self, cwd: str | Path, message: str = "Initial commit") -> None:
        await self.shell.run("git", ["commit", "-m", message, "--no-gpg-sign"], cwd=cwd)
