"""Execution context for one run of the start pipeline.

Capabilities that are only needed on some paths (git, the remote app client,
the wizard bridge, the starter catalog) are constructed on first use.

The *current project* slot starts out as whatever project encloses the
working directory. It is written exactly once more, by the acquisition stage,
when the freshly created directory becomes the project every later stage
works on.
"""

from __future__ import annotations

from collections.abc import Sequence
from functools import cached_property
from pathlib import Path

from appstart.config import Config
from appstart.git import GitClient
from appstart.project.app_client import AppClient
from appstart.project.project import Project, load_project
from appstart.prompts import PromptService
from appstart.shell import Shell
from appstart.starters.catalog import TemplateCatalog
from appstart.starters.wizard import WizardBridge


class StartContext:
    """Everything the start pipeline needs from its surroundings."""

    def __init__(
        self,
        config: Config,
        prompts: PromptService,
        cwd: str | Path | None = None,
        shell: Shell | None = None,
        project: Project | None = None,
    ) -> None:
        self.config = config
        self.prompts = prompts
        self.cwd = Path(cwd or Path.cwd()).resolve()
        self.shell = shell or Shell()
        self._project = project
        self._promoted = False

    @classmethod
    def discover(
        cls,
        config: Config,
        prompts: PromptService,
        cwd: str | Path | None = None,
    ) -> "StartContext":
        """Build a context whose project is the one enclosing *cwd*, if any."""
        resolved = Path(cwd or Path.cwd()).resolve()
        return cls(config, prompts, cwd=resolved, project=load_project(resolved))

    @property
    def interactive(self) -> bool:
        return self.prompts.interactive

    # ------------------------------------------------------------------
    # Current project
    # ------------------------------------------------------------------

    @property
    def project(self) -> Project | None:
        return self._project

    def promote_project(self, project: Project) -> None:
        """Replace the enclosing project with the newly created one.

        Raises:
            RuntimeError: If a project was already promoted in this run.
        """
        if self._promoted:
            raise RuntimeError("The current project has already been replaced in this run")
        self._project = project
        self._promoted = True

    # ------------------------------------------------------------------
    # Lazily built capabilities
    # ------------------------------------------------------------------

    @cached_property
    def git(self) -> GitClient:
        return GitClient(self.shell)

    @cached_property
    def catalog(self) -> TemplateCatalog:
        return TemplateCatalog(self.config)

    @cached_property
    def app_client(self) -> AppClient:
        return AppClient(self.config)

    @cached_property
    def wizard(self) -> WizardBridge:
        return WizardBridge(self.config)

    async def run_subcommand(self, args: Sequence[str], cwd: str | Path | None = None) -> None:
        """Run another CLI command (integrations, link) as an opaque sub-operation."""
        executable, *prefix = self.config.cli_command
        await self.shell.run(executable, [*prefix, *args], cwd=cwd)
