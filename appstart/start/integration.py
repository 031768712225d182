"""Integration stage: turn an acquired directory into a working project.

Steps run strictly in order. A failing optional step downgrades its feature
flag on :class:`IntegrationState` and the run continues; flags are never
turned back on once downgraded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from appstart.config import STARTER_MANIFEST_FILE
from appstart.context import StartContext
from appstart.errors import FatalError, ShellCommandError
from appstart.models import CreationSchema, GeneratedSchema, StarterManifest
from appstart.npm import pkg_manager_args
from appstart.project.project import PersonalizeDetails
from appstart.shell import prepend_node_modules_bin_to_path
from appstart.start.cordova import check_for_unsupported_project, confirm_cordova_usage
from appstart.start.options import StartOptions
from appstart.starters.manifest import read_starter_manifest
from appstart.utils import pretty_path, print_error, print_msg, print_warning, strong

logger = logging.getLogger(__name__)

CAPACITOR_DEFAULT_TYPES = frozenset({"react", "vue"})


@dataclass
class IntegrationState:
    """Mutable decisions made while integrating; the schema itself never changes.

    Attributes:
        git_enabled: Whether git steps still run. Only ever goes from
            ``True`` to ``False``.
        cordova: Legacy native integration requested (``None`` = unspecified).
        capacitor: Capacitor integration requested (``None`` = unspecified).
        linked_app_id: A remote app id was supplied for this project.
        link_step_completed: The explicit link sub-operation succeeded.
    """

    git_enabled: bool
    cordova: Optional[bool] = None
    capacitor: Optional[bool] = None
    linked_app_id: bool = False
    link_step_completed: bool = False

    def disable_git(self) -> None:
        self.git_enabled = False

    @property
    def link_confirmed(self) -> bool:
        return self.linked_app_id or self.link_step_completed

    @property
    def uses_capacitor_style(self) -> bool:
        return not self.cordova


class IntegrationOrchestrator:
    """Sequences post-acquisition side effects for one project."""

    def __init__(self, context: StartContext) -> None:
        self.context = context
        self.prompts = context.prompts

    async def run(
        self,
        schema: CreationSchema,
        options: StartOptions,
        state: IntegrationState,
    ) -> IntegrationState:
        project_dir = schema.project_dir
        self.context.shell.alter_path = lambda path: prepend_node_modules_bin_to_path(project_dir, path)

        if isinstance(schema, GeneratedSchema):
            self.infer_native_defaults(schema, state)
            await self.confirm_cordova(schema, state)
            await self.offer_capacitor(state)
            if state.capacitor:
                await self.enable_capacitor(schema, state)
            await self.personalize(schema)
            print_msg()

        await self.install_dependencies(project_dir, options)

        if isinstance(schema, GeneratedSchema):
            await self.git_init(project_dir, state)

            if options.link:
                await self.link(schema, state)

            manifest = self.consume_manifest(project_dir)
            await self.git_commit(project_dir, state)
            if manifest is not None:
                self.perform_manifest_ops(manifest)

        return state

    # ------------------------------------------------------------------
    # Native integrations
    # ------------------------------------------------------------------

    @staticmethod
    def infer_native_defaults(schema: GeneratedSchema, state: IntegrationState) -> None:
        if schema.project_type in CAPACITOR_DEFAULT_TYPES:
            state.capacitor = True
        if schema.project_type == "angular" and state.cordova is None:
            state.capacitor = True

    async def confirm_cordova(self, schema: GeneratedSchema, state: IntegrationState) -> None:
        if not state.cordova:
            return

        try:
            check_for_unsupported_project(schema.project_type)
        except FatalError as exc:
            logger.debug("Cordova unsupported for %s: %s", schema.project_type, exc)
            print_error(exc.message)
            state.cordova = False
            return

        if not await confirm_cordova_usage(self.prompts):
            state.cordova = False
            return

        try:
            await self.context.run_subcommand(
                ["integrations", "enable", "cordova", "--quiet"], cwd=schema.project_dir
            )
        except ShellCommandError as exc:
            print_warning(f"Unable to enable Cordova integration: {exc}")
            state.cordova = False

    async def offer_capacitor(self, state: IntegrationState) -> None:
        if state.capacitor is not None or state.cordova:
            return
        state.capacitor = await self.prompts.confirm(
            "Integrate your new app with Capacitor to target native iOS and Android?",
            default=False,
        )

    async def enable_capacitor(self, schema: GeneratedSchema, state: IntegrationState) -> None:
        package_id = schema.package_id or self.context.config.default_package_id
        try:
            await self.context.run_subcommand(
                [
                    "integrations", "enable", "capacitor", "--quiet", "--",
                    schema.display_name, package_id,
                ],
                cwd=schema.project_dir,
            )
        except ShellCommandError as exc:
            print_warning(f"Unable to enable Capacitor integration: {exc}")
            state.capacitor = False

    # ------------------------------------------------------------------
    # Project files
    # ------------------------------------------------------------------

    async def personalize(self, schema: GeneratedSchema) -> None:
        project = self.context.project
        if project is None:
            raise FatalError("Error while loading project.")

        await project.personalize(
            PersonalizeDetails(
                name=schema.display_name,
                project_id=schema.project_id,
                package_id=schema.package_id,
                app_id=schema.remote_app_id,
                app_icon=schema.app_icon,
                splash=schema.splash,
                theme_color=schema.theme_color,
            )
        )

    async def install_dependencies(self, project_dir: Path, options: StartOptions) -> None:
        if not options.deps:
            print_warning(
                "Using the --no-deps flag results in an out of date package lock file. The lock "
                "file can be updated by performing an `install` with your package manager."
            )
            return

        print_msg("Installing dependencies may take several minutes.")
        installer, *installer_args = pkg_manager_args(self.context.config.npm_client)
        try:
            await self.context.shell.run(installer, installer_args, cwd=project_dir)
        except ShellCommandError as exc:
            raise FatalError(f"Dependency installation failed: {exc}") from exc

    # ------------------------------------------------------------------
    # Git
    # ------------------------------------------------------------------

    async def git_init(self, project_dir: Path, state: IntegrationState) -> None:
        if not state.git_enabled:
            return
        try:
            await self.context.git.init(project_dir)
        except ShellCommandError as exc:
            logger.debug("git init failed: %s", exc)
            print_warning("Error encountered during repo initialization. Disabling further git operations.")
            state.disable_git()

    async def git_commit(self, project_dir: Path, state: IntegrationState) -> None:
        if not state.git_enabled:
            return
        try:
            await self.context.git.add_all(project_dir)
            await self.context.git.commit(project_dir)
        except ShellCommandError as exc:
            logger.debug("git commit failed: %s", exc)
            print_warning("Error encountered during commit. Disabling further git operations.")
            state.disable_git()

    # ------------------------------------------------------------------
    # Link & manifest
    # ------------------------------------------------------------------

    async def link(self, schema: GeneratedSchema, state: IntegrationState) -> None:
        args = ["link"]
        if schema.remote_app_id:
            args.append(schema.remote_app_id)
        args.extend(["--name", schema.display_name])

        try:
            await self.context.run_subcommand(args, cwd=schema.project_dir)
        except ShellCommandError as exc:
            raise FatalError(f"Unable to link app: {exc}") from exc
        state.link_step_completed = True

    @staticmethod
    def consume_manifest(project_dir: Path) -> Optional[StarterManifest]:
        """Read and delete the starter manifest, if the starter shipped one."""
        manifest_path = project_dir / STARTER_MANIFEST_FILE
        if not manifest_path.exists():
            return None

        manifest: Optional[StarterManifest] = None
        try:
            manifest = read_starter_manifest(manifest_path)
        except (OSError, ValueError) as exc:
            logger.debug("Error with manifest file %s: %s", pretty_path(manifest_path), exc)

        manifest_path.unlink(missing_ok=True)
        return manifest

    @staticmethod
    def perform_manifest_ops(manifest: StarterManifest) -> None:
        if manifest.welcome:
            print_msg()
            print_msg(f"{strong('Starter Welcome')}:")
            print_msg(manifest.welcome)
