"""Decision engine that turns user input into a ``CreationSchema``.

The builder resolves, in order: a remote wizard session, the project type,
the display name, the starter template, whether the template is really a git
URL to clone, and the project identity and directory. Every question and
every validation happens here so that later stages only ever see one
complete, immutable plan.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from appstart.context import StartContext
from appstart.errors import FatalError
from appstart.git import GIT_INSTALL_DOCS
from appstart.models import ClonedSchema, CreationSchema, GeneratedSchema
from appstart.project.project import ProjectContext
from appstart.prompts import Choice, required
from appstart.start.cordova import check_for_unsupported_project
from appstart.start.options import StartOptions, normalize_options
from appstart.starters.catalog import (
    CUSTOM_PROJECT_TYPE,
    DEFAULT_FRAMEWORK,
    SUPPORTED_FRAMEWORKS,
    is_supported_project_type,
)
from appstart.starters.wizard import schema_from_wizard_app
from appstart.utils import (
    input_text,
    is_valid_project_id,
    is_valid_url,
    pretty_path,
    print_error,
    print_info,
    print_msg,
    print_warning,
    slugify,
    strong,
)


@dataclass(frozen=True)
class SchemaResult:
    """Output of :meth:`SchemaBuilder.build`.

    Attributes:
        schema: The creation plan.
        options: Canonical options after deprecation remapping and any forced
            values (``git`` is always on for clones).
        may_overwrite: The user confirmed that an existing ``project_dir``
            may be removed.
    """

    schema: CreationSchema
    options: StartOptions
    may_overwrite: bool = False


class SchemaBuilder:
    """Builds the creation schema for one ``start`` invocation."""

    def __init__(self, context: StartContext) -> None:
        self.context = context
        self.prompts = context.prompts

    async def build(
        self,
        name: Optional[str],
        template: Optional[str],
        options: StartOptions,
    ) -> SchemaResult:
        """Resolve inputs into a schema, prompting where allowed.

        Raises:
            FatalError: On any invalid input, declined confirmation or missing
                mandatory tool.
        """
        options, warnings = normalize_options(options)
        for warning in warnings:
            print_warning(warning)

        if options.start_id:
            return await self._build_from_wizard(name, options)

        project_type = await self.resolve_project_type(template, options)

        if options.cordova:
            try:
                check_for_unsupported_project(project_type)
            except FatalError as exc:
                print_error(exc.message)
                options = options.model_copy(update={"cordova": False})

        if name is not None and required(name) is not True:
            name = None
        if not name:
            name, options = await self.resolve_name(options)
        name = name.strip()

        if not template:
            template = await self.prompt_template(project_type)

        starter = self.context.catalog.find(template, project_type)
        if starter is not None and starter.kind == "repo" and starter.repo:
            template = starter.repo

        cloned = is_valid_url(template)

        self.validate_project_type(project_type)

        if cloned or options.id:
            await self._require_git(cloned)

        if cloned and not options.git:
            print_warning(
                f"The {input_text('--no-git')} option has no effect when cloning apps. "
                "Git must be used."
            )
            options = options.model_copy(update={"git": True})

        if options.project_id:
            self.validate_project_id(options.project_id)
            project_id = options.project_id
        else:
            project_id = name if is_valid_project_id(name) else slugify(name)
            options = options.model_copy(update={"project_id": project_id})

        project_dir = (self.context.cwd / project_id).resolve()

        may_overwrite = await self.check_for_existing(project_dir)
        await self.check_inside_project()

        schema: CreationSchema
        if cloned:
            schema = ClonedSchema(
                source_url=template,
                project_id=project_id,
                project_dir=project_dir,
            )
        else:
            schema = GeneratedSchema(
                display_name=name,
                project_type=project_type,
                template_name=template,
                project_id=project_id,
                project_dir=project_dir,
                package_id=options.package_id,
                remote_app_id=options.id,
            )

        return SchemaResult(schema=schema, options=options, may_overwrite=may_overwrite)

    # ------------------------------------------------------------------
    # Wizard
    # ------------------------------------------------------------------

    async def _build_from_wizard(self, name: Optional[str], options: StartOptions) -> SchemaResult:
        start_id = options.start_id
        assert start_id is not None

        wizard = self.context.wizard
        app = await wizard.fetch(start_id)

        # A positional argument names the directory; the app name stays as designed.
        directory = name if name else slugify(app.name)
        project_dir = (self.context.cwd / directory).resolve()

        may_overwrite = await self.check_for_existing(project_dir)
        await wizard.mark_started(start_id)

        schema = schema_from_wizard_app(app, project_dir)
        options = options.model_copy(
            update={"project_type": schema.project_type, "project_id": schema.project_id}
        )
        return SchemaResult(schema=schema, options=options, may_overwrite=may_overwrite)

    # ------------------------------------------------------------------
    # Resolution steps
    # ------------------------------------------------------------------

    async def resolve_project_type(self, template: Optional[str], options: StartOptions) -> str:
        if is_valid_url(template):
            return CUSTOM_PROJECT_TYPE
        if options.project_type:
            return options.project_type
        return await self.prompt_project_type()

    async def prompt_project_type(self) -> str:
        if self.context.interactive:
            print_msg()
            print_msg(
                f"{strong('Pick a framework!')}\n\n"
                "Please select the JavaScript framework to use for your new app. To bypass "
                f"this prompt next time, supply a value for the {input_text('--type')} option.\n"
            )

        choices = [
            Choice(value=framework.type, label=framework.name, description=framework.description)
            for framework in SUPPORTED_FRAMEWORKS
        ]
        return await self.prompts.select(
            "Framework",
            choices,
            name=f"the {input_text('--type')} option",
            default=DEFAULT_FRAMEWORK,
        )

    async def resolve_name(self, options: StartOptions) -> tuple[str, StartOptions]:
        """Return the display name, looking it up remotely for a linked app id."""
        if options.id:
            app = await self.context.app_client.load(options.id)
            print_info(
                f"Using {strong(app.name)} for {input_text('name')} and "
                f"{strong(app.slug)} for {input_text('--project-id')}."
            )
            return app.name, options.model_copy(update={"project_id": app.slug})

        if self.context.interactive:
            print_msg()
            print_msg(
                f"{strong('Every great app needs a name!')}\n"
                "Please enter the full name of your app. You can change this at any time. "
                f"To bypass this prompt next time, supply {input_text('name')}, the first "
                f"argument to {input_text('appstart start')}.\n"
            )

        name = await self.prompts.input(
            "Project name",
            name=f"the {input_text('name')} argument",
            validate=required,
        )
        return name, options

    async def prompt_template(self, project_type: str) -> str:
        starters = self.context.catalog.list(project_type)
        if not starters:
            raise FatalError(
                f"No starter templates found for project type: {input_text(project_type)}."
            )

        if self.context.interactive:
            heading = strong("Let's pick the perfect starter template!")
            print_msg()
            print_msg(
                f"{heading}\n"
                "Starter templates are ready-to-go apps that come packed with everything you "
                f"need to build your app. To bypass this prompt next time, supply "
                f"{input_text('template')}, the second argument to {input_text('appstart start')}.\n"
            )

        choices = [
            Choice(value=starter.name, label=starter.name, description=starter.description)
            for starter in starters
        ]
        return await self.prompts.select(
            "Starter template",
            choices,
            name=f"the {input_text('template')} argument",
        )

    # ------------------------------------------------------------------
    # Validation & guards
    # ------------------------------------------------------------------

    @staticmethod
    def validate_project_type(project_type: str) -> None:
        if not is_supported_project_type(project_type):
            raise FatalError(
                f"{input_text(project_type)} is not a valid project type.\n"
                f"Please choose a different {input_text('--type')}. Use "
                f"{input_text('appstart start --list')} to list all available starter templates."
            )

    @staticmethod
    def validate_project_id(project_id: str) -> None:
        if not is_valid_project_id(project_id):
            raise FatalError(
                f"{input_text(project_id)} is not a valid package or directory name.\n"
                f"Please choose a different {input_text('--project-id')}. "
                "Alphanumeric characters are always safe."
            )

    async def _require_git(self, cloned: bool) -> None:
        if await self.context.git.is_installed():
            return
        reason = (
            f"Git must be installed to clone apps with {input_text('appstart start')}."
            if cloned
            else "Git must be installed to connect this app to your account."
        )
        raise FatalError(
            "Git CLI not found on your PATH.\n"
            f"{reason} See installation docs for git: {strong(GIT_INSTALL_DOCS)}"
        )

    async def check_for_existing(self, project_dir: Path) -> bool:
        """Ask before reusing an existing directory.

        Returns:
            ``True`` if the directory exists and may be removed, ``False`` if
            it does not exist.

        Raises:
            FatalError: If the user declines.
        """
        if not project_dir.exists() and not project_dir.is_symlink():
            return False

        confirm = await self.prompts.confirm(
            f"{pretty_path(project_dir)} exists. [red]Overwrite?[/red]",
            default=False,
        )
        if not confirm:
            print_msg(f"Not erasing existing project in {input_text(pretty_path(project_dir))}.")
            raise FatalError()
        return True

    async def check_inside_project(self) -> None:
        project = self.context.project
        if project is None or project.context != ProjectContext.APP:
            return

        confirm = await self.prompts.confirm(
            "You are already in a project directory. "
            "Do you really want to start another project here?",
            default=False,
        )
        if not confirm:
            print_info("Not starting project within existing project.")
            raise FatalError()
