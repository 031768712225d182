"""appstart pipeline orchestrator.

Implements the project creation pipeline:

Stage 1: SCHEMA      -- Resolve type, name, template and identity into a plan.
Stage 2: ACQUIRE     -- Clone the repository or download + extract the starter.
Stage 3: INTEGRATE   -- Native integrations, personalization, deps, git, manifest.
Stage 4: NEXT STEPS  -- Tell the user what to do next.

Each stage runs to completion before the next begins. A ``FatalError`` in any
stage aborts the run; nothing already written to disk is rolled back.

Usage::

    appstart start
    appstart start "My App" blank --type=angular
    appstart start "Conference App" https://github.com/ionic-team/ionic-conference-app
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from typing import Optional

from rich.logging import RichHandler

from appstart import __version__
from appstart.config import Config
from appstart.context import StartContext
from appstart.errors import FatalError
from appstart.models import CreationSchema, GeneratedSchema
from appstart.prompts import PromptService
from appstart.start.acquisition import AcquisitionEngine
from appstart.start.integration import IntegrationOrchestrator, IntegrationState
from appstart.start.next_steps import show_next_steps
from appstart.start.options import StartOptions
from appstart.start.schema_builder import SchemaBuilder
from appstart.starters.catalog import STARTERS_REPO_URL
from appstart.utils import console, print_error, print_info, print_msg, print_table, strong

logger = logging.getLogger(__name__)


class StartPipeline:
    """Runs one ``start`` invocation end to end.

    Attributes:
        context: Execution context shared by every stage.
    """

    def __init__(self, context: StartContext) -> None:
        self.context = context

    async def run(
        self,
        name: Optional[str],
        template: Optional[str],
        options: StartOptions,
    ) -> Optional[IntegrationState]:
        """Execute the pipeline.

        Returns:
            The final integration state, or ``None`` when only the starter
            list was printed.

        Raises:
            FatalError: When any stage fails irrecoverably.
        """
        if options.list_starters:
            self.list_starters()
            return None

        # Stage 1: SCHEMA
        result = await SchemaBuilder(self.context).build(name, template, options)
        schema, options = result.schema, result.options

        state = await self.initial_state(schema, options)

        # The starter is resolved before the directory is touched so that an
        # unknown template leaves the filesystem unchanged.
        starter = None
        if isinstance(schema, GeneratedSchema):
            starter = await self.context.catalog.resolve(
                schema.template_name, schema.project_type, options.tag
            )

        # Stage 2: ACQUIRE
        engine = AcquisitionEngine(self.context)
        await engine.acquire(schema, starter, may_overwrite=result.may_overwrite)
        engine.register_project(schema)

        # Stage 3: INTEGRATE
        await IntegrationOrchestrator(self.context).run(schema, options, state)

        # Stage 4: NEXT STEPS
        print_msg()
        show_next_steps(
            schema.project_dir,
            schema.cloned,
            state.link_confirmed,
            state.uses_capacitor_style,
        )
        return state

    async def initial_state(self, schema: CreationSchema, options: StartOptions) -> IntegrationState:
        git = self.context.git
        git_installed = await git.is_installed()
        git_top_level = await git.top_level(self.context.cwd) if git_installed else None

        if git_top_level is not None and not schema.cloned:
            print_info(
                f"Existing git project found ({strong(str(git_top_level))}). "
                "Git operations are disabled."
            )

        return IntegrationState(
            git_enabled=options.git and git_installed and git_top_level is None,
            cordova=options.cordova,
            capacitor=options.capacitor,
            linked_app_id=isinstance(schema, GeneratedSchema) and isinstance(schema.remote_app_id, str),
        )

    def list_starters(self) -> None:
        rows = [
            (starter.name, starter.project_type, starter.description)
            for starter in self.context.catalog.list()
        ]
        print_table(rows, headers=("Name", "Project Type", "Description"), title="Starter templates")
        print_msg(f"More starters are available in the starters repo: {strong(STARTERS_REPO_URL)}")


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="appstart",
        description="Create a new app project from a starter template or a git repository",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--no-interactive",
        dest="interactive",
        action="store_false",
        help="Disable prompts; every required value must be supplied",
    )
    parser.add_argument("--confirm", action="store_true", help="Answer yes to every confirmation")
    parser.add_argument("--verbose", "-v", action="store_true", help="Print debug output")

    subparsers = parser.add_subparsers(dest="command", required=True)
    start = subparsers.add_parser(
        "start",
        help="Create a new project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  appstart start\n"
            "  appstart start --list\n"
            "  appstart start myApp tabs --capacitor\n"
            "  appstart start myApp blank --type=ionic1\n"
            '  appstart start "My App" blank\n'
            '  appstart start "Conference App" https://github.com/ionic-team/ionic-conference-app\n'
        ),
    )
    start.add_argument("name", nargs="?", help='The name of your new project (e.g. myApp, "My App")')
    start.add_argument("template", nargs="?", help="The starter template or a git repository URL")
    start.add_argument("--list", "-l", dest="list_starters", action="store_true",
                       help="List available starter templates")
    start.add_argument("--type", dest="project_type", help="Type of project to start (e.g. angular, react, vue)")
    start.add_argument("--cordova", action=argparse.BooleanOptionalAction, default=None,
                       help="Include Cordova integration")
    start.add_argument("--capacitor", action=argparse.BooleanOptionalAction, default=None,
                       help="Include Capacitor integration")
    start.add_argument("--no-deps", dest="deps", action="store_false",
                       help="Do not install npm/yarn dependencies")
    start.add_argument("--no-git", dest="git", action="store_false", help="Do not initialize a git repo")
    start.add_argument("--link", action="store_true", help="Connect your new app to your account")
    start.add_argument("--id", help="Specify an app id to link")
    start.add_argument("--project-id", help="Slug for the app (directory and package name)")
    start.add_argument("--package-id", help="Bundle ID/application ID (reverse-DNS notation)")
    start.add_argument("--start-id", help=argparse.SUPPRESS)
    start.add_argument("--tag", default="latest", help=argparse.SUPPRESS)

    # Removed / deprecated options, handled by normalize_options().
    start.add_argument("--v1", action="store_true", help=argparse.SUPPRESS)
    start.add_argument("--v2", action="store_true", help=argparse.SUPPRESS)
    start.add_argument("--app-name", help=argparse.SUPPRESS)
    start.add_argument("--display-name", help=argparse.SUPPRESS)
    start.add_argument("--bundle-id", help=argparse.SUPPRESS)
    return parser


def options_from_args(args: argparse.Namespace) -> StartOptions:
    fields = StartOptions.model_fields
    return StartOptions(**{key: value for key, value in vars(args).items() if key in fields})


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point for ``appstart``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    interactive = args.interactive and sys.stdin.isatty()
    prompts = PromptService(interactive=interactive, auto_confirm=args.confirm)
    context = StartContext.discover(Config.from_env(), prompts)
    pipeline = StartPipeline(context)

    try:
        asyncio.run(pipeline.run(args.name, args.template, options_from_args(args)))
    except FatalError as exc:
        if exc.message:
            print_error(exc.message)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
