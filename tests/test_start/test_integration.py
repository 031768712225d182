"""Unit tests for appstart.start.integration."""

from __future__ import annotations

import json
import os
from unittest.mock import patch

import pytest

from appstart.errors import FatalError
from appstart.models import ClonedSchema, GeneratedSchema
from appstart.project.project import create_project_from_directory
from appstart.start.integration import IntegrationOrchestrator, IntegrationState
from appstart.start.options import StartOptions


@pytest.fixture
def project_dir(tmp_path):
    directory = (tmp_path / "my-app").resolve()
    directory.mkdir()
    (directory / "package.json").write_text('{"name": "ionic-starter", "version": "5.0.0"}')
    (directory / "ionic.config.json").write_text('{"name": "starter", "type": "angular"}')
    return directory


@pytest.fixture
def make_run(make_context, project_dir):
    """Factory returning ``(context, schema)`` with the project already promoted."""
    def factory(project_type="angular", **context_kwargs):
        context = make_context(**context_kwargs)
        context.promote_project(create_project_from_directory(project_dir))
        schema = GeneratedSchema(
            display_name="My App",
            project_type=project_type,
            template_name="blank",
            project_id="my-app",
            project_dir=project_dir,
        )
        return context, schema

    return factory


def git_commands(context):
    return [c for c in context.shell.commands if c.startswith("git ")]


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


class TestDependencies:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_no_deps_skips_install_and_warns_once(self, make_run):
        context, schema = make_run()
        state = IntegrationState(git_enabled=True)

        with patch("appstart.start.integration.print_warning") as warn:
            await IntegrationOrchestrator(context).run(schema, StartOptions(deps=False), state)

        lock_warnings = [c for c in warn.call_args_list if "--no-deps" in c[0][0]]
        assert len(lock_warnings) == 1
        assert not any(c.startswith("npm") for c in context.shell.commands)
        # Everything else still happens.
        assert git_commands(context) == ["git init", "git add -A", "git commit -m Initial commit --no-gpg-sign"]
        assert json.loads((schema.project_dir / "package.json").read_text())["name"] == "my-app"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_installs_with_npm(self, make_run, project_dir):
        context, schema = make_run()
        await IntegrationOrchestrator(context).run(schema, StartOptions(), IntegrationState(git_enabled=False))

        install = [call for call in context.shell.calls if call[0] == "npm"]
        assert install == [("npm", ["i"], project_dir)]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_installs_with_yarn(self, make_run, config):
        config.npm_client = "yarn"
        context, schema = make_run()
        await IntegrationOrchestrator(context).run(schema, StartOptions(), IntegrationState(git_enabled=False))
        assert "yarn install" in context.shell.commands

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_install_failure_is_fatal(self, make_run):
        context, schema = make_run(failures=["npm i"])
        with pytest.raises(FatalError, match="Dependency installation failed"):
            await IntegrationOrchestrator(context).run(schema, StartOptions(), IntegrationState(git_enabled=True))
        assert git_commands(context) == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_local_binaries_are_put_on_path(self, make_run, project_dir):
        context, schema = make_run()
        await IntegrationOrchestrator(context).run(schema, StartOptions(), IntegrationState(git_enabled=False))

        path = context.shell.environ()["PATH"]
        assert path.split(os.pathsep)[0] == str(project_dir / "node_modules" / ".bin")


# ---------------------------------------------------------------------------
# Git
# ---------------------------------------------------------------------------


class TestGit:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_init_then_commit_after_install(self, make_run):
        context, schema = make_run()
        state = IntegrationState(git_enabled=True)

        await IntegrationOrchestrator(context).run(schema, StartOptions(), state)

        commands = context.shell.commands
        assert commands.index("npm i") < commands.index("git init") < commands.index("git add -A")
        assert state.git_enabled is True

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_disabled_git_runs_nothing(self, make_run):
        context, schema = make_run()
        state = IntegrationState(git_enabled=False)

        await IntegrationOrchestrator(context).run(schema, StartOptions(), state)

        assert git_commands(context) == []
        assert state.git_enabled is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_init_failure_disables_commit(self, make_run):
        context, schema = make_run(failures=["git init"])
        state = IntegrationState(git_enabled=True)

        await IntegrationOrchestrator(context).run(schema, StartOptions(), state)

        assert git_commands(context) == ["git init"]
        assert state.git_enabled is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_commit_failure_disables_git(self, make_run):
        context, schema = make_run(failures=["git commit"])
        state = IntegrationState(git_enabled=True)

        await IntegrationOrchestrator(context).run(schema, StartOptions(), state)

        assert state.git_enabled is False

    @pytest.mark.unit
    def test_git_state_only_goes_off(self):
        state = IntegrationState(git_enabled=True)
        state.disable_git()
        state.disable_git()
        assert state.git_enabled is False


# ---------------------------------------------------------------------------
# Native integrations
# ---------------------------------------------------------------------------


class TestNativeIntegrations:
    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize("project_type", ["react", "vue", "angular"])
    async def test_capacitor_enabled_by_default(self, make_run, project_dir, project_type):
        context, schema = make_run(project_type=project_type)
        state = IntegrationState(git_enabled=False)

        await IntegrationOrchestrator(context).run(schema, StartOptions(), state)

        assert state.capacitor is True
        assert ("ionic", ["integrations", "enable", "capacitor", "--quiet", "--", "My App", "io.ionic.starter"],
                project_dir) in context.shell.calls
        assert state.uses_capacitor_style is True

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_capacitor_uses_package_id(self, make_run):
        context, schema = make_run()
        schema = schema.model_copy(update={"package_id": "com.example.app"})

        await IntegrationOrchestrator(context).run(schema, StartOptions(), IntegrationState(git_enabled=False))

        assert any(c.endswith("My App com.example.app") for c in context.shell.commands)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_capacitor_failure_downgrades(self, make_run):
        context, schema = make_run(failures=["ionic integrations enable capacitor"])
        state = IntegrationState(git_enabled=True)

        await IntegrationOrchestrator(context).run(schema, StartOptions(), state)

        assert state.capacitor is False
        assert "npm i" in context.shell.commands
        assert "git init" in context.shell.commands

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_cordova(self, make_run):
        context, schema = make_run()
        state = IntegrationState(git_enabled=False, cordova=True)

        await IntegrationOrchestrator(context).run(schema, StartOptions(cordova=True), state)

        assert "ionic integrations enable cordova --quiet" in context.shell.commands
        assert not any("capacitor" in c for c in context.shell.commands)
        assert state.cordova is True
        assert state.uses_capacitor_style is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_cordova_declined(self, make_run):
        context, schema = make_run(answers={"Are you sure": False})
        state = IntegrationState(git_enabled=False, cordova=True)

        await IntegrationOrchestrator(context).run(schema, StartOptions(cordova=True), state)

        assert state.cordova is False
        assert not any("cordova" in c for c in context.shell.commands)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_cordova_failure_downgrades(self, make_run):
        context, schema = make_run(failures=["ionic integrations enable cordova"])
        state = IntegrationState(git_enabled=False, cordova=True)

        await IntegrationOrchestrator(context).run(schema, StartOptions(cordova=True), state)

        assert state.cordova is False
        assert "npm i" in context.shell.commands

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_capacitor_offered_for_legacy_types(self, make_run):
        context, schema = make_run(project_type="ionic-angular", answers={"Capacitor": True})
        state = IntegrationState(git_enabled=False)

        await IntegrationOrchestrator(context).run(schema, StartOptions(), state)

        assert state.capacitor is True
        assert any("Capacitor" in q for q in context.prompts.asked)


# ---------------------------------------------------------------------------
# Link & manifest
# ---------------------------------------------------------------------------


class TestLink:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_link(self, make_run):
        context, schema = make_run()
        schema = schema.model_copy(update={"remote_app_id": "abc123"})
        state = IntegrationState(git_enabled=True, linked_app_id=True)

        await IntegrationOrchestrator(context).run(schema, StartOptions(link=True, id="abc123"), state)

        assert "ionic link abc123 --name My App" in context.shell.commands
        assert state.link_step_completed is True
        assert state.link_confirmed is True
        commands = context.shell.commands
        assert commands.index("git init") < commands.index("ionic link abc123 --name My App") < commands.index("git add -A")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_link_failure_is_fatal(self, make_run):
        context, schema = make_run(failures=["ionic link"])
        with pytest.raises(FatalError, match="Unable to link"):
            await IntegrationOrchestrator(context).run(
                schema, StartOptions(link=True), IntegrationState(git_enabled=False)
            )

    @pytest.mark.unit
    def test_link_signals_are_separate(self):
        assert IntegrationState(git_enabled=False, linked_app_id=True).link_confirmed is True
        assert IntegrationState(git_enabled=False, link_step_completed=True).link_confirmed is True
        assert IntegrationState(git_enabled=False).link_confirmed is False


class TestManifest:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_welcome_is_shown_and_manifest_removed(self, make_run, project_dir, capsys):
        (project_dir / "ionic.starter.json").write_text('{"name": "blank", "welcome": "Enjoy your app"}')
        context, schema = make_run()

        await IntegrationOrchestrator(context).run(schema, StartOptions(), IntegrationState(git_enabled=False))

        assert not (project_dir / "ionic.starter.json").exists()
        assert "Enjoy your app" in capsys.readouterr().out

    @pytest.mark.unit
    def test_unreadable_manifest_is_removed(self, project_dir):
        (project_dir / "ionic.starter.json").write_text("{broken")

        assert IntegrationOrchestrator.consume_manifest(project_dir) is None
        assert not (project_dir / "ionic.starter.json").exists()

    @pytest.mark.unit
    def test_no_manifest(self, project_dir):
        assert IntegrationOrchestrator.consume_manifest(project_dir) is None


# ---------------------------------------------------------------------------
# Cloned projects
# ---------------------------------------------------------------------------


class TestClonedProject:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_only_dependencies_are_installed(self, make_context, project_dir):
        context = make_context()
        schema = ClonedSchema(source_url="https://github.com/org/repo", project_id="my-app", project_dir=project_dir)
        state = IntegrationState(git_enabled=True)

        await IntegrationOrchestrator(context).run(schema, StartOptions(), state)

        assert context.shell.commands == ["npm i"]
        assert json.loads((project_dir / "package.json").read_text())["name"] == "ionic-starter"
