"""Shared pytest fixtures for the appstart test suite.

Provides reusable fixtures for:
- Configuration pointing at unroutable test hosts
- Scripted prompts that answer by message substring
- A recording shell standing in for git, the package manager and the CLI
- Execution contexts rooted in a temporary directory
- In-memory starter archives
- Mock subprocess and httpx helpers
"""

from __future__ import annotations

import io
import tarfile
from collections.abc import AsyncIterator, Sequence
from pathlib import Path
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from appstart.config import Config
from appstart.context import StartContext
from appstart.errors import ShellCommandError
from appstart.project.project import Project
from appstart.prompts import Choice, PromptService
from appstart.shell import Shell


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

class ScriptedPrompts(PromptService):
    """PromptService whose answers come from a ``{message substring: answer}`` map.

    Unanswered confirmations return their default; unanswered inputs and
    selections fail the test. Non-interactive behaviour is inherited.
    """

    def __init__(
        self,
        answers: dict[str, Any] | None = None,
        interactive: bool = True,
        auto_confirm: bool = False,
    ) -> None:
        super().__init__(interactive=interactive, auto_confirm=auto_confirm)
        self.answers = dict(answers or {})
        self.asked: list[str] = []

    def _lookup(self, message: str) -> Any:
        for key, value in self.answers.items():
            if key in message:
                return value
        raise KeyError(message)

    async def input(self, message, *, name, validate=None, default=None):
        if not self.interactive:
            return await super().input(message, name=name, validate=validate, default=default)
        self.asked.append(message)
        try:
            return self._lookup(message)
        except KeyError:
            pytest.fail(f"Unexpected input prompt: {message}")

    async def confirm(self, message, *, default=False):
        if self.auto_confirm or not self.interactive:
            return await super().confirm(message, default=default)
        self.asked.append(message)
        try:
            return self._lookup(message)
        except KeyError:
            return default

    async def select(self, message, choices: list[Choice], *, name, default=None):
        if not self.interactive:
            return await super().select(message, choices, name=name, default=default)
        self.asked.append(message)
        try:
            answer = self._lookup(message)
        except KeyError:
            pytest.fail(f"Unexpected select prompt: {message}")
        assert answer in [choice.value for choice in choices]
        return answer


# ---------------------------------------------------------------------------
# Shell
# ---------------------------------------------------------------------------

class RecordingShell(Shell):
    """Shell that records commands instead of spawning them.

    Args:
        failures: Command prefixes (e.g. ``"git init"``) that raise
            ``ShellCommandError``.
        outputs: Command prefixes mapped to the stdout they return. Checked
            before *failures*.
    """

    def __init__(
        self,
        failures: Sequence[str] = (),
        outputs: dict[str, str] | None = None,
    ) -> None:
        super().__init__()
        self.failures = list(failures)
        self.outputs = dict(outputs or {})
        self.calls: list[tuple[str, list[str], Path | None]] = []

    async def run(self, command, args, *, cwd=None, stream=True):
        cmd_str = " ".join([command, *args])
        self.calls.append((command, list(args), Path(cwd) if cwd else None))
        for prefix, output in self.outputs.items():
            if cmd_str.startswith(prefix):
                return output
        for prefix in self.failures:
            if cmd_str.startswith(prefix):
                raise ShellCommandError(
                    f"Command failed (exit 1): {cmd_str}", command=cmd_str, returncode=1
                )
        return ""

    @property
    def commands(self) -> list[str]:
        return [" ".join([command, *args]) for command, args, _ in self.calls]


# ---------------------------------------------------------------------------
# Configuration & context
# ---------------------------------------------------------------------------

@pytest.fixture
def config() -> Config:
    """Config whose remote endpoints point at test hosts."""
    return Config(
        starter_base_url="https://starters.example.test",
        wizard_url_base="https://wizard.example.test",
        api_url="https://api.example.test",
        api_token="test-token",
    )


@pytest.fixture
def make_context(tmp_path: Path, config: Config) -> Callable[..., StartContext]:
    """Factory for a ``StartContext`` rooted at *tmp_path*.

    By default git is installed and the working directory is not inside a
    repository.

    Usage:
        def test_something(make_context):
            context = make_context(answers={"Project name": "My App"})
            ...
    """
    def factory(
        *,
        answers: dict[str, Any] | None = None,
        interactive: bool = True,
        auto_confirm: bool = False,
        failures: Sequence[str] = (),
        outputs: dict[str, str] | None = None,
        project: Project | None = None,
        cwd: Path | None = None,
        git_installed: bool = True,
    ) -> StartContext:
        shell_outputs = {"git --version": "git version 2.43.0"} if git_installed else {}
        shell_outputs.update(outputs or {})
        default_failures = ["git rev-parse"] if git_installed else ["git"]
        shell = RecordingShell(failures=[*default_failures, *failures], outputs=shell_outputs)
        prompts = ScriptedPrompts(answers, interactive=interactive, auto_confirm=auto_confirm)
        return StartContext(config, prompts, cwd=cwd or tmp_path, shell=shell, project=project)

    return factory


# ---------------------------------------------------------------------------
# Archives
# ---------------------------------------------------------------------------

def make_tarball(files: dict[str, str | bytes], mode: str = "w:gz") -> bytes:
    """Build an in-memory tar archive from ``{member name: content}``."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode=mode) as archive:
        for name, content in files.items():
            data = content.encode("utf-8") if isinstance(content, str) else content
            info = tarfile.TarInfo(name)
            info.size = len(data)
            archive.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


async def iter_chunks(data: bytes, size: int = 1024) -> AsyncIterator[bytes]:
    for offset in range(0, len(data), size):
        yield data[offset:offset + size]


@pytest.fixture
def starter_tarball() -> bytes:
    """A minimal starter with the files personalization touches."""
    return make_tarball({
        "package.json": '{"name": "ionic-starter", "version": "5.0.0", "private": true}',
        "ionic.config.json": '{"name": "starter", "type": "angular"}',
        "ionic.starter.json": '{"name": "blank", "welcome": "Welcome to your new app!"}',
        "src/app/app.component.ts": "export class AppComponent {}\n",
        "src/theme/variables.scss": ":root {\n  --ion-color-primary: #3880ff;\n  --ion-color-primary-rgb: 56,128,255;\n}\n",
    })


# ---------------------------------------------------------------------------
# Subprocess & HTTP
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory


@pytest.fixture
def mock_http_client():
    """Factory for an ``httpx.AsyncClient`` stand-in usable as ``async with``.

    Usage:
        def test_fetch(mock_http_client):
            client = mock_http_client(get=json_response({"data": ...}))
            with patch("httpx.AsyncClient", return_value=client):
                ...
    """
    def factory(**methods: Any) -> AsyncMock:
        mock_client = AsyncMock()
        for method, result in methods.items():
            if isinstance(result, BaseException):
                setattr(mock_client, method, AsyncMock(side_effect=result))
            else:
                setattr(mock_client, method, AsyncMock(return_value=result))
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=False)
        return mock_client

    return factory


def json_response(payload: Any, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    response.raise_for_status = MagicMock()
    return response


def stream_response(data: bytes, status_code: int = 200, chunk_size: int = 512) -> MagicMock:
    """Async context manager yielding a streaming response over *data*."""
    response = MagicMock()
    response.status_code = status_code
    response.headers = {"content-length": str(len(data))}
    response.aiter_bytes = lambda size=None: iter_chunks(data, chunk_size)

    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=response)
    context.__aexit__ = AsyncMock(return_value=False)
    return context
