"""Acquisition stage: fill the project directory.

Prepares ``project_dir`` (removing it first only when the user agreed to an
overwrite), then either clones the source repository or streams the starter
archive straight into the directory. Finally the new directory is registered
as the run's current project, inside the enclosing multi-app workspace when
there is one.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import tarfile
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Optional

import httpx

from appstart.archive import extract_stream
from appstart.config import PROJECT_FILE
from appstart.context import StartContext
from appstart.errors import FatalError, ShellCommandError
from appstart.models import CreationSchema, GeneratedSchema, ResolvedStarterTemplate
from appstart.project.project import (
    Project,
    ProjectContext,
    create_multiapp_project,
    create_project_from_directory,
)
from appstart.utils import Task, TaskChain, input_text, pretty_path

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


class AcquisitionEngine:
    """Materialises a creation schema into a populated directory."""

    def __init__(self, context: StartContext) -> None:
        self.context = context

    async def acquire(
        self,
        schema: CreationSchema,
        starter: Optional[ResolvedStarterTemplate] = None,
        may_overwrite: bool = False,
    ) -> None:
        """Prepare ``schema.project_dir`` and fill it.

        Args:
            schema: The creation plan.
            starter: Resolved starter; required for generated schemas.
            may_overwrite: Remove an existing directory first.

        Raises:
            FatalError: If cloning or downloading fails.
        """
        if not schema.cloned and starter is None:
            raise FatalError("Invalid start schema: no starter template resolved.")

        await self.prepare_directory(schema.project_dir, may_overwrite)

        if schema.cloned:
            await self.clone(schema.source_url, schema.project_dir)
        elif starter.kind == "repo" and starter.repo_url:
            await self.clone(starter.repo_url, schema.project_dir)
        else:
            await self.download_starter(schema.project_dir, starter)

    async def prepare_directory(self, project_dir: Path, may_overwrite: bool) -> None:
        tasks = TaskChain()
        tasks.next(f"Preparing directory {input_text(pretty_path(project_dir))}")

        try:
            if may_overwrite and (project_dir.exists() or project_dir.is_symlink()):
                await asyncio.to_thread(_remove_path, project_dir)
            project_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            tasks.fail()
            raise FatalError(f"Unable to prepare {pretty_path(project_dir)}: {exc}") from exc

        tasks.end()

    async def clone(self, url: str, project_dir: Path) -> None:
        try:
            await self.context.git.clone(url, project_dir)
        except ShellCommandError as exc:
            raise FatalError(f"Unable to clone {url}: {exc}") from exc

    async def download_starter(self, project_dir: Path, starter: ResolvedStarterTemplate) -> None:
        """Stream the starter archive into *project_dir*, reporting byte progress."""
        url = starter.archive_url
        if not url:
            raise FatalError(f"Starter {starter.name} has no archive to download.")

        tasks = TaskChain()
        task = tasks.next(f"Downloading and extracting {input_text(starter.name)} starter")
        logger.debug("Tar extraction created for %s from %s", project_dir, url)

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.context.config.http_timeout, connect=10.0),
                follow_redirects=True,
            ) as client:
                async with client.stream("GET", url) as response:
                    if response.status_code != 200:
                        raise FatalError(
                            f"Unable to download starter {starter.name}: "
                            f"HTTP {response.status_code} for {url}"
                        )
                    total = int(response.headers.get("content-length", 0)) or None
                    await extract_stream(_with_progress(response, task, total), project_dir)
        except FatalError:
            tasks.fail()
            raise
        except httpx.HTTPError as exc:
            tasks.fail()
            raise FatalError(f"Unable to download starter {starter.name}: {exc}") from exc
        except tarfile.TarError as exc:
            tasks.fail()
            raise FatalError(f"Unable to extract starter {starter.name}: {exc}") from exc
        except OSError as exc:
            tasks.fail()
            raise FatalError(f"Unable to write starter {starter.name} to {pretty_path(project_dir)}: {exc}") from exc

        tasks.end()

    def register_project(self, schema: CreationSchema) -> Project:
        """Make the new directory the run's current project.

        Inside a multi-app workspace the starter's own config file is removed
        and the sub-project is recorded in the workspace config instead.
        """
        workspace = self.context.project

        if workspace is not None and workspace.context == ProjectContext.MULTIAPP and isinstance(
            schema, GeneratedSchema
        ):
            (schema.project_dir / PROJECT_FILE).unlink(missing_ok=True)
            project = create_multiapp_project(
                workspace.root_directory, schema.project_id, schema.project_dir
            )
            project.config.set("type", schema.project_type)
            project.config.set(
                "root",
                Path(os.path.relpath(schema.project_dir, workspace.root_directory)).as_posix(),
            )
        else:
            project = create_project_from_directory(schema.project_dir)

        self.context.promote_project(project)
        return project


async def _with_progress(
    response: httpx.Response, task: Task, total: Optional[int]
) -> AsyncIterator[bytes]:
    loaded = 0
    async for chunk in response.aiter_bytes(_CHUNK_SIZE):
        loaded += len(chunk)
        task.progress(loaded, total)
        yield chunk


def _remove_path(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()
