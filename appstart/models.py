"""Pydantic v2 models for the start pipeline.

Defines the immutable creation plan (``ClonedSchema`` / ``GeneratedSchema``)
and the starter template descriptors produced by the catalog.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from appstart.utils import is_valid_project_id


# ---------------------------------------------------------------------------
# Starter templates
# ---------------------------------------------------------------------------

class StarterTemplate(BaseModel):
    """An entry of the built-in starter catalog."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Template name as typed by the user, e.g. 'tabs'")
    project_type: str = Field(..., description="Framework/project type the starter targets")
    kind: Literal["managed", "repo"] = Field(default="managed")
    id: Optional[str] = Field(default=None, description="Archive id for managed starters")
    repo: Optional[str] = Field(default=None, description="Backing git URL for repo starters")
    description: str = Field(default="")


class ResolvedStarterTemplate(BaseModel):
    """A starter ready to be acquired: either an archive or a repository URL."""
    model_config = ConfigDict(frozen=True)

    name: str
    project_type: str
    kind: Literal["managed", "repo"]
    archive_url: Optional[str] = None
    repo_url: Optional[str] = None


class StarterManifest(BaseModel):
    """Metadata shipped inside a starter as ``ionic.starter.json``."""
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    welcome: Optional[str] = None


# ---------------------------------------------------------------------------
# Creation schema
# ---------------------------------------------------------------------------

class _SchemaBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    project_id: str = Field(..., description="Directory and package name slug")
    project_dir: Path = Field(..., description="Absolute target directory")

    @field_validator("project_id")
    @classmethod
    def _check_project_id(cls, value: str) -> str:
        if not is_valid_project_id(value):
            raise ValueError(f"{value!r} is not a valid project id")
        return value

    @field_validator("project_dir")
    @classmethod
    def _check_project_dir(cls, value: Path) -> Path:
        if not value.is_absolute():
            raise ValueError(f"project_dir must be absolute, got {value}")
        return value


class ClonedSchema(_SchemaBase):
    """Plan for a project cloned from a git repository."""

    cloned: Literal[True] = True
    source_url: str


class GeneratedSchema(_SchemaBase):
    """Plan for a project generated from a starter template."""

    cloned: Literal[False] = False
    display_name: str
    project_type: str
    template_name: str
    package_id: Optional[str] = None
    remote_app_id: Optional[str] = None
    app_icon: Optional[bytes] = None
    splash: Optional[bytes] = None
    theme_color: Optional[str] = None


CreationSchema = Union[ClonedSchema, GeneratedSchema]
