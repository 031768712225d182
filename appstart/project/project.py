"""Project model: discovery, multi-app registration and personalization.

A project is identified by its ``ionic.config.json``. When that file holds a
``projects`` mapping the directory is a multi-app workspace and every
sub-project's settings live under ``projects.<id>``.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from appstart.config import PROJECT_FILE
from appstart.project.config_file import ProjectConfigFile

logger = logging.getLogger(__name__)

PACKAGE_DESCRIPTION = "An Ionic project"
PACKAGE_VERSION = "0.0.1"

_THEME_FILES = ("src/theme/variables.scss", "src/theme/variables.css")


class ProjectContext(str, Enum):
    APP = "app"
    MULTIAPP = "multiapp"


class PersonalizeDetails(BaseModel):
    """Identity written into a freshly acquired project."""
    model_config = ConfigDict(frozen=True)

    name: str
    project_id: str
    package_id: Optional[str] = None
    app_id: Optional[str] = None
    app_icon: Optional[bytes] = None
    splash: Optional[bytes] = None
    theme_color: Optional[str] = None


@dataclass
class Project:
    """A project on disk.

    Attributes:
        root_directory: Directory holding the config file.
        directory: The app's own directory (differs from ``root_directory``
            for multi-app sub-projects).
        context: Whether the config file describes a single app or a workspace.
        config: Config accessor, already scoped to this project.
        id: Sub-project id inside a multi-app workspace.
    """

    root_directory: Path
    directory: Path
    context: ProjectContext
    config: ProjectConfigFile
    id: Optional[str] = None

    @property
    def type(self) -> Optional[str]:
        return self.config.get("type")

    # ------------------------------------------------------------------
    # Personalization
    # ------------------------------------------------------------------

    async def personalize(self, details: PersonalizeDetails) -> None:
        """Write the project's identity into its config and metadata files."""
        self.config.set("name", details.name)
        if details.app_id:
            self.config.set("id", details.app_id)
        self._personalize_package_json(details)
        self._personalize_capacitor_config(details)
        self._personalize_config_xml(details)

        resources = self.directory / "resources"
        if details.app_icon:
            resources.mkdir(parents=True, exist_ok=True)
            (resources / "icon.png").write_bytes(details.app_icon)
        if details.splash:
            resources.mkdir(parents=True, exist_ok=True)
            (resources / "splash.png").write_bytes(details.splash)

        if details.theme_color:
            self._apply_theme_color(details.theme_color)

    def _personalize_package_json(self, details: PersonalizeDetails) -> None:
        path = self.directory / "package.json"
        if not path.exists():
            return
        pkg: dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
        pkg["name"] = details.project_id
        pkg["version"] = PACKAGE_VERSION
        pkg["description"] = PACKAGE_DESCRIPTION
        path.write_text(json.dumps(pkg, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")

    def _personalize_capacitor_config(self, details: PersonalizeDetails) -> None:
        path = self.directory / "capacitor.config.json"
        if not path.exists():
            return
        conf: dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
        conf["appName"] = details.name
        if details.package_id:
            conf["appId"] = details.package_id
        path.write_text(json.dumps(conf, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")

    def _personalize_config_xml(self, details: PersonalizeDetails) -> None:
        path = self.directory / "config.xml"
        if not path.exists():
            return
        xml = path.read_text(encoding="utf-8")
        xml = re.sub(r"<name>[^<]*</name>", f"<name>{_xml_escape(details.name)}</name>", xml, count=1)
        if details.package_id:
            xml = re.sub(
                r'(<widget\b[^>]*\bid=")[^"]*(")',
                rf"\g<1>{details.package_id}\g<2>",
                xml,
                count=1,
            )
        path.write_text(xml, encoding="utf-8")

    def _apply_theme_color(self, color: str) -> None:
        for relative in _THEME_FILES:
            path = self.directory / relative
            if not path.exists():
                continue
            text = path.read_text(encoding="utf-8")
            text = re.sub(r"(--ion-color-primary:\s*)[^;]+;", rf"\g<1>{color};", text)
            rgb = _hex_to_rgb(color)
            if rgb:
                text = re.sub(r"(--ion-color-primary-rgb:\s*)[^;]+;", rf"\g<1>{rgb};", text)
            path.write_text(text, encoding="utf-8")
            return
        logger.debug("No theme variables file found in %s", self.directory)


def _xml_escape(value: str) -> str:
    return value.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _hex_to_rgb(color: str) -> Optional[str]:
    match = re.fullmatch(r"#?([0-9a-fA-F]{6})", color.strip())
    if not match:
        return None
    value = match.group(1)
    return ",".join(str(int(value[i:i + 2], 16)) for i in (0, 2, 4))


# ---------------------------------------------------------------------------
# Discovery / construction
# ---------------------------------------------------------------------------


def find_project_file(start: str | Path) -> Optional[Path]:
    """Walk up from *start* looking for ``ionic.config.json``."""
    current = Path(start).resolve()
    for directory in (current, *current.parents):
        candidate = directory / PROJECT_FILE
        if candidate.is_file():
            return candidate
    return None


def load_project(cwd: str | Path) -> Optional[Project]:
    """Return the project enclosing *cwd*, or ``None`` outside any project."""
    config_path = find_project_file(cwd)
    if config_path is None:
        return None

    root = config_path.parent
    try:
        data = ProjectConfigFile(config_path).read()
    except (OSError, ValueError) as exc:
        logger.debug("Ignoring unreadable project file %s: %s", config_path, exc)
        return None

    if isinstance(data.get("projects"), dict):
        return Project(
            root_directory=root,
            directory=root,
            context=ProjectContext.MULTIAPP,
            config=ProjectConfigFile(config_path),
        )
    return create_project_from_directory(root)


def create_project_from_directory(directory: str | Path) -> Project:
    """A single-app project whose config lives in *directory*."""
    path = Path(directory).resolve()
    return Project(
        root_directory=path,
        directory=path,
        context=ProjectContext.APP,
        config=ProjectConfigFile(path / PROJECT_FILE),
    )


def create_multiapp_project(workspace_root: str | Path, project_id: str, directory: str | Path) -> Project:
    """A sub-project registered under ``projects.<project_id>`` of a workspace."""
    root = Path(workspace_root).resolve()
    return Project(
        root_directory=root,
        directory=Path(directory).resolve(),
        context=ProjectContext.MULTIAPP,
        config=ProjectConfigFile(root / PROJECT_FILE, prefix=f"projects.{project_id}"),
        id=project_id,
    )
