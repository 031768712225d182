"""Starter template catalog.

Resolves a ``(template name, project type)`` pair to a downloadable starter.
The built-in managed list is consulted first; its archive URLs are computed
locally. Anything else is looked up in the remote starter registry, which is
fetched at most once per tag for the lifetime of the catalog.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import BaseModel, Field, ValidationError

from appstart.config import Config
from appstart.errors import FatalError
from appstart.models import ResolvedStarterTemplate, StarterTemplate
from appstart.utils import TaskChain, input_text, strong

logger = logging.getLogger(__name__)

STARTERS_REPO_URL = "https://github.com/ionic-team/starters"


# ---------------------------------------------------------------------------
# Built-in data
# ---------------------------------------------------------------------------

class Framework(BaseModel):
    type: str
    name: str
    description: str


SUPPORTED_FRAMEWORKS: list[Framework] = [
    Framework(type="angular", name="Angular", description="https://angular.io"),
    Framework(type="react", name="React", description="https://reactjs.org"),
    Framework(type="vue", name="Vue", description="https://vuejs.org"),
]

DEFAULT_FRAMEWORK = "angular"

# Legacy types are still valid but only have starters in the remote registry.
PROJECT_TYPES: list[str] = ["angular", "react", "vue", "ionic-angular", "ionic1"]

CUSTOM_PROJECT_TYPE = "custom"


def _managed(project_type: str, name: str, description: str) -> StarterTemplate:
    return StarterTemplate(
        name=name,
        project_type=project_type,
        kind="managed",
        id=f"{project_type}-official-{name}",
        description=description,
    )


STARTER_TEMPLATES: list[StarterTemplate] = [
    _managed("angular", "tabs", "A starting project with a simple tabbed interface"),
    _managed("angular", "sidemenu", "A starting project with a side menu with navigation in the content area"),
    _managed("angular", "blank", "A blank starter project"),
    _managed("angular", "list", "A starting project with a list"),
    _managed("angular", "my-first-app", "An example application that builds a camera with gallery"),
    StarterTemplate(
        name="conference",
        project_type="angular",
        kind="repo",
        repo="https://github.com/ionic-team/ionic-conference-app",
        description="A kitchen-sink application that shows off all Ionic has to offer",
    ),
    _managed("react", "blank", "A blank starter project"),
    _managed("react", "list", "A starting project with a list"),
    _managed("react", "my-first-app", "An example application that builds a camera with gallery"),
    _managed("react", "sidemenu", "A starting project with a side menu with navigation in the content area"),
    _managed("react", "tabs", "A starting project with a simple tabbed interface"),
    StarterTemplate(
        name="conference",
        project_type="react",
        kind="repo",
        repo="https://github.com/ionic-team/ionic-react-conference-app",
        description="A kitchen-sink application that shows off all Ionic has to offer",
    ),
    _managed("vue", "blank", "A blank starter project"),
    _managed("vue", "list", "A starting project with a list"),
    _managed("vue", "my-first-app", "An example application that builds a camera with gallery"),
    _managed("vue", "sidemenu", "A starting project with a side menu with navigation in the content area"),
    _managed("vue", "tabs", "A starting project with a simple tabbed interface"),
    StarterTemplate(
        name="conference",
        project_type="vue",
        kind="repo",
        repo="https://github.com/ionic-team/ionic-vue-conference-app",
        description="A kitchen-sink application that shows off all Ionic has to offer",
    ),
]


def is_supported_project_type(project_type: str) -> bool:
    return project_type == CUSTOM_PROJECT_TYPE or project_type in PROJECT_TYPES


# ---------------------------------------------------------------------------
# Remote registry
# ---------------------------------------------------------------------------

class RegistryStarter(BaseModel):
    name: str
    id: str
    type: str


class StarterList(BaseModel):
    starters: list[RegistryStarter] = Field(default_factory=list)


class TemplateCatalog:
    """Looks up starter templates in the managed list and the remote registry."""

    def __init__(
        self,
        config: Config,
        templates: list[StarterTemplate] | None = None,
    ) -> None:
        self.config = config
        self.templates = list(STARTER_TEMPLATES if templates is None else templates)
        self._registry: dict[str, StarterList] = {}

    def list(self, project_type: str | None = None) -> list[StarterTemplate]:
        """Managed catalog entries, optionally filtered by project type."""
        if project_type is None:
            return list(self.templates)
        return [t for t in self.templates if t.project_type == project_type]

    def find(self, name: str, project_type: str) -> StarterTemplate | None:
        for template in self.templates:
            if template.name == name and template.project_type == project_type:
                return template
        return None

    async def get_starter_list(self, tag: str = "latest") -> StarterList:
        """Fetch (once per tag) the remote registry index."""
        if tag in self._registry:
            return self._registry[tag]

        url = self.config.starter_list_url(tag)
        logger.debug("Fetching starter list from %s", url)
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.http_timeout, connect=10.0),
                follow_redirects=True,
            ) as client:
                response = await client.get(url)
        except httpx.HTTPError as exc:
            raise FatalError(f"Unable to fetch starter list from {url}: {exc}") from exc

        if response.status_code != 200:
            raise FatalError(
                f"Unable to fetch starter list from {url}: HTTP {response.status_code}"
            )

        try:
            starter_list = StarterList.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise FatalError(f"Invalid starter list received from {url}.") from exc

        self._registry[tag] = starter_list
        return starter_list

    async def resolve(
        self, name: str, project_type: str, tag: str = "latest"
    ) -> ResolvedStarterTemplate:
        """Resolve a template to something the acquisition engine can fetch.

        Raises:
            FatalError: If neither the managed list nor the registry knows it.
        """
        template = self.find(name, project_type)

        if template is not None and template.kind == "managed":
            return ResolvedStarterTemplate(
                name=template.name,
                project_type=template.project_type,
                kind="managed",
                archive_url=self.config.starter_archive_url(template.id or template.name, tag),
            )

        if template is not None and template.kind == "repo":
            return ResolvedStarterTemplate(
                name=template.name,
                project_type=template.project_type,
                kind="repo",
                repo_url=template.repo,
            )

        tasks = TaskChain()
        tasks.next("Looking up starter")
        try:
            starter_list = await self.get_starter_list(tag)
        except FatalError:
            tasks.fail()
            raise

        for starter in starter_list.starters:
            if starter.type == project_type and starter.name == name:
                tasks.end()
                return ResolvedStarterTemplate(
                    name=starter.name,
                    project_type=starter.type,
                    kind="managed",
                    archive_url=self.config.starter_archive_url(starter.id, tag),
                )

        tasks.fail()
        raise FatalError(
            f"Unable to find starter template for {input_text(name)}\n"
            "If this is not a typo, please make sure it is a valid starter template "
            f"within the starters repo: {strong(STARTERS_REPO_URL)}"
        )
