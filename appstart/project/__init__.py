"""Project model: config files, discovery and personalization."""

from appstart.project.config_file import ProjectConfigFile
from appstart.project.project import (
    PersonalizeDetails,
    Project,
    ProjectContext,
    create_multiapp_project,
    create_project_from_directory,
    load_project,
)

__all__ = [
    "PersonalizeDetails",
    "Project",
    "ProjectConfigFile",
    "ProjectContext",
    "create_multiapp_project",
    "create_project_from_directory",
    "load_project",
]
