"""Compatibility checks for the legacy Cordova native integration."""

from __future__ import annotations

from appstart.errors import FatalError
from appstart.prompts import PromptService
from appstart.starters.catalog import CUSTOM_PROJECT_TYPE
from appstart.utils import input_text, print_warning

UNSUPPORTED_PROJECT_TYPES = frozenset({CUSTOM_PROJECT_TYPE})


def check_for_unsupported_project(project_type: str) -> None:
    """Raise ``FatalError`` if Cordova cannot be integrated with *project_type*."""
    if project_type in UNSUPPORTED_PROJECT_TYPES:
        raise FatalError(
            f"Cordova is not supported for {input_text(project_type)} projects. "
            f"Use {input_text('--capacitor')} instead."
        )


async def confirm_cordova_usage(prompts: PromptService) -> bool:
    print_warning(
        "About to integrate your app with Cordova. We now recommend Capacitor as the "
        "official native runtime for new apps."
    )
    return await prompts.confirm("Are you sure you want to continue?", default=True)
