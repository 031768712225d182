"""Recognised options of the ``start`` command.

``StartOptions`` enumerates every option with its type and default, legacy
ones included so they can be detected. :func:`normalize_options` is the pure
pass that rejects removed options and folds deprecated ones into their
replacements before any schema is built.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from appstart.errors import FatalError
from appstart.utils import input_text


class StartOptions(BaseModel):
    """Canonical option set for one ``start`` invocation."""
    model_config = ConfigDict(frozen=True)

    list_starters: bool = False
    project_type: Optional[str] = None
    # ``None`` means "not specified", which matters for default inference.
    cordova: Optional[bool] = None
    capacitor: Optional[bool] = None
    deps: bool = True
    git: bool = True
    link: bool = False
    id: Optional[str] = Field(default=None, description="Remote app id to link")
    project_id: Optional[str] = None
    package_id: Optional[str] = None
    start_id: Optional[str] = Field(default=None, description="Remote wizard session id")
    tag: str = "latest"

    # Legacy options. Always cleared by normalize_options().
    v1: bool = False
    v2: bool = False
    app_name: Optional[str] = None
    display_name: Optional[str] = None
    bundle_id: Optional[str] = None


_EXAMPLE_NAME = input_text('appstart start "My App"')


def normalize_options(options: StartOptions) -> tuple[StartOptions, list[str]]:
    """Reject removed options and remap deprecated ones.

    Returns:
        The canonical options and the deprecation warnings to show, in order.

    Raises:
        FatalError: If ``--v1`` or ``--v2`` was given.
    """
    if options.v1 or options.v2:
        raise FatalError(
            f"The {input_text('--v1')} and {input_text('--v2')} flags have been removed.\n"
            f"Use the {input_text('--type')} option. (see {input_text('appstart start --help')})"
        )

    warnings: list[str] = []
    updates: dict[str, object] = {}

    if options.app_name:
        warnings.append(
            f"The {input_text('--app-name')} option has been removed. Use the "
            f"{input_text('name')} argument with double quotes: e.g. {_EXAMPLE_NAME}"
        )
        updates["app_name"] = None

    if options.display_name:
        warnings.append(
            f"The {input_text('--display-name')} option has been removed. Use the "
            f"{input_text('name')} argument with double quotes: e.g. {_EXAMPLE_NAME}"
        )
        updates["display_name"] = None

    if options.bundle_id:
        warnings.append(
            f"The {input_text('--bundle-id')} option has been deprecated. "
            f"Please use {input_text('--package-id')}."
        )
        if not options.package_id:
            updates["package_id"] = options.bundle_id
        updates["bundle_id"] = None

    return (options.model_copy(update=updates) if updates else options), warnings
