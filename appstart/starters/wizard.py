"""Bridge to the remote app-creation wizard.

A user can design an app on the website; the CLI then receives the session's
``start id`` and turns the stored answers into a ``GeneratedSchema`` without
asking any questions.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from pathlib import Path
from typing import Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from appstart.config import Config
from appstart.errors import FatalError
from appstart.models import GeneratedSchema
from appstart.utils import print_error, print_warning, slugify, strong

logger = logging.getLogger(__name__)

WIZARD_RETRY_URL = "https://ionicframework.com/start"

_DATA_URI_PREFIX = re.compile(r"^data:image/[\w.+-]+;base64,")


class WizardApp(BaseModel):
    """App answers stored by the remote wizard."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: str
    name: str
    template: str
    package_id: Optional[str] = Field(default=None, alias="package-id")
    theme: Optional[str] = None
    app_icon: Optional[str] = Field(default=None, alias="appIcon")
    app_splash: Optional[str] = Field(default=None, alias="appSplash")


def decode_data_uri(value: Optional[str]) -> Optional[bytes]:
    """Decode a ``data:image/...;base64,`` URI (or bare base64) to bytes."""
    if not value:
        return None
    try:
        return base64.b64decode(_DATA_URI_PREFIX.sub("", value), validate=False)
    except (binascii.Error, ValueError):
        logger.debug("Ignoring undecodable image payload")
        return None


def schema_from_wizard_app(app: WizardApp, project_dir: Path) -> GeneratedSchema:
    """Build the creation schema for a wizard session."""
    return GeneratedSchema(
        display_name=app.name,
        project_type=app.type,
        template_name=app.template,
        project_id=slugify(app.name),
        project_dir=project_dir,
        package_id=app.package_id or None,
        remote_app_id=None,
        app_icon=decode_data_uri(app.app_icon),
        splash=decode_data_uri(app.app_splash),
        theme_color=app.theme or None,
    )


class WizardBridge:
    """Talks to the wizard API at ``config.wizard_url_base``."""

    def __init__(self, config: Config) -> None:
        self.base_url = config.wizard_url_base.rstrip("/")
        self.timeout = config.http_timeout

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout, connect=10.0),
        )

    def _no_such_app(self, start_id: str) -> FatalError:
        print_error(
            f"No such app {strong(start_id)}. This app configuration may have expired. "
            f"Please retry at {WIZARD_RETRY_URL}"
        )
        return FatalError()

    async def fetch(self, start_id: str) -> WizardApp:
        """Load the wizard session *start_id*.

        Raises:
            FatalError: If the session does not exist or cannot be read.
        """
        try:
            async with self._client() as client:
                response = await client.get(f"/api/v1/wizard/app/{start_id}")
        except httpx.HTTPError as exc:
            raise self._no_such_app(start_id) from exc

        if response.status_code != 200:
            raise self._no_such_app(start_id)

        try:
            data = response.json()
        except ValueError as exc:
            raise self._no_such_app(start_id) from exc
        if not data:
            raise self._no_such_app(start_id)

        try:
            return WizardApp.model_validate(data)
        except ValidationError as exc:
            raise self._no_such_app(start_id) from exc

    async def mark_started(self, start_id: str) -> None:
        """Tell the wizard the app is being generated. Failures only warn."""
        try:
            async with self._client() as client:
                response = await client.post(f"/api/v1/wizard/app/{start_id}/start")
                response.raise_for_status()
        except httpx.HTTPError as exc:
            print_warning(f"Unable to set app flag on server: {exc}")
