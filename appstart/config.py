"""appstart configuration.

Centralised, typed configuration for the start pipeline. All settings use
Pydantic v2 models so they can be validated at construction time and
serialised to/from JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

PROJECT_FILE = "ionic.config.json"
STARTER_MANIFEST_FILE = "ionic.starter.json"


class Config(BaseModel):
    """Global appstart configuration.

    Instances are typically created once by the CLI entry point (usually via
    :meth:`from_env`) and then passed through the rest of the system.
    """

    starter_base_url: str = Field(default="https://d2ql0qc7j8u4b2.cloudfront.net")
    wizard_url_base: str = Field(default="https://ionicframework.com")
    api_url: str = Field(default="https://api.ionicjs.com")
    api_token: str | None = Field(default=None, description="Bearer token for app lookups")
    npm_client: Literal["npm", "yarn"] = Field(default="npm")
    http_timeout: float = Field(default=30.0, ge=1, description="Per-request timeout in seconds")
    default_package_id: str = Field(default="io.ionic.starter")
    cli_command: list[str] = Field(
        default_factory=lambda: ["ionic"],
        description="Command used to run integration and link sub-operations",
    )

    # ------------------------------------------------------------------
    # Derived URLs
    # ------------------------------------------------------------------

    def _tagged_base(self, tag: str) -> str:
        base = self.starter_base_url.rstrip("/")
        return base if tag == "latest" else f"{base}/{tag}"

    def starter_archive_url(self, starter_id: str, tag: str = "latest") -> str:
        """URL of the ``.tar.gz`` archive for a starter id under *tag*."""
        return f"{self._tagged_base(tag)}/{starter_id}.tar.gz"

    def starter_list_url(self, tag: str = "latest") -> str:
        """URL of the remote starter registry index for *tag*."""
        return f"{self._tagged_base(tag)}/starters.json"

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file.

        Returns:
            The path where the file was written.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            APPSTART_STARTER_BASE_URL, START_WIZARD_URL_BASE, APPSTART_API_URL,
            APPSTART_TOKEN, APPSTART_NPM_CLIENT, APPSTART_HTTP_TIMEOUT,
            APPSTART_CLI.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("APPSTART_STARTER_BASE_URL"):
            kwargs["starter_base_url"] = os.environ["APPSTART_STARTER_BASE_URL"]
        if os.environ.get("START_WIZARD_URL_BASE"):
            kwargs["wizard_url_base"] = os.environ["START_WIZARD_URL_BASE"]
        if os.environ.get("APPSTART_API_URL"):
            kwargs["api_url"] = os.environ["APPSTART_API_URL"]
        if os.environ.get("APPSTART_TOKEN"):
            kwargs["api_token"] = os.environ["APPSTART_TOKEN"]
        if os.environ.get("APPSTART_NPM_CLIENT"):
            kwargs["npm_client"] = os.environ["APPSTART_NPM_CLIENT"]
        if os.environ.get("APPSTART_HTTP_TIMEOUT"):
            kwargs["http_timeout"] = float(os.environ["APPSTART_HTTP_TIMEOUT"])
        if os.environ.get("APPSTART_CLI"):
            kwargs["cli_command"] = os.environ["APPSTART_CLI"].split()

        return cls(**kwargs)
