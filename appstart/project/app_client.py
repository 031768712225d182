"""Async client for looking up an existing remote app by id."""

from __future__ import annotations

import httpx
from pydantic import BaseModel, ValidationError

from appstart.config import Config
from appstart.errors import FatalError


class RemoteApp(BaseModel):
    """The subset of a remote app record the start pipeline needs."""

    id: str
    name: str
    slug: str


class AppClient:
    """Fetches app records from the remote API with a bearer token."""

    def __init__(self, config: Config, token: str | None = None) -> None:
        self.base_url = config.api_url.rstrip("/")
        self.timeout = config.http_timeout
        self.token = token if token is not None else config.api_token

    def _client(self) -> httpx.AsyncClient:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=httpx.Timeout(self.timeout, connect=10.0),
        )

    async def load(self, app_id: str) -> RemoteApp:
        """Return the app with *app_id*.

        Raises:
            FatalError: On transport errors, non-200 responses or a
                malformed payload.
        """
        try:
            async with self._client() as client:
                response = await client.get(f"/apps/{app_id}")
        except httpx.HTTPError as exc:
            raise FatalError(f"Unable to look up app {app_id}: {exc}") from exc

        if response.status_code == 404:
            raise FatalError(f"No such app: {app_id}")
        if response.status_code != 200:
            raise FatalError(f"Unable to look up app {app_id}: HTTP {response.status_code}")

        try:
            payload = response.json()
            return RemoteApp.model_validate(payload.get("data", payload))
        except (ValueError, AttributeError, ValidationError) as exc:
            raise FatalError(f"Unexpected response while looking up app {app_id}.") from exc
