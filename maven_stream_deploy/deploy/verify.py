"""HTTP check that an uploaded artifact is visible in a remote repository."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from maven_stream_deploy.domain import ArtifactCoordinates, Repository
from maven_stream_deploy.settings import Settings, get_settings


class ArtifactProbe:
    """Look up artifacts by their Maven repository layout path."""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[httpx.AsyncClient] = None) -> None:
        self.settings = settings or get_settings()
        self.log = logging.getLogger(self.__class__.__name__)
        auth = None
        if self.settings.http_username and self.settings.http_password:
            auth = (self.settings.http_username, self.settings.http_password)
        self._auth = auth
        self._client = client or httpx.AsyncClient(timeout=self.settings.http_timeout, follow_redirects=True)

    def build_artifact_url(self, repository: Repository, coords: ArtifactCoordinates) -> str:
        base = repository.url.rstrip("/")
        return f"{base}/{'/'.join(coords.path_segments)}"

    async def exists(self, repository: Repository, coords: ArtifactCoordinates) -> bool:
        url = self.build_artifact_url(repository, coords)
        kwargs = {"auth": self._auth} if self._auth else {}
        resp = await self._client.head(url, **kwargs)
        if resp.status_code == httpx.codes.NOT_FOUND:
            self.log.info("Artifact %s missing in %s url=%s", coords, repository.id, url)
            return False
        resp.raise_for_status()
        self.log.info("Artifact %s present in %s", coords, repository.id)
        return True

    async def aclose(self) -> None:
        await self._client.aclose()
