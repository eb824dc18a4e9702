"""Pluggable sources for mark scheme artifacts."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol
from urllib.parse import quote

import httpx

from paperbuddy.settings import settings

logger = logging.getLogger(__name__)


class FetchFailureKind(str, Enum):
    NOT_FOUND = "not_found"
    UNREACHABLE = "unreachable"
    SERVER_ERROR = "server_error"


@dataclass
class FetchFailure(Exception):
    kind: FetchFailureKind
    name: str
    status_code: int | None = None
    message: str = ""

    def __str__(self) -> str:
        if self.message:
            return self.message
        if self.status_code is not None:
            return f"Fetching {self.name} failed: {self.kind.value} ({self.status_code})"
        return f"Fetching {self.name} failed: {self.kind.value}"


class ArtifactFetcher(Protocol):
    async def fetch(self, name: str) -> bytes:
        """Return the raw bytes of the named artifact or raise FetchFailure."""


class LocalArtifactFetcher:
    """Reads artifacts from a directory on local disk."""

    def __init__(self, base_dir: Path) -> None:
        self.base_dir = base_dir

    def _resolve(self, name: str) -> Path:
        clean_name = name.strip("/")
        root = self.base_dir.resolve()
        destination = (root / clean_name).resolve()
        if root not in destination.parents:
            raise FetchFailure(FetchFailureKind.NOT_FOUND, name, message=f"Invalid artifact name {name!r}")
        return destination

    async def fetch(self, name: str) -> bytes:
        path = self._resolve(name)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as exc:
            raise FetchFailure(FetchFailureKind.NOT_FOUND, name) from exc
        except OSError as exc:
            raise FetchFailure(FetchFailureKind.UNREACHABLE, name, message=f"Could not read {name}: {exc}") from exc


class RemoteArtifactFetcher:
    """Fetches artifacts over HTTP from a static file host."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    def url_for(self, name: str) -> str:
        return f"{self.base_url}/{quote(name.strip('/'))}"

    async def fetch(self, name: str) -> bytes:
        url = self.url_for(name)
        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds, transport=self._transport) as client:
                response = await client.get(url)
        except httpx.HTTPError as exc:
            raise FetchFailure(FetchFailureKind.UNREACHABLE, name, message=f"Could not reach {url}: {exc}") from exc

        if response.status_code in {404, 410}:
            raise FetchFailure(FetchFailureKind.NOT_FOUND, name, status_code=response.status_code)
        if not response.is_success:
            raise FetchFailure(FetchFailureKind.SERVER_ERROR, name, status_code=response.status_code)
        return response.content


_fetcher: ArtifactFetcher | None = None


def _create_fetcher() -> ArtifactFetcher:
    backend = settings.markscheme_backend.lower().strip()
    if backend == "remote":
        if not settings.markscheme_base_url:
            raise RuntimeError("Remote mark scheme backend requires MARKSCHEME_BASE_URL")
        return RemoteArtifactFetcher(settings.markscheme_base_url, timeout_seconds=settings.http_timeout_seconds)
    if backend != "local":
        raise RuntimeError(f"Unknown mark scheme backend '{settings.markscheme_backend}'. Use one of: local, remote")
    return LocalArtifactFetcher(settings.markscheme_path)


def get_artifact_fetcher() -> ArtifactFetcher:
    global _fetcher
    if _fetcher is None:
        _fetcher = _create_fetcher()
        logger.info("mark scheme fetcher ready", extra={"backend": settings.markscheme_backend})
    return _fetcher


def reset_artifact_fetcher() -> None:
    global _fetcher
    _fetcher = None
