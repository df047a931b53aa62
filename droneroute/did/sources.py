"""Mini README: Where per-prefecture DID GeoJSON documents come from.

Structure:
    * DIDDatasetSource - protocol with a single coroutine ``fetch``.
    * FileDatasetSource - reads ``r02_did_{code}_{name}.geojson`` from a
      directory.
    * HttpDatasetSource - downloads from a URL template on worker threads,
      one ``requests`` session per thread.

Sources raise on failure (missing file, HTTP error, invalid JSON). The
resolver turns those failures into the safe "not a DID" fallback.
"""

from __future__ import annotations

import asyncio
import json
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

import requests

from ..logging_utils import get_logger
from .prefectures import Prefecture

LOGGER = get_logger(__name__)


class DIDDatasetSource(Protocol):
    async def fetch(self, prefecture: Prefecture) -> Dict[str, Any]:
        ...


class FileDatasetSource:
    """Load DID datasets from ``directory``."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def path_for(self, prefecture: Prefecture) -> Path:
        return self.directory / prefecture.dataset_name

    async def fetch(self, prefecture: Prefecture) -> Dict[str, Any]:
        path = self.path_for(prefecture)
        LOGGER.debug("Reading DID dataset %s", path)
        text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        return json.loads(text)


class HttpDatasetSource:
    """Download DID datasets from a ``{code}``/``{name}`` URL template.

    Downloads run on worker threads, so each thread gets its own
    ``requests.Session`` unless a session is injected.
    """

    def __init__(
        self,
        url_template: str,
        *,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url_template = url_template
        self.timeout = timeout
        self._shared_session = session
        self._local = threading.local()

    def session_for_thread(self) -> requests.Session:
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._local.session = requests.Session()
        return session

    def url_for(self, prefecture: Prefecture) -> str:
        return self.url_template.format(code=prefecture.code, name=prefecture.name)

    def _download(self, url: str) -> Dict[str, Any]:
        response = self.session_for_thread().get(
            url, headers={"Accept": "application/json"}, timeout=self.timeout
        )
        response.raise_for_status()
        return response.json()

    async def fetch(self, prefecture: Prefecture) -> Dict[str, Any]:
        url = self.url_for(prefecture)
        LOGGER.debug("Downloading DID dataset %s", url)
        return await asyncio.to_thread(self._download, url)
