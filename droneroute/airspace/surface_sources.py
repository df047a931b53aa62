"""Mini README: Where airport restriction-surface GeoJSON comes from.

Structure:
    * surface_slug - file and URL friendly key for an airport name.
    * FileSurfaceSource - reads ``<slug>.geojson`` from a directory.
    * HttpSurfaceSource - downloads from a ``{slug}``/``{name}`` URL template.

Both sources expose ``fetch(airport_name)`` and plug into
``RestrictionIndex.load_surfaces``. An airport with no published surfaces
(missing file, HTTP 404) yields an empty FeatureCollection so the circle
stays in force; any other failure raises and the index marks that airport's
surfaces as failed.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from ..logging_utils import get_logger

LOGGER = get_logger(__name__)

EMPTY_COLLECTION: Dict[str, Any] = {"type": "FeatureCollection", "features": []}


def surface_slug(airport_name: str) -> str:
    """``"Tokyo International Airport (Haneda)"`` -> ``"tokyo-international-airport-haneda"``."""

    return re.sub(r"[^a-z0-9]+", "-", airport_name.lower()).strip("-")


class FileSurfaceSource:
    """Load surface collections from ``directory``."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def path_for(self, airport_name: str) -> Path:
        return self.directory / f"{surface_slug(airport_name)}.geojson"

    def fetch(self, airport_name: str) -> Dict[str, Any]:
        path = self.path_for(airport_name)
        if not path.exists():
            return dict(EMPTY_COLLECTION)
        LOGGER.debug("Reading restriction surfaces %s", path)
        return json.loads(path.read_text(encoding="utf-8"))


class HttpSurfaceSource:
    """Download surface collections over HTTP."""

    def __init__(
        self,
        url_template: str,
        *,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url_template = url_template
        self.timeout = timeout
        self.session = session or requests.Session()

    def url_for(self, airport_name: str) -> str:
        return self.url_template.format(slug=surface_slug(airport_name), name=quote(airport_name))

    def fetch(self, airport_name: str) -> Dict[str, Any]:
        url = self.url_for(airport_name)
        LOGGER.debug("Downloading restriction surfaces %s", url)
        response = self.session.get(url, headers={"Accept": "application/json"}, timeout=self.timeout)
        if response.status_code == 404:
            return dict(EMPTY_COLLECTION)
        response.raise_for_status()
        return response.json()
