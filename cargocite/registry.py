"""crates.io metadata lookups used to enrich dependency citations."""

from __future__ import annotations

import json
from dataclasses import dataclass
from http.client import HTTPException
from typing import Callable, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from .logging import get_logger
from .models import RegistryMetadata

DEFAULT_API_URL = "https://crates.io/api/v1/crates"
DEFAULT_CRATE_URL = "https://crates.io/crates"
DEFAULT_USER_AGENT = "cargo-cite"


@dataclass
class RegistryRequest:
    """A single metadata lookup against the registry API."""

    url: str
    user_agent: str
    request_timeout: Optional[float]


class RegistryClient:
    """Fetches crate descriptions from the public registry.

    Every failure mode (transport error, non-2xx status, malformed body)
    collapses to ``None`` so a lookup can never abort a run.
    """

    def __init__(
        self,
        *,
        api_url: str = DEFAULT_API_URL,
        crate_url: str = DEFAULT_CRATE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        request_timeout: Optional[float] = None,
        transport: Callable[[RegistryRequest], bytes] | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.crate_url = crate_url.rstrip("/")
        self.user_agent = user_agent
        self.request_timeout = request_timeout
        self._transport = transport or self._http_transport
        self.logger = get_logger("registry")

    def fetch(self, name: str) -> Optional[RegistryMetadata]:
        """Look up ``name`` once; returns ``None`` when anything goes wrong."""
        request = RegistryRequest(
            url=f"{self.api_url}/{quote(name, safe='')}",
            user_agent=self.user_agent,
            request_timeout=self.request_timeout,
        )
        try:
            raw = self._transport(request)
        except (HTTPError, URLError, HTTPException, OSError, ValueError) as exc:
            self.logger.debug("Registry lookup for %s failed: %s", name, exc)
            return None

        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            self.logger.debug("Registry returned an unreadable body for %s: %s", name, exc)
            return None

        metadata = self._parse_crate(payload)
        if metadata is None:
            self.logger.debug("Registry response for %s has an unexpected shape", name)
        return metadata

    def page_url(self, name: str) -> str:
        """Return the human-facing registry page for ``name``."""
        return f"{self.crate_url}/{name}"

    @staticmethod
    def _http_transport(request: RegistryRequest) -> bytes:
        http_request = Request(
            request.url,
            headers={"User-Agent": request.user_agent, "Accept": "application/json"},
            method="GET",
        )
        if request.request_timeout is None:
            with urlopen(http_request) as response:
                return response.read()
        with urlopen(http_request, timeout=request.request_timeout) as response:
            return response.read()

    @staticmethod
    def _parse_crate(payload: object) -> Optional[RegistryMetadata]:
        if not isinstance(payload, dict):
            return None
        crate = payload.get("crate")
        if not isinstance(crate, dict):
            return None

        fields = {}
        for key in ("description", "repository", "homepage"):
            value = crate.get(key)
            if value is not None and not isinstance(value, str):
                return None
            fields[key] = value

        authors = crate.get("authors")
        if authors is not None:
            if not isinstance(authors, list) or not all(isinstance(item, str) for item in authors):
                return None
            authors = tuple(authors)

        return RegistryMetadata(
            description=fields["description"],
            repository=fields["repository"],
            homepage=fields["homepage"],
            authors=authors,
        )


__all__ = ["RegistryClient", "RegistryRequest"]
