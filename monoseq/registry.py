"""npm registry client.

Only one call is needed: fetch a package's published metadata
("packument") with ``GET {registry}/{package}``. A 404 means the package was
never published and is returned as None.
"""

from __future__ import annotations

import logging
import urllib.parse

import httpx

from .errors import RegistryError
from .models import RegistryMetadata

log = logging.getLogger("monoseq.registry")

DEFAULT_TIMEOUT = 1.0


def encode_package_name(name: str) -> str:
    """URL-encode a package name for the registry API.

    Scoped packages like ``@scope/pkg`` are encoded as ``@scope%2Fpkg``.
    Unscoped packages are returned as-is.
    """
    if name.startswith("@"):
        return urllib.parse.quote(name, safe="@")
    return name


class RegistryClient:
    """Fetches published package metadata from an npm registry.

    Args:
        base_url: Base URL of the registry.
        timeout: Request timeout in seconds. A timeout fails the fetch.
        transport: Optional httpx transport, used by tests.
    """

    def __init__(
        self,
        base_url: str = "https://registry.npmjs.org",
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def fetch(self, package_name: str) -> RegistryMetadata | None:
        """Return published metadata, or None if the package is unknown.

        Raises:
            RegistryError: On any failure other than 404, including timeouts.
        """
        url = f"{self._base_url}/{encode_package_name(package_name)}"
        log.debug("GET %s", url)
        try:
            with httpx.Client(
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                response = client.get(url)
                if response.status_code == 404:
                    return None
                response.raise_for_status()
                return RegistryMetadata.model_validate(response.json())
        except httpx.HTTPError as exc:
            raise RegistryError(
                f"Failed to fetch registry metadata for {package_name}: {exc}"
            ) from exc
        except ValueError as exc:
            raise RegistryError(
                f"Invalid registry metadata for {package_name}: {exc}"
            ) from exc
