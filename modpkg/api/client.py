"""
Async client for the per-id add-on metadata API, plus the shared session factory.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp
from pydantic import ValidationError

from modpkg import __version__
from modpkg.exceptions import NetworkError, NotFoundError
from modpkg.models.catalog import CatalogEntry, FileRecord
from modpkg.models.config import AppConfig

log = logging.getLogger(__name__)

USER_AGENT = f"modpkg/{__version__}"


def create_session(config: AppConfig) -> aiohttp.ClientSession:
    """
    Builds the aiohttp session used for one command invocation.

    The connector is sized from `max_downloads` so the install fan-out and the
    metadata calls share one pool.
    """
    connector = aiohttp.TCPConnector(
        limit=config.max_downloads * 2,
        limit_per_host=config.max_downloads,
        ttl_dns_cache=300,
        enable_cleanup_closed=True,
    )
    if config.request_timeout is None:
        timeout = aiohttp.ClientTimeout(total=None)
    else:
        timeout = aiohttp.ClientTimeout(
            total=None, sock_connect=15, sock_read=config.request_timeout
        )
    return aiohttp.ClientSession(
        connector=connector,
        timeout=timeout,
        headers={"User-Agent": USER_AGENT},
    )


class MetaAPIClient:
    """
    Client for the metadata service that answers single-entry and single-file
    lookups. The bulk catalog feed is handled by the catalog store instead.
    """

    def __init__(
        self, config: AppConfig, session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initializes the API client.

        Args:
            config: Application configuration providing the API base URL.
            session: An existing session to reuse. When omitted, the client
                creates one lazily and closes it in `close()`.
        """
        self.base_url = config.meta_api_url
        self._config = config
        self._session = session
        self._owns_session = session is None

    async def _initialize_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = create_session(self._config)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Closes the session if this client created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def api_call(self, path: str) -> Dict[str, Any]:
        """Performs a GET against the metadata API and returns the decoded JSON."""
        session = await self._initialize_session()
        url = f"{self.base_url}/{path}"
        try:
            async with session.get(url) as r:
                if r.status == 404:
                    raise NotFoundError(f"Nothing found at {path}.")
                r.raise_for_status()
                return await r.json(content_type=None)
        except aiohttp.ClientResponseError as e:
            raise NetworkError(f"Request to {url} failed: {e.status} {e.message}") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(f"Request to {url} failed: {e!r}") from e
        except ValueError as e:
            raise NetworkError(f"Invalid JSON from {url}: {e}") from e

    async def fetch_entry(self, entry_id: int) -> CatalogEntry:
        data = await self.api_call(f"GetAddOn/{entry_id}")
        try:
            return CatalogEntry.model_validate(data)
        except ValidationError as e:
            raise NetworkError(f"Malformed entry record for id {entry_id}: {e}") from e

    async def fetch_file(self, entry_id: int, file_id: int) -> FileRecord:
        data = await self.api_call(f"GetAddOnFile/{entry_id}/{file_id}")
        try:
            return FileRecord.model_validate(data)
        except ValidationError as e:
            raise NetworkError(
                f"Malformed file record {file_id} of entry {entry_id}: {e}"
            ) from e
