"""GitHub API client for enriching integration catalog entries.

All requests go through a shared SerializedExecutor, so any number of
concurrent callers (e.g. enriching a whole catalog page with asyncio.gather)
stay within GitHub's primary and secondary rate limits.
"""

import base64
import binascii
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

import httpx

from hubgate.app.core.config import settings
from hubgate.app.core.http_client import create_http_client
from hubgate.app.core.logging import get_log_context, get_logger
from hubgate.app.ratelimit import SerializedExecutor

logger = get_logger(__name__)

GITHUB_ACCEPT = "application/vnd.github.v3+json"
RELEASES_PER_PAGE = 100


class GitHubClient:
    """Rate-limited access to repository metadata, READMEs and release downloads.

    Every helper swallows failures and returns an "empty" value (None or the
    partial count) after logging, since catalog enrichment is best-effort.

    Usage:
        executor = SerializedExecutor()
        async with init_http_client() as http_client:
            github = GitHubClient(executor, http_client=http_client)
            repos = await asyncio.gather(
                *(github.fetch_repository(name) for name in full_names)
            )
    """

    def __init__(
        self,
        executor: SerializedExecutor,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize the client.

        Args:
            executor: Shared rate-limited executor for all GitHub traffic
            http_client: Optional shared HTTP client for connection pooling
            base_url: API base URL (defaults to settings.github_api_base_url)
            token: Personal access token (defaults to settings.github_token)
            user_agent: User-Agent header value
            timeout: Per-request timeout in seconds
        """
        self.executor = executor
        self._http_client = http_client
        self.base_url = (base_url or settings.github_api_base_url).rstrip("/")
        self.token = settings.github_token if token is None else token
        self.user_agent = user_agent or settings.github_user_agent
        self.timeout = timeout or settings.github_request_timeout
        self.headers = self._build_headers()

    def _build_headers(self) -> Dict[str, str]:
        headers = {
            "Accept": GITHUB_ACCEPT,
            "User-Agent": self.user_agent,
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _get_endpoint_url(self, endpoint: str) -> str:
        return f"{self.base_url}{endpoint}"

    @asynccontextmanager
    async def _client_context(self) -> AsyncGenerator[httpx.AsyncClient, None]:
        """Yield the shared client, or a short-lived one closed on exit."""
        if self._http_client is not None:
            yield self._http_client
            return
        client = create_http_client(timeout=self.timeout)
        try:
            yield client
        finally:
            await client.aclose()

    async def _get(
        self,
        client: httpx.AsyncClient,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        url = self._get_endpoint_url(endpoint)
        return await self.executor.execute(
            lambda: client.get(
                url, headers=self.headers, params=params, timeout=self.timeout
            )
        )

    async def fetch_repository(self, full_name: str) -> Optional[Dict[str, Any]]:
        """Fetch repository metadata.

        Args:
            full_name: Repository in "owner/name" form

        Returns:
            The repository JSON object, or None if it is missing or unreachable
        """
        try:
            async with self._client_context() as client:
                response = await self._get(client, f"/repos/{full_name}")
                if not response.is_success:
                    if response.status_code != 404:
                        logger.warning(
                            f"Unexpected status fetching metadata for {full_name}",
                            extra=get_log_context(
                                repository=full_name, status_code=response.status_code
                            ),
                        )
                    return None
                return response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(
                f"Error fetching GitHub metadata for {full_name}: {e}",
                extra=get_log_context(repository=full_name),
            )
            return None

    async def fetch_readme(self, full_name: str) -> Optional[str]:
        """Fetch and decode the repository README.

        Returns:
            README text, or None if it is missing, empty or unreachable
        """
        try:
            async with self._client_context() as client:
                response = await self._get(client, f"/repos/{full_name}/readme")
                if not response.is_success:
                    return None
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(
                f"Error fetching README for {full_name}: {e}",
                extra=get_log_context(repository=full_name),
            )
            return None

        content = data.get("content") if isinstance(data, dict) else None
        if not content:
            return None
        try:
            return base64.b64decode(content).decode("utf-8", errors="replace")
        except (binascii.Error, ValueError) as e:
            logger.warning(
                f"Could not decode README for {full_name}: {e}",
                extra=get_log_context(repository=full_name),
            )
            return None

    async def fetch_download_count(self, full_name: str) -> int:
        """Sum download_count over every asset of every release.

        Pages through /releases 100 at a time. A 404 or 403 yields 0, any
        other error status stops paging, and a transport failure returns
        the total gathered so far.
        """
        total_downloads = 0
        page = 1

        async with self._client_context() as client:
            while True:
                try:
                    response = await self._get(
                        client,
                        f"/repos/{full_name}/releases",
                        params={"page": page, "per_page": RELEASES_PER_PAGE},
                    )
                    if not response.is_success:
                        if response.status_code in (403, 404):
                            return 0
                        break
                    releases = response.json()
                except (httpx.HTTPError, ValueError) as e:
                    logger.warning(
                        f"Error fetching releases page {page} for {full_name}: {e}",
                        extra=get_log_context(repository=full_name),
                    )
                    return total_downloads

                if not isinstance(releases, list) or not releases:
                    break

                for release in releases:
                    if not isinstance(release, dict):
                        continue
                    assets = release.get("assets")
                    if not isinstance(assets, list):
                        continue
                    for asset in assets:
                        if not isinstance(asset, dict):
                            continue
                        count = asset.get("download_count")
                        # bool is an int subclass
                        if isinstance(count, int) and not isinstance(count, bool):
                            total_downloads += count

                if len(releases) < RELEASES_PER_PAGE:
                    break
                page += 1

        return total_downloads
