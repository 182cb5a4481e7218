"""
Thin async client for the GitHub contents API.

One method call is one HTTP request. Nothing is retried, cached or paginated;
failures surface as GitHubAPIError.
"""
import logging
from typing import List, Optional
from urllib.parse import quote

import httpx # For making asynchronous HTTP requests to GitHub API

from .config import DEFAULT_GITHUB_API_BASE_URL
from .models import RemoteEntry

logger = logging.getLogger(__name__)

GITHUB_API_VERSION = "2022-11-28"


class GitHubAPIError(Exception):
    """A listing or content request failed (HTTP error status or network error)."""

    def __init__(self, status_code: int, detail: str):
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


class GitHubClient:
    def __init__(
        self,
        http: httpx.AsyncClient,
        token: Optional[str] = None,
        api_base_url: str = DEFAULT_GITHUB_API_BASE_URL,
    ):
        self.http = http
        self.token = token
        self.api_base_url = api_base_url.rstrip("/")

    @property
    def headers(self) -> dict:
        headers = {"Accept": "application/vnd.github.v3+json", "X-GitHub-Api-Version": GITHUB_API_VERSION}
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        return headers

    async def list_directory(self, owner: str, repo: str, path: str = "") -> List[RemoteEntry]:
        """Lists the entries at `path`, in the order GitHub serves them."""
        # Entry paths may contain "#", "?" or "%"
        url = f"{self.api_base_url}/repos/{quote(owner, safe='')}/{quote(repo, safe='')}/contents/{quote(path, safe='/')}"
        response = await self._get(url, owner=owner, repo=repo, path=path)

        items_data = response.json()
        # The path points directly to a single file
        if isinstance(items_data, dict) and items_data.get('type') == 'file':
            items_data = [items_data]
        if not isinstance(items_data, list):
            raise GitHubAPIError(502, f"Unexpected response format from GitHub API for directory path: {path!r}. Expected a list.")

        return [RemoteEntry.model_validate(item) for item in items_data]

    async def fetch_content(self, download_url: str) -> str:
        """Downloads a file's raw content as text."""
        response = await self._get(download_url)
        return response.content.decode('utf-8', errors='replace')

    async def _get(self, url: str, owner: str = "", repo: str = "", path: str = "") -> httpx.Response:
        logger.debug("GET %s", url)
        try:
            response = await self.http.get(url, headers=self.headers)
            response.raise_for_status() # Raises HTTPStatusError for 4xx/5xx responses
        except httpx.HTTPStatusError as e:
            raise GitHubAPIError(e.response.status_code, self._describe_status_error(e.response, url, owner, repo, path)) from e
        except httpx.RequestError as e: # For network errors, timeouts etc.
            raise GitHubAPIError(503, f"Network error while contacting GitHub API: {e}") from e
        return response

    def _describe_status_error(self, response: httpx.Response, url: str, owner: str, repo: str, path: str) -> str:
        status = response.status_code
        if status == 404:
            if owner:
                return f"Repository or path not found: {owner}/{repo}/{path}"
            return f"File not found: {url}"
        if status == 401: # GitHub uses 401 for bad credentials
            return "GitHub API: Bad credentials. Ensure your token is correct and has not expired."
        if status == 403:
            try:
                gh_response_json = response.json()
            except ValueError: # Body is not JSON
                gh_response_json = {}
            if not isinstance(gh_response_json, dict):
                gh_response_json = {}
            gh_message = gh_response_json.get("message", "Access forbidden by GitHub.")
            docs_url = gh_response_json.get("documentation_url", "")

            if response.headers.get("X-RateLimit-Remaining") == "0":
                return f"GitHub API rate limit exceeded. {gh_message}"
            if not self.token:
                return f"{gh_message} This could be a private repository (requires a GitHub token) or a rate limit issue. Docs: {docs_url}"
            return f"{gh_message} Check token permissions or if it's a rate limit issue. Docs: {docs_url}"
        return f"GitHub API error for {url}: Status {status}."
