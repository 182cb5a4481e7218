import logging
from typing import Any, Dict, Optional, Tuple

import requests

logger = logging.getLogger(__name__)

DEFAULT_BACKEND_URL = "http://localhost:8000"

NO_DATA_MESSAGE = "No repository data available to analyze."
FAILURE_MESSAGE = "Failed to generate analysis. Please try again."


class BackendError(Exception):
    pass


class BackendClient:
    """Calls the viewer backend from the Streamlit page."""

    def __init__(self, base_url: str = DEFAULT_BACKEND_URL, session: Optional[requests.Session] = None,
                 timeout: Optional[float] = None):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch_tree(self, github_url: str, github_token: Optional[str] = None) -> Dict[str, Any]:
        """Returns the backend's tree response; raises BackendError on any failure."""
        payload = {"github_url": github_url, "github_token": github_token or None}
        try:
            response = self.session.post(f"{self.base_url}/api/fetch-repo", json=payload, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.HTTPError as http_err:
            error_detail = str(http_err)
            try:
                error_detail = http_err.response.json().get("detail", error_detail)
            except ValueError: # Body is not JSON
                pass
            raise BackendError(f"Error from backend: {error_detail}") from http_err
        except requests.exceptions.RequestException as req_err:
            raise BackendError(f"Network error: {req_err}") from req_err

    def analyze(self, tree: Optional[Dict[str, Any]], selected_content: Optional[str]) -> Tuple[str, bool]:
        """Returns (markdown text, failed)."""
        if tree is None:
            return NO_DATA_MESSAGE, False
        payload = {"tree": tree, "selected_content": selected_content}
        try:
            response = self.session.post(f"{self.base_url}/api/analyze", json=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
            return data["analysis"], bool(data.get("failed", False))
        except (requests.exceptions.RequestException, ValueError, KeyError, TypeError) as e:
            logger.error("Analysis request failed: %s", e)
            return FAILURE_MESSAGE, True
