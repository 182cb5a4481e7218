from types import SimpleNamespace
from urllib.parse import quote

import httpx
import pytest

API_BASE = "https://api.github.com"
RAW_BASE = "https://raw.githubusercontent.com"


class FakeGitHub:
    """
    Serves a nested dict as a repository through httpx.MockTransport.

    Dict values are directories, string values are file contents.
    """

    def __init__(self, owner, repo, files, status_overrides=None):
        self.owner = owner
        self.repo = repo
        self.files = files
        self.status_overrides = status_overrides or {}
        self.requests = []

    @property
    def listing_requests(self):
        return [r for r in self.requests if r.url.host == "api.github.com"]

    @property
    def content_requests(self):
        return [r for r in self.requests if r.url.host == "raw.githubusercontent.com"]

    def _lookup(self, path):
        node = self.files
        for part in [p for p in path.split("/") if p]:
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def _entries(self, path):
        node = self._lookup(path)
        entries = []
        for name, value in node.items():
            entry_path = f"{path}/{name}" if path else name
            if isinstance(value, dict):
                entries.append({"type": "dir", "name": name, "path": entry_path, "download_url": None})
            else:
                entries.append({
                    "type": "file",
                    "name": name,
                    "path": entry_path,
                    "download_url": f"{RAW_BASE}/{self.owner}/{self.repo}/main/{quote(entry_path)}",
                })
        return entries

    def handler(self, request):
        self.requests.append(request)
        url = str(request.url)
        if url in self.status_overrides:
            status, body, headers = self.status_overrides[url]
            return httpx.Response(status, json=body, headers=headers)

        if request.url.host == "api.github.com":
            prefix = f"/repos/{self.owner}/{self.repo}/contents"
            if not request.url.path.startswith(prefix):
                return httpx.Response(404, json={"message": "Not Found"})
            path = request.url.path[len(prefix):].strip("/")
            node = self._lookup(path)
            if not isinstance(node, dict):
                return httpx.Response(404, json={"message": "Not Found"})
            return httpx.Response(200, json=self._entries(path))

        prefix = f"/{self.owner}/{self.repo}/main/"
        node = self._lookup(request.url.path[len(prefix):])
        if not isinstance(node, str):
            return httpx.Response(404, text="404: Not Found")
        return httpx.Response(200, content=node.encode("utf-8"))

    def client(self):
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


class FakeGenAIClient:
    """Stands in for google.genai.Client; only `models.generate_content` is used."""

    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.prompts = []
        self.models = self

    def generate_content(self, model, contents, config=None):
        self.prompts.append(contents)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)


class BlockedClient(FakeGenAIClient):
    """A blocked or empty candidate has no text."""

    def generate_content(self, model, contents, config=None):
        self.prompts.append(contents)
        return SimpleNamespace(text=None, candidates=[])


@pytest.fixture
def sample_repo():
    return FakeGitHub("octocat", "Hello-World", {
        "README": "Hello World!\n",
        "src": {
            "main.py": "print('hi')\n",
            "lib": {
                "util.py": "X = 1\n",
            },
            "empty": {},
        },
        "setup.cfg": "[metadata]\n",
    })
