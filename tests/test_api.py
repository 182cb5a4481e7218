import pytest
from fastapi.testclient import TestClient

from repo_viewer.analysis import FAILURE_MESSAGE, NO_DATA_MESSAGE, AnalysisService
from repo_viewer.config import Settings
from repo_viewer.main import app, get_analysis_service, get_app_settings, get_http_client

from conftest import FakeGitHub, FakeGenAIClient


@pytest.fixture
def fake_model():
    return FakeGenAIClient(text="It prints hi.")


def http_dependency(fake, opened=None):
    async def github_http():
        async with fake.client() as http:
            if opened is not None:
                opened.append(http)
            yield http

    return github_http


@pytest.fixture
def client(sample_repo, fake_model):
    app.dependency_overrides[get_app_settings] = lambda: Settings()
    app.dependency_overrides[get_http_client] = http_dependency(sample_repo)
    app.dependency_overrides[get_analysis_service] = lambda: AnalysisService(fake_model)
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_fetch_repo(client, sample_repo):
    response = client.post("/api/fetch-repo", json={"github_url": "https://github.com/octocat/Hello-World"})

    assert response.status_code == 200
    data = response.json()
    assert data["owner"] == "octocat"
    assert data["repo"] == "Hello-World"
    assert data["file_count"] == 4
    assert data["dir_count"] == 4
    assert data["tree"]["name"] == "Hello-World"
    readme = data["tree"]["children"][0]
    assert readme == {"name": "README", "content": "Hello World!\n"}
    assert data["tree"]["children"][1]["children"][2] == {"name": "empty", "children": []}


def test_fetch_repo_uses_request_token(client, sample_repo):
    client.post("/api/fetch-repo", json={"github_url": "https://github.com/octocat/Hello-World",
                                         "github_token": "from-user"})
    assert sample_repo.requests[0].headers["authorization"] == "token from-user"


def test_fetch_repo_falls_back_to_settings_token(client, sample_repo):
    app.dependency_overrides[get_app_settings] = lambda: Settings(github_token="from-env")
    client.post("/api/fetch-repo", json={"github_url": "https://github.com/octocat/Hello-World"})
    assert sample_repo.requests[0].headers["authorization"] == "token from-env"


def test_fetch_repo_invalid_url(client, sample_repo):
    response = client.post("/api/fetch-repo", json={"github_url": "not a url"})
    assert response.status_code == 400
    assert sample_repo.requests == []


def test_fetch_repo_not_found(client):
    app.dependency_overrides[get_http_client] = http_dependency(FakeGitHub("someone", "else", {}))
    response = client.post("/api/fetch-repo", json={"github_url": "https://github.com/octocat/Hello-World"})
    assert response.status_code == 404
    assert "not found" in response.json()["detail"]


def test_analyze(client, fake_model):
    tree = {"name": "Hello-World", "children": [{"name": "README", "content": "Hello"}]}
    response = client.post("/api/analyze", json={"tree": tree, "selected_content": "Hello"})

    assert response.status_code == 200
    assert response.json() == {"analysis": "It prints hi.", "failed": False}
    assert "Hello" in fake_model.prompts[0]


def test_analyze_without_tree(client, fake_model):
    response = client.post("/api/analyze", json={"selected_content": "Hello"})
    assert response.json() == {"analysis": NO_DATA_MESSAGE, "failed": False}
    assert fake_model.prompts == []


def test_analyze_rejects_malformed_tree(client):
    response = client.post("/api/analyze", json={"tree": {"name": "x"}})
    assert response.status_code == 422


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_github_http_client_is_closed_after_request(client, sample_repo):
    opened = []
    app.dependency_overrides[get_http_client] = http_dependency(sample_repo, opened)
    client.post("/api/fetch-repo", json={"github_url": "https://github.com/octocat/Hello-World"})

    assert len(opened) == 1
    assert opened[0].is_closed


def test_analyze_failure_sets_flag(client):
    app.dependency_overrides[get_analysis_service] = lambda: AnalysisService(
        FakeGenAIClient(error=RuntimeError("quota exceeded"))
    )
    tree = {"name": "Hello-World", "children": []}
    response = client.post("/api/analyze", json={"tree": tree, "selected_content": "This is a directory."})

    assert response.status_code == 200
    assert response.json() == {"analysis": FAILURE_MESSAGE, "failed": True}


def test_directory_with_reserved_characters(client):
    fake = FakeGitHub("octocat", "langs", {"C#": {"Program.cs": "class P {}"}, "100%": {}})
    app.dependency_overrides[get_http_client] = http_dependency(fake)
    response = client.post("/api/fetch-repo", json={"github_url": "https://github.com/octocat/langs"})

    assert response.status_code == 200
    children = response.json()["tree"]["children"]
    assert children[0] == {"name": "C#", "children": [{"name": "Program.cs", "content": "class P {}"}]}
    assert children[1] == {"name": "100%", "children": []}
