import logging
from contextlib import asynccontextmanager

import httpx # For making asynchronous HTTP requests to GitHub API
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from .analysis import AnalysisService, create_client
from .config import Settings, configure_logging, get_settings, warn_if_anonymous
from .github_client import GitHubAPIError, GitHubClient
from .models import AnalyzeRequest, AnalyzeResponse, RepoRequest, RepoTreeResponse
from .tree_builder import TreeBuilder
from .urls import parse_github_url

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.log_level)
    warn_if_anonymous(settings)

    # Shared collaborators live for the whole process and are injected per request
    app.state.settings = settings
    app.state.http_client = httpx.AsyncClient(timeout=None, follow_redirects=True)
    app.state.analysis_service = AnalysisService(create_client(settings), settings.gemini_model)
    try:
        yield
    finally:
        await app.state.http_client.aclose()


app = FastAPI(
    title="GitHub Repository Tree Viewer Service",
    description="Fetches GitHub repository trees and analyzes files in the context of the whole tree.",
    version="1.0.0",
    lifespan=lifespan,
)

# --- CORS Configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().allowed_origins,
    allow_credentials=True,
    allow_methods=["*"], # Allows all methods (GET, POST, etc.)
    allow_headers=["*"], # Allows all headers
)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_analysis_service(request: Request) -> AnalysisService:
    return request.app.state.analysis_service


@app.post(
    "/api/fetch-repo",
    response_model=RepoTreeResponse,
    response_model_exclude_none=True,
    summary="Fetch Repository Tree",
)
async def fetch_repo_api(
    request: RepoRequest,
    settings: Settings = Depends(get_app_settings),
    http_client: httpx.AsyncClient = Depends(get_http_client),
):
    """
    Fetches the directory structure and file contents of a GitHub repository.
    - **github_url**: URL of the GitHub repository.
    - **github_token**: Optional GitHub Personal Access Token for private repos or higher rate limits.
    """
    try:
        owner, repo_name = parse_github_url(request.github_url)
    except ValueError as e:
        logger.info("Rejected repository URL %r: %s", request.github_url, e)
        raise HTTPException(status_code=400, detail=str(e))

    client = GitHubClient(
        http_client,
        token=request.github_token or settings.github_token,
        api_base_url=settings.github_api_base_url,
    )
    builder = TreeBuilder(
        client,
        max_concurrency=settings.tree_max_concurrency,
        max_depth=settings.tree_max_depth,
        skip_binary=settings.skip_binary_content,
    )

    try:
        tree = await builder.build(owner, repo_name)
    except GitHubAPIError as e:
        logger.warning("GitHub request failed for %s/%s: %s", owner, repo_name, e.detail)
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    except Exception as e: # Catch any other unexpected errors during the process
        logger.exception("Unexpected server error processing %s", request.github_url)
        raise HTTPException(status_code=500, detail=f"An unexpected server error occurred while processing the repository: {str(e)}")

    file_count, dir_count = tree.count()
    return RepoTreeResponse(owner=owner, repo=repo_name, tree=tree, file_count=file_count, dir_count=dir_count)


@app.post("/api/analyze", response_model=AnalyzeResponse, summary="Analyze Selected File")
async def analyze_api(
    request: AnalyzeRequest,
    service: AnalysisService = Depends(get_analysis_service),
):
    """
    Asks the language model about the selected file in the context of the whole tree.
    Failures are reported through the `failed` flag and a fixed text, never as an error status.
    """
    return await service.analyze(request.tree, request.selected_content)


@app.get("/", summary="Root Endpoint", include_in_schema=False) # Exclude from OpenAPI docs if just a health check
async def read_root():
    return {"message": "Repository Tree Viewer backend is running. POST to /api/fetch-repo to fetch a repository tree."}


@app.get("/health", summary="Health Check", tags=["Health"])
async def health_check():
    return {"status": "healthy"}
