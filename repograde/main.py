"""
RepoGrade API

FastAPI application exposing repository analysis over HTTP.
"""

import logging
from datetime import timedelta
from typing import Awaitable, Callable

from fastapi import FastAPI, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .config import Settings, load_settings
from .database import delete_analysis, get_analysis, get_fresh_analysis, load_result, make_session_factory, save_analysis
from .engine import InsightEnhancer, RepositorySnapshot, analyze
from .schemas import AnalysisResponse, AnalyzeRequest, DeleteResponse, to_response
from .services import (
    AnalysisCache,
    GitHubAPIError,
    GitHubClient,
    GitHubRateLimited,
    InvalidRepositoryURL,
    RepositoryNotFound,
    cache_key,
    parse_repo_url,
)

logger = logging.getLogger(__name__)

VERSION = "1.0.0"

SnapshotFetcher = Callable[[str, str], Awaitable[RepositorySnapshot]]


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _parse_or_400(repo_url: str) -> tuple[str, str]:
    try:
        return parse_repo_url(repo_url)
    except InvalidRepositoryURL as e:
        raise HTTPException(status_code=400, detail=str(e))


async def _fetch_or_http_error(fetcher: SnapshotFetcher, owner: str, repo: str) -> RepositorySnapshot:
    """Fetch a snapshot, translating GitHub failures into HTTP errors."""
    try:
        return await fetcher(owner, repo)
    except RepositoryNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except GitHubRateLimited as e:
        raise HTTPException(status_code=429, detail=str(e))
    except GitHubAPIError as e:
        logger.error(f"GitHub API error for {owner}/{repo}: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    except ValidationError as e:
        logger.error(f"GitHub returned data that does not fit a snapshot for {owner}/{repo}: {e}")
        raise HTTPException(status_code=502, detail="GitHub returned unexpected repository data.")


# =============================================================================
# APP FACTORY
# =============================================================================

def create_app(
    settings: Settings | None = None,
    *,
    fetcher: SnapshotFetcher | None = None,
    enhancer: InsightEnhancer | None = None,
    session_factory: sessionmaker | None = None,
) -> FastAPI:
    """
    Build the FastAPI app.

    Collaborators default to the real ones built from settings; tests inject
    a fake fetcher, an enhancer and a throwaway database.
    """
    settings = settings or load_settings()

    app = FastAPI(
        title="RepoGrade API",
        description="Multi-dimensional quality scoring for GitHub repositories",
        version=VERSION,
    )

    app.state.settings = settings
    app.state.cache = AnalysisCache(ttl_seconds=settings.cache_ttl_seconds)
    app.state.session_factory = session_factory or make_session_factory(settings.database_url)
    app.state.enhancer = enhancer or InsightEnhancer.from_api_key(
        settings.gemini_api_key,
        model=settings.gemini_model,
        timeout=settings.ai_timeout_seconds,
    )
    app.state.fetcher = fetcher or GitHubClient(
        settings.github_token, timeout=settings.github_timeout_seconds
    ).fetch_snapshot

    # Rate limiting
    limiter = Limiter(key_func=get_remote_address)
    app.state.limiter = limiter

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        return JSONResponse(
            status_code=429,
            content={"detail": "Too many requests. Please try again later."},
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["Content-Type"],
    )

    freshness = timedelta(hours=settings.analysis_freshness_hours)

    # =========================================================================
    # API ENDPOINTS
    # =========================================================================

    @app.get("/")
    def read_root():
        """Health check endpoint."""
        return {"status": "ok", "version": VERSION, "message": "RepoGrade API"}

    @app.post("/analyze", response_model=AnalysisResponse)
    @limiter.limit(settings.rate_limit)
    async def analyze_repo(request: Request, body: AnalyzeRequest):
        """
        Analyze a GitHub repository.

        Served from the in-memory cache or a stored analysis younger than the
        freshness window when possible; otherwise fetched from GitHub, scored,
        stored and cached.
        """
        owner, repo = _parse_or_400(body.repo_url)
        full_name = f"{owner}/{repo}"
        key = cache_key(owner, repo)

        cached = app.state.cache.get(key)
        if cached is not None:
            return to_response(cached, full_name, cached=True)

        try:
            with app.state.session_factory() as session:
                stored = get_fresh_analysis(session, full_name, freshness)
        except SQLAlchemyError as e:
            logger.error(f"Failed to read stored analysis for {full_name}: {e}")
            stored = None

        if stored is not None:
            app.state.cache.set(key, stored)
            return to_response(stored, full_name, cached=True)

        snapshot = await _fetch_or_http_error(app.state.fetcher, owner, repo)
        result = await run_in_threadpool(analyze, snapshot, enhancer=app.state.enhancer)

        try:
            with app.state.session_factory() as session:
                save_analysis(
                    session, owner, repo, result,
                    description=snapshot.repo.description,
                    language=snapshot.repo.language,
                    stars=snapshot.repo.stars,
                    forks=snapshot.repo.forks,
                )
        except SQLAlchemyError as e:
            logger.error(f"Failed to save analysis for {full_name}: {e}")

        app.state.cache.cleanup()
        app.state.cache.set(key, result)
        return to_response(result, full_name, cached=False)

    @app.get("/analysis/{owner}/{repo}", response_model=AnalysisResponse)
    @limiter.limit("30/minute")
    def get_stored_analysis(request: Request, owner: str, repo: str):
        """Get the stored analysis for a repository, regardless of age."""
        full_name = f"{owner}/{repo}"
        with app.state.session_factory() as session:
            row = get_analysis(session, full_name)
            if row is None:
                raise HTTPException(status_code=404, detail=f"No analysis stored for {full_name}")
            return to_response(load_result(row), full_name, cached=True)

    @app.delete("/analysis/{owner}/{repo}", response_model=DeleteResponse)
    @limiter.limit("5/minute")
    def delete_stored_analysis(request: Request, owner: str, repo: str):
        """Delete a stored analysis and its cache entry (forces re-analysis)."""
        full_name = f"{owner}/{repo}"
        app.state.cache.delete(cache_key(owner, repo))
        with app.state.session_factory() as session:
            if not delete_analysis(session, full_name):
                raise HTTPException(status_code=404, detail=f"No analysis stored for {full_name}")
        return DeleteResponse(repo_full_name=full_name)

    return app
