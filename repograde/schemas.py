"""
RepoGrade API Schema Definitions

Request and response bodies for the HTTP endpoints. The analysis payload
itself is the engine's AnalysisResult.
"""

from pydantic import BaseModel, Field

from .engine.schemas import AnalysisResult


class AnalyzeRequest(BaseModel):
    """Request body for POST /analyze"""
    repo_url: str = Field(..., description="GitHub URL or owner/repo (e.g., https://github.com/user/repo)")


class AnalysisResponse(AnalysisResult):
    """Response for POST /analyze and GET /analysis/{owner}/{repo}"""
    repo_full_name: str = Field(..., description="owner/repo")
    cached: bool = Field(False, description="True when served from the cache or a fresh stored analysis")


class DeleteResponse(BaseModel):
    status: str = "deleted"
    repo_full_name: str


def to_response(result: AnalysisResult, repo_full_name: str, cached: bool) -> AnalysisResponse:
    return AnalysisResponse(**result.model_dump(), repo_full_name=repo_full_name, cached=cached)
