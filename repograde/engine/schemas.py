"""
RepoGrade Engine Schema Definitions

Pydantic models for the scoring engine: the immutable repository snapshot it
consumes and the analysis result it produces. Snapshots are validated on
construction, so a malformed input fails fast with an error naming the field.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# CONFIGURATION
# =============================================================================

CONTRIBUTOR_SAMPLE_SIZE = 10
MAX_INSIGHTS = 8
MAX_SUGGESTIONS = 5


# =============================================================================
# ENUMS
# =============================================================================

class Severity(str, Enum):
    """Severity level for insights"""
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"
    SUCCESS = "success"


class StackCategory(str, Enum):
    LANGUAGE = "language"
    FRAMEWORK = "framework"
    TOOL = "tool"
    DATABASE = "database"
    CLOUD = "cloud"
    TESTING = "testing"
    CI_CD = "ci-cd"


class Importance(str, Enum):
    """How urgently a missing file should be added"""
    CRITICAL = "critical"
    RECOMMENDED = "recommended"
    NICE_TO_HAVE = "nice-to-have"


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# =============================================================================
# SNAPSHOT (engine input)
# =============================================================================

class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class RepoMetadata(_Frozen):
    """Repository-level metadata as reported by the hosting platform"""
    name: str = Field(..., min_length=1)
    full_name: str = Field(..., min_length=1, description="owner/repo")
    description: str | None = None
    stars: int = Field(0, ge=0)
    forks: int = Field(0, ge=0)
    open_issues: int = Field(0, ge=0)
    watchers: int = Field(0, ge=0)
    language: str | None = Field(None, description="Primary language")
    languages: dict[str, int] = Field(default_factory=dict, description="Language -> bytes mapping")
    size: int = Field(0, ge=0)
    default_branch: str = "main"
    created_at: datetime | None = None
    updated_at: datetime | None = None
    pushed_at: datetime | None = None
    license: str | None = None
    topics: tuple[str, ...] = ()

    @field_validator("languages")
    @classmethod
    def _non_negative_bytes(cls, value: dict[str, int]) -> dict[str, int]:
        for language, byte_count in value.items():
            if byte_count < 0:
                raise ValueError(f"byte count for {language!r} must be >= 0")
        return value

    @field_validator("created_at", "updated_at", "pushed_at")
    @classmethod
    def _normalize_timestamps(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)


class Contributor(_Frozen):
    username: str
    contributions: int = Field(0, ge=0)


class Issue(_Frozen):
    """An issue or pull request; is_pr tells them apart"""
    title: str
    state: Literal["open", "closed"]
    created_at: datetime | None = None
    closed_at: datetime | None = None
    labels: tuple[str, ...] = ()
    is_pr: bool = False


class FileTreeEntry(_Frozen):
    path: str = Field(..., min_length=1)
    type: Literal["file", "dir"]
    size: int | None = Field(None, ge=0)


class RepositorySnapshot(_Frozen):
    """
    Complete, pre-fetched view of a repository.

    Presence flags are computed by whoever builds the snapshot
    (see services.github.derive_presence_flags); the engine only reads them.
    fetched_at anchors every time-relative rule so that scoring stays a
    pure function of the snapshot.
    """
    repo: RepoMetadata
    contributors: tuple[Contributor, ...] = Field(default=(), max_length=CONTRIBUTOR_SAMPLE_SIZE)
    issues: tuple[Issue, ...] = ()
    file_tree: tuple[FileTreeEntry, ...] = ()
    readme: str | None = None

    has_license: bool = False
    has_contributing: bool = False
    has_changelog: bool = False
    has_ci: bool = False
    has_tests: bool = False
    has_env_example: bool = False
    has_dockerfile: bool = False
    has_gitignore: bool = False

    fetched_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("fetched_at")
    @classmethod
    def _normalize_fetched_at(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @property
    def files(self) -> list[FileTreeEntry]:
        return [entry for entry in self.file_tree if entry.type == "file"]

    @property
    def dirs(self) -> list[FileTreeEntry]:
        return [entry for entry in self.file_tree if entry.type == "dir"]


# =============================================================================
# RESULT MODELS
# =============================================================================

class ScoreBreakdown(BaseModel):
    """Seven dimension scores plus the weighted overall score"""
    code_quality: int = Field(..., ge=0, le=100)
    architecture: int = Field(..., ge=0, le=100)
    documentation: int = Field(..., ge=0, le=100)
    security: int = Field(..., ge=0, le=100)
    best_practices: int = Field(..., ge=0, le=100)
    community_health: int = Field(..., ge=0, le=100)
    production_readiness: int = Field(..., ge=0, le=100)
    overall: int = Field(0, ge=0, le=100)


class Insight(BaseModel):
    """A categorized, severity-tagged observation about the repository"""
    category: str = Field(..., description="e.g. 'testing', 'security', 'architecture'")
    severity: Severity
    title: str
    description: str
    suggestion: str | None = None


class TechStackEntry(BaseModel):
    name: str
    category: StackCategory
    confidence: float = Field(..., ge=0, le=1)


class MissingFile(BaseModel):
    name: str
    importance: Importance
    description: str


class InsightReport(BaseModel):
    """Summary, suggestions and insights, from either the fallback or an AI provider"""
    summary: str = Field(..., min_length=1)
    suggestions: list[str] = Field(default_factory=list, max_length=MAX_SUGGESTIONS)
    insights: list[Insight] = Field(default_factory=list, max_length=MAX_INSIGHTS)


class AnalysisResult(BaseModel):
    """
    Complete engine output for one repository.

    Everything except analyzed_at and ai_powered is derived from the snapshot.
    """
    scores: ScoreBreakdown
    insights: list[Insight] = Field(default_factory=list)
    tech_stack: list[TechStackEntry] = Field(default_factory=list)
    missing_files: list[MissingFile] = Field(default_factory=list)
    summary: str
    suggestions: list[str] = Field(default_factory=list)
    readme_score: int = Field(..., ge=0, le=100, description="Mirrors the documentation score")
    complexity_level: Literal["low", "medium", "high", "very-high"]
    estimated_team_size: str
    repo_health: Literal["excellent", "good", "fair", "needs-work", "critical"]
    analyzed_at: datetime
    ai_powered: bool = False
