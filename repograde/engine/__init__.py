"""
RepoGrade scoring engine.

A pure function from a RepositorySnapshot to an AnalysisResult. The engine
performs no I/O; snapshots are built by repograde.services.github.
"""

from .aggregator import DIMENSION_WEIGHTS, analyze, overall_score
from .analyzers import audit_scores, detect_missing_files, detect_tech_stack, score_dimension, score_dimensions
from .enhancer import Enhanced, FallbackUsed, GeminiInsightProvider, InsightEnhancer
from .insights import synthesize_insights
from .schemas import (
    AnalysisResult,
    Contributor,
    FileTreeEntry,
    Insight,
    InsightReport,
    Issue,
    MissingFile,
    RepoMetadata,
    RepositorySnapshot,
    ScoreBreakdown,
    TechStackEntry,
)

__all__ = [
    "DIMENSION_WEIGHTS",
    "analyze",
    "overall_score",
    "audit_scores",
    "detect_missing_files",
    "detect_tech_stack",
    "score_dimension",
    "score_dimensions",
    "Enhanced",
    "FallbackUsed",
    "GeminiInsightProvider",
    "InsightEnhancer",
    "synthesize_insights",
    "AnalysisResult",
    "Contributor",
    "FileTreeEntry",
    "Insight",
    "InsightReport",
    "Issue",
    "MissingFile",
    "RepoMetadata",
    "RepositorySnapshot",
    "ScoreBreakdown",
    "TechStackEntry",
]
