"""
Aggregator for RepoGrade

Combines the seven dimension scores into a weighted overall score, derives
the complexity / health / team-size labels, and assembles the AnalysisResult.
"""

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from .analyzers import detect_missing_files, detect_tech_stack, score_dimensions
from .enhancer import Enhanced, InsightEnhancer
from .insights import synthesize_insights
from .labels import complexity_level, estimated_team_size, repo_health
from .schemas import AnalysisResult, RepositorySnapshot, ScoreBreakdown

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

# Percent weights per dimension (must sum to 100)
DIMENSION_WEIGHTS = {
    "code_quality": 20,
    "architecture": 15,
    "documentation": 15,
    "security": 15,
    "best_practices": 10,
    "community_health": 10,
    "production_readiness": 15,
}


def overall_score(scores: ScoreBreakdown) -> int:
    """
    Weighted average of the seven dimensions, rounded half up.

    Integer arithmetic keeps x.5 results from drifting under float error.
    """
    weighted = sum(getattr(scores, name) * weight for name, weight in DIMENSION_WEIGHTS.items())
    return (weighted + 50) // 100


def with_overall(scores: ScoreBreakdown) -> ScoreBreakdown:
    return scores.model_copy(update={"overall": overall_score(scores)})


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def analyze(
    snapshot: RepositorySnapshot | Mapping[str, Any],
    *,
    enhancer: InsightEnhancer | None = None,
) -> AnalysisResult:
    """
    Score a repository snapshot and build the full analysis result.

    Args:
        snapshot: A RepositorySnapshot, or a plain mapping that will be
            validated into one (raises pydantic.ValidationError naming the
            offending field when malformed)
        enhancer: Optional AI insight enhancer. Without one, or when it falls
            back, insights come from the deterministic synthesizer.

    Returns:
        AnalysisResult; identical snapshots give identical results apart
        from analyzed_at.
    """
    if not isinstance(snapshot, RepositorySnapshot):
        snapshot = RepositorySnapshot.model_validate(snapshot)

    scores = with_overall(score_dimensions(snapshot))

    if enhancer is not None:
        outcome = enhancer.enhance(snapshot, scores)
        report = outcome.report
        ai_powered = isinstance(outcome, Enhanced)
    else:
        report = synthesize_insights(snapshot, scores)
        ai_powered = False

    result = AnalysisResult(
        scores=scores,
        insights=report.insights,
        tech_stack=detect_tech_stack(snapshot),
        missing_files=detect_missing_files(snapshot),
        summary=report.summary,
        suggestions=report.suggestions,
        readme_score=scores.documentation,
        complexity_level=complexity_level(len(snapshot.files)),
        estimated_team_size=estimated_team_size(len(snapshot.contributors)),
        repo_health=repo_health(scores.overall),
        analyzed_at=datetime.now(timezone.utc),
        ai_powered=ai_powered,
    )
    logger.info(
        f"Analyzed {snapshot.repo.full_name}: overall={scores.overall} "
        f"health={result.repo_health} ai_powered={ai_powered}"
    )
    return result
