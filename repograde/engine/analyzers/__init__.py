"""
RepoGrade Analyzers

Pure functions of a RepositorySnapshot:
- Dimension scorers: seven 0-100 scores with auditable ledgers
- Tech stack detector: languages, frameworks, tools and services in use
- Missing-file detector: recommended project files that are absent
"""

from .dimensions import (
    DIMENSIONS,
    Adjustment,
    DimensionAnalyzer,
    ScoreLedger,
    audit_scores,
    score_dimension,
    score_dimensions,
)
from .missing_files import detect_missing_files
from .tech_stack import detect_tech_stack

__all__ = [
    "DIMENSIONS",
    "Adjustment",
    "DimensionAnalyzer",
    "ScoreLedger",
    "audit_scores",
    "score_dimension",
    "score_dimensions",
    "detect_missing_files",
    "detect_tech_stack",
]
