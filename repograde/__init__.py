"""
RepoGrade

GitHub repository quality analyzer: seven rule-based dimension scores, a
detected tech stack, a missing-file checklist and written insights.
"""

from .engine import AnalysisResult, RepositorySnapshot, analyze

__version__ = "1.0.0"

__all__ = ["AnalysisResult", "RepositorySnapshot", "analyze", "__version__"]
