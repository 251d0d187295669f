"""
SQLAlchemy models for RepoGrade
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RepoAnalysis(Base):
    """Latest stored analysis for one repository (one row per owner/repo)"""
    __tablename__ = "repo_analysis"

    id = Column(Integer, primary_key=True, autoincrement=True)
    repo_full_name = Column(String, nullable=False, unique=True, index=True)  # lowercased owner/repo
    repo_url = Column(String, nullable=False)
    owner = Column(String, nullable=False)
    repo_name = Column(String, nullable=False)
    description = Column(Text)
    language = Column(String)
    stars = Column(Integer, default=0)
    forks = Column(Integer, default=0)

    overall_score = Column(Integer, nullable=False)  # 0-100
    repo_health = Column(String, nullable=False)  # "excellent" ... "critical"
    complexity_level = Column(String, nullable=False)

    result_data = Column(Text, nullable=False)  # JSON: full AnalysisResult
    ai_powered = Column(Boolean, default=False, nullable=False)
    analyzed_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    def __repr__(self):
        return f"<RepoAnalysis(id={self.id}, repo='{self.repo_full_name}', overall={self.overall_score})>"
