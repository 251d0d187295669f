"""
Database engine, sessions and the analysis repository helpers.
"""

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .engine.schemas import AnalysisResult
from .models import Base, RepoAnalysis

logger = logging.getLogger(__name__)


def make_engine(database_url: str) -> Engine:
    """Create an engine; SQLite connections get WAL and a busy timeout."""
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True)

    engine = create_engine(
        database_url,
        connect_args={
            "check_same_thread": False,
            "timeout": 30,  # seconds to wait for a lock
        },
    )

    @event.listens_for(engine, "connect")
    def _sqlite_pragmas(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA busy_timeout=30000")
        cursor.close()

    return engine


def make_session_factory(database_url: str) -> sessionmaker:
    engine = make_engine(database_url)
    init_db(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)


# =============================================================================
# ANALYSIS PERSISTENCE
# =============================================================================

def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def get_analysis(session: Session, full_name: str) -> RepoAnalysis | None:
    return session.query(RepoAnalysis).filter(RepoAnalysis.repo_full_name == full_name.lower()).first()


def get_fresh_analysis(session: Session, full_name: str, max_age: timedelta) -> AnalysisResult | None:
    """Return the stored result if it is younger than max_age."""
    row = get_analysis(session, full_name)
    if row is None:
        return None
    if datetime.now(timezone.utc) - _as_utc(row.analyzed_at) > max_age:
        return None
    return load_result(row)


def load_result(row: RepoAnalysis) -> AnalysisResult:
    return AnalysisResult.model_validate_json(row.result_data)


def save_analysis(session: Session, owner: str, repo: str, result: AnalysisResult,
                  description: str | None = None, language: str | None = None,
                  stars: int = 0, forks: int = 0) -> RepoAnalysis:
    """Insert or replace the stored analysis for owner/repo."""
    full_name = f"{owner}/{repo}".lower()
    row = get_analysis(session, full_name)
    if row is None:
        row = RepoAnalysis(repo_full_name=full_name)
        session.add(row)

    row.repo_url = f"https://github.com/{owner}/{repo}"
    row.owner = owner
    row.repo_name = repo
    row.description = description
    row.language = language
    row.stars = stars
    row.forks = forks
    row.overall_score = result.scores.overall
    row.repo_health = result.repo_health
    row.complexity_level = result.complexity_level
    row.result_data = result.model_dump_json()
    row.ai_powered = result.ai_powered
    row.analyzed_at = result.analyzed_at

    session.commit()
    return row


def delete_analysis(session: Session, full_name: str) -> bool:
    row = get_analysis(session, full_name)
    if row is None:
        return False
    session.delete(row)
    session.commit()
    return True
