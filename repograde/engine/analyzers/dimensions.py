"""
Dimension Scorers for RepoGrade

Seven rule-based scorers, one per quality dimension. Each starts from a fixed
base and applies named point adjustments triggered by conditions on the
snapshot, then clamps to 0-100.

Every award is recorded on a ScoreLedger so that a score can be explained
(and tested) line by line: "+15 for tests present", "-10 for a crowded root".

Dimensions:
- code_quality: source layout, tests, linting, typing, root clutter
- architecture: conventional directories, separation of concerns
- documentation: README depth and sections, guides, docs/ directory
- security: ignore rules, env templates, security policy, lock files
- best_practices: presence of the standard project hygiene files
- community_health: contributors, stars, issue handling, recent activity
- production_readiness: CI, tests, containers, manifests, ops conventions
"""

from dataclasses import dataclass, field

from ..schemas import RepositorySnapshot, ScoreBreakdown
from .. import signatures


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class Adjustment:
    reason: str
    points: int


@dataclass
class ScoreLedger:
    """Base score plus every adjustment applied to it, in order."""
    dimension: str
    base: int
    adjustments: list[Adjustment] = field(default_factory=list)

    def award(self, points: int, reason: str) -> None:
        self.adjustments.append(Adjustment(reason=reason, points=points))

    @property
    def raw_total(self) -> int:
        return self.base + sum(adj.points for adj in self.adjustments)

    @property
    def total(self) -> int:
        return max(0, min(100, self.raw_total))

    def points_for(self, reason: str) -> int:
        return sum(adj.points for adj in self.adjustments if adj.reason == reason)

    def reasons(self) -> list[str]:
        return [adj.reason for adj in self.adjustments]


# =============================================================================
# PATH HELPERS
# =============================================================================

def _paths(snapshot: RepositorySnapshot) -> list[str]:
    return [entry.path for entry in snapshot.file_tree]


def _any_path_contains(paths: list[str], patterns: tuple[str, ...], lower: bool = False) -> bool:
    for path in paths:
        haystack = path.lower() if lower else path
        if any(pattern in haystack for pattern in patterns):
            return True
    return False


def _top_level_dirs(snapshot: RepositorySnapshot) -> set[str]:
    return {entry.path.split("/")[0] for entry in snapshot.dirs}


# =============================================================================
# ANALYZER CLASS
# =============================================================================

DIMENSIONS = (
    "code_quality",
    "architecture",
    "documentation",
    "security",
    "best_practices",
    "community_health",
    "production_readiness",
)


class DimensionAnalyzer:
    """
    Scores a snapshot on all seven dimensions.

    Scorers share no state and never see each other's output, so they may run
    in any order.
    """

    def __init__(self):
        self.audits = {name: getattr(self, f"_audit_{name}") for name in DIMENSIONS}

    def analyze(self, snapshot: RepositorySnapshot) -> dict[str, ScoreLedger]:
        """Return one ledger per dimension, keyed by dimension name."""
        return {name: audit(snapshot) for name, audit in self.audits.items()}

    # =========================================================================
    # CODE QUALITY (base 50)
    # =========================================================================

    def _audit_code_quality(self, snapshot: RepositorySnapshot) -> ScoreLedger:
        ledger = ScoreLedger("code_quality", base=50)
        paths = _paths(snapshot)

        has_source_root = any(
            path.startswith(f"{root}/") for path in paths for root in signatures.SOURCE_ROOTS
        ) or any(entry.path in signatures.SOURCE_ROOTS for entry in snapshot.dirs)
        if has_source_root:
            ledger.award(10, "src or lib directory")

        if snapshot.has_tests:
            ledger.award(15, "tests present")

        if _any_path_contains(paths, signatures.LINT_CONFIG_PATTERNS, lower=True):
            ledger.award(10, "lint configuration")

        has_types = any(
            path.endswith(signatures.TYPED_SUFFIXES)
            or any(marker in path for marker in signatures.TYPED_MARKERS)
            for path in paths
        )
        if has_types:
            ledger.award(10, "static typing")

        root_files = [entry for entry in snapshot.files if "/" not in entry.path]
        if len(root_files) > 15:
            ledger.award(-10, "crowded repository root")

        return ledger

    # =========================================================================
    # ARCHITECTURE (base 40)
    # =========================================================================

    def _audit_architecture(self, snapshot: RepositorySnapshot) -> ScoreLedger:
        ledger = ScoreLedger("architecture", base=40)
        top_level = _top_level_dirs(snapshot)

        for name in signatures.RECOGNIZED_DIRECTORIES:
            if name in top_level:
                ledger.award(5, f"{name}/ directory")

        if "src" in top_level or {"frontend", "backend"} <= top_level:
            ledger.award(15, "separation of concerns")

        if snapshot.has_gitignore:
            ledger.award(5, "gitignore")

        return ledger

    # =========================================================================
    # DOCUMENTATION (base 0)
    # =========================================================================

    def _audit_documentation(self, snapshot: RepositorySnapshot) -> ScoreLedger:
        ledger = ScoreLedger("documentation", base=0)

        if snapshot.readme:
            length = len(snapshot.readme)
            for threshold, points in signatures.README_LENGTH_TIERS:
                if length > threshold:
                    ledger.award(points, f"README longer than {threshold} chars")
                    break

            readme = snapshot.readme.lower()
            for keywords, points in signatures.README_SECTION_KEYWORDS:
                if any(keyword in readme for keyword in keywords):
                    ledger.award(points, f"README mentions {'/'.join(keywords)}")

        if snapshot.has_contributing:
            ledger.award(10, "contributing guide")
        if snapshot.has_changelog:
            ledger.award(10, "changelog")

        if any(path.startswith("docs/") for path in _paths(snapshot)):
            ledger.award(10, "docs directory")

        return ledger

    # =========================================================================
    # SECURITY (base 50)
    # =========================================================================

    def _audit_security(self, snapshot: RepositorySnapshot) -> ScoreLedger:
        ledger = ScoreLedger("security", base=50)
        paths = _paths(snapshot)

        if snapshot.has_gitignore:
            ledger.award(10, "gitignore")

        if not snapshot.has_env_example and _any_path_contains(paths, (signatures.ENV_FILE_PATTERN,)):
            ledger.award(-20, "env file tracked without template")

        if snapshot.has_env_example:
            ledger.award(15, "env template")

        if _any_path_contains(paths, signatures.SECURITY_POLICY_PATTERNS, lower=True):
            ledger.award(10, "security policy")

        if any(path in signatures.LOCK_FILES for path in paths):
            ledger.award(10, "dependency lock file")

        # Second, independent gitignore award
        if snapshot.has_gitignore:
            ledger.award(5, "secrets kept out of tracked files")

        return ledger

    # =========================================================================
    # BEST PRACTICES (base 30)
    # =========================================================================

    def _audit_best_practices(self, snapshot: RepositorySnapshot) -> ScoreLedger:
        ledger = ScoreLedger("best_practices", base=30)

        flag_awards = (
            (snapshot.has_license, 15, "license"),
            (snapshot.has_gitignore, 10, "gitignore"),
            (snapshot.has_tests, 15, "tests present"),
            (snapshot.has_ci, 15, "CI configuration"),
            (snapshot.has_env_example, 5, "env template"),
            (snapshot.has_dockerfile, 5, "dockerfile"),
            (snapshot.has_contributing, 5, "contributing guide"),
        )
        for present, points, reason in flag_awards:
            if present:
                ledger.award(points, reason)

        return ledger

    # =========================================================================
    # COMMUNITY HEALTH (base 30)
    # =========================================================================

    def _audit_community_health(self, snapshot: RepositorySnapshot) -> ScoreLedger:
        ledger = ScoreLedger("community_health", base=30)

        contributor_count = len(snapshot.contributors)
        if contributor_count >= 5:
            ledger.award(20, "5+ contributors")
        elif contributor_count >= 2:
            ledger.award(10, "2+ contributors")

        stars = snapshot.repo.stars
        if stars >= 100:
            ledger.award(15, "100+ stars")
        elif stars >= 10:
            ledger.award(10, "10+ stars")
        elif stars >= 1:
            ledger.award(5, "starred")

        issues = [issue for issue in snapshot.issues if not issue.is_pr]
        closed = sum(1 for issue in issues if issue.state == "closed")
        opened = sum(1 for issue in issues if issue.state == "open")
        if closed > opened:
            ledger.award(10, "issues closed faster than opened")

        pushed_at = snapshot.repo.pushed_at
        if pushed_at is not None:
            days_since_push = (snapshot.fetched_at - pushed_at).total_seconds() / 86400
            if days_since_push < 7:
                ledger.award(15, "pushed within a week")
            elif days_since_push < 30:
                ledger.award(10, "pushed within a month")
            elif days_since_push < 90:
                ledger.award(5, "pushed within a quarter")

        if snapshot.repo.topics:
            ledger.award(5, "topics")

        return ledger

    # =========================================================================
    # PRODUCTION READINESS (base 20)
    # =========================================================================

    def _audit_production_readiness(self, snapshot: RepositorySnapshot) -> ScoreLedger:
        ledger = ScoreLedger("production_readiness", base=20)
        paths = _paths(snapshot)

        flag_awards = (
            (snapshot.has_ci, 20, "CI configuration"),
            (snapshot.has_tests, 15, "tests present"),
            (snapshot.has_dockerfile, 10, "dockerfile"),
            (snapshot.has_env_example, 10, "env template"),
            (snapshot.has_gitignore, 5, "gitignore"),
            (snapshot.has_license, 5, "license"),
        )
        for present, points, reason in flag_awards:
            if present:
                ledger.award(points, reason)

        if any(path in signatures.MANIFEST_FILES for path in paths):
            ledger.award(5, "versioned manifest")

        if _any_path_contains(paths, signatures.ERROR_HANDLING_PATTERNS):
            ledger.award(5, "error handling conventions")

        if _any_path_contains(paths, signatures.OBSERVABILITY_PATTERNS):
            ledger.award(5, "logging or monitoring conventions")

        return ledger


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

_analyzer: DimensionAnalyzer | None = None


def get_analyzer() -> DimensionAnalyzer:
    """Get or create singleton analyzer instance."""
    global _analyzer
    if _analyzer is None:
        _analyzer = DimensionAnalyzer()
    return _analyzer


def audit_scores(snapshot: RepositorySnapshot) -> dict[str, ScoreLedger]:
    return get_analyzer().analyze(snapshot)


def score_dimension(name: str, snapshot: RepositorySnapshot) -> int:
    """Score a single dimension. Raises KeyError for an unknown name."""
    return get_analyzer().audits[name](snapshot).total


def score_dimensions(snapshot: RepositorySnapshot) -> ScoreBreakdown:
    """
    Score all seven dimensions.

    The returned breakdown has overall=0; the aggregator fills it in.
    """
    ledgers = audit_scores(snapshot)
    return ScoreBreakdown(**{name: ledger.total for name, ledger in ledgers.items()})
