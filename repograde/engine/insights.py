"""
Insight Synthesizer for RepoGrade

Deterministic fallback that writes the summary, suggestions and insights for
an analysis without any generative model. Every sentence is templated from
snapshot facts and the computed scores, so the same snapshot always yields the
same text.

Rules run in a fixed order (testing, CI, license, documentation, security,
structure, languages, dependencies, containers, contributors, file mix,
overall) and every matching rule fires. The result is then capped at
8 insights and 5 suggestions, with generic but context-aware suggestions
backfilled when the rules produced fewer than 5.
"""

from collections import Counter
from dataclasses import dataclass

from .labels import repo_health
from .schemas import (
    MAX_INSIGHTS,
    MAX_SUGGESTIONS,
    Insight,
    InsightReport,
    RepositorySnapshot,
    ScoreBreakdown,
    Severity,
)
from . import signatures


# =============================================================================
# HELPERS
# =============================================================================

def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def _percent(part: int, whole: int) -> int:
    """Integer percentage, rounded half up."""
    if whole == 0:
        return 0
    return (part * 200 + whole) // (whole * 2)


def _extension(path: str) -> str | None:
    basename = path.rsplit("/", 1)[-1]
    if "." not in basename:
        return None
    return basename.rsplit(".", 1)[-1].lower() or None


@dataclass
class RepoStats:
    """Secondary statistics derived once per synthesis."""
    language: str
    total_files: int
    total_dirs: int
    languages: list[str]
    contributor_count: int
    test_files: int
    extension_counts: list[tuple[str, int]]
    root_files: set[str]

    @classmethod
    def from_snapshot(cls, snapshot: RepositorySnapshot) -> "RepoStats":
        files = snapshot.files
        extensions = Counter(
            ext for ext in (_extension(entry.path) for entry in files) if ext
        )
        # sorted() is stable, so equal counts keep first-seen order
        ranked = sorted(extensions.items(), key=lambda item: item[1], reverse=True)
        test_files = sum(
            1 for entry in files
            if any(pattern in entry.path for pattern in signatures.TEST_PATH_PATTERNS)
        )
        return cls(
            language=snapshot.repo.language or "Unknown",
            total_files=len(files),
            total_dirs=len(snapshot.dirs),
            languages=list(snapshot.repo.languages),
            contributor_count=len(snapshot.contributors),
            test_files=test_files,
            extension_counts=ranked,
            root_files={entry.path for entry in files if "/" not in entry.path},
        )


# =============================================================================
# SYNTHESIZER CLASS
# =============================================================================

class InsightSynthesizer:
    """Generates an InsightReport from a snapshot and its scores."""

    def synthesize(self, snapshot: RepositorySnapshot, scores: ScoreBreakdown) -> InsightReport:
        stats = RepoStats.from_snapshot(snapshot)
        insights: list[Insight] = []
        suggestions: list[str] = []

        rules = (
            self._check_testing,
            self._check_ci,
            self._check_license,
            self._check_documentation,
            self._check_security,
            self._check_structure,
            self._check_languages,
            self._check_dependencies,
            self._check_containerization,
            self._check_contributors,
            self._check_file_composition,
            self._check_overall,
        )
        for rule in rules:
            rule(snapshot, scores, stats, insights, suggestions)

        if len(suggestions) < MAX_SUGGESTIONS:
            for suggestion in self._backfill_suggestions(snapshot, stats):
                if len(suggestions) >= MAX_SUGGESTIONS:
                    break
                if suggestion not in suggestions:
                    suggestions.append(suggestion)

        return InsightReport(
            summary=self._summarize(snapshot, scores, stats),
            suggestions=suggestions[:MAX_SUGGESTIONS],
            insights=insights[:MAX_INSIGHTS],
        )

    # =========================================================================
    # RULES
    # =========================================================================

    def _check_testing(self, snapshot, scores, stats, insights, suggestions):
        if not snapshot.has_tests:
            framework = signatures.TEST_FRAMEWORKS.get(stats.language, signatures.DEFAULT_TEST_FRAMEWORK)
            insights.append(Insight(
                category="testing",
                severity=Severity.CRITICAL,
                title="No Test Suite Detected",
                description=(
                    f"No test files found across {_plural(stats.total_files, 'file')}. For a {stats.language} "
                    f"project with {_plural(stats.contributor_count, 'contributor')}, automated testing is "
                    f"essential to prevent regressions."
                ),
                suggestion=f"Set up {framework} and aim for at least 70% code coverage. Start by testing core business logic.",
            ))
            suggestions.append(f"Implement automated testing with {framework}, focusing on critical paths first.")
        elif stats.test_files < stats.total_files * 0.1:
            insights.append(Insight(
                category="testing",
                severity=Severity.WARNING,
                title="Low Test Coverage Indication",
                description=(
                    f"Found {stats.test_files} test-related files out of {stats.total_files} total files "
                    f"({_percent(stats.test_files, stats.total_files)}%). Consider expanding test coverage."
                ),
                suggestion="Increase test coverage by adding integration tests and edge case testing.",
            ))
        else:
            insights.append(Insight(
                category="testing",
                severity=Severity.SUCCESS,
                title="Test Suite Present",
                description=(
                    f"Found {stats.test_files} test-related files, indicating good testing practices "
                    f"in this {stats.language} project."
                ),
            ))

    def _check_ci(self, snapshot, scores, stats, insights, suggestions):
        if not snapshot.has_ci:
            insights.append(Insight(
                category="architecture",
                severity=Severity.WARNING,
                title="No CI/CD Pipeline Configured",
                description=(
                    f"With {_plural(stats.contributor_count, 'contributor')} and "
                    f"{_plural(snapshot.repo.forks, 'fork')}, automated pipelines would ensure "
                    f"consistent code quality."
                ),
                suggestion="Create a .github/workflows/ci.yml with build, test, and lint steps for every pull request.",
            ))
            suggestions.append("Set up GitHub Actions CI/CD to automate testing and deployment on every push.")
        else:
            insights.append(Insight(
                category="architecture",
                severity=Severity.SUCCESS,
                title="CI/CD Pipeline Active",
                description="Continuous integration is configured, helping maintain code quality across contributions.",
            ))

    def _check_license(self, snapshot, scores, stats, insights, suggestions):
        if snapshot.has_license:
            return
        insights.append(Insight(
            category="documentation",
            severity=Severity.CRITICAL,
            title="Missing License File",
            description=(
                f"With {_plural(snapshot.repo.stars, 'star')} and {_plural(snapshot.repo.forks, 'fork')}, "
                f"a license is critical for community contribution."
            ),
            suggestion="Add an MIT or Apache 2.0 license. Without one, the code is technically all-rights-reserved.",
        ))

    def _check_documentation(self, snapshot, scores, stats, insights, suggestions):
        if scores.documentation < 50:
            missing = []
            if not snapshot.readme or len(snapshot.readme) < 200:
                missing.append("comprehensive README")
            if not snapshot.has_contributing:
                missing.append("CONTRIBUTING.md")
            if not snapshot.has_changelog:
                missing.append("CHANGELOG.md")
            insights.append(Insight(
                category="documentation",
                severity=Severity.CRITICAL if scores.documentation < 30 else Severity.WARNING,
                title="Documentation Below Standards",
                description=(
                    f"Documentation score is {scores.documentation}/100. "
                    f"Missing: {', '.join(missing) or 'key sections in existing docs'}."
                ),
                suggestion="Add installation steps, usage examples, API reference, and architecture overview to your README.",
            ))
            suggestions.append(
                f"Improve documentation (currently {scores.documentation}/100) with a setup guide, "
                f"usage examples, and an architecture overview."
            )
        elif scores.documentation >= 70:
            insights.append(Insight(
                category="documentation",
                severity=Severity.SUCCESS,
                title="Good Documentation",
                description=f"Documentation score of {scores.documentation}/100 indicates well-maintained project docs.",
            ))

    def _check_security(self, snapshot, scores, stats, insights, suggestions):
        if scores.security >= 60:
            return
        issues = []
        if not snapshot.has_env_example:
            issues.append("no .env.example for secret management")
        if not snapshot.has_gitignore:
            issues.append("missing .gitignore (risk of committing secrets)")
        if not snapshot.has_env_example and any(
            signatures.ENV_FILE_PATTERN in entry.path for entry in snapshot.file_tree
        ):
            issues.append("an .env file is tracked in the repository")
        insights.append(Insight(
            category="security",
            severity=Severity.CRITICAL if scores.security < 40 else Severity.WARNING,
            title="Security Practices Need Attention",
            description=(
                f"Security score is {scores.security}/100. "
                f"Issues: {', '.join(issues) or 'review security configuration'}."
            ),
            suggestion="Add .env.example, SECURITY.md, and ensure all sensitive files are in .gitignore.",
        ))
        suggestions.append(
            f"Address security concerns (score: {scores.security}/100) by adding environment "
            f"variable templates and a security policy."
        )

    def _check_structure(self, snapshot, scores, stats, insights, suggestions):
        if stats.total_files > 100 and stats.total_dirs < 5:
            insights.append(Insight(
                category="architecture",
                severity=Severity.WARNING,
                title="Flat Project Structure",
                description=(
                    f"{stats.total_files} files in only {stats.total_dirs} "
                    f"director{'y' if stats.total_dirs == 1 else 'ies'} suggests insufficient code organization."
                ),
                suggestion="Organize code into logical modules: src/, tests/, docs/, config/. Consider domain-driven structure.",
            ))

    def _check_languages(self, snapshot, scores, stats, insights, suggestions):
        if len(stats.languages) <= 5:
            return
        listed = ", ".join(stats.languages[:4])
        more = "..." if len(stats.languages) > 4 else ""
        insights.append(Insight(
            category="architecture",
            severity=Severity.INFO,
            title="Multi-Language Project",
            description=(
                f"Uses {len(stats.languages)} languages ({listed}{more}). "
                f"Ensure consistent tooling and documentation across all."
            ),
            suggestion="Add language-specific linting rules and ensure each language has appropriate build tools configured.",
        ))

    def _check_dependencies(self, snapshot, scores, stats, insights, suggestions):
        unlocked = [
            manifest
            for manifest, locks in signatures.MANIFEST_LOCKS.items()
            if manifest in stats.root_files and not any(lock in stats.root_files for lock in locks)
        ]
        if not unlocked:
            return
        expected = [" or ".join(signatures.MANIFEST_LOCKS[manifest]) for manifest in unlocked]
        insights.append(Insight(
            category="dependencies",
            severity=Severity.WARNING,
            title="No Lock File Detected",
            description=(
                f"{', '.join(unlocked)} found without a matching lock file. This can lead to "
                f"inconsistent dependency versions across environments."
            ),
            suggestion=f"Commit {'; '.join(expected)} to ensure reproducible builds.",
        ))

    def _check_containerization(self, snapshot, scores, stats, insights, suggestions):
        if snapshot.has_dockerfile or stats.total_files <= 20:
            return
        insights.append(Insight(
            category="architecture",
            severity=Severity.INFO,
            title="No Containerization",
            description=(
                f"A {stats.language} project with {stats.total_files} files would benefit from Docker "
                f"for consistent development and deployment environments."
            ),
            suggestion="Add a Dockerfile and docker-compose.yml for portable development and production deployment.",
        ))

    def _check_contributors(self, snapshot, scores, stats, insights, suggestions):
        if stats.contributor_count == 1:
            insights.append(Insight(
                category="architecture",
                severity=Severity.INFO,
                title="Solo Developer Project",
                description=(
                    f"Single contributor with {_plural(snapshot.repo.stars, 'star')}. "
                    f"Document architecture decisions to lower the bus factor."
                ),
                suggestion="Add ADR (Architecture Decision Records) and comprehensive onboarding docs for future contributors.",
            ))
        elif stats.contributor_count >= 5:
            insights.append(Insight(
                category="architecture",
                severity=Severity.SUCCESS,
                title="Active Contributor Community",
                description=(
                    f"{stats.contributor_count} contributors indicates healthy project collaboration "
                    f"and community engagement."
                ),
            ))

    def _check_file_composition(self, snapshot, scores, stats, insights, suggestions):
        if not stats.extension_counts:
            return
        extension, count = stats.extension_counts[0]
        pct = _percent(count, stats.total_files)
        if pct > 80:
            insights.append(Insight(
                category="architecture",
                severity=Severity.INFO,
                title=f"Primarily .{extension} Files ({pct}%)",
                description=(
                    f"{count} of {stats.total_files} files are .{extension} files. Consider if supporting "
                    f"files (tests, configs, docs) are adequate."
                ),
            ))

    def _check_overall(self, snapshot, scores, stats, insights, suggestions):
        if scores.overall >= 80:
            insights.append(Insight(
                category="architecture",
                severity=Severity.SUCCESS,
                title="Well-Maintained Repository",
                description=(
                    f"Overall score of {scores.overall}/100 reflects strong engineering practices "
                    f"across code quality, docs, and security."
                ),
            ))
        elif scores.overall >= 60:
            insights.append(Insight(
                category="architecture",
                severity=Severity.INFO,
                title="Solid Foundation with Room to Grow",
                description=(
                    f"Overall {scores.overall}/100. Core structure is good, so focus on the "
                    f"lowest-scoring areas for the biggest improvement."
                ),
            ))

    # =========================================================================
    # BACKFILL AND SUMMARY
    # =========================================================================

    def _backfill_suggestions(self, snapshot: RepositorySnapshot, stats: RepoStats) -> list[str]:
        web_languages = {"TypeScript", "JavaScript"}
        return [
            "Add a code of conduct for your growing community."
            if snapshot.repo.stars > 50
            else "Add badges and screenshots to README to attract more contributors.",
            "Consider adding architectural documentation (diagrams, module overview)."
            if stats.total_files > 50
            else "Add inline code comments for complex logic.",
            "Containerize the application with Docker for portable deployment."
            if not snapshot.has_dockerfile
            else "Add health check endpoints for production monitoring.",
            "Set up pre-commit hooks with Husky for linting and formatting."
            if web_languages & set(stats.languages)
            else "Add pre-commit hooks for automated code quality checks.",
            "Create pull request templates to standardize code review."
            if stats.contributor_count > 1
            else "Document your development workflow for future collaborators.",
            "Set up code coverage reporting and aim for at least 70% coverage.",
            "Add performance benchmarks for critical code paths.",
        ]

    def _summarize(self, snapshot: RepositorySnapshot, scores: ScoreBreakdown, stats: RepoStats) -> str:
        strengths = [
            label for name, label in signatures.DIMENSION_LABELS.items()
            if getattr(scores, name) >= 70
        ]
        weaknesses = [
            label for name, label in signatures.DIMENSION_LABELS.items()
            if getattr(scores, name) < 50
        ]

        sentences = [
            f"{snapshot.repo.full_name} is a {stats.language} repository with "
            f"{_plural(stats.total_files, 'file')}, {_plural(stats.contributor_count, 'contributor')}, "
            f"and an overall health score of {scores.overall}/100 ({repo_health(scores.overall)})."
        ]
        if strengths:
            sentences.append(f"Strong areas include {', '.join(strengths)}.")
        if weaknesses:
            sentences.append(f"Key areas for improvement: {', '.join(weaknesses)}.")
        else:
            sentences.append("The project follows solid engineering practices.")
        return " ".join(sentences)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

_synthesizer: InsightSynthesizer | None = None


def get_synthesizer() -> InsightSynthesizer:
    """Get or create singleton synthesizer instance."""
    global _synthesizer
    if _synthesizer is None:
        _synthesizer = InsightSynthesizer()
    return _synthesizer


def synthesize_insights(snapshot: RepositorySnapshot, scores: ScoreBreakdown) -> InsightReport:
    """
    Build the deterministic summary, suggestions and insights.

    Args:
        snapshot: Repository snapshot
        scores: Breakdown with the overall score already filled in

    Returns:
        InsightReport with at most 8 insights and 5 suggestions
    """
    return get_synthesizer().synthesize(snapshot, scores)
