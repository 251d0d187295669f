from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from repograde.engine.schemas import RepositorySnapshot
from repograde.services.github import derive_presence_flags

FETCHED_AT = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


def build_snapshot(
    files=(),
    dirs=(),
    *,
    readme=None,
    contributors=0,
    stars=0,
    forks=0,
    issues=(),
    pushed_days_ago=None,
    topics=(),
    languages=None,
    language=None,
    full_name="octo/demo",
    flags=None,
) -> RepositorySnapshot:
    """
    Build a snapshot the way the GitHub collaborator would.

    Presence flags are derived from the paths; pass flags={...} to override.
    """
    tree = [{"path": path, "type": "dir"} for path in dirs]
    tree += [{"path": path, "type": "file", "size": 100} for path in files]

    presence = derive_presence_flags([entry["path"] for entry in tree])
    presence.update(flags or {})

    pushed_at = FETCHED_AT - timedelta(days=pushed_days_ago) if pushed_days_ago is not None else None

    return RepositorySnapshot.model_validate({
        "repo": {
            "name": full_name.split("/")[-1],
            "full_name": full_name,
            "stars": stars,
            "forks": forks,
            "language": language,
            "languages": languages or {},
            "pushed_at": pushed_at,
            "topics": list(topics),
        },
        "contributors": [
            {"username": f"dev{i}", "contributions": 100 - i} for i in range(contributors)
        ],
        "issues": list(issues),
        "file_tree": tree,
        "readme": readme,
        "fetched_at": FETCHED_AT,
        **presence,
    })


def healthy_readme() -> str:
    body = (
        "# Demo\n\n![badge](https://img.shields.io/badge/build-passing-green)\n\n"
        "## Installation\n\nnpm install demo\n\n"
        "## Usage\n\nSee the example below.\n\n"
        "## API\n\nFull documentation lives in docs/.\n\n"
        "## Contributing\n\nPull requests welcome.\n\n"
        "## License\n\nMIT\n\n"
    )
    return body + "x" * (2100 - len(body))


def healthy_snapshot() -> RepositorySnapshot:
    return build_snapshot(
        files=[
            "README.md", "LICENSE", ".gitignore", ".env.example", "Dockerfile",
            "CONTRIBUTING.md", "CHANGELOG.md", "package.json", "package-lock.json",
            ".eslintrc.json", "src/index.ts", "src/middleware/errors.ts", "src/logger.ts",
            "tests/index.test.ts", ".github/workflows/ci.yml", "docs/guide.md",
        ],
        dirs=["src", "src/middleware", "tests", "docs", ".github", ".github/workflows"],
        readme=healthy_readme(),
        contributors=6,
        stars=150,
        issues=[
            {"title": "Crash on start", "state": "closed"},
            {"title": "Typo", "state": "closed"},
            {"title": "Feature request", "state": "open"},
        ],
        pushed_days_ago=2,
        topics=["cli"],
        languages={"TypeScript": 50000, "JavaScript": 1200},
        language="TypeScript",
    )


@pytest.fixture
def make_snapshot():
    """Factory for snapshots built from file paths."""
    return build_snapshot


@pytest.fixture
def empty_snapshot() -> RepositorySnapshot:
    return build_snapshot(full_name="octo/empty")
