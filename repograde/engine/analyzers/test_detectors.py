"""Tests for the tech stack and missing-file detectors."""

from __future__ import annotations

from repograde.conftest import healthy_snapshot
from repograde.engine.analyzers import detect_missing_files, detect_tech_stack


def test_languages_come_first_at_high_confidence(make_snapshot) -> None:
    snapshot = make_snapshot(languages={"Python": 9000, "Shell": 120})

    stack = detect_tech_stack(snapshot)

    assert [(e.name, e.category.value, e.confidence) for e in stack] == [
        ("Python", "language", 0.9),
        ("Shell", "language", 0.9),
    ]


def test_file_patterns_follow_table_order(make_snapshot) -> None:
    snapshot = make_snapshot(files=[
        "Dockerfile", "next.config.js", ".github/workflows/ci.yml", "tailwind.config.ts",
    ])

    names = [entry.name for entry in detect_tech_stack(snapshot)]

    assert names == ["Next.js", "Tailwind CSS", "Docker", "GitHub Actions"]


def test_file_patterns_are_case_insensitive(make_snapshot) -> None:
    stack = detect_tech_stack(make_snapshot(files=["backend/FastAPI_app.py"]))

    assert [(e.name, e.category.value, e.confidence) for e in stack] == [("FastAPI", "framework", 0.8)]


def test_readme_keywords_only_add_new_names(make_snapshot) -> None:
    snapshot = make_snapshot(
        files=["prisma/schema.prisma"],
        readme="Built with React, PostgreSQL and Redis. Deployed on Vercel.",
    )

    stack = detect_tech_stack(snapshot)

    assert [e.name for e in stack] == ["Prisma", "React", "PostgreSQL", "Redis", "Vercel"]
    assert all(e.confidence == 0.6 for e in stack[1:])


def test_names_are_never_duplicated(make_snapshot) -> None:
    snapshot = make_snapshot(
        files=["docker-compose.yml", "Dockerfile", "mongo/mongoose.js"],
        languages={"JavaScript": 100},
        readme="mongodb mongodb react react",
    )

    names = [entry.name for entry in detect_tech_stack(snapshot)]

    assert len(names) == len(set(names))
    assert names == ["JavaScript", "Docker", "Docker Compose", "MongoDB/Mongoose", "React", "MongoDB"]


def test_empty_snapshot_has_no_stack(empty_snapshot) -> None:
    assert detect_tech_stack(empty_snapshot) == []


def test_all_missing_files_for_empty_repository(empty_snapshot) -> None:
    missing = detect_missing_files(empty_snapshot)

    assert [(m.name, m.importance.value) for m in missing] == [
        ("LICENSE", "critical"),
        ("README.md", "critical"),
        (".gitignore", "critical"),
        ("tests/", "critical"),
        (".github/workflows/", "recommended"),
        (".env.example", "recommended"),
        ("CONTRIBUTING.md", "recommended"),
        ("CHANGELOG.md", "nice-to-have"),
        ("Dockerfile", "nice-to-have"),
    ]
    assert missing[0].description == "No license file found. Without a license, your code is not legally open-source."


def test_present_items_are_never_reported_missing() -> None:
    assert detect_missing_files(healthy_snapshot()) == []


def test_partial_repository(make_snapshot) -> None:
    snapshot = make_snapshot(files=["LICENSE", ".gitignore"], readme="# Hi")

    names = [m.name for m in detect_missing_files(snapshot)]

    assert "LICENSE" not in names
    assert "README.md" not in names
    assert ".gitignore" not in names
    assert names[0] == "tests/"
