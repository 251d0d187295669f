"""
Missing-File Detector for RepoGrade

Lists the well-known project files a repository lacks, most important first.
"""

from ..schemas import Importance, MissingFile, RepositorySnapshot


# (name, importance, description, predicate telling whether the item is present)
RECOMMENDED_FILES = (
    ("LICENSE", Importance.CRITICAL,
     "No license file found. Without a license, your code is not legally open-source.",
     lambda s: s.has_license),
    ("README.md", Importance.CRITICAL,
     "No README found. This is the first thing visitors see.",
     lambda s: bool(s.readme)),
    (".gitignore", Importance.CRITICAL,
     "No .gitignore found. Sensitive files may be committed.",
     lambda s: s.has_gitignore),
    ("tests/", Importance.CRITICAL,
     "No test directory found. Tests are essential for code reliability.",
     lambda s: s.has_tests),
    (".github/workflows/", Importance.RECOMMENDED,
     "No CI/CD configuration found. Automate testing and deployment.",
     lambda s: s.has_ci),
    (".env.example", Importance.RECOMMENDED,
     "No environment variable template. Helps new developers onboard.",
     lambda s: s.has_env_example),
    ("CONTRIBUTING.md", Importance.RECOMMENDED,
     "No contributing guide. Helps the community contribute properly.",
     lambda s: s.has_contributing),
    ("CHANGELOG.md", Importance.NICE_TO_HAVE,
     "No changelog. Track version history for users.",
     lambda s: s.has_changelog),
    ("Dockerfile", Importance.NICE_TO_HAVE,
     "No Dockerfile. Containerization ensures consistent environments.",
     lambda s: s.has_dockerfile),
)


def detect_missing_files(snapshot: RepositorySnapshot) -> list[MissingFile]:
    return [
        MissingFile(name=name, importance=importance, description=description)
        for name, importance, description, is_present in RECOMMENDED_FILES
        if not is_present(snapshot)
    ]
