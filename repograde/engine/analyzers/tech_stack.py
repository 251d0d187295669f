"""
Tech Stack Detector for RepoGrade

Infers languages, frameworks, tools, databases, cloud platforms, test runners
and CI systems from three sources, in decreasing confidence:
1. Declared languages (byte-count map)
2. File path patterns in the tree
3. Keywords in the README
"""

from ..schemas import RepositorySnapshot, StackCategory, TechStackEntry
from .. import signatures


def detect_tech_stack(snapshot: RepositorySnapshot) -> list[TechStackEntry]:
    """
    Detect the technology stack of a repository.

    Output order is languages, then file-pattern matches in table order, then
    README matches in table order. Names are unique; the first sighting wins.
    """
    detected: list[TechStackEntry] = []
    seen: set[str] = set()

    def add(name: str, category: str, confidence: float) -> None:
        if name in seen:
            return
        seen.add(name)
        detected.append(TechStackEntry(
            name=name,
            category=StackCategory(category),
            confidence=confidence,
        ))

    for language in snapshot.repo.languages:
        add(language, "language", signatures.LANGUAGE_CONFIDENCE)

    paths = [entry.path.lower() for entry in snapshot.file_tree]
    for pattern, name, category in signatures.FILE_PATTERN_STACK:
        if any(pattern in path for path in paths):
            add(name, category, signatures.FILE_PATTERN_CONFIDENCE)

    if snapshot.readme:
        readme = snapshot.readme.lower()
        for keyword, name, category in signatures.README_KEYWORD_STACK:
            if keyword in readme:
                add(name, category, signatures.README_KEYWORD_CONFIDENCE)

    return detected
