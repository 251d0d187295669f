from .cache import AnalysisCache, cache_key
from .github import (
    GitHubAPIError,
    GitHubClient,
    GitHubRateLimited,
    InvalidRepositoryURL,
    RepositoryNotFound,
    build_snapshot,
    derive_presence_flags,
    parse_repo_url,
)

__all__ = [
    "AnalysisCache",
    "cache_key",
    "GitHubAPIError",
    "GitHubClient",
    "GitHubRateLimited",
    "InvalidRepositoryURL",
    "RepositoryNotFound",
    "build_snapshot",
    "derive_presence_flags",
    "parse_repo_url",
]
