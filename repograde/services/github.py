"""
GitHub REST client for RepoGrade.

Fetches everything the engine needs for one repository and shapes it into a
RepositorySnapshot, including the presence flags derived from the file tree.
"""

import asyncio
import logging
import re
from datetime import datetime, timezone
from typing import Any

import httpx

from ..engine.schemas import CONTRIBUTOR_SAMPLE_SIZE, RepositorySnapshot

logger = logging.getLogger(__name__)


GITHUB_API = "https://api.github.com"
USER_AGENT = "RepoGrade-Analyzer"
DEFAULT_TIMEOUT = 15.0

_REPO_URL = re.compile(
    r"^(?:(?:https?://)?(?:www\.)?github\.com/)?([A-Za-z0-9_.-]+)/([A-Za-z0-9_.-]+)$"
)


# =============================================================================
# EXCEPTIONS
# =============================================================================

class InvalidRepositoryURL(ValueError):
    """The input is neither a GitHub URL nor an owner/repo pair."""


class GitHubAPIError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RepositoryNotFound(GitHubAPIError):
    pass


class GitHubRateLimited(GitHubAPIError):
    def __init__(self, message: str, reset_at: datetime | None = None):
        super().__init__(message, status_code=403)
        self.reset_at = reset_at


# =============================================================================
# PURE HELPERS
# =============================================================================

def parse_repo_url(value: str) -> tuple[str, str]:
    """
    Parse a GitHub repository reference into (owner, repo).

    Accepts https://github.com/owner/repo, github.com/owner/repo and owner/repo,
    with or without a trailing slash or .git suffix.
    """
    cleaned = value.strip().rstrip("/")
    if cleaned.endswith(".git"):
        cleaned = cleaned[:-4]

    match = _REPO_URL.match(cleaned)
    if not match:
        raise InvalidRepositoryURL(
            f"Invalid GitHub repository: {value!r}. Use https://github.com/owner/repo or owner/repo"
        )
    return match.group(1), match.group(2)


def derive_presence_flags(paths: list[str]) -> dict[str, bool]:
    """Compute the eight snapshot presence flags from file tree paths."""
    lowered = [path.lower() for path in paths]

    def contains(*needles: str) -> bool:
        return any(needle in path for path in lowered for needle in needles)

    return {
        "has_license": contains("license"),
        "has_contributing": contains("contributing"),
        "has_changelog": contains("changelog"),
        "has_ci": contains(".github/workflows", ".gitlab-ci", "jenkinsfile"),
        "has_tests": contains("test", "spec", "__tests__"),
        "has_env_example": contains(".env.example", ".env.sample"),
        "has_dockerfile": contains("dockerfile"),
        "has_gitignore": ".gitignore" in lowered,
    }


def _shape_issue(item: dict[str, Any], is_pr: bool) -> dict[str, Any]:
    return {
        "title": item.get("title") or "",
        "state": item.get("state", "open"),
        "created_at": item.get("created_at"),
        "closed_at": item.get("closed_at"),
        "labels": [label.get("name", "") for label in item.get("labels", []) if isinstance(label, dict)],
        "is_pr": is_pr,
    }


def build_snapshot(
    repo: dict[str, Any],
    *,
    contributors: list[dict[str, Any]] | None = None,
    issues: list[dict[str, Any]] | None = None,
    pulls: list[dict[str, Any]] | None = None,
    languages: dict[str, int] | None = None,
    tree: list[dict[str, Any]] | None = None,
    readme: str | None = None,
    fetched_at: datetime | None = None,
) -> RepositorySnapshot:
    """
    Shape raw GitHub API payloads into a validated RepositorySnapshot.

    The issues endpoint also lists pull requests (marked by a pull_request
    key); everything from the pulls endpoint is a pull request.
    """
    file_tree = [
        {
            "path": item["path"],
            "type": "dir" if item.get("type") == "tree" else "file",
            "size": item.get("size"),
        }
        for item in (tree or [])
        if item.get("path")
    ]

    shaped_issues = [_shape_issue(item, is_pr="pull_request" in item) for item in (issues or [])]
    shaped_issues += [_shape_issue(item, is_pr=True) for item in (pulls or [])]

    license_info = repo.get("license") or {}

    return RepositorySnapshot.model_validate({
        "repo": {
            "name": repo.get("name"),
            "full_name": repo.get("full_name"),
            "description": repo.get("description"),
            "stars": repo.get("stargazers_count", 0),
            "forks": repo.get("forks_count", 0),
            "open_issues": repo.get("open_issues_count", 0),
            "watchers": repo.get("subscribers_count", repo.get("watchers_count", 0)),
            "language": repo.get("language"),
            "languages": languages or {},
            "size": repo.get("size", 0),
            "default_branch": repo.get("default_branch") or "main",
            "created_at": repo.get("created_at"),
            "updated_at": repo.get("updated_at"),
            "pushed_at": repo.get("pushed_at"),
            "license": license_info.get("spdx_id"),
            "topics": repo.get("topics") or [],
        },
        "contributors": [
            {"username": item.get("login", ""), "contributions": item.get("contributions", 0)}
            for item in (contributors or [])[:CONTRIBUTOR_SAMPLE_SIZE]
        ],
        "issues": shaped_issues,
        "file_tree": file_tree,
        "readme": readme or None,
        "fetched_at": fetched_at or datetime.now(timezone.utc),
        **derive_presence_flags([entry["path"] for entry in file_tree]),
    })


# =============================================================================
# CLIENT
# =============================================================================

class GitHubClient:
    """
    Async GitHub REST client.

    A token raises the rate limit from 60 to 5,000 requests per hour.
    Pass transport= (e.g. httpx.MockTransport) to run without the network.
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str = GITHUB_API,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.token = token
        self.base_url = base_url
        self.timeout = timeout
        self.transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": USER_AGENT,
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers(),
            timeout=self.timeout,
            transport=self.transport,
        )

    async def fetch_snapshot(self, owner: str, repo: str) -> RepositorySnapshot:
        """
        Fetch and shape one repository.

        Raises RepositoryNotFound, GitHubRateLimited or GitHubAPIError when the
        repository itself cannot be read. Failures on the secondary endpoints
        degrade to empty values.
        """
        prefix = f"/repos/{owner}/{repo}"
        async with self._client() as client:
            repo_data = await self._fetch_repository(client, owner, repo)
            branch = repo_data.get("default_branch") or "main"

            results = await asyncio.gather(
                self._get_json(client, f"{prefix}/contributors", params={"per_page": 10}),
                self._get_json(client, f"{prefix}/issues", params={"state": "all", "per_page": 50}),
                self._get_json(client, f"{prefix}/pulls", params={"state": "all", "per_page": 30}),
                self._get_json(client, f"{prefix}/languages"),
                self._get_json(client, f"{prefix}/git/trees/{branch}", params={"recursive": 1}),
                self._get_readme(client, prefix),
                return_exceptions=True,
            )

        names = ("contributors", "issues", "pulls", "languages", "tree", "readme")
        payloads: dict[str, Any] = {}
        for name, result in zip(names, results):
            if isinstance(result, Exception):
                logger.warning(f"GitHub {name} fetch failed for {owner}/{repo}: {result}")
                payloads[name] = None
            else:
                payloads[name] = result

        tree_payload = payloads["tree"] or {}
        if tree_payload.get("truncated"):
            logger.warning(f"GitHub tree for {owner}/{repo} was truncated")

        return build_snapshot(
            repo_data,
            contributors=payloads["contributors"] if isinstance(payloads["contributors"], list) else [],
            issues=payloads["issues"] if isinstance(payloads["issues"], list) else [],
            pulls=payloads["pulls"] if isinstance(payloads["pulls"], list) else [],
            languages=payloads["languages"] if isinstance(payloads["languages"], dict) else {},
            tree=tree_payload.get("tree", []),
            readme=payloads["readme"],
        )

    async def _fetch_repository(self, client: httpx.AsyncClient, owner: str, repo: str) -> dict[str, Any]:
        try:
            response = await client.get(f"/repos/{owner}/{repo}")
        except httpx.HTTPError as e:
            raise GitHubAPIError(f"GitHub API request failed: {e}") from e

        if response.status_code == 404:
            raise RepositoryNotFound(
                f'Repository "{owner}/{repo}" not found. Check that it exists and is public.',
                status_code=404,
            )
        if response.status_code in (403, 429) and response.headers.get("x-ratelimit-remaining") in (None, "0"):
            reset_header = response.headers.get("x-ratelimit-reset")
            reset_at = (
                datetime.fromtimestamp(int(reset_header), tz=timezone.utc)
                if reset_header and reset_header.isdigit()
                else None
            )
            hint = (
                "Your token's limit is exhausted."
                if self.token
                else "Set GITHUB_TOKEN to get 5,000 requests/hour instead of 60."
            )
            resets = reset_at.strftime("%H:%M:%S UTC") if reset_at else "soon"
            raise GitHubRateLimited(f"GitHub API rate limit exceeded. {hint} Resets at {resets}.", reset_at=reset_at)
        if response.status_code >= 400:
            raise GitHubAPIError(
                f"GitHub API error ({response.status_code}) for {owner}/{repo}",
                status_code=response.status_code,
            )
        return response.json()

    async def _get_json(self, client: httpx.AsyncClient, path: str, params: dict | None = None) -> Any:
        response = await client.get(path, params=params)
        response.raise_for_status()
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def _get_readme(self, client: httpx.AsyncClient, prefix: str) -> str | None:
        response = await client.get(f"{prefix}/readme", headers={"Accept": "application/vnd.github.v3.raw"})
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.text
