"""
Command-line entry point.

Usage:
    python -m repograde analyze owner/repo [--no-ai] [-v]
    python -m repograde serve [--host 127.0.0.1] [--port 8000]
"""

import argparse
import asyncio
import logging
import sys

from .config import Settings, load_settings
from .engine import InsightEnhancer, analyze
from .logging_config import setup_logging
from .services import GitHubAPIError, GitHubClient, InvalidRepositoryURL, parse_repo_url

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repograde",
        description="Score the quality of a GitHub repository.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser("analyze", help="Analyze one repository and print JSON.")
    analyze_parser.add_argument("repo", help="GitHub URL or owner/repo")
    analyze_parser.add_argument(
        "--no-ai",
        action="store_true",
        help="Skip the AI insight provider even if GEMINI_API_KEY is set.",
    )
    analyze_parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API with uvicorn.")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def _run_analyze(args: argparse.Namespace, settings: Settings) -> int:
    try:
        owner, repo = parse_repo_url(args.repo)
    except InvalidRepositoryURL as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    client = GitHubClient(settings.github_token, timeout=settings.github_timeout_seconds)
    try:
        snapshot = asyncio.run(client.fetch_snapshot(owner, repo))
    except GitHubAPIError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    enhancer = None
    if not args.no_ai:
        enhancer = InsightEnhancer.from_api_key(
            settings.gemini_api_key,
            model=settings.gemini_model,
            timeout=settings.ai_timeout_seconds,
        )

    result = analyze(snapshot, enhancer=enhancer)
    print(result.model_dump_json(indent=2))
    return 0


def _run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("repograde.main:create_app", factory=True, host=args.host, port=args.port)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = load_settings()
    verbose = getattr(args, "verbose", False)
    # Keep stdout clean for the JSON report
    stream = sys.stderr if args.command == "analyze" else None
    setup_logging(settings.environment, "DEBUG" if verbose else settings.log_level, stream=stream)

    if args.command == "analyze":
        return _run_analyze(args, settings)
    return _run_serve(args)


if __name__ == "__main__":
    sys.exit(main())
