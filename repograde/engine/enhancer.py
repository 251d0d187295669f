"""
Optional AI enhancement for RepoGrade insights.

An InsightEnhancer asks a generative text provider (Gemini by default) to
write the summary, suggestions and insights for a repository. The provider's
reply is validated against InsightReport before it is used. Any failure
(no provider, timeout, transport error, empty or non-JSON text, schema
mismatch) yields the deterministic fallback report instead, tagged with the
reason. Nothing here ever raises out of enhance().
"""

import json
import logging
import re
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from dataclasses import dataclass
from typing import Callable, Union

import httpx
from pydantic import ValidationError

from .insights import synthesize_insights
from .schemas import InsightReport, RepositorySnapshot, ScoreBreakdown

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_TIMEOUT_SECONDS = 30.0
PROMPT_TREE_LIMIT = 50
PROMPT_README_LIMIT = 1000

# prompt -> raw response text
InsightProvider = Callable[[str], str]


# =============================================================================
# OUTCOME TYPES
# =============================================================================

@dataclass(frozen=True)
class Enhanced:
    """The provider's report passed validation and replaces the fallback."""
    report: InsightReport
    ai_powered: bool = True


@dataclass(frozen=True)
class FallbackUsed:
    """The deterministic report was used; reason says why."""
    reason: str
    report: InsightReport
    ai_powered: bool = False


EnhancementOutcome = Union[Enhanced, FallbackUsed]


# =============================================================================
# GEMINI PROVIDER
# =============================================================================

class GeminiInsightProvider:
    """Calls Gemini through google-genai and returns the raw response text."""

    def __init__(self, api_key: str, model: str = DEFAULT_MODEL, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        from google import genai

        self.model = model
        self.timeout_ms = int(timeout * 1000)
        self.client = genai.Client(api_key=api_key)

    def __call__(self, prompt: str) -> str:
        response = self.client.models.generate_content(
            model=self.model,
            contents=prompt,
            config={"http_options": {"timeout": self.timeout_ms}},
        )
        return response.text or ""


# =============================================================================
# PROMPT AND PARSING
# =============================================================================

def build_prompt(snapshot: RepositorySnapshot, scores: ScoreBreakdown) -> str:
    repo = snapshot.repo
    shallow = [entry for entry in snapshot.file_tree if len(entry.path.split("/")) <= 2]
    tree_lines = "\n".join(
        f"  {'[dir]' if entry.type == 'dir' else '[file]'} {entry.path}"
        for entry in shallow[:PROMPT_TREE_LIMIT]
    )
    readme = snapshot.readme[:PROMPT_README_LIMIT] if snapshot.readme else "No README found"

    return f"""You are a senior software engineer performing a code repository analysis.

REPOSITORY: {repo.full_name}
DESCRIPTION: {repo.description or "No description"}
PRIMARY LANGUAGE: {repo.language or "Unknown"}
LANGUAGES: {", ".join(repo.languages)}
STARS: {repo.stars} | FORKS: {repo.forks} | ISSUES: {repo.open_issues}
LICENSE: {repo.license or "None"}
LAST UPDATED: {repo.updated_at.isoformat() if repo.updated_at else "Unknown"}

FILE STRUCTURE (top-level):
{tree_lines}

TOTAL FILES: {len(snapshot.files)}
TOTAL DIRECTORIES: {len(snapshot.dirs)}

HAS: License={snapshot.has_license}, Tests={snapshot.has_tests}, CI/CD={snapshot.has_ci}, Docker={snapshot.has_dockerfile}, .gitignore={snapshot.has_gitignore}, .env.example={snapshot.has_env_example}

CURRENT SCORES:
- Code Quality: {scores.code_quality}/100
- Architecture: {scores.architecture}/100
- Documentation: {scores.documentation}/100
- Security: {scores.security}/100
- Best Practices: {scores.best_practices}/100
- Community Health: {scores.community_health}/100
- Production Readiness: {scores.production_readiness}/100
- Overall: {scores.overall}/100

README (first {PROMPT_README_LIMIT} chars):
{readme}

Provide a JSON response with EXACTLY this structure (no markdown, no code fences, just pure JSON):
{{
  "summary": "A 2-3 sentence professional summary of the repository's quality and purpose",
  "suggestions": [
    "5 specific, actionable improvement suggestions (each 1-2 sentences)"
  ],
  "insights": [
    {{
      "category": "one of: architecture|security|performance|documentation|testing|dependencies",
      "severity": "one of: critical|warning|info|success",
      "title": "Short insight title",
      "description": "Detailed explanation",
      "suggestion": "How to fix or improve"
    }}
  ]
}}

Provide exactly 5 suggestions and 5-8 insights. Be specific to THIS repository, not generic advice."""


_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def parse_report(text: str) -> InsightReport:
    """
    Extract and validate the JSON report from provider text.

    Raises ValueError when no JSON object is present, json.JSONDecodeError when
    it does not parse, and pydantic.ValidationError on a schema mismatch.
    """
    cleaned = text.strip().replace("```json", "").replace("```", "")
    match = _JSON_OBJECT.search(cleaned)
    if not match:
        raise ValueError("no JSON object in provider response")
    return InsightReport.model_validate(json.loads(match.group(0)))


# =============================================================================
# ENHANCER
# =============================================================================

class InsightEnhancer:
    """
    Wraps an InsightProvider with a hard timeout and strict validation.

    The provider call runs on a worker thread; if it outlives the timeout the
    result is discarded and the worker is abandoned.
    """

    def __init__(self, provider: InsightProvider | None, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self.provider = provider
        self.timeout = timeout

    @classmethod
    def from_api_key(cls, api_key: str | None, model: str = DEFAULT_MODEL,
                     timeout: float = DEFAULT_TIMEOUT_SECONDS) -> "InsightEnhancer":
        if not api_key:
            return cls(None, timeout=timeout)
        return cls(GeminiInsightProvider(api_key, model=model, timeout=timeout), timeout=timeout)

    def enhance(self, snapshot: RepositorySnapshot, scores: ScoreBreakdown) -> EnhancementOutcome:
        if self.provider is None:
            return self._fallback("no provider configured", snapshot, scores)

        prompt = build_prompt(snapshot, scores)
        executor = ThreadPoolExecutor(max_workers=1)
        try:
            text = executor.submit(self.provider, prompt).result(timeout=self.timeout)
        except (FutureTimeout, TimeoutError, httpx.TimeoutException):
            return self._fallback(f"provider timed out after {self.timeout}s", snapshot, scores)
        except Exception as e:
            return self._fallback(f"provider error: {e}", snapshot, scores)
        finally:
            executor.shutdown(wait=False)

        if not isinstance(text, str) or not text.strip():
            return self._fallback("empty or non-text provider response", snapshot, scores)

        try:
            report = parse_report(text)
        except json.JSONDecodeError as e:
            return self._fallback(f"malformed JSON: {e}", snapshot, scores)
        except ValidationError as e:
            return self._fallback(f"schema mismatch: {e.error_count()} error(s)", snapshot, scores)
        except ValueError as e:
            return self._fallback(str(e), snapshot, scores)
        except Exception as e:
            return self._fallback(f"unparseable provider response: {e!r}", snapshot, scores)

        logger.info(f"AI insights accepted for {snapshot.repo.full_name}")
        return Enhanced(report=report)

    def _fallback(self, reason: str, snapshot: RepositorySnapshot, scores: ScoreBreakdown) -> FallbackUsed:
        if self.provider is None:
            logger.debug(f"Using fallback insights for {snapshot.repo.full_name}: {reason}")
        else:
            logger.warning(f"AI insights unavailable for {snapshot.repo.full_name}, using fallback: {reason}")
        return FallbackUsed(reason=reason, report=synthesize_insights(snapshot, scores))
