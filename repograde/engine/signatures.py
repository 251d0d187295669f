"""
Heuristic lookup tables used by the scorers, detectors and insight synthesizer.

These are data, not logic: extend a table to recognise more conventions
without touching scorer code. Point values live in the scorers themselves.
"""

# =============================================================================
# DIRECTORY / FILE CONVENTIONS
# =============================================================================

# Top-level directory names that earn architecture points (+5 each)
RECOGNIZED_DIRECTORIES = (
    "src", "lib", "utils", "components", "services", "models", "controllers",
    "middleware", "config", "tests", "docs", "scripts", "public", "assets",
)

# Source-root prefixes for the code quality "organized source" award
SOURCE_ROOTS = ("src", "lib")

LINT_CONFIG_PATTERNS = (
    ".eslintrc", ".prettierrc", "eslint.config", ".flake8", "pyproject.toml", "rubocop",
)

TYPED_SUFFIXES = (".ts", ".tsx", ".pyi")
TYPED_MARKERS = ("py.typed",)

# Lock files counted by the security scorer, matched by exact path
LOCK_FILES = (
    "package-lock.json", "yarn.lock", "pnpm-lock.yaml",
    "Pipfile.lock", "Gemfile.lock", "poetry.lock",
)

# Root-level manifests counted by the production readiness scorer
MANIFEST_FILES = ("package.json", "setup.py", "Cargo.toml")

# Manifest -> lock files that should accompany it (dependency hygiene insight)
MANIFEST_LOCKS = {
    "package.json": ("package-lock.json", "yarn.lock", "pnpm-lock.yaml"),
    "Pipfile": ("Pipfile.lock",),
    "Gemfile": ("Gemfile.lock",),
    "Cargo.toml": ("Cargo.lock",),
    "composer.json": ("composer.lock",),
    "go.mod": ("go.sum",),
}

SECURITY_POLICY_PATTERNS = ("security",)
ENV_FILE_PATTERN = ".env"
ERROR_HANDLING_PATTERNS = ("error", "exception", "middleware")
OBSERVABILITY_PATTERNS = ("log", "monitor", "sentry")

# Path substrings that mark a file as test-like
TEST_PATH_PATTERNS = ("test", "spec", "__tests__")


# =============================================================================
# README KEYWORDS (documentation scorer)
# =============================================================================

# (keywords, points); a group scores once if any keyword appears
README_SECTION_KEYWORDS = (
    (("installation", "getting started"), 10),
    (("usage", "example"), 10),
    (("api", "documentation"), 5),
    (("contributing",), 5),
    (("license",), 5),
    (("badge", "shield"), 5),
)

# (minimum exclusive length, points), checked in order, first match wins
README_LENGTH_TIERS = ((2000, 30), (500, 20), (100, 10))


# =============================================================================
# TECH STACK DETECTION
# =============================================================================

# (lowercased path substring, technology, category), in reporting order
FILE_PATTERN_STACK = (
    ("next.config", "Next.js", "framework"),
    ("nuxt.config", "Nuxt.js", "framework"),
    ("angular.json", "Angular", "framework"),
    ("svelte.config", "Svelte", "framework"),
    ("vite.config", "Vite", "tool"),
    ("webpack.config", "Webpack", "tool"),
    ("tailwind.config", "Tailwind CSS", "framework"),
    ("django", "Django", "framework"),
    ("flask", "Flask", "framework"),
    ("fastapi", "FastAPI", "framework"),
    ("express", "Express.js", "framework"),
    ("rails", "Ruby on Rails", "framework"),
    ("spring", "Spring", "framework"),
    ("dockerfile", "Docker", "tool"),
    ("docker-compose", "Docker Compose", "tool"),
    (".github/workflows", "GitHub Actions", "ci-cd"),
    ("jest.config", "Jest", "testing"),
    ("vitest", "Vitest", "testing"),
    ("cypress", "Cypress", "testing"),
    ("pytest", "Pytest", "testing"),
    ("prisma", "Prisma", "database"),
    ("mongoose", "MongoDB/Mongoose", "database"),
    (".env", "dotenv", "tool"),
)

# (lowercased README keyword, technology, category)
README_KEYWORD_STACK = (
    ("react", "React", "framework"),
    ("vue", "Vue.js", "framework"),
    ("postgresql", "PostgreSQL", "database"),
    ("mongodb", "MongoDB", "database"),
    ("redis", "Redis", "database"),
    ("aws", "AWS", "cloud"),
    ("vercel", "Vercel", "cloud"),
    ("netlify", "Netlify", "cloud"),
)

LANGUAGE_CONFIDENCE = 0.9
FILE_PATTERN_CONFIDENCE = 0.8
README_KEYWORD_CONFIDENCE = 0.6


# =============================================================================
# INSIGHT SYNTHESIS
# =============================================================================

TEST_FRAMEWORKS = {
    "JavaScript": "Jest or Vitest",
    "TypeScript": "Jest or Vitest",
    "Python": "Pytest",
    "Java": "JUnit 5",
    "Go": "the built-in testing package",
    "Ruby": "RSpec",
    "PHP": "PHPUnit",
    "C#": "xUnit or NUnit",
}
DEFAULT_TEST_FRAMEWORK = "a testing framework"

# Dimension field -> label used in summaries
DIMENSION_LABELS = {
    "code_quality": "code quality",
    "architecture": "architecture",
    "documentation": "documentation",
    "security": "security",
    "best_practices": "best practices",
    "community_health": "community health",
    "production_readiness": "production readiness",
}
