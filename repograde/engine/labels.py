"""
Label thresholds shared by the aggregator and the insight synthesizer.
"""

# (exclusive lower bound on file count, label), checked in order
COMPLEXITY_TIERS = ((500, "very-high"), (100, "high"), (30, "medium"))

# (inclusive lower bound on overall score, label), checked in order
HEALTH_TIERS = ((85, "excellent"), (70, "good"), (50, "fair"), (30, "needs-work"))

# (inclusive lower bound on contributor count, label), checked in order
TEAM_SIZE_TIERS = ((10, "Large team (10+)"), (5, "Medium team (5-10)"), (2, "Small team (2-4)"))


def complexity_level(file_count: int) -> str:
    for threshold, label in COMPLEXITY_TIERS:
        if file_count > threshold:
            return label
    return "low"


def repo_health(overall: int) -> str:
    for threshold, label in HEALTH_TIERS:
        if overall >= threshold:
            return label
    return "critical"


def estimated_team_size(contributor_count: int) -> str:
    for threshold, label in TEAM_SIZE_TIERS:
        if contributor_count >= threshold:
            return label
    return "Solo developer"
