"""Document-level score aggregation and per-clause risk."""

import numpy as np

from .config import ScoringPolicy
from .models import Match

_TIER_RANK = {"unacceptable": 2, "fallback": 1, "preferred": 0}


def aggregate_score(
    matches: list[Match],
    missing_count: int,
    total_clauses: int,
    policy: ScoringPolicy | None = None,
) -> float:
    """
    overall = found_ratio * 0.5 + avg_confidence * 0.3 + (1 - risk) * 0.2

    risk adds 0.3 per unacceptable and 0.1 per fallback match, so it is not
    bounded by 1; the result is floored at 0 and rounded to 2 decimals.
    """
    policy = policy or ScoringPolicy()
    found_ratio = len(matches) / total_clauses if total_clauses else 0.0
    avg_confidence = float(np.mean([m.confidence_score for m in matches])) if matches else 0.0
    risk = sum(policy.tier_risk.get(m.rule_type, 0.0) for m in matches)

    overall = (
        found_ratio * policy.found_weight
        + avg_confidence * policy.confidence_weight
        + (1 - risk) * policy.risk_weight
    )
    return round(max(0.0, overall), 2)


def sort_matches(matches: list[Match]) -> list[Match]:
    """Riskiest tier first, then highest confidence."""
    return sorted(
        matches,
        key=lambda m: (-_TIER_RANK.get(m.rule_type, -1), -m.confidence_score),
    )


def clause_risk_level(rule_type: str | None, confidence: float = 0.0) -> int:
    """1 (aligned) .. 5 (must renegotiate); None means the clause is missing."""
    if rule_type is None:
        return 4
    if rule_type == "unacceptable":
        return 5
    if rule_type == "fallback" and confidence < 0.7:
        return 3
    if rule_type == "preferred" and confidence > 0.8:
        return 1
    return 2


def recommended_action(rule_type: str | None, confidence: float, perspective: str, clause_name: str = "") -> str:
    if rule_type is None:
        return f"Add {clause_name} clause to strengthen the {perspective} party position"
    if rule_type == "preferred" and confidence > 0.8:
        return f"Excellent - clause aligns with the {perspective} party preferred position"
    if rule_type == "fallback" and confidence > 0.6:
        return f"Acceptable - clause meets {perspective} party fallback requirements"
    if rule_type == "unacceptable":
        return f"Action required - negotiate better terms for the {perspective} party"
    return f"Review recommended - clause may need adjustment for the {perspective} party"


def risk_label(overall_score: float, policy: ScoringPolicy | None = None) -> str:
    policy = policy or ScoringPolicy()
    if overall_score < policy.high_risk_below:
        return "high"
    if overall_score < policy.medium_risk_below:
        return "medium"
    return "low"
