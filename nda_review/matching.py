"""Phase 2: classify a detected clause against the party's rule tiers."""

import logging

from .config import EvaluationPolicy
from .fuzzy import keyword_overlap
from .models import Evaluation, Rule

logger = logging.getLogger(__name__)


def rule_text_bonus(detected_text: str, rule: Rule, policy: EvaluationPolicy) -> float:
    """Share of the rule's leading significant words found in the text, scaled to the bonus cap."""
    words = [
        w for w in rule.rule_text.lower().split()[:policy.rule_text_words]
        if len(w) >= policy.rule_text_min_word
    ]
    if not words:
        return 0.0
    text_low = detected_text.lower()
    hits = sum(1 for w in words if w in text_low)
    return policy.rule_text_bonus * hits / len(words)


def score_rule(detected_text: str, rule: Rule, perspective: str, policy: EvaluationPolicy) -> float:
    _, base = keyword_overlap(detected_text, rule.keywords)
    weight = policy.weight(perspective, rule.rule_type)
    bonus = rule_text_bonus(detected_text, rule, policy)
    return (base + bonus) * weight + (rule.severity - 1) * policy.severity_bonus


def evaluate_rules(
    detected_text: str,
    rules: list[Rule],
    perspective: str,
    policy: EvaluationPolicy | None = None,
) -> Evaluation | None:
    """
    Pick the rule tier that best describes `detected_text`.

    Scores every keyworded rule; below the threshold, the perspective's
    fallback order decides. Returns None only when there are no rules.
    """
    policy = policy or EvaluationPolicy()
    if not rules:
        return None

    candidates = [r for r in rules if r.keywords]
    for rule in rules:
        if not rule.keywords:
            logger.debug("Skipping rule %s: no keywords configured", rule.id)

    if not candidates:
        first = rules[0]
        return Evaluation("unacceptable", policy.keywordless_confidence, first)

    best_rule = None
    best_score = float("-inf")
    for rule in candidates:
        score = score_rule(detected_text, rule, perspective, policy)
        if score > best_score:
            best_rule, best_score = rule, score

    if best_score >= policy.threshold:
        return Evaluation(best_rule.rule_type, min(best_score, 1.0), best_rule)

    for rule_type in policy.fallback_order.get(perspective, ()):
        tier = [r for r in candidates if r.rule_type == rule_type]
        if tier:
            chosen = max(tier, key=lambda r: r.severity)
            return Evaluation(chosen.rule_type, policy.fallback_confidence, chosen)

    # Perspective without a fallback order: keep the top scorer.
    return Evaluation(best_rule.rule_type, max(min(best_score, 1.0), 0.0), best_rule)
