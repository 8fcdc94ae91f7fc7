"""Data classes for the clause review engine."""

from dataclasses import asdict, dataclass

from .config import PERSPECTIVES, RULE_TYPES

# Older rulebooks name the outer tiers differently.
LEGACY_RULE_TYPES = {
    "starting_position": "preferred",
    "acceptable_fallback": "fallback",
    "not_acceptable": "unacceptable",
}


def normalize_rule_type(value: str) -> str:
    rule_type = (value or "").strip().lower().replace("-", "_").replace(" ", "_")
    rule_type = LEGACY_RULE_TYPES.get(rule_type, rule_type)
    if rule_type not in RULE_TYPES:
        raise ValueError(f"Unknown rule type: {value!r}")
    return rule_type


def normalize_perspective(value: str) -> str:
    perspective = (value or "").strip().lower()
    if perspective not in PERSPECTIVES:
        raise ValueError(
            f"Party perspective must be one of {', '.join(PERSPECTIVES)} (got {value!r})"
        )
    return perspective


@dataclass(frozen=True)
class Clause:
    id: str
    name: str
    category: str = "core"     # "core", "standard" or "optional"
    display_order: int = 0
    is_active: bool = True


@dataclass(frozen=True)
class Rule:
    id: str
    clause_id: str
    rule_type: str            # "preferred", "fallback" or "unacceptable"
    party_perspective: str    # "receiving", "disclosing" or "mutual"
    keywords: tuple[str, ...] = ()
    severity: int = 3         # 1 (minor) .. 5 (critical)
    rule_text: str = ""
    guidance_text: str = ""
    example_language: str = ""


@dataclass(frozen=True)
class Segment:
    text: str
    start: int
    end: int
    score: float

    @property
    def span(self) -> tuple[int, int]:
        return self.start, self.end


@dataclass(frozen=True)
class Detection:
    clause_type: str
    detected: bool
    best_text: str = ""
    confidence: float = 0.0
    span: tuple[int, int] = (0, 0)
    validated: bool = False


@dataclass(frozen=True)
class Evaluation:
    rule_type: str
    confidence: float
    rule: Rule


@dataclass(frozen=True)
class Match:
    clause_id: str
    clause_name: str
    rule_id: str
    rule_type: str
    matched_text: str
    matched_keywords: tuple[str, ...]
    confidence_score: float
    span: tuple[int, int] = (0, 0)
    risk_level: int = 2
    recommended_action: str = ""
    guidance: str = ""


@dataclass(frozen=True)
class Missing:
    clause_id: str
    clause_name: str
    recommended_action: str = ""


@dataclass(frozen=True)
class AnalysisResult:
    matches: tuple[Match, ...]
    missing: tuple[str, ...]
    overall_score: float
    party_perspective: str
    missing_details: tuple[Missing, ...] = ()

    @property
    def total_clauses(self) -> int:
        return len(self.matches) + len(self.missing)

    def to_dict(self) -> dict:
        return {
            "party_perspective": self.party_perspective,
            "overall_score": self.overall_score,
            "matches": [
                {**asdict(m), "matched_keywords": list(m.matched_keywords), "span": list(m.span)}
                for m in self.matches
            ],
            "missing": list(self.missing),
            "missing_details": [asdict(m) for m in self.missing_details],
        }
