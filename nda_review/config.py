"""Configuration constants, paths, thresholds, and engine policies."""

import os
from dataclasses import dataclass, field
from pathlib import Path

# ---------------------------------------------------------------------------
# Load .env if present
# ---------------------------------------------------------------------------
BASE_DIR = Path(__file__).parent.parent
_env_path = BASE_DIR / ".env"
if _env_path.exists():
    for _line in _env_path.read_text().splitlines():
        _line = _line.strip()
        if _line and not _line.startswith("#") and "=" in _line:
            _k, _, _v = _line.partition("=")
            os.environ.setdefault(_k.strip(), _v.strip().strip("\"'"))

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------
DATA_DIR = Path(__file__).parent / "data"
RULEBOOK_PATH = Path(os.environ.get("NDA_RULEBOOK_PATH", DATA_DIR / "rulebook.json"))
CLAUSE_TYPES_PATH = Path(os.environ.get("NDA_CLAUSE_TYPES_PATH", DATA_DIR / "clause_types.json"))
OUTPUT_DIR = BASE_DIR / "output"
OUTPUT_PATH = OUTPUT_DIR / "analysis.json"

# ---------------------------------------------------------------------------
# Runtime
# ---------------------------------------------------------------------------
MAX_WORKERS = int(os.environ.get("NDA_MAX_WORKERS", "1"))
LOG_LEVEL = os.environ.get("NDA_LOG_LEVEL", "WARNING").upper()

RULE_TYPES = ("preferred", "fallback", "unacceptable")
PERSPECTIVES = ("receiving", "disclosing", "mutual")
DEFAULT_PERSPECTIVE = "receiving"

# ---------------------------------------------------------------------------
# Keyword Matching
# ---------------------------------------------------------------------------
PHRASE_WORD_TOLERANCE = 0.15   # fraction of word length
PHRASE_MATCH_RATIO = 0.70
WORD_TOLERANCE = 0.20
MIN_TOKEN_LENGTH = 3

# ---------------------------------------------------------------------------
# Segmentation
# ---------------------------------------------------------------------------
SEGMENT_MIN_LENGTH = 20
SEGMENT_MAX_LENGTH = 500
SEGMENT_MIN_SCORE = 0.2
SEGMENT_OVERLAP_RATIO = 0.70
SEGMENT_TOP_N = 8
SEGMENT_MAX_WINDOW = 3
SEGMENT_MAX_SENTENCES = 400
SEGMENT_MAX_CANDIDATES = 3000

# ---------------------------------------------------------------------------
# Detection (phase 1)
# ---------------------------------------------------------------------------
DETECTION_MAX_LENGTH = 1000
VALIDATION_BONUS = 0.2
VALIDATED_THRESHOLD = 0.4
UNVALIDATED_PENALTY = 0.7
UNVALIDATED_THRESHOLD = 0.3

# ---------------------------------------------------------------------------
# Evaluation (phase 2)
# ---------------------------------------------------------------------------
RULE_TEXT_WORDS = 10
RULE_TEXT_MIN_WORD = 4
RULE_TEXT_BONUS = 0.3
SEVERITY_BONUS = 0.1
EVALUATION_THRESHOLD = 0.25
FALLBACK_CONFIDENCE = 0.4
KEYWORDLESS_CONFIDENCE = 0.2

PERSPECTIVE_WEIGHTS = {
    "receiving": {"preferred": 1.2, "fallback": 1.0, "unacceptable": 0.8},
    "disclosing": {"preferred": 1.2, "fallback": 1.0, "unacceptable": 1.1},
    "mutual": {"preferred": 1.1, "fallback": 1.0, "unacceptable": 0.9},
}
FALLBACK_ORDER = {
    "receiving": ("preferred", "fallback", "unacceptable"),
    "disclosing": ("unacceptable", "fallback", "preferred"),
    "mutual": ("fallback", "preferred", "unacceptable"),
}

# ---------------------------------------------------------------------------
# Aggregation & Reporting
# ---------------------------------------------------------------------------
FOUND_WEIGHT = 0.5
CONFIDENCE_WEIGHT = 0.3
RISK_WEIGHT = 0.2
TIER_RISK = {"unacceptable": 0.3, "fallback": 0.1, "preferred": 0.0}
HIGH_RISK_BELOW = 0.3
MEDIUM_RISK_BELOW = 0.6
LOW_CONFIDENCE_BELOW = 0.5


@dataclass(frozen=True)
class SegmentationPolicy:
    min_length: int = SEGMENT_MIN_LENGTH
    max_length: int = SEGMENT_MAX_LENGTH
    min_score: float = SEGMENT_MIN_SCORE
    overlap_ratio: float = SEGMENT_OVERLAP_RATIO
    top_n: int = SEGMENT_TOP_N
    max_window: int = SEGMENT_MAX_WINDOW
    max_sentences: int = SEGMENT_MAX_SENTENCES
    max_candidates: int = SEGMENT_MAX_CANDIDATES


@dataclass(frozen=True)
class DetectionPolicy:
    max_length: int = DETECTION_MAX_LENGTH
    validation_bonus: float = VALIDATION_BONUS
    validated_threshold: float = VALIDATED_THRESHOLD
    unvalidated_penalty: float = UNVALIDATED_PENALTY
    unvalidated_threshold: float = UNVALIDATED_THRESHOLD


@dataclass(frozen=True)
class EvaluationPolicy:
    perspective_weights: dict = field(default_factory=lambda: {
        p: dict(w) for p, w in PERSPECTIVE_WEIGHTS.items()
    })
    fallback_order: dict = field(default_factory=lambda: dict(FALLBACK_ORDER))
    rule_text_words: int = RULE_TEXT_WORDS
    rule_text_min_word: int = RULE_TEXT_MIN_WORD
    rule_text_bonus: float = RULE_TEXT_BONUS
    severity_bonus: float = SEVERITY_BONUS
    threshold: float = EVALUATION_THRESHOLD
    fallback_confidence: float = FALLBACK_CONFIDENCE
    keywordless_confidence: float = KEYWORDLESS_CONFIDENCE

    def weight(self, perspective: str, rule_type: str) -> float:
        return self.perspective_weights.get(perspective, {}).get(rule_type, 1.0)


@dataclass(frozen=True)
class ScoringPolicy:
    found_weight: float = FOUND_WEIGHT
    confidence_weight: float = CONFIDENCE_WEIGHT
    risk_weight: float = RISK_WEIGHT
    tier_risk: dict = field(default_factory=lambda: dict(TIER_RISK))
    high_risk_below: float = HIGH_RISK_BELOW
    medium_risk_below: float = MEDIUM_RISK_BELOW
    low_confidence_below: float = LOW_CONFIDENCE_BELOW


@dataclass(frozen=True)
class EnginePolicy:
    segmentation: SegmentationPolicy = field(default_factory=SegmentationPolicy)
    detection: DetectionPolicy = field(default_factory=DetectionPolicy)
    evaluation: EvaluationPolicy = field(default_factory=EvaluationPolicy)
    scoring: ScoringPolicy = field(default_factory=ScoringPolicy)


