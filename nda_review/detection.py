"""Phase 1: decide whether a clause type is present in a document at all."""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from .config import CLAUSE_TYPES_PATH, DetectionPolicy, SegmentationPolicy
from .models import Detection
from .segmenter import segment_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClauseTypeSpec:
    name: str
    vocabulary: tuple[str, ...]
    validation: re.Pattern
    aliases: tuple[str, ...] = ()
    name_hints: tuple[str, ...] = ()

    def validates(self, text: str) -> bool:
        return bool(self.validation.search(text))


def _slug(name: str) -> str:
    return re.sub(r"[\s\-]+", "_", name.strip().lower())


@dataclass
class ClauseTypeRegistry:
    """Clause type -> detection vocabulary and validation pattern."""

    types: dict[str, ClauseTypeSpec] = field(default_factory=dict)

    @classmethod
    def load(cls, path: Path) -> "ClauseTypeRegistry":
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        registry = cls()
        for name, entry in data.get("clause_types", {}).items():
            registry.register(
                name,
                vocabulary=entry.get("vocabulary", []),
                validation=entry.get("validation", ""),
                aliases=entry.get("aliases", []),
                name_hints=entry.get("name_hints", []),
            )
        return registry

    def register(self, name, vocabulary, validation, aliases=(), name_hints=()) -> ClauseTypeSpec:
        pattern = validation if isinstance(validation, re.Pattern) else re.compile(validation or r"\S", re.IGNORECASE)
        spec = ClauseTypeSpec(
            name=name,
            vocabulary=tuple(vocabulary),
            validation=pattern,
            aliases=tuple(aliases),
            name_hints=tuple(h.lower() for h in name_hints),
        )
        self.types[name] = spec
        return spec

    def get(self, clause_type: str) -> ClauseTypeSpec | None:
        return self.types.get(clause_type)

    def __contains__(self, clause_type: str) -> bool:
        return clause_type in self.types

    def resolve(self, clause_name: str) -> str:
        """
        Map a catalog clause name to a clause type (alias, then hint, then slug).

        Clause titles lead with their subject ("Return of Confidential
        Information"), so the hint found earliest in the name wins, and the
        longer hint wins at the same position.
        """
        low = clause_name.strip().lower()
        for spec in self.types.values():
            if low == spec.name or any(low == a.lower() for a in spec.aliases):
                return spec.name
        best = None
        for spec in self.types.values():
            for hint in spec.name_hints:
                pos = low.find(hint)
                if pos >= 0 and (best is None or (pos, -len(hint)) < best[0]):
                    best = ((pos, -len(hint)), spec.name)
        if best is not None:
            return best[1]
        return _slug(clause_name)


_default_registry: ClauseTypeRegistry | None = None


def default_registry() -> ClauseTypeRegistry:
    global _default_registry
    if _default_registry is None:
        _default_registry = ClauseTypeRegistry.load(CLAUSE_TYPES_PATH)
    return _default_registry


def detect_clause(
    document: str,
    clause_type: str,
    registry: ClauseTypeRegistry | None = None,
    policy: DetectionPolicy | None = None,
    segmentation: SegmentationPolicy | None = None,
) -> Detection:
    """
    Look for the best instance of `clause_type` in `document`.

    Segments that pass the type's validation pattern get a confidence bonus.
    Without one, the top unvalidated segment is used at a penalty. Never
    raises: an unregistered type is reported as not detected.
    """
    registry = registry or default_registry()
    policy = policy or DetectionPolicy()

    spec = registry.get(clause_type)
    if spec is None:
        logger.warning("No detection vocabulary registered for clause type %r; treating as not detected", clause_type)
        return Detection(clause_type=clause_type, detected=False)

    segments = segment_text(document, spec.vocabulary, policy.max_length, segmentation)
    if not segments:
        return Detection(clause_type=clause_type, detected=False)

    validated = [s for s in segments if spec.validates(s.text)]
    if validated:
        best = validated[0]
        confidence = min(best.score + policy.validation_bonus, 1.0)
        return Detection(
            clause_type=clause_type,
            detected=confidence > policy.validated_threshold,
            best_text=best.text,
            confidence=confidence,
            span=best.span,
            validated=True,
        )

    best = segments[0]
    return Detection(
        clause_type=clause_type,
        detected=best.score > policy.unvalidated_threshold,
        best_text=best.text,
        confidence=best.score * policy.unvalidated_penalty,
        span=best.span,
        validated=False,
    )
