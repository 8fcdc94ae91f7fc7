"""Main orchestration: catalogs -> detect -> evaluate -> aggregate."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from .config import DEFAULT_PERSPECTIVE, MAX_WORKERS, RULEBOOK_PATH, EnginePolicy
from .detection import ClauseTypeRegistry, default_registry, detect_clause
from .fuzzy import keyword_overlap
from .matching import evaluate_rules
from .models import AnalysisResult, Clause, Match, Missing, Rule, normalize_perspective
from .rulebook import CatalogFetchError, FileRulebook, Rulebook, rules_for_clause
from .scoring import aggregate_score, clause_risk_level, recommended_action, sort_matches

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClauseTask:
    index: int
    clause: Clause
    clause_type: str
    rules: tuple[Rule, ...]


def fetch_catalogs(rulebook: Rulebook, perspective: str) -> tuple[list[Clause], list[Rule]]:
    """Read both catalogs concurrently. Any failure aborts the analysis."""
    with ThreadPoolExecutor(max_workers=2) as executor:
        clauses_future = executor.submit(rulebook.get_active_clauses)
        rules_future = executor.submit(rulebook.get_rules, perspective)
        try:
            return list(clauses_future.result()), list(rules_future.result())
        except CatalogFetchError:
            raise
        except Exception as e:
            raise CatalogFetchError(f"Catalog fetch failed: {e}") from e


def build_tasks(clauses: list[Clause], rules: list[Rule], registry: ClauseTypeRegistry) -> list[ClauseTask]:
    return [
        ClauseTask(
            index=i,
            clause=clause,
            clause_type=registry.resolve(clause.name),
            rules=tuple(r for r in rules if r.clause_id == clause.id),
        )
        for i, clause in enumerate(clauses)
    ]


def analyze_clause(
    document_text: str,
    task: ClauseTask,
    perspective: str,
    registry: ClauseTypeRegistry,
    policy: EnginePolicy,
) -> Match | Missing:
    clause = task.clause
    missing = Missing(
        clause_id=clause.id,
        clause_name=clause.name,
        recommended_action=recommended_action(None, 0.0, perspective, clause.name),
    )

    detection = detect_clause(document_text, task.clause_type, registry,
                              policy.detection, policy.segmentation)
    if not detection.detected:
        logger.debug("%s: not detected (confidence %.2f)", clause.name, detection.confidence)
        return missing

    evaluation = evaluate_rules(detection.best_text, list(task.rules), perspective, policy.evaluation)
    if evaluation is None:
        logger.debug("%s: detected but no %s rules to classify against", clause.name, perspective)
        return missing

    matched_keywords, _ = keyword_overlap(detection.best_text, evaluation.rule.keywords)
    return Match(
        clause_id=clause.id,
        clause_name=clause.name,
        rule_id=evaluation.rule.id,
        rule_type=evaluation.rule_type,
        matched_text=detection.best_text,
        matched_keywords=tuple(matched_keywords),
        confidence_score=evaluation.confidence,
        span=detection.span,
        risk_level=clause_risk_level(evaluation.rule_type, evaluation.confidence),
        recommended_action=recommended_action(evaluation.rule_type, evaluation.confidence, perspective),
        guidance=evaluation.rule.guidance_text,
    )


def analyze_document(
    document_text: str,
    party_perspective: str = DEFAULT_PERSPECTIVE,
    *,
    rulebook: Rulebook | None = None,
    policy: EnginePolicy | None = None,
    registry: ClauseTypeRegistry | None = None,
    max_workers: int | None = None,
    progress_callback=None,
) -> AnalysisResult:
    """
    Classify every active catalog clause in `document_text` for one party.

    Each clause ends up either matched (with its rule tier) or missing.
    Raises CatalogFetchError if either catalog cannot be read and
    ValueError for an unknown party perspective.
    """
    perspective = normalize_perspective(party_perspective)
    rulebook = rulebook or FileRulebook(RULEBOOK_PATH)
    policy = policy or EnginePolicy()
    registry = registry or default_registry()
    max_workers = max_workers or MAX_WORKERS

    def progress(step, total, msg):
        if progress_callback:
            progress_callback(step, total, msg)
        else:
            logger.info(msg)

    t0 = time.time()
    progress(1, 3, "Loading clause and rule catalogs...")
    clauses, rules = fetch_catalogs(rulebook, perspective)
    logger.info("Loaded %d clauses and %d %s rules", len(clauses), len(rules), perspective)

    progress(2, 3, f"Analyzing {len(clauses)} clauses...")
    tasks = build_tasks(clauses, rules, registry)

    def run(task: ClauseTask) -> Match | Missing:
        return analyze_clause(document_text, task, perspective, registry, policy)

    if max_workers > 1 and len(tasks) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            outcomes = list(executor.map(run, tasks))
    else:
        outcomes = [run(task) for task in tasks]

    progress(3, 3, "Scoring...")
    matches = [o for o in outcomes if isinstance(o, Match)]
    missing = [o for o in outcomes if isinstance(o, Missing)]
    overall = aggregate_score(matches, len(missing), len(clauses), policy.scoring)

    logger.info("Analysis finished in %.2fs: %d matched, %d missing, score %.2f",
                time.time() - t0, len(matches), len(missing), overall)
    return AnalysisResult(
        matches=tuple(sort_matches(matches)),
        missing=tuple(m.clause_name for m in missing),
        overall_score=overall,
        party_perspective=perspective,
        missing_details=tuple(missing),
    )


def rules_overview(rulebook: Rulebook, party_perspective: str) -> dict[str, list[Rule]]:
    """Clause name -> that clause's rules for one perspective, most severe first."""
    perspective = normalize_perspective(party_perspective)
    clauses, rules = fetch_catalogs(rulebook, perspective)
    return {c.name: rules_for_clause(rules, c.id, perspective) for c in clauses}
