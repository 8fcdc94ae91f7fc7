from rich.console import Console

from nda_review.models import AnalysisResult, Match, Missing
from nda_review.output import format_result, print_rich_summary


def _result():
    matches = (
        Match(
            clause_id="c2", clause_name="Duration", rule_id="u", rule_type="unacceptable",
            matched_text="shall continue in perpetuity", matched_keywords=("in perpetuity",),
            confidence_score=0.61, risk_level=5,
            recommended_action="Action required - negotiate better terms for the receiving party",
            guidance="Unacceptable - creates unlimited long-term liability",
        ),
        Match(
            clause_id="c1", clause_name="Definition", rule_id="p", rule_type="fallback",
            matched_text="means", matched_keywords=("means",),
            confidence_score=0.45, risk_level=3,
            recommended_action="Review recommended - clause may need adjustment for the receiving party",
            guidance="Compromise position",
        ),
    )
    missing = (Missing("c3", "Governing Law", "Add Governing Law clause to strengthen the receiving party position"),)
    return AnalysisResult(
        matches=matches,
        missing=("Governing Law",),
        overall_score=0.55,
        party_perspective="receiving",
        missing_details=missing,
    )


def test_format_result_summary_and_label():
    report = format_result(_result())
    assert report["risk_level"] == "medium"
    assert report["summary"] == (
        "Analysis complete for receiving party perspective. "
        "Found 2 clause matches with 55% overall confidence. "
        "1 clauses may be missing."
    )


def test_format_result_recommendations():
    report = format_result(_result())
    assert report["recommendations"] == [
        "Consider adding missing clauses: Governing Law",
        "Review low-confidence matches for accuracy",
        "Address 1 unacceptable clause(s) immediately",
    ]


def test_format_result_priorities_and_next_steps():
    report = format_result(_result())
    assert report["high_priority"] == [
        "Duration: Action required - negotiate better terms for the receiving party",
        "Governing Law: Add Governing Law clause to strengthen the receiving party position",
    ]
    assert report["medium_priority"] == [
        "Definition: Review recommended - clause may need adjustment for the receiving party",
    ]
    assert report["suggested_next_steps"] == [
        "Unacceptable - creates unlimited long-term liability",
        "Compromise position",
    ]


def test_clean_result_has_no_recommendations():
    result = AnalysisResult(matches=(), missing=(), overall_score=0.2, party_perspective="mutual")
    report = format_result(result)
    assert report["risk_level"] == "high"
    assert report["recommendations"] == []
    assert report["high_priority"] == []


def test_print_rich_summary_renders_table():
    console = Console(record=True, width=160)
    result = _result()
    print_rich_summary(result, format_result(result), console=console)
    text = console.export_text()
    assert "NDA Review Summary" in text
    assert "Duration" in text
    assert "Governing Law" in text
    assert "Missing" in text
