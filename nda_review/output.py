"""Output generation: report dict, recommendations, rich terminal output."""

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import ScoringPolicy
from .models import AnalysisResult
from .scoring import clause_risk_level, risk_label


def build_recommendations(result: AnalysisResult, policy: ScoringPolicy) -> list[str]:
    recommendations = []
    if result.missing:
        recommendations.append(f"Consider adding missing clauses: {', '.join(result.missing)}")
    if any(m.confidence_score < policy.low_confidence_below for m in result.matches):
        recommendations.append("Review low-confidence matches for accuracy")
    unacceptable = sum(1 for m in result.matches if m.rule_type == "unacceptable")
    if unacceptable:
        recommendations.append(f"Address {unacceptable} unacceptable clause(s) immediately")
    return recommendations


def format_result(result: AnalysisResult, policy: ScoringPolicy | None = None) -> dict:
    """Risk label, prose summary, and prioritized recommendations for one analysis."""
    policy = policy or ScoringPolicy()
    summary = (
        f"Analysis complete for {result.party_perspective} party perspective. "
        f"Found {len(result.matches)} clause matches with "
        f"{round(result.overall_score * 100)}% overall confidence. "
        f"{len(result.missing)} clauses may be missing."
    )

    high, medium = [], []
    for m in result.matches:
        line = f"{m.clause_name}: {m.recommended_action}"
        if m.risk_level >= 4:
            high.append(line)
        elif m.risk_level == 3:
            medium.append(line)
    for miss in result.missing_details:
        high.append(f"{miss.clause_name}: {miss.recommended_action}")

    next_steps = []
    for m in result.matches:
        if m.guidance and m.guidance not in next_steps:
            next_steps.append(m.guidance)

    return {
        "risk_level": risk_label(result.overall_score, policy),
        "overall_score": result.overall_score,
        "summary": summary,
        "recommendations": build_recommendations(result, policy),
        "high_priority": high,
        "medium_priority": medium,
        "suggested_next_steps": next_steps,
    }


def print_rich_summary(result: AnalysisResult, report: dict, console: Console | None = None) -> None:
    console = console or Console()
    console.print()
    risk_style = {"high": "bold red", "medium": "bold yellow", "low": "bold green"}
    level = report["risk_level"]
    summary_text = (
        f"[bold]Perspective:[/bold] {result.party_perspective}  "
        f"[bold]Overall Score:[/bold] {result.overall_score:.2f}  "
        f"[bold]Risk:[/bold] [{risk_style[level]}]{level.upper()}[/]\n"
        f"[bold]Matched:[/bold] {len(result.matches)}  "
        f"[bold red]Missing:[/bold red] {len(result.missing)}\n"
        f"{report['summary']}"
    )
    console.print(Panel(summary_text, title="NDA Review Summary", border_style="blue", expand=False))

    table = Table(title="Clause Classification", box=box.ROUNDED, show_lines=True)
    table.add_column("Clause", style="bold", width=28)
    table.add_column("Tier", width=14)
    table.add_column("Confidence", width=10)
    table.add_column("Risk", width=6)
    table.add_column("Action", width=50)
    tier_style = {"unacceptable": "bold red", "fallback": "bold yellow", "preferred": "bold green"}
    for m in result.matches:
        table.add_row(
            m.clause_name,
            f"[{tier_style.get(m.rule_type, '')}]{m.rule_type.title()}[/]",
            f"{m.confidence_score * 100:.0f}%",
            str(m.risk_level),
            m.recommended_action,
        )
    for miss in result.missing_details:
        table.add_row(miss.clause_name, "[bold red]Missing[/]", "-", str(clause_risk_level(None)), miss.recommended_action)
    console.print(table)

    for heading, key in (("Recommendations", "recommendations"), ("High priority", "high_priority"),
                         ("Medium priority", "medium_priority")):
        if report[key]:
            console.print(f"\n[bold]{heading}:[/bold]")
            for line in report[key]:
                console.print(f"  - {line}")
    console.print()
