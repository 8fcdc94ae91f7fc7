"""Clause and rule catalogs: JSON / xlsx rulebooks and in-memory catalogs."""

import json
import re
from pathlib import Path
from typing import Protocol

import openpyxl

from .models import Clause, Rule, normalize_perspective, normalize_rule_type


class CatalogFetchError(RuntimeError):
    """A clause or rule catalog could not be read. Analysis cannot proceed."""


class Rulebook(Protocol):
    def get_active_clauses(self) -> list[Clause]: ...

    def get_rules(self, party_perspective: str) -> list[Rule]: ...


# ---------------------------------------------------------------------------
# Record parsing
# ---------------------------------------------------------------------------

_KEYWORD_SPLIT_RE = re.compile(r"[;,\n]")


def _parse_keywords(value) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        items = _KEYWORD_SPLIT_RE.split(value)
    else:
        items = [str(v) for v in value]
    return tuple(k.strip() for k in items if k and k.strip())


def _parse_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in ("false", "no", "0", "n")
    return bool(value) if value is not None else True


def clause_from_dict(data: dict) -> Clause:
    return Clause(
        id=str(data["id"]),
        name=str(data["name"]).strip(),
        category=str(data.get("category") or "core").strip().lower(),
        display_order=int(data.get("display_order") or 0),
        is_active=_parse_bool(data.get("is_active", True)),
    )


def rule_from_dict(data: dict) -> Rule:
    raw_severity = data.get("severity")
    severity = 3 if raw_severity in (None, "") else int(raw_severity)
    if not 1 <= severity <= 5:
        raise ValueError(f"Rule {data.get('id')}: severity must be 1-5 (got {severity})")
    return Rule(
        id=str(data["id"]),
        clause_id=str(data["clause_id"]),
        rule_type=normalize_rule_type(data["rule_type"]),
        party_perspective=normalize_perspective(data["party_perspective"]),
        keywords=_parse_keywords(data.get("keywords")),
        severity=severity,
        rule_text=str(data.get("rule_text") or ""),
        guidance_text=str(data.get("guidance_text") or data.get("guidance_notes") or ""),
        example_language=str(data.get("example_language") or ""),
    )


def active_in_order(clauses: list[Clause]) -> list[Clause]:
    return sorted((c for c in clauses if c.is_active), key=lambda c: c.display_order)


def get_rule(rules: list[Rule], rule_id: str) -> Rule | None:
    for rule in rules:
        if rule.id == rule_id:
            return rule
    return None


def rules_for_clause(rules: list[Rule], clause_id: str, party_perspective: str | None = None) -> list[Rule]:
    """Rules for one clause, most severe first."""
    selected = [
        r for r in rules
        if r.clause_id == clause_id
        and (party_perspective is None or r.party_perspective == party_perspective)
    ]
    return sorted(selected, key=lambda r: -r.severity)


# ---------------------------------------------------------------------------
# Catalog sources
# ---------------------------------------------------------------------------

class InMemoryRulebook:
    def __init__(self, clauses: list[Clause], rules: list[Rule]):
        self.clauses = list(clauses)
        self.rules = list(rules)

    def get_active_clauses(self) -> list[Clause]:
        return active_in_order(self.clauses)

    def get_rules(self, party_perspective: str) -> list[Rule]:
        return [r for r in self.rules if r.party_perspective == party_perspective]


class FileRulebook:
    """
    Rulebook backed by a JSON file ({"clauses": [...], "rules": [...]}) or an
    xlsx workbook with "Clauses" and "Rules" sheets. The file is read on every
    call; nothing is cached between analyses.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def _read(self) -> tuple[list[Clause], list[Rule]]:
        if not self.path.exists():
            raise CatalogFetchError(f"Rulebook not found: {self.path}")
        try:
            if self.path.suffix.lower() in (".xlsx", ".xlsm"):
                clause_rows, rule_rows = _read_workbook(self.path)
            else:
                data = json.loads(self.path.read_text(encoding="utf-8"))
                clause_rows, rule_rows = data["clauses"], data["rules"]
            clauses = [clause_from_dict(row) for row in clause_rows]
            rules = [rule_from_dict(row) for row in rule_rows]
        except CatalogFetchError:
            raise
        except Exception as e:
            raise CatalogFetchError(f"Could not read rulebook {self.path}: {e}") from e
        return clauses, rules

    def get_active_clauses(self) -> list[Clause]:
        clauses, _ = self._read()
        return active_in_order(clauses)

    def get_rules(self, party_perspective: str) -> list[Rule]:
        _, rules = self._read()
        return [r for r in rules if r.party_perspective == party_perspective]


def load_rulebook(path: Path | str) -> tuple[list[Clause], list[Rule]]:
    """Active clauses (display order) and every rule in the rulebook."""
    clauses, rules = FileRulebook(path)._read()
    return active_in_order(clauses), rules


# ---------------------------------------------------------------------------
# xlsx rulebooks
# ---------------------------------------------------------------------------

def _sheet_rows(ws) -> tuple[list[str], list[tuple]]:
    rows = list(ws.iter_rows(values_only=True))
    if not rows:
        return [], []
    header = [str(c).lower().strip() if c else "" for c in rows[0]]
    return header, [r for r in rows[1:] if any(v not in (None, "") for v in r)]


def _column_finder(header: list[str]):
    def find_col(*keywords):
        for kw in keywords:
            for i, h in enumerate(header):
                if kw in h:
                    return i
        return None
    return find_col


def _exact_col(header: list[str], name: str) -> int | None:
    return header.index(name) if name in header else None


def _cell(row: tuple, idx: int | None):
    if idx is None or idx >= len(row) or row[idx] is None:
        return None
    value = row[idx]
    return value.strip() if isinstance(value, str) else value


def _read_workbook(path: Path) -> tuple[list[dict], list[dict]]:
    wb = openpyxl.load_workbook(str(path), read_only=True, data_only=True)
    try:
        clause_ws = rule_ws = None
        for sheet_name in wb.sheetnames:
            name_lower = sheet_name.lower()
            if "rule" in name_lower:
                if rule_ws is None:
                    rule_ws = wb[sheet_name]
            elif "clause" in name_lower and clause_ws is None:
                clause_ws = wb[sheet_name]
        if clause_ws is None or rule_ws is None:
            raise CatalogFetchError(f"{path.name}: expected 'Clauses' and 'Rules' sheets, found {wb.sheetnames}")

        header, rows = _sheet_rows(clause_ws)
        find_col = _column_finder(header)
        col_id = find_col("clause id") if "clause id" in " ".join(header) else _exact_col(header, "id")
        col_name = find_col("name", "clause")
        col_cat = find_col("category")
        col_order = find_col("display order", "order")
        col_active = find_col("active")
        if col_name is None:
            raise CatalogFetchError(f"{path.name}: Clauses sheet has no name column")

        clauses = []
        names_to_id = {}
        for idx, row in enumerate(rows, 1):
            clause_id = str(_cell(row, col_id) or f"clause_{idx}")
            name = str(_cell(row, col_name) or "")
            names_to_id[name.lower()] = clause_id
            clauses.append({
                "id": clause_id,
                "name": name,
                "category": _cell(row, col_cat),
                "display_order": _cell(row, col_order) or idx,
                "is_active": _cell(row, col_active) if col_active is not None else True,
            })

        header, rows = _sheet_rows(rule_ws)
        find_col = _column_finder(header)
        col_id = find_col("rule id") if "rule id" in " ".join(header) else _exact_col(header, "id")
        col_clause = find_col("clause id", "clause")
        col_type = find_col("rule type", "type", "tier")
        col_persp = find_col("perspective", "party")
        col_kw = find_col("keyword")
        col_sev = find_col("severity")
        col_text = find_col("rule text", "text", "position")
        col_guide = find_col("guidance")
        col_example = find_col("example")
        if col_clause is None or col_type is None or col_persp is None:
            raise CatalogFetchError(f"{path.name}: Rules sheet needs clause, type and perspective columns")

        rules = []
        for idx, row in enumerate(rows, 1):
            clause_ref = str(_cell(row, col_clause) or "")
            rules.append({
                "id": str(_cell(row, col_id) or f"rule_{idx}"),
                "clause_id": names_to_id.get(clause_ref.lower(), clause_ref),
                "rule_type": _cell(row, col_type),
                "party_perspective": _cell(row, col_persp),
                "keywords": _cell(row, col_kw),
                "severity": _cell(row, col_sev),
                "rule_text": _cell(row, col_text),
                "guidance_text": _cell(row, col_guide),
                "example_language": _cell(row, col_example),
            })
    finally:
        wb.close()
    return clauses, rules
