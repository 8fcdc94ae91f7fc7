import json
from collections import Counter

import openpyxl
import pytest

from nda_review.config import PERSPECTIVES, RULE_TYPES
from nda_review.models import Clause
from nda_review.rulebook import (
    CatalogFetchError, FileRulebook, InMemoryRulebook, get_rule, load_rulebook,
    rule_from_dict, rules_for_clause,
)
from conftest import DEFINITION, DURATION, make_rule


def test_default_rulebook_contents(default_rulebook):
    clauses = default_rulebook.get_active_clauses()
    assert [c.name for c in clauses] == [
        "Definition of Confidential Information",
        "Duration of Confidentiality Obligations",
        "Governing Law and Jurisdictions",
    ]
    for perspective in PERSPECTIVES:
        rules = default_rulebook.get_rules(perspective)
        assert len(rules) == 9
        assert all(r.party_perspective == perspective for r in rules)
        tiers = Counter((r.clause_id, r.rule_type) for r in rules)
        assert set(tiers.values()) == {1}
        assert {t for _, t in tiers} == set(RULE_TYPES)
        assert all(r.keywords and 1 <= r.severity <= 5 for r in rules)


def test_load_rulebook_returns_all_rules(default_rulebook):
    clauses, rules = load_rulebook(default_rulebook.path)
    assert len(clauses) == 3
    assert len(rules) == 27


def test_legacy_rule_types_are_normalized():
    rule = rule_from_dict({
        "id": "x", "clause_id": "c1", "rule_type": "starting_position",
        "party_perspective": "Receiving", "keywords": "a; b, c", "severity": 2,
    })
    assert rule.rule_type == "preferred"
    assert rule.party_perspective == "receiving"
    assert rule.keywords == ("a", "b", "c")
    assert rule_from_dict({**rule.__dict__, "rule_type": "not_acceptable"}).rule_type == "unacceptable"


def test_invalid_records_are_rejected():
    with pytest.raises(ValueError):
        rule_from_dict({"id": "x", "clause_id": "c", "rule_type": "preferred",
                        "party_perspective": "receiving", "severity": 9})
    with pytest.raises(ValueError):
        rule_from_dict({"id": "x", "clause_id": "c", "rule_type": "maybe",
                        "party_perspective": "receiving"})


def test_missing_file_is_a_fetch_error(tmp_path):
    with pytest.raises(CatalogFetchError):
        FileRulebook(tmp_path / "nope.json").get_active_clauses()


def test_malformed_file_is_a_fetch_error(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json")
    with pytest.raises(CatalogFetchError) as excinfo:
        FileRulebook(path).get_rules("receiving")
    assert excinfo.value.__cause__ is not None


def test_bad_severity_in_file_is_a_fetch_error(tmp_path):
    path = tmp_path / "rb.json"
    path.write_text(json.dumps({
        "clauses": [{"id": "c1", "name": "Definition"}],
        "rules": [{"id": "r", "clause_id": "c1", "rule_type": "preferred",
                   "party_perspective": "receiving", "severity": 0}],
    }))
    with pytest.raises(CatalogFetchError):
        FileRulebook(path).get_rules("receiving")


def test_inactive_clauses_are_hidden():
    inactive = Clause(id="c9", name="Old clause", display_order=0, is_active=False)
    book = InMemoryRulebook([DURATION, inactive, DEFINITION], [])
    assert [c.id for c in book.get_active_clauses()] == ["c1", "c2"]


def test_rules_for_clause_orders_by_severity():
    rules = [
        make_rule("a", "preferred", ["x"], severity=2),
        make_rule("b", "unacceptable", ["x"], severity=5),
        make_rule("c", "fallback", ["x"], severity=3, perspective="mutual"),
        make_rule("d", "fallback", ["x"], clause_id="c2", severity=4),
    ]
    assert [r.id for r in rules_for_clause(rules, "c1")] == ["b", "c", "a"]
    assert [r.id for r in rules_for_clause(rules, "c1", "receiving")] == ["b", "a"]
    assert get_rule(rules, "d").clause_id == "c2"
    assert get_rule(rules, "zzz") is None


def test_xlsx_rulebook(tmp_path):
    path = tmp_path / "playbook.xlsx"
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Clauses"
    ws.append(["Clause ID", "Clause Name", "Category", "Display Order", "Active"])
    ws.append(["c1", "Definition of Confidential Information", "core", 1, "yes"])
    ws.append(["c2", "Duration of Confidentiality Obligations", "core", 2, "no"])
    rules_ws = wb.create_sheet("Rules")
    rules_ws.append(["Rule ID", "Clause", "Rule Type", "Party Perspective", "Keywords",
                     "Severity", "Rule Text", "Guidance", "Example Language"])
    rules_ws.append(["r1", "Definition of Confidential Information", "Starting Position", "receiving",
                     "specifically marked; proprietary", 3, "Marked information only", "Keep it narrow", ""])
    rules_ws.append(["r2", "c1", "not_acceptable", "receiving", "all information\nno exceptions", 5, "", "", ""])
    wb.save(path)

    book = FileRulebook(path)
    assert [c.name for c in book.get_active_clauses()] == ["Definition of Confidential Information"]
    rules = book.get_rules("receiving")
    assert [(r.id, r.clause_id, r.rule_type) for r in rules] == [
        ("r1", "c1", "preferred"),
        ("r2", "c1", "unacceptable"),
    ]
    assert rules[0].keywords == ("specifically marked", "proprietary")
    assert rules[1].keywords == ("all information", "no exceptions")
    assert rules[0].guidance_text == "Keep it narrow"


@pytest.mark.parametrize("severity", [0, -1, 6, "0"])
def test_out_of_range_severity_is_rejected(severity):
    with pytest.raises(ValueError):
        rule_from_dict({"id": "x", "clause_id": "c", "rule_type": "preferred",
                        "party_perspective": "receiving", "severity": severity})


@pytest.mark.parametrize("severity", [None, ""])
def test_blank_severity_defaults_to_three(severity):
    rule = rule_from_dict({"id": "x", "clause_id": "c", "rule_type": "preferred",
                           "party_perspective": "receiving", "severity": severity})
    assert rule.severity == 3
