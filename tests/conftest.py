from dataclasses import replace

import pytest

from nda_review.config import RULEBOOK_PATH
from nda_review.models import Clause, Rule
from nda_review.rulebook import FileRulebook, InMemoryRulebook

DEFINITION_TEXT = "Confidential Information shall mean all proprietary information."
PERPETUAL_TEXT = (
    "The confidentiality obligations under this Agreement shall continue "
    "in perpetuity following termination."
)
THREE_YEAR_TEXT = (
    "The duties of the Receiving Party shall terminate 3 years from the date of "
    "disclosure, with automatic return and destruction of all information at that "
    "clear endpoint."
)

SAMPLE_NDA = """MUTUAL NON-DISCLOSURE AGREEMENT

1. DEFINITIONS
"Confidential Information" means all business information disclosed by either party for evaluation purposes, including financial data and business plans, excluding information that is publicly available.

2. TERM
The obligations of the parties shall survive for a period of five (5) years from the date of disclosure.

3. GOVERNING LAW
This Agreement shall be governed by the laws of Singapore, and any disputes shall be resolved by international arbitration in Singapore.
"""

DEFINITION = Clause(id="c1", name="Definition of Confidential Information", display_order=1)
DURATION = Clause(id="c2", name="Duration of Confidentiality Obligations", display_order=2)
GOVERNING = Clause(id="c3", name="Governing Law and Jurisdictions", display_order=3)


def make_rule(rule_id, rule_type, keywords=(), clause_id="c1", perspective="receiving",
              severity=1, rule_text="", guidance=""):
    return Rule(
        id=rule_id,
        clause_id=clause_id,
        rule_type=rule_type,
        party_perspective=perspective,
        keywords=tuple(keywords),
        severity=severity,
        rule_text=rule_text,
        guidance_text=guidance,
    )


@pytest.fixture
def default_rulebook():
    return FileRulebook(RULEBOOK_PATH)


@pytest.fixture
def receiving_duration_rules(default_rulebook):
    """The shipped receiving-party rules for the duration clause, re-keyed to clause c2."""
    rules = [r for r in default_rulebook.get_rules("receiving") if r.clause_id == "nda_2"]
    return [replace(r, clause_id="c2") for r in rules]


@pytest.fixture
def definition_rulebook():
    return InMemoryRulebook(
        [DEFINITION],
        [make_rule("r1", "preferred", ["confidential information", "shall mean"], severity=3)],
    )
