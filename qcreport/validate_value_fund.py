"""
=====================================================================
STAGE-2b : VALUE FUND (ASSESSMENT MATERIALS) VALIDATION
=====================================================================

PURPOSE
-------
Check that the assessment fund described by a work program satisfies
the institutional Regulation, and report the violated Regulation
clauses.

RULES (evaluated in this order)
-------------------------------
1. Learning outcomes section must reference competencies -> 3.2.1, 3.2.2
2. Assessment methodology (3.1.3) must be present and not blank -> 3.2.4
3. Assessment materials (3.1.4) must be present and not blank -> 3.2.3

POLICY
------
Section titles and clause numbers follow the Regulation text verbatim.
They are configuration, versioned by POLICY_VERSION, and are passed to
the checker explicitly. When the Regulation changes, add a new policy
instead of editing the checker.

NON-GOALS
---------
- No structural/form checks (Stage-2a)
- No pedagogical quality judgement

=====================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple
import re

from qcreport.models import ExtractedContent
from qcreport.validate_form import format_sequence


# =====================================================================
# POLICY VERSION
# =====================================================================

POLICY_VERSION = "SPbU-2021_v2"


# =====================================================================
# SECTION TITLES (VERBATIM FROM THE WORK PROGRAM TEMPLATE)
# =====================================================================

LEARNING_OUTCOMES_SECTION = "1.3. Перечень результатов обучения (learning outcomes)"

ASSESSMENT_METHODOLOGY_SECTION = (
    "3.1.3. Методика проведения текущего контроля "
    "успеваемости и промежуточной аттестации и критерии оценивания"
)

ASSESSMENT_MATERIALS_SECTION = (
    "3.1.4. Методические материалы для проведения текущего контроля успеваемости и промежуточной"
    " аттестации (контрольно-измерительные материалы, оценочные средства)"
)

# УК-1, ОПК-2, ПКП-3, UK-1, GPC-2 ...
COMPETENCE_REF_RE = re.compile(r"\b(?:УК|ОПК|ПК|UC|GPC|PC)[А-ЯA-Z]{0,2}-\d+\b")


# =====================================================================
# POLICY CONTRACTS
# =====================================================================

@dataclass(frozen=True)
class SectionRule:
    section_title: str
    clauses: Tuple[str, ...]


@dataclass(frozen=True)
class ValueFundPolicy:
    version: str
    competence_section: str
    competence_pattern: re.Pattern
    competence_clauses: Tuple[str, ...]
    section_rules: Tuple[SectionRule, ...]


DEFAULT_POLICY = ValueFundPolicy(
    version=POLICY_VERSION,
    competence_section=LEARNING_OUTCOMES_SECTION,
    competence_pattern=COMPETENCE_REF_RE,
    competence_clauses=("3.2.1", "3.2.2"),
    section_rules=(
        SectionRule(ASSESSMENT_METHODOLOGY_SECTION, ("3.2.4",)),
        SectionRule(ASSESSMENT_MATERIALS_SECTION, ("3.2.3",)),
    ),
)


# =====================================================================
# CHECKER
# =====================================================================

@dataclass(frozen=True)
class ValueFundCheckResult:
    clauses: Tuple[str, ...]

    @property
    def mismatch(self) -> str:
        return format_sequence(self.clauses)

    @property
    def conforms(self) -> bool:
        return not self.clauses


def has_competence_references(content: ExtractedContent, policy: ValueFundPolicy) -> bool:
    text = content.get(policy.competence_section)
    if text is None:
        return False
    return policy.competence_pattern.search(text) is not None


def is_blank(content: ExtractedContent, section_title: str) -> bool:
    text = content.get(section_title)
    return text is None or text.strip() == ""


def check_value_fund(content: ExtractedContent, policy: ValueFundPolicy = DEFAULT_POLICY) -> ValueFundCheckResult:
    clauses = []

    if not has_competence_references(content, policy):
        clauses.extend(policy.competence_clauses)

    for rule in policy.section_rules:
        if is_blank(content, rule.section_title):
            clauses.extend(rule.clauses)

    return ValueFundCheckResult(clauses=tuple(clauses))
