"""
=====================================================================
STAGE-2a : ESTABLISHED FORM VALIDATION
=====================================================================

PURPOSE
-------
Decide whether a work program follows the established template:
every required section must be present and non-empty.

INPUTS
------
- Extracted section content (title -> text) of ONE work program
- Parser diagnostics for sections that could not be located

OUTPUT
------
- Ordered section numbers that violate the form
  (missing sections first, then empty sections)
- The report cell text: "3.1.3, 3.1.4" (never a trailing ", ")

NON-GOALS
---------
- No content/value-fund checks (Stage-2b)
- No document parsing
- No frequency bookkeeping (owned by the analysis run)

PARSER CONTRACT
---------------
Diagnostics MUST embed the missing section number in single quotes:
    Section '3.1.3', expected but not found

=====================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple
import re

from qcreport.models import ExtractedContent, ParseDiagnostic

SEPARATOR = ", "


# ---------------------------
# Regex + Normalization
# ---------------------------

MISSING_SECTION_RE = re.compile(r"'([0-9.]+)',?.*")
EMPTY_SECTION_RE = re.compile(r"^([0-9.]+).*")


def normalize_section_number(number: str) -> str:
    return number[:-1] if number.endswith(".") else number


def format_sequence(parts: Iterable[str]) -> str:
    return SEPARATOR.join(parts)


# ---------------------------
# Extractors
# ---------------------------

def missing_section_number(diagnostic: ParseDiagnostic) -> Optional[str]:
    m = MISSING_SECTION_RE.search(diagnostic)
    return normalize_section_number(m.group(1)) if m else None


def empty_section_number(title: str) -> Optional[str]:
    m = EMPTY_SECTION_RE.match(title)
    return normalize_section_number(m.group(1)) if m else None


# ---------------------------
# Validator
# ---------------------------

@dataclass(frozen=True)
class FormCheckResult:
    missing: Tuple[str, ...]
    empty: Tuple[str, ...]

    @property
    def identifiers(self) -> Tuple[str, ...]:
        return self.missing + self.empty

    @property
    def mismatch(self) -> str:
        return format_sequence(self.identifiers)

    @property
    def conforms(self) -> bool:
        return not self.identifiers


def check_form(content: ExtractedContent, diagnostics: Sequence[ParseDiagnostic]) -> FormCheckResult:
    missing = []
    for diagnostic in diagnostics:
        number = missing_section_number(diagnostic)
        if number:
            missing.append(number)

    empty = []
    for title, text in content.items():
        if text != "":
            continue
        number = empty_section_number(title)
        if number:
            empty.append(number)

    return FormCheckResult(missing=tuple(missing), empty=tuple(empty))
