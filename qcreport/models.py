"""
Shared data contracts for the work program quality-control pipeline.

Curriculum-side records are immutable and supplied by the curriculum
provider; per-discipline results are created once by an analysis run and
never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import FrozenSet, Mapping, Tuple, Union

# Section title (with leading number, e.g. "3.1.4. ...") -> section text.
ExtractedContent = Mapping[str, str]

# Parser message for a section that could not be located at all. The expected
# section number is embedded in single quotes: "Section '3.1.3', expected but not found".
ParseDiagnostic = str


# ---------------------------
# Curriculum
# ---------------------------

@dataclass(frozen=True)
class Discipline:
    code: str
    display_name: str
    implementation_periods: FrozenSet[int]

    def describe(self) -> str:
        return f"{self.code} {self.display_name}"


@dataclass(frozen=True)
class Curriculum:
    code: str                           # e.g. "21.5130.2021"
    programme_id: str
    year_code: str                      # two digits, start year 20YY
    disciplines: Tuple[Discipline, ...]


# ---------------------------
# Per-discipline results
# ---------------------------

@dataclass(frozen=True)
class AnalysisOutcome:
    discipline: Discipline
    form_mismatch: str          # "3.1.3, 3.1.4" or ""
    value_fund_mismatch: str    # "3.2.1, 3.2.2, 3.2.4" or ""


class IgnoreReason(Enum):
    NOT_FOUND = "not_found"
    TWO_OR_MORE_MATCHES = "two_or_more_matches"
    PARSING_FAILED = "parsing_failed"


@dataclass(frozen=True)
class NotFound:
    discipline: Discipline

    reason = IgnoreReason.NOT_FOUND

    def describe(self) -> str:
        return self.discipline.describe()


@dataclass(frozen=True)
class TwoOrMoreMatches:
    discipline: Discipline
    paths: Tuple[Path, ...]

    reason = IgnoreReason.TWO_OR_MORE_MATCHES

    def describe(self) -> str:
        return " ".join(str(p) for p in self.paths)


@dataclass(frozen=True)
class ParsingFailed:
    discipline: Discipline
    path: Path
    message: str

    reason = IgnoreReason.PARSING_FAILED

    def describe(self) -> str:
        return str(self.path)


IgnoredDiscipline = Union[NotFound, TwoOrMoreMatches, ParsingFailed]
