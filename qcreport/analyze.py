"""
PIPELINE STAGE: 3  (One curriculum / one work program folder)

Purpose:
- Select the disciplines taught in the course under review
- Match each discipline to exactly one work program in the folder
- Run form (Stage-2a) and value fund (Stage-2b) validation on it
- Record every discipline either as an outcome or as ignored, with a reason

ARCHITECTURAL CONSTRAINTS:
- This module MUST NOT parse documents itself (parser is injected)
- A failure for one discipline MUST NOT abort the others
- Counters and the frequency table change ONLY on the successful path
- Every selected discipline ends in exactly one terminal state:
    outcome | not_found | two_or_more_matches | parsing_failed
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple
import logging

from qcreport.locate import locate
from qcreport.models import (
    AnalysisOutcome,
    Curriculum,
    Discipline,
    ExtractedContent,
    IgnoredDiscipline,
    IgnoreReason,
    ParseDiagnostic,
    ParsingFailed,
)
from qcreport.paths import list_candidates
from qcreport.period import current_course, select_disciplines
from qcreport.validate_form import check_form
from qcreport.validate_value_fund import DEFAULT_POLICY, ValueFundPolicy, check_value_fund

logger = logging.getLogger(__name__)

WorkProgramParser = Callable[[Path], Tuple[ExtractedContent, Sequence[ParseDiagnostic]]]


def empty_ignored() -> Dict[IgnoreReason, List[IgnoredDiscipline]]:
    return {reason: [] for reason in IgnoreReason}


@dataclass
class AnalysisRun:
    curriculum: Curriculum
    folder: Path
    course: int
    expected_count: int = 0
    analyzed_count: int = 0
    incorrect_form_count: int = 0
    incorrect_value_fund_count: int = 0
    problem_frequency: Counter = field(default_factory=Counter)
    outcomes: List[AnalysisOutcome] = field(default_factory=list)
    ignored: Dict[IgnoreReason, List[IgnoredDiscipline]] = field(default_factory=empty_ignored)

    @property
    def ignored_count(self) -> int:
        return sum(len(entries) for entries in self.ignored.values())

    def ignore(self, entry: IgnoredDiscipline) -> None:
        self.ignored[entry.reason].append(entry)
        logger.warning(
            "%s: %s ignored (%s): %s",
            self.curriculum.code,
            entry.discipline.code,
            entry.reason.value,
            entry.describe(),
        )


def analyze_discipline(
    run: AnalysisRun,
    discipline: Discipline,
    candidates: Sequence[Path],
    parse: WorkProgramParser,
    policy: ValueFundPolicy,
) -> None:
    located = locate(discipline, candidates)
    if not isinstance(located, Path):
        run.ignore(located)
        return

    logger.debug("%s: %s -> %s", run.curriculum.code, discipline.code, located)

    try:
        content, diagnostics = parse(located)
    except Exception as e:
        run.ignore(ParsingFailed(discipline, located, str(e)))
        return

    form = check_form(content, diagnostics)
    value_fund = check_value_fund(content, policy)

    if not form.conforms:
        run.incorrect_form_count += 1
    if not value_fund.conforms:
        run.incorrect_value_fund_count += 1

    run.problem_frequency.update(form.identifiers)
    run.problem_frequency.update(value_fund.clauses)

    run.outcomes.append(AnalysisOutcome(discipline, form.mismatch, value_fund.mismatch))
    run.analyzed_count += 1


def analyze_programme(
    curriculum: Curriculum,
    folder: Path,
    parse: WorkProgramParser,
    *,
    today: Optional[date] = None,
    policy: ValueFundPolicy = DEFAULT_POLICY,
) -> AnalysisRun:
    """
    Analyze the work programs of one curriculum for the course under review.

    Configuration errors (malformed year code, missing folder) are raised
    before any discipline is processed.
    """
    course = current_course(curriculum.year_code, today)
    candidates = list_candidates(folder)
    disciplines = select_disciplines(curriculum, course)

    run = AnalysisRun(curriculum=curriculum, folder=Path(folder), course=course)
    run.expected_count = len(disciplines)

    for discipline in disciplines:
        analyze_discipline(run, discipline, candidates, parse, policy)

    logger.info(
        "%s (course %d): analyzed %d/%d, form mismatches %d, value fund mismatches %d",
        curriculum.code,
        course,
        run.analyzed_count,
        run.expected_count,
        run.incorrect_form_count,
        run.incorrect_value_fund_count,
    )
    return run
