"""
PIPELINE STAGE: 4  (Combine independent analysis runs)

Purpose:
- Order runs by course for presentation
- Sum the four counters over all runs
- Merge the per-run problem frequency tables
- Keep each run's ignored disciplines attributed to its curriculum and folder

Pure summation over finished runs; there is no failure mode here.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

from qcreport.analyze import AnalysisRun
from qcreport.models import IgnoredDiscipline, IgnoreReason

# one analysis run: (curriculum code, work program folder)
RunKey = Tuple[str, Path]


def identifier_order(identifier: str) -> Tuple[Tuple[int, int, str], ...]:
    # "3.1.9" < "3.1.10" < "3.1.a"
    return tuple(
        (0, int(part), "") if part.isdecimal() else (1, 0, part)
        for part in identifier.split(".")
    )


def merge_frequencies(tables: Iterable[Counter]) -> Counter:
    merged: Counter = Counter()
    for table in tables:
        merged.update(table)
    return merged


@dataclass
class CombinedReport:
    runs: List[AnalysisRun]
    expected_count: int = 0
    analyzed_count: int = 0
    incorrect_form_count: int = 0
    incorrect_value_fund_count: int = 0
    problem_frequency: Counter = field(default_factory=Counter)

    @property
    def ignored_by_curriculum(self) -> Dict[RunKey, Dict[IgnoreReason, List[IgnoredDiscipline]]]:
        """
        Keyed by run, not by curriculum code alone: the same curriculum
        may be checked against several folders in one invocation.
        """
        return {(run.curriculum.code, run.folder): run.ignored for run in self.runs}

    @property
    def ignored_count(self) -> int:
        return sum(run.ignored_count for run in self.runs)

    def frequency_ranking(self) -> List[Tuple[str, int]]:
        return sorted(
            self.problem_frequency.items(),
            key=lambda item: (-item[1], identifier_order(item[0])),
        )


def aggregate(runs: Iterable[AnalysisRun]) -> CombinedReport:
    ordered = sorted(runs, key=lambda r: r.course)

    return CombinedReport(
        runs=ordered,
        expected_count=sum(r.expected_count for r in ordered),
        analyzed_count=sum(r.analyzed_count for r in ordered),
        incorrect_form_count=sum(r.incorrect_form_count for r in ordered),
        incorrect_value_fund_count=sum(r.incorrect_value_fund_count for r in ordered),
        problem_frequency=merge_frequencies(r.problem_frequency for r in ordered),
    )
