"""
Work program lookup.

A candidate belongs to a discipline when the discipline code occurs in
its path as a literal substring. Codes are unique by convention, so more
than one hit is reported rather than resolved.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence, Union

from qcreport.models import Discipline, NotFound, TwoOrMoreMatches


def find_matches(code: str, candidates: Sequence[Path]) -> List[Path]:
    return [p for p in candidates if code in str(p)]


def locate(discipline: Discipline, candidates: Sequence[Path]) -> Union[Path, NotFound, TwoOrMoreMatches]:
    matches = find_matches(discipline.code, candidates)

    if not matches:
        return NotFound(discipline)

    if len(matches) > 1:
        return TwoOrMoreMatches(discipline, tuple(matches))

    return matches[0]
