"""
=====================================================================
ACADEMIC PERIOD SELECTION
=====================================================================

PURPOSE
-------
Decide which year of study ("course") is under review and which
curriculum disciplines are taught in that year.

POLICY
------
- Curriculum year code "YY" means the intake started in autumn 20YY
- The academic year rolls over in July:
    July..December  -> course = year - start + 1
    January..June   -> course = year - start
- Course N is taught in semesters 2N-1 and 2N

NON-GOALS
---------
- No other academic calendars
- No guessing for malformed year codes (fatal)

=====================================================================
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional, Tuple

from qcreport.models import Curriculum, Discipline
from qcreport.paths import ConfigurationError

ROLLOVER_MONTH = 7


def start_year(year_code: str) -> int:
    code = year_code.strip()
    if len(code) != 2 or not code.isdigit():
        raise ConfigurationError(f"Malformed curriculum year code '{year_code}'")
    return 2000 + int(code)


def current_course(year_code: str, today: Optional[date] = None) -> int:
    today = today or date.today()
    course = today.year - start_year(year_code)
    if today.month >= ROLLOVER_MONTH:
        course += 1

    if course < 1:
        raise ConfigurationError(
            f"Curriculum with year code '{year_code}' has no students on {today.isoformat()}"
        )
    return course


def course_semesters(course: int) -> Tuple[int, int]:
    return 2 * course - 1, 2 * course


def select_disciplines(curriculum: Curriculum, course: int) -> List[Discipline]:
    semesters = set(course_semesters(course))
    return [
        d for d in curriculum.disciplines
        if semesters & set(d.implementation_periods)
    ]
