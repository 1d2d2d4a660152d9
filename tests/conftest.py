"""
Shared fixtures.

Discipline codes are upper-case on purpose: pytest derives tmp_path names
from (lower-case) test names, so a code can only match the file names a
test creates.
"""

from datetime import date
from pathlib import Path
from typing import Dict, Sequence, Tuple, Union

import pytest

from qcreport.models import Curriculum, Discipline
from qcreport.validate_value_fund import (
    ASSESSMENT_MATERIALS_SECTION,
    ASSESSMENT_METHODOLOGY_SECTION,
    LEARNING_OUTCOMES_SECTION,
)

# Course 1 for a curriculum with year code "21".
FIRST_COURSE_DAY = date(2021, 10, 1)


def make_discipline(code: str, *semesters: int, name: str = "") -> Discipline:
    return Discipline(
        code=code,
        display_name=name or f"Discipline {code}",
        implementation_periods=frozenset(semesters),
    )


def make_curriculum(*disciplines: Discipline, code: str = "21.5130.2021") -> Curriculum:
    return Curriculum(
        code=code,
        programme_id="02.03.03",
        year_code=code[:2],
        disciplines=tuple(disciplines),
    )


class FakeParser:
    """
    Maps file names to parse results; an Exception value is raised instead.
    Unknown files parse as a fully compliant work program.
    """

    def __init__(self, results: Dict[str, Union[Exception, Tuple[dict, Sequence[str]]]] = None):
        self.results = results or {}
        self.calls = []

    def __call__(self, path: Path):
        self.calls.append(path)
        result = self.results.get(path.name)
        if isinstance(result, Exception):
            raise result
        if result is None:
            return compliant_content(), []
        return result


def compliant_content() -> dict:
    return {
        LEARNING_OUTCOMES_SECTION: "УК-1, ОПК-2",
        ASSESSMENT_METHODOLOGY_SECTION: "Oral examination, two tests.",
        ASSESSMENT_MATERIALS_SECTION: "Question bank.",
    }


@pytest.fixture
def work_program_folder(tmp_path):
    folder = tmp_path / "rpd"
    folder.mkdir()

    def create(*names: str) -> Path:
        for name in names:
            (folder / name).write_text("", encoding="utf-8")
        return folder

    return create
