"""
Curriculum provider.

Reads a curriculum listing:

    # 21.5130.2021
    Programme: 02.03.03
    - 002211 | Algorithms and Complexity | 3, 4
    - 002212 | Databases | 5

The heading is the curriculum code; its first two characters encode the
intake year. Each "- " line is one discipline: code, display name and the
semesters it is taught in. Order is preserved.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Set, Union

from qcreport.models import Curriculum, Discipline
from qcreport.paths import ConfigurationError, require_file

PROGRAMME_PREFIX = "programme:"


class CurriculumError(ConfigurationError):
    pass


def parse_semesters(raw: str, where: str) -> frozenset:
    semesters: Set[int] = set()
    for token in raw.replace(";", ",").split(","):
        token = token.strip()
        if not token:
            continue
        if not token.isdigit() or int(token) < 1:
            raise CurriculumError(f"Invalid semester '{token}' at {where}")
        semesters.add(int(token))

    if not semesters:
        raise CurriculumError(f"No semesters listed at {where}")

    return frozenset(semesters)


def parse_discipline(line: str, where: str) -> Discipline:
    fields = [f.strip() for f in line.split("|")]
    if len(fields) != 3:
        raise CurriculumError(
            f"Expected 'code | name | semesters' at {where}, found '{line}'"
        )

    code, name, semesters = fields
    if not code:
        raise CurriculumError(f"Empty discipline code at {where}")
    if " " in code or "\t" in code:
        raise CurriculumError(f"Invalid discipline code '{code}' at {where}")

    return Discipline(
        code=code,
        display_name=name,
        implementation_periods=parse_semesters(semesters, where),
    )


def load_curriculum(path: Union[str, Path]) -> Curriculum:
    curriculum_path = require_file(path, "Curriculum file")

    code: Optional[str] = None
    programme_id = ""
    disciplines: List[Discipline] = []
    seen: Set[str] = set()

    try:
        lines = curriculum_path.read_text(encoding="utf-8").splitlines()
    except UnicodeDecodeError as e:
        raise CurriculumError(f"Curriculum file is not UTF-8 text: {curriculum_path} ({e})") from e
    except OSError as e:
        raise CurriculumError(f"Cannot read curriculum file {curriculum_path}: {e}") from e

    for lineno, line in enumerate(lines, start=1):
        line = line.strip()
        where = f"{curriculum_path}:{lineno}"

        if not line:
            continue

        if line.startswith("#"):
            if code is None:
                code = line.lstrip("#").strip()
            continue

        if line.lower().startswith(PROGRAMME_PREFIX):
            programme_id = line[len(PROGRAMME_PREFIX):].strip()
            continue

        if line.startswith("- "):
            discipline = parse_discipline(line[2:], where)
            if discipline.code in seen:
                raise CurriculumError(
                    f"Duplicate discipline code '{discipline.code}' at {where}"
                )
            seen.add(discipline.code)
            disciplines.append(discipline)

    if not code:
        raise CurriculumError(f"Missing curriculum code heading in {curriculum_path}")

    if not disciplines:
        raise CurriculumError(f"No disciplines found in {curriculum_path}")

    return Curriculum(
        code=code,
        programme_id=programme_id,
        year_code=code[:2],
        disciplines=tuple(disciplines),
    )
