"""
PIPELINE STAGE: 1  (Work program ingestion)

Purpose:
- Read ONE work program (Markdown or DOCX)
- Split it into numbered sections and map them onto the template
- Emit:
  1) content: template section title -> section text ("" when present but blank)
  2) diagnostics for template sections that were not found at all

ARCHITECTURAL CONSTRAINTS:
- This module MUST NOT validate the form or the value fund
- Diagnostics MUST embed the section number in single quotes:
      Section '3.1.3', expected but not found
- Unreadable or unsupported files raise WorkProgramParseError
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple
import re

from docx import Document
from docx.table import Table
from docx.text.paragraph import Paragraph
from markdown_it import MarkdownIt

from qcreport.models import ExtractedContent, ParseDiagnostic
from qcreport.validate_form import normalize_section_number
from qcreport.validate_value_fund import (
    ASSESSMENT_MATERIALS_SECTION,
    ASSESSMENT_METHODOLOGY_SECTION,
    LEARNING_OUTCOMES_SECTION,
)


class WorkProgramParseError(Exception):
    pass


# -------------------------
# Template
# -------------------------

TEMPLATE_VERSION = "SPbU-2021"

REQUIRED_SECTIONS: Tuple[str, ...] = (
    "1.1. Цели и задачи учебных занятий",
    "1.2. Требования к подготовленности обучающегося к освоению содержания учебных занятий (пререквизиты)",
    LEARNING_OUTCOMES_SECTION,
    "1.4. Перечень и объём активных и интерактивных форм учебных занятий",
    "2.1. Учебно-тематический план",
    "2.2. Структура и содержание учебных занятий",
    "3.1.1. Методическое обеспечение для аудиторной работы",
    "3.1.2. Методическое обеспечение самостоятельной работы",
    ASSESSMENT_METHODOLOGY_SECTION,
    ASSESSMENT_MATERIALS_SECTION,
    "3.1.5. Методические материалы для оценки обучающимися содержания и качества учебного процесса",
)

# e.g. "3.1.4. Методические материалы ..." or "2.1 Учебно-тематический план"
SECTION_HEADER_RE = re.compile(r"^(\d+(?:\.\d+)*)\.?\s+(.+)$")

MISSING_SECTION_MESSAGE = "Section '{number}', expected but not found"


def section_number(title: str) -> Optional[str]:
    m = SECTION_HEADER_RE.match(title.strip())
    return normalize_section_number(m.group(1)) if m else None


# -------------------------
# Template mapping
# -------------------------

def map_onto_template(
    blocks: Sequence[Tuple[str, List[str]]],
    template: Sequence[str],
) -> Tuple[ExtractedContent, List[ParseDiagnostic]]:
    """
    blocks: (heading text, body lines) in document order.

    The first block carrying a template number wins; repeated headings are
    ignored so a table of contents cannot overwrite the real section.
    """
    by_number: Dict[str, str] = {}
    for title in template:
        number = section_number(title)
        if number is None:
            raise ValueError(f"Template section without number: '{title}'")
        by_number[number] = title

    content: Dict[str, str] = {}
    for heading, body in blocks:
        number = section_number(heading)
        title = by_number.get(number) if number else None
        if title is None:
            continue
        text = "\n".join(line for line in body if line.strip()).strip()
        if title not in content or (not content[title] and text):
            content[title] = text

    diagnostics = [
        MISSING_SECTION_MESSAGE.format(number=number)
        for number, title in by_number.items()
        if title not in content
    ]

    ordered = {title: content[title] for title in template if title in content}
    return ordered, diagnostics


# -------------------------
# Markdown
# -------------------------

md = MarkdownIt("commonmark")

BODY_TOKEN_TYPES = {"inline", "fence", "code_block"}


def markdown_blocks(text: str) -> List[Tuple[str, List[str]]]:
    """
    Only numbered headings open a block. Unnumbered sub-headings
    ("### Критерии оценивания") are body text of the enclosing section.
    """
    tokens = md.parse(text)

    blocks: List[Tuple[str, List[str]]] = []
    heading: Optional[str] = None
    body: List[str] = []
    in_heading = False

    for t in tokens:
        if t.type == "heading_open":
            in_heading = True
            continue

        if t.type == "heading_close":
            in_heading = False
            continue

        if t.type not in BODY_TOKEN_TYPES:
            continue

        line = t.content.strip()
        if in_heading and section_number(line) is not None:
            if heading is not None:
                blocks.append((heading, body))
            heading, body = line, []
        elif heading is not None:
            body.append(line)

    if heading is not None:
        blocks.append((heading, body))

    return blocks


# -------------------------
# DOCX
# -------------------------

def is_docx_heading(p: Paragraph, text: str, template_numbers: set) -> bool:
    number = section_number(text)
    if number is None:
        return False
    if number in template_numbers:
        return True
    if p.style is not None and p.style.name and p.style.name.startswith("Heading"):
        return True

    bold_chars = 0
    total_chars = 0
    for run in p.runs:
        if run.text.strip():
            total_chars += len(run.text)
            if run.bold:
                bold_chars += len(run.text)
    return total_chars > 0 and bold_chars / total_chars > 0.5


def iter_docx_items(path: Path) -> Iterator[Tuple[Optional[Paragraph], str]]:
    doc = Document(str(path))
    for element in doc.element.body:
        if element.tag.endswith("}p"):
            p = Paragraph(element, doc)
            yield p, p.text.strip()
        elif element.tag.endswith("}tbl"):
            table = Table(element, doc)
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells]
                line = " | ".join(c for c in cells if c)
                if line:
                    yield None, line


def docx_blocks(path: Path, template: Sequence[str]) -> List[Tuple[str, List[str]]]:
    template_numbers = {section_number(title) for title in template}

    blocks: List[Tuple[str, List[str]]] = []
    heading: Optional[str] = None
    body: List[str] = []

    for paragraph, text in iter_docx_items(path):
        if not text:
            continue
        if paragraph is not None and is_docx_heading(paragraph, text, template_numbers):
            if heading is not None:
                blocks.append((heading, body))
            heading, body = text, []
        elif heading is not None:
            body.append(text)

    if heading is not None:
        blocks.append((heading, body))

    return blocks


# -------------------------
# Entry point
# -------------------------

def parse_work_program(
    path: Path,
    template: Sequence[str] = REQUIRED_SECTIONS,
) -> Tuple[ExtractedContent, List[ParseDiagnostic]]:
    path = Path(path)
    suffix = path.suffix.lower()

    try:
        if suffix == ".md":
            blocks = markdown_blocks(path.read_text(encoding="utf-8"))
        elif suffix == ".docx":
            blocks = docx_blocks(path, template)
        else:
            raise WorkProgramParseError(f"{path.name}: unsupported work program format '{suffix}'")
    except WorkProgramParseError:
        raise
    except Exception as e:
        raise WorkProgramParseError(f"{path.name}: {e}") from e

    return map_onto_template(blocks, template)
