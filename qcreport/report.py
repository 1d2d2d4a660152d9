"""
PIPELINE STAGE: 5  (Serialization for the report renderer)

Purpose:
- Write the combined analysis as a JSON DATA STORE (qc_report.json)
- Use the SAME file for fatal runs, so every invocation leaves an audit trail

ARCHITECTURAL CONSTRAINTS:
- MUST NOT decide layout or wording of the rendered report
- Runs are written in course order, frequencies by descending count
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List
import json

from qcreport.aggregate import CombinedReport
from qcreport.analyze import AnalysisRun
from qcreport.models import (
    IgnoredDiscipline,
    IgnoreReason,
    NotFound,
    ParsingFailed,
    TwoOrMoreMatches,
)

REPORT_FILENAME = "qc_report.json"

STATUS_OK = "OK"
STATUS_PARTIAL = "PARTIAL"
STATUS_FATAL = "FATAL"


def run_status(combined: CombinedReport) -> str:
    return STATUS_OK if combined.ignored_count == 0 else STATUS_PARTIAL


def ignored_entry(entry: IgnoredDiscipline) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "code": entry.discipline.code,
        "name": entry.discipline.display_name,
    }
    if isinstance(entry, TwoOrMoreMatches):
        data["paths"] = [str(p) for p in entry.paths]
    elif isinstance(entry, ParsingFailed):
        data["path"] = str(entry.path)
        data["message"] = entry.message
    elif not isinstance(entry, NotFound):
        raise TypeError(f"Unknown ignored discipline entry {entry!r}")
    return data


def run_section(run: AnalysisRun) -> Dict[str, Any]:
    return {
        "curriculum": run.curriculum.code,
        "programme": run.curriculum.programme_id,
        "folder": str(run.folder),
        "course": run.course,
        "summary": {
            "expected": run.expected_count,
            "analyzed": run.analyzed_count,
            "incorrect_form": run.incorrect_form_count,
            "incorrect_value_fund": run.incorrect_value_fund_count,
        },
        "programs": [
            {
                "code": o.discipline.code,
                "name": o.discipline.display_name,
                "form_mismatch": o.form_mismatch,
                "value_fund_mismatch": o.value_fund_mismatch,
            }
            for o in run.outcomes
        ],
        "ignored": {
            reason.value: [ignored_entry(e) for e in run.ignored[reason]]
            for reason in IgnoreReason
        },
    }


def build_report(combined: CombinedReport, status: str) -> Dict[str, Any]:
    return {
        "summary": {
            "status": status,          # OK | PARTIAL | FATAL
            "expected": combined.expected_count,
            "analyzed": combined.analyzed_count,
            "ignored": combined.ignored_count,
            "incorrect_form": combined.incorrect_form_count,
            "incorrect_value_fund": combined.incorrect_value_fund_count,
        },
        "curricula": [run_section(run) for run in combined.runs],
        "problem_frequency": [
            {"section": section, "count": count}
            for section, count in combined.frequency_ranking()
        ],
    }


def write_json(output_dir: Path, report: Dict[str, Any]) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    report_path = output_dir / REPORT_FILENAME
    report_path.write_text(
        json.dumps(report, indent=2, ensure_ascii=False),
        encoding="utf-8"
    )
    return report_path


def write_report(output_dir: Path, combined: CombinedReport, status: str) -> Path:
    return write_json(output_dir, build_report(combined, status))


def write_fatal_report(output_dir: Path, message: str) -> Path:
    errors: List[Dict[str, str]] = [
        {"stage": "fatal", "message": message},
    ]
    report = {
        "summary": {
            "status": STATUS_FATAL,
            "expected": None,
            "analyzed": None,
        },
        "errors": errors,
    }
    return write_json(output_dir, report)
