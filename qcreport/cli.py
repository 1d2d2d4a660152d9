"""
Command line entry point.

    qcreport <curriculum> <work program folder> [<curriculum> <folder> ...]

Every pair is one analysis run; all runs end up in one combined report.
All pairs are validated before any analysis starts.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import List, Optional, Sequence, Tuple
import argparse
import logging
import sys

from qcreport.aggregate import aggregate
from qcreport.analyze import AnalysisRun, analyze_programme
from qcreport.curriculum import load_curriculum
from qcreport.models import Curriculum, IgnoreReason
from qcreport.paths import ConfigurationError, get_output_dir, require_dir
from qcreport.period import current_course
from qcreport.report import run_status, write_fatal_report, write_report
from qcreport.work_program import parse_work_program

OUTPUTS_DIRNAME = "outputs"

IGNORE_HEADINGS = {
    IgnoreReason.NOT_FOUND: "Work programs missing from the folder:",
    IgnoreReason.TWO_OR_MORE_MATCHES: "Disciplines matched by several files:",
    IgnoreReason.PARSING_FAILED: "Work programs that could not be parsed:",
}


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="qcreport",
        description="Quality-control report for discipline work programs",
    )
    ap.add_argument(
        "pairs",
        nargs="+",
        metavar="CURRICULUM FOLDER",
        help="curriculum file followed by its work program folder; repeat for more curricula",
    )
    ap.add_argument("--output-dir", default=OUTPUTS_DIRNAME, help="where qc_report.json is written")
    ap.add_argument("--date", type=date.fromisoformat, default=None, help="audit date (YYYY-MM-DD), default today")
    ap.add_argument("-v", "--verbose", action="store_true")
    return ap


def split_pairs(ap: argparse.ArgumentParser, values: Sequence[str]) -> List[Tuple[str, str]]:
    if len(values) % 2 != 0:
        ap.error("arguments must come in pairs: <curriculum> <work program folder>")
    return [(values[i], values[i + 1]) for i in range(0, len(values), 2)]


def prepare(pairs: Sequence[Tuple[str, str]], today: Optional[date]) -> List[Tuple[Curriculum, Path]]:
    prepared = []
    for curriculum_path, folder in pairs:
        curriculum = load_curriculum(curriculum_path)
        prepared.append((curriculum, require_dir(folder, "Work program folder")))
        current_course(curriculum.year_code, today)
    return prepared


def print_run(run: AnalysisRun) -> None:
    print(
        f"--- {run.curriculum.code} (course {run.course}): "
        f"{run.analyzed_count}/{run.expected_count} analyzed, "
        f"{run.incorrect_form_count} form, {run.incorrect_value_fund_count} value fund"
    )
    for outcome in run.outcomes:
        print(f"✓ Analyzed {outcome.discipline.describe()}")
    for reason, entries in run.ignored.items():
        if not entries:
            continue
        print(IGNORE_HEADINGS[reason])
        for i, entry in enumerate(entries, start=1):
            print(f"✗ {i}. {entry.describe()}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    pairs = split_pairs(ap, args.pairs)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    outputs_dir = Path(args.output_dir)

    try:
        prepared = prepare(pairs, args.date)
        print(f"Analyzing {len(prepared)} curricula...")

        runs = [
            analyze_programme(curriculum, folder, parse_work_program, today=args.date)
            for curriculum, folder in prepared
        ]
        combined = aggregate(runs)

        for run in combined.runs:
            print_run(run)

        print(f"--- {combined.analyzed_count}/{combined.expected_count}")
        print(f"--- {combined.incorrect_form_count}")
        print(f"--- {combined.incorrect_value_fund_count}")

        status = run_status(combined)
        report_path = write_report(get_output_dir(outputs_dir, create=True), combined, status)

        print(f"Run completed with status: {status}")
        print(f"Report written to: {report_path}")
        return 0

    except ConfigurationError as fatal:
        print("FATAL ERROR:")
        print(fatal)
        try:
            report_path = write_fatal_report(get_output_dir(outputs_dir, create=True), str(fatal))
            print(f"Report written to: {report_path}")
        except (ConfigurationError, OSError) as e:
            print(f"Could not write report: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
