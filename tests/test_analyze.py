"""
Analysis run tests.

Tests verify:
1. Every selected discipline ends in exactly one terminal state
2. Counters and the frequency table change only on the successful path
3. Parser failures are recorded per discipline and never abort the run
"""

import pytest

from conftest import FIRST_COURSE_DAY, FakeParser, compliant_content, make_curriculum, make_discipline
from qcreport.analyze import analyze_programme
from qcreport.models import IgnoreReason, NotFound, ParsingFailed, TwoOrMoreMatches
from qcreport.paths import ConfigurationError
from qcreport.validate_value_fund import ASSESSMENT_MATERIALS_SECTION


def assert_every_discipline_accounted(run) -> None:
    ignored = sum(len(v) for v in run.ignored.values())
    assert run.analyzed_count + ignored == run.expected_count
    assert run.analyzed_count == len(run.outcomes)
    assert run.analyzed_count <= run.expected_count


# =============================================================================
# END-TO-END SCENARIOS
# =============================================================================

class TestAnalyzeProgramme:

    def test_only_current_course_disciplines_are_expected(self, work_program_folder) -> None:
        a = make_discipline("CS101", 1, 2)
        b = make_discipline("CS102", 3, 4)
        folder = work_program_folder("CS101_Programming.md")
        parser = FakeParser({
            "CS101_Programming.md": (
                {"1.1. Goals": "text", "3.1.4. Methodological materials": ""},
                ["Section '3.1.3', expected but not found"],
            ),
        })

        run = analyze_programme(make_curriculum(a, b), folder, parser, today=FIRST_COURSE_DAY)

        assert run.course == 1
        assert run.expected_count == 1
        assert run.analyzed_count == 1
        assert [o.discipline for o in run.outcomes] == [a]
        assert run.outcomes[0].form_mismatch == "3.1.3, 3.1.4"
        assert all(not entries for entries in run.ignored.values())
        assert run.incorrect_form_count == 1
        assert_every_discipline_accounted(run)

    def test_frequency_counts_form_sections_and_clauses(self, work_program_folder) -> None:
        folder = work_program_folder("CS101.md")
        content = compliant_content()
        content[ASSESSMENT_MATERIALS_SECTION] = ""
        parser = FakeParser({"CS101.md": (content, ["Section '2.1', expected but not found"])})

        run = analyze_programme(
            make_curriculum(make_discipline("CS101", 1)), folder, parser, today=FIRST_COURSE_DAY
        )

        outcome = run.outcomes[0]
        assert outcome.form_mismatch == "2.1, 3.1.4"
        assert outcome.value_fund_mismatch == "3.2.3"
        assert run.problem_frequency == {"2.1": 1, "3.1.4": 1, "3.2.3": 1}
        assert run.incorrect_form_count == 1
        assert run.incorrect_value_fund_count == 1

    def test_compliant_program_leaves_counters_untouched(self, work_program_folder) -> None:
        folder = work_program_folder("CS101.md")

        run = analyze_programme(
            make_curriculum(make_discipline("CS101", 2)), folder, FakeParser(), today=FIRST_COURSE_DAY
        )

        assert run.analyzed_count == 1
        assert run.outcomes[0].form_mismatch == ""
        assert run.outcomes[0].value_fund_mismatch == ""
        assert run.incorrect_form_count == 0
        assert run.incorrect_value_fund_count == 0
        assert not run.problem_frequency

    def test_frequency_accumulates_over_documents(self, work_program_folder) -> None:
        folder = work_program_folder("CS101.md", "CS103.md")
        missing = (compliant_content(), ["Section '3.1.3', expected but not found"])
        parser = FakeParser({"CS101.md": missing, "CS103.md": missing})
        curriculum = make_curriculum(make_discipline("CS101", 1), make_discipline("CS103", 2))

        run = analyze_programme(curriculum, folder, parser, today=FIRST_COURSE_DAY)

        assert run.problem_frequency["3.1.3"] == 2
        assert run.incorrect_form_count == 2


# =============================================================================
# IGNORED DISCIPLINES
# =============================================================================

class TestIgnoredDisciplines:

    def test_each_reason_gets_its_own_bucket(self, work_program_folder) -> None:
        ok = make_discipline("CS101", 1)
        missing = make_discipline("CS102", 1)
        twice = make_discipline("CS103", 2)
        broken = make_discipline("CS104", 2)
        folder = work_program_folder(
            "CS101.md", "CS103_v1.md", "CS103_v2.md", "CS104.md",
        )
        parser = FakeParser({"CS104.md": ValueError("corrupted file")})

        run = analyze_programme(
            make_curriculum(ok, missing, twice, broken), folder, parser, today=FIRST_COURSE_DAY
        )

        assert run.expected_count == 4
        assert run.analyzed_count == 1
        assert run.ignored[IgnoreReason.NOT_FOUND] == [NotFound(missing)]
        assert run.ignored[IgnoreReason.TWO_OR_MORE_MATCHES] == [
            TwoOrMoreMatches(twice, (folder / "CS103_v1.md", folder / "CS103_v2.md")),
        ]
        assert run.ignored[IgnoreReason.PARSING_FAILED] == [
            ParsingFailed(broken, folder / "CS104.md", "corrupted file"),
        ]
        assert run.ignored_count == 3
        assert_every_discipline_accounted(run)

    def test_ambiguous_match_is_not_parsed(self, work_program_folder) -> None:
        folder = work_program_folder("CS101_a.md", "CS101_b.md")
        parser = FakeParser()

        run = analyze_programme(
            make_curriculum(make_discipline("CS101", 1)), folder, parser, today=FIRST_COURSE_DAY
        )

        assert parser.calls == []
        assert run.outcomes == []
        assert run.analyzed_count == 0
        assert len(run.ignored[IgnoreReason.TWO_OR_MORE_MATCHES]) == 1

    def test_parse_failure_does_not_stop_later_disciplines(self, work_program_folder) -> None:
        folder = work_program_folder("CS101.md", "CS102.md")
        parser = FakeParser({"CS101.md": RuntimeError("boom")})
        curriculum = make_curriculum(make_discipline("CS101", 1), make_discipline("CS102", 1))

        run = analyze_programme(curriculum, folder, parser, today=FIRST_COURSE_DAY)

        assert [o.discipline.code for o in run.outcomes] == ["CS102"]
        assert run.ignored[IgnoreReason.PARSING_FAILED][0].message == "boom"
        assert not run.problem_frequency


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class TestConfigurationErrors:

    def test_missing_folder_is_fatal(self, tmp_path) -> None:
        with pytest.raises(ConfigurationError):
            analyze_programme(
                make_curriculum(make_discipline("CS101", 1)),
                tmp_path / "absent",
                FakeParser(),
                today=FIRST_COURSE_DAY,
            )

    def test_malformed_year_code_is_fatal_before_parsing(self, work_program_folder) -> None:
        folder = work_program_folder("CS101.md")
        parser = FakeParser()

        with pytest.raises(ConfigurationError):
            analyze_programme(
                make_curriculum(make_discipline("CS101", 1), code="XX.5130"),
                folder,
                parser,
                today=FIRST_COURSE_DAY,
            )
        assert parser.calls == []
