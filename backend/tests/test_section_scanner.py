"""Unit tests for strict section scanning."""
import pytest

from stockllm.services.report_sections import (
    PORTFOLIO_REPORT_8,
    ReportFormat,
    SectionSpec,
    get_report_format,
)
from stockllm.services.section_scanner import SectionScanner


def _drop_line(text: str, line: str) -> str:
    return "\n".join(row for row in text.split("\n") if row != line)


class TestSectionScanner:
    """Test SectionScanner.scan."""

    def test_all_sections_found_in_order(self, canonical_report, report_format_8):
        scan = SectionScanner(report_format_8).scan(canonical_report)

        assert scan.found_count == 8
        assert scan.is_complete
        assert list(scan.sections) == list(range(1, 9))

    def test_partial_report_scenario(self, report_format_7):
        """Two sections of seven: both captured with their bodies."""
        text = "1. *Summary & Portfolio Characteristics*\nGood diversification.\n2. *Goal Alignment Grade*\nA"

        scan = SectionScanner(report_format_7).scan(text)

        assert scan.found_count == 2
        assert not scan.is_complete
        assert "Good diversification." in scan.sections[1].body
        assert "A" in scan.sections[2].body
        assert scan.sections[2].lines == ["A"]

    @pytest.mark.parametrize("missing", [2, 3, 5, 8])
    def test_missing_section_stops_the_prefix(self, canonical_report, report_format_8, missing):
        """Everything after a gap stays in the last section found."""
        header = report_format_8.sections[missing - 1].header
        text = _drop_line(canonical_report, header)

        scan = SectionScanner(report_format_8).scan(text)

        assert scan.found_count == missing - 1
        assert list(scan.sections) == list(range(1, missing))
        if missing < 8:
            later_header = report_format_8.sections[missing].header
            assert later_header in scan.sections[missing - 1].lines

    def test_out_of_order_header_is_body_content(self, report_format_7):
        text = (
            "1. *Summary & Portfolio Characteristics*\n"
            "Overview.\n"
            "3. *Goal Alignment Percentage*\n"
            "80%\n"
            "2. *Goal Alignment Grade*\n"
            "A\n"
        )

        scan = SectionScanner(report_format_7).scan(text)

        assert scan.found_count == 2
        assert "3. *Goal Alignment Percentage*" in scan.sections[1].lines
        assert "80%" in scan.sections[1].lines
        assert scan.sections[2].body == "A"

    def test_header_before_first_section_is_discarded(self, report_format_7):
        text = "2. *Goal Alignment Grade*\nB\n1. *Summary & Portfolio Characteristics*\nBody"

        scan = SectionScanner(report_format_7).scan(text)

        assert scan.found_count == 1
        assert scan.sections[1].lines == ["Body"]
        assert "Goal Alignment Grade" not in scan.validated_text

    def test_preamble_is_dropped(self, canonical_report, report_format_8):
        text = "Sure! Here is your structured report.\n\n" + canonical_report

        scan = SectionScanner(report_format_8).scan(text)

        assert scan.is_complete
        assert scan.validated_text.startswith("1. *Summary & Portfolio Characteristics*")
        assert "Sure!" not in scan.validated_text

    def test_blank_lines_inside_sections_are_kept(self, report_format_7):
        text = "\n\n\n1. *Summary & Portfolio Characteristics*\n\nFirst paragraph.\n\nSecond paragraph."

        scan = SectionScanner(report_format_7).scan(text)

        assert scan.sections[1].lines == ["", "First paragraph.", "", "Second paragraph."]
        assert scan.validated_text.startswith("1. *Summary")

    def test_windows_line_endings(self, canonical_report, report_format_8):
        scan = SectionScanner(report_format_8).scan(canonical_report.replace("\n", "\r\n"))

        assert scan.is_complete
        assert not any("\r" in line for line in scan.sections[1].lines)

    def test_no_headers(self, report_format_7):
        scan = SectionScanner(report_format_7).scan("The model refused to answer.")

        assert scan.found_count == 0
        assert scan.sections == {}
        assert scan.validated_text == ""

    def test_matchers_are_case_insensitive_and_allow_extra_words(self, report_format_7):
        text = (
            "  1. *summary of the PORTFOLIO*\n"
            "x\n"
            "2.*Goal Alignment - Grade*\n"
            "y"
        )

        scan = SectionScanner(report_format_7).scan(text)

        assert scan.found_count == 2
        assert scan.sections[1].header == "  1. *summary of the PORTFOLIO*"

    def test_header_without_markers_is_not_accepted(self, report_format_7):
        scan = SectionScanner(report_format_7).scan("1. Summary & Portfolio Characteristics\nBody")

        assert scan.found_count == 0

    def test_lookup_by_key(self, canonical_report, report_format_8):
        scan = SectionScanner(report_format_8).scan(canonical_report)

        assert scan.get("risk").body == "Moderate"
        assert scan.get("missing") is None
        bodies = scan.bodies()
        assert bodies["grade"] == "B+"
        assert list(bodies) == [spec.key for spec in report_format_8.sections]

    def test_iteration_yields_accepted_blocks_in_order(self, report_format_7):
        text = "intro\n1. *Summary & Portfolio Characteristics*\nBody\n2. *Goal Alignment Grade*\nB"
        scan = SectionScanner(report_format_7).scan(text)

        assert [block.index for block in scan] == [1, 2]
        assert scan.validated_text == (
            "1. *Summary & Portfolio Characteristics*\nBody\n2. *Goal Alignment Grade*\nB"
        )

    def test_seven_section_format_keeps_extra_section_as_body(self, canonical_report, report_format_7):
        scan = SectionScanner(report_format_7).scan(canonical_report)

        assert scan.found_count == 7
        assert "8. *Asset Allocation Breakdown*" in scan.sections[7].lines


class TestReportFormat:
    """Test section layout tables."""

    def test_indices_must_be_contiguous(self):
        with pytest.raises(ValueError):
            ReportFormat(
                name="broken",
                sections=(
                    SectionSpec(1, "a", "Alpha", ("Alpha",)),
                    SectionSpec(3, "c", "Gamma", ("Gamma",)),
                ),
                colors={},
            )

    def test_color_lookup_falls_back_to_default(self):
        assert PORTFOLIO_REPORT_8.color_for(4) == "#d35400"
        assert PORTFOLIO_REPORT_8.color_for(42) == "#000000"

    def test_canonical_header(self):
        assert PORTFOLIO_REPORT_8.sections[4].header == "5. *Estimated 5-Year Return*"

    def test_get_report_format(self):
        assert get_report_format("portfolio-7").expected_count == 7
        assert get_report_format("portfolio-8").expected_count == 8
        with pytest.raises(ValueError):
            get_report_format("portfolio-9")
