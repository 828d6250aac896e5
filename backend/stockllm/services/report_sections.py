"""Section layouts for generated portfolio reports.

A report is an ordered list of numbered sections whose header lines look like
``1. *Summary & Portfolio Characteristics*``. Each layout is an immutable
table: the scanner, repairer, renderer and prompt builder all take one
explicitly instead of reading module globals.
"""
import re
from dataclasses import dataclass, field
from typing import Dict, Optional, Pattern, Tuple

# <N>. <marker>Title<marker>
HEADER_MARKER = "*"
HEADER_PATTERN = re.compile(r"^(\d+)\. \*(.*?)\*")

DEFAULT_SECTION_COLOR = "#000000"


def canonical_header(index: int, title: str) -> str:
    """Exact header line the model is asked to emit."""
    return f"{index}. {HEADER_MARKER}{title}{HEADER_MARKER}"


@dataclass(frozen=True)
class SectionSpec:
    index: int
    key: str
    title: str
    keywords: Tuple[str, ...]
    matcher: Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        # Key terms in order, anything in between, inside the emphasis markers.
        terms = ".*".join(re.escape(word) for word in self.keywords)
        pattern = re.compile(rf"^{self.index}\.\s*\*.*{terms}.*\*", re.IGNORECASE)
        object.__setattr__(self, "matcher", pattern)

    @property
    def header(self) -> str:
        return canonical_header(self.index, self.title)

    def matches(self, line: str) -> bool:
        return bool(self.matcher.search(line.strip()))


@dataclass(frozen=True)
class ReportFormat:
    name: str
    sections: Tuple[SectionSpec, ...]
    colors: Dict[int, str]
    default_color: str = DEFAULT_SECTION_COLOR

    def __post_init__(self):
        indices = [spec.index for spec in self.sections]
        if indices != list(range(1, len(indices) + 1)):
            raise ValueError(
                f"Section indices for {self.name!r} must run 1..N without gaps, got {indices}"
            )

    @property
    def expected_count(self) -> int:
        return len(self.sections)

    def color_for(self, index: int) -> str:
        return self.colors.get(index, self.default_color)

    def section(self, key: str) -> Optional[SectionSpec]:
        for spec in self.sections:
            if spec.key == key:
                return spec
        return None


_CORE_SECTIONS = (
    SectionSpec(1, "summary", "Summary & Portfolio Characteristics", ("Summary", "Portfolio")),
    SectionSpec(2, "grade", "Goal Alignment Grade", ("Goal", "Alignment", "Grade")),
    SectionSpec(3, "percentage", "Goal Alignment Percentage", ("Goal", "Alignment", "Percentage")),
    SectionSpec(4, "risk", "Risk Meter", ("Risk", "Meter")),
    SectionSpec(5, "return", "Estimated 5-Year Return", ("Estimated", "5", "Year", "Return")),
    SectionSpec(6, "strengths", "Where You Are Strong", ("Where", "Strong")),
    SectionSpec(7, "weaknesses", "Where You Need to Improve", ("Where", "Improve")),
)

_SECTION_COLORS = {
    1: "#2c3e50",
    2: "#2980b9",
    3: "#27ae60",
    4: "#d35400",
    5: "#8e44ad",
    6: "#16a085",
    7: "#c0392b",
}

PORTFOLIO_REPORT_7 = ReportFormat(
    name="portfolio-7",
    sections=_CORE_SECTIONS,
    colors=dict(_SECTION_COLORS),
)

PORTFOLIO_REPORT_8 = ReportFormat(
    name="portfolio-8",
    sections=_CORE_SECTIONS + (
        SectionSpec(8, "assets", "Asset Allocation Breakdown", ("Asset", "Allocation", "Breakdown")),
    ),
    colors={**_SECTION_COLORS, 8: "#34495e"},
)

REPORT_FORMATS = {
    PORTFOLIO_REPORT_7.name: PORTFOLIO_REPORT_7,
    PORTFOLIO_REPORT_8.name: PORTFOLIO_REPORT_8,
}


def get_report_format(name: str) -> ReportFormat:
    """Look up a built-in layout by name."""
    try:
        return REPORT_FORMATS[name]
    except KeyError:
        raise ValueError(
            f"Unknown report format {name!r}; expected one of {sorted(REPORT_FORMATS)}"
        ) from None
