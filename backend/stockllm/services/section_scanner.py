"""Strict, ordered section extraction for generated reports."""
import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from stockllm.services.report_sections import ReportFormat, SectionSpec

_LINE_BREAKS = re.compile(r"\r\n?")


def normalize_line_endings(text: str) -> str:
    return _LINE_BREAKS.sub("\n", text)


@dataclass
class SectionBlock:
    """Header line plus the body lines that followed it, in original order."""

    index: int
    key: str
    title: str
    header: str
    lines: List[str] = field(default_factory=list)

    @property
    def body(self) -> str:
        return "\n".join(self.lines).strip()

    @property
    def text(self) -> str:
        return "\n".join([self.header, *self.lines])


@dataclass
class ScanResult:
    sections: Dict[int, SectionBlock]
    expected_count: int

    @property
    def found_count(self) -> int:
        return len(self.sections)

    @property
    def is_complete(self) -> bool:
        return self.found_count == self.expected_count

    @property
    def validated_text(self) -> str:
        """Accepted sections joined back together, preamble dropped."""
        return "\n".join(block.text for block in self)

    def get(self, key: str) -> Optional[SectionBlock]:
        for block in self:
            if block.key == key:
                return block
        return None

    def bodies(self) -> Dict[str, str]:
        return {block.key: block.body for block in self}

    def __iter__(self) -> Iterator[SectionBlock]:
        return iter(self.sections.values())


class SectionScanner:
    """
    Split report text into its numbered sections.

    A header is only accepted when it is the next section expected; a header
    that shows up early (``3.`` before ``2.``) is kept as ordinary body text of
    the section currently open. Anything before the first accepted header is
    dropped.
    """

    def __init__(self, report_format: ReportFormat):
        self.report_format = report_format

    def _match(self, line: str) -> Optional[SectionSpec]:
        for spec in self.report_format.sections:
            if spec.matches(line):
                return spec
        return None

    def scan(self, raw_text: str) -> ScanResult:
        """
        Scan ``raw_text`` against the configured section layout.

        Returns:
            ScanResult whose sections always form the prefix 1..found_count
        """
        sections: Dict[int, SectionBlock] = {}
        current: Optional[SectionBlock] = None
        expected_index = 1

        for line in normalize_line_endings(raw_text).split("\n"):
            spec = self._match(line)
            if spec is not None and spec.index == expected_index:
                current = SectionBlock(
                    index=spec.index,
                    key=spec.key,
                    title=spec.title,
                    header=line,
                )
                sections[spec.index] = current
                expected_index += 1
            elif current is not None:
                current.lines.append(line)

        return ScanResult(sections=sections, expected_count=self.report_format.expected_count)
