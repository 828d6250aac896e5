"""Best-effort repair of malformed report text.

These are heuristics. Each rule is a small, pure ``str -> str`` substitution
aimed at one malformation seen in model output, and each leaves already
canonical text untouched, so the whole pass can be re-applied safely.
Rules run in list order; add or drop entries in ``build_repair_rules``.
"""
import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from stockllm.services.report_sections import ReportFormat, SectionSpec
from stockllm.services.section_scanner import normalize_line_endings

logger = logging.getLogger(__name__)

# Words a model tends to drop or swap when paraphrasing a title.
_TITLE_STOPWORDS = {"a", "an", "and", "are", "of", "the", "to", "you", "your"}

_CODE_FENCE_LINE = re.compile(r"^[ \t]*```[\w-]*[ \t]*$\n?", re.MULTILINE)

# "1.??Title??", "1. **Title**", "1. __Title__"
_DOUBLED_MARKER_TITLE = re.compile(
    r"^(?P<indent>[ \t]*)(?P<index>\d+)\.[ \t]*(?P<marker>[?*_~#!])(?P=marker)+"
    r"[ \t]*(?P<title>[^\n?*_~#!]*?[^\s?*_~#!])[ \t]*(?P=marker){2,}[ \t]*$",
    re.MULTILINE,
)


@dataclass(frozen=True)
class RepairRule:
    name: str
    apply: Callable[[str], str]


def strip_code_fences(text: str) -> str:
    """Drop lines that only open or close a Markdown code block."""
    return _CODE_FENCE_LINE.sub("", text)


def collapse_doubled_markers(text: str) -> str:
    """Rewrite a title wrapped in a doubled marker into ``N. *Title*``."""
    return _DOUBLED_MARKER_TITLE.sub(
        lambda m: f"{m.group('indent')}{m.group('index')}. *{m.group('title')}*",
        text,
    )


def title_terms(title: str) -> List[str]:
    return [word for word in re.findall(r"\w+", title) if word.lower() not in _TITLE_STOPWORDS]


def title_pattern(spec: SectionSpec) -> re.Pattern:
    """
    Loose pattern for one section's header line.

    Tolerates heading hashes, bold or other emphasis, odd spacing and
    punctuation, any case, suffixes on the title words and extra words
    between them. The line still has to end with the title: ``4. Risk Meter: High``
    is left alone so the grade is not lost.
    """
    terms = r"\w*[^\n]*?".join(re.escape(word) for word in title_terms(spec.title))
    return re.compile(
        rf"^[ \t]*(?:#+[ \t]*)?[*_]*[ \t]*{spec.index}(?!\d)[ \t]*[.):]?[ \t]*[^\w\n]*"
        rf"{terms}\w*[^\w\n]*$",
        re.IGNORECASE | re.MULTILINE,
    )


def canonical_title_rule(spec: SectionSpec) -> RepairRule:
    pattern = title_pattern(spec)
    header = spec.header

    def _apply(text: str) -> str:
        return pattern.sub(lambda _match: header, text)

    return RepairRule(name=f"canonical_title_{spec.index}", apply=_apply)


def build_repair_rules(report_format: ReportFormat) -> List[RepairRule]:
    rules = [
        RepairRule("normalize_line_endings", normalize_line_endings),
        RepairRule("strip_code_fences", strip_code_fences),
        RepairRule("collapse_doubled_markers", collapse_doubled_markers),
    ]
    rules.extend(canonical_title_rule(spec) for spec in report_format.sections)
    return rules


class ReportRepairer:
    """Applies an ordered list of repair rules to report text."""

    def __init__(self, report_format: ReportFormat, rules: Optional[Sequence[RepairRule]] = None):
        self.report_format = report_format
        self.rules = list(rules) if rules is not None else build_repair_rules(report_format)

    def repair(self, raw_text: str) -> str:
        """Return the repaired text; the input comes back unchanged when no rule applies."""
        text = raw_text
        for rule in self.rules:
            updated = rule.apply(text)
            if updated != text:
                logger.debug("Repair rule %s rewrote part of the report", rule.name)
            text = updated
        return text
