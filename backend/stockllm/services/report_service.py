"""Portfolio report pipeline: generate, validate or repair, extract, render."""
from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from stockllm.config import Settings, get_settings
from stockllm.models.schemas import ReportRequest, ReportResponse
from stockllm.services.asset_table import extract_asset_records
from stockllm.services.document_renderer import render_report_pdf
from stockllm.services.gemini_client import GeminiClient, get_gemini_client
from stockllm.services.prompts import build_report_prompt
from stockllm.services.report_repairer import ReportRepairer
from stockllm.services.report_sections import ReportFormat, get_report_format
from stockllm.services.section_scanner import ScanResult, SectionScanner

logger = logging.getLogger(__name__)

REPORTS_URL_PREFIX = "reports"


@dataclass
class ValidatedReport:
    text: str
    scan: ScanResult
    repaired: bool
    strict: bool


def clean_and_validate_report(raw_text: str, report_format: ReportFormat) -> ValidatedReport:
    """
    Strictly scan the model output, falling back to one repair pass.

    Never raises for a structural shortfall: callers check ``strict`` and
    ``scan.found_count`` to see how much of the layout was recovered.
    """
    scanner = SectionScanner(report_format)
    scan = scanner.scan(raw_text)
    if scan.is_complete:
        return ValidatedReport(text=scan.validated_text.strip(), scan=scan, repaired=False, strict=True)

    logger.info(
        "Strict parse found %s of %s sections; attempting repair",
        scan.found_count,
        scan.expected_count,
    )
    repaired_text = ReportRepairer(report_format).repair(raw_text)
    repaired_scan = scanner.scan(repaired_text)

    if repaired_scan.found_count < scan.found_count:
        repaired_scan, repaired_text = scan, raw_text

    if not repaired_scan.is_complete:
        logger.warning(
            "Report still incomplete after repair: %s of %s sections",
            repaired_scan.found_count,
            repaired_scan.expected_count,
        )

    text = repaired_scan.validated_text if repaired_scan.found_count else repaired_text
    return ValidatedReport(
        text=text.strip(),
        scan=repaired_scan,
        repaired=True,
        strict=repaired_scan.is_complete,
    )


def report_filename(email: str, timestamp_ms: Optional[int] = None) -> str:
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{timestamp_ms}_{re.sub(r'[@.]', '_', email)}_report.pdf"


class ReportPipeline:
    """Runs one report request end to end."""

    def __init__(self, client: Optional[GeminiClient] = None, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.client = client or get_gemini_client()

    def resolve_format(self, name: Optional[str]) -> ReportFormat:
        return get_report_format(name or self.settings.report_format)

    def run(self, request: ReportRequest) -> ReportResponse:
        """
        Generate, validate and render a report.

        Raises:
            ValueError: For an unknown report format
            GeminiClientError: When generation fails (after retries on overload)
        """
        report_format = self.resolve_format(request.report_format)
        prompt = build_report_prompt(request.portfolio_text, request.goal, report_format)

        raw_report = self.client.generate_with_retry(prompt)
        validated = clean_and_validate_report(raw_report, report_format)

        reports_dir = Path(self.settings.reports_dir)
        reports_dir.mkdir(parents=True, exist_ok=True)
        filename = report_filename(request.email)
        render_report_pdf(
            validated.text,
            str(reports_dir / filename),
            report_format,
            margin=self.settings.pdf_margin,
        )

        return ReportResponse(
            report=validated.text,
            sections=validated.scan.bodies(),
            found_count=validated.scan.found_count,
            expected_count=validated.scan.expected_count,
            repaired=validated.repaired,
            strict=validated.strict,
            assets=extract_asset_records(validated.scan),
            pdf_path=f"{REPORTS_URL_PREFIX}/{filename}",
        )
