"""Report generation API endpoints."""
import logging

from fastapi import APIRouter, HTTPException

from stockllm.models.schemas import ReportRequest, ReportResponse
from stockllm.services.gemini_exceptions import (
    GeminiClientError,
    GeminiOverloadedError,
    GeminiTimeoutError,
)
from stockllm.services.report_service import ReportPipeline

logger = logging.getLogger(__name__)

router = APIRouter()


def get_report_pipeline() -> ReportPipeline:
    return ReportPipeline()


@router.post("", response_model=ReportResponse)
def create_report(request: ReportRequest):
    """
    Generate a structured portfolio report and its PDF.

    The response always carries the best text recovered; ``strict`` is false
    and ``found_count`` is short when the model's layout could not be fully
    recovered.
    """
    pipeline = get_report_pipeline()

    try:
        return pipeline.run(request)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except GeminiOverloadedError as exc:
        logger.error("Gemini overloaded, giving up on report: %s", exc)
        raise HTTPException(
            status_code=503,
            detail=f"Report generation is temporarily unavailable: {exc}",
        )
    except GeminiTimeoutError as exc:
        logger.error("Gemini timed out while generating report: %s", exc)
        raise HTTPException(status_code=504, detail=f"Report generation timed out: {exc}")
    except GeminiClientError as exc:
        logger.exception("Report generation failed")
        raise HTTPException(status_code=502, detail=f"Failed to generate report: {exc}")
