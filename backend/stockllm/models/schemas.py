"""Pydantic schemas for API models."""
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


# Asset schemas
class AssetRecord(BaseModel):
    """One row of the asset allocation table, kept exactly as written."""

    name: str
    type: str
    invested_value: str
    current_value: str

    class Config:
        frozen = True


# Report schemas
class ReportRequest(BaseModel):
    goal: str = Field(..., min_length=1, description="Investment goal stated by the user")
    portfolio_text: str = Field(..., min_length=1, description="Portfolio data extracted from screenshots")
    email: str = Field(..., min_length=3)
    report_format: Optional[str] = Field(
        default=None,
        description="portfolio-7 or portfolio-8; defaults to the configured format",
    )


class ReportResponse(BaseModel):
    report: str
    sections: Dict[str, str]
    found_count: int
    expected_count: int
    repaired: bool
    strict: bool
    assets: List[AssetRecord] = Field(default_factory=list)
    pdf_path: Optional[str] = None


class HealthStatus(BaseModel):
    status: str
    timestamp: str
    gemini_configured: bool
