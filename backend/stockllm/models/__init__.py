"""API and domain schemas."""
from stockllm.models.schemas import (
    AssetRecord,
    HealthStatus,
    ReportRequest,
    ReportResponse,
)

__all__ = [
    "AssetRecord",
    "HealthStatus",
    "ReportRequest",
    "ReportResponse",
]
