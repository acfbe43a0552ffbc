"""
Assignment Application DTOs
===========================

Result models returned by the governance service.

These Pydantic models serialize straight to JSON for the calling layer.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class EscalationCheck(BaseModel):
    """Whether an assignment has outlived one of its escalation timeouts."""
    needed: bool = Field(..., description="True when a timeout was reached")
    reason: Optional[str] = Field(None, description="Which timeout fired")
    timeout: Optional[int] = Field(None, description="Timeout that fired, in minutes")


class PerformanceCheck(BaseModel):
    """SLA compliance of a single assignment."""
    compliant: bool
    response_time: Optional[int] = Field(None, description="Minutes from assignment to acknowledgement")
    resolution_time: Optional[int] = Field(None, description="Minutes from assignment to resolution")
    violations: List[str] = Field(default_factory=list)


class QualityCriteria(BaseModel):
    timeliness: float = Field(..., ge=0, le=1)
    completeness: float = Field(..., ge=0, le=1)


class QualityEvaluation(BaseModel):
    """Weighted resolution quality score."""
    score: float = Field(..., ge=0, le=1)
    criteria: QualityCriteria


class PerformanceReport(BaseModel):
    """Aggregate SLA performance across assignments."""
    total_assignments: int
    resolved: int
    average_response_time: float = Field(..., description="Minutes, resolved assignments only")
    average_resolution_time: float = Field(..., description="Minutes, resolved assignments only")
    sla_compliance: float = Field(..., description="Percentage of resolved assignments within SLA")


class PerformanceMetricRecord(BaseModel):
    """Ad-hoc performance measurements recorded against an assignment."""
    model_config = ConfigDict(extra="forbid")

    recorded_at: datetime
    response_time: Optional[int] = None
    resolution_time: Optional[int] = None
    sla_compliant: Optional[bool] = None
    quality_score: Optional[float] = None
