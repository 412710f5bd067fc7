"""Triage classification enums and models."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class RiskLevel(str, Enum):
    """Risk levels assigned by classification."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class Gender(str, Enum):
    """Patient gender options offered by the intake form."""

    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


# Dashboard precedence: lower sorts first, unclassified last.
RISK_PRECEDENCE = {
    RiskLevel.HIGH: 0,
    RiskLevel.MEDIUM: 1,
    RiskLevel.LOW: 2,
}
UNCLASSIFIED_PRECEDENCE = 3

PENDING_LABEL = "Pending"


def risk_label(level: Optional[RiskLevel]) -> str:
    """Human label for a risk level, e.g. "High Risk" or "Pending"."""
    if level is None:
        return PENDING_LABEL
    return f"{level.value} Risk"


class ContributingFactor(BaseModel):
    """A (factor, weight) pair explaining part of a classification."""

    factor: str
    weight: str = ""


class ClassificationResult(BaseModel):
    """Response contract of the remote "triage" action.

    Every field is required so a partial classification is rejected at the
    boundary instead of being stored.
    """

    risk_level: RiskLevel
    confidence_score: float = Field(..., ge=0.0, le=100.0)
    recommended_department: str = Field(..., min_length=1)
    contributing_factors: List[ContributingFactor] = Field(default_factory=list)
    explanation: str

    def to_patient_fields(self) -> dict:
        """Fields merged onto the stored patient on finalize."""
        return {
            "risk_level": self.risk_level.value,
            "confidence_score": self.confidence_score,
            "recommended_department": self.recommended_department,
            "contributing_factors": [f.model_dump() for f in self.contributing_factors],
            "ai_explanation": self.explanation,
        }
