"""MongoDB schema for patient triage records."""

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime
from smart_triage.models.triage import (
    ClassificationResult,
    ContributingFactor,
    Gender,
    RiskLevel,
)
from smart_triage.utils.catalog import NO_CONDITIONS_SENTINEL


class PatientSubmission(BaseModel):
    """Pre-classification patient fields produced by the intake form."""

    age: int = Field(..., ge=0)
    gender: Gender
    symptoms: List[str] = Field(..., min_length=1)
    symptoms_text: Optional[str] = None
    blood_pressure: Optional[str] = Field(
        default=None, description="systolic/diastolic, e.g. 120/80"
    )
    heart_rate: Optional[int] = Field(default=None, description="beats per minute")
    temperature: Optional[float] = Field(default=None, description="degrees Fahrenheit")
    pre_existing_conditions: List[str] = Field(default_factory=list)

    @field_validator("pre_existing_conditions")
    @classmethod
    def _drop_sentinel(cls, value: List[str]) -> List[str]:
        return [c for c in value if c != NO_CONDITIONS_SENTINEL]


class Patient(PatientSubmission):
    """Stored patient document, before or after classification."""

    id: str
    created_at: datetime

    # Classification outcome (absent until classified)
    risk_level: Optional[RiskLevel] = None
    confidence_score: Optional[float] = None
    recommended_department: Optional[str] = None
    contributing_factors: List[ContributingFactor] = Field(default_factory=list)
    ai_explanation: Optional[str] = None

    @property
    def is_classified(self) -> bool:
        return self.risk_level is not None

    def merge_classification(self, result: ClassificationResult) -> "Patient":
        """Return a copy carrying the classification fields."""
        return Patient(**{**self.model_dump(), **result.to_patient_fields()})

    class Config:
        json_schema_extra = {
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "age": 45,
                "gender": "Female",
                "symptoms": ["Chest Pain"],
                "risk_level": "High",
                "confidence_score": 92,
                "recommended_department": "Cardiology",
            }
        }
