"""Intake form state and parsed-document models."""

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional


class IntakeForm(BaseModel):
    """In-progress intake form, kept as the raw text the user typed.

    Numeric fields stay strings until ``build_submission`` converts them, so
    an empty field means "not entered" rather than zero.
    """

    age: str = ""
    gender: str = ""
    symptoms: List[str] = Field(default_factory=list)
    symptoms_text: str = ""
    blood_pressure: str = ""
    heart_rate: str = ""
    temperature: str = ""
    pre_existing_conditions: List[str] = Field(default_factory=list)

    @field_validator(
        "age",
        "gender",
        "symptoms_text",
        "blood_pressure",
        "heart_rate",
        "temperature",
        mode="before",
    )
    @classmethod
    def _as_text(cls, value):
        if value is None:
            return ""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class ParsedDocument(BaseModel):
    """Sparse pre-classification fields extracted from an uploaded document.

    Any field may be missing; only present values are merged into the form.
    """

    age: Optional[int] = None
    gender: Optional[str] = None
    symptoms: Optional[List[str]] = None
    blood_pressure: Optional[str] = None
    heart_rate: Optional[int] = None
    temperature: Optional[float] = None
    pre_existing_conditions: Optional[List[str]] = None
