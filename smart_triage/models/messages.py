"""API request and response models."""

from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import datetime
from smart_triage.models.intake import IntakeForm
from smart_triage.models.patient import Patient
from smart_triage.models.triage import ContributingFactor, Gender, RiskLevel


class CatalogResponse(BaseModel):
    """Options offered by the intake form."""

    symptoms: List[str]
    conditions: List[str]
    genders: List[str]


class DocumentParseResponse(BaseModel):
    """Result of uploading and parsing a health document."""

    file_path: str
    form: IntakeForm
    message: str = "Document parsed! Fields auto-filled."


class PatientSummary(BaseModel):
    """Pre-classification fields shown under the results."""

    age: int
    gender: Gender
    symptoms: List[str]
    blood_pressure: Optional[str] = None
    heart_rate: Optional[int] = None
    temperature: Optional[float] = None
    pre_existing_conditions: List[str] = Field(default_factory=list)


class ResultsView(BaseModel):
    """Triage results for one patient."""

    patient_id: str
    risk_level: Optional[RiskLevel] = None
    risk_label: str
    confidence_score: Optional[float] = None
    recommended_department: str
    contributing_factors: List[ContributingFactor] = Field(default_factory=list)
    explanation: str = ""
    summary: PatientSummary


class SubmitResponse(BaseModel):
    """Successful triage submission."""

    patient_id: str
    redirect_to: str
    results: ResultsView


class QueueEntry(BaseModel):
    """One row of the dashboard patient queue."""

    patient_id: str
    risk_badge: str
    department_badge: str
    gender: Gender
    age: int
    created_at: datetime
    selected: bool = False


class DashboardStats(BaseModel):
    """Aggregate statistics over the whole fetched snapshot."""

    total_patients: int
    risk_counts: Dict[str, int]
    department_load: Dict[str, int]


class DashboardResponse(BaseModel):
    """Dashboard view: statistics, filters and the sorted queue."""

    stats: DashboardStats
    departments: List[str]
    filter_risk: str
    filter_department: str
    queue: List[QueueEntry]
    selected_patient: Optional[Patient] = None
    notifications: List[str] = Field(default_factory=list)


class SelectionResponse(BaseModel):
    """Current dashboard selection after a toggle."""

    selected_patient_id: Optional[str] = None


class SyntheticDataResponse(BaseModel):
    """Outcome of generating synthetic patients."""

    message: str
    total_patients: int
