"""Per-patient results view."""

from smart_triage.models.messages import PatientSummary, ResultsView
from smart_triage.models.patient import Patient
from smart_triage.models.triage import PENDING_LABEL, risk_label
from smart_triage.services.patient_service import PatientService
from smart_triage.utils.errors import NotFoundError
from typing import Optional
import logging

logger = logging.getLogger(__name__)


def render_results(patient: Patient) -> ResultsView:
    """Shape a stored patient into the results view."""
    return ResultsView(
        patient_id=patient.id,
        risk_level=patient.risk_level,
        risk_label=risk_label(patient.risk_level),
        confidence_score=patient.confidence_score,
        recommended_department=(
            patient.recommended_department if patient.is_classified else PENDING_LABEL
        ),
        contributing_factors=patient.contributing_factors,
        explanation=patient.ai_explanation or "",
        summary=PatientSummary(
            age=patient.age,
            gender=patient.gender,
            symptoms=patient.symptoms,
            blood_pressure=patient.blood_pressure,
            heart_rate=patient.heart_rate,
            temperature=patient.temperature,
            pre_existing_conditions=patient.pre_existing_conditions,
        ),
    )


async def build_results_view(
    patient_id: str,
    patients: PatientService,
    patient: Optional[Patient] = None,
) -> ResultsView:
    """
    Build the results view for a patient.

    Args:
        patient_id: Patient identifier from the URL
        patients: Store used when no in-memory patient is supplied
        patient: Already-merged patient carried over from submission

    Raises:
        NotFoundError: If no stored record has this id
    """
    if patient is None or patient.id != patient_id:
        patient = await patients.select_by_id(patient_id)
    if patient is None:
        logger.info(f"Results requested for unknown patient {patient_id}")
        raise NotFoundError("Patient not found.")
    return render_results(patient)
