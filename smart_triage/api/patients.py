"""Per-patient results endpoint."""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from smart_triage.api.dependencies import patient_store
from smart_triage.models.messages import ResultsView
from smart_triage.services.patient_service import PatientService
from smart_triage.services.results_service import build_results_view
from smart_triage.utils.errors import NotFoundError, PersistenceError
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/patients", tags=["Results"])


@router.get("/{patient_id}/results", response_model=ResultsView)
async def get_results(
    patient_id: str,
    request: Request,
    store: PatientService = Depends(patient_store),
):
    """
    Triage results for one patient.

    Unclassified patients are shown with a "Pending" risk label.
    """
    try:
        return await build_results_view(patient_id, store)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "message": e.message,
                "intake_path": request.app.url_path_for("get_catalog"),
            },
        )
    except PersistenceError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message
        )
