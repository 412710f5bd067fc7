"""Staff dashboard endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from smart_triage.api.dependencies import dashboard, patient_store, triage_client
from smart_triage.models.messages import (
    DashboardResponse,
    SelectionResponse,
    SyntheticDataResponse,
)
from smart_triage.services.dashboard_service import ALL, DashboardAggregator
from smart_triage.services.patient_service import PatientService
from smart_triage.tools.triage_function import TriageFunctionClient
from smart_triage.utils.errors import NotFoundError
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/dashboard", tags=["Dashboard"])


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    risk: str = ALL,
    department: str = ALL,
    refresh: bool = True,
    store: PatientService = Depends(patient_store),
    board: DashboardAggregator = Depends(dashboard),
):
    """
    Patient queue sorted by risk, with risk and department statistics.

    A failed fetch is reported in ``notifications`` and the previous
    snapshot is returned instead.
    """
    notifications = []
    if refresh:
        notification = await board.fetch(store)
        if notification:
            notifications.append(notification)

    try:
        return board.view(risk=risk, department=department, notifications=notifications)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT, detail=str(e)
        )


@router.post("/select/{patient_id}", response_model=SelectionResponse)
async def toggle_selection(
    patient_id: str, board: DashboardAggregator = Depends(dashboard)
):
    """Select a patient in the queue, or deselect it if already selected."""
    try:
        selected = board.toggle_selection(patient_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    return SelectionResponse(selected_patient_id=selected)


@router.post("/synthetic", response_model=SyntheticDataResponse)
async def generate_synthetic(
    store: PatientService = Depends(patient_store),
    client: TriageFunctionClient = Depends(triage_client),
    board: DashboardAggregator = Depends(dashboard),
):
    """Generate sample patients through the triage function."""
    ok, message = await board.generate_synthetic(client, store)
    if not ok:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=message)

    logger.info(f"Synthetic data generated; {len(board.patients)} patients on dashboard")
    return SyntheticDataResponse(message=message, total_patients=len(board.patients))
