"""FastAPI dependencies for the triage services.

Routes receive their collaborators through ``Depends`` so tests can swap
them with ``app.dependency_overrides``.
"""

from fastapi import Depends, Request, Response

from smart_triage.config.settings import settings
from smart_triage.services.dashboard_service import (
    DashboardAggregator,
    DashboardSessions,
    get_dashboard_sessions,
)
from smart_triage.services.patient_service import PatientService, get_patient_service
from smart_triage.services.storage_service import DocumentStorage, get_document_storage
from smart_triage.tools.triage_function import TriageFunctionClient, get_triage_client
import logging

logger = logging.getLogger(__name__)


def patient_store() -> PatientService:
    return get_patient_service()


def document_storage() -> DocumentStorage:
    return get_document_storage()


def triage_client() -> TriageFunctionClient:
    return get_triage_client()


def dashboard_sessions() -> DashboardSessions:
    return get_dashboard_sessions()


def dashboard(
    request: Request,
    response: Response,
    sessions: DashboardSessions = Depends(dashboard_sessions),
) -> DashboardAggregator:
    """Return the calling client's dashboard, issuing a session cookie if needed."""
    cookie = settings.dashboard_session_cookie
    session_id = request.cookies.get(cookie)
    if not session_id:
        session_id = sessions.new_session_id()
        response.set_cookie(cookie, session_id, httponly=True, samesite="lax")
        logger.debug(f"Issued dashboard session {session_id}")
    return sessions.get(session_id)
