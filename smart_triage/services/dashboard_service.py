"""Dashboard aggregation over a fetched patient snapshot.

All filtering, sorting and statistics are computed locally from the last
successful fetch; nothing is filtered server-side. The snapshot only changes
on a full re-fetch or when a classified patient is merged in.
"""

from smart_triage.config.settings import settings
from smart_triage.models.messages import DashboardResponse, DashboardStats, QueueEntry
from smart_triage.models.patient import Patient
from smart_triage.models.triage import (
    PENDING_LABEL,
    RISK_PRECEDENCE,
    UNCLASSIFIED_PRECEDENCE,
    RiskLevel,
)
from smart_triage.services.patient_service import PatientService
from smart_triage.tools.triage_function import TriageFunctionClient
from smart_triage.utils.errors import NotFoundError, PersistenceError, RemoteProcedureError
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Tuple
import logging
import uuid

logger = logging.getLogger(__name__)

ALL = "all"
FETCH_FAILED_MESSAGE = "Failed to load patients"
GENERATE_FAILED_MESSAGE = "Failed to generate data"
GENERATE_OK_MESSAGE = "Synthetic patients generated!"


def _risk_filter(value: str) -> Optional[RiskLevel]:
    if value == ALL:
        return None
    try:
        return RiskLevel(value)
    except ValueError:
        raise ValueError(f"Unknown risk filter '{value}'") from None


def _precedence(patient: Patient) -> int:
    if not patient.is_classified:
        return UNCLASSIFIED_PRECEDENCE
    return RISK_PRECEDENCE[patient.risk_level]


def sort_by_risk(patients: Iterable[Patient]) -> List[Patient]:
    """High, Medium, Low, then unclassified; ties keep their input order."""
    return sorted(patients, key=_precedence)


class DashboardAggregator:
    """Owns the dashboard snapshot and the current selection."""

    def __init__(self):
        self._patients: Tuple[Patient, ...] = ()
        self.selected_id: Optional[str] = None

    @property
    def patients(self) -> Tuple[Patient, ...]:
        return self._patients

    async def fetch(self, store: PatientService) -> Optional[str]:
        """
        Replace the snapshot with every stored patient, newest first.

        Returns:
            None on success, otherwise a notification message. The previous
            snapshot is kept when the fetch fails.
        """
        try:
            patients = await store.select_all()
        except PersistenceError as e:
            logger.warning(f"Dashboard fetch failed, keeping previous snapshot: {e}")
            return FETCH_FAILED_MESSAGE

        self._patients = tuple(patients)
        return None

    def merge_patient(self, patient: Patient) -> bool:
        """Swap in an updated copy of a patient already in the snapshot."""
        for i, current in enumerate(self._patients):
            if current.id == patient.id:
                self._patients = self._patients[:i] + (patient,) + self._patients[i + 1 :]
                return True
        return False

    def filter(self, risk: str = ALL, department: str = ALL) -> List[Patient]:
        """Patients matching both the risk and the department filter."""
        level = _risk_filter(risk)
        return [
            p
            for p in self._patients
            if (level is None or p.risk_level == level)
            and (department == ALL or p.recommended_department == department)
        ]

    def sort(self, patients: Iterable[Patient]) -> List[Patient]:
        return sort_by_risk(patients)

    def risk_counts(self) -> Dict[str, int]:
        counts = {level.value: 0 for level in RiskLevel}
        for p in self._patients:
            if p.is_classified:
                counts[p.risk_level.value] += 1
        return counts

    def department_load(self) -> Dict[str, int]:
        """Observed departments, in first-seen order, with patient counts."""
        load: Dict[str, int] = {}
        for p in self._patients:
            if p.recommended_department:
                load[p.recommended_department] = load.get(p.recommended_department, 0) + 1
        return load

    def toggle_selection(self, patient_id: str) -> Optional[str]:
        """Select a patient, or clear the selection if it is already selected."""
        if self.selected_id == patient_id:
            self.selected_id = None
        elif any(p.id == patient_id for p in self._patients):
            self.selected_id = patient_id
        else:
            raise NotFoundError("Patient not found.")
        return self.selected_id

    @property
    def selected_patient(self) -> Optional[Patient]:
        for p in self._patients:
            if p.id == self.selected_id:
                return p
        return None

    async def generate_synthetic(
        self, client: TriageFunctionClient, store: PatientService
    ) -> Tuple[bool, str]:
        """Ask the remote function for sample patients, then re-fetch."""
        try:
            await client.generate_synthetic()
        except RemoteProcedureError as e:
            logger.warning(f"Synthetic data generation failed: {e}")
            return False, GENERATE_FAILED_MESSAGE

        notification = await self.fetch(store)
        if notification:
            return False, notification
        return True, GENERATE_OK_MESSAGE

    def view(
        self,
        risk: str = ALL,
        department: str = ALL,
        notifications: Optional[List[str]] = None,
    ) -> DashboardResponse:
        """Build the dashboard response from the current snapshot."""
        queue = [
            QueueEntry(
                patient_id=p.id,
                risk_badge=p.risk_level.value if p.is_classified else PENDING_LABEL,
                department_badge=(
                    p.recommended_department if p.is_classified else PENDING_LABEL
                ),
                gender=p.gender,
                age=p.age,
                created_at=p.created_at,
                selected=p.id == self.selected_id,
            )
            for p in self.sort(self.filter(risk, department))
        ]
        load = self.department_load()
        return DashboardResponse(
            stats=DashboardStats(
                total_patients=len(self._patients),
                risk_counts=self.risk_counts(),
                department_load=load,
            ),
            departments=list(load),
            filter_risk=risk,
            filter_department=department,
            queue=queue,
            selected_patient=self.selected_patient,
            notifications=notifications or [],
        )


class DashboardSessions:
    """
    One DashboardAggregator per client session.

    Each browser gets its own snapshot and selection, keyed by a session id
    held in a cookie. The least recently used session is dropped once
    ``max_sessions`` is exceeded.
    """

    def __init__(self, max_sessions: int = 256):
        self.max_sessions = max_sessions
        self._boards: "OrderedDict[str, DashboardAggregator]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._boards)

    def new_session_id(self) -> str:
        return uuid.uuid4().hex

    def get(self, session_id: str) -> DashboardAggregator:
        """Get the aggregator for a session, creating it on first use."""
        board = self._boards.get(session_id)
        if board is None:
            board = DashboardAggregator()
            self._boards[session_id] = board
            logger.debug(f"Created dashboard session {session_id}")
            while len(self._boards) > self.max_sessions:
                evicted, _ = self._boards.popitem(last=False)
                logger.info(f"Evicted dashboard session {evicted}")
        else:
            self._boards.move_to_end(session_id)
        return board

    def merge_patient(self, patient: Patient) -> None:
        """Swap an updated patient into every session that shows it."""
        for board in self._boards.values():
            board.merge_patient(patient)


_sessions: Optional[DashboardSessions] = None


def get_dashboard_sessions() -> DashboardSessions:
    """Get or create the DashboardSessions registry."""
    global _sessions
    if _sessions is None:
        _sessions = DashboardSessions(max_sessions=settings.dashboard_max_sessions)
    return _sessions
