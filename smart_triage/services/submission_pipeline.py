"""Triage submission pipeline.

Runs validate -> insert -> classify -> finalize as an explicit state machine:

    IDLE -> VALIDATING -> INSERTING -> CLASSIFYING -> FINALIZING -> DONE

Any step can move to FAILED. The sequence is not transactional: once the
insert succeeds the record stays stored even if classification or the
follow-up update fails, and nothing is retried.
"""

from enum import Enum
from typing import List, Optional
import logging

from pydantic import BaseModel, ConfigDict

from smart_triage.models.patient import Patient
from smart_triage.models.triage import ClassificationResult
from smart_triage.services.intake_service import IntakeFormController
from smart_triage.services.patient_service import PatientService
from smart_triage.tools.triage_function import TriageFunctionClient
from smart_triage.utils.errors import (
    PersistenceError,
    RemoteProcedureError,
    TriageError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    INSERTING = "inserting"
    CLASSIFYING = "classifying"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"


_ALLOWED = {
    PipelineState.IDLE: {PipelineState.VALIDATING},
    PipelineState.VALIDATING: {PipelineState.INSERTING, PipelineState.FAILED},
    PipelineState.INSERTING: {PipelineState.CLASSIFYING, PipelineState.FAILED},
    PipelineState.CLASSIFYING: {PipelineState.FINALIZING, PipelineState.FAILED},
    PipelineState.FINALIZING: {PipelineState.DONE, PipelineState.FAILED},
    PipelineState.DONE: set(),
    PipelineState.FAILED: set(),
}

INSERT_FAILED_MESSAGE = "Could not save the patient record. Please try again."
CLASSIFY_FAILED_MESSAGE = (
    "AI triage failed. The patient record was saved without a classification."
)
FINALIZE_FAILED_MESSAGE = (
    "Classification completed but the result could not be saved. "
    "The patient record remains unclassified."
)


class PipelineResult(BaseModel):
    """Outcome of one pipeline run."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    state: PipelineState
    patient: Optional[Patient] = None
    classification: Optional[ClassificationResult] = None
    failed_stage: Optional[PipelineState] = None
    error: Optional[TriageError] = None
    message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state == PipelineState.DONE


class InvalidTransition(RuntimeError):
    pass


class TriageSubmissionPipeline:
    """One submit action. A pipeline instance runs at most once."""

    def __init__(self, patients: PatientService, client: TriageFunctionClient):
        self.patients = patients
        self.client = client
        self.state = PipelineState.IDLE
        self.history: List[PipelineState] = [PipelineState.IDLE]

    @property
    def in_flight(self) -> bool:
        return self.state not in (
            PipelineState.IDLE,
            PipelineState.DONE,
            PipelineState.FAILED,
        )

    def _transition(self, target: PipelineState) -> None:
        if target not in _ALLOWED[self.state]:
            raise InvalidTransition(f"{self.state.value} -> {target.value}")
        logger.debug(f"Pipeline {self.state.value} -> {target.value}")
        self.state = target
        self.history.append(target)

    def _fail(self, stage: PipelineState, error: TriageError, message: str, **extra):
        self._transition(PipelineState.FAILED)
        logger.warning(f"Triage submission failed at {stage.value}: {error.message}")
        return PipelineResult(
            state=self.state,
            failed_stage=stage,
            error=error,
            message=message,
            **extra,
        )

    async def run(self, intake: IntakeFormController) -> PipelineResult:
        """
        Submit the intake form for triage.

        Args:
            intake: Controller holding the completed form

        Returns:
            PipelineResult; on success it carries the merged Patient so the
            results view does not need to re-read it.
        """
        if self.state != PipelineState.IDLE:
            raise InvalidTransition(
                f"Pipeline already {'running' if self.in_flight else 'finished'}"
            )

        self._transition(PipelineState.VALIDATING)
        try:
            intake.validate()
            submission = intake.build_submission()
        except ValidationError as e:
            return self._fail(PipelineState.VALIDATING, e, e.message)

        self._transition(PipelineState.INSERTING)
        try:
            patient = await self.patients.insert(submission)
        except PersistenceError as e:
            return self._fail(PipelineState.INSERTING, e, INSERT_FAILED_MESSAGE)

        self._transition(PipelineState.CLASSIFYING)
        try:
            classification = await self.client.classify(
                submission.model_dump(mode="json")
            )
        except RemoteProcedureError as e:
            return self._fail(
                PipelineState.CLASSIFYING, e, CLASSIFY_FAILED_MESSAGE, patient=patient
            )

        self._transition(PipelineState.FINALIZING)
        try:
            await self.patients.update(patient.id, classification.to_patient_fields())
        except PersistenceError as e:
            return self._fail(
                PipelineState.FINALIZING,
                e,
                FINALIZE_FAILED_MESSAGE,
                patient=patient,
                classification=classification,
            )

        self._transition(PipelineState.DONE)
        merged = patient.merge_classification(classification)
        logger.info(
            f"Triage complete for patient {merged.id}: "
            f"{merged.risk_level.value} -> {merged.recommended_department}"
        )
        return PipelineResult(
            state=self.state, patient=merged, classification=classification
        )
