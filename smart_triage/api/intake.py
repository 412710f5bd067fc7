"""Patient intake endpoints.

- catalog:   symptom / condition / gender options for the form
- documents: upload an EHR/EMR file and get the form back auto-filled
- submit:    run the triage submission pipeline for a completed form
"""

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    HTTPException,
    Request,
    UploadFile,
    status,
)
from pydantic import ValidationError as SchemaError
from smart_triage.api.dependencies import (
    dashboard_sessions,
    document_storage,
    patient_store,
    triage_client,
)
from smart_triage.models.intake import IntakeForm
from smart_triage.models.messages import (
    CatalogResponse,
    DocumentParseResponse,
    SubmitResponse,
)
from smart_triage.models.triage import Gender
from smart_triage.services.dashboard_service import DashboardSessions
from smart_triage.services.intake_service import IntakeFormController
from smart_triage.services.patient_service import PatientService
from smart_triage.services.results_service import build_results_view
from smart_triage.services.storage_service import DocumentStorage
from smart_triage.services.submission_pipeline import (
    PipelineState,
    TriageSubmissionPipeline,
)
from smart_triage.tools.triage_function import TriageFunctionClient
from smart_triage.utils.catalog import CONDITION_OPTIONS, SYMPTOM_OPTIONS
from smart_triage.utils.errors import PersistenceError, RemoteProcedureError, ValidationError
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/intake", tags=["Intake"])

_FAILURE_STATUS = {
    PipelineState.VALIDATING: status.HTTP_422_UNPROCESSABLE_CONTENT,
    PipelineState.INSERTING: status.HTTP_503_SERVICE_UNAVAILABLE,
    PipelineState.CLASSIFYING: status.HTTP_502_BAD_GATEWAY,
    PipelineState.FINALIZING: status.HTTP_502_BAD_GATEWAY,
}


@router.get("/catalog", response_model=CatalogResponse)
async def get_catalog():
    """Options for the symptom, condition and gender inputs."""
    return CatalogResponse(
        symptoms=list(SYMPTOM_OPTIONS),
        conditions=list(CONDITION_OPTIONS),
        genders=[g.value for g in Gender],
    )


@router.post("/documents", response_model=DocumentParseResponse)
async def upload_document(
    file: UploadFile = File(...),
    form: str = Form("{}"),
    storage: DocumentStorage = Depends(document_storage),
    client: TriageFunctionClient = Depends(triage_client),
):
    """
    Upload a health document and merge the parsed fields into the form.

    ``form`` is the current form state as JSON. Parsed values only replace
    fields they actually provide.
    """
    try:
        current = IntakeForm.model_validate_json(form)
    except SchemaError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
            detail="Form state is not valid JSON",
        )

    controller = IntakeFormController(current)
    content = await file.read()

    try:
        file_path = await controller.upload_document(
            file.filename or "",
            content,
            storage=storage,
            client=client,
            content_type=file.content_type,
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT, detail=e.message
        )
    except (PersistenceError, RemoteProcedureError) as e:
        logger.error(f"Document processing failed: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to process document",
        )

    return DocumentParseResponse(file_path=file_path, form=controller.form)


@router.post("/submit", response_model=SubmitResponse)
async def submit_intake(
    form: IntakeForm,
    request: Request,
    store: PatientService = Depends(patient_store),
    client: TriageFunctionClient = Depends(triage_client),
    sessions: DashboardSessions = Depends(dashboard_sessions),
):
    """
    Submit a completed intake form for AI triage.

    Stores the patient, classifies it remotely and saves the classification.
    A failure after the insert leaves the record stored and unclassified;
    the error detail then includes its ``patient_id``.
    """
    pipeline = TriageSubmissionPipeline(store, client)
    result = await pipeline.run(IntakeFormController(form))

    if not result.succeeded:
        detail = {"message": result.message, "stage": result.failed_stage.value}
        if result.patient is not None:
            detail["patient_id"] = result.patient.id
        raise HTTPException(status_code=_FAILURE_STATUS[result.failed_stage], detail=detail)

    sessions.merge_patient(result.patient)
    results = await build_results_view(result.patient.id, store, patient=result.patient)
    return SubmitResponse(
        patient_id=result.patient.id,
        redirect_to=request.app.url_path_for(
            "get_results", patient_id=result.patient.id
        ),
        results=results,
    )
