"""Intake form controller.

Owns one in-progress ``IntakeForm``: catalog toggles, non-destructive merge
of parsed documents, validation, and conversion into a ``PatientSubmission``.
"""

from smart_triage.config.settings import settings
from smart_triage.models.intake import IntakeForm, ParsedDocument
from smart_triage.models.patient import PatientSubmission
from smart_triage.services.storage_service import DocumentStorage
from smart_triage.tools.triage_function import TriageFunctionClient
from smart_triage.utils.catalog import get_catalog
from smart_triage.utils.errors import ValidationError
from pydantic import ValidationError as SchemaError
from typing import Optional
import os
import uuid
import logging

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Please fill in age, gender, and at least one symptom."


def _blank(value: str) -> bool:
    return not value or not value.strip()


def _optional_text(value: str) -> Optional[str]:
    return None if _blank(value) else value.strip()


def _parse_number(value: str, cast, label: str):
    if _blank(value):
        return None
    try:
        return cast(value.strip())
    except ValueError:
        raise ValidationError(f"{label} must be a number.") from None


class IntakeFormController:
    """Collects and normalizes one patient's pre-classification fields."""

    def __init__(self, form: Optional[IntakeForm] = None):
        self.form = form if form is not None else IntakeForm()
        self.uploading = False

    def toggle_selection(self, item: str, field: str) -> None:
        """
        Add ``item`` to a multi-select field if absent, remove it if present.

        Only catalog options can be added. Any selected value can be removed,
        including free-text values filled in from a parsed document.
        """
        catalog = get_catalog(field)
        current = getattr(self.form, field)
        if item in current:
            updated = [v for v in current if v != item]
        elif item in catalog:
            updated = [*current, item]
        else:
            raise ValueError(f"'{item}' is not an option for {field}")
        setattr(self.form, field, updated)

    def apply_parsed_document(self, parsed: ParsedDocument) -> None:
        """Merge parsed values over the form; absent or empty values never win."""
        form = self.form
        if parsed.age is not None:
            form.age = str(parsed.age)
        if parsed.gender:
            form.gender = parsed.gender
        if parsed.symptoms:
            form.symptoms = list(parsed.symptoms)
        if parsed.blood_pressure:
            form.blood_pressure = parsed.blood_pressure
        if parsed.heart_rate is not None:
            form.heart_rate = str(parsed.heart_rate)
        if parsed.temperature is not None:
            form.temperature = str(parsed.temperature)
        if parsed.pre_existing_conditions:
            form.pre_existing_conditions = list(parsed.pre_existing_conditions)

    def validate(self) -> None:
        """Raise ValidationError unless age, gender and a symptom are present."""
        if _blank(self.form.age) or _blank(self.form.gender) or not self.form.symptoms:
            raise ValidationError(REQUIRED_FIELDS_MESSAGE)

    def build_submission(self) -> PatientSubmission:
        """Convert the raw form into a normalized submission payload."""
        form = self.form
        age = _parse_number(form.age, int, "Age")
        if age is None or age < 0:
            raise ValidationError("Age must be a whole number of zero or more.")

        try:
            return PatientSubmission(
                age=age,
                gender=form.gender.strip(),
                symptoms=list(form.symptoms),
                symptoms_text=_optional_text(form.symptoms_text),
                blood_pressure=_optional_text(form.blood_pressure),
                heart_rate=_parse_number(form.heart_rate, int, "Heart rate"),
                temperature=_parse_number(form.temperature, float, "Temperature"),
                pre_existing_conditions=list(form.pre_existing_conditions),
            )
        except SchemaError as e:
            fields = ", ".join(str(err["loc"][0]) for err in e.errors())
            raise ValidationError(f"Invalid intake fields: {fields}") from e

    async def upload_document(
        self,
        filename: str,
        content: bytes,
        storage: DocumentStorage,
        client: TriageFunctionClient,
        content_type: Optional[str] = None,
    ) -> str:
        """
        Store a health document, parse it remotely and merge the result.

        Args:
            filename: Original file name, used for its extension
            content: File bytes
            storage: Blob store for the upload
            client: Triage function client for parsing
            content_type: Optional MIME type

        Returns:
            Storage path of the uploaded document

        Raises:
            ValidationError: Unsupported file type or an upload already running
            PersistenceError: Upload failed; the form is unchanged
            RemoteProcedureError: Parsing failed; the form is unchanged
        """
        if self.uploading:
            raise ValidationError("A document is already being processed.")

        ext = os.path.splitext(filename)[1].lower()
        if ext not in settings.allowed_document_extensions:
            raise ValidationError("Upload a PDF or image (.pdf, .png, .jpg, .jpeg).")

        file_path = f"{uuid.uuid4()}{ext}"
        self.uploading = True
        try:
            await storage.upload_blob(file_path, content, content_type=content_type)
            parsed = await client.parse_document(file_path)
        finally:
            self.uploading = False

        self.apply_parsed_document(parsed)
        logger.info(f"Applied parsed document {file_path} to intake form")
        return file_path
