"""Patient record storage and retrieval service."""

from smart_triage.models.patient import Patient, PatientSubmission
from smart_triage.config.database import get_patients_collection
from smart_triage.utils.errors import PersistenceError
from pydantic import ValidationError as SchemaError
from pymongo.errors import PyMongoError
from typing import Any, Dict, List, Optional
from datetime import datetime
import uuid
import logging

logger = logging.getLogger(__name__)


def _to_patient(doc: dict) -> Patient:
    try:
        return Patient(**doc)
    except SchemaError as e:
        logger.error(f"Stored patient {doc.get('id')} is malformed: {e}")
        raise PersistenceError("A stored patient record could not be read") from e


class PatientService:
    """Service for managing patient records."""

    async def insert(self, submission: PatientSubmission) -> Patient:
        """
        Store a new, unclassified patient.

        Args:
            submission: Normalized intake payload

        Returns:
            Stored Patient carrying its assigned id and created_at
        """
        patient = Patient(
            **submission.model_dump(),
            id=str(uuid.uuid4()),
            created_at=datetime.utcnow(),
        )

        try:
            collection = await get_patients_collection()
            await collection.insert_one(patient.model_dump())
        except PyMongoError as e:
            logger.error(f"Failed to insert patient: {e}")
            raise PersistenceError("Failed to save patient record") from e

        logger.info(f"Inserted patient {patient.id}")
        return patient

    async def update(self, patient_id: str, fields: Dict[str, Any]) -> None:
        """
        Set fields on an existing patient.

        Args:
            patient_id: Patient identifier
            fields: Field values to set

        Raises:
            PersistenceError: If the write fails or no record matches
        """
        try:
            collection = await get_patients_collection()
            result = await collection.update_one({"id": patient_id}, {"$set": fields})
        except PyMongoError as e:
            logger.error(f"Failed to update patient {patient_id}: {e}")
            raise PersistenceError("Failed to update patient record") from e

        if result.matched_count == 0:
            logger.error(f"Update matched no patient with id {patient_id}")
            raise PersistenceError("Failed to update patient record")

        logger.info(f"Updated patient {patient_id}: {sorted(fields)}")

    async def select_all(self) -> List[Patient]:
        """
        Get every patient, most recent first.

        Returns:
            List of Patient ordered by created_at descending. Records that
            fail to parse are logged and left out.
        """
        try:
            collection = await get_patients_collection()
            cursor = collection.find({}).sort("created_at", -1)
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Failed to fetch patients: {e}")
            raise PersistenceError("Failed to load patients") from e

        patients = []
        for doc in docs:
            try:
                patients.append(_to_patient(doc))
            except PersistenceError:
                continue
        skipped = len(docs) - len(patients)
        if skipped:
            logger.warning(f"Skipped {skipped} unreadable patient records")
        logger.info(f"Retrieved {len(patients)} patients")
        return patients

    async def select_by_id(self, patient_id: str) -> Optional[Patient]:
        """
        Get a patient by ID.

        Args:
            patient_id: Patient identifier

        Returns:
            Patient or None if not found
        """
        try:
            collection = await get_patients_collection()
            doc = await collection.find_one({"id": patient_id})
        except PyMongoError as e:
            logger.error(f"Failed to fetch patient {patient_id}: {e}")
            raise PersistenceError("Failed to load patient") from e

        if doc:
            return _to_patient(doc)
        return None


# Global service instance
_patient_service: Optional[PatientService] = None


def get_patient_service() -> PatientService:
    """Get or create PatientService instance."""
    global _patient_service
    if _patient_service is None:
        _patient_service = PatientService()
    return _patient_service
