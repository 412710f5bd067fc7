"""
Pytest configuration and shared fixtures for the test suite.
"""

import pytest
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

from smart_triage.models.intake import IntakeForm
from smart_triage.models.patient import Patient, PatientSubmission
from smart_triage.models.triage import ClassificationResult, ContributingFactor


BASE_TIME = datetime(2026, 10, 1, 9, 0, 0)


# ============================================================================
# Patients
# ============================================================================

@pytest.fixture
def make_patient():
    """Factory for stored patients; minutes_ago controls created_at."""
    def _create(
        patient_id: str = "p-1",
        risk_level=None,
        department=None,
        minutes_ago: int = 0,
        **fields,
    ):
        data = {
            "id": patient_id,
            "created_at": BASE_TIME - timedelta(minutes=minutes_ago),
            "age": 45,
            "gender": "Female",
            "symptoms": ["Chest Pain"],
            "risk_level": risk_level,
            "recommended_department": department,
        }
        data.update(fields)
        return Patient(**data)
    return _create


@pytest.fixture
def completed_form():
    """A form that passes validation."""
    return IntakeForm(
        age="45",
        gender="Female",
        symptoms=["Chest Pain"],
        blood_pressure="150/95",
        heart_rate="110",
        temperature="98.6",
        pre_existing_conditions=["Hypertension", "None"],
    )


@pytest.fixture
def chest_pain_classification():
    return ClassificationResult(
        risk_level="High",
        confidence_score=92,
        recommended_department="Cardiology",
        contributing_factors=[ContributingFactor(factor="Chest Pain", weight="high")],
        explanation="Chest pain with tachycardia warrants urgent cardiac workup.",
    )


# ============================================================================
# Collaborators
# ============================================================================

@pytest.fixture
def mock_store():
    """PatientService stand-in; insert echoes the submission as a stored patient."""
    store = MagicMock()

    async def _insert(submission: PatientSubmission):
        return Patient(**submission.model_dump(), id="X", created_at=BASE_TIME)

    store.insert = AsyncMock(side_effect=_insert)
    store.update = AsyncMock(return_value=None)
    store.select_all = AsyncMock(return_value=[])
    store.select_by_id = AsyncMock(return_value=None)
    return store


@pytest.fixture
def mock_client(chest_pain_classification):
    """TriageFunctionClient stand-in."""
    client = MagicMock()
    client.classify = AsyncMock(return_value=chest_pain_classification)
    client.parse_document = AsyncMock()
    client.generate_synthetic = AsyncMock(return_value=None)
    return client


@pytest.fixture
def mock_storage():
    storage = MagicMock()
    storage.upload_blob = AsyncMock(return_value=None)
    return storage
