"""Fixed intake catalogs for symptoms and pre-existing conditions."""

from typing import Dict, Tuple


SYMPTOM_OPTIONS: Tuple[str, ...] = (
    "Chest Pain",
    "Shortness of Breath",
    "Headache",
    "Dizziness",
    "Nausea",
    "Fever",
    "Fatigue",
    "Abdominal Pain",
    "Back Pain",
    "Cough",
    "Sore Throat",
    "Joint Pain",
    "Numbness",
    "Vision Problems",
    "Palpitations",
    "Swelling",
)

# "None" is a selectable checkbox meaning "no conditions"; it is never stored.
NO_CONDITIONS_SENTINEL = "None"

CONDITION_OPTIONS: Tuple[str, ...] = (
    "Diabetes",
    "Hypertension",
    "Asthma",
    "Heart Disease",
    "COPD",
    "Kidney Disease",
    "Liver Disease",
    "Cancer",
    "Stroke History",
    "Epilepsy",
    "Thyroid Disorder",
    NO_CONDITIONS_SENTINEL,
)

# Form field name -> catalog it selects from
SELECTION_CATALOGS: Dict[str, Tuple[str, ...]] = {
    "symptoms": SYMPTOM_OPTIONS,
    "pre_existing_conditions": CONDITION_OPTIONS,
}


def get_catalog(field: str) -> Tuple[str, ...]:
    """Return the catalog backing a multi-select form field.

    Raises:
        ValueError: If the field is not a catalog-backed selection.
    """
    try:
        return SELECTION_CATALOGS[field]
    except KeyError:
        raise ValueError(f"'{field}' is not a selectable field") from None
