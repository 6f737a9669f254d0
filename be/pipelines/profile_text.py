"""Field-labelled text summaries of patients and caregivers for embedding.

Labels stay in the text ("condition: Dementia") so the embedding model sees
what each value means, not just juxtaposed values.
"""
from __future__ import annotations

from be.records import CaregiverCandidate, PatientQuery

FIELD_DELIMITER = " | "


def _field(label: str, value: str | None) -> str:
    return f"{label}: {value or ''}"


def patient_text(patient: PatientQuery) -> str:
    """Summarize a patient.

    Optional fields are emitted with an empty value; location is left out
    entirely when the patient has none.
    """
    fields = [
        _field("condition", patient.condition),
        _field("years", patient.years),
        _field("schedule", patient.schedule),
        _field("description", patient.description),
        _field("special", patient.special),
        _field("medicalHistory", patient.medical_history),
    ]
    if patient.location:
        fields.append(_field("location", patient.location))
    return FIELD_DELIMITER.join(fields)


def caregiver_text(caregiver: CaregiverCandidate) -> str:
    """Summarize a caregiver, including qualification titles when present."""
    fields = [
        _field("type", caregiver.type),
        _field("bio", caregiver.bio),
        _field("educationLevel", caregiver.education_level),
        _field("schedule", caregiver.schedule),
    ]
    if caregiver.location:
        fields.append(_field("location", caregiver.location))

    titles = [title for title in caregiver.qualifications if title]
    if titles:
        fields.append(_field("qualifications", ", ".join(titles)))
    return FIELD_DELIMITER.join(fields)
