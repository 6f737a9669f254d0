"""Read-side queries feeding the matcher.

Loads the requesting patient and the pool of eligible caregivers, and turns
ORM rows into the plain records the matching pipeline consumes.
"""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from be import models
from be.records import CaregiverCandidate, PatientQuery

logger = logging.getLogger(__name__)


async def get_patient_with_user(
    session: AsyncSession,
    patient_id: int,
) -> models.Patient | None:
    """Load a patient with its user account.

    Args:
        session: Database session
        patient_id: Patient ID to load

    Returns:
        Patient or None if it does not exist
    """
    query = (
        select(models.Patient)
        .options(selectinload(models.Patient.user))
        .where(models.Patient.id == patient_id)
    )
    result = await session.execute(query)
    return result.scalar_one_or_none()


async def get_available_caregivers_for_matching(
    session: AsyncSession,
) -> list[models.CaregiverProfile]:
    """Load caregivers that are active, available and verified.

    Users, qualifications and verification are loaded eagerly. Results are
    ordered by caregiver full name, which is also the tie order for matching.
    """
    query = (
        select(models.CaregiverProfile)
        .join(models.CaregiverProfile.user)
        .options(
            selectinload(models.CaregiverProfile.user),
            selectinload(models.CaregiverProfile.qualifications),
            selectinload(models.CaregiverProfile.verification),
        )
        .where(
            models.CaregiverProfile.is_active.is_(True),
            models.CaregiverProfile.is_available.is_(True),
            models.CaregiverProfile.is_verified.is_(True),
        )
        .order_by(models.User.fullname.asc(), models.CaregiverProfile.id.asc())
    )
    result = await session.execute(query)
    caregivers = list(result.scalars().all())

    logger.info(f"Loaded {len(caregivers)} caregivers eligible for matching")
    return caregivers


def patient_query_from_record(patient: models.Patient) -> PatientQuery:
    """Location comes from the user account, not the patient record."""
    return PatientQuery(
        condition=patient.condition,
        years=patient.years,
        schedule=patient.schedule,
        description=patient.description,
        special=patient.special,
        medical_history=patient.medical_history,
        location=patient.user.location if patient.user else None,
    )


def candidate_from_profile(profile: models.CaregiverProfile) -> CaregiverCandidate:
    return CaregiverCandidate(
        id=profile.id,
        type=profile.type,
        bio=profile.bio,
        education_level=profile.education_level,
        schedule=profile.schedule,
        location=profile.user.location if profile.user else None,
        qualifications=tuple(q.title for q in profile.qualifications),
    )
