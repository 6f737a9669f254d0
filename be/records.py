"""Plain records passed into and out of the matcher.

They carry data only. The repository builds them from ORM rows, and the
matcher never touches the database.
"""
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PatientQuery:
    """The patient being matched."""
    condition: str
    years: str
    schedule: str
    description: str | None = None
    special: str | None = None
    medical_history: str | None = None
    location: str | None = None  # from the owning user account


@dataclass(frozen=True)
class CaregiverCandidate:
    """A caregiver profile eligible for matching."""
    id: int
    type: str | None = None
    bio: str | None = None
    education_level: str | None = None
    schedule: str | None = None
    location: str | None = None
    qualifications: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ScoredCaregiver:
    """Candidate with its combined score and the two components behind it."""
    candidate: CaregiverCandidate
    score: float
    semantic_score: float
    location_score: float
