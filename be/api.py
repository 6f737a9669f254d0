"""FastAPI app with health and caregiver matching endpoints, and error handling.

Matching runs for the patient bound to the caller's identity; the result is
the ranked, URL-materialized list of eligible caregivers with their scores.
"""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from ai.embeddings import EmbeddingError, EmbeddingProvider, get_embedder

from . import models
from .auth import Principal, require_patient
from .config import settings
from .db import get_session
from .logging_config import setup_logging
from .pipelines.matching import MatchingError, match_caregiver_profiles
from .records import ScoredCaregiver
from .repository import (
    candidate_from_profile,
    get_available_caregivers_for_matching,
    get_patient_with_user,
    patient_query_from_record,
)
from .urls import map_caregiver_urls

logger = logging.getLogger(__name__)

MATCHING_FAILED_MESSAGE = "Failed to compute caregiver matches"


# Pydantic response models
class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    embedding_model: str
    embedding_state: str


class ErrorResponse(BaseModel):
    """Error response."""
    error: str


class UserDTO(BaseModel):
    """Public part of a caregiver's account."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    fullname: str
    role: str
    photo_url: str | None = None
    contact: str | None = None
    date_of_birth: datetime | None = None
    location: str | None = None


class QualificationDTO(BaseModel):
    """Qualification data transfer object."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    file_url: str | None = None


class VerificationDTO(BaseModel):
    """Verification data transfer object."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    document_type: str
    document: str | None = None
    photo: str | None = None
    status: str


class CaregiverMatchDTO(BaseModel):
    """A ranked caregiver with its score breakdown."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    type: str | None = None
    bio: str | None = None
    education_level: str | None = None
    schedule: str | None = None
    is_active: bool
    is_available: bool
    is_verified: bool
    user: UserDTO | None = None
    qualifications: list[QualificationDTO] = Field(default_factory=list)
    verification: VerificationDTO | None = None
    score: float
    semantic_score: float
    location_score: float


def parse_limit(raw: str | None) -> int | None:
    """Positive integers cap the result; anything else means no cap."""
    if raw is None:
        return None
    try:
        limit = int(raw)
    except ValueError:
        return None
    if limit <= 0:
        return None
    return min(limit, settings.matching.max_limit)


def public_base_url(request: Request) -> str:
    return settings.storage.public_base_url or str(request.base_url)


def serialize_match(
    profile: models.CaregiverProfile,
    match: ScoredCaregiver,
    base_url: str,
) -> CaregiverMatchDTO:
    """Caregiver fields plus scores, with file paths turned into URLs."""
    payload = {
        "id": profile.id,
        "user_id": profile.user_id,
        "type": profile.type,
        "bio": profile.bio,
        "education_level": profile.education_level,
        "schedule": profile.schedule,
        "is_active": profile.is_active,
        "is_available": profile.is_available,
        "is_verified": profile.is_verified,
        "user": UserDTO.model_validate(profile.user).model_dump() if profile.user else None,
        "qualifications": [
            QualificationDTO.model_validate(q).model_dump() for q in profile.qualifications
        ],
        "verification": (
            VerificationDTO.model_validate(profile.verification).model_dump()
            if profile.verification else None
        ),
        "score": match.score,
        "semantic_score": match.semantic_score,
        "location_score": match.location_score,
    }
    return CaregiverMatchDTO.model_validate(map_caregiver_urls(payload, base_url))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown logic."""
    # Startup
    setup_logging()
    logger.info("Application starting up")
    if settings.embeddings.preload:
        await asyncio.to_thread(get_embedder().load)

    yield

    # Shutdown
    get_embedder().dispose()
    logger.info("Application shutting down")


app = FastAPI(
    title="Patient → Caregivers Matching",
    version=settings.version,
    description="Semantic and location based caregiver matching for patients",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers
def matching_failed_response() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error=MATCHING_FAILED_MESSAGE).model_dump(),
    )


@app.exception_handler(MatchingError)
async def matching_error_handler(request, exc: MatchingError):
    """Handle matching pipeline errors."""
    logger.error(f"Matching error: {exc}")
    return matching_failed_response()


@app.exception_handler(EmbeddingError)
async def embedding_error_handler(request, exc: EmbeddingError):
    """Handle embedding model errors."""
    logger.error(f"Embedding error: {exc}")
    return matching_failed_response()


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Health check endpoint."""
    embedder = get_embedder()
    return HealthResponse(
        status="ok",
        version=settings.version,
        embedding_model=embedder.model_name,
        embedding_state=embedder.state.value,
    )


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": settings.version,
        "endpoints": {
            "health": "/health",
            "patient_caregiver_matches": "/api/patient-caregiver-matches",
            "docs": "/docs",
        },
    }


@app.get(
    "/api/patient-caregiver-matches",
    response_model=list[CaregiverMatchDTO],
    status_code=status.HTTP_200_OK,
)
async def patient_caregiver_matches(
    request: Request,
    limit: str | None = Query(default=None, description="Maximum number of matches to return"),
    principal: Principal = Depends(require_patient),
    session: AsyncSession = Depends(get_session),
    embedder: EmbeddingProvider = Depends(get_embedder),
) -> list[CaregiverMatchDTO]:
    """Rank eligible caregivers for the caller's own patient profile.

    This endpoint:
    1. Resolves the patient bound to the caller (never taken from the URL)
    2. Loads caregivers that are active, available and verified
    3. Scores and ranks them (semantic + location)
    4. Truncates to ``limit`` after ranking
    5. Maps stored file paths to public URLs

    Args:
        request: Incoming request (used for the public URL base)
        limit: Optional result cap
        principal: Authenticated caller (injected)
        session: Database session (injected)
        embedder: Embedding provider (injected)

    Returns:
        Caregivers with scores, best first
    """
    patient_id = principal.patient_id
    logger.info(
        f"Matching request: patient_id={patient_id} user_id={principal.user_id} "
        f"role={principal.role.value}"
    )

    if patient_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid patient ID",
        )

    try:
        patient = await get_patient_with_user(session, patient_id)
        if patient is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Patient not found",
            )

        if patient.user_id != principal.user_id and not principal.is_admin:
            logger.info(f"Access denied: user {principal.user_id} requested patient {patient_id}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied: You can only view matches for your own patient profile",
            )

        profiles = await get_available_caregivers_for_matching(session)
        if not profiles:
            logger.info(f"No available caregivers for patient {patient_id}")
            return []

        profiles_by_id = {p.id: p for p in profiles}
        matching = match_caregiver_profiles(
            patient_query_from_record(patient),
            [candidate_from_profile(p) for p in profiles],
            embedder=embedder,
            min_score=settings.matching.min_score,
        )
        timeout = settings.matching.timeout_seconds
        if timeout:
            try:
                matches = await asyncio.wait_for(matching, timeout=timeout)
            except asyncio.TimeoutError as e:
                raise MatchingError(f"Matching timed out after {timeout}s") from e
        else:
            matches = await matching

        cap = parse_limit(limit)
        base_url = public_base_url(request)
        results = [
            serialize_match(profiles_by_id[m.candidate.id], m, base_url)
            for m in matches[:cap]
        ]

    except (HTTPException, MatchingError, EmbeddingError):
        raise
    except Exception as e:
        logger.error(f"Unexpected error matching patient {patient_id}: {e}", exc_info=True)
        raise MatchingError(f"Unexpected error: {e}") from e

    logger.info(
        f"Matching completed for patient {patient_id}: {len(matches)} matches, "
        f"returning {len(results)}"
    )
    return results
