"""Core SQLAlchemy models (2.x style) for the marketplace tables the matcher reads.

Users own either a patient record or a caregiver profile. Caregiver profiles
carry qualifications and a single verification record.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class User(Base):
    """User accounts (patients, caregivers and admins)."""
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    fullname: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="patient")
    photo_url: Mapped[str | None] = mapped_column(String(512))
    contact: Mapped[str | None] = mapped_column(String(50))
    date_of_birth: Mapped[datetime | None] = mapped_column(DateTime)
    location: Mapped[str | None] = mapped_column(String(255), index=True)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, nullable=False)

    # Relationships
    patient: Mapped[Patient | None] = relationship("Patient", back_populates="user", uselist=False)
    caregiver_profile: Mapped[CaregiverProfile | None] = relationship(
        "CaregiverProfile",
        back_populates="user",
        uselist=False,
    )


class Patient(Base):
    """Patient care needs."""
    __tablename__ = "patients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    condition: Mapped[str] = mapped_column(String(255), nullable=False)
    years: Mapped[str] = mapped_column(String(50), nullable=False)
    schedule: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    special: Mapped[str | None] = mapped_column(Text)
    medical_history: Mapped[str | None] = mapped_column(Text)

    user: Mapped[User] = relationship("User", back_populates="patient")


class CaregiverProfile(Base):
    """Caregiver profiles with the three eligibility gates."""
    __tablename__ = "caregiver_profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    type: Mapped[str | None] = mapped_column(String(100))
    bio: Mapped[str | None] = mapped_column(Text)
    education_level: Mapped[str | None] = mapped_column(String(100))
    schedule: Mapped[str | None] = mapped_column(String(100))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Relationships
    user: Mapped[User] = relationship("User", back_populates="caregiver_profile")
    qualifications: Mapped[list[Qualification]] = relationship(
        "Qualification",
        back_populates="caregiver_profile",
        order_by="Qualification.id",
    )
    verification: Mapped[Verification | None] = relationship(
        "Verification",
        back_populates="caregiver_profile",
        uselist=False,
    )

    __table_args__ = (
        Index("ix_caregiver_profiles_eligibility", "is_active", "is_available", "is_verified"),
    )


class Qualification(Base):
    """Certificates and diplomas uploaded by caregivers."""
    __tablename__ = "qualifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    caregiver_profile_id: Mapped[int] = mapped_column(
        ForeignKey("caregiver_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    file_url: Mapped[str | None] = mapped_column(String(512))

    caregiver_profile: Mapped[CaregiverProfile] = relationship(
        "CaregiverProfile",
        back_populates="qualifications",
    )


class Verification(Base):
    """Identity document submitted for caregiver verification."""
    __tablename__ = "verifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    caregiver_profile_id: Mapped[int] = mapped_column(
        ForeignKey("caregiver_profiles.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    document_type: Mapped[str] = mapped_column(String(100), nullable=False)
    document: Mapped[str | None] = mapped_column(String(512))
    photo: Mapped[str | None] = mapped_column(String(512))
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False)

    caregiver_profile: Mapped[CaregiverProfile] = relationship(
        "CaregiverProfile",
        back_populates="verification",
    )
