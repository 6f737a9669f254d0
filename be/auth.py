"""Request principal and role gates.

Tokens are verified upstream; the gateway forwards the resolved identity in
headers (names configurable via ``AUTH_*``). Admins pass every role gate.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from fastapi import Depends, HTTPException, Request, status

from .config import settings

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Account roles."""
    PATIENT = "patient"
    CAREGIVER = "caregiver"
    ADMIN = "admin"


@dataclass(frozen=True)
class Principal:
    """The authenticated caller."""
    user_id: int
    role: Role
    patient_id: int | None = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


async def get_principal(request: Request) -> Principal:
    """Resolve the caller from gateway headers.

    Raises:
        HTTPException: 401 if the user id or role is missing or malformed
    """
    headers = request.headers
    user_id = _parse_int(headers.get(settings.auth.user_id_header))
    raw_role = (headers.get(settings.auth.role_header) or "").strip().lower()

    if user_id is None or not raw_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing token",
        )
    try:
        role = Role(raw_role)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )

    return Principal(
        user_id=user_id,
        role=role,
        patient_id=_parse_int(headers.get(settings.auth.patient_id_header)),
    )


def require_role(role: Role) -> Callable[..., Principal]:
    """Dependency factory allowing ``role`` and admins through."""

    async def dependency(principal: Principal = Depends(get_principal)) -> Principal:
        if principal.is_admin or principal.role is role:
            return principal
        logger.info(f"Role gate denied user {principal.user_id} ({principal.role.value}), needs {role.value}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: insufficient role",
        )

    return dependency


require_patient = require_role(Role.PATIENT)
