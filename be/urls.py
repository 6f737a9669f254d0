"""Turn stored relative file paths into absolute public URLs."""
from __future__ import annotations

from typing import Any

_ABSOLUTE_PREFIXES = ("http://", "https://")


def public_url(base_url: str, relative_path: str | None) -> str | None:
    """Join ``base_url`` and a stored path such as ``/uploads/photo-1.jpg``.

    Missing paths stay missing and absolute URLs are returned unchanged.
    """
    if not relative_path:
        return relative_path
    if relative_path.startswith(_ABSOLUTE_PREFIXES):
        return relative_path
    path = relative_path if relative_path.startswith("/") else f"/{relative_path}"
    return f"{base_url.rstrip('/')}{path}"


def map_caregiver_urls(payload: dict[str, Any], base_url: str) -> dict[str, Any]:
    """Rewrite the file fields of a serialized caregiver in place."""
    user = payload.get("user")
    if user:
        user["photo_url"] = public_url(base_url, user.get("photo_url"))

    verification = payload.get("verification")
    if verification:
        verification["document"] = public_url(base_url, verification.get("document"))
        verification["photo"] = public_url(base_url, verification.get("photo"))

    for qualification in payload.get("qualifications") or []:
        qualification["file_url"] = public_url(base_url, qualification.get("file_url"))

    return payload
