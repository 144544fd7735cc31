"""URL templates for onboarding routes, parameterized by ``onboarding_id``."""

from __future__ import annotations

from typing import Final, Mapping
from urllib.parse import quote, unquote

from config import Settings, load_settings
from wizard.types import RouteName

ONBOARDING_PREFIX: Final[str] = "/onboardings/{onboarding_id}"

ROUTE_SEGMENTS: Final[Mapping[str, str]] = {
    "Root": "/",
    "Email": "/email",
    "Location": "/location",
    "Details": "/details",
    "Presentation": "/presentation",
    "Registration": "/registration",
    "Organisation1": "/organisation-1",
    "Organisation2": "/organisation-2",
    "Ownership": "/ownership",
    "Documents": "/documents",
    "Finalize": "/finalize",
}

INDIVIDUAL_ROUTES: Final[tuple[str, ...]] = ("Root", "Email", "Location", "Details", "Finalize")

COMPANY_ROUTES: Final[tuple[str, ...]] = (
    "Root",
    "Presentation",
    "Registration",
    "Organisation1",
    "Organisation2",
    "Ownership",
    "Documents",
    "Finalize",
)


def route_url(name: RouteName, onboarding_id: str, *, settings: Settings | None = None) -> str:
    """Return the URL for route ``name`` of onboarding ``onboarding_id``."""

    try:
        segment = ROUTE_SEGMENTS[name]
    except KeyError as exc:
        raise KeyError(f"Unknown onboarding route: {name}") from exc
    resolved = settings or load_settings()
    prefix = ONBOARDING_PREFIX.format(onboarding_id=quote(onboarding_id, safe=""))
    path = prefix if segment == "/" else f"{prefix}{segment}"
    return f"{resolved.base_path}{path}"


def parse_route(url: str, *, settings: Settings | None = None) -> tuple[str, str] | None:
    """Return ``(onboarding_id, route_name)`` for ``url`` or ``None`` for foreign URLs."""

    resolved = settings or load_settings()
    path = url.split("?", 1)[0].rstrip("/")
    base = resolved.base_path
    if base:
        if not path.startswith(f"{base}/"):
            return None
        path = path[len(base) :]
    parts = path.split("/")
    # ["", "onboardings", "<id>", "<segment>"?]
    if len(parts) < 3 or parts[1] != "onboardings" or not parts[2]:
        return None
    suffix = "/" + "/".join(parts[3:]) if len(parts) > 3 else "/"
    for name, segment in ROUTE_SEGMENTS.items():
        if segment == suffix:
            return unquote(parts[2]), name
    return None


__all__ = [
    "COMPANY_ROUTES",
    "INDIVIDUAL_ROUTES",
    "ROUTE_SEGMENTS",
    "parse_route",
    "route_url",
]
