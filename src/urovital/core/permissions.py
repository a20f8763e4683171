"""Static permission model.

Maps every role to the closed set of capabilities it holds. The table is
built once at import time and exposed read-only; nothing grants
capabilities at runtime.

The admin entry is not exhaustive (it omits the ``finance:*``
tokens, for example). Admins are authorized through the ``admin:all``
short-circuit in :func:`urovital.core.access.can`, not by enumerating every
capability here.
"""
from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping

from ..models.enums import UserRole
from .exceptions import UnknownRoleError


class Capability(str, Enum):
    """Closed set of permission tokens, ``<module>:<action>``."""

    ADMIN_ALL = "admin:all"
    DASHBOARD_READ = "dashboard:read"
    APPOINTMENTS_READ = "appointments:read"
    APPOINTMENTS_WRITE = "appointments:write"
    APPOINTMENTS_DELETE = "appointments:delete"
    PATIENTS_READ = "patients:read"
    PATIENTS_WRITE = "patients:write"
    PATIENTS_DELETE = "patients:delete"
    COMPANIES_READ = "companies:read"
    COMPANIES_WRITE = "companies:write"
    SETTINGS_READ = "settings:read"
    SETTINGS_WRITE = "settings:write"
    FINANCE_READ = "finance:read"
    FINANCE_WRITE = "finance:write"
    FINANCE_ADMIN = "finance:admin"
    FINANCE_RECEIPTS = "finance:receipts"
    FINANCE_DOWNLOAD = "finance:download"
    AFFILIATIONS_READ = "affiliations:read"
    AFFILIATIONS_WRITE = "affiliations:write"
    MEDICAL_HISTORY_READ = "medical_history:read"
    MEDICAL_HISTORY_WRITE = "medical_history:write"
    LAB_RESULTS_READ = "lab_results:read"
    LAB_RESULTS_WRITE = "lab_results:write"
    REPORTS_READ = "reports:read"
    REPORTS_WRITE = "reports:write"
    REPORTS_DELETE = "reports:delete"
    USERS_READ = "users:read"
    USERS_WRITE = "users:write"
    USERS_DELETE = "users:delete"
    OWN_DATA_READ = "own_data:read"
    OWN_DATA_WRITE = "own_data:write"
    BILLING_READ = "billing:read"
    BILLING_WRITE = "billing:write"


_C = Capability

_ROLE_CAPABILITIES: dict[UserRole, frozenset[Capability]] = {
    UserRole.ADMIN: frozenset({
        _C.ADMIN_ALL,
        _C.DASHBOARD_READ,
        _C.APPOINTMENTS_READ, _C.APPOINTMENTS_WRITE, _C.APPOINTMENTS_DELETE,
        _C.PATIENTS_READ, _C.PATIENTS_WRITE, _C.PATIENTS_DELETE,
        _C.MEDICAL_HISTORY_READ, _C.MEDICAL_HISTORY_WRITE,
        _C.LAB_RESULTS_READ, _C.LAB_RESULTS_WRITE,
        _C.REPORTS_READ, _C.REPORTS_WRITE, _C.REPORTS_DELETE,
        _C.USERS_READ, _C.USERS_WRITE, _C.USERS_DELETE,
        _C.SETTINGS_READ, _C.SETTINGS_WRITE,
        _C.BILLING_READ, _C.BILLING_WRITE,
        _C.AFFILIATIONS_READ, _C.AFFILIATIONS_WRITE,
    }),
    UserRole.DOCTOR: frozenset({
        _C.DASHBOARD_READ,
        _C.APPOINTMENTS_READ,
        _C.PATIENTS_READ,
        _C.MEDICAL_HISTORY_READ,
        _C.LAB_RESULTS_READ,
        _C.REPORTS_READ, _C.REPORTS_WRITE,
        _C.OWN_DATA_READ, _C.OWN_DATA_WRITE,
    }),
    UserRole.SECRETARY: frozenset({
        _C.DASHBOARD_READ,
        _C.APPOINTMENTS_READ, _C.APPOINTMENTS_WRITE, _C.APPOINTMENTS_DELETE,
        _C.PATIENTS_READ, _C.PATIENTS_WRITE,
        _C.MEDICAL_HISTORY_READ,
        _C.LAB_RESULTS_READ,
        _C.REPORTS_READ, _C.REPORTS_WRITE,
        _C.BILLING_READ, _C.BILLING_WRITE,
        _C.AFFILIATIONS_READ, _C.AFFILIATIONS_WRITE,
        _C.OWN_DATA_READ, _C.OWN_DATA_WRITE,
    }),
    UserRole.PROMOTER: frozenset({
        _C.DASHBOARD_READ,
        _C.AFFILIATIONS_READ,
        _C.OWN_DATA_READ, _C.OWN_DATA_WRITE,
    }),
    UserRole.PATIENT: frozenset({
        _C.APPOINTMENTS_READ, _C.APPOINTMENTS_WRITE,
        _C.MEDICAL_HISTORY_READ,
        _C.LAB_RESULTS_READ,
        _C.REPORTS_READ,
        _C.OWN_DATA_READ, _C.OWN_DATA_WRITE,
    }),
}

PERMISSION_TABLE: Mapping[UserRole, frozenset[Capability]] = MappingProxyType(_ROLE_CAPABILITIES)

# Legacy spellings seen in stored data and older clients. Lookup is
# case-insensitive, so only the lowercase form is listed.
_ROLE_ALIASES: Mapping[str, UserRole] = MappingProxyType({
    "user": UserRole.PATIENT,
    "paciente": UserRole.PATIENT,
    "secretaria": UserRole.SECRETARY,
    "promotora": UserRole.PROMOTER,
})


def normalize_role(raw: UserRole | str) -> UserRole:
    """Convert any accepted role spelling to the canonical enum.

    Raises:
        UnknownRoleError: ``raw`` is not a role or a known alias.
    """
    if isinstance(raw, UserRole):
        return raw
    if not isinstance(raw, str):
        raise UnknownRoleError(raw)

    key = raw.strip().lower()
    try:
        return UserRole(key)
    except ValueError:
        pass
    try:
        return _ROLE_ALIASES[key]
    except KeyError:
        raise UnknownRoleError(raw) from None


def capabilities_for(role: UserRole | str) -> frozenset[Capability]:
    """Return the capabilities the permission table lists for ``role``.

    Raises:
        UnknownRoleError: ``role`` is outside the role enumeration.
    """
    return PERMISSION_TABLE[normalize_role(role)]


def parse_capability(raw: Capability | str) -> Capability | None:
    """Look up a capability token, returning None when it is not in the closed set."""
    if isinstance(raw, Capability):
        return raw
    try:
        return Capability(raw.strip().lower())
    except (AttributeError, ValueError):
        return None
