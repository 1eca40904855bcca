"""
Static role policy table.

Maps (resource, action) to the roles allowed to attempt the action. Ownership
is checked separately by the entity permission handlers. The table is built
once at import and exposed read-only.
"""

from types import MappingProxyType
from typing import FrozenSet

STUDENT = "student"
PROFESSOR = "professor"
ADMIN = "admin"

ROLES = frozenset({STUDENT, PROFESSOR, ADMIN})

_ANY = ROLES
_STAFF = frozenset({PROFESSOR, ADMIN})
_ADMIN = frozenset({ADMIN})

_POLICY = {
    ("course", "create"): _STAFF,
    ("course", "get"): _ANY,
    ("course", "list"): _ANY,
    ("course", "update"): _STAFF,
    ("course", "delete"): _STAFF,
    ("course", "assign_students"): _STAFF,
    ("course", "remove_students"): _STAFF,

    ("calendar_event", "create"): _STAFF,
    ("calendar_event", "get"): _ANY,
    ("calendar_event", "list"): _ANY,
    # owners keep update/delete on their events whatever their role
    ("calendar_event", "update"): _STAFF,
    ("calendar_event", "delete"): _STAFF,

    ("resource", "create"): _STAFF,
    ("resource", "get"): _ANY,
    ("resource", "list"): _ANY,
    ("resource", "update"): _STAFF,
    ("resource", "delete"): _STAFF,

    ("notification", "create"): _STAFF,
    ("notification", "get"): _ANY,
    ("notification", "list"): _ANY,
    ("notification", "mark_read"): _ANY,
    ("notification", "delete"): _ANY,

    ("user", "create"): _ADMIN,
    ("user", "get"): _ADMIN,
    ("user", "list"): _ADMIN,
    ("user", "update"): _ADMIN,
    ("user", "delete"): _ADMIN,

    ("professor", "get"): _ANY,
    ("professor", "list"): _ANY,
    ("professor", "update"): _ADMIN,
    ("professor", "delete"): _ADMIN,

    ("dashboard", "admin"): _ADMIN,
    ("dashboard", "activity"): _ADMIN,
    ("dashboard", "professor"): frozenset({PROFESSOR}),
}

ROLE_POLICY = MappingProxyType(_POLICY)


def permitted_roles(resource: str, action: str) -> FrozenSet[str]:
    """Roles allowed to perform ``action`` on ``resource``; empty when unknown."""
    return ROLE_POLICY.get((resource, action), frozenset())
