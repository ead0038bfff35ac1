"""Closed set of user roles and the parser that turns loosely-typed input into a Role."""

from enum import Enum
from typing import Any


class Role(str, Enum):
    """
    User role. The value is the wire/persisted form (e.g. ADMIN_ROLE).

    Each role also has a display name and a numeric rank. Ranks are
    non-contiguous and are accepted only as a compact legacy input.
    """

    SUPERADMIN = "SUPERADMIN_ROLE"
    ADMIN = "ADMIN_ROLE"
    DEV = "DEV_ROLE"
    CLIENT = "CLIENT_ROLE"
    SELLER = "SELLER_ROLE"
    SUPPORT = "SUPPORT_ROLE"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def rank(self) -> int:
        return _RANKS[self]


_LABELS: dict[Role, str] = {
    Role.SUPERADMIN: "Super Administrador",
    Role.ADMIN: "Administrador",
    Role.DEV: "Desarrollador",
    Role.CLIENT: "Cliente",
    Role.SELLER: "Vendedor",
    Role.SUPPORT: "Soporte",
}

_RANKS: dict[Role, int] = {
    Role.SUPERADMIN: 10,
    Role.ADMIN: 9,
    Role.DEV: 8,
    Role.CLIENT: 1,
    Role.SELLER: 3,
    Role.SUPPORT: 2,
}

DEFAULT_ROLE = Role.CLIENT

ALL_ROLES: frozenset[Role] = frozenset(Role)

# Roles that may create, edit or remove other users' data.
ADMIN_ROLES: frozenset[Role] = frozenset({Role.SUPERADMIN, Role.ADMIN})

# Roles a visitor may pick for themselves at registration.
SELF_SERVICE_ROLES: frozenset[Role] = frozenset({Role.CLIENT, Role.SELLER})


def _by_rank(value: Any) -> Role | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        rank = value
    elif isinstance(value, str) and value.strip().isdigit():
        rank = int(value.strip())
    else:
        return None
    return next((r for r in Role if r.rank == rank), None)


def _by_wire_value(value: Any) -> Role | None:
    if not isinstance(value, str):
        return None
    try:
        return Role(value.strip())
    except ValueError:
        return None


def _by_enum_name(value: Any) -> Role | None:
    if not isinstance(value, str):
        return None
    return Role.__members__.get(value.strip().upper())


def _by_display_name(value: Any) -> Role | None:
    if not isinstance(value, str):
        return None
    wanted = value.strip().casefold()
    return next((r for r in Role if r.label.casefold() == wanted), None)


# Fixed resolution order; the first strategy that recognizes the input wins.
_STRATEGIES = (_by_rank, _by_wire_value, _by_enum_name, _by_display_name)


def resolve_role(value: Any) -> Role | None:
    """
    Resolve role input without a fallback.

    Tries numeric rank (int or digit string), exact wire value, enum name
    (case-insensitive), then display name (case-insensitive). Returns None
    when nothing matches.
    """
    if isinstance(value, Role):
        return value
    if value is None:
        return None
    for strategy in _STRATEGIES:
        role = strategy(value)
        if role is not None:
            return role
    return None


def parse_role(value: Any, default: Role = DEFAULT_ROLE) -> Role:
    """Resolve role input like resolve_role, falling back to default (CLIENT)."""
    role = resolve_role(value)
    return role if role is not None else default
