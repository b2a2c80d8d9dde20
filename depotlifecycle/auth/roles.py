"""Roles granted to API callers.

Naming: `ROLE_<RESOURCE>_<ACTION>`. A JWT carries the user's roles in its
`roles` claim; a static token carries every role.
"""

GATE_CREATE = "ROLE_GATE_CREATE"
GATE_UPDATE = "ROLE_GATE_UPDATE"
GATE_READ = "ROLE_GATE_READ"

ESTIMATE_CREATE = "ROLE_ESTIMATE_CREATE"
ESTIMATE_APPROVE = "ROLE_ESTIMATE_APPROVE"

WORKORDER_CREATE = "ROLE_WORKORDER_CREATE"
WORKORDER_UPDATE = "ROLE_WORKORDER_UPDATE"

RELEASE_CREATE = "ROLE_RELEASE_CREATE"
RELEASE_READ = "ROLE_RELEASE_READ"

REDELIVERY_CREATE = "ROLE_REDELIVERY_CREATE"
REDELIVERY_READ = "ROLE_REDELIVERY_READ"

ALL_ROLES: list[str] = [
    GATE_CREATE, GATE_UPDATE, GATE_READ,
    ESTIMATE_CREATE, ESTIMATE_APPROVE,
    WORKORDER_CREATE, WORKORDER_UPDATE,
    RELEASE_CREATE, RELEASE_READ,
    REDELIVERY_CREATE, REDELIVERY_READ,
]


def unknown_roles(roles: list[str]) -> list[str]:
    return [r for r in roles if r not in ALL_ROLES]
