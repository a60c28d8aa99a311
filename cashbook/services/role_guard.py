"""Role guard: pure allow/deny decision for a resolved identity and an optional required role."""

from dataclasses import dataclass
from typing import Literal

from cashbook.models.user import RoleName
from cashbook.schemas.auth import CurrentUser

DenyReason = Literal["not_authenticated", "insufficient_role"]

NOT_AUTHENTICATED: DenyReason = "not_authenticated"
INSUFFICIENT_ROLE: DenyReason = "insufficient_role"


@dataclass(frozen=True)
class Allow:
    identity: CurrentUser


@dataclass(frozen=True)
class Deny:
    reason: DenyReason
    user_role: RoleName | None = None
    required_role: RoleName | None = None


Decision = Allow | Deny


def authorize(
    identity: CurrentUser | None,
    required_role: RoleName | None = None,
) -> Decision:
    """
    Decide whether identity may proceed.

    - No identity: Deny(not_authenticated), whatever the required role.
    - No required role: Allow for any authenticated identity.
    - Otherwise Allow only on an exact role match; Deny(insufficient_role)
      carries both roles for the error body.
    """
    if identity is None:
        return Deny(reason=NOT_AUTHENTICATED, required_role=required_role)
    if required_role is None or identity.role == required_role:
        return Allow(identity=identity)
    return Deny(
        reason=INSUFFICIENT_ROLE,
        user_role=identity.role,
        required_role=required_role,
    )
