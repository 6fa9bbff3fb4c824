"""
Acting-user context (``mileage_kernel.domain.context``).

Responsibility
--------------
Carries the identity and role of whoever is calling a service.  Every
mutating operation takes an explicit ``ActorContext`` instead of reading a
logged-in user from shared state, and checks it here before touching
storage.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects and checks.  ZERO I/O.

Invariants enforced
-------------------
* Admin-only operations refuse employee actors.
* An employee may only act on their own driver id.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from mileage_kernel.domain.dtos import UserRole
from mileage_kernel.exceptions import PermissionDeniedError


@dataclass(frozen=True)
class ActorContext:
    """Who is performing an operation.

    For employees ``driver_id`` equals ``actor_id``; admins have no driver id.
    """

    actor_id: UUID
    role: UserRole
    driver_id: UUID | None = None

    @classmethod
    def admin(cls, actor_id: UUID) -> ActorContext:
        return cls(actor_id=actor_id, role=UserRole.ADMIN)

    @classmethod
    def for_driver(cls, driver_id: UUID) -> ActorContext:
        return cls(actor_id=driver_id, role=UserRole.EMPLOYEE, driver_id=driver_id)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def check_access(
    actor: ActorContext,
    admin_only: bool,
    driver_id: UUID | None = None,
) -> tuple[bool, str]:
    """Return (allowed, reason); reason is empty when allowed."""
    if actor.is_admin:
        return (True, "")
    if admin_only:
        return (False, "administrator role required")
    if driver_id is not None and actor.driver_id != driver_id:
        return (False, "drivers may only act on their own records")
    return (True, "")


def require_admin(actor: ActorContext, operation: str) -> None:
    """Raise PermissionDeniedError unless the actor is an admin."""
    allowed, reason = check_access(actor, admin_only=True)
    if not allowed:
        raise PermissionDeniedError(str(actor.actor_id), operation, reason)


def require_driver_access(
    actor: ActorContext, driver_id: UUID, operation: str
) -> None:
    """Raise PermissionDeniedError unless the actor is an admin or that driver."""
    allowed, reason = check_access(actor, admin_only=False, driver_id=driver_id)
    if not allowed:
        raise PermissionDeniedError(str(actor.actor_id), operation, reason)
