"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Provides the common constructor and session-handling contract for
    every write-side service.  Concrete services receive a SQLAlchemy
    ``Session`` and persist through ``session.flush()`` -- never
    ``session.commit()``.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.

Invariants enforced:
    - Transaction boundaries belong to the caller (``session_scope()``, the
      CLI, or the test harness).  Services flush and never commit or roll
      back, so a failed operation leaves nothing behind once the caller
      rolls back.

Failure modes:
    - Storage errors (``sqlalchemy.exc.SQLAlchemyError``) propagate as-is;
      there is no retry.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from mileage_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for all kernel services.

    Guarantees:
        - The service never calls ``session.commit()`` or
          ``session.rollback()``.

    Non-goals:
        - Does NOT provide read-only listings -- those belong in
          ``mileage_kernel/selectors/``.
    """

    def __init__(self, session: Session):
        """
        Initialize the service.

        Preconditions:
            - ``session`` is a valid, open SQLAlchemy session.
        """
        self.session = session
