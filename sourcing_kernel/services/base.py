"""
BaseService -- abstract base for flush-only services.

Responsibility:
    Common constructor and session-handling contract for services that
    participate in a caller-owned transaction.  Subclasses use
    ``session.flush()`` -- never ``session.commit()``.

Architecture position:
    Kernel > Services.  Extended by the stock account service, the variant
    cost writer and the receiving processor.  The purchase-order service is
    the transaction owner and does not extend this class.

Failure modes:
    - A subclass that commits breaks the all-or-nothing guarantee of a
      purchase-order transition.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from sourcing_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for flush-only services.

    Guarantees:
        - The service never calls ``session.commit()`` or
          ``session.rollback()``; the caller controls transaction boundaries.

    Non-goals:
        - Read-only queries belong in selectors.
    """

    def __init__(self, session: Session):
        self.session = session
