"""
SequenceService -- monotonic sequence allocation via locked counter rows.

Responsibility:
    Provides strictly increasing numbers for named sequences.  Purchase-order
    numbers (``PO-YYYYMMDD-N``) draw ``N`` from a per-day sequence so two
    orders confirmed on the same day can never share a number.

Architecture position:
    Kernel > Services.  Called by the purchase-order lifecycle when an order
    enters payment_confirmed.

Invariants enforced:
    - The locked counter row is the sole source of truth for the next value.
      Counting existing orders and adding one is never used; it races.
    - Transactional: an increment is visible only after the caller commits.
      A rollback returns the value.

Failure modes:
    - IntegrityError on a concurrent counter-creation race (handled via
      savepoint rollback and retry).
"""

from sqlalchemy import BigInteger, String, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Mapped, Session, mapped_column

from sourcing_kernel.db.base import Base
from sourcing_kernel.logging_config import get_logger

logger = get_logger("services.sequence")


class SequenceCounter(Base):
    """
    Sequence counter table.

    One row per named sequence holding its current value.
    """

    __tablename__ = "sequence_counters"

    # e.g. "purchase_order:20240101"
    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
    )

    current_value: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
    )


class SequenceService:
    """
    Service for generating transactional sequence numbers.

    Guarantees:
        - Strictly increasing values per sequence name.
        - ``SELECT ... FOR UPDATE`` serializes concurrent allocations for the
          same sequence.

    Non-goals:
        - Does NOT call ``session.commit()``; the caller controls boundaries.

    Usage:
        seq = SequenceService(session).next_value("purchase_order:20240101")
    """

    PURCHASE_ORDER = "purchase_order"

    def __init__(self, session: Session):
        self._session = session

    @classmethod
    def daily_name(cls, prefix: str, day) -> str:
        """Sequence name scoped to one calendar day, e.g. ``purchase_order:20240101``."""
        return f"{prefix}:{day:%Y%m%d}"

    def _lock_counter(self, sequence_name: str) -> SequenceCounter | None:
        return self._session.execute(
            select(SequenceCounter)
            .where(SequenceCounter.name == sequence_name)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def next_value(self, sequence_name: str) -> int:
        """
        Get the next value for a named sequence.

        Locks the sequence row (creating it on first use), increments it and
        returns the new value.  The increment commits with the caller's
        transaction.

        Returns:
            The next sequence value (always > 0).
        """
        counter = self._lock_counter(sequence_name)

        if counter is None:
            # First use.  A concurrent transaction may create the same row;
            # the savepoint keeps the caller's other work intact.
            savepoint = self._session.begin_nested()
            try:
                counter = SequenceCounter(name=sequence_name, current_value=1)
                self._session.add(counter)
                self._session.flush()
                savepoint.commit()
                logger.debug(
                    "sequence_allocated",
                    extra={"sequence_name": sequence_name, "value": 1},
                )
                return 1
            except IntegrityError:
                logger.debug(
                    "sequence_counter_race_retry",
                    extra={"sequence_name": sequence_name},
                )
                savepoint.rollback()
                counter = self._lock_counter(sequence_name)
                if counter is None:
                    raise

        counter.current_value += 1
        self._session.flush()
        logger.debug(
            "sequence_allocated",
            extra={"sequence_name": sequence_name, "value": counter.current_value},
        )
        return counter.current_value

    def current_value(self, sequence_name: str) -> int | None:
        """Current value of a sequence without incrementing, or None."""
        counter = self._session.execute(
            select(SequenceCounter)
            .where(SequenceCounter.name == sequence_name)
        ).scalar_one_or_none()

        return counter.current_value if counter else None
