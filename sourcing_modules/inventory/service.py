"""
Inventory Stock Services (``sourcing_modules.inventory.service``).

Responsibility
--------------
Credit received goods to per-variant stock accounts with a running weighted
average unit cost, and record the landed cost on the variant itself.

Architecture position
---------------------
**Modules layer** -- flush-only services built on the kernel
``BaseService``.  Called by the procurement receiving processor inside the
purchase-order service's transaction; they never commit.

Invariants enforced
-------------------
* ``quantity`` only grows through ``add_stock``; it is never negative.
* Weighted average:
  ``new_avg = (old_qty * old_avg + qty * unit_cost) / (old_qty + qty)``.
  An account with no prior average takes ``unit_cost`` as its average.
* ``total_value == quantity * average_unit_cost`` after every call.
* The account row is read with ``SELECT ... FOR UPDATE`` so concurrent
  receipts into the same variant serialize.

Failure modes
-------------
* ``InvalidStockQuantityError`` -- quantity <= 0 or negative unit cost.
* ``VariantNotFoundError`` -- landed cost written for an unknown variant.
* ``StockAccountNotFoundError`` -- ``get_account`` for a never-stocked variant.

Audit relevance
---------------
``stock_added`` is logged with before/after quantity and average for every
credit.  ``add_stock`` is not idempotent; replaying a receipt adds stock
twice, so receipts are guarded at the purchase-order level.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from sourcing_kernel.db.types import ZERO
from sourcing_kernel.domain.clock import Clock, SystemClock
from sourcing_kernel.exceptions import (
    InvalidStockQuantityError,
    StockAccountNotFoundError,
    VariantNotFoundError,
)
from sourcing_kernel.logging_config import get_logger
from sourcing_kernel.services.base import BaseService
from sourcing_modules.catalog.orm import ProductVariantModel
from sourcing_modules.inventory.models import StockAccount
from sourcing_modules.inventory.orm import StockAccountModel

logger = get_logger("modules.inventory.service")


class StockAccountService(BaseService[StockAccountModel]):
    """
    Stock-on-hand ledger per product variant.

    Contract
    --------
    * ``add_stock`` flushes within the caller's transaction.
    * Accounts are created on first stocking; callers never pre-create them.
    """

    def __init__(self, session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    def _lock_account(self, variant_id: UUID) -> StockAccountModel | None:
        return self.session.execute(
            select(StockAccountModel)
            .where(StockAccountModel.product_variant_id == variant_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def _get_or_create_locked(self, variant_id: UUID, actor_id: UUID) -> StockAccountModel:
        account = self._lock_account(variant_id)
        if account is not None:
            return account

        savepoint = self.session.begin_nested()
        try:
            account = StockAccountModel(
                product_variant_id=variant_id,
                quantity=0,
                reserved_quantity=0,
                total_value=ZERO,
                created_by_id=actor_id,
            )
            self.session.add(account)
            self.session.flush()
            savepoint.commit()
            logger.info(
                "stock_account_created",
                extra={"product_variant_id": str(variant_id)},
            )
            return account
        except IntegrityError:
            logger.debug(
                "stock_account_create_race_retry",
                extra={"product_variant_id": str(variant_id)},
            )
            savepoint.rollback()
            account = self._lock_account(variant_id)
            if account is None:
                raise
            return account

    def add_stock(
        self,
        variant_id: UUID,
        quantity: int,
        unit_cost: Decimal | None,
        actor_id: UUID,
    ) -> StockAccount:
        """
        Credit ``quantity`` units of a variant at ``unit_cost``.

        When ``unit_cost`` is None the average is left as it is and the
        stock value is re-derived from it.

        Returns:
            The account after the credit.
        """
        if quantity <= 0 or (unit_cost is not None and unit_cost < 0):
            raise InvalidStockQuantityError(str(variant_id), quantity, unit_cost)

        account = self._get_or_create_locked(variant_id, actor_id)

        old_quantity = account.quantity
        old_average = account.average_unit_cost
        new_quantity = old_quantity + quantity

        if unit_cost is None:
            new_average = old_average
        elif old_average is None or old_quantity == 0:
            new_average = unit_cost
        else:
            new_average = (
                Decimal(old_quantity) * old_average + Decimal(quantity) * unit_cost
            ) / Decimal(new_quantity)

        account.quantity = new_quantity
        account.average_unit_cost = new_average
        if unit_cost is not None:
            account.last_unit_cost = unit_cost
        account.total_value = Decimal(new_quantity) * (new_average or ZERO)
        account.last_stocked_at = self._clock.now()
        account.updated_by_id = actor_id
        self.session.flush()

        logger.info(
            "stock_added",
            extra={
                "product_variant_id": str(variant_id),
                "quantity_added": quantity,
                "unit_cost": str(unit_cost) if unit_cost is not None else None,
                "quantity_before": old_quantity,
                "quantity_after": new_quantity,
                "average_before": str(old_average) if old_average is not None else None,
                "average_after": str(new_average) if new_average is not None else None,
            },
        )

        return account.to_dto()

    def get_account(self, variant_id: UUID) -> StockAccount:
        """Current stock account of a variant."""
        account = self.session.execute(
            select(StockAccountModel)
            .where(StockAccountModel.product_variant_id == variant_id)
        ).scalar_one_or_none()
        if account is None:
            raise StockAccountNotFoundError(str(variant_id))
        return account.to_dto()


class VariantCostWriter(BaseService[ProductVariantModel]):
    """Writes the landed cost computed at receipt onto the product variant."""

    def set_landed_cost(
        self,
        variant_id: UUID,
        landed_cost: Decimal,
        actor_id: UUID,
    ) -> None:
        variant = self.session.get(ProductVariantModel, variant_id)
        if variant is None:
            raise VariantNotFoundError(str(variant_id))

        previous = variant.landed_cost
        variant.landed_cost = landed_cost
        variant.updated_by_id = actor_id
        self.session.flush()

        logger.info(
            "variant_landed_cost_updated",
            extra={
                "product_variant_id": str(variant_id),
                "previous_landed_cost": str(previous) if previous is not None else None,
                "landed_cost": str(landed_cost),
            },
        )
