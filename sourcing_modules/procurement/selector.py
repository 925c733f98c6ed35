"""
Module: sourcing_modules.procurement.selector
Responsibility: Read-only queries over purchase orders: filtered listing,
    status history and dashboard statistics.
Architecture position: Modules > Procurement.  Extends the kernel
    BaseSelector.  Never adds, flushes or commits.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, or_, select

from sourcing_kernel.exceptions import PurchaseOrderNotFoundError
from sourcing_kernel.selectors.base import BaseSelector
from sourcing_modules.procurement.models import (
    ACTIVE_STATUSES,
    OrderStatistics,
    PurchaseOrder,
    PurchaseOrderStatus,
    StatusHistoryEntry,
)
from sourcing_modules.procurement.orm import (
    PurchaseOrderModel,
    PurchaseOrderStatusHistoryModel,
)


class PurchaseOrderSelector(BaseSelector[PurchaseOrderModel]):
    """Queries for the purchase-order list, detail history and statistics."""

    def list_orders(
        self,
        status: PurchaseOrderStatus | None = None,
        supplier_id: UUID | None = None,
        search: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[PurchaseOrder]:
        """
        Orders newest first.

        ``search`` matches order number, lot number or either tracking number
        (case-insensitive substring).
        """
        stmt = select(PurchaseOrderModel)
        if status is not None:
            stmt = stmt.where(PurchaseOrderModel.status == status.value)
        if supplier_id is not None:
            stmt = stmt.where(PurchaseOrderModel.supplier_id == supplier_id)
        if search:
            pattern = f"%{search.strip().lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(PurchaseOrderModel.order_number).like(pattern),
                    func.lower(PurchaseOrderModel.lot_number).like(pattern),
                    func.lower(PurchaseOrderModel.tracking_number).like(pattern),
                    func.lower(PurchaseOrderModel.bd_courier_tracking).like(pattern),
                )
            )
        stmt = (
            stmt.order_by(
                PurchaseOrderModel.order_date.desc(),
                PurchaseOrderModel.order_number.desc(),
                PurchaseOrderModel.id,
            )
            .limit(limit)
            .offset(offset)
        )
        return [row.to_dto() for row in self.session.execute(stmt).scalars().all()]

    def status_history(self, order_id: UUID) -> list[StatusHistoryEntry]:
        """History rows of an order, oldest first."""
        if self.session.get(PurchaseOrderModel, order_id) is None:
            raise PurchaseOrderNotFoundError(str(order_id))
        rows = self.session.execute(
            select(PurchaseOrderStatusHistoryModel)
            .where(PurchaseOrderStatusHistoryModel.purchase_order_id == order_id)
            .order_by(PurchaseOrderStatusHistoryModel.sequence_number)
        ).scalars().all()
        return [row.to_dto() for row in rows]

    def statistics(self) -> OrderStatistics:
        counts: dict[str, int] = dict(
            self.session.execute(
                select(PurchaseOrderModel.status, func.count(PurchaseOrderModel.id))
                .group_by(PurchaseOrderModel.status)
            ).all()
        )
        total_value = self.session.execute(
            select(func.coalesce(func.sum(PurchaseOrderModel.total_amount), 0))
        ).scalar_one()

        return OrderStatistics(
            total=sum(counts.values()),
            draft=counts.get(PurchaseOrderStatus.DRAFT.value, 0),
            active=sum(counts.get(s.value, 0) for s in ACTIVE_STATUSES),
            completed=counts.get(PurchaseOrderStatus.COMPLETED.value, 0),
            lost=counts.get(PurchaseOrderStatus.LOST.value, 0),
            total_value=Decimal(str(total_value)),
        )
