"""
SQLAlchemy ORM persistence models for the Procurement module.

Responsibility
--------------
Database-backed persistence for purchase orders, their line items and the
status history written on every transition.

Architecture position
---------------------
**Modules layer** -- ORM models consumed by ``PurchaseOrderService``,
``OrderLifecycle``, ``ReceivingProcessor`` and ``PurchaseOrderSelector``.
Inherits from ``TrackedBase`` (kernel db layer).

Invariants enforced
-------------------
* All monetary fields use ``Decimal`` (Numeric(38,9)) -- NEVER float.
* Status stored as String(50).
* ``order_number`` is unique once assigned.
* ``0 <= lost_quantity <= quantity`` and ``quantity >= 1`` (check
  constraints).
* Items and history rows belong to exactly one order and are removed with it.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sourcing_kernel.db.base import TrackedBase
from sourcing_kernel.db.types import ensure_utc

# ---------------------------------------------------------------------------
# PurchaseOrderModel
# ---------------------------------------------------------------------------


class PurchaseOrderModel(TrackedBase):
    """
    A purchase order placed with a foreign supplier.

    Maps to the ``PurchaseOrder`` DTO in ``sourcing_modules.procurement.models``.

    Guarantees:
        - ``order_number`` is NULL in draft and assigned at payment confirmation.
        - ``exchange_rate`` is written once, at payment confirmation.
    """

    __tablename__ = "purchase_orders"

    __table_args__ = (
        UniqueConstraint("order_number", name="uq_purchase_order_number"),
        Index("idx_purchase_order_supplier", "supplier_id"),
        Index("idx_purchase_order_status", "status"),
        Index("idx_purchase_order_date", "order_date"),
    )

    supplier_id: Mapped[UUID] = mapped_column(ForeignKey("suppliers.id"), nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="draft")
    order_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    order_date: Mapped[date] = mapped_column(Date, nullable=False)
    expected_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    exchange_rate: Mapped[Decimal | None] = mapped_column(nullable=True)
    extra_cost_global: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    total_weight: Mapped[Decimal | None] = mapped_column(nullable=True)
    total_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"))

    # Shipping trail
    shipping_method: Mapped[str | None] = mapped_column(String(20), nullable=True)
    courier_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    tracking_number: Mapped[str | None] = mapped_column(String(255), nullable=True)
    lot_number: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bd_courier_tracking: Mapped[str | None] = mapped_column(String(255), nullable=True)

    costs_finalized_at: Mapped[datetime | None] = mapped_column(nullable=True)
    received_at: Mapped[datetime | None] = mapped_column(nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(nullable=True)

    items: Mapped[list["PurchaseOrderItemModel"]] = relationship(
        "PurchaseOrderItemModel",
        back_populates="purchase_order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="PurchaseOrderItemModel.line_number",
    )

    history: Mapped[list["PurchaseOrderStatusHistoryModel"]] = relationship(
        "PurchaseOrderStatusHistoryModel",
        back_populates="purchase_order",
        cascade="all, delete-orphan",
        order_by="PurchaseOrderStatusHistoryModel.sequence_number",
    )

    def item_by_id(self, item_id: UUID) -> "PurchaseOrderItemModel | None":
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def to_dto(self):
        from sourcing_modules.procurement.models import (
            PurchaseOrder,
            PurchaseOrderStatus,
            ShippingMethod,
        )

        return PurchaseOrder(
            id=self.id,
            supplier_id=self.supplier_id,
            status=PurchaseOrderStatus(self.status),
            order_number=self.order_number,
            order_date=self.order_date,
            expected_date=self.expected_date,
            exchange_rate=self.exchange_rate,
            extra_cost_global=self.extra_cost_global,
            total_weight=self.total_weight,
            shipping_method=ShippingMethod(self.shipping_method) if self.shipping_method else None,
            courier_name=self.courier_name,
            tracking_number=self.tracking_number,
            lot_number=self.lot_number,
            bd_courier_tracking=self.bd_courier_tracking,
            total_amount=self.total_amount,
            costs_finalized_at=ensure_utc(self.costs_finalized_at),
            received_at=ensure_utc(self.received_at),
            completed_at=ensure_utc(self.completed_at),
            items=tuple(item.to_dto() for item in self.items),
        )

    def __repr__(self) -> str:
        return f"<PurchaseOrderModel {self.order_number or self.id} [{self.status}]>"


# ---------------------------------------------------------------------------
# PurchaseOrderItemModel
# ---------------------------------------------------------------------------


class PurchaseOrderItemModel(TrackedBase):
    """
    A purchase-order line: one product at one foreign unit price.

    Maps to the ``PurchaseOrderItem`` DTO.

    Guarantees:
        - ``received_quantity`` and ``final_unit_cost`` are NULL until the
          order is received (or finalized at completion).
    """

    __tablename__ = "purchase_order_items"

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_po_item_quantity"),
        CheckConstraint(
            "lost_quantity >= 0 AND lost_quantity <= quantity",
            name="ck_po_item_lost_quantity",
        ),
        Index("idx_po_item_order", "purchase_order_id"),
        Index("idx_po_item_product", "product_id"),
    )

    purchase_order_id: Mapped[UUID] = mapped_column(
        ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False,
    )
    line_number: Mapped[int] = mapped_column(nullable=False)
    product_id: Mapped[UUID] = mapped_column(ForeignKey("products.id"), nullable=False)
    product_variant_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("product_variants.id"), nullable=True,
    )
    china_price: Mapped[Decimal] = mapped_column(nullable=False)
    quantity: Mapped[int] = mapped_column(nullable=False)
    shipping_cost: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    lost_quantity: Mapped[int] = mapped_column(default=0)
    received_quantity: Mapped[int | None] = mapped_column(nullable=True)
    final_unit_cost: Mapped[Decimal | None] = mapped_column(nullable=True)

    purchase_order: Mapped["PurchaseOrderModel"] = relationship(
        "PurchaseOrderModel",
        back_populates="items",
    )

    def to_dto(self):
        from sourcing_modules.procurement.models import PurchaseOrderItem

        return PurchaseOrderItem(
            id=self.id,
            purchase_order_id=self.purchase_order_id,
            product_id=self.product_id,
            product_variant_id=self.product_variant_id,
            china_price=self.china_price,
            quantity=self.quantity,
            shipping_cost=self.shipping_cost,
            lost_quantity=self.lost_quantity,
            received_quantity=self.received_quantity,
            final_unit_cost=self.final_unit_cost,
        )

    def __repr__(self) -> str:
        return f"<PurchaseOrderItemModel {self.line_number}: {self.quantity} x {self.china_price}>"


# ---------------------------------------------------------------------------
# PurchaseOrderStatusHistoryModel
# ---------------------------------------------------------------------------


class PurchaseOrderStatusHistoryModel(TrackedBase):
    """
    Append-only record of an applied transition.

    ``comments`` is the only column that may change after insert.
    """

    __tablename__ = "purchase_order_status_history"

    __table_args__ = (
        UniqueConstraint("purchase_order_id", "sequence_number", name="uq_po_history_sequence"),
    )

    purchase_order_id: Mapped[UUID] = mapped_column(
        ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False,
    )
    # 1-based position within the order's history
    sequence_number: Mapped[int] = mapped_column(nullable=False)
    from_status: Mapped[str | None] = mapped_column(String(50), nullable=True)
    to_status: Mapped[str] = mapped_column(String(50), nullable=False)
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    changed_by_id: Mapped[UUID] = mapped_column(nullable=False)
    changed_at: Mapped[datetime] = mapped_column(nullable=False)

    purchase_order: Mapped["PurchaseOrderModel"] = relationship(
        "PurchaseOrderModel",
        back_populates="history",
    )

    def to_dto(self):
        from sourcing_modules.procurement.models import (
            PurchaseOrderStatus,
            StatusHistoryEntry,
        )

        return StatusHistoryEntry(
            id=self.id,
            purchase_order_id=self.purchase_order_id,
            sequence_number=self.sequence_number,
            from_status=PurchaseOrderStatus(self.from_status) if self.from_status else None,
            to_status=PurchaseOrderStatus(self.to_status),
            comments=self.comments,
            changed_by_id=self.changed_by_id,
            changed_at=ensure_utc(self.changed_at),
        )

    def __repr__(self) -> str:
        return f"<PurchaseOrderStatusHistoryModel {self.from_status} -> {self.to_status}>"
