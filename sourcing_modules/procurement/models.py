"""
Procurement Domain Models.

The nouns of the purchase-order lifecycle: orders, line items, status
history, and the tagged request structs a caller submits to move an order
from one stage to the next.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Union
from uuid import UUID

from sourcing_kernel.logging_config import get_logger

logger = get_logger("modules.procurement.models")


class PurchaseOrderStatus(Enum):
    """Purchase order lifecycle states, in shipping order."""
    DRAFT = "draft"
    PAYMENT_CONFIRMED = "payment_confirmed"
    SUPPLIER_DISPATCHED = "supplier_dispatched"
    SHIPPED_BD = "shipped_bd"
    ARRIVED_BD = "arrived_bd"
    IN_TRANSIT_BOGURA = "in_transit_bogura"
    RECEIVED_HUB = "received_hub"
    COMPLETED = "completed"
    LOST = "lost"

    @property
    def is_terminal(self) -> bool:
        return self in (PurchaseOrderStatus.COMPLETED, PurchaseOrderStatus.LOST)


ACTIVE_STATUSES = tuple(
    s for s in PurchaseOrderStatus
    if s is not PurchaseOrderStatus.DRAFT and not s.is_terminal
)


class ShippingMethod(Enum):
    AIR = "air"
    SEA = "sea"


# -----------------------------------------------------------------------------
# Read models
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class PurchaseOrderItem:
    """A line item on a purchase order."""
    id: UUID
    purchase_order_id: UUID
    product_id: UUID
    china_price: Decimal
    quantity: int
    product_variant_id: UUID | None = None
    shipping_cost: Decimal = Decimal("0")
    lost_quantity: int = 0
    received_quantity: int | None = None
    final_unit_cost: Decimal | None = None

    def __post_init__(self):
        if self.lost_quantity < 0 or self.lost_quantity > self.quantity:
            logger.warning(
                "po_item_lost_quantity_out_of_range",
                extra={
                    "po_item_id": str(self.id),
                    "quantity": self.quantity,
                    "lost_quantity": self.lost_quantity,
                },
            )
            raise ValueError(
                f"lost_quantity ({self.lost_quantity}) must be between 0 and "
                f"quantity ({self.quantity})"
            )

    @property
    def effective_quantity(self) -> int:
        return self.quantity - self.lost_quantity


@dataclass(frozen=True)
class PurchaseOrder:
    """A purchase order with its line items."""
    id: UUID
    supplier_id: UUID
    status: PurchaseOrderStatus
    order_date: date
    expected_date: date | None = None
    order_number: str | None = None
    exchange_rate: Decimal | None = None
    extra_cost_global: Decimal = Decimal("0")
    total_weight: Decimal | None = None
    shipping_method: ShippingMethod | None = None
    courier_name: str | None = None
    tracking_number: str | None = None
    lot_number: str | None = None
    bd_courier_tracking: str | None = None
    total_amount: Decimal = Decimal("0")
    costs_finalized_at: datetime | None = None
    received_at: datetime | None = None
    completed_at: datetime | None = None
    items: tuple[PurchaseOrderItem, ...] = field(default_factory=tuple)

    @property
    def total_ordered_quantity(self) -> int:
        return sum(item.quantity for item in self.items)


@dataclass(frozen=True)
class StatusHistoryEntry:
    """One applied transition."""
    id: UUID
    purchase_order_id: UUID
    sequence_number: int
    from_status: PurchaseOrderStatus | None
    to_status: PurchaseOrderStatus
    changed_by_id: UUID
    changed_at: datetime
    comments: str | None = None


@dataclass(frozen=True)
class OrderStatistics:
    """Counts by lifecycle bucket and the summed order value."""
    total: int
    draft: int
    active: int
    completed: int
    lost: int
    total_value: Decimal


# -----------------------------------------------------------------------------
# Requests
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class OrderLineRequest:
    product_id: UUID
    china_price: Decimal
    quantity: int
    product_variant_id: UUID | None = None


@dataclass(frozen=True)
class CreateOrderRequest:
    supplier_id: UUID
    items: tuple[OrderLineRequest, ...]
    order_date: date | None = None
    extra_cost_global: Decimal = Decimal("0")
    comments: str | None = None


@dataclass(frozen=True)
class ConfirmPayment:
    target: ClassVar[PurchaseOrderStatus] = PurchaseOrderStatus.PAYMENT_CONFIRMED
    exchange_rate: Decimal | None = None
    comments: str | None = None


@dataclass(frozen=True)
class DispatchFromSupplier:
    target: ClassVar[PurchaseOrderStatus] = PurchaseOrderStatus.SUPPLIER_DISPATCHED
    courier_name: str | None = None
    tracking_number: str | None = None
    comments: str | None = None


@dataclass(frozen=True)
class ShipToBangladesh:
    target: ClassVar[PurchaseOrderStatus] = PurchaseOrderStatus.SHIPPED_BD
    lot_number: str | None = None
    comments: str | None = None


@dataclass(frozen=True)
class ItemShippingUpdate:
    po_item_id: UUID
    shipping_cost: Decimal


@dataclass(frozen=True)
class ArriveInBangladesh:
    """Customs arrival.  Per-line shipping costs may be recorded here."""
    target: ClassVar[PurchaseOrderStatus] = PurchaseOrderStatus.ARRIVED_BD
    items: tuple[ItemShippingUpdate, ...] = ()
    shipping_method: ShippingMethod | None = None
    comments: str | None = None


@dataclass(frozen=True)
class DispatchToHub:
    target: ClassVar[PurchaseOrderStatus] = PurchaseOrderStatus.IN_TRANSIT_BOGURA
    bd_courier_tracking: str | None = None
    comments: str | None = None


@dataclass(frozen=True)
class VariantReceipt:
    variant_id: UUID
    quantity: int


@dataclass(frozen=True)
class ReceiptLine:
    """
    Receipt for one line item.

    ``shipping_cost`` of None keeps the cost recorded at arrival.
    """
    po_item_id: UUID
    received_variants: tuple[VariantReceipt, ...] = ()
    shipping_cost: Decimal | None = None
    lost_quantity: int = 0


@dataclass(frozen=True)
class ReceiveAtHub:
    """
    Goods received at the hub: finalizes landed cost and credits stock.

    ``extra_cost_global`` of None keeps the order's current extra cost.
    """
    target: ClassVar[PurchaseOrderStatus] = PurchaseOrderStatus.RECEIVED_HUB
    total_weight: Decimal | None = None
    items: tuple[ReceiptLine, ...] = ()
    extra_cost_global: Decimal | None = None
    comments: str | None = None


ReceiveOrderRequest = ReceiveAtHub


@dataclass(frozen=True)
class CompleteOrder:
    target: ClassVar[PurchaseOrderStatus] = PurchaseOrderStatus.COMPLETED
    comments: str | None = None


@dataclass(frozen=True)
class MarkLost:
    target: ClassVar[PurchaseOrderStatus] = PurchaseOrderStatus.LOST
    comments: str | None = None


TransitionRequest = Union[
    ConfirmPayment,
    DispatchFromSupplier,
    ShipToBangladesh,
    ArriveInBangladesh,
    DispatchToHub,
    ReceiveAtHub,
    CompleteOrder,
    MarkLost,
]
