"""
Procurement Module (``sourcing_modules.procurement``).

Responsibility
--------------
The import purchase-order lifecycle: draft, payment confirmation, supplier
dispatch, shipment to Bangladesh, customs arrival, domestic transit to the
Bogura hub, hub receipt with landed-cost finalization, and completion, with
``lost`` reachable from any open stage.

Architecture position
---------------------
**Modules layer** -- declarative workflow, stage-keyed validation, ORM,
a receiving processor, and a service facade that owns the transaction.

Invariants enforced
-------------------
* Only the next stage (or ``lost``) is reachable; terminal states absorb.
* Hub receipt is all-or-nothing: landed costs, variant costs and stock
  accounts are written in the same transaction as the status change.
* Every transition leaves a status-history row.
"""

from sourcing_modules.procurement.lifecycle import OrderLifecycle
from sourcing_modules.procurement.models import (
    ArriveInBangladesh,
    CompleteOrder,
    ConfirmPayment,
    CreateOrderRequest,
    DispatchFromSupplier,
    DispatchToHub,
    ItemShippingUpdate,
    MarkLost,
    OrderLineRequest,
    OrderStatistics,
    PurchaseOrder,
    PurchaseOrderItem,
    PurchaseOrderStatus,
    ReceiptLine,
    ReceiveAtHub,
    ReceiveOrderRequest,
    ShippingMethod,
    ShipToBangladesh,
    StatusHistoryEntry,
    VariantReceipt,
)
from sourcing_modules.procurement.receiving import ReceivingProcessor
from sourcing_modules.procurement.selector import PurchaseOrderSelector
from sourcing_modules.procurement.service import PurchaseOrderService
from sourcing_modules.procurement.workflows import PURCHASE_ORDER_WORKFLOW

__all__ = [
    "PurchaseOrder",
    "PurchaseOrderItem",
    "PurchaseOrderStatus",
    "StatusHistoryEntry",
    "OrderStatistics",
    "ShippingMethod",
    "CreateOrderRequest",
    "OrderLineRequest",
    "ConfirmPayment",
    "DispatchFromSupplier",
    "ShipToBangladesh",
    "ArriveInBangladesh",
    "ItemShippingUpdate",
    "DispatchToHub",
    "ReceiveAtHub",
    "ReceiveOrderRequest",
    "ReceiptLine",
    "VariantReceipt",
    "CompleteOrder",
    "MarkLost",
    "PURCHASE_ORDER_WORKFLOW",
    "OrderLifecycle",
    "ReceivingProcessor",
    "PurchaseOrderService",
    "PurchaseOrderSelector",
]
