"""
Goods receipt at the hub (``sourcing_modules.procurement.receiving``).

Responsibility
--------------
Turn a hub receipt into landed costs and stock.  For every line item the
processor allocates the landed cost, checks that the received variant split
accounts for every surviving unit, writes the cost back to the line and the
variants, and credits each variant's stock account.

Architecture position
---------------------
**Modules layer** -- flush-only service.  Runs inside the purchase-order
service's transaction via ``OrderLifecycle``; never commits.

Invariants enforced
-------------------
* Two phases.  ``plan`` reads and validates only; ``apply`` writes only
  after the whole receipt has been planned.
* Every line item is received exactly once per receipt.
* Sum of received variant quantities == effective quantity of the line.
* Every received variant belongs to the line's product.
* A fully lost line keeps the variants' previous landed cost.

Failure modes
-------------
* ``PurchaseOrderItemNotFoundError`` -- receipt names an item not on the order.
* ``DuplicateReceiptError`` -- the same item appears twice.
* ``MissingRequiredFieldError`` -- an order item has no receipt.
* ``InvalidAllocationInputError`` -- allocator rejected the line.
* ``ReceiptQuantityMismatchError`` -- variant split does not add up.
* ``VariantNotFoundError`` / ``VariantProductMismatchError`` -- bad variant.

Audit relevance
---------------
``po_receipt_planned`` and ``po_receipt_applied`` log per-line landed cost
components, so a stored ``final_unit_cost`` can be traced to its inputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sourcing_engines.landed_cost import LandedCostAllocator, LandedCostLine, LandedCostResult
from sourcing_kernel.domain.clock import Clock, SystemClock
from sourcing_kernel.exceptions import (
    DuplicateReceiptError,
    MissingRequiredFieldError,
    PurchaseOrderItemNotFoundError,
    ReceiptQuantityMismatchError,
    VariantProductMismatchError,
)
from sourcing_kernel.logging_config import get_logger
from sourcing_kernel.services.base import BaseService
from sourcing_modules.catalog.selector import CatalogSelector
from sourcing_modules.inventory.service import StockAccountService, VariantCostWriter
from sourcing_modules.procurement.models import PurchaseOrderStatus, ReceiptLine, ReceiveAtHub
from sourcing_modules.procurement.orm import PurchaseOrderItemModel, PurchaseOrderModel

logger = get_logger("modules.procurement.receiving")


@dataclass(frozen=True)
class PlannedLine:
    """One validated line of a receipt with its allocated cost."""
    item: PurchaseOrderItemModel
    receipt: ReceiptLine
    shipping_cost: Decimal
    cost: LandedCostResult


@dataclass(frozen=True)
class ReceivingPlan:
    """A fully validated receipt, ready to apply."""
    order_id: UUID
    lines: tuple[PlannedLine, ...]
    extra_cost_global: Decimal
    total_weight: Decimal

    @property
    def units_received(self) -> int:
        return sum(line.cost.effective_quantity for line in self.lines)

    @property
    def units_lost(self) -> int:
        return sum(line.receipt.lost_quantity for line in self.lines)


def _line_input(item: PurchaseOrderItemModel, shipping_cost: Decimal, lost_quantity: int) -> LandedCostLine:
    return LandedCostLine(
        item_id=item.id,
        china_price=item.china_price,
        quantity=item.quantity,
        shipping_cost=shipping_cost,
        lost_quantity=lost_quantity,
    )


class ReceivingProcessor(BaseService[PurchaseOrderItemModel]):
    """
    Plans and applies hub receipts.

    Contract
    --------
    * ``plan`` never writes.  ``apply`` never raises a validation error for
      a plan produced by ``plan`` against the same locked order.
    """

    def __init__(
        self,
        session,
        clock: Clock | None = None,
        allocator: LandedCostAllocator | None = None,
        stock: StockAccountService | None = None,
        variant_costs: VariantCostWriter | None = None,
        catalog: CatalogSelector | None = None,
    ):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._allocator = allocator or LandedCostAllocator()
        self._stock = stock or StockAccountService(session, clock=self._clock)
        self._variant_costs = variant_costs or VariantCostWriter(session)
        self._catalog = catalog or CatalogSelector(session)

    # =========================================================================
    # Plan
    # =========================================================================

    def plan(self, order: PurchaseOrderModel, request: ReceiveAtHub) -> ReceivingPlan:
        """Validate a receipt against the order and allocate every line."""
        receipts: dict[UUID, ReceiptLine] = {}
        for line in request.items:
            if order.item_by_id(line.po_item_id) is None:
                raise PurchaseOrderItemNotFoundError(str(order.id), str(line.po_item_id))
            if line.po_item_id in receipts:
                raise DuplicateReceiptError(str(line.po_item_id))
            receipts[line.po_item_id] = line

        for item in order.items:
            if item.id not in receipts:
                raise MissingRequiredFieldError(
                    PurchaseOrderStatus.RECEIVED_HUB.value, f"items[{item.id}]"
                )

        extra = (
            request.extra_cost_global
            if request.extra_cost_global is not None
            else order.extra_cost_global
        )
        total_ordered = sum(item.quantity for item in order.items)

        planned: list[PlannedLine] = []
        for item in order.items:
            receipt = receipts[item.id]
            shipping = receipt.shipping_cost if receipt.shipping_cost is not None else item.shipping_cost
            cost = self._allocator.allocate(
                line=_line_input(item, shipping, receipt.lost_quantity),
                exchange_rate=order.exchange_rate,
                extra_cost_global=extra,
                total_ordered_quantity=total_ordered,
            )

            received = sum(v.quantity for v in receipt.received_variants)
            if received != cost.effective_quantity:
                raise ReceiptQuantityMismatchError(
                    str(item.id), cost.effective_quantity, received
                )

            for variant_receipt in receipt.received_variants:
                variant = self._catalog.get_variant(variant_receipt.variant_id)
                if variant.product_id != item.product_id:
                    raise VariantProductMismatchError(
                        str(item.id), str(variant.id), str(item.product_id)
                    )

            planned.append(PlannedLine(item=item, receipt=receipt, shipping_cost=shipping, cost=cost))

        plan = ReceivingPlan(
            order_id=order.id,
            lines=tuple(planned),
            extra_cost_global=extra,
            total_weight=request.total_weight,
        )

        logger.info(
            "po_receipt_planned",
            extra={
                "order_id": str(order.id),
                "line_count": len(plan.lines),
                "units_received": plan.units_received,
                "units_lost": plan.units_lost,
                "extra_cost_global": str(extra),
            },
        )
        return plan

    # =========================================================================
    # Apply
    # =========================================================================

    def apply(self, order: PurchaseOrderModel, plan: ReceivingPlan, actor_id: UUID) -> None:
        """Write a planned receipt: line costs, variant landed costs, stock."""
        for line in plan.lines:
            item, cost = line.item, line.cost
            item.shipping_cost = line.shipping_cost
            item.lost_quantity = line.receipt.lost_quantity
            item.received_quantity = cost.effective_quantity
            item.final_unit_cost = cost.final_unit_cost
            item.updated_by_id = actor_id

            for variant_receipt in line.receipt.received_variants:
                if not cost.fully_lost:
                    self._variant_costs.set_landed_cost(
                        variant_receipt.variant_id, cost.final_unit_cost, actor_id
                    )
                if variant_receipt.quantity > 0:
                    self._stock.add_stock(
                        variant_receipt.variant_id,
                        variant_receipt.quantity,
                        cost.final_unit_cost,
                        actor_id,
                    )

            logger.info(
                "po_item_received",
                extra={
                    "order_id": str(order.id),
                    "po_item_id": str(item.id),
                    "base_cost": str(cost.base_cost),
                    "shipping_cost": str(cost.shipping_cost),
                    "allocated_extra": str(cost.allocated_extra),
                    "total_line_cost": str(cost.total_line_cost),
                    "effective_quantity": cost.effective_quantity,
                    "final_unit_cost": str(cost.final_unit_cost),
                    "variant_count": len(line.receipt.received_variants),
                },
            )

        now = self._clock.now()
        order.extra_cost_global = plan.extra_cost_global
        order.total_weight = plan.total_weight
        order.costs_finalized_at = now
        order.received_at = now
        self.session.flush()

        logger.info(
            "po_receipt_applied",
            extra={
                "order_id": str(order.id),
                "units_received": plan.units_received,
                "units_lost": plan.units_lost,
            },
        )

    def receive(self, order: PurchaseOrderModel, request: ReceiveAtHub, actor_id: UUID) -> ReceivingPlan:
        """Plan then apply.  Nothing is written if planning fails."""
        plan = self.plan(order, request)
        self.apply(order, plan, actor_id)
        return plan

    # =========================================================================
    # Finalization without receipt
    # =========================================================================

    def finalize_costs(self, order: PurchaseOrderModel, actor_id: UUID) -> tuple[LandedCostResult, ...]:
        """
        Allocate landed cost from the lines as recorded, without touching stock.

        Used when an order reaches completion without a finalized receipt.
        Lines with no recorded receipt are treated as fully arrived.
        """
        results = self._allocator.allocate_order(
            [_line_input(item, item.shipping_cost, item.lost_quantity) for item in order.items],
            order.exchange_rate,
            order.extra_cost_global,
        )
        for item, cost in zip(order.items, results):
            if item.received_quantity is None:
                item.received_quantity = cost.effective_quantity
            item.final_unit_cost = cost.final_unit_cost
            item.updated_by_id = actor_id
            if item.product_variant_id is not None and not cost.fully_lost:
                self._variant_costs.set_landed_cost(
                    item.product_variant_id, cost.final_unit_cost, actor_id
                )

        order.costs_finalized_at = self._clock.now()
        self.session.flush()

        logger.info(
            "po_costs_finalized",
            extra={"order_id": str(order.id), "line_count": len(results)},
        )
        return results
