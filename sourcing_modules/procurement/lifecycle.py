"""
Purchase-order state machine (``sourcing_modules.procurement.lifecycle``).

Responsibility
--------------
Apply one transition request to a locked purchase order: validate it
against the workflow and the stage rules, run the stage's side effect,
move the status, recompute the order total and append a history row.

Architecture position
---------------------
**Modules layer** -- flush-only.  ``PurchaseOrderService`` locks the order,
calls ``OrderLifecycle.apply`` and owns commit/rollback.

Invariants enforced
-------------------
* Only the next state on the forward path, or ``lost``, is reachable.
  ``completed`` and ``lost`` are terminal; ``received_hub`` is entered once.
* ``exchange_rate`` is written once, at payment confirmation.
* Every applied transition appends exactly one history row.
* ``total_amount`` is recomputed after every transition.
* ``lost`` has no side effect: no receiving, no stock movement.

Failure modes
-------------
* Any validation or receiving error raised before the first write; the
  caller rolls back regardless.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta
from typing import Any
from uuid import UUID

from sourcing_config.schema import ProcurementConfig
from sourcing_engines.landed_cost import LandedCostLine, summarize_order
from sourcing_kernel.db.types import round_money
from sourcing_kernel.domain.clock import Clock, SystemClock
from sourcing_kernel.exceptions import PurchaseOrderItemNotFoundError
from sourcing_kernel.logging_config import get_logger
from sourcing_kernel.services.sequence_service import SequenceService
from sourcing_modules.procurement.models import (
    ArriveInBangladesh,
    CompleteOrder,
    ConfirmPayment,
    DispatchFromSupplier,
    DispatchToHub,
    MarkLost,
    PurchaseOrderStatus,
    ReceiveAtHub,
    ShipToBangladesh,
    TransitionRequest,
)
from sourcing_modules.procurement.orm import (
    PurchaseOrderModel,
    PurchaseOrderStatusHistoryModel,
)
from sourcing_modules.procurement.receiving import ReceivingProcessor
from sourcing_modules.procurement.validation import validate_transition

logger = get_logger("modules.procurement.lifecycle")


class OrderLifecycle:
    """
    Interprets ``PURCHASE_ORDER_WORKFLOW`` for one order at a time.

    Each stage handler performs the stage's writes and returns an automatic
    history comment (or None).
    """

    def __init__(
        self,
        session,
        clock: Clock | None = None,
        config: ProcurementConfig | None = None,
        receiving: ReceivingProcessor | None = None,
        sequences: SequenceService | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or ProcurementConfig()
        self._receiving = receiving or ReceivingProcessor(session, clock=self._clock)
        self._sequences = sequences or SequenceService(session)

        self._handlers: dict[PurchaseOrderStatus, Callable[[PurchaseOrderModel, Any, UUID], str | None]] = {
            PurchaseOrderStatus.PAYMENT_CONFIRMED: self._confirm_payment,
            PurchaseOrderStatus.SUPPLIER_DISPATCHED: self._dispatch_from_supplier,
            PurchaseOrderStatus.SHIPPED_BD: self._ship_to_bangladesh,
            PurchaseOrderStatus.ARRIVED_BD: self._arrive_in_bangladesh,
            PurchaseOrderStatus.IN_TRANSIT_BOGURA: self._dispatch_to_hub,
            PurchaseOrderStatus.RECEIVED_HUB: self._receive_at_hub,
            PurchaseOrderStatus.COMPLETED: self._complete,
            PurchaseOrderStatus.LOST: self._mark_lost,
        }

    # =========================================================================
    # Creation helpers
    # =========================================================================

    def expected_date_for(self, order_date):
        return order_date + timedelta(days=self._config.expected_lead_days)

    def generate_order_number(self) -> str:
        """``PO-YYYYMMDD-N`` where N counts confirmations on that day."""
        day = self._clock.now().date()
        prefix = self._config.order_number_prefix
        seq = self._sequences.next_value(
            SequenceService.daily_name(f"{SequenceService.PURCHASE_ORDER}:{prefix}", day)
        )
        return f"{prefix}-{day:%Y%m%d}-{seq}"

    def record_history(
        self,
        order: PurchaseOrderModel,
        from_status: PurchaseOrderStatus | None,
        to_status: PurchaseOrderStatus,
        comments: str | None,
        actor_id: UUID,
    ) -> PurchaseOrderStatusHistoryModel:
        entry = PurchaseOrderStatusHistoryModel(
            purchase_order_id=order.id,
            sequence_number=len(order.history) + 1,
            from_status=from_status.value if from_status else None,
            to_status=to_status.value,
            comments=comments,
            changed_by_id=actor_id,
            changed_at=self._clock.now(),
            created_by_id=actor_id,
        )
        order.history.append(entry)
        return entry

    def recompute_total(self, order: PurchaseOrderModel) -> None:
        summary = summarize_order(
            [
                LandedCostLine(
                    item_id=item.id,
                    china_price=item.china_price,
                    quantity=item.quantity,
                    shipping_cost=item.shipping_cost,
                    lost_quantity=item.lost_quantity,
                )
                for item in order.items
            ],
            order.exchange_rate,
            order.extra_cost_global,
        )
        order.total_amount = summary.total_amount

    # =========================================================================
    # Apply
    # =========================================================================

    def apply(
        self,
        order: PurchaseOrderModel,
        request: TransitionRequest,
        actor_id: UUID,
    ) -> PurchaseOrderStatusHistoryModel:
        """
        Apply a transition request to a locked order.

        Returns:
            The history row written for the transition.
        """
        current = PurchaseOrderStatus(order.status)
        target = request.target
        transition = validate_transition(
            str(order.id), current, request, order.exchange_rate
        )

        auto_comment = self._handlers[target](order, request, actor_id)

        order.status = target.value
        order.updated_by_id = actor_id
        self.recompute_total(order)
        entry = self.record_history(
            order, current, target, request.comments or auto_comment, actor_id
        )
        self._session.flush()

        logger.info(
            "purchase_order_status_changed",
            extra={
                "order_id": str(order.id),
                "order_number": order.order_number,
                "action": transition.action,
                "from_status": current.value,
                "to_status": target.value,
                "total_amount": str(order.total_amount),
            },
        )
        return entry

    # =========================================================================
    # Stage handlers
    # =========================================================================

    def _confirm_payment(self, order, request: ConfirmPayment, actor_id) -> str | None:
        order.exchange_rate = request.exchange_rate
        order.order_number = self.generate_order_number()
        return None

    def _dispatch_from_supplier(self, order, request: DispatchFromSupplier, actor_id) -> str | None:
        order.courier_name = request.courier_name.strip()
        order.tracking_number = request.tracking_number.strip()
        return None

    def _ship_to_bangladesh(self, order, request: ShipToBangladesh, actor_id) -> str | None:
        order.lot_number = request.lot_number.strip()
        return None

    def _arrive_in_bangladesh(self, order, request: ArriveInBangladesh, actor_id) -> str | None:
        targets = []
        for update in request.items:
            item = order.item_by_id(update.po_item_id)
            if item is None:
                raise PurchaseOrderItemNotFoundError(str(order.id), str(update.po_item_id))
            targets.append((item, update.shipping_cost))

        for item, shipping_cost in targets:
            item.shipping_cost = shipping_cost
            item.updated_by_id = actor_id
        if request.shipping_method is not None:
            order.shipping_method = request.shipping_method.value
        return None

    def _dispatch_to_hub(self, order, request: DispatchToHub, actor_id) -> str | None:
        order.bd_courier_tracking = request.bd_courier_tracking.strip()
        return None

    def _receive_at_hub(self, order, request: ReceiveAtHub, actor_id) -> str | None:
        plan = self._receiving.receive(order, request, actor_id)
        return (
            f"Received {plan.units_received} units across {len(plan.lines)} items"
            f" ({plan.units_lost} lost); landed costs finalized"
        )

    def _complete(self, order, request: CompleteOrder, actor_id) -> str | None:
        if order.costs_finalized_at is None:
            self._receiving.finalize_costs(order, actor_id)
        order.completed_at = self._clock.now()
        self.recompute_total(order)
        total = round_money(order.total_amount, self._config.report_decimal_places)
        return f"Order completed; total {total} {self._config.local_currency}"

    def _mark_lost(self, order, request: MarkLost, actor_id) -> str | None:
        return None
