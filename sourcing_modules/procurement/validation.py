"""
Stage-keyed request validation for purchase-order transitions.

Responsibility
--------------
Decide, before anything is written, whether a transition request may be
applied to an order in its current state: the target must be the next state
on the workflow (or ``lost``), and every field the target stage requires
must be present and in range.

Architecture position
---------------------
**Modules layer** -- pure functions over DTO-like inputs.  No session, no
I/O.  Called by ``OrderLifecycle`` under the order row lock.

Failure modes
-------------
* ``IllegalTransitionError`` -- target is not reachable in one step.
* ``MissingRequiredFieldError`` -- a required field is None, blank or empty.
* ``InvalidFieldValueError`` -- a field is present but out of range.
"""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal
from typing import Any

from sourcing_kernel.domain.workflow import Transition
from sourcing_kernel.exceptions import (
    IllegalTransitionError,
    InvalidFieldValueError,
    MissingRequiredFieldError,
)
from sourcing_modules.procurement.models import (
    ArriveInBangladesh,
    ConfirmPayment,
    PurchaseOrderStatus,
    ReceiveAtHub,
    ShippingMethod,
    TransitionRequest,
)
from sourcing_modules.procurement.workflows import PURCHASE_ORDER_WORKFLOW


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (tuple, list)):
        return len(value) == 0
    return False


def _non_negative(field_name: str, value: Decimal | int) -> None:
    if value < 0:
        raise InvalidFieldValueError(field_name, value, "must not be negative")


def resolve_transition(
    order_id: str,
    current: PurchaseOrderStatus,
    target: PurchaseOrderStatus,
) -> Transition:
    """The workflow transition from ``current`` to ``target`` or IllegalTransitionError."""
    transition = PURCHASE_ORDER_WORKFLOW.find_transition(current.value, target.value)
    if transition is None:
        raise IllegalTransitionError(order_id, current.value, target.value)
    return transition


def _check_confirm_payment(request: ConfirmPayment, order_exchange_rate) -> None:
    if request.exchange_rate <= 0:
        raise InvalidFieldValueError("exchange_rate", request.exchange_rate, "must be positive")


def _check_arrival(request: ArriveInBangladesh, order_exchange_rate) -> None:
    if request.shipping_method is not None and not isinstance(
        request.shipping_method, ShippingMethod
    ):
        raise InvalidFieldValueError(
            "shipping_method", request.shipping_method, "must be air or sea"
        )
    seen = set()
    for update in request.items:
        if update.po_item_id in seen:
            raise InvalidFieldValueError(
                "items", update.po_item_id, "shipping cost given twice for one item"
            )
        seen.add(update.po_item_id)
        _non_negative("shipping_cost", update.shipping_cost)


def _check_receipt(request: ReceiveAtHub, order_exchange_rate) -> None:
    stage = PurchaseOrderStatus.RECEIVED_HUB.value
    if order_exchange_rate is None:
        raise MissingRequiredFieldError(stage, "exchange_rate")
    _non_negative("total_weight", request.total_weight)
    if request.extra_cost_global is not None:
        _non_negative("extra_cost_global", request.extra_cost_global)
    for line in request.items:
        if line.shipping_cost is not None:
            _non_negative("shipping_cost", line.shipping_cost)
        _non_negative("lost_quantity", line.lost_quantity)
        for variant in line.received_variants:
            _non_negative("quantity", variant.quantity)


_VALUE_CHECKS: dict[PurchaseOrderStatus, Callable[[Any, Any], None]] = {
    PurchaseOrderStatus.PAYMENT_CONFIRMED: _check_confirm_payment,
    PurchaseOrderStatus.ARRIVED_BD: _check_arrival,
    PurchaseOrderStatus.RECEIVED_HUB: _check_receipt,
}


def validate_transition(
    order_id: str,
    current: PurchaseOrderStatus,
    request: TransitionRequest,
    order_exchange_rate: Decimal | None = None,
) -> Transition:
    """
    Validate a transition request against the workflow and the stage rules.

    Args:
        order_id: For error messages.
        current: The order's current status.
        request: One of the tagged request structs.
        order_exchange_rate: The rate already recorded on the order.

    Returns:
        The workflow transition that will be applied.
    """
    target = request.target
    transition = resolve_transition(order_id, current, target)

    for field_name in transition.required_fields:
        if _is_missing(getattr(request, field_name, None)):
            raise MissingRequiredFieldError(target.value, field_name)

    check = _VALUE_CHECKS.get(target)
    if check is not None:
        check(request, order_exchange_rate)

    return transition
