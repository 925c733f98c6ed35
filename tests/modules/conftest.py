"""
Shared fixtures for procurement and inventory tests.

Provides an order factory and a driver that walks an order along the
forward path with realistic stage payloads.

DESIGN RULE: Every fixture is opt-in.  No autouse.
"""

from decimal import Decimal

import pytest

from sourcing_modules.procurement.models import (
    ArriveInBangladesh,
    ConfirmPayment,
    CreateOrderRequest,
    DispatchFromSupplier,
    DispatchToHub,
    ItemShippingUpdate,
    OrderLineRequest,
    PurchaseOrderStatus,
    ShippingMethod,
    ShipToBangladesh,
)

EXCHANGE_RATE = Decimal("15.3")


@pytest.fixture
def create_order(service, supplier, product, actor_id):
    """Create a draft order; one 25 x 220 CNY line by default."""

    def _create(lines=None, extra_cost_global=Decimal("0"), comments=None):
        if lines is None:
            lines = (
                OrderLineRequest(
                    product_id=product.id, china_price=Decimal("220"), quantity=25,
                ),
            )
        return service.create_order(
            CreateOrderRequest(
                supplier_id=supplier.id,
                items=tuple(lines),
                extra_cost_global=extra_cost_global,
                comments=comments,
            ),
            actor_id,
        )

    return _create


@pytest.fixture
def advance_to(service, actor_id):
    """Walk an order forward until it reaches ``status``."""

    def _payload(order, target):
        if target is PurchaseOrderStatus.PAYMENT_CONFIRMED:
            return ConfirmPayment(exchange_rate=EXCHANGE_RATE)
        if target is PurchaseOrderStatus.SUPPLIER_DISPATCHED:
            return DispatchFromSupplier(courier_name="SF Express", tracking_number="SF1234567890")
        if target is PurchaseOrderStatus.SHIPPED_BD:
            return ShipToBangladesh(lot_number="LOT-2024-001")
        if target is PurchaseOrderStatus.ARRIVED_BD:
            return ArriveInBangladesh(
                items=tuple(
                    ItemShippingUpdate(po_item_id=item.id, shipping_cost=Decimal("500"))
                    for item in order.items
                ),
                shipping_method=ShippingMethod.AIR,
            )
        if target is PurchaseOrderStatus.IN_TRANSIT_BOGURA:
            return DispatchToHub(bd_courier_tracking="SA-BOG-778899")
        raise ValueError(f"no default payload for {target}")

    order_of_states = [
        PurchaseOrderStatus.DRAFT,
        PurchaseOrderStatus.PAYMENT_CONFIRMED,
        PurchaseOrderStatus.SUPPLIER_DISPATCHED,
        PurchaseOrderStatus.SHIPPED_BD,
        PurchaseOrderStatus.ARRIVED_BD,
        PurchaseOrderStatus.IN_TRANSIT_BOGURA,
    ]

    def _advance(order, status):
        while order.status is not status:
            following = order_of_states[order_of_states.index(order.status) + 1]
            order = service.transition(order.id, _payload(order, following), actor_id)
        return order

    return _advance
