"""
Tests for stage-keyed transition validation (pure, no database).

Validates:
- Only the next stage, or lost, is reachable
- Terminal states absorb every request
- Required fields: None, blank strings and empty tuples count as missing
- Value ranges: positive exchange rate, non-negative costs and quantities
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from sourcing_kernel.exceptions import (
    IllegalTransitionError,
    InvalidFieldValueError,
    MissingRequiredFieldError,
)
from sourcing_modules.procurement.models import (
    ArriveInBangladesh,
    CompleteOrder,
    ConfirmPayment,
    DispatchFromSupplier,
    DispatchToHub,
    ItemShippingUpdate,
    MarkLost,
    PurchaseOrderStatus,
    ReceiptLine,
    ReceiveAtHub,
    ShipToBangladesh,
    VariantReceipt,
)
from sourcing_modules.procurement.validation import resolve_transition, validate_transition

S = PurchaseOrderStatus
RATE = Decimal("15.3")


def _receipt(**overrides):
    fields = dict(
        total_weight=Decimal("42.5"),
        items=(
            ReceiptLine(
                po_item_id=uuid4(),
                received_variants=(VariantReceipt(variant_id=uuid4(), quantity=10),),
            ),
        ),
    )
    fields.update(overrides)
    return ReceiveAtHub(**fields)


class TestReachability:

    @pytest.mark.parametrize(
        "current,request_",
        [
            (S.DRAFT, ShipToBangladesh(lot_number="L1")),
            (S.DRAFT, CompleteOrder()),
            (S.PAYMENT_CONFIRMED, ShipToBangladesh(lot_number="L1")),
            (S.ARRIVED_BD, ConfirmPayment(exchange_rate=RATE)),
            (S.IN_TRANSIT_BOGURA, CompleteOrder()),
            (S.SHIPPED_BD, DispatchToHub(bd_courier_tracking="T")),
        ],
    )
    def test_skips_and_reversals_rejected(self, current, request_):
        with pytest.raises(IllegalTransitionError) as exc_info:
            validate_transition("po-1", current, request_, RATE)
        assert exc_info.value.from_status == current.value
        assert exc_info.value.to_status == request_.target.value
        assert exc_info.value.code == "ILLEGAL_TRANSITION"

    @pytest.mark.parametrize("current", [s for s in S if not s.is_terminal])
    def test_lost_from_every_open_state(self, current):
        transition = validate_transition("po-1", current, MarkLost(), None)
        assert transition.to_state == "lost"

    @pytest.mark.parametrize("current", [S.COMPLETED, S.LOST])
    @pytest.mark.parametrize("request_", [MarkLost(), CompleteOrder(), ConfirmPayment(exchange_rate=RATE)])
    def test_terminal_states_absorb(self, current, request_):
        with pytest.raises(IllegalTransitionError):
            validate_transition("po-1", current, request_, RATE)

    def test_resolve_returns_transition(self):
        t = resolve_transition("po-1", S.RECEIVED_HUB, S.COMPLETED)
        assert t.action == "complete"


class TestRequiredFields:

    def test_exchange_rate_required(self):
        with pytest.raises(MissingRequiredFieldError) as exc_info:
            validate_transition("po-1", S.DRAFT, ConfirmPayment())
        assert exc_info.value.stage == "payment_confirmed"
        assert exc_info.value.field_name == "exchange_rate"

    @pytest.mark.parametrize(
        "request_,missing",
        [
            (DispatchFromSupplier(tracking_number="T1"), "courier_name"),
            (DispatchFromSupplier(courier_name="   ", tracking_number="T1"), "courier_name"),
            (DispatchFromSupplier(courier_name="SF"), "tracking_number"),
        ],
    )
    def test_courier_and_tracking_required(self, request_, missing):
        with pytest.raises(MissingRequiredFieldError) as exc_info:
            validate_transition("po-1", S.PAYMENT_CONFIRMED, request_, RATE)
        assert exc_info.value.field_name == missing

    def test_lot_number_required(self):
        with pytest.raises(MissingRequiredFieldError, match="lot_number"):
            validate_transition("po-1", S.SUPPLIER_DISPATCHED, ShipToBangladesh(lot_number=""), RATE)

    def test_bd_tracking_required(self):
        with pytest.raises(MissingRequiredFieldError, match="bd_courier_tracking"):
            validate_transition("po-1", S.ARRIVED_BD, DispatchToHub(), RATE)

    def test_arrival_needs_nothing(self):
        validate_transition("po-1", S.SHIPPED_BD, ArriveInBangladesh(), RATE)

    def test_receipt_requires_weight(self):
        with pytest.raises(MissingRequiredFieldError, match="total_weight"):
            validate_transition("po-1", S.IN_TRANSIT_BOGURA, _receipt(total_weight=None), RATE)

    def test_receipt_requires_items(self):
        with pytest.raises(MissingRequiredFieldError) as exc_info:
            validate_transition("po-1", S.IN_TRANSIT_BOGURA, _receipt(items=()), RATE)
        assert exc_info.value.field_name == "items"

    def test_receipt_requires_recorded_exchange_rate(self):
        with pytest.raises(MissingRequiredFieldError) as exc_info:
            validate_transition("po-1", S.IN_TRANSIT_BOGURA, _receipt(), None)
        assert exc_info.value.field_name == "exchange_rate"


class TestFieldValues:

    @pytest.mark.parametrize("rate", [Decimal("0"), Decimal("-15.3")])
    def test_exchange_rate_must_be_positive(self, rate):
        with pytest.raises(InvalidFieldValueError) as exc_info:
            validate_transition("po-1", S.DRAFT, ConfirmPayment(exchange_rate=rate))
        assert exc_info.value.field_name == "exchange_rate"

    def test_arrival_rejects_negative_shipping(self):
        request_ = ArriveInBangladesh(
            items=(ItemShippingUpdate(po_item_id=uuid4(), shipping_cost=Decimal("-1")),),
        )
        with pytest.raises(InvalidFieldValueError, match="shipping_cost"):
            validate_transition("po-1", S.SHIPPED_BD, request_, RATE)

    def test_arrival_rejects_duplicate_items(self):
        item_id = uuid4()
        request_ = ArriveInBangladesh(
            items=(
                ItemShippingUpdate(po_item_id=item_id, shipping_cost=Decimal("1")),
                ItemShippingUpdate(po_item_id=item_id, shipping_cost=Decimal("2")),
            ),
        )
        with pytest.raises(InvalidFieldValueError):
            validate_transition("po-1", S.SHIPPED_BD, request_, RATE)

    def test_arrival_rejects_unknown_shipping_method(self):
        with pytest.raises(InvalidFieldValueError, match="shipping_method"):
            validate_transition(
                "po-1", S.SHIPPED_BD, ArriveInBangladesh(shipping_method="boat"), RATE
            )

    @pytest.mark.parametrize(
        "overrides,field_name",
        [
            ({"total_weight": Decimal("-1")}, "total_weight"),
            ({"extra_cost_global": Decimal("-5")}, "extra_cost_global"),
            (
                {"items": (ReceiptLine(po_item_id=uuid4(), lost_quantity=-1),)},
                "lost_quantity",
            ),
            (
                {"items": (ReceiptLine(po_item_id=uuid4(), shipping_cost=Decimal("-1")),)},
                "shipping_cost",
            ),
            (
                {
                    "items": (
                        ReceiptLine(
                            po_item_id=uuid4(),
                            received_variants=(VariantReceipt(variant_id=uuid4(), quantity=-2),),
                        ),
                    )
                },
                "quantity",
            ),
        ],
    )
    def test_receipt_rejects_negatives(self, overrides, field_name):
        with pytest.raises(InvalidFieldValueError) as exc_info:
            validate_transition("po-1", S.IN_TRANSIT_BOGURA, _receipt(**overrides), RATE)
        assert exc_info.value.field_name == field_name
