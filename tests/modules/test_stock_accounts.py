"""
Tests for StockAccountService and VariantCostWriter.

Validates:
- Accounts are created on first stocking
- Weighted average unit cost across receipts
- total_value == quantity * average_unit_cost
- Invalid quantities and costs are rejected
- Landed cost written onto the variant (last write wins)
"""

from decimal import Decimal
from uuid import uuid4

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from sourcing_kernel.exceptions import (
    InvalidStockQuantityError,
    StockAccountNotFoundError,
    VariantNotFoundError,
)
from sourcing_modules.catalog.orm import ProductVariantModel
from sourcing_modules.inventory.models import StockAccount
from sourcing_modules.inventory.service import StockAccountService, VariantCostWriter


@pytest.fixture
def stock(session, clock):
    return StockAccountService(session, clock=clock)


class TestAddStock:

    def test_account_created_on_first_receipt(self, stock, variant_a, actor_id):
        with pytest.raises(StockAccountNotFoundError):
            stock.get_account(variant_a.id)

        account = stock.add_stock(variant_a.id, 10, Decimal("100"), actor_id)

        assert account.quantity == 10
        assert account.average_unit_cost == Decimal("100")
        assert account.last_unit_cost == Decimal("100")
        assert account.total_value == Decimal("1000")
        assert stock.get_account(variant_a.id).quantity == 10

    def test_weighted_average(self, stock, variant_a, actor_id):
        stock.add_stock(variant_a.id, 10, Decimal("100"), actor_id)
        account = stock.add_stock(variant_a.id, 30, Decimal("200"), actor_id)

        assert account.quantity == 40
        assert account.average_unit_cost == Decimal("175")
        assert account.last_unit_cost == Decimal("200")
        assert account.total_value == Decimal("7000")

    def test_unknown_cost_keeps_average(self, stock, variant_a, actor_id):
        stock.add_stock(variant_a.id, 10, Decimal("100"), actor_id)
        account = stock.add_stock(variant_a.id, 5, None, actor_id)

        assert account.quantity == 15
        assert account.average_unit_cost == Decimal("100")
        assert account.total_value == Decimal("1500")

    def test_stocked_at_from_clock(self, stock, variant_a, actor_id, clock):
        account = stock.add_stock(variant_a.id, 1, Decimal("1"), actor_id)
        assert account.last_stocked_at == clock.now()

    @pytest.mark.parametrize(
        "quantity,unit_cost",
        [(0, Decimal("10")), (-3, Decimal("10")), (5, Decimal("-0.01"))],
    )
    def test_rejects_invalid_quantity_or_cost(self, stock, variant_a, actor_id, quantity, unit_cost):
        with pytest.raises(InvalidStockQuantityError) as exc_info:
            stock.add_stock(variant_a.id, quantity, unit_cost, actor_id)
        assert exc_info.value.code == "INVALID_STOCK_QUANTITY"

    def test_variants_have_separate_accounts(self, stock, variant_a, variant_b, actor_id):
        stock.add_stock(variant_a.id, 12, Decimal("4245"), actor_id)
        stock.add_stock(variant_b.id, 8, Decimal("4245"), actor_id)

        assert stock.get_account(variant_a.id).quantity == 12
        assert stock.get_account(variant_b.id).quantity == 8

    def test_stock_added_logged(self, stock, variant_a, actor_id, captured_logs):
        stock.add_stock(variant_a.id, 3, Decimal("50"), actor_id)
        records = [r for r in captured_logs() if r["message"] == "stock_added"]
        assert records[-1]["quantity_after"] == 3
        assert records[-1]["product_variant_id"] == str(variant_a.id)


class TestWeightedAverageProperty:

    @given(
        receipts=st.lists(
            st.tuples(
                st.integers(min_value=1, max_value=100),
                st.decimals(min_value=0, max_value=10000, places=2),
            ),
            min_size=1,
            max_size=5,
        )
    )
    @settings(
        max_examples=50,
        deadline=None,
        suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
    )
    def test_average_matches_total_cost_over_units(self, session, stock, product, actor_id, receipts):
        variant = ProductVariantModel(
            product_id=product.id, sku=f"PROP-{uuid4().hex[:12]}", created_by_id=actor_id,
        )
        session.add(variant)
        session.flush()

        account = None
        for quantity, unit_cost in receipts:
            account = stock.add_stock(variant.id, quantity, unit_cost, actor_id)

        total_units = sum(q for q, _ in receipts)
        total_cost = sum((Decimal(q) * c for q, c in receipts), Decimal("0"))
        assert account.quantity == total_units
        assert abs(account.average_unit_cost - total_cost / total_units) <= Decimal("0.000001")
        assert abs(account.total_value - total_cost) <= Decimal("0.001")
        session.rollback()


class TestStockAccountModel:

    def test_rejects_negative_quantity(self):
        with pytest.raises(ValueError):
            StockAccount(id=uuid4(), product_variant_id=uuid4(), quantity=-1)

    def test_available_quantity(self):
        account = StockAccount(
            id=uuid4(), product_variant_id=uuid4(), quantity=10, reserved_quantity=4,
        )
        assert account.available_quantity == 6


class TestVariantCostWriter:

    def test_sets_landed_cost(self, session, variant_a, actor_id):
        writer = VariantCostWriter(session)
        writer.set_landed_cost(variant_a.id, Decimal("4245"), actor_id)
        writer.set_landed_cost(variant_a.id, Decimal("3900"), actor_id)
        session.commit()

        assert session.get(ProductVariantModel, variant_a.id).landed_cost == Decimal("3900")

    def test_unknown_variant(self, session, actor_id):
        with pytest.raises(VariantNotFoundError):
            VariantCostWriter(session).set_landed_cost(uuid4(), Decimal("1"), actor_id)
