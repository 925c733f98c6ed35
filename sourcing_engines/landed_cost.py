"""
Module: sourcing_engines.landed_cost
Responsibility:
    Compute the per-unit landed cost of a purchase-order line: foreign
    purchase price converted at the order's exchange rate, plus the line's
    shipping cost, plus its pro-rata share of the order-wide extra cost,
    spread over the units that actually arrived.  Also summarizes an order's
    total amount.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import sourcing_kernel (exceptions, types, logging).

Invariants enforced:
    - Conservation: final_unit_cost * effective_quantity == total_line_cost
      whenever effective_quantity > 0.  Lost units raise the unit cost of the
      surviving units; cost never disappears.
    - Extra cost is shared by ordered quantity, including units later lost.
    - Decimal-only arithmetic, no rounding inside the engine.  Values are
      rounded only for presentation.
    - Purity: no clock access, no I/O.

Failure modes:
    - InvalidAllocationInputError on exchange_rate <= 0 (or missing),
      lost_quantity > quantity, total_ordered_quantity <= 0, or any negative
      price, cost or quantity.

Audit relevance:
    The result carries every component (base, shipping, extra share, line
    total) so a stored final_unit_cost can be explained after the fact.

Usage:
    from sourcing_engines.landed_cost import LandedCostAllocator, LandedCostLine

    allocator = LandedCostAllocator()
    result = allocator.allocate(
        line=LandedCostLine(item_id="1", china_price=Decimal("220"), quantity=25,
                            shipping_cost=Decimal("500"), lost_quantity=5),
        exchange_rate=Decimal("15.3"),
        extra_cost_global=Decimal("250"),
        total_ordered_quantity=25,
    )
    result.final_unit_cost  # Decimal("4245")
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sourcing_engines.tracer import traced_engine
from sourcing_kernel.db.types import ZERO
from sourcing_kernel.exceptions import InvalidAllocationInputError
from sourcing_kernel.logging_config import get_logger

logger = get_logger("engines.landed_cost")


@dataclass(frozen=True)
class LandedCostLine:
    """
    Allocation input for one purchase-order line.

    ``shipping_cost`` is the flat shipping charge for the whole line, not a
    per-unit rate.  The per-unit reading (``shipping_cost * quantity``) is
    not used: the arrival stage records what the forwarder billed for the
    whole line.
    """

    item_id: str | UUID
    china_price: Decimal
    quantity: int
    shipping_cost: Decimal = ZERO
    lost_quantity: int = 0

    @property
    def effective_quantity(self) -> int:
        return self.quantity - self.lost_quantity


@dataclass(frozen=True)
class LandedCostResult:
    """
    Landed cost of one line.

    Guarantees:
        - ``total_line_cost == base_cost + shipping_cost + allocated_extra``.
        - ``final_unit_cost`` is 0 when nothing arrived.
    """

    item_id: str | UUID
    base_cost: Decimal
    shipping_cost: Decimal
    allocated_extra: Decimal
    total_line_cost: Decimal
    effective_quantity: int
    final_unit_cost: Decimal

    @property
    def fully_lost(self) -> bool:
        return self.effective_quantity == 0


@dataclass(frozen=True)
class OrderCostSummary:
    """Order-level totals used for ``purchase_orders.total_amount``."""

    foreign_total: Decimal
    local_total: Decimal
    shipping_total: Decimal
    extra_cost_global: Decimal
    total_amount: Decimal


def _check_non_negative(name: str, value: Decimal | int, item_id) -> None:
    if value < 0:
        raise InvalidAllocationInputError(f"{name} must not be negative, got {value}", str(item_id))


class LandedCostAllocator:
    """
    Per-unit landed cost calculator.

    Contract:
        Pure function of its inputs.  No I/O, no database access.

    Non-goals:
        - Does not round; callers persist the exact Decimal.
        - Does not derive shipping from weight; shipping arrives as a flat
          per-line amount.
    """

    @traced_engine(
        "landed_cost",
        "1.0",
        fingerprint_fields=(
            "line",
            "exchange_rate",
            "extra_cost_global",
            "total_ordered_quantity",
        ),
    )
    def allocate(
        self,
        *,
        line: LandedCostLine,
        exchange_rate: Decimal | None,
        extra_cost_global: Decimal,
        total_ordered_quantity: int,
    ) -> LandedCostResult:
        """
        Compute the landed cost of a single line.

        Args:
            line: The line being costed.
            exchange_rate: Local currency per unit of foreign currency.
            extra_cost_global: Order-wide extra cost shared by all lines.
            total_ordered_quantity: Sum of ordered quantity over every line of
                the order (lost units included).

        Returns:
            LandedCostResult with every cost component.
        """
        item_id = line.item_id
        if exchange_rate is None or exchange_rate <= 0:
            raise InvalidAllocationInputError(
                f"exchange_rate must be positive, got {exchange_rate}", str(item_id)
            )
        if total_ordered_quantity <= 0:
            raise InvalidAllocationInputError(
                f"total ordered quantity must be positive, got {total_ordered_quantity}",
                str(item_id),
            )
        _check_non_negative("china_price", line.china_price, item_id)
        _check_non_negative("quantity", line.quantity, item_id)
        _check_non_negative("shipping_cost", line.shipping_cost, item_id)
        _check_non_negative("lost_quantity", line.lost_quantity, item_id)
        _check_non_negative("extra_cost_global", extra_cost_global, item_id)
        if line.lost_quantity > line.quantity:
            raise InvalidAllocationInputError(
                f"lost_quantity {line.lost_quantity} exceeds quantity {line.quantity}",
                str(item_id),
            )

        quantity = Decimal(line.quantity)
        base_cost = line.china_price * exchange_rate * quantity
        extra_per_unit = extra_cost_global / Decimal(total_ordered_quantity)
        allocated_extra = extra_per_unit * quantity
        total_line_cost = base_cost + line.shipping_cost + allocated_extra

        effective_quantity = line.effective_quantity
        if effective_quantity == 0:
            final_unit_cost = ZERO
        else:
            final_unit_cost = total_line_cost / Decimal(effective_quantity)

        logger.debug(
            "landed_cost_allocated",
            extra={
                "item_id": str(item_id),
                "base_cost": str(base_cost),
                "allocated_extra": str(allocated_extra),
                "total_line_cost": str(total_line_cost),
                "effective_quantity": effective_quantity,
                "final_unit_cost": str(final_unit_cost),
            },
        )

        return LandedCostResult(
            item_id=item_id,
            base_cost=base_cost,
            shipping_cost=line.shipping_cost,
            allocated_extra=allocated_extra,
            total_line_cost=total_line_cost,
            effective_quantity=effective_quantity,
            final_unit_cost=final_unit_cost,
        )

    def allocate_order(
        self,
        lines: Sequence[LandedCostLine],
        exchange_rate: Decimal | None,
        extra_cost_global: Decimal,
    ) -> tuple[LandedCostResult, ...]:
        """Allocate every line of an order, deriving the total ordered quantity."""
        total_ordered_quantity = sum(line.quantity for line in lines)
        return tuple(
            self.allocate(
                line=line,
                exchange_rate=exchange_rate,
                extra_cost_global=extra_cost_global,
                total_ordered_quantity=total_ordered_quantity,
            )
            for line in lines
        )


def summarize_order(
    lines: Sequence[LandedCostLine],
    exchange_rate: Decimal | None,
    extra_cost_global: Decimal | None,
) -> OrderCostSummary:
    """
    Order total: converted purchase price + shipping + extra cost.

    An order without an exchange rate yet (draft) contributes no local
    purchase value; shipping and extra costs still count.
    """
    rate = exchange_rate if exchange_rate is not None else ZERO
    extra = extra_cost_global if extra_cost_global is not None else ZERO

    foreign_total = sum((line.china_price * line.quantity for line in lines), ZERO)
    local_total = foreign_total * rate
    shipping_total = sum((line.shipping_cost for line in lines), ZERO)

    return OrderCostSummary(
        foreign_total=foreign_total,
        local_total=local_total,
        shipping_total=shipping_total,
        extra_cost_global=extra,
        total_amount=local_total + shipping_total + extra,
    )
