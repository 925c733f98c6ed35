"""
Module: sourcing_modules.inventory.orm
Responsibility: SQLAlchemy persistence for stock-on-hand per product variant.

Architecture position: Modules > Inventory > ORM.  Inherits from TrackedBase
    (sourcing_kernel.db.base).

Invariants enforced:
    - One stock account per variant (unique product_variant_id).
    - quantity >= 0 and reserved_quantity >= 0 (check constraints).
    - Money fields use Decimal (Numeric(38,9)).
    - Rows are created lazily on first stocking and mutated only through
      StockAccountService.add_stock.

Failure modes:
    - IntegrityError on a concurrent first-stocking race (handled by the
      service with a savepoint retry).
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from sourcing_kernel.db.base import TrackedBase


class StockAccountModel(TrackedBase):
    """
    Running stock balance and weighted-average unit cost of one variant.

    Maps to: sourcing_modules.inventory.models.StockAccount.
    """

    __tablename__ = "stock_accounts"

    __table_args__ = (
        UniqueConstraint("product_variant_id", name="uq_stock_account_variant"),
        CheckConstraint("quantity >= 0", name="ck_stock_account_quantity"),
        CheckConstraint("reserved_quantity >= 0", name="ck_stock_account_reserved"),
    )

    product_variant_id: Mapped[UUID] = mapped_column(
        ForeignKey("product_variants.id"), nullable=False,
    )
    quantity: Mapped[int] = mapped_column(default=0)
    reserved_quantity: Mapped[int] = mapped_column(default=0)
    average_unit_cost: Mapped[Decimal | None] = mapped_column(nullable=True)
    last_unit_cost: Mapped[Decimal | None] = mapped_column(nullable=True)
    total_value: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    location: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_stocked_at: Mapped[datetime | None] = mapped_column(nullable=True)

    def to_dto(self):
        """Convert ORM model to frozen StockAccount DTO."""
        from sourcing_kernel.db.types import ensure_utc
        from sourcing_modules.inventory.models import StockAccount

        return StockAccount(
            id=self.id,
            product_variant_id=self.product_variant_id,
            quantity=self.quantity,
            reserved_quantity=self.reserved_quantity,
            average_unit_cost=self.average_unit_cost,
            last_unit_cost=self.last_unit_cost,
            total_value=self.total_value,
            location=self.location,
            last_stocked_at=ensure_utc(self.last_stocked_at),
        )

    def __repr__(self) -> str:
        return (
            f"<StockAccountModel variant={self.product_variant_id} "
            f"qty={self.quantity} avg={self.average_unit_cost}>"
        )
