"""
Purchase Order Service (``sourcing_modules.procurement.service``).

Responsibility
--------------
Public entry point for the purchase-order lifecycle: create draft orders,
apply transitions (including hub receipt), delete drafts and edit history
comments.  Delegates stage rules to ``OrderLifecycle``, landed cost to
``sourcing_engines.landed_cost`` via ``ReceivingProcessor``, and stock to
``StockAccountService``.

Architecture position
---------------------
**Modules layer** -- transaction owner.  Every public method runs in one
unit of work: commit on success, rollback on any failure.

Invariants enforced
-------------------
* The order row is locked (``SELECT ... FOR UPDATE``) before it is read for
  a transition, so concurrent transitions on one order serialize.
* Validation errors surface before any write; a rolled-back transition
  leaves no residue and may simply be resubmitted.
* Only draft orders can be deleted.

Failure modes
-------------
* ``SourcingKernelError`` subclasses -> session rolled back, re-raised as is.
* Anything else -> session rolled back, ``ProcessingFailedError`` raised with
  the underlying exception as ``__cause__``.

Audit relevance
---------------
Start, commit and rollback of every operation are logged with the order id,
actor and (for transitions) from/to status.  ``LogContext`` carries the
actor and order id onto every nested log line.

Usage::

    service = PurchaseOrderService(session, clock=clock, config=config.procurement)
    order = service.create_order(CreateOrderRequest(...), actor_id)
    order = service.transition(order.id, ConfirmPayment(exchange_rate=Decimal("15.3")), actor_id)
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from sourcing_config.schema import ProcurementConfig
from sourcing_kernel.domain.clock import Clock, SystemClock
from sourcing_kernel.exceptions import (
    InvalidFieldValueError,
    MissingRequiredFieldError,
    OrderNotDeletableError,
    ProcessingFailedError,
    PurchaseOrderNotFoundError,
    SourcingKernelError,
    StatusHistoryNotFoundError,
)
from sourcing_kernel.logging_config import LogContext, get_logger
from sourcing_modules.catalog.selector import CatalogSelector
from sourcing_modules.procurement.lifecycle import OrderLifecycle
from sourcing_modules.procurement.models import (
    CreateOrderRequest,
    PurchaseOrder,
    PurchaseOrderStatus,
    ReceiveOrderRequest,
    StatusHistoryEntry,
    TransitionRequest,
)
from sourcing_modules.procurement.orm import (
    PurchaseOrderItemModel,
    PurchaseOrderModel,
    PurchaseOrderStatusHistoryModel,
)
from sourcing_modules.procurement.receiving import ReceivingProcessor

logger = get_logger("modules.procurement.service")


class PurchaseOrderService:
    """
    Orchestrates purchase-order operations.

    Guarantees
    ----------
    * Session is committed only when the whole operation succeeded.
    * Clock and configuration are injectable for deterministic testing.

    Non-goals
    ---------
    * No payment processing, supplier wallet refunds or notifications.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: ProcurementConfig | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or ProcurementConfig()
        self._catalog = CatalogSelector(session)
        self._receiving = ReceivingProcessor(session, clock=self._clock, catalog=self._catalog)
        self._lifecycle = OrderLifecycle(
            session,
            clock=self._clock,
            config=self._config,
            receiving=self._receiving,
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _lock_order(self, order_id: UUID) -> PurchaseOrderModel:
        order = self._session.execute(
            select(PurchaseOrderModel)
            .where(PurchaseOrderModel.id == order_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if order is None:
            raise PurchaseOrderNotFoundError(str(order_id))
        return order

    def _rollback(self, operation: str, order_id: UUID | None, exc: Exception) -> None:
        self._session.rollback()
        if isinstance(exc, SourcingKernelError):
            logger.warning(
                "purchase_order_operation_rejected",
                extra={
                    "operation": operation,
                    "order_id": str(order_id) if order_id else None,
                    "error_code": exc.code,
                    "error": str(exc),
                },
            )
        else:
            logger.exception(
                "purchase_order_operation_failed",
                extra={
                    "operation": operation,
                    "order_id": str(order_id) if order_id else None,
                },
            )

    # =========================================================================
    # Create
    # =========================================================================

    def create_order(self, request: CreateOrderRequest, actor_id: UUID) -> PurchaseOrder:
        """Create a draft order with its line items."""
        with LogContext.bind(actor_id=actor_id):
            try:
                stage = PurchaseOrderStatus.DRAFT.value
                if request.supplier_id is None:
                    raise MissingRequiredFieldError(stage, "supplier_id")
                if not request.items:
                    raise MissingRequiredFieldError(stage, "items")
                if request.extra_cost_global < 0:
                    raise InvalidFieldValueError(
                        "extra_cost_global", request.extra_cost_global, "must not be negative"
                    )

                self._catalog.get_supplier(request.supplier_id)
                for line in request.items:
                    if line.quantity < 1:
                        raise InvalidFieldValueError("quantity", line.quantity, "must be at least 1")
                    if line.china_price < 0:
                        raise InvalidFieldValueError(
                            "china_price", line.china_price, "must not be negative"
                        )
                    self._catalog.get_product(line.product_id)
                    if line.product_variant_id is not None:
                        variant = self._catalog.get_variant(line.product_variant_id)
                        if variant.product_id != line.product_id:
                            raise InvalidFieldValueError(
                                "product_variant_id",
                                line.product_variant_id,
                                f"not a variant of product {line.product_id}",
                            )

                order_date = request.order_date or self._clock.now().date()
                order = PurchaseOrderModel(
                    supplier_id=request.supplier_id,
                    status=PurchaseOrderStatus.DRAFT.value,
                    order_date=order_date,
                    expected_date=self._lifecycle.expected_date_for(order_date),
                    extra_cost_global=request.extra_cost_global,
                    created_by_id=actor_id,
                )
                for idx, line in enumerate(request.items):
                    order.items.append(
                        PurchaseOrderItemModel(
                            line_number=idx + 1,
                            product_id=line.product_id,
                            product_variant_id=line.product_variant_id,
                            china_price=line.china_price,
                            quantity=line.quantity,
                            created_by_id=actor_id,
                        )
                    )
                self._session.add(order)
                self._session.flush()

                self._lifecycle.recompute_total(order)
                self._lifecycle.record_history(
                    order, None, PurchaseOrderStatus.DRAFT, request.comments, actor_id
                )
                self._session.flush()
                dto = order.to_dto()
                self._session.commit()

                logger.info(
                    "purchase_order_created",
                    extra={
                        "order_id": str(dto.id),
                        "supplier_id": str(dto.supplier_id),
                        "line_count": len(dto.items),
                        "expected_date": dto.expected_date.isoformat(),
                    },
                )
                return dto
            except SourcingKernelError as exc:
                self._rollback("create purchase order", None, exc)
                raise
            except Exception as exc:
                self._rollback("create purchase order", None, exc)
                raise ProcessingFailedError("create purchase order") from exc

    # =========================================================================
    # Transitions
    # =========================================================================

    def transition(
        self,
        order_id: UUID,
        request: TransitionRequest,
        actor_id: UUID,
    ) -> PurchaseOrder:
        """
        Move an order to ``request.target``.

        The request type selects the target stage; its fields carry the data
        that stage requires.
        """
        operation = f"transition purchase order to {request.target.value}"
        with LogContext.bind(actor_id=actor_id, order_id=order_id):
            logger.info(
                "purchase_order_transition_started",
                extra={"order_id": str(order_id), "to_status": request.target.value},
            )
            try:
                order = self._lock_order(order_id)
                entry = self._lifecycle.apply(order, request, actor_id)
                dto = order.to_dto()
                from_status = entry.from_status
                self._session.commit()
            except SourcingKernelError as exc:
                self._rollback(operation, order_id, exc)
                raise
            except Exception as exc:
                self._rollback(operation, order_id, exc)
                raise ProcessingFailedError(operation, str(order_id)) from exc

            logger.info(
                "purchase_order_transition_committed",
                extra={
                    "order_id": str(order_id),
                    "order_number": dto.order_number,
                    "from_status": from_status,
                    "to_status": dto.status.value,
                    "total_amount": str(dto.total_amount),
                },
            )
            return dto

    def receive_order(
        self,
        order_id: UUID,
        request: ReceiveOrderRequest,
        actor_id: UUID,
    ) -> PurchaseOrder:
        """Hub receipt: the ``received_hub`` transition."""
        return self.transition(order_id, request, actor_id)

    # =========================================================================
    # Reads and maintenance
    # =========================================================================

    def get_order(self, order_id: UUID) -> PurchaseOrder:
        order = self._session.get(PurchaseOrderModel, order_id)
        if order is None:
            raise PurchaseOrderNotFoundError(str(order_id))
        return order.to_dto()

    def delete_draft_order(self, order_id: UUID, actor_id: UUID) -> None:
        """Delete an order that never left draft, with its items and history."""
        operation = "delete purchase order"
        with LogContext.bind(actor_id=actor_id, order_id=order_id):
            try:
                order = self._lock_order(order_id)
                if order.status != PurchaseOrderStatus.DRAFT.value:
                    raise OrderNotDeletableError(str(order_id), order.status)
                self._session.delete(order)
                self._session.commit()
            except SourcingKernelError as exc:
                self._rollback(operation, order_id, exc)
                raise
            except Exception as exc:
                self._rollback(operation, order_id, exc)
                raise ProcessingFailedError(operation, str(order_id)) from exc

            logger.info("purchase_order_deleted", extra={"order_id": str(order_id)})

    def update_status_comment(
        self,
        order_id: UUID,
        history_id: UUID,
        comments: str | None,
        actor_id: UUID,
    ) -> StatusHistoryEntry:
        """Replace the comment on one history row; nothing else is editable."""
        operation = "update status comment"
        with LogContext.bind(actor_id=actor_id, order_id=order_id):
            try:
                entry = self._session.execute(
                    select(PurchaseOrderStatusHistoryModel)
                    .where(PurchaseOrderStatusHistoryModel.id == history_id)
                    .where(PurchaseOrderStatusHistoryModel.purchase_order_id == order_id)
                    .with_for_update()
                ).scalar_one_or_none()
                if entry is None:
                    if self._session.get(PurchaseOrderModel, order_id) is None:
                        raise PurchaseOrderNotFoundError(str(order_id))
                    raise StatusHistoryNotFoundError(str(order_id), str(history_id))

                entry.comments = comments
                entry.updated_by_id = actor_id
                self._session.flush()
                dto = entry.to_dto()
                self._session.commit()
            except SourcingKernelError as exc:
                self._rollback(operation, order_id, exc)
                raise
            except Exception as exc:
                self._rollback(operation, order_id, exc)
                raise ProcessingFailedError(operation, str(order_id)) from exc

            logger.info(
                "purchase_order_status_comment_updated",
                extra={"order_id": str(order_id), "history_id": str(history_id)},
            )
            return dto
