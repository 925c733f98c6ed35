"""
Typed Exception Hierarchy for the Sourcing Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Procurement callers must react to errors precisely: a missing courier name is
corrected and resubmitted, a receipt that does not add up is recounted, an
illegal transition is a client bug.  Parsing message strings for that is
fragile, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    try:
        service.transition(order_id, ShipToBangladesh(lot_number=""), actor_id)
    except MissingRequiredFieldError as e:
        api_response(422, code=e.code, field=e.field_name, stage=e.stage)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    SourcingKernelError (base)
    |
    +-- WorkflowError
    |   +-- IllegalTransitionError
    |
    +-- ValidationError
    |   +-- MissingRequiredFieldError
    |   +-- InvalidFieldValueError
    |
    +-- AllocationError
    |   +-- InvalidAllocationInputError
    |
    +-- ReceivingError
    |   +-- ReceiptQuantityMismatchError
    |   +-- DuplicateReceiptError
    |   +-- VariantProductMismatchError
    |
    +-- StockError
    |   +-- StockAccountNotFoundError
    |   +-- InvalidStockQuantityError
    |
    +-- OrderError
    |   +-- PurchaseOrderNotFoundError
    |   +-- PurchaseOrderItemNotFoundError
    |   +-- OrderNotDeletableError
    |   +-- StatusHistoryNotFoundError
    |
    +-- CatalogError
    |   +-- SupplierNotFoundError
    |   +-- ProductNotFoundError
    |   +-- VariantNotFoundError
    |
    +-- ProcessingFailedError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                        | When Raised
-------------|-----------------------------|-------------------------------------------
Workflow     | ILLEGAL_TRANSITION          | Target is not the next state (or terminal)
-------------|-----------------------------|-------------------------------------------
Validation   | MISSING_REQUIRED_FIELD      | Stage-required field absent or blank
             | INVALID_FIELD_VALUE         | Field present but out of range
-------------|-----------------------------|-------------------------------------------
Allocation   | INVALID_ALLOCATION_INPUT    | Rate <= 0, lost > ordered, zero total qty
-------------|-----------------------------|-------------------------------------------
Receiving    | RECEIPT_QUANTITY_MISMATCH   | Variant split != effective quantity
             | DUPLICATE_RECEIPT           | Same line item received twice in a payload
             | VARIANT_PRODUCT_MISMATCH    | Variant belongs to a different product
-------------|-----------------------------|-------------------------------------------
Stock        | STOCK_ACCOUNT_NOT_FOUND     | Reading a variant that was never stocked
             | INVALID_STOCK_QUANTITY      | AddStock with quantity <= 0 or cost < 0
-------------|-----------------------------|-------------------------------------------
Order        | PURCHASE_ORDER_NOT_FOUND    | Order ID doesn't exist
             | PURCHASE_ORDER_ITEM_NOT_FOUND | Item ID not on this order
             | ORDER_NOT_DELETABLE         | Delete requested past draft
             | STATUS_HISTORY_NOT_FOUND    | History row not on this order
-------------|-----------------------------|-------------------------------------------
Catalog      | SUPPLIER_NOT_FOUND          | Unknown supplier
             | PRODUCT_NOT_FOUND           | Unknown product
             | VARIANT_NOT_FOUND           | Unknown product variant
-------------|-----------------------------|-------------------------------------------
Processing   | PROCESSING_FAILED           | Unexpected failure, rolled back, cause set
-------------|-----------------------------|-------------------------------------------
Config       | CONFIGURATION_ERROR         | Invalid configuration value

===============================================================================
DESIGN DECISIONS
===============================================================================

1. Domain exceptions inherit from Exception, not ValueError, so they can be
   caught as a group without swallowing programming errors.

2. ``code`` is a class attribute: static per type, available without an
   instance, usable for API documentation.

3. ValidationError, WorkflowError, AllocationError and ReceivingError are all
   raised before any mutation.  ProcessingFailedError is the only error that
   means "the mutation phase failed and was rolled back".
"""


class SourcingKernelError(Exception):
    """
    Base exception for all sourcing kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "SOURCING_KERNEL_ERROR"


# Workflow exceptions


class WorkflowError(SourcingKernelError):
    """Base exception for state-machine errors."""

    code: str = "WORKFLOW_ERROR"


class IllegalTransitionError(WorkflowError):
    """Requested status is not a legal next state for the order."""

    code: str = "ILLEGAL_TRANSITION"

    def __init__(self, order_id: str, from_status: str, to_status: str):
        self.order_id = order_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Invalid status transition from {from_status} to {to_status} "
            f"for purchase order {order_id}"
        )


# Validation exceptions


class ValidationError(SourcingKernelError):
    """Base exception for request payload validation errors."""

    code: str = "VALIDATION_ERROR"


class MissingRequiredFieldError(ValidationError):
    """A field required by the target stage was not supplied."""

    code: str = "MISSING_REQUIRED_FIELD"

    def __init__(self, stage: str, field_name: str):
        self.stage = stage
        self.field_name = field_name
        super().__init__(f"Field '{field_name}' is required to enter {stage}")


class InvalidFieldValueError(ValidationError):
    """A supplied field value is outside its allowed range."""

    code: str = "INVALID_FIELD_VALUE"

    def __init__(self, field_name: str, value: object, reason: str):
        self.field_name = field_name
        self.value = str(value)
        self.reason = reason
        super().__init__(f"Invalid value for '{field_name}' ({value}): {reason}")


# Allocation exceptions


class AllocationError(SourcingKernelError):
    """Base exception for landed-cost allocation errors."""

    code: str = "ALLOCATION_ERROR"


class InvalidAllocationInputError(AllocationError):
    """Allocator inputs cannot produce a meaningful landed cost."""

    code: str = "INVALID_ALLOCATION_INPUT"

    def __init__(self, reason: str, item_id: str | None = None):
        self.reason = reason
        self.item_id = item_id
        prefix = f"Item {item_id}: " if item_id else ""
        super().__init__(f"{prefix}invalid allocation input: {reason}")


# Receiving exceptions


class ReceivingError(SourcingKernelError):
    """Base exception for goods-received errors."""

    code: str = "RECEIVING_ERROR"


class ReceiptQuantityMismatchError(ReceivingError):
    """
    Received variant quantities do not add up to the effective quantity.

    Rejecting the receipt prevents silently losing or fabricating stock.
    """

    code: str = "RECEIPT_QUANTITY_MISMATCH"

    def __init__(self, item_id: str, expected: int, received: int):
        self.item_id = item_id
        self.expected = expected
        self.received = received
        super().__init__(
            f"Item {item_id}: received variants total {received} units, "
            f"expected effective quantity {expected}"
        )


class DuplicateReceiptError(ReceivingError):
    """The same line item appears more than once in a receipt payload."""

    code: str = "DUPLICATE_RECEIPT"

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Item {item_id} appears more than once in the receipt")


class VariantProductMismatchError(ReceivingError):
    """A received variant does not belong to the line item's product."""

    code: str = "VARIANT_PRODUCT_MISMATCH"

    def __init__(self, item_id: str, variant_id: str, product_id: str):
        self.item_id = item_id
        self.variant_id = variant_id
        self.product_id = product_id
        super().__init__(
            f"Item {item_id}: variant {variant_id} is not a variant of "
            f"product {product_id}"
        )


# Stock exceptions


class StockError(SourcingKernelError):
    """Base exception for stock account errors."""

    code: str = "STOCK_ERROR"


class StockAccountNotFoundError(StockError):
    """No stock account exists for the variant."""

    code: str = "STOCK_ACCOUNT_NOT_FOUND"

    def __init__(self, variant_id: str):
        self.variant_id = variant_id
        super().__init__(f"No stock account for product variant {variant_id}")


class InvalidStockQuantityError(StockError):
    """AddStock called with a non-positive quantity or a negative cost."""

    code: str = "INVALID_STOCK_QUANTITY"

    def __init__(self, variant_id: str, quantity: int, unit_cost: object = None):
        self.variant_id = variant_id
        self.quantity = quantity
        self.unit_cost = None if unit_cost is None else str(unit_cost)
        super().__init__(
            f"Cannot add {quantity} units at cost {unit_cost} to variant {variant_id}"
        )


# Order exceptions


class OrderError(SourcingKernelError):
    """Base exception for purchase order lookups and lifecycle errors."""

    code: str = "ORDER_ERROR"


class PurchaseOrderNotFoundError(OrderError):
    """Purchase order with given ID was not found."""

    code: str = "PURCHASE_ORDER_NOT_FOUND"

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Purchase order not found: {order_id}")


class PurchaseOrderItemNotFoundError(OrderError):
    """Line item does not exist on the given purchase order."""

    code: str = "PURCHASE_ORDER_ITEM_NOT_FOUND"

    def __init__(self, order_id: str, item_id: str):
        self.order_id = order_id
        self.item_id = item_id
        super().__init__(
            f"Item {item_id} does not belong to purchase order {order_id}"
        )


class OrderNotDeletableError(OrderError):
    """Orders are historical records once they leave draft."""

    code: str = "ORDER_NOT_DELETABLE"

    def __init__(self, order_id: str, status: str):
        self.order_id = order_id
        self.status = status
        super().__init__(
            f"Can only delete draft purchase orders; {order_id} is {status}"
        )


class StatusHistoryNotFoundError(OrderError):
    """Status history row does not exist on the given order."""

    code: str = "STATUS_HISTORY_NOT_FOUND"

    def __init__(self, order_id: str, history_id: str):
        self.order_id = order_id
        self.history_id = history_id
        super().__init__(
            f"Status history {history_id} not found for purchase order {order_id}"
        )


# Catalog exceptions


class CatalogError(SourcingKernelError):
    """Base exception for missing catalog collaborators."""

    code: str = "CATALOG_ERROR"


class SupplierNotFoundError(CatalogError):
    code: str = "SUPPLIER_NOT_FOUND"

    def __init__(self, supplier_id: str):
        self.supplier_id = supplier_id
        super().__init__(f"Supplier not found: {supplier_id}")


class ProductNotFoundError(CatalogError):
    code: str = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class VariantNotFoundError(CatalogError):
    code: str = "VARIANT_NOT_FOUND"

    def __init__(self, variant_id: str):
        self.variant_id = variant_id
        super().__init__(f"Product variant not found: {variant_id}")


# Processing exceptions


class ProcessingFailedError(SourcingKernelError):
    """
    Unexpected failure during the mutation phase.

    The transaction has been rolled back.  The underlying exception is
    attached as ``__cause__``.
    """

    code: str = "PROCESSING_FAILED"

    def __init__(self, operation: str, order_id: str | None = None):
        self.operation = operation
        self.order_id = order_id
        target = f" for purchase order {order_id}" if order_id else ""
        super().__init__(f"Failed to {operation}{target}")


# Configuration exceptions


class ConfigurationError(SourcingKernelError):
    """Configuration file or value is invalid."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid configuration '{key}': {reason}")
