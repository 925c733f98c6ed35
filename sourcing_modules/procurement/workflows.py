"""
Procurement Workflows.

The purchase-order lifecycle as data: one forward path from draft to
completed, plus an absorbing ``lost`` state reachable from every
non-terminal state.
"""

from sourcing_kernel.domain.workflow import Guard, Transition, Workflow
from sourcing_kernel.logging_config import get_logger

logger = get_logger("modules.procurement.workflows")


# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

EXCHANGE_RATE_POSITIVE = Guard(
    name="exchange_rate_positive",
    description="Exchange rate supplied and greater than zero",
)

RECEIPTS_BALANCED = Guard(
    name="receipts_balanced",
    description="Every line received once and variant quantities match effective quantity",
)

COSTS_FINALIZED = Guard(
    name="costs_finalized",
    description="Landed cost allocated to every line",
)


# -----------------------------------------------------------------------------
# Purchase Order Workflow
# -----------------------------------------------------------------------------

FORWARD_PATH = (
    "draft",
    "payment_confirmed",
    "supplier_dispatched",
    "shipped_bd",
    "arrived_bd",
    "in_transit_bogura",
    "received_hub",
    "completed",
)

_LOST_TRANSITIONS = tuple(
    Transition(state, "lost", action="mark_lost")
    for state in FORWARD_PATH
    if state != "completed"
)

PURCHASE_ORDER_WORKFLOW = Workflow(
    name="purchase_order",
    description="Import purchase order from supplier payment to hub receipt",
    initial_state="draft",
    states=FORWARD_PATH + ("lost",),
    transitions=(
        Transition(
            "draft", "payment_confirmed", action="confirm_payment",
            guard=EXCHANGE_RATE_POSITIVE, required_fields=("exchange_rate",),
        ),
        Transition(
            "payment_confirmed", "supplier_dispatched", action="dispatch_from_supplier",
            required_fields=("courier_name", "tracking_number"),
        ),
        Transition(
            "supplier_dispatched", "shipped_bd", action="ship_to_bangladesh",
            required_fields=("lot_number",),
        ),
        Transition("shipped_bd", "arrived_bd", action="arrive_in_bangladesh"),
        Transition(
            "arrived_bd", "in_transit_bogura", action="dispatch_to_hub",
            required_fields=("bd_courier_tracking",),
        ),
        Transition(
            "in_transit_bogura", "received_hub", action="receive_at_hub",
            guard=RECEIPTS_BALANCED, required_fields=("total_weight", "items"),
        ),
        Transition(
            "received_hub", "completed", action="complete",
            guard=COSTS_FINALIZED,
        ),
    ) + _LOST_TRANSITIONS,
    terminal_states=("completed", "lost"),
)

logger.info(
    "procurement_po_workflow_registered",
    extra={
        "workflow_name": PURCHASE_ORDER_WORKFLOW.name,
        "state_count": len(PURCHASE_ORDER_WORKFLOW.states),
        "transition_count": len(PURCHASE_ORDER_WORKFLOW.transitions),
        "initial_state": PURCHASE_ORDER_WORKFLOW.initial_state,
    },
)
