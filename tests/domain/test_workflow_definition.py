"""
Tests for the workflow value objects and the purchase-order workflow.

Validates:
- Workflow construction rejects unknown and terminal-source states
- find_transition / next_states / is_terminal
- Purchase-order lifecycle shape: one forward path, lost from every open state
"""

import pytest

from sourcing_kernel.domain.workflow import Guard, Transition, Workflow
from sourcing_modules.procurement.workflows import (
    FORWARD_PATH,
    PURCHASE_ORDER_WORKFLOW,
)


class TestWorkflowConstruction:

    def test_initial_state_must_be_declared(self):
        with pytest.raises(ValueError, match="initial state"):
            Workflow(
                name="w", description="", initial_state="missing",
                states=("a", "b"), transitions=(),
            )

    def test_transition_states_must_be_declared(self):
        with pytest.raises(ValueError, match="unknown state"):
            Workflow(
                name="w", description="", initial_state="a",
                states=("a", "b"), transitions=(Transition("a", "c", action="go"),),
            )

    def test_terminal_state_cannot_have_outgoing_transition(self):
        with pytest.raises(ValueError, match="terminal state"):
            Workflow(
                name="w", description="", initial_state="a",
                states=("a", "b"),
                transitions=(Transition("b", "a", action="reopen"),),
                terminal_states=("b",),
            )

    def test_lookup_helpers(self):
        guard = Guard(name="ready", description="ready to go")
        wf = Workflow(
            name="w", description="", initial_state="a",
            states=("a", "b", "c"),
            transitions=(
                Transition("a", "b", action="go", guard=guard, required_fields=("x",)),
                Transition("a", "c", action="stop"),
            ),
            terminal_states=("c",),
        )

        t = wf.find_transition("a", "b")
        assert t.action == "go"
        assert t.guard is guard
        assert t.required_fields == ("x",)
        assert wf.find_transition("b", "a") is None
        assert wf.next_states("a") == ("b", "c")
        assert wf.is_terminal("c")
        assert not wf.is_terminal("a")


class TestPurchaseOrderWorkflow:

    def test_initial_and_terminal_states(self):
        assert PURCHASE_ORDER_WORKFLOW.initial_state == "draft"
        assert set(PURCHASE_ORDER_WORKFLOW.terminal_states) == {"completed", "lost"}

    def test_forward_path_is_linear(self):
        for current, following in zip(FORWARD_PATH, FORWARD_PATH[1:]):
            forward = [s for s in PURCHASE_ORDER_WORKFLOW.next_states(current) if s != "lost"]
            assert forward == [following]

    @pytest.mark.parametrize("state", [s for s in FORWARD_PATH if s != "completed"])
    def test_lost_reachable_from_every_open_state(self, state):
        assert "lost" in PURCHASE_ORDER_WORKFLOW.next_states(state)

    @pytest.mark.parametrize("state", ["completed", "lost"])
    def test_terminal_states_have_no_exits(self, state):
        assert PURCHASE_ORDER_WORKFLOW.next_states(state) == ()

    def test_required_fields_by_stage(self):
        def required(src, dst):
            return PURCHASE_ORDER_WORKFLOW.find_transition(src, dst).required_fields

        assert required("draft", "payment_confirmed") == ("exchange_rate",)
        assert required("payment_confirmed", "supplier_dispatched") == (
            "courier_name", "tracking_number",
        )
        assert required("supplier_dispatched", "shipped_bd") == ("lot_number",)
        assert required("shipped_bd", "arrived_bd") == ()
        assert required("arrived_bd", "in_transit_bogura") == ("bd_courier_tracking",)
        assert required("in_transit_bogura", "received_hub") == ("total_weight", "items")
        assert required("received_hub", "completed") == ()
