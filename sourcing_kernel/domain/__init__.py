"""Pure domain value objects: clock and workflow definitions."""

from sourcing_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from sourcing_kernel.domain.workflow import Guard, Transition, Workflow

__all__ = [
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "Guard",
    "Transition",
    "Workflow",
]
