"""
Module: sourcing_engines
Responsibility:
    Package entrypoint re-exporting the pure calculation engines.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import sourcing_kernel.  MUST NOT import sourcing_modules.

Invariants enforced:
    - Engines never read the clock; timestamps are the caller's concern.
    - Decimal-only arithmetic for money and rates.
    - Identical inputs always produce identical outputs.

Usage:
    from sourcing_engines import LandedCostAllocator, LandedCostLine, summarize_order
"""

from sourcing_engines.landed_cost import (
    LandedCostAllocator,
    LandedCostLine,
    LandedCostResult,
    OrderCostSummary,
    summarize_order,
)
from sourcing_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    "LandedCostAllocator",
    "LandedCostLine",
    "LandedCostResult",
    "OrderCostSummary",
    "summarize_order",
    "traced_engine",
    "compute_input_fingerprint",
]
