"""
Sourcing Kernel

Shared infrastructure for the purchase-order procurement system:
- Declarative ORM base, column types and engine/session handling
- Typed exception hierarchy with machine-readable codes
- Structured JSON logging
- Injectable clock and workflow value objects
- Row-locked sequence allocation
"""

__version__ = "0.1.0"
