"""
Sourcing modules: catalog stand-ins, inventory stock accounts and the
purchase-order procurement workflow.
"""
