"""
Module ORM Registry (``sourcing_modules._orm_registry``).

Responsibility
--------------
Ensure every module-level SQLAlchemy ORM model is imported so that
``Base.metadata`` contains its table before ``create_tables()`` runs.

Architecture position
---------------------
**Modules layer** -- utility.  Imported lazily by
``sourcing_kernel.db.engine.create_tables`` and by ``tests/conftest.py``.
"""


def import_all_orm_models() -> None:
    """Import the kernel sequence table and every ``sourcing_modules.*.orm`` module.

    Idempotent -- repeated calls are harmless.
    """
    import sourcing_kernel.services.sequence_service  # noqa: F401
    # fmt: off
    import sourcing_modules.catalog.orm  # noqa: F401
    import sourcing_modules.inventory.orm  # noqa: F401
    import sourcing_modules.procurement.orm  # noqa: F401
    # fmt: on
