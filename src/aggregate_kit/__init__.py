"""
aggregate_kit – aggregate persistence and unit-of-work coordination.

Import path convention::

    from aggregate_kit.kernel.errors import ValidationError
    from aggregate_kit.kernel.ddd import AggregateRoot, SubCollection, SubEntity
    from aggregate_kit.application.uow import UnitOfWorkCoordinator, AggregateRepository
    from aggregate_kit.adapters.sqlalchemy import SqlAlchemyAggregateStore
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
