"""Testing support – fakes, builders, strategies and a sample domain.

Only the Hypothesis strategies need the ``test`` extra; they import it lazily::

    from aggregate_kit.testing import InMemoryDomainEventBus, IssueBuilder
"""

from aggregate_kit.testing.fakes import FailingStore, InMemoryDomainEventBus
from aggregate_kit.testing.generators import (
    Builder,
    IssueBuilder,
    blank_text_strategy,
    close_reopen_strategy,
    entity_id_strategy,
    non_blank_text_strategy,
)

__all__ = [
    "Builder",
    "FailingStore",
    "InMemoryDomainEventBus",
    "IssueBuilder",
    "blank_text_strategy",
    "close_reopen_strategy",
    "entity_id_strategy",
    "non_blank_text_strategy",
]
