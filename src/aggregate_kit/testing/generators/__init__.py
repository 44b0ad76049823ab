"""Testing generators – builders and Hypothesis strategies."""
from aggregate_kit.testing.generators.builder import Builder, IssueBuilder
from aggregate_kit.testing.generators.strategies import (
    blank_text_strategy,
    close_reopen_strategy,
    entity_id_strategy,
    non_blank_text_strategy,
)

__all__ = [
    "Builder",
    "IssueBuilder",
    "blank_text_strategy",
    "close_reopen_strategy",
    "entity_id_strategy",
    "non_blank_text_strategy",
]
