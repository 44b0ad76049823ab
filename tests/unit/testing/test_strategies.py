"""Unit tests for the Hypothesis strategies."""
from __future__ import annotations

import importlib
import sys

import pytest
from hypothesis import given

from aggregate_kit.kernel.types import EntityId
from aggregate_kit.testing.generators import (
    blank_text_strategy,
    close_reopen_strategy,
    entity_id_strategy,
    non_blank_text_strategy,
)
from aggregate_kit.testing.sample import IssueId


class TestStrategies:
    @given(entity_id_strategy())
    def test_default_id_type(self, eid: EntityId) -> None:
        assert type(eid) is EntityId

    @given(entity_id_strategy(IssueId))
    def test_typed_ids(self, iid: EntityId) -> None:
        assert isinstance(iid, IssueId)
        assert len(str(iid)) == 36

    @given(non_blank_text_strategy(max_size=10))
    def test_non_blank_text(self, text: str) -> None:
        assert text
        assert text == text.strip()
        assert len(text) <= 10

    @given(blank_text_strategy())
    def test_blank_text(self, text: str) -> None:
        assert text.strip() == ""

    @given(close_reopen_strategy(max_size=5))
    def test_commands(self, commands: list[str]) -> None:
        assert len(commands) <= 5
        assert set(commands) <= {"close", "reopen"}


class TestWithoutHypothesis:
    def test_package_imports_and_strategies_fail_clearly(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setitem(sys.modules, "hypothesis", None)
        monkeypatch.setitem(sys.modules, "hypothesis.strategies", None)
        for name in (
            "aggregate_kit.testing",
            "aggregate_kit.testing.generators",
            "aggregate_kit.testing.generators.strategies",
        ):
            monkeypatch.delitem(sys.modules, name, raising=False)

        testing = importlib.import_module("aggregate_kit.testing")
        assert testing.InMemoryDomainEventBus is not None
        with pytest.raises(ImportError, match="pip install hypothesis"):
            testing.close_reopen_strategy()
