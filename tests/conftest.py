"""Shared pytest fixtures for portweave tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

import pytest

from portweave.runtime import ManualScheduler, ReactiveBindingEngine
from portweave.specs import (
    ORS,
    Attribute,
    ConcreteType,
    Entity,
    ORSMetadata,
    ReactiveBinding,
    StageType,
    StructuralType,
)


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Virtual-clock scheduler for debounce tests."""
    return ManualScheduler()


@pytest.fixture
def make_engine(scheduler: ManualScheduler) -> Iterator[Callable[..., ReactiveBindingEngine]]:
    """Build engines on the shared virtual clock; disposes them after the test."""
    engines: list[ReactiveBindingEngine] = []

    def factory(bindings: list[ReactiveBinding], **overrides: Any) -> ReactiveBindingEngine:
        engine = ReactiveBindingEngine(bindings, scheduler=scheduler, **overrides)
        engines.append(engine)
        return engine

    yield factory

    for engine in engines:
        engine.dispose()


@pytest.fixture
def test_ors() -> ORS:
    """Small ORS with scalars, an array and a pointer."""
    return ORS(
        metadata=ORSMetadata(stage=StageType.DIVERGE, session_id="test-session", llm_model="test"),
        entities=[
            Entity(
                id="concern",
                type="concern",
                attributes=[
                    Attribute(
                        name="text",
                        structural_type=StructuralType.SVAL,
                        value_type=ConcreteType.STRING,
                        default_value="test concern",
                    ),
                    Attribute(
                        name="level",
                        structural_type=StructuralType.SVAL,
                        value_type=ConcreteType.NUMBER,
                        default_value=5,
                    ),
                ],
            ),
            Entity(
                id="emotion",
                type="widget_data",
                attributes=[
                    Attribute(
                        name="selected",
                        structural_type=StructuralType.ARRY,
                        item_type=StructuralType.SVAL,
                        item_value_type=ConcreteType.STRING,
                        default_value=[],
                    ),
                ],
            ),
            Entity(
                id="reference",
                type="widget_data",
                attributes=[
                    Attribute(
                        name="pointer",
                        structural_type=StructuralType.PNTR,
                        ref="concern.text",
                    ),
                ],
            ),
        ],
    )
