"""
portweave runtime.

- binding_engine: ReactiveBindingEngine (widget port <-> widget port)
- binding_processor: DataBindingProcessor (widget port <-> ORS attribute)
- binding_graph: port graph and cycle detection
- scheduler: timer sources for debounced bindings
"""

from portweave.runtime.binding_engine import (
    COMPLETED_PORT,
    ERROR_PORT,
    FlowValidationState,
    ReactiveBindingEngine,
)
from portweave.runtime.binding_graph import BindingGraph
from portweave.runtime.binding_processor import DataBindingProcessor
from portweave.runtime.scheduler import (
    AsyncioScheduler,
    ManualScheduler,
    Scheduler,
    ThreadingScheduler,
    TimerHandle,
)

__all__ = [
    "COMPLETED_PORT",
    "ERROR_PORT",
    "FlowValidationState",
    "ReactiveBindingEngine",
    "BindingGraph",
    "DataBindingProcessor",
    "AsyncioScheduler",
    "ManualScheduler",
    "Scheduler",
    "ThreadingScheduler",
    "TimerHandle",
]
