"""
Reactive binding engine.

Keeps the ports of independently rendered widgets consistent by pushing
every port update along a static list of bindings. One engine lives for
one rendered screen and must be disposed when the screen is torn down.

Propagation rules:
- validate bindings evaluate their expression against the new value and
  report falsy/failed results through the validation-error observer
- update bindings compute the target value (passthrough or expression)
  and then apply it immediately (realtime), after a quiet period
  (debounced), or when explicitly confirmed (on_confirm)
- chained realtime bindings settle depth-first inside one update_port call
- cycles are legal; a branch deeper than max_propagation_depth is logged
  and dropped without touching sibling branches
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from portweave.config import EngineConfig
from portweave.core.errors import BindingConfigError, ExpressionError, InvalidPathError
from portweave.core.expression_lang import evaluate_source, is_truthy, validate_syntax
from portweave.core.paths import parse_widget_port_path
from portweave.runtime.binding_graph import BindingGraph
from portweave.runtime.scheduler import Scheduler, ThreadingScheduler, TimerHandle
from portweave.specs.binding import (
    BindingMechanism,
    PropagationEvent,
    ReactiveBinding,
    ReactiveBindingSpec,
    RelationshipType,
    UpdateMode,
)

logger = logging.getLogger(__name__)

# Reserved port ids every widget may publish for flow validation
ERROR_PORT = "_error"
COMPLETED_PORT = "_completed"

PropagationCallback = Callable[[list[PropagationEvent]], None]
ValidationErrorCallback = Callable[[str, str], None]


@dataclass
class FlowValidationState:
    """Whether the screen can move on, derived from the reserved ports."""

    can_proceed: bool
    widget_errors: dict[str, dict[str, Any]] = field(default_factory=dict)
    incomplete_widgets: list[str] = field(default_factory=list)


ValidationStateCallback = Callable[[FlowValidationState], None]


@dataclass
class _PendingConfirm:
    binding: ReactiveBinding
    value: Any
    timestamp: float = field(default_factory=time.time)


class _ArmedTimer:
    __slots__ = ("binding", "value", "handle")

    def __init__(self, binding: ReactiveBinding, value: Any) -> None:
        self.binding = binding
        self.value = value
        self.handle: TimerHandle | None = None


def _is_reserved_port(path: str) -> bool:
    port_id = path.partition(".")[2]
    return port_id in (ERROR_PORT, COMPLETED_PORT)


class ReactiveBindingEngine:
    """
    Port store plus binding propagation for one screen.

    Example:
        engine = ReactiveBindingEngine(spec, max_propagation_depth=5)
        engine.set_on_propagate(lambda events: print(events))
        engine.init_port("slider.value", 0)
        engine.update_port("slider.value", 42)
        engine.get_port_value("preview.scale")
    """

    def __init__(
        self,
        spec: ReactiveBindingSpec | Iterable[ReactiveBinding],
        config: EngineConfig | None = None,
        scheduler: Scheduler | None = None,
        **overrides: Any,
    ) -> None:
        """
        Build the engine and validate the binding list.

        Args:
            spec: A ReactiveBindingSpec or a plain iterable of bindings.
            config: Engine settings (defaults to EngineConfig()).
            scheduler: Timer source for debounced bindings
                (defaults to ThreadingScheduler()).
            **overrides: Individual EngineConfig fields, e.g. max_propagation_depth=5.

        Raises:
            BindingConfigError: If a binding can never run as declared.
        """
        base = config or EngineConfig()
        if overrides:
            base = EngineConfig.model_validate({**base.model_dump(), **overrides})
        self._config = base

        bindings = spec.bindings if isinstance(spec, ReactiveBindingSpec) else list(spec)
        _validate_bindings(bindings)
        self._bindings: tuple[ReactiveBinding, ...] = tuple(bindings)
        self._graph = BindingGraph(self._bindings)
        self._scheduler: Scheduler = scheduler or ThreadingScheduler()

        self._ports: dict[str, Any] = {}
        self._timers: dict[str, _ArmedTimer] = {}
        self._pending: dict[str, _PendingConfirm] = {}

        self._on_propagate: PropagationCallback | None = None
        self._on_validation_error: ValidationErrorCallback | None = None
        self._on_validation_state_change: ValidationStateCallback | None = None

        # Timer threads and callers take turns; re-entry from observers is allowed
        self._lock = threading.RLock()
        self._disposed = False

        for cycle in self._graph.find_cycles():
            logger.warning("Binding cycle detected: %s", " -> ".join(cycle + cycle[:1]))

        if self._config.debug:
            logger.debug(
                "ReactiveBindingEngine initialised with %d bindings (%d enabled)",
                len(self._bindings),
                self._graph.edge_count,
            )

    # ==========================================================================
    # Properties
    # ==========================================================================

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def bindings(self) -> tuple[ReactiveBinding, ...]:
        return self._bindings

    @property
    def graph(self) -> BindingGraph:
        return self._graph

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    # ==========================================================================
    # Port operations
    # ==========================================================================

    def init_port(self, path: str, value: Any) -> None:
        """Set a port's value without firing any binding."""
        with self._lock:
            if self._disposed:
                return
            self._store(path, value)
            if self._config.debug:
                logger.debug("init_port %s = %r", path, value)

    def update_port(self, path: str, value: Any) -> None:
        """Set a port's value and process every binding sourced from it."""
        with self._lock:
            if self._disposed:
                return
            if self._config.debug:
                logger.debug("update_port %s = %r", path, value)
            self._store(path, value)
            self._fan_out(path, value, depth=0)

    def get_port_value(self, path: str) -> Any:
        with self._lock:
            return self._ports.get(path)

    def get_widget_port_values(self, widget_id: str) -> dict[str, Any]:
        """Port values of one widget, keyed by port id."""
        prefix = f"{widget_id}."
        with self._lock:
            return {
                path[len(prefix) :]: value
                for path, value in self._ports.items()
                if path.startswith(prefix)
            }

    def get_all_port_values(self) -> dict[str, Any]:
        with self._lock:
            return dict(self._ports)

    # ==========================================================================
    # Confirmation
    # ==========================================================================

    def confirm_binding(self, binding_id: str) -> None:
        """Apply the pending on_confirm value of one binding, if any."""
        with self._lock:
            if self._disposed:
                return
            pending = self._pending.pop(binding_id, None)
            if pending is None:
                logger.warning("No pending binding found: %s", binding_id)
                return
            self._deliver(pending.binding, pending.value, fan_out_depth=0)

    def confirm_all_bindings(self) -> None:
        """Apply every on_confirm value pending at the time of the call."""
        with self._lock:
            if self._disposed:
                return
            for binding_id in list(self._pending):
                # An earlier confirmation may have cancelled or consumed this one
                pending = self._pending.pop(binding_id, None)
                if pending is not None:
                    self._deliver(pending.binding, pending.value, fan_out_depth=0)

    def cancel_binding(self, binding_id: str) -> None:
        """Discard a pending on_confirm value without applying it."""
        with self._lock:
            if self._pending.pop(binding_id, None) is not None and self._config.debug:
                logger.debug("Cancelled pending binding %s", binding_id)

    def get_pending_confirm_bindings(self) -> list[str]:
        with self._lock:
            return list(self._pending)

    def flush(self) -> None:
        """Fire every armed debounce timer now, with its latest value."""
        with self._lock:
            if self._disposed:
                return
            armed = list(self._timers.values())
            self._timers.clear()
            for entry in armed:
                if entry.handle is not None:
                    entry.handle.cancel()
                self._propagate(entry.binding, entry.value, depth=0)

    # ==========================================================================
    # Observers (single subscriber each; last registration wins)
    # ==========================================================================

    def set_on_propagate(self, callback: PropagationCallback | None) -> None:
        self._on_propagate = callback

    def set_on_validation_error(self, callback: ValidationErrorCallback | None) -> None:
        self._on_validation_error = callback

    def set_on_validation_state_change(self, callback: ValidationStateCallback | None) -> None:
        self._on_validation_state_change = callback

    # ==========================================================================
    # Flow validation
    # ==========================================================================

    def get_flow_validation_state(self) -> FlowValidationState:
        """
        Summarise the reserved ports of all widgets.

        A widget blocks the flow when its ``_error`` port reports hasError or
        its ``_completed`` port is present but not isCompleted.
        """
        widget_errors: dict[str, dict[str, Any]] = {}
        incomplete: list[str] = []

        with self._lock:
            ports = list(self._ports.items())

        for path, value in ports:
            widget_id, _, port_id = path.partition(".")
            if port_id == ERROR_PORT:
                if isinstance(value, dict) and value.get("hasError"):
                    widget_errors[widget_id] = value
            elif port_id == COMPLETED_PORT:
                if not (isinstance(value, dict) and value.get("isCompleted")):
                    incomplete.append(widget_id)

        return FlowValidationState(
            can_proceed=not widget_errors and not incomplete,
            widget_errors=widget_errors,
            incomplete_widgets=incomplete,
        )

    # ==========================================================================
    # Lifecycle
    # ==========================================================================

    def dispose(self) -> None:
        """Cancel all timers and drop all port and pending state."""
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            for entry in self._timers.values():
                if entry.handle is not None:
                    entry.handle.cancel()
            self._timers.clear()
            self._pending.clear()
            self._ports.clear()
            self._on_propagate = None
            self._on_validation_error = None
            self._on_validation_state_change = None

            if self._config.debug:
                logger.debug("ReactiveBindingEngine disposed")

    # ==========================================================================
    # Propagation internals
    # ==========================================================================

    def _store(self, path: str, value: Any) -> None:
        self._ports[path] = value
        if _is_reserved_port(path):
            self._notify_validation_state()

    def _fan_out(self, path: str, value: Any, depth: int) -> None:
        for binding in self._graph.bindings_from(path):
            self._process_binding(binding, value, depth)

    def _process_binding(self, binding: ReactiveBinding, value: Any, depth: int) -> None:
        if binding.mechanism == BindingMechanism.VALIDATE:
            self._run_validation(binding, value)
            return

        try:
            target_value = self._apply_relationship(binding, value)
        except ExpressionError as e:
            logger.error(
                "Binding %s expression failed, skipping propagation: %s", binding.id, e
            )
            return

        if binding.update_mode == UpdateMode.REALTIME:
            self._propagate(binding, target_value, depth)
        elif binding.update_mode == UpdateMode.DEBOUNCED:
            self._arm_debounce(binding, target_value)
        else:
            self._pending[binding.id] = _PendingConfirm(binding, target_value)
            if self._config.debug:
                logger.debug("Queued for confirmation: %s", binding.id)

    def _apply_relationship(self, binding: ReactiveBinding, value: Any) -> Any:
        expression = binding.relationship.expression
        if binding.relationship.type == RelationshipType.PASSTHROUGH or expression is None:
            return value
        return evaluate_source(
            expression,
            {"source": value, "target": self._ports.get(binding.target)},
        )

    def _run_validation(self, binding: ReactiveBinding, value: Any) -> None:
        try:
            valid = is_truthy(self._apply_relationship(binding, value))
            message = f"Validation failed for {binding.id}"
        except ExpressionError as e:
            valid = False
            message = f"Validation failed for {binding.id}: {e}"

        if not valid:
            if self._config.debug:
                logger.debug("%s (target %s)", message, binding.target)
            self._notify_validation_error(binding.target, message)

    def _propagate(self, binding: ReactiveBinding, value: Any, depth: int) -> None:
        next_depth = depth + 1
        if next_depth > self._config.max_propagation_depth:
            logger.error(
                "Max propagation depth exceeded at binding %s (limit %d); aborting branch",
                binding.id,
                self._config.max_propagation_depth,
            )
            return
        self._deliver(binding, value, fan_out_depth=next_depth)

    def _deliver(self, binding: ReactiveBinding, value: Any, fan_out_depth: int) -> None:
        """Write the target port, report it, then continue from the target."""
        self._store(binding.target, value)
        self._notify_propagate(
            [
                PropagationEvent(
                    binding_id=binding.id,
                    source=binding.source,
                    target=binding.target,
                    value=value,
                    mechanism=binding.mechanism,
                )
            ]
        )
        self._fan_out(binding.target, value, fan_out_depth)

    def _arm_debounce(self, binding: ReactiveBinding, value: Any) -> None:
        previous = self._timers.pop(binding.id, None)
        if previous is not None and previous.handle is not None:
            previous.handle.cancel()

        entry = _ArmedTimer(binding, value)
        self._timers[binding.id] = entry
        # debounce_ms is guaranteed by _validate_bindings
        entry.handle = self._scheduler.call_later(
            binding.debounce_ms or 0, lambda: self._fire_debounce(binding.id, entry)
        )

    def _fire_debounce(self, binding_id: str, entry: _ArmedTimer) -> None:
        with self._lock:
            # Stale timers (re-armed, flushed or disposed) must not propagate
            if self._disposed or self._timers.get(binding_id) is not entry:
                return
            del self._timers[binding_id]
            self._propagate(entry.binding, entry.value, depth=0)

    # ==========================================================================
    # Observer dispatch
    # ==========================================================================

    def _notify_propagate(self, events: list[PropagationEvent]) -> None:
        callback = self._on_propagate
        if callback is None:
            return
        try:
            callback(events)
        except Exception:
            logger.exception("Propagation observer raised")

    def _notify_validation_error(self, target: str, message: str) -> None:
        callback = self._on_validation_error
        if callback is None:
            return
        try:
            callback(target, message)
        except Exception:
            logger.exception("Validation-error observer raised")

    def _notify_validation_state(self) -> None:
        callback = self._on_validation_state_change
        if callback is None:
            return
        try:
            callback(self.get_flow_validation_state())
        except Exception:
            logger.exception("Validation-state observer raised")


def _validate_bindings(bindings: list[ReactiveBinding]) -> None:
    """Reject binding lists that cannot run as declared."""
    seen: set[str] = set()
    for binding in bindings:
        if binding.id in seen:
            raise BindingConfigError(f"Duplicate binding id: {binding.id}")
        seen.add(binding.id)

        for path in (binding.source, binding.target):
            try:
                parse_widget_port_path(path)
            except InvalidPathError as e:
                raise BindingConfigError(f"Binding {binding.id}: {e.message}") from e

        if binding.update_mode == UpdateMode.DEBOUNCED and binding.debounce_ms is None:
            raise BindingConfigError(
                f"Binding {binding.id}: updateMode 'debounced' requires debounceMs"
            )

        relationship = binding.relationship
        if relationship.type != RelationshipType.PASSTHROUGH:
            if not relationship.expression:
                raise BindingConfigError(
                    f"Binding {binding.id}: relationship '{relationship.type}' "
                    f"requires a '{relationship.type}' expression"
                )
            ok, error = validate_syntax(relationship.expression)
            if not ok:
                # Still legal to construct; the binding logs and skips at runtime
                logger.warning("Binding %s has an invalid expression: %s", binding.id, error)


__all__ = [
    "COMPLETED_PORT",
    "ERROR_PORT",
    "FlowValidationState",
    "ReactiveBindingEngine",
]
