"""
Data binding processor.

Connects widget ports to ORS attributes. The ORS itself is an immutable
snapshot; values written back by widgets live in a per-processor runtime
cache keyed by "entityId.attributeName", seeded from attribute defaults.

Pointer (PNTR) attributes are followed transitively on read, guarded by a
visited set so a pointer cycle resolves to None instead of looping.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from portweave.config import ProcessorConfig
from portweave.core.errors import ExpressionError
from portweave.core.expression_lang import evaluate_source
from portweave.core.paths import create_entity_attribute_path, split_entity_attribute_path
from portweave.specs.data_binding import DataBindingDirection, DataBindingSpec, ORSUpdateResult
from portweave.specs.ors import ORS, Attribute, Entity, StageType

logger = logging.getLogger(__name__)


class DataBindingProcessor:
    """
    Read/write bridge between widget ports and one ORS.

    Example:
        processor = DataBindingProcessor(ors)
        processor.get_initial_value(binding)   # ORS -> widget
        processor.update_value(binding, 7)     # widget -> ORS runtime cache
        processor.get_value("concern.level")   # -> 7
    """

    def __init__(self, ors: ORS, config: ProcessorConfig | None = None) -> None:
        self._config = config or ProcessorConfig()
        self._ors = ors
        self._entities: dict[str, Entity] = {}
        self._values: dict[str, Any] = {}
        self._disposed = False
        self._load(ors)

    @property
    def config(self) -> ProcessorConfig:
        return self._config

    @property
    def ors(self) -> ORS:
        return self._ors

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def _load(self, ors: ORS) -> None:
        self._ors = ors
        self._entities = {entity.id: entity for entity in ors.entities}
        self._values = {}

        for entity in ors.entities:
            for attr in entity.attributes:
                if attr.is_pointer or attr.default_value is None:
                    continue
                path = create_entity_attribute_path(entity.id, attr.name)
                self._values[path] = copy.deepcopy(attr.default_value)

        if self._config.debug:
            logger.debug(
                "Loaded ORS with %d entities, %d seeded values",
                len(self._entities),
                len(self._values),
            )

    # ==========================================================================
    # Lookup
    # ==========================================================================

    def get_entity(self, entity_id: str) -> Entity | None:
        return self._entities.get(entity_id)

    def get_attribute(self, entity_id: str, attribute_name: str) -> Attribute | None:
        entity = self._entities.get(entity_id)
        return entity.get_attribute(attribute_name) if entity else None

    def _attribute_at(self, path: str) -> Attribute | None:
        parts = split_entity_attribute_path(path)
        return self.get_attribute(*parts) if parts else None

    def get_stage(self) -> StageType | None:
        if self._disposed:
            return None
        return self._ors.metadata.stage

    # ==========================================================================
    # Reads
    # ==========================================================================

    def get_value(self, path: str) -> Any:
        """
        Current runtime value of an attribute.

        Cached values win. Otherwise pointers are resolved and plain
        attributes fall back to their default, which is then cached even
        when it is None.
        Unknown or malformed paths return None.
        """
        if self._disposed:
            return None
        if path in self._values:
            return self._values[path]

        attr = self._attribute_at(path)
        if attr is None:
            if split_entity_attribute_path(path) is None:
                logger.warning("Invalid entity attribute path: %r", path)
            return None

        if attr.is_pointer:
            return self.resolve_pntr(attr.ref) if attr.ref else None

        value = copy.deepcopy(attr.default_value)
        self._values[path] = value
        return value

    def resolve_pntr(self, ref: str) -> Any:
        """Follow a pointer chain to a value; None on cycles or dangling refs."""
        if self._disposed:
            return None
        final_path = self._follow_pointers(ref)
        if final_path is None:
            return None
        return self.get_value(final_path)

    def _follow_pointers(self, ref: str) -> str | None:
        """Path of the first non-pointer attribute reached from ``ref``."""
        visited: set[str] = set()
        current = ref
        while True:
            if current in visited:
                logger.warning("Circular PNTR reference detected: %s", current)
                return None
            visited.add(current)

            if current in self._values:
                return current
            attr = self._attribute_at(current)
            if attr is None:
                logger.warning("PNTR reference not found: %s", current)
                return None
            if not attr.is_pointer:
                return current
            if not attr.ref:
                logger.warning("PNTR attribute %s has no ref", current)
                return None
            current = attr.ref

    def get_initial_value(self, binding: DataBindingSpec) -> Any:
        """Value a widget port should start with (None for out-only bindings)."""
        if binding.direction == DataBindingDirection.OUT:
            return None

        value = self.get_value(binding.entity_attribute)
        to_widget = binding.transform.to_widget if binding.transform else None
        if not to_widget:
            return value

        try:
            return evaluate_source(to_widget, {"value": value})
        except ExpressionError as e:
            logger.warning(
                "toWidget transform failed for %s, using raw value: %s",
                binding.entity_attribute,
                e,
            )
            return value

    def get_all_values(self) -> dict[str, Any]:
        if self._disposed:
            return {}
        return dict(self._values)

    # ==========================================================================
    # Writes
    # ==========================================================================

    def update_value(self, binding: DataBindingSpec, value: Any) -> ORSUpdateResult:
        """Write a widget value back into the runtime cache."""
        if self._disposed:
            return ORSUpdateResult(success=False, error="Processor has been disposed")

        if binding.direction == DataBindingDirection.IN:
            return ORSUpdateResult(
                success=False,
                error=f"Cannot update input-only binding: {binding.entity_attribute}",
            )

        parts = split_entity_attribute_path(binding.entity_attribute)
        if parts is None:
            return ORSUpdateResult(
                success=False,
                error=f"Invalid entity attribute path: {binding.entity_attribute!r}",
            )

        to_ors = binding.transform.to_ors if binding.transform else None
        if to_ors:
            try:
                value = evaluate_source(to_ors, {"value": value})
            except ExpressionError as e:
                return ORSUpdateResult(success=False, error=f"Transform error: {e}")

        path = binding.entity_attribute
        attr = self._attribute_at(path)
        if attr is not None and attr.is_pointer:
            if not attr.ref:
                return ORSUpdateResult(success=False, error=f"PNTR attribute {path} has no ref")
            resolved = self._follow_pointers(attr.ref)
            if resolved is None:
                return ORSUpdateResult(
                    success=False, error=f"Cannot resolve PNTR reference from {path}"
                )
            path = resolved

        self._values[path] = value
        entity_id, attribute_name = path.split(".", 1)

        if self._config.debug:
            logger.debug("Updated %s = %r", path, value)
        return ORSUpdateResult(success=True, entity_id=entity_id, attribute_name=attribute_name)

    def update_ors(self, ors: ORS) -> None:
        """Swap in a new ORS snapshot; the runtime cache is rebuilt from it."""
        if self._disposed:
            return
        self._load(ors)

    def dispose(self) -> None:
        self._values.clear()
        self._entities.clear()
        self._disposed = True
        if self._config.debug:
            logger.debug("DataBindingProcessor disposed")
