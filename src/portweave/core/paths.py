"""
Port and entity-attribute path helpers.

Both path kinds are two-part dotted strings:
    "widgetId.portId"            (widget port)
    "entityId.attributeName"     (ORS attribute)

The first segment ends at the first dot; everything after it is the
second segment.
"""

from __future__ import annotations

from portweave.core.errors import InvalidPathError


def _split(path: str) -> tuple[str, str] | None:
    head, sep, tail = path.partition(".")
    if not sep or not head or not tail:
        return None
    return head, tail


def parse_widget_port_path(path: str) -> tuple[str, str]:
    """Split a port path into (widget_id, port_id)."""
    parts = _split(path)
    if parts is None:
        raise InvalidPathError(
            f"Invalid widget port path: {path!r}. Expected format: 'widgetId.portId'"
        )
    return parts


def create_widget_port_path(widget_id: str, port_id: str) -> str:
    return f"{widget_id}.{port_id}"


def widget_id_of(path: str) -> str:
    """Widget part of a port path (empty string if the path has no dot)."""
    return path.partition(".")[0] if "." in path else ""


def split_entity_attribute_path(path: str) -> tuple[str, str] | None:
    """Split "entityId.attributeName", returning None for malformed paths."""
    if not isinstance(path, str):
        return None
    return _split(path)


def parse_entity_attribute_path(path: str) -> tuple[str, str]:
    """Split an attribute path into (entity_id, attribute_name)."""
    parts = split_entity_attribute_path(path)
    if parts is None:
        raise InvalidPathError(
            f"Invalid entity attribute path: {path!r}. "
            "Expected format: 'entityId.attributeName'"
        )
    return parts


def create_entity_attribute_path(entity_id: str, attribute_name: str) -> str:
    return f"{entity_id}.{attribute_name}"
