"""
portweave specification types.

This module exports the binding, ORS and data binding types.
"""

from portweave.specs.binding import (
    BindingMechanism,
    PropagationEvent,
    ReactiveBinding,
    ReactiveBindingSpec,
    ReactiveBindingSpecMetadata,
    Relationship,
    RelationshipType,
    UpdateMode,
    create_javascript_relationship,
    create_passthrough_relationship,
    create_reactive_binding,
    create_reactive_binding_spec,
    create_transform_relationship,
)
from portweave.specs.data_binding import (
    DataBindingDirection,
    DataBindingSpec,
    DataBindingTransform,
    ORSUpdateResult,
    create_data_binding_spec,
)
from portweave.specs.ors import (
    ORS,
    Attribute,
    ConcreteType,
    Constraint,
    DependencyGraph,
    Entity,
    GenerationSpec,
    ORSMetadata,
    StageType,
    StructuralType,
)

__all__ = [
    # Bindings
    "BindingMechanism",
    "PropagationEvent",
    "ReactiveBinding",
    "ReactiveBindingSpec",
    "ReactiveBindingSpecMetadata",
    "Relationship",
    "RelationshipType",
    "UpdateMode",
    "create_javascript_relationship",
    "create_passthrough_relationship",
    "create_reactive_binding",
    "create_reactive_binding_spec",
    "create_transform_relationship",
    # Data bindings
    "DataBindingDirection",
    "DataBindingSpec",
    "DataBindingTransform",
    "ORSUpdateResult",
    "create_data_binding_spec",
    # ORS
    "ORS",
    "Attribute",
    "ConcreteType",
    "Constraint",
    "DependencyGraph",
    "Entity",
    "GenerationSpec",
    "ORSMetadata",
    "StageType",
    "StructuralType",
]
