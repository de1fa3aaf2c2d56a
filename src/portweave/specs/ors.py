"""
ORS (object-relational schema) specification types.

The ORS is the structured entity graph underneath a screen's widgets.
Attributes are scalars (SVAL), arrays (ARRY), string-keyed maps (DICT) or
pointers (PNTR) holding a reference path "entityId.attributeName" to
another attribute.

A loaded ORS is a read-only snapshot; runtime values written by widgets
live in the DataBindingProcessor's cache, never in these models.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class StructuralType(StrEnum):
    """Structural type of an attribute."""

    SVAL = "SVAL"  # scalar: string / number / boolean / date
    ARRY = "ARRY"  # array of itemType
    DICT = "DICT"  # string-keyed map
    PNTR = "PNTR"  # reference to another attribute


class ConcreteType(StrEnum):
    """Concrete value type of a scalar (or of array items)."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    OBJECT = "object"


class StageType(StrEnum):
    """Workflow stage the ORS was generated for."""

    DIVERGE = "diverge"
    ORGANIZE = "organize"
    CONVERGE = "converge"
    SUMMARY = "summary"


class Constraint(BaseModel):
    """Value constraint declared on an attribute (consumed by validators, not the core)."""

    type: Literal["required", "min", "max", "minLength", "maxLength", "pattern", "enum"]
    value: Any = None
    message: str | None = None

    model_config = ConfigDict(frozen=True)


class GenerationSpec(BaseModel):
    """How the generator should produce labels/samples for an attribute."""

    type: Literal["label", "sample"]
    prompt: str
    context: list[str] | None = None

    model_config = ConfigDict(frozen=True)


class Attribute(BaseModel):
    """
    One named attribute of an entity.

    Example:
        Attribute(name="level", structural_type=StructuralType.SVAL,
                  value_type=ConcreteType.NUMBER, default_value=5)
        Attribute(name="pointer", structural_type=StructuralType.PNTR, ref="concern.text")
    """

    name: str
    structural_type: StructuralType = Field(alias="structuralType")
    value_type: ConcreteType | None = Field(default=None, alias="valueType")
    item_type: StructuralType | None = Field(default=None, alias="itemType")
    item_value_type: ConcreteType | None = Field(default=None, alias="itemValueType")
    ref: str | None = Field(default=None, description="PNTR reference path")
    schema_def: dict[str, Any] | None = Field(default=None, alias="schema")
    constraints: list[Constraint] = Field(default_factory=list)
    generation: GenerationSpec | None = None
    description: str | None = None
    default_value: Any = Field(default=None, alias="defaultValue")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @property
    def is_pointer(self) -> bool:
        return self.structural_type == StructuralType.PNTR


class Entity(BaseModel):
    """An entity: id, type tag and ordered attributes."""

    id: str
    type: str
    attributes: list[Attribute] = Field(default_factory=list)
    metadata: dict[str, Any] | None = None

    model_config = ConfigDict(frozen=True)

    def get_attribute(self, name: str) -> Attribute | None:
        for attr in self.attributes:
            if attr.name == name:
                return attr
        return None


class DependencyGraph(BaseModel):
    """Generation-time dependency graph; carried along but not used by the core."""

    dependencies: list[dict[str, Any]] = Field(default_factory=list)
    metadata: dict[str, Any] | None = None

    model_config = ConfigDict(frozen=True)


class ORSMetadata(BaseModel):
    """Workflow stage tag and generation provenance."""

    stage: StageType
    session_id: str = Field(default="", alias="sessionId")
    generated_at: int = Field(default=0, alias="generatedAt")
    llm_model: str = Field(default="", alias="llmModel")
    custom: dict[str, Any] | None = None

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ORS(BaseModel):
    """A versioned, stage-tagged entity graph snapshot."""

    version: str = "4.0"
    entities: list[Entity] = Field(default_factory=list)
    dependency_graph: DependencyGraph = Field(
        default_factory=DependencyGraph, alias="dependencyGraph"
    )
    metadata: ORSMetadata

    model_config = ConfigDict(frozen=True, populate_by_name=True)
