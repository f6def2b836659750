"""Attribute definition models.

An AttributeDefinition is the immutable descriptor of one named, typed
attribute: where its raw value comes from, what it is coerced to, and what
happens when the value is missing or malformed.

Sources are a tagged variant discriminated on ``kind``:
- AbsentSource: look the attribute up by its own name
- RenamedKey: look up a different key; the attribute's own name only
  marks the value as explicitly None
- ComputedLookup: call a function with the whole raw data
"""

import copy
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Annotated, Any, Literal, Union, get_origin

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..store import NOT_FOUND, canonical_key


# =============================================================================
# Source variants
# =============================================================================


class AbsentSource(BaseModel):
    """No source option: the attribute's own name is the key."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["absent"] = "absent"


class RenamedKey(BaseModel):
    """Raw data stores the attribute under a different key."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["renamed"] = "renamed"
    key: str = Field(description="Key to read from the raw data")


class ComputedLookup(BaseModel):
    """Raw value is computed from the whole raw data mapping."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: Literal["computed"] = "computed"
    lookup: Callable[[Mapping], Any]


Source = Annotated[
    Union[AbsentSource, RenamedKey, ComputedLookup],
    Field(discriminator="kind"),
]


def source_from_option(
    option: str | Enum | bytes | Callable | None,
) -> AbsentSource | RenamedKey | ComputedLookup:
    """Build a source variant from an authoring-time ``source=`` option.

    Examples:
        None → AbsentSource()
        "surname" → RenamedKey(key="surname")
        Field.SURNAME → RenamedKey(key="surname")
        lambda data: data["address"]["street"] → ComputedLookup(lookup=...)
    """
    if option is None:
        return AbsentSource()
    if isinstance(option, (str, Enum, bytes)):
        return RenamedKey(key=canonical_key(option))
    if callable(option):
        return ComputedLookup(lookup=option)
    raise TypeError(
        f"source must be a key (str or enum member) or a callable, "
        f"got {type(option).__name__}"
    )


# =============================================================================
# Attribute definition
# =============================================================================


class AttributeDefinition(BaseModel):
    """Complete, immutable description of a single attribute."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(description="Attribute name, unique within a schema")
    declared_type: Any = Field(
        default=Any,
        description="Coercion target: a type pydantic validates, or a Mapper subclass",
    )
    source: Source = Field(default_factory=AbsentSource)
    required: bool = False
    strict: bool = False
    default: Any = Field(
        default=NOT_FOUND,
        description="Static value used when no raw value is found",
    )
    default_factory: Callable[[], Any] | None = Field(
        default=None,
        description="Zero-argument producer used when no raw value is found",
    )
    description: str | None = None

    @field_validator("source", mode="before")
    @classmethod
    def _source_option(cls, value: Any) -> Any:
        # Accept the same shorthand as attribute(source=...)
        if isinstance(value, (BaseModel, Mapping)):
            return value
        return source_from_option(value)

    @model_validator(mode="after")
    def _check_default(self) -> "AttributeDefinition":
        if self.default is not NOT_FOUND and self.default_factory is not None:
            raise ValueError(
                f"{self.name}: cannot specify both default and default_factory"
            )
        return self

    @property
    def has_default(self) -> bool:
        return self.default is not NOT_FOUND or self.default_factory is not None

    def make_default(self) -> Any:
        """Produce this attribute's default value (a fresh copy each call)."""
        if self.default_factory is not None:
            return self.default_factory()
        if self.default is NOT_FOUND:
            return None
        return copy.deepcopy(self.default)

    @property
    def type_name(self) -> str:
        """Readable name of the declared type, for display."""
        declared = self.declared_type
        if get_origin(declared) is None and hasattr(declared, "__name__"):
            return declared.__name__
        return repr(declared).replace("typing.", "")
