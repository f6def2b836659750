"""The mapping engine.

Components, leaves first:
- store: indifferent key access over raw data
- resolver: find an attribute's raw value
- coercion / gate: coerce it and apply required/strict/default rules
- schema: class-level schemas and per-instance attribute sets
"""

from .errors import CoercionError, SchemaDocumentError, SchemaViolation
from .store import NOT_FOUND, IndifferentKeyStore, canonical_key, merge_raw
from .models import AttributeDefinition, AbsentSource, ComputedLookup, RenamedKey
from .schema import AttributeSchema, InstanceAttributeSet
from .coercion import (
    CoercionProvider,
    PydanticCoercionProvider,
    get_coercion_provider,
    set_coercion_provider,
)
from .resolver import resolve
from .gate import materialize
from .models.document import AttributeDocument, SchemaDocument

__all__ = [
    # Errors
    "CoercionError",
    "SchemaDocumentError",
    "SchemaViolation",
    # Store
    "NOT_FOUND",
    "IndifferentKeyStore",
    "canonical_key",
    "merge_raw",
    # Models
    "AttributeDefinition",
    "AbsentSource",
    "ComputedLookup",
    "RenamedKey",
    "AttributeDocument",
    "SchemaDocument",
    # Schema
    "AttributeSchema",
    "InstanceAttributeSet",
    # Pipeline
    "CoercionProvider",
    "PydanticCoercionProvider",
    "get_coercion_provider",
    "set_coercion_provider",
    "resolve",
    "materialize",
]
