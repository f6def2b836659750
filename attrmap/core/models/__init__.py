"""Pydantic models for attrmap.

- attribute.py: AttributeDefinition and its source variants
- document.py: YAML schema documents (import from attrmap.core.models.document)
"""

from .attribute import (
    AbsentSource,
    AttributeDefinition,
    ComputedLookup,
    RenamedKey,
    Source,
    source_from_option,
)

__all__ = [
    "AbsentSource",
    "AttributeDefinition",
    "ComputedLookup",
    "RenamedKey",
    "Source",
    "source_from_option",
]
