"""Coercion gate: turn a resolved raw value into the attribute's value.

Applies the required/strict/default rules around the coercion provider:
- not found + required → SchemaViolation
- not found + default → the default
- not found → None
- explicit None → None (the default does not apply)
- found → provider.coerce(); a failure is a SchemaViolation when strict,
  otherwise the raw value passes through unchanged
"""

import logging
from typing import Any

from .coercion import CoercionProvider, get_coercion_provider
from .errors import CoercionError, SchemaViolation
from .models.attribute import AttributeDefinition
from .store import NOT_FOUND

logger = logging.getLogger(__name__)


def materialize(
    definition: AttributeDefinition,
    resolved: Any,
    provider: CoercionProvider | None = None,
) -> Any:
    """Produce the typed value for ``definition`` from a resolved raw value.

    Args:
        definition: Attribute being materialized
        resolved: Output of the key resolver (a raw value or NOT_FOUND)
        provider: Coercion provider; defaults to get_coercion_provider()

    Raises:
        SchemaViolation: required attribute missing, or strict coercion failed
    """
    name = definition.name

    if resolved is NOT_FOUND:
        if definition.required:
            raise SchemaViolation(
                name, "required", f"{name}: required attribute has no value"
            )
        if definition.has_default:
            return definition.make_default()
        return None

    if resolved is None:
        if definition.required and definition.strict:
            raise SchemaViolation(
                name, "required", f"{name}: required attribute is None"
            )
        return None

    provider = provider or get_coercion_provider()
    try:
        return provider.coerce(resolved, definition.declared_type)
    except CoercionError as exc:
        if definition.strict:
            raise SchemaViolation(name, "strict", f"{name}: {exc}") from exc
        logger.debug("Passing %r through uncoerced: %s", name, exc)
        return resolved
