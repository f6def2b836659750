"""Key resolution: find the raw value for one attribute.

Precedence, highest first:
1. Computed lookup, called with the whole raw data. Failures count as
   "not found" and never fall through to the attribute's own name.
2. Renamed key. Data under the renamed key always wins over data stored
   under the attribute's own name. When only the own name is present its
   value is not used: the attribute counts as explicitly None.
3. No source option: the attribute's own name.
"""

import logging
from typing import Any

from .models.attribute import AttributeDefinition
from .store import NOT_FOUND, IndifferentKeyStore

logger = logging.getLogger(__name__)


def _call_lookup(definition: AttributeDefinition, store: IndifferentKeyStore) -> Any:
    try:
        value = definition.source.lookup(store)
    except Exception as exc:
        # Lookups are expected to carry their own fallback; a failure only
        # means there is nothing to map.
        logger.debug(
            "Computed lookup for %r failed (%s: %s), treating as not found",
            definition.name,
            type(exc).__name__,
            exc,
        )
        return NOT_FOUND
    if value is None:
        return NOT_FOUND
    return value


def resolve(definition: AttributeDefinition, store: IndifferentKeyStore) -> Any:
    """Return the raw value for ``definition``, or NOT_FOUND."""
    source = definition.source

    if source.kind == "computed":
        return _call_lookup(definition, store)

    if source.kind == "renamed":
        value = store.lookup(source.key)
        if value is not NOT_FOUND:
            return value
        if definition.name in store:
            return None
        return NOT_FOUND

    return store.lookup(definition.name)
