"""Ready-made computed lookups."""

from collections.abc import Callable, Mapping
from typing import Any


def dig(*keys: Any) -> Callable[[Mapping], Any]:
    """Build a lookup that walks nested raw data.

    dig("address", "street") reads data["address"]["street"]. Integer keys
    index into lists. A missing step raises, which the resolver treats as
    "not found".

    Raises:
        ValueError: If no keys are given
    """
    if not keys:
        raise ValueError("dig() needs at least one key")

    def lookup(data: Mapping) -> Any:
        value: Any = data
        for key in keys:
            value = value[key]
        return value

    lookup.__name__ = "dig(" + ", ".join(repr(k) for k in keys) + ")"
    lookup.keys = keys
    return lookup
