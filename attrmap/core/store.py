"""Indifferent key access over raw input data.

Raw data may use text keys ("surname") or symbolic keys (enum members such
as ``Field.SURNAME``) for the same logical key. Every key is canonicalized
to one representation on the way in, so lookups never care which form the
caller or the schema used.
"""

from collections.abc import Iterator, Mapping
from enum import Enum
from typing import Any


class _NotFound:
    """Sentinel type for a key with no stored value."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __bool__(self) -> bool:
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


NOT_FOUND: Any = _NotFound()


def canonical_key(key: Any) -> Any:
    """Normalize a text or symbolic key to its canonical form.

    Examples:
        "surname" → "surname"
        Field.SURNAME (value "surname") → "surname"
        b"surname" → "surname"
        3 → 3
    """
    if isinstance(key, Enum):
        value = key.value
        return value if isinstance(value, str) else key.name
    if isinstance(key, bytes):
        return key.decode("utf-8")
    return key


def merge_raw(base: Mapping, extra: Mapping | None) -> dict:
    """Overlay ``extra`` onto ``base`` keeping both mappings' original keys.

    A key in ``extra`` replaces every key of ``base`` that canonicalizes
    to the same logical key.
    """
    merged = dict(base)
    if not extra:
        return merged
    for key, value in extra.items():
        canonical = canonical_key(key)
        for existing in [k for k in merged if canonical_key(k) == canonical]:
            del merged[existing]
        merged[key] = value
    return merged


class IndifferentKeyStore(Mapping):
    """Read-mostly mapping with text/symbol indifferent keys.

    ``lookup()`` returns stored values verbatim, or NOT_FOUND. Item access
    through ``[]`` wraps nested mappings in their own store, so a computed
    lookup can walk ``data["address"]["street"]`` whatever key form the
    nested data uses.
    """

    def __init__(self, data: Mapping | None = None):
        self._data: dict[Any, Any] = {}
        if data:
            self.merge(data)

    def lookup(self, key: Any) -> Any:
        return self._data.get(canonical_key(key), NOT_FOUND)

    def merge(self, other: Mapping | None) -> None:
        """Overlay entries from ``other``; its values win on conflict."""
        if not other:
            return
        for key, value in other.items():
            canonical = canonical_key(key)
            # Re-insert so the latest write also owns the iteration position
            self._data.pop(canonical, None)
            self._data[canonical] = value

    def __getitem__(self, key: Any) -> Any:
        value = self.lookup(key)
        if value is NOT_FOUND:
            raise KeyError(key)
        if isinstance(value, Mapping) and not isinstance(value, IndifferentKeyStore):
            return IndifferentKeyStore(value)
        return value

    def __contains__(self, key: object) -> bool:
        return canonical_key(key) in self._data

    def __iter__(self) -> Iterator[Any]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def to_dict(self) -> dict[Any, Any]:
        """Return a plain dict copy keyed by canonical keys."""
        return dict(self._data)

    def __repr__(self) -> str:
        return f"IndifferentKeyStore({self._data!r})"
