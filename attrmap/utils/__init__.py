"""Pure helpers with no dependency on attrmap's models."""

from .lookups import dig

__all__ = ["dig"]
