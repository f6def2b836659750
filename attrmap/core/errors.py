"""Error types raised by the mapping engine."""

from typing import Literal


ViolationReason = Literal["required", "strict", "duplicate"]


class SchemaViolation(Exception):
    """Raised when raw data or a schema breaks an attribute's rules.

    Covers three cases:
    - required: a required attribute has no resolvable value
    - strict: a strict attribute's value could not be coerced
    - duplicate: an attribute name was registered twice in one schema
    """

    def __init__(self, attribute: str, reason: ViolationReason, message: str):
        super().__init__(message)
        self.attribute = attribute
        self.reason = reason


class CoercionError(Exception):
    """Raised by a coercion provider when a value can't be converted."""

    def __init__(self, value, declared_type, message: str = ""):
        type_name = getattr(declared_type, "__name__", repr(declared_type))
        super().__init__(message or f"Cannot coerce {value!r} to {type_name}")
        self.value = value
        self.declared_type = declared_type


class SchemaDocumentError(ValueError):
    """Raised when a YAML schema document can't be turned into a schema."""

    pass
