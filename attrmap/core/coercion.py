"""Coercion providers: convert raw values into declared types.

The mapping engine never converts values itself. It hands a raw value and
the attribute's declared type to a CoercionProvider, which either returns
the typed value or raises CoercionError.

Provides:
- CoercionProvider: abstract base for providers
- PydanticCoercionProvider: default provider backed by pydantic TypeAdapters
- get_coercion_provider() / set_coercion_provider(): process-wide default
"""

import dataclasses
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from types import UnionType
from typing import Any, Union, get_args, get_origin, is_typeddict

from pydantic import (
    BaseModel,
    ConfigDict,
    PydanticSchemaGenerationError,
    TypeAdapter,
    ValidationError,
)

from .errors import CoercionError

logger = logging.getLogger(__name__)


class CoercionProvider(ABC):
    """Abstract base class for coercion providers.

    Implementations must be deterministic and report failure by raising
    CoercionError, never by returning a sentinel.
    """

    @abstractmethod
    def coerce(self, value: Any, declared_type: Any) -> Any:
        """Convert ``value`` to ``declared_type`` or raise CoercionError."""
        ...


def _mapper_class(declared_type: Any) -> type | None:
    """Return ``declared_type`` if it is a Mapper subclass, else None."""
    from ..mapper import Mapper

    if isinstance(declared_type, type) and issubclass(declared_type, Mapper):
        return declared_type
    return None


def _contains_mapper(declared_type: Any) -> bool:
    """True if a Mapper subclass appears anywhere inside a type expression."""
    return any(
        _mapper_class(arg) is not None or _contains_mapper(arg)
        for arg in get_args(declared_type)
    )


def _has_own_config(declared_type: Any) -> bool:
    """Types that carry their own pydantic config reject an adapter config."""
    if isinstance(declared_type, type) and issubclass(declared_type, BaseModel):
        return True
    return dataclasses.is_dataclass(declared_type) or is_typeddict(declared_type)


class PydanticCoercionProvider(CoercionProvider):
    """Coerce values with pydantic in lax mode.

    Lax mode gives the usual string/number conversions:
        "100" → 100 (int)
        "1", "true", "yes" → True (bool)
        1 → "1" (str, when coerce_numbers_to_str is on)

    Nested Mapper types (also inside unions, lists and dicts) are built by
    constructing the nested mapper from the raw mapping, which runs the full
    mapping engine again for the nested attributes.
    """

    def __init__(self, coerce_numbers_to_str: bool = True):
        self.coerce_numbers_to_str = coerce_numbers_to_str
        self._adapters: dict[Any, TypeAdapter] = {}

    def coerce(self, value: Any, declared_type: Any) -> Any:
        if declared_type is Any:
            return value

        mapper_cls = _mapper_class(declared_type)
        if mapper_cls is not None:
            return self._coerce_nested(value, mapper_cls)

        if _contains_mapper(declared_type):
            return self._coerce_composite(value, declared_type)

        try:
            return self._adapter(declared_type).validate_python(value)
        except PydanticSchemaGenerationError as exc:
            raise CoercionError(
                value, declared_type, f"No coercion available for {declared_type!r}"
            ) from exc
        except ValidationError as exc:
            raise CoercionError(
                value, declared_type, f"Cannot coerce {value!r}: {exc.errors()[0]['msg']}"
            ) from exc

    def _coerce_nested(self, value: Any, mapper_cls: type) -> Any:
        if isinstance(value, mapper_cls):
            return value
        if isinstance(value, Mapping):
            return mapper_cls(value)
        raise CoercionError(value, mapper_cls)

    def _coerce_composite(self, value: Any, declared_type: Any) -> Any:
        """Unions and containers with a Mapper somewhere inside.

        Union members are tried in declaration order; the first one that
        coerces wins.
        """
        origin = get_origin(declared_type)
        args = get_args(declared_type)

        if origin in (Union, UnionType):
            for member in args:
                if member is type(None):
                    if value is None:
                        return None
                    continue
                try:
                    return self.coerce(value, member)
                except CoercionError:
                    continue
            raise CoercionError(value, declared_type)

        if origin is list:
            if isinstance(value, (str, bytes, Mapping)) or not isinstance(
                value, Iterable
            ):
                raise CoercionError(value, declared_type)
            return [self.coerce(item, args[0]) for item in value]

        if origin is dict:
            if not isinstance(value, Mapping):
                raise CoercionError(value, declared_type)
            key_type, item_type = args
            return {
                self.coerce(key, key_type): self.coerce(item, item_type)
                for key, item in value.items()
            }

        raise CoercionError(
            value, declared_type, f"Unsupported container for mappers: {declared_type!r}"
        )

    def _adapter(self, declared_type: Any) -> TypeAdapter:
        try:
            return self._adapters[declared_type]
        except KeyError:
            pass
        except TypeError:
            # Unhashable type expression, build an adapter every time
            return self._build_adapter(declared_type)

        adapter = self._build_adapter(declared_type)
        self._adapters[declared_type] = adapter
        return adapter

    def _build_adapter(self, declared_type: Any) -> TypeAdapter:
        if _has_own_config(declared_type):
            return TypeAdapter(declared_type)
        config = ConfigDict(coerce_numbers_to_str=self.coerce_numbers_to_str)
        return TypeAdapter(declared_type, config=config)


# =============================================================================
# Default provider
# =============================================================================

_provider: CoercionProvider | None = None


def get_coercion_provider() -> CoercionProvider:
    """Get the process-wide default coercion provider.

    First call builds a PydanticCoercionProvider from the global config.
    Use set_coercion_provider() to install a different provider.
    """
    global _provider
    if _provider is None:
        from ..config import get_config

        config = get_config()
        _provider = PydanticCoercionProvider(
            coerce_numbers_to_str=config.coercion.coerce_numbers_to_str
        )
        logger.debug("Built default coercion provider from config")
    return _provider


def set_coercion_provider(provider: CoercionProvider | None) -> None:
    """Replace the default provider; None forces a rebuild on next use."""
    global _provider
    _provider = provider
