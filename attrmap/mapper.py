"""Mapper classes: declare a schema once, map raw data into typed objects.

Example:
    class PersonMapper(Mapper):
        id = attribute(int, source="person_id", required=True, strict=True)
        first_name = attribute(str)
        last_name = attribute(str, source="surname")
        address = attribute(str, source=dig("address", "street"), default="")

    class EmploymentMapper(SchemaModule):
        company = attribute(str, source="business")
        salary = attribute(int)

    person = PersonMapper({"person_id": "1", "surname": "Doe", "unused": True})
    person.last_name          # "Doe"
    person.raw_attributes()   # the input, unused keys included

    person.add_attributes(EmploymentMapper, {"business": "RentPath"})
    person.company            # "RentPath", on this instance only

Every instance works on its own copy of the class schema, so runtime
extension never leaks into the class or into other instances.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any, ClassVar

from .config import get_config
from .core.coercion import CoercionProvider
from .core.gate import materialize
from .core.models.attribute import AttributeDefinition, source_from_option
from .core.resolver import resolve
from .core.schema import AttributeSchema
from .core.store import NOT_FOUND, IndifferentKeyStore, merge_raw

logger = logging.getLogger(__name__)

# Mapper API names an attribute may not shadow
RESERVED_NAMES = frozenset(
    {
        "add_attributes",
        "attribute_schema",
        "attribute_set",
        "coercion_provider",
        "include",
        "raw_attributes",
        "to_dict",
    }
)


# =============================================================================
# Authoring surface
# =============================================================================


class Attribute:
    """Class-level descriptor declaring one attribute.

    Built by attribute(); turns into an AttributeDefinition once it knows
    its name. Reading it on an instance returns that instance's typed value.
    """

    def __init__(
        self,
        declared_type: Any = Any,
        *,
        source: str | Any | None = None,
        required: bool = False,
        strict: bool | None = None,
        default: Any = NOT_FOUND,
        default_factory: Any = None,
        description: str | None = None,
    ):
        self._options = {
            "declared_type": declared_type,
            "source": source,
            "required": required,
            "strict": strict,
            "default": default,
            "default_factory": default_factory,
            "description": description,
        }
        self.name: str | None = None
        self.definition: AttributeDefinition | None = None

    @classmethod
    def from_definition(cls, definition: AttributeDefinition) -> "Attribute":
        descriptor = cls()
        descriptor.name = definition.name
        descriptor.definition = definition
        return descriptor

    def __set_name__(self, owner: type, name: str) -> None:
        if name in RESERVED_NAMES:
            raise TypeError(f"{owner.__name__}.{name}: name is reserved by Mapper")
        if self.definition is not None:
            return
        options = dict(self._options)
        if options["strict"] is None:
            options["strict"] = get_config().coercion.strict_by_default
        options["source"] = source_from_option(options["source"])
        self.name = name
        self.definition = AttributeDefinition(name=name, **options)

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return instance._values.get(self.name)

    def __set__(self, instance: Any, value: Any) -> None:
        instance._write(self.name, value)

    def __repr__(self) -> str:
        return f"<Attribute {self.name}: {self.definition.type_name if self.definition else '?'}>"


def attribute(declared_type: Any = Any, **options: Any) -> Any:
    """Declare an attribute on a Mapper or SchemaModule class.

    Args:
        declared_type: Coercion target (int, str, bool, a Mapper subclass, ...)
        source: Renamed key (str) or computed lookup (callable taking the raw data)
        required: Missing value raises SchemaViolation
        strict: Coercion failure raises SchemaViolation instead of passing through
        default: Value used when no raw value is found
        default_factory: Zero-argument producer used when no raw value is found
        description: Free text shown by the CLI
    """
    return Attribute(declared_type, **options)


def _class_schema(cls: type) -> AttributeSchema:
    """Build a class's schema: inherited definitions first, own ones last.

    A definition redeclared further down the hierarchy replaces the
    inherited one in place.
    """
    collected: dict[str, AttributeDefinition] = {}
    for base in reversed(cls.__mro__[1:]):
        inherited = base.__dict__.get("attribute_schema")
        if isinstance(inherited, AttributeSchema):
            for definition in inherited:
                collected[definition.name] = definition
    for value in cls.__dict__.values():
        if isinstance(value, Attribute) and value.definition is not None:
            collected[value.name] = value.definition
    return AttributeSchema(collected.values(), name=cls.__name__)


def _check_reserved(owner: str, definitions: list[AttributeDefinition]) -> None:
    reserved = sorted(d.name for d in definitions if d.name in RESERVED_NAMES)
    if reserved:
        raise TypeError(f"{owner}: names reserved by Mapper: {', '.join(reserved)}")


def definitions_of(source: Any) -> list[AttributeDefinition]:
    """Normalize anything that carries attribute definitions into a list.

    Accepts a SchemaModule/Mapper subclass, an AttributeSchema, a single
    AttributeDefinition or an iterable of definitions.
    """
    if isinstance(source, type) and issubclass(source, SchemaModule):
        return list(source.attribute_schema)
    if isinstance(source, AttributeSchema):
        return list(source)
    if isinstance(source, AttributeDefinition):
        return [source]
    if isinstance(source, Iterable) and not isinstance(source, (str, bytes, Mapping)):
        definitions = list(source)
        for item in definitions:
            if not isinstance(item, AttributeDefinition):
                raise TypeError(
                    f"Expected AttributeDefinition, got {type(item).__name__}"
                )
        return definitions
    raise TypeError(f"Cannot read attribute definitions from {source!r}")


# =============================================================================
# Schema holders
# =============================================================================


class SchemaModule:
    """Reusable group of attributes.

    A module is never instantiated. Mix it into a Mapper subclass, include()
    it into an existing Mapper class, or pass it to add_attributes() on a
    single instance.
    """

    attribute_schema: ClassVar[AttributeSchema] = AttributeSchema(name="SchemaModule")
    _mappable: ClassVar[bool] = False

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls.attribute_schema = _class_schema(cls)

    def __new__(cls, *args: Any, **kwargs: Any):
        if not cls._mappable:
            raise TypeError(
                f"{cls.__name__} is a schema module; mix it into a Mapper "
                f"or pass it to add_attributes()"
            )
        return super().__new__(cls)


class Mapper(SchemaModule):
    """Typed object built from raw keyed data.

    Args:
        raw_data: Input mapping; keys may be text or symbolic (enum members)
        **kwargs: Extra input entries, overriding raw_data on conflict

    Raises:
        SchemaViolation: On the first attribute that breaks its rules
    """

    _mappable: ClassVar[bool] = True
    coercion_provider: ClassVar[CoercionProvider | None] = None

    def __init__(self, raw_data: Mapping | None = None, /, **kwargs: Any):
        raw = merge_raw(raw_data or {}, kwargs)
        object.__setattr__(self, "_raw", raw)
        object.__setattr__(self, "_store", IndifferentKeyStore(raw))
        object.__setattr__(self, "_attribute_set", type(self).attribute_schema.clone())
        object.__setattr__(self, "_values", {})

        for definition in self._attribute_set:
            self._values[definition.name] = self._materialize(definition)

    # ── Class-level composition ──

    @classmethod
    def include(cls, source: Any) -> list[AttributeDefinition]:
        """Add another schema's new attributes to this class's own schema.

        Only names not defined yet are added. Instances created before the
        call, and subclasses defined before it, keep their schemas.

        Returns:
            The definitions that were added
        """
        definitions = definitions_of(source)
        _check_reserved(cls.__name__, definitions)
        added = cls.attribute_schema.extend(AttributeSchema(definitions))
        for definition in added:
            setattr(cls, definition.name, Attribute.from_definition(definition))
        logger.debug("Included %d attributes into %s", len(added), cls.__name__)
        return added

    # ── Runtime extension ──

    def add_attributes(self, source: Any, extra_raw_data: Mapping | None = None) -> None:
        """Extend this instance with another schema's attributes.

        Extra raw data is merged over the stored raw data first. Every
        definition of the batch, new or replacing, is then resolved and
        coerced against the combined data. Attributes outside the batch are
        left untouched.

        Raises:
            SchemaViolation: Under the same rules as construction. Attributes
                resolved before the failure stay on the instance.
        """
        definitions = definitions_of(source)
        _check_reserved(type(self).__name__, definitions)
        if extra_raw_data:
            object.__setattr__(self, "_raw", merge_raw(self._raw, extra_raw_data))
            self._store.merge(extra_raw_data)

        for definition in definitions:
            value = self._materialize(definition)
            self._attribute_set.append([definition])
            self._values[definition.name] = value

        logger.debug(
            "Extended %s instance to %d attributes",
            type(self).__name__,
            len(self._attribute_set),
        )

    # ── Inspection ──

    def attribute_set(self) -> tuple[AttributeDefinition, ...]:
        """This instance's attribute definitions, in resolution order."""
        return self._attribute_set.definitions()

    def raw_attributes(self) -> dict[Any, Any]:
        """The raw input as supplied, including keys no attribute maps."""
        return dict(self._raw)

    def to_dict(self) -> dict[str, Any]:
        """Typed values keyed by attribute name; nested mappers become dicts."""
        return {
            name: _plain(self._values.get(name)) for name in self._attribute_set.names()
        }

    # ── Internals ──

    def _materialize(self, definition: AttributeDefinition) -> Any:
        resolved = resolve(definition, self._store)
        return materialize(definition, resolved, type(self).coercion_provider)

    def _write(self, name: str, value: Any) -> None:
        definition = self._attribute_set.get(name)
        self._values[name] = materialize(
            definition, value, type(self).coercion_provider
        )

    def __getattr__(self, name: str) -> Any:
        # Only reached for names the class doesn't define: attributes added
        # to this instance at runtime.
        if not name.startswith("_"):
            values = self.__dict__.get("_values")
            if values is not None and name in values:
                return values[name]
        raise AttributeError(
            f"{type(self).__name__!r} object has no attribute {name!r}"
        )

    def __setattr__(self, name: str, value: Any) -> None:
        attribute_set = self.__dict__.get("_attribute_set")
        if attribute_set is not None and name in attribute_set:
            self._write(name, value)
            return
        super().__setattr__(name, value)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    __hash__ = None

    def __repr__(self) -> str:
        values = ", ".join(
            f"{name}={self._values.get(name)!r}" for name in self._attribute_set.names()
        )
        return f"{type(self).__name__}({values})"


def _plain(value: Any) -> Any:
    if isinstance(value, Mapper):
        return value.to_dict()
    if isinstance(value, list):
        return [_plain(item) for item in value]
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    return value


def mapper_class(
    name: str, schema: AttributeSchema | Iterable[AttributeDefinition]
) -> type[Mapper]:
    """Create a Mapper subclass from existing definitions."""
    if not isinstance(schema, AttributeSchema):
        schema = AttributeSchema(definitions_of(schema), name=name)
    _check_reserved(name, list(schema))
    namespace: dict[str, Any] = {
        definition.name: Attribute.from_definition(definition)
        for definition in schema
    }
    return type(name, (Mapper,), namespace)
