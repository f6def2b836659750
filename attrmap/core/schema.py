"""Attribute schemas.

AttributeSchema is the ordered set of definitions owned by a schema-defining
class. It is shared by every instance of that class and read-only once the
class is built.

InstanceAttributeSet is one mapper instance's own copy of a schema. It can
grow at runtime (add_attributes) without the defining schema or any other
instance noticing.
"""

import logging
from collections.abc import Iterable, Iterator

from .errors import SchemaViolation
from .models.attribute import AttributeDefinition

logger = logging.getLogger(__name__)


class AttributeSchema:
    """Authoring-time ordered collection of attribute definitions."""

    def __init__(
        self,
        definitions: Iterable[AttributeDefinition] = (),
        name: str | None = None,
    ):
        self.name = name
        self._definitions: dict[str, AttributeDefinition] = {}
        for definition in definitions:
            self.add(definition)

    def add(self, definition: AttributeDefinition) -> None:
        """Append a definition.

        Raises:
            SchemaViolation: If the name is already registered in this schema
        """
        if definition.name in self._definitions:
            owner = f" in {self.name}" if self.name else ""
            raise SchemaViolation(
                definition.name,
                "duplicate",
                f"{definition.name}: attribute already defined{owner}",
            )
        self._definitions[definition.name] = definition

    def extend(self, other: "AttributeSchema") -> list[AttributeDefinition]:
        """Add the definitions of ``other`` whose names are not taken yet.

        Used when a schema-defining class composes another schema. Existing
        definitions keep priority.

        Returns:
            The definitions that were added
        """
        added = []
        for definition in other:
            if definition.name not in self._definitions:
                self._definitions[definition.name] = definition
                added.append(definition)
        return added

    def clone(self) -> "InstanceAttributeSet":
        """Copy into an independent, per-instance attribute set."""
        logger.debug("Cloning %s (%d attributes)", self.name or "schema", len(self))
        return InstanceAttributeSet(self._definitions.values())

    def get(self, name: str) -> AttributeDefinition | None:
        return self._definitions.get(name)

    def names(self) -> list[str]:
        return list(self._definitions)

    def __getitem__(self, name: str) -> AttributeDefinition:
        return self._definitions[name]

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def __iter__(self) -> Iterator[AttributeDefinition]:
        return iter(list(self._definitions.values()))

    def __len__(self) -> int:
        return len(self._definitions)

    def __repr__(self) -> str:
        label = self.name or "AttributeSchema"
        return f"<{label} attributes={self.names()}>"


class InstanceAttributeSet:
    """Mutable attribute set owned by exactly one mapper instance."""

    def __init__(self, definitions: Iterable[AttributeDefinition] = ()):
        self._definitions: dict[str, AttributeDefinition] = {
            d.name: d for d in definitions
        }

    def append(
        self, definitions: Iterable[AttributeDefinition]
    ) -> list[AttributeDefinition]:
        """Add definitions, replacing same-named ones (last writer wins).

        A replaced definition keeps its position.

        Returns:
            The definitions that were added or replaced
        """
        appended = []
        for definition in definitions:
            if definition.name in self._definitions:
                logger.debug("Replacing instance definition %r", definition.name)
            self._definitions[definition.name] = definition
            appended.append(definition)
        return appended

    def definitions(self) -> tuple[AttributeDefinition, ...]:
        """Read-only snapshot of the definitions in order."""
        return tuple(self._definitions.values())

    def get(self, name: str) -> AttributeDefinition | None:
        return self._definitions.get(name)

    def names(self) -> list[str]:
        return list(self._definitions)

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def __iter__(self) -> Iterator[AttributeDefinition]:
        return iter(self.definitions())

    def __len__(self) -> int:
        return len(self._definitions)

    def __repr__(self) -> str:
        return f"<InstanceAttributeSet attributes={self.names()}>"
