"""Schema documents: attribute schemas written as YAML.

Example:
    name: Person
    attributes:
      - name: id
        type: int
        from: person_id
        required: true
        strict: true
      - name: last_name
        type: str
        from: surname
      - name: address
        type: str
        from_path: [address, street]
        default: ""
      - name: pets
        type: nested
        many: true
        attributes:
          - name: name
            type: str

A document builds an AttributeSchema, or a ready-to-use Mapper subclass.
"""

from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import SchemaDocumentError
from ..schema import AttributeSchema
from .attribute import AttributeDefinition, source_from_option


TYPE_NAMES: dict[str, Any] = {
    "any": Any,
    "int": int,
    "integer": int,
    "float": float,
    "str": str,
    "string": str,
    "bool": bool,
    "boolean": bool,
    "decimal": Decimal,
    "date": date,
    "datetime": datetime,
    "list": list,
    "dict": dict,
}


class AttributeDocument(BaseModel):
    """One attribute entry of a schema document."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    name: str = Field(description="Attribute name")
    type: str = Field(default="any", description="Type name, or 'nested'")
    from_: str | None = Field(
        default=None, alias="from", description="Renamed key in the raw data"
    )
    from_path: list[str | int] | None = Field(
        default=None, description="Path into nested raw data"
    )
    required: bool = False
    strict: bool | None = Field(
        default=None, description="None = use coercion.strict_by_default"
    )
    default: Any = Field(default=None, description="Used when no value is found")
    description: str | None = None
    many: bool = Field(default=False, description="For nested: a list of objects")
    attributes: list["AttributeDocument"] = Field(
        default_factory=list, description="For nested: the nested attributes"
    )

    def build_definition(self, owner: str) -> AttributeDefinition:
        """Turn this entry into an AttributeDefinition.

        Raises:
            SchemaDocumentError: Unknown type or conflicting options
        """
        from ...config import get_config
        from ...utils import dig

        where = f"{owner}.{self.name}"
        if self.from_ is not None and self.from_path is not None:
            raise SchemaDocumentError(f"{where}: use either 'from' or 'from_path'")
        if self.from_path is not None and not self.from_path:
            raise SchemaDocumentError(f"{where}: 'from_path' must not be empty")

        declared_type = self._declared_type(owner)
        source = dig(*self.from_path) if self.from_path else self.from_
        options: dict[str, Any] = {}
        if "default" in self.model_fields_set:
            options["default"] = self.default

        strict = self.strict
        if strict is None:
            strict = get_config().coercion.strict_by_default

        return AttributeDefinition(
            name=self.name,
            declared_type=declared_type,
            source=source_from_option(source),
            required=self.required,
            strict=strict,
            description=self.description,
            **options,
        )

    def _declared_type(self, owner: str) -> Any:
        where = f"{owner}.{self.name}"
        if self.type == "nested":
            if not self.attributes:
                raise SchemaDocumentError(f"{where}: nested type needs 'attributes'")
            from ...mapper import mapper_class

            nested_name = owner + "".join(
                part.capitalize() for part in self.name.split("_")
            )
            nested_schema = build_schema(self.attributes, nested_name)
            nested = mapper_class(nested_name, nested_schema)
            return list[nested] if self.many else nested

        if self.attributes:
            raise SchemaDocumentError(f"{where}: 'attributes' requires type: nested")
        if self.many:
            raise SchemaDocumentError(f"{where}: 'many' requires type: nested")
        try:
            return TYPE_NAMES[self.type.lower()]
        except KeyError:
            known = ", ".join(sorted([*TYPE_NAMES, "nested"]))
            raise SchemaDocumentError(
                f"{where}: unknown type {self.type!r} (known: {known})"
            ) from None


AttributeDocument.model_rebuild()


def build_schema(entries: list[AttributeDocument], name: str) -> AttributeSchema:
    """Build an AttributeSchema from document entries.

    Raises:
        SchemaViolation: Duplicate attribute names
        SchemaDocumentError: Invalid entries
    """
    schema = AttributeSchema(name=name)
    for entry in entries:
        schema.add(entry.build_definition(name))
    return schema


class SchemaDocument(BaseModel):
    """A complete schema document."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(default="Mapping", description="Name of the mapper class")
    description: str | None = None
    attributes: list[AttributeDocument] = Field(default_factory=list)

    @classmethod
    def from_yaml(cls, path: Path | str) -> "SchemaDocument":
        """Load a document from a YAML file.

        Raises:
            SchemaDocumentError: The file is not a valid schema document
        """
        path = Path(path)

        with open(path) as f:
            data = yaml.safe_load(f)

        try:
            return cls.model_validate(data or {})
        except ValidationError as exc:
            raise SchemaDocumentError(f"{path}: {exc}") from exc

    def to_yaml(self, path: Path | str) -> None:
        """Save the document to a YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = self.model_dump(mode="json", by_alias=True, exclude_unset=True)

        with open(path, "w") as f:
            yaml.dump(
                data, f, default_flow_style=False, sort_keys=False, allow_unicode=True
            )

    def build_schema(self) -> AttributeSchema:
        return build_schema(self.attributes, self.name)

    def build_mapper(self) -> type:
        """Build a Mapper subclass named after the document."""
        from ...mapper import mapper_class

        return mapper_class(self.name, self.build_schema())
