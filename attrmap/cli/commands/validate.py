"""Validate command for schema documents."""

from pathlib import Path

import typer
import yaml

from ...core import (
    AttributeDefinition,
    SchemaDocument,
    SchemaDocumentError,
    SchemaViolation,
)
from ..app import app, console, get_json_mode
from ..utils import ExitCode, Output


def describe_source(definition: AttributeDefinition) -> str:
    """Short text form of an attribute's source, for display."""
    source = definition.source
    if source.kind == "renamed":
        return source.key
    if source.kind == "computed":
        return getattr(source.lookup, "__name__", "<lookup>")
    return "-"


def _describe_default(definition: AttributeDefinition) -> str:
    if definition.default_factory is not None:
        return getattr(definition.default_factory, "__name__", "<factory>")
    if definition.has_default:
        return repr(definition.default)
    return "-"


@app.command("validate")
def validate_command(
    schema_file: Path = typer.Argument(..., help="YAML schema document"),
):
    """Check a schema document and list its attributes.

    EXIT CODES:
        0 = Valid
        2 = Invalid schema document
        3 = File not found
    """
    out = Output(console=console, json_mode=get_json_mode())

    if not schema_file.exists():
        out.error(f"File not found: {schema_file}", exit_code=ExitCode.FILE_NOT_FOUND)
        raise typer.Exit(out.finish())

    try:
        document = SchemaDocument.from_yaml(schema_file)
        schema = document.build_schema()
    except SchemaViolation as e:
        out.violation(e, exit_code=ExitCode.INVALID_SCHEMA)
        raise typer.Exit(out.finish())
    except (SchemaDocumentError, yaml.YAMLError, TypeError) as e:
        out.error(f"Invalid schema: {e}", exit_code=ExitCode.INVALID_SCHEMA)
        raise typer.Exit(out.finish())

    out.success(
        f"{schema_file.name}: {document.name} ({len(schema)} attributes)",
        name=document.name,
        attribute_count=len(schema),
    )
    out.attributes(
        document.name,
        [
            {
                "name": d.name,
                "type": d.type_name,
                "source": describe_source(d),
                "required": "yes" if d.required else "no",
                "strict": "yes" if d.strict else "no",
                "default": _describe_default(d),
            }
            for d in schema
        ],
    )
    raise typer.Exit(out.finish())
