"""Map command: run a data file through a schema document."""

import json
from collections.abc import Mapping
from pathlib import Path

import typer
import yaml

from ...config import get_config
from ...core import (
    AttributeDefinition,
    SchemaDocument,
    SchemaDocumentError,
    SchemaViolation,
    canonical_key,
)
from ..app import app, console, get_json_mode
from ..utils import ExitCode, Output, load_data_file


def _consumed_keys(definitions: tuple[AttributeDefinition, ...]) -> set:
    """Raw keys an attribute set reads from, as far as can be told statically."""
    keys = set()
    for definition in definitions:
        keys.add(definition.name)
        if definition.source.kind == "renamed":
            keys.add(definition.source.key)
        elif definition.source.kind == "computed":
            path = getattr(definition.source.lookup, "keys", None)
            if path:
                keys.add(canonical_key(path[0]))
    return keys


def _format_value(value) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return repr(value)


@app.command("map")
def map_command(
    schema_file: Path = typer.Argument(..., help="YAML schema document"),
    data_file: Path = typer.Argument(..., help="JSON or YAML data file"),
    extend: list[Path] = typer.Option(
        [],
        "--extend",
        "-e",
        help="Schema document to add to the mapped object (repeatable)",
    ),
    extra: Path | None = typer.Option(
        None,
        "--extra",
        help="Extra data merged in with the first --extend schema",
    ),
):
    """Map a data file onto a schema and print the typed values.

    Examples:
        attrmap map person.yaml person.json
        attrmap map person.yaml person.json --extend employment.yaml --extra job.json
        attrmap --json map person.yaml person.json
    """
    out = Output(console=console, json_mode=get_json_mode())
    config = get_config()

    paths = [schema_file, data_file, *extend]
    if extra is not None:
        paths.append(extra)
    for path in paths:
        if not path.exists():
            out.error(f"File not found: {path}", exit_code=ExitCode.FILE_NOT_FOUND)
            raise typer.Exit(out.finish())

    try:
        mapper_cls = SchemaDocument.from_yaml(schema_file).build_mapper()
        extensions = [SchemaDocument.from_yaml(p).build_schema() for p in extend]
    except (SchemaDocumentError, SchemaViolation, yaml.YAMLError, TypeError) as e:
        out.error(f"Invalid schema: {e}", exit_code=ExitCode.INVALID_SCHEMA)
        raise typer.Exit(out.finish())

    try:
        data = load_data_file(data_file, config.cli.data_format)
        extra_data = (
            load_data_file(extra, config.cli.data_format) if extra is not None else None
        )
    except (json.JSONDecodeError, yaml.YAMLError, UnicodeDecodeError) as e:
        out.error(f"Cannot read data: {e}", exit_code=ExitCode.DATA_ERROR)
        raise typer.Exit(out.finish())

    for label, payload in (("data", data), ("extra data", extra_data)):
        if payload is not None and not isinstance(payload, Mapping):
            out.error(
                f"Expected {label} to be a mapping, got {type(payload).__name__}",
                exit_code=ExitCode.DATA_ERROR,
            )
            raise typer.Exit(out.finish())

    if extra_data and not extensions:
        out.warning("--extra is only used together with --extend; ignoring it")

    try:
        instance = mapper_cls(data)
        for i, extension in enumerate(extensions):
            instance.add_attributes(extension, extra_data if i == 0 else None)
    except SchemaViolation as e:
        out.violation(e)
        raise typer.Exit(out.finish())

    definitions = instance.attribute_set()
    values = instance.to_dict()
    out.success(
        f"Mapped {data_file.name} onto {mapper_cls.__name__} "
        f"({len(definitions)} attributes)",
        values=values,
    )
    if not out.json_mode:
        out.attributes(
            mapper_cls.__name__,
            [
                {"name": d.name, "type": d.type_name, "value": _format_value(values[d.name])}
                for d in definitions
            ],
        )

    consumed = _consumed_keys(definitions)
    unmapped = [
        str(key)
        for key in instance.raw_attributes()
        if canonical_key(key) not in consumed
    ]
    out.set_data("unmapped", unmapped)
    if unmapped:
        out.text(f"[dim]Unmapped keys: {', '.join(unmapped)}[/dim]")

    raise typer.Exit(out.finish())
