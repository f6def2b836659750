"""CLI utilities for dual-mode output (human-friendly + machine-readable).

- Human mode (default): Rich formatting with colors and tables
- Machine mode (--json): structured JSON printed once at the end

Example:
    out = Output(console=console, json_mode=get_json_mode())
    out.success("Mapped person.json", values={"id": 1})
    out.attributes("Person", [{"name": "id", "type": "int", "value": "1"}])
    raise typer.Exit(out.finish())
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, PrivateAttr
from rich.console import Console
from rich.table import Table

from ..core import SchemaViolation


class ExitCode:
    """Standardized exit codes for CLI commands.

        0 = Success
        1 = Schema violation (fix the data or the schema)
        2 = Invalid schema document
        3 = File not found
        4 = Unreadable data file
    """

    SUCCESS = 0
    SCHEMA_VIOLATION = 1
    INVALID_SCHEMA = 2
    FILE_NOT_FOUND = 3
    DATA_ERROR = 4


class Output(BaseModel):
    """Dual-mode output for the mapping commands.

    Human mode prints as it goes. JSON mode collects one payload:

        status       "success" or "error"
        warnings     [message, ...]
        errors       [message, ...] for unreadable files and schemas
        violations   [{attribute, reason, message}, ...] from SchemaViolation
        exit_code    the process exit code
        ...          command data (values, unmapped, attributes)
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    console: Console
    json_mode: bool = False

    _data: dict[str, Any] = PrivateAttr()
    _exit_code: int = PrivateAttr(default=ExitCode.SUCCESS)

    def model_post_init(self, __context: Any) -> None:
        self._data = {
            "status": "success",
            "warnings": [],
            "errors": [],
            "violations": [],
        }

    def success(self, message: str, **data: Any) -> None:
        if self.json_mode:
            self._data.update(data)
        else:
            self.console.print(f"[green]✓[/green] {message}")

    def warning(self, message: str) -> None:
        if self.json_mode:
            self._data["warnings"].append(message)
        else:
            self.console.print(f"[yellow]⚠[/yellow] {message}")

    def error(self, message: str, *, exit_code: int) -> None:
        """Report a problem with an input file."""
        self._fail(exit_code)
        if self.json_mode:
            self._data["errors"].append(message)
        else:
            self.console.print(f"[red]✗[/red] {message}")

    def violation(
        self, exc: SchemaViolation, *, exit_code: int = ExitCode.SCHEMA_VIOLATION
    ) -> None:
        """Report a SchemaViolation with its attribute and reason."""
        self._fail(exit_code)
        if self.json_mode:
            self._data["violations"].append(
                {"attribute": exc.attribute, "reason": exc.reason, "message": str(exc)}
            )
        else:
            self.console.print(f"[red]✗ {exc.reason}:[/red] {exc}")

    def attributes(self, title: str, rows: list[dict[str, str]]) -> None:
        """Per-attribute rows: a table in human mode, ``attributes`` in JSON."""
        if self.json_mode:
            self._data["attributes"] = rows
            return
        table = Table(title=title, show_header=True, header_style="bold")
        for column in rows[0] if rows else ():
            table.add_column(column.replace("_", " ").capitalize())
        for row in rows:
            table.add_row(*row.values())
        self.console.print(table)

    def text(self, message: str) -> None:
        """Plain text, human mode only."""
        if not self.json_mode:
            self.console.print(message)

    def set_data(self, key: str, value: Any) -> None:
        self._data[key] = value

    def finish(self) -> int:
        """Print the JSON payload (JSON mode) and return the exit code."""
        if self.json_mode:
            self._data["exit_code"] = self._exit_code
            print(json.dumps(self._data, indent=2, default=str))
        return self._exit_code

    def _fail(self, exit_code: int) -> None:
        self._exit_code = exit_code
        self._data["status"] = "error"


def load_data_file(path: Path, data_format: str = "auto") -> Any:
    """Read a JSON or YAML data file.

    With data_format="auto", .yaml/.yml files are read as YAML and anything
    else as JSON.
    """
    if data_format == "auto":
        data_format = "yaml" if path.suffix.lower() in (".yaml", ".yml") else "json"
    text = path.read_text()
    if data_format == "yaml":
        return yaml.safe_load(text)
    return json.loads(text)
