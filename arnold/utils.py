"""Output helpers for the CLI."""

import json
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax

from .client import ExecResult
from .introspect import OperationDescriptor, TypeDescription


def pretty_print(data: dict, console: Optional[Console] = None) -> None:
    """Pretty print JSON data with syntax highlighting."""
    syntax = Syntax(
        json.dumps(data, indent=2),
        "json",
        theme="monokai",
        line_numbers=False,
    )
    console = console or Console()
    console.print(syntax)


def format_operation(operation: OperationDescriptor) -> str:
    """Render an operation as ``name(arg: Type, ...) -> ReturnType - description``."""
    args = ""
    if operation.args:
        args = "(" + ", ".join(f"{a.name}: {a.type}" for a in operation.args) + ")"
    description = f" - {operation.description}" if operation.description else ""
    return f"{operation.name}{args} -> {operation.return_type}{description}"


def render_operations(
    queries: List[OperationDescriptor],
    mutations: List[OperationDescriptor],
    filter: Optional[str] = None,
    console: Optional[Console] = None,
) -> None:
    console = console or Console()

    for title, operations in (("Queries", queries), ("Mutations", mutations)):
        if not operations:
            continue
        console.print(f"\n[bold]{title} ({len(operations)}):[/bold]\n")
        for operation in operations:
            console.print(f"  {escape(format_operation(operation))}")

    if not queries and not mutations:
        if filter:
            console.print(f'No operations matching "{escape(filter)}"')
        else:
            console.print("No operations found")


def render_type(description: TypeDescription, console: Optional[Console] = None) -> None:
    console = console or Console()

    console.print(f"\n[bold]{description.kind}: {description.name}[/bold]")
    if description.description:
        console.print(f"  {escape(description.description)}")

    fields = description.fields if description.fields is not None else description.input_fields
    if fields:
        console.print("\n  Fields:\n")
        for field in fields:
            required = " (required)" if field.is_required else ""
            desc = f" - {field.description}" if field.description else ""
            console.print(f"    {escape(f'{field.name}: {field.type}{required}{desc}')}")

    if description.enum_values:
        console.print("\n  Values:\n")
        for value in description.enum_values:
            console.print(f"    {value}")

    if description.possible_types:
        console.print("\n  Possible types:\n")
        for name in description.possible_types:
            console.print(f"    {name}")

    console.print()


def render_exec_result(
    result: ExecResult,
    console: Optional[Console] = None,
    error_console: Optional[Console] = None,
) -> None:
    """Print the errors of a result to stderr, then its data."""
    console = console or Console()
    error_console = error_console or Console(stderr=True)

    if result.errors:
        error_console.print("\n[bold red]Errors:[/bold red]\n")
        for error in result.errors:
            error_console.print(f"  {escape(str(error.get('message')))}")
            if error.get("path"):
                path = ".".join(str(p) for p in error["path"])
                error_console.print(f"    at {escape(path)}")

    if result.data is not None:
        console.print("\n[bold]Data:[/bold]\n")
        pretty_print(result.data, console)
