"""Command-line interface for arnold."""

import argparse
import json
import sys
from typing import Any, Dict, Optional

import requests
from graphql import DocumentNode, GraphQLSyntaxError, OperationDefinitionNode, parse
from rich.console import Console

from . import __version__
from .auth import AuthenticationError, login, logout, status
from .client import AuthContext, ResponseFormatError, execute_graphql
from .config import VALID_APIS, InvalidApiError, get_api_url, load_config, validate_api
from .introspect import (
    IntrospectionError,
    TypeNotFoundError,
    describe_type,
    list_operations,
)
from .logger import get_logger, set_verbose
from .session import token_path
from .utils import render_exec_result, render_operations, render_type

log = get_logger(__name__)

console = Console()
error_console = Console(stderr=True)


def print_json(data: Any) -> None:
    """Write plain JSON to stdout so the output can be piped."""
    print(json.dumps(data, indent=2))


def get_operation_name(document: DocumentNode) -> Optional[str]:
    for definition in document.definitions:
        if not isinstance(definition, OperationDefinitionNode):
            continue
        if definition.name is not None:
            return definition.name.value
    return None


def schema_ops(args: argparse.Namespace) -> int:
    url = get_api_url(args.api, load_config())
    operations = list_operations(url, args.filter, api=args.api)

    if args.json:
        print_json({key: [op.to_dict() for op in ops] for key, ops in operations.items()})
    else:
        render_operations(
            operations["queries"], operations["mutations"], args.filter, console
        )
    return 0


def schema_type(args: argparse.Namespace) -> int:
    url = get_api_url(args.api, load_config())
    description = describe_type(url, args.type_name, api=args.api)

    if args.json:
        print_json(description.to_dict())
    else:
        render_type(description, console)
    return 0


def auth_login(args: argparse.Namespace) -> int:
    url = get_api_url(args.api, load_config())
    identifier = login(url, args.api, args.email, args.password)
    console.print(f"Authenticated as {identifier} ({args.api} API)")
    console.print(f"Token stored in {token_path(args.api)}")
    return 0


def auth_logout(args: argparse.Namespace) -> int:
    validate_api(args.api)
    if logout(args.api):
        console.print(f"Session cleared for {args.api} API")
    else:
        console.print(f"No session found for {args.api} API")
    return 0


def auth_status(args: argparse.Namespace) -> int:
    apis = [args.api] if args.api else list(VALID_APIS)
    config = load_config()

    for api in apis:
        identifier = status(get_api_url(api, config), api)
        if identifier is None:
            console.print(f"{api}: not authenticated")
        elif identifier:
            console.print(f"{api}: authenticated as {identifier}")
        else:
            console.print(f"{api}: token stored but session may be expired")
    return 0


def run_exec(args: argparse.Namespace) -> int:
    validate_api(args.api)
    if not args.query and not args.file:
        error_console.print("Provide either --query or --file")
        return 1

    if args.file:
        with open(args.file, "r") as file:
            query = file.read()
    else:
        query = args.query

    try:
        variables: Dict[str, Any] = json.loads(args.variables)
    except json.JSONDecodeError:
        error_console.print(f"Invalid JSON in --variables: {args.variables}", markup=False)
        return 1
    if not isinstance(variables, dict):
        error_console.print("Invalid JSON in --variables: expected an object")
        return 1

    try:
        document = parse(query)
    except GraphQLSyntaxError as e:
        error_console.print(f"Invalid GraphQL document: {e.message}", markup=False)
        return 1

    url = get_api_url(args.api, load_config())
    result = execute_graphql(
        url,
        query,
        variables,
        auth=AuthContext(api=args.api),
        operation_name=get_operation_name(document),
    )

    if args.json:
        print_json(result.to_dict())
    else:
        render_exec_result(result, console, error_console)

    if result.errors and not result.data:
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="arnold", description="Agent-first GraphQL API CLI")
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # schema
    parser_schema = subparsers.add_parser(
        "schema", help="Discover GraphQL schema via introspection"
    )
    schema_commands = parser_schema.add_subparsers(dest="schema_command")

    parser_ops = schema_commands.add_parser("ops", help="List queries and mutations")
    parser_ops.add_argument("--api", required=True, help="API to introspect (shop or admin)")
    parser_ops.add_argument("--filter", help="Filter operations by keyword")
    parser_ops.add_argument("--json", action="store_true", help="Output as JSON")
    parser_ops.set_defaults(handler=schema_ops)

    parser_type = schema_commands.add_parser("type", help="Describe a specific GraphQL type")
    parser_type.add_argument("--api", required=True, help="API to introspect (shop or admin)")
    parser_type.add_argument("type_name", help="Name of the type to describe")
    parser_type.add_argument("--json", action="store_true", help="Output as JSON")
    parser_type.set_defaults(handler=schema_type)

    # auth
    parser_auth = subparsers.add_parser(
        "auth", help="Authenticate against a GraphQL API"
    )
    auth_commands = parser_auth.add_subparsers(dest="auth_command")

    parser_login = auth_commands.add_parser("login", help="Authenticate and store session token")
    parser_login.add_argument("--api", required=True, help="API to authenticate against (shop or admin)")
    parser_login.add_argument("--email", required=True, help="Email address")
    parser_login.add_argument("--password", required=True, help="Password")
    parser_login.set_defaults(handler=auth_login)

    parser_logout = auth_commands.add_parser("logout", help="Clear stored session token")
    parser_logout.add_argument("--api", required=True, help="API to clear session for (shop or admin)")
    parser_logout.set_defaults(handler=auth_logout)

    parser_status = auth_commands.add_parser("status", help="Check current auth status")
    parser_status.add_argument("--api", help="Check specific API (shop or admin)")
    parser_status.set_defaults(handler=auth_status)

    # exec
    parser_exec = subparsers.add_parser("exec", help="Execute a GraphQL query or mutation")
    parser_exec.add_argument("--api", required=True, help="API to execute against (shop or admin)")
    parser_exec.add_argument("--query", help="Inline GraphQL query")
    parser_exec.add_argument("--file", help="Path to .graphql file")
    parser_exec.add_argument("--variables", default="{}", help="JSON variables")
    parser_exec.add_argument(
        "--json", action="store_true", help="Raw JSON output (default is pretty-printed)"
    )
    parser_exec.set_defaults(handler=run_exec)

    return parser


def main(argv: Optional[list] = None) -> int:
    """Main entry point for the arnold CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    set_verbose(args.verbose)
    log.debug("Running command: %s", args.command)

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 1

    try:
        return handler(args)
    except (
        InvalidApiError,
        IntrospectionError,
        TypeNotFoundError,
        AuthenticationError,
        ResponseFormatError,
    ) as e:
        error_console.print(str(e), markup=False)
    except requests.RequestException as e:
        error_console.print(f"Request failed: {str(e)}", markup=False)
    except OSError as e:
        error_console.print(str(e), markup=False)
    except ValueError as e:
        # non-JSON response body
        error_console.print(f"Invalid response from server: {str(e)}", markup=False)
    return 1


if __name__ == "__main__":
    sys.exit(main())
