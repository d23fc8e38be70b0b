"""Schema introspection: operations and type descriptions.

Type references come back from the server as nested ``kind``/``name``/
``ofType`` records. They are flattened into a base name plus two modifiers:
whether the outer value is required and whether it is a list. Element
nullability inside a list is not tracked, so ``[String!]!`` and
``[String]!`` both render as ``[String]!``. Only the
NON_NULL -> LIST -> NON_NULL -> named shape is understood; anything nested
deeper (lists of lists) has no reachable name and comes out as ``Unknown``.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from graphql import TypeKind

from .client import AuthContext, ExecResult, execute_graphql
from .logger import get_logger

log = get_logger(__name__)

UNKNOWN_TYPE = "Unknown"

TYPE_REF_FRAGMENT = """
fragment TypeRef on __Type {
    kind
    name
    ofType {
        kind
        name
        ofType {
            kind
            name
            ofType {
                kind
                name
            }
        }
    }
}"""

OPERATIONS_QUERY = (
    """
query IntrospectOperations {
    __schema {
        queryType {
            name
            fields {
                name
                description
                args { name description type { ...TypeRef } }
                type { ...TypeRef }
            }
        }
        mutationType {
            name
            fields {
                name
                description
                args { name description type { ...TypeRef } }
                type { ...TypeRef }
            }
        }
    }
}"""
    + TYPE_REF_FRAGMENT
)

TYPE_QUERY = (
    """
query IntrospectType($name: String!) {
    __type(name: $name) {
        name
        kind
        description
        fields(includeDeprecated: true) { name description type { ...TypeRef } }
        inputFields { name description type { ...TypeRef } }
        enumValues(includeDeprecated: true) { name description }
        possibleTypes { name }
    }
}"""
    + TYPE_REF_FRAGMENT
)

Executor = Callable[..., ExecResult]


class IntrospectionError(Exception):
    """Raised when the server reports errors for an introspection query."""


class TypeNotFoundError(Exception):
    """Raised when the schema has no type with the requested name."""

    def __init__(self, type_name: str) -> None:
        super().__init__(f'Type "{type_name}" not found')
        self.type_name = type_name


@dataclass(frozen=True)
class TypeDescriptor:
    name: str
    is_required: bool = False
    is_list: bool = False


@dataclass
class FieldDescriptor:
    name: str
    description: Optional[str]
    type: str
    is_required: bool
    is_list: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "isRequired": self.is_required,
            "isList": self.is_list,
        }


@dataclass
class OperationDescriptor:
    name: str
    description: Optional[str]
    args: List[FieldDescriptor]
    return_type: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "args": [arg.to_dict() for arg in self.args],
            "returnType": self.return_type,
        }


@dataclass
class TypeDescription:
    """
    A named schema type.

    Collections the server left out for this kind of type (``fields`` on an
    ENUM, ``enumValues`` on an OBJECT, ...) are None rather than empty lists.
    """

    name: str
    kind: str
    description: Optional[str] = None
    fields: Optional[List[FieldDescriptor]] = None
    input_fields: Optional[List[FieldDescriptor]] = None
    enum_values: Optional[List[str]] = None
    possible_types: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind,
            "description": self.description,
            "fields": _dicts_or_none(self.fields),
            "inputFields": _dicts_or_none(self.input_fields),
            "enumValues": self.enum_values,
            "possibleTypes": self.possible_types,
        }


def _dicts_or_none(fields: Optional[List[FieldDescriptor]]):
    if fields is None:
        return None
    return [f.to_dict() for f in fields]


def unwrap_type(type_ref: Dict[str, Any]) -> TypeDescriptor:
    """
    Flatten a type reference into its name and outer modifiers.

    Args:
        type_ref: Introspected type reference (``kind``, ``name``, ``ofType``)

    Returns:
        TypeDescriptor; the name is "Unknown" when no named type is reached
    """
    is_required = False
    is_list = False
    current = type_ref

    if current.get("kind") == TypeKind.NON_NULL.name:
        is_required = True
        current = current.get("ofType") or {}
    if current.get("kind") == TypeKind.LIST.name:
        is_list = True
        current = current.get("ofType") or {}
        if current.get("kind") == TypeKind.NON_NULL.name:
            current = current.get("ofType") or {}

    return TypeDescriptor(
        name=current.get("name") or UNKNOWN_TYPE,
        is_required=is_required,
        is_list=is_list,
    )


def format_type_string(descriptor: TypeDescriptor) -> str:
    type_string = descriptor.name
    if descriptor.is_list:
        type_string = f"[{type_string}]"
    if descriptor.is_required:
        type_string = f"{type_string}!"
    return type_string


def parse_field(field: Dict[str, Any]) -> FieldDescriptor:
    descriptor = unwrap_type(field["type"])
    return FieldDescriptor(
        name=field["name"],
        description=field.get("description"),
        type=format_type_string(descriptor),
        is_required=descriptor.is_required,
        is_list=descriptor.is_list,
    )


def parse_operation(field: Dict[str, Any]) -> OperationDescriptor:
    return OperationDescriptor(
        name=field["name"],
        description=field.get("description"),
        args=[parse_field(arg) for arg in field.get("args") or []],
        return_type=format_type_string(unwrap_type(field["type"])),
    )


def _raise_for_errors(result: ExecResult, prefix: str) -> None:
    if result.errors:
        message = result.errors[0].get("message")
        raise IntrospectionError(f"{prefix}: {message}")


def _matches(name: str, filter: Optional[str]) -> bool:
    if not filter:
        return True
    return filter.lower() in name.lower()


def list_operations(
    url: str,
    filter: Optional[str] = None,
    token: Optional[str] = None,
    api: Optional[str] = None,
    executor: Executor = execute_graphql,
) -> Dict[str, List[OperationDescriptor]]:
    """
    List the queries and mutations an API exposes.

    Args:
        url: GraphQL endpoint URL
        filter: Keep only operations whose name contains this text, ignoring case
        token: Bearer token, overrides any stored session
        api: API selector used to look up a stored session token
        executor: Function used to run the introspection query

    Returns:
        dict with "queries" and "mutations" lists in server order

    Raises:
        IntrospectionError: If the server reports errors or returns no schema
    """
    result = executor(url, OPERATIONS_QUERY, None, AuthContext(token=token, api=api))
    _raise_for_errors(result, "Introspection failed")

    schema = (result.data or {}).get("__schema")
    if schema is None:
        raise IntrospectionError("Introspection failed: response contains no schema")

    operations = {}
    for key, root in (("queries", "queryType"), ("mutations", "mutationType")):
        fields = (schema.get(root) or {}).get("fields") or []
        operations[key] = [
            op for op in map(parse_operation, fields) if _matches(op.name, filter)
        ]

    log.debug(
        "Found %d queries and %d mutations",
        len(operations["queries"]),
        len(operations["mutations"]),
    )
    return operations


def describe_type(
    url: str,
    type_name: str,
    token: Optional[str] = None,
    api: Optional[str] = None,
    executor: Executor = execute_graphql,
) -> TypeDescription:
    """
    Describe a single named type.

    Raises:
        IntrospectionError: If the server reports errors
        TypeNotFoundError: If the schema has no type called ``type_name``
    """
    result = executor(
        url, TYPE_QUERY, {"name": type_name}, AuthContext(token=token, api=api)
    )
    _raise_for_errors(result, "Type introspection failed")

    type_data = (result.data or {}).get("__type")
    if not type_data:
        raise TypeNotFoundError(type_name)

    fields = type_data.get("fields")
    input_fields = type_data.get("inputFields")
    enum_values = type_data.get("enumValues")
    possible_types = type_data.get("possibleTypes")

    return TypeDescription(
        name=type_data["name"],
        kind=type_data["kind"],
        description=type_data.get("description"),
        fields=None if fields is None else [parse_field(f) for f in fields],
        input_fields=(
            None if input_fields is None else [parse_field(f) for f in input_fields]
        ),
        enum_values=None if enum_values is None else [e["name"] for e in enum_values],
        possible_types=(
            None if possible_types is None else [p["name"] for p in possible_types]
        ),
    )
