"""GraphQL client for interacting with the API."""
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
from jsonschema import Draft4Validator
from jsonschema.exceptions import best_match

from .logger import get_logger
from .session import read_token

log = get_logger(__name__)

DEFAULT_TIMEOUT = 30

RESPONSE_SCHEMA = {
    "$schema": "http://json-schema.org/draft-04/schema#",
    "type": "object",
    "properties": {
        "data": {"type": ["object", "null"]},
        "errors": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "message": {"type": "string"},
                    "path": {"type": "array"},
                },
                "required": ["message"],
            },
        },
    },
}

_response_validator = Draft4Validator(RESPONSE_SCHEMA)


class ResponseFormatError(Exception):
    """Raised when a response body is not a GraphQL response envelope."""


@dataclass
class AuthContext:
    """
    Credentials for a request.

    An explicit token wins; otherwise the stored session token for ``api`` is
    used, if any.
    """

    token: Optional[str] = None
    api: Optional[str] = None
    session_dir: Optional[Path] = None

    def resolve_token(self) -> Optional[str]:
        if self.token:
            return self.token
        if self.api:
            return read_token(self.api, self.session_dir)
        return None


@dataclass
class ExecResult:
    data: Optional[Dict[str, Any]] = None
    errors: Optional[List[Dict[str, Any]]] = None
    status: int = 200

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.data is not None:
            result["data"] = self.data
        if self.errors is not None:
            result["errors"] = self.errors
        result["status"] = self.status
        return result


def build_headers(token: Optional[str] = None) -> Dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def parse_response(response: requests.Response) -> ExecResult:
    """
    Turn an HTTP response into an ExecResult.

    Raises:
        ValueError: If the body is not JSON
        ResponseFormatError: If the JSON is not a GraphQL response envelope
    """
    body = response.json()
    error = best_match(_response_validator.iter_errors(body))
    if error is not None:
        raise ResponseFormatError(
            f"Unexpected response from server (HTTP {response.status_code}): "
            f"{error.message}"
        )
    return ExecResult(
        data=body.get("data"),
        errors=body.get("errors"),
        status=response.status_code,
    )


def execute_graphql(
    url: str,
    query: str,
    variables: Optional[Dict[str, Any]] = None,
    auth: Optional[AuthContext] = None,
    operation_name: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> ExecResult:
    """
    Execute a GraphQL document against an endpoint.

    Args:
        url: GraphQL endpoint URL
        query: GraphQL document
        variables: Variables to pass to the document
        auth: Credentials; no Authorization header is sent without a token
        operation_name: Operation to run when the document holds several
        timeout: Request timeout in seconds

    Returns:
        ExecResult with the data, errors and HTTP status of the response
    """
    token = auth.resolve_token() if auth else None

    payload: Dict[str, Any] = {"query": query, "variables": variables}
    if operation_name:
        payload["operationName"] = operation_name

    log.debug("POST %s (operation: %s)", url, operation_name or "anonymous")
    response = requests.post(
        url=url,
        json=payload,
        headers=build_headers(token),
        timeout=timeout,
    )
    result = parse_response(response)
    log.debug("HTTP %s from %s", result.status, url)
    return result
