"""Session authentication against the shop and admin APIs."""

from pathlib import Path
from typing import Optional

import requests

from .client import (
    DEFAULT_TIMEOUT,
    AuthContext,
    build_headers,
    execute_graphql,
    parse_response,
)
from .logger import get_logger
from .session import clear_token, read_token, write_token

log = get_logger(__name__)

AUTH_TOKEN_HEADER = "vendure-auth-token"

_LOGIN_RESULTS = """
            ... on CurrentUser { id identifier }
            ... on InvalidCredentialsError { message }
            ... on NativeAuthenticationError { message }"""

ADMIN_LOGIN_MUTATION = (
    """
mutation Login($username: String!, $password: String!) {
    login(username: $username, password: $password) {"""
    + _LOGIN_RESULTS
    + """
    }
}"""
)

SHOP_LOGIN_MUTATION = (
    """
mutation Login($username: String!, $password: String!) {
    login(username: $username, password: $password) {"""
    + _LOGIN_RESULTS
    + """
            ... on NotVerifiedError { message }
    }
}"""
)

ADMIN_WHOAMI_QUERY = "query { me { id identifier } }"
SHOP_WHOAMI_QUERY = "query { activeCustomer { id emailAddress } }"


class AuthenticationError(Exception):
    """Raised when logging in fails."""


def login(
    url: str,
    api: str,
    email: str,
    password: str,
    session_dir: Optional[Path] = None,
) -> str:
    """
    Log in and store the session token for the API.

    The token is read from the auth token response header, so the server
    must be configured to hand out bearer tokens.

    Returns:
        The identifier of the authenticated user

    Raises:
        AuthenticationError: If the server rejects the credentials or sends
            no token
    """
    mutation = ADMIN_LOGIN_MUTATION if api == "admin" else SHOP_LOGIN_MUTATION
    log.debug("Logging in to %s API at %s", api, url)
    response = requests.post(
        url=url,
        json={
            "query": mutation,
            "variables": {"username": email, "password": password},
        },
        headers=build_headers(),
        timeout=DEFAULT_TIMEOUT,
    )
    result = parse_response(response)

    if result.errors:
        raise AuthenticationError(f"Auth failed: {result.errors[0].get('message')}")

    login_result = (result.data or {}).get("login") or {}
    if login_result.get("message"):
        raise AuthenticationError(f"Auth failed: {login_result['message']}")

    token = response.headers.get(AUTH_TOKEN_HEADER)
    if not token:
        raise AuthenticationError(
            "No auth token in response. Check API configuration "
            "(tokenMethod must include 'bearer')."
        )

    write_token(api, token, session_dir)
    return login_result.get("identifier", email)


def logout(api: str, session_dir: Optional[Path] = None) -> bool:
    return clear_token(api, session_dir)


def status(url: str, api: str, session_dir: Optional[Path] = None) -> Optional[str]:
    """
    Check the stored session for an API.

    Returns:
        None when there is no stored token, the user's identifier when the
        session is valid, or an empty string when the token no longer works
    """
    if read_token(api, session_dir) is None:
        return None

    query = ADMIN_WHOAMI_QUERY if api == "admin" else SHOP_WHOAMI_QUERY
    result = execute_graphql(url, query, auth=AuthContext(api=api, session_dir=session_dir))
    data = result.data or {}
    user = data.get("me") or data.get("activeCustomer")
    if not user:
        return ""
    return user.get("identifier") or user.get("emailAddress") or ""
