"""
Publish build artifacts to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/build2conf
"""

import os
from typing import overload
from urllib.parse import urlparse


class ArgumentError(ValueError):
    "Raised when wrong arguments are passed to a function call."


class PageError(ValueError):
    "Raised in case there is an issue with a Confluence page."


class TokenNotFoundError(PageError):
    "Raised when a markup editor cannot find its marker token in the page content."


class ConfluenceError(RuntimeError):
    "Raised when a Confluence API call fails."


@overload
def _validate_base_url(base_url: str) -> str: ...


@overload
def _validate_base_url(base_url: str | None) -> str | None: ...


def _validate_base_url(base_url: str | None) -> str | None:
    if base_url is None:
        return None

    scheme, netloc, _, params, query, fragment = urlparse(base_url)
    if scheme not in ("http", "https") or not netloc:
        raise ArgumentError(f"Confluence base URL must be an absolute HTTP or HTTPS URL; got: {base_url}")
    if params or query or fragment:
        raise ArgumentError(f"Confluence base URL must not have parameters, query string or fragment; got: {base_url}")

    if not base_url.endswith("/"):
        base_url = f"{base_url}/"
    return base_url


class ConnectionProperties:
    """
    Properties related to connecting to Confluence.

    :param base_url: Confluence site URL, e.g. `https://wiki.example.com/confluence/`.
    :param user_name: Confluence user name. When omitted, the API key is sent as a bearer token.
    :param api_key: Confluence API key, password or personal access token.
    :param headers: Additional HTTP headers to pass to Confluence REST API calls.
    """

    base_url: str
    user_name: str | None
    api_key: str
    headers: dict[str, str] | None

    def __init__(
        self,
        *,
        base_url: str | None = None,
        user_name: str | None = None,
        api_key: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        opt_base_url = base_url or os.getenv("CONFLUENCE_URL")
        opt_user_name = user_name or os.getenv("CONFLUENCE_USER_NAME")
        opt_api_key = api_key or os.getenv("CONFLUENCE_API_KEY")

        if not opt_base_url:
            raise ArgumentError("Confluence base URL not specified")
        if not opt_api_key:
            raise ArgumentError("Confluence API key not specified")

        self.base_url = _validate_base_url(opt_base_url)
        self.user_name = opt_user_name
        self.api_key = opt_api_key
        self.headers = headers
