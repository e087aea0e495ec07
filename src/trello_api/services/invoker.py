"""Authenticated request wrapper for the Trello REST API."""

import logging
import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote, quote_plus, urlencode

import requests

from trello_api.utils.session import CredentialStore, validate

SECRET_PLACEHOLDER = 'XXXX'
MAX_ERROR_BODY = 200

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Trello API call failed or returned something other than JSON."""

    def __init__(
        self,
        message: str,
        method: str | None = None,
        url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.method = method
        self.url = url
        self.status_code = status_code


def _param_value(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def _query(parameters: Mapping[str, Any]) -> str:
    return urlencode([(str(name), _param_value(value)) for name, value in parameters.items()])


def _secrets(store: CredentialStore) -> list[str]:
    values = [store.key.get_secret_value(), store.token.get_secret_value()]
    return [value for value in values if value]


def redact(text: str, store: CredentialStore) -> str:
    """Replace every raw or URL-encoded occurrence of the key and token in text.

    Runs in a single pass, so inserted placeholders are never matched again.
    """
    forms = {
        form
        for secret in _secrets(store)
        for form in (secret, quote_plus(secret), quote(secret, safe=''))
    }
    pattern = '|'.join(re.escape(form) for form in sorted(forms, key=len, reverse=True))
    return re.sub(pattern, SECRET_PLACEHOLDER, text)


def _without_credentials(parameters: Mapping[str, Any] | None) -> dict[str, Any]:
    return {
        name: value for name, value in (parameters or {}).items()
        if name not in ('key', 'token')
    }


def _with_credentials(
    parameters: Mapping[str, Any] | None,
    key: str,
    token: str,
) -> dict[str, Any]:
    params = _without_credentials(parameters)
    params['key'] = key
    params['token'] = token
    return params


def build_url(
    store: CredentialStore,
    endpoint: str,
    parameters: Mapping[str, Any] | None = None,
) -> str:
    """Build the full request URL including key and token.

    Args:
        store: Credential store.
        endpoint: API path such as ``/boards/abc``.
        parameters: Query parameters, in the order they should appear.

    Returns:
        ``base_url + endpoint + '?' + query``. Never log this value.
    """
    validate(store)
    params = _with_credentials(
        parameters,
        store.key.get_secret_value(),
        store.token.get_secret_value(),
    )
    return f"{store.base_url}{endpoint}?{_query(params)}"


def sanitize_url(
    store: CredentialStore,
    endpoint: str,
    parameters: Mapping[str, Any] | None = None,
) -> str:
    """Build the diagnostic form of the request URL with secrets masked.

    The key and token values become ``XXXX``. Any secret echoed in the base URL,
    endpoint or caller parameters is masked too; the credential parameters
    themselves are appended afterwards and left intact.
    """
    validate(store)
    query = _query(_without_credentials(parameters))
    prefix = redact(f"{store.base_url}{endpoint}?{query}", store)
    if query:
        prefix += '&'
    return f"{prefix}key={SECRET_PLACEHOLDER}&token={SECRET_PLACEHOLDER}"


def invoke(
    store: CredentialStore,
    endpoint: str,
    method: str = 'GET',
    parameters: Mapping[str, Any] | None = None,
    body: str | None = None,
) -> Any:
    """Call the Trello API and return the parsed JSON response.

    Args:
        store: Credential store.
        endpoint: API path such as ``/boards/abc/lists``.
        method: HTTP method.
        parameters: Query parameters. Not modified.
        body: Optional JSON document to send.

    Returns:
        Parsed JSON response.

    Raises:
        ValidationError: If the store is invalid.
        ApiError: If the request fails, returns a non-2xx status or the body is not JSON.
    """
    validate(store)
    method = method.upper()
    url = build_url(store, endpoint, parameters)
    safe_url = sanitize_url(store, endpoint, parameters)

    logger.debug("%s %s", method, safe_url)

    data = body.encode('utf-8') if isinstance(body, str) else body
    try:
        response = requests.request(
            method,
            url,
            headers={'Content-Type': 'application/json'},
            data=data,
        )
    except requests.RequestException as e:
        # Chained transport errors quote the real URL.
        message = f"{method} {safe_url} failed: " + redact(f"{type(e).__name__}: {e}", store)
        raise ApiError(message, method=method, url=safe_url) from None

    logger.debug("%s %s -> %s", method, safe_url, response.status_code)

    if not response.ok:
        detail = redact((response.text or '').strip()[:MAX_ERROR_BODY], store)
        message = f"{method} {safe_url} failed: {response.status_code} {response.reason}"
        if detail:
            message += f" ({detail})"
        raise ApiError(message, method=method, url=safe_url, status_code=response.status_code)

    try:
        return response.json()
    except ValueError:
        raise ApiError(
            f"{method} {safe_url} returned a response that is not JSON",
            method=method,
            url=safe_url,
            status_code=response.status_code,
        ) from None
