"""Tests for the Trello API request wrapper."""

import json
from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import pytest
import requests
from pydantic import SecretStr

if TYPE_CHECKING:
    from pytest_mock.plugin import MockerFixture

from trello_api.services.invoker import (
    ApiError,
    build_url,
    invoke,
    redact,
    sanitize_url,
)
from trello_api.utils.session import CredentialStore, ValidationError, create


@pytest.fixture
def store() -> CredentialStore:
    return create('test_key', 'test_token')


@pytest.fixture
def mock_request(mocker: "MockerFixture") -> MagicMock:
    mock_response = MagicMock()
    mock_response.ok = True
    mock_response.status_code = 200
    mock_response.json.return_value = {'id': '123', 'name': 'Test'}
    return mocker.patch(
        'trello_api.services.invoker.requests.request',
        return_value=mock_response,
    )


def test_build_url_appends_credentials(store: CredentialStore) -> None:
    """Test that key and token follow the caller's parameters in order."""
    url = build_url(store, '/boards/b1', {'fields': 'name', 'filter': 'open'})

    assert url == (
        'https://api.trello.com/1/boards/b1'
        '?fields=name&filter=open&key=test_key&token=test_token'
    )


def test_build_url_encodes_values(store: CredentialStore) -> None:
    """Test that parameter values are URL-encoded."""
    url = build_url(store, '/search', {'query': 'a b&c'})

    assert '?query=a+b%26c&key=test_key' in url


def test_build_url_does_not_modify_parameters(store: CredentialStore) -> None:
    """Test that the caller's mapping is left untouched."""
    params = {'fields': 'name'}

    build_url(store, '/boards/b1', params)

    assert params == {'fields': 'name'}


def test_sanitize_url_masks_credentials(store: CredentialStore) -> None:
    """Test that the diagnostic URL carries the placeholder instead of secrets."""
    url = sanitize_url(store, '/boards/b1', {'fields': 'name'})

    assert url == 'https://api.trello.com/1/boards/b1?fields=name&key=XXXX&token=XXXX'


@pytest.mark.parametrize(
    'key,token,endpoint,params',
    [
        ('boards', 'b1', '/boards/b1', {}),
        ('abc', 'abcdef', '/lists/abcdef', {'q': 'abc'}),
        ('k+y/=', 't&k n', '/cards', {'name': 'k+y/='}),
        ('trello', 'api', '/members/me', {}),
    ],
)
def test_sanitize_url_never_contains_secrets(
    key: str,
    token: str,
    endpoint: str,
    params: dict[str, str],
) -> None:
    """Test that secrets appearing anywhere in the URL are masked."""
    store = create(key, token)

    url = sanitize_url(store, endpoint, params)

    assert key not in url
    assert token not in url


def test_redact_masks_encoded_forms() -> None:
    """Test that URL-encoded secrets are masked too."""
    special = create('a b/c', 'test_token')

    text = redact('key=a+b%2Fc other=a%20b%2Fc raw=a b/c', special)

    assert text == 'key=XXXX other=XXXX raw=XXXX'


def test_invoke_get(store: CredentialStore, mock_request: MagicMock) -> None:
    """Test a GET request and its parsed result."""
    result = invoke(store, '/boards/b1', parameters={'fields': 'name'})

    assert result == {'id': '123', 'name': 'Test'}
    mock_request.assert_called_once_with(
        'GET',
        'https://api.trello.com/1/boards/b1?fields=name&key=test_key&token=test_token',
        headers={'Content-Type': 'application/json'},
        data=None,
    )


def test_invoke_post_with_body(store: CredentialStore, mock_request: MagicMock) -> None:
    """Test a POST request sends the body as UTF-8 JSON."""
    body = json.dumps({'name': 'Café', 'pos': 'top'}, ensure_ascii=False)

    invoke(store, '/boards/b1/lists', method='post', body=body)

    args, kwargs = mock_request.call_args
    assert args[0] == 'POST'
    assert kwargs['headers'] == {'Content-Type': 'application/json'}
    assert json.loads(kwargs['data'].decode('utf-8')) == {'name': 'Café', 'pos': 'top'}


def test_invoke_returns_list(store: CredentialStore, mock_request: MagicMock) -> None:
    """Test that array responses are returned as-is."""
    mock_request.return_value.json.return_value = [{'id': 'l1'}, {'id': 'l2'}]

    assert invoke(store, '/boards/b1/lists') == [{'id': 'l1'}, {'id': 'l2'}]


def test_invoke_invalid_store_makes_no_request(mock_request: MagicMock) -> None:
    """Test that an invalid store fails before any network call."""
    store = CredentialStore(SecretStr('test_key'), SecretStr(''))

    with pytest.raises(ValidationError):
        invoke(store, '/boards/b1')

    mock_request.assert_not_called()


def test_invoke_http_error(store: CredentialStore, mock_request: MagicMock) -> None:
    """Test that a non-2xx response raises ApiError with a masked URL."""
    mock_response = mock_request.return_value
    mock_response.ok = False
    mock_response.status_code = 401
    mock_response.reason = 'Unauthorized'
    mock_response.text = 'invalid token test_token'

    with pytest.raises(ApiError) as exc_info:
        invoke(store, '/boards/b1')

    error = exc_info.value
    assert error.status_code == 401
    assert error.method == 'GET'
    assert error.url == 'https://api.trello.com/1/boards/b1?key=XXXX&token=XXXX'
    assert '401 Unauthorized' in str(error)
    assert 'test_key' not in str(error)
    assert 'test_token' not in str(error)


def test_invoke_transport_error(store: CredentialStore, mock_request: MagicMock) -> None:
    """Test that a transport failure raises ApiError without leaking the real URL."""
    mock_request.side_effect = requests.ConnectionError(
        "Max retries exceeded with url: /1/boards/b1?key=test_key&token=test_token"
    )

    with pytest.raises(ApiError) as exc_info:
        invoke(store, '/boards/b1')

    error = exc_info.value
    assert error.status_code is None
    assert 'ConnectionError' in str(error)
    assert 'test_key' not in str(error)
    assert 'test_token' not in str(error)
    assert error.__cause__ is None
    assert error.__suppress_context__ is True


def test_invoke_non_json_response(store: CredentialStore, mock_request: MagicMock) -> None:
    """Test that a body that is not JSON raises ApiError."""
    mock_request.return_value.json.side_effect = ValueError("Expecting value")

    with pytest.raises(ApiError, match="not JSON") as exc_info:
        invoke(store, '/boards/b1')

    assert exc_info.value.status_code == 200


def test_invoke_logs_only_sanitized_url(
    store: CredentialStore,
    mock_request: MagicMock,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Test that debug logging never carries the secrets."""
    caplog.set_level('DEBUG', logger='trello_api')

    invoke(store, '/boards/b1')

    assert 'key=XXXX&token=XXXX' in caplog.text
    assert 'test_key' not in caplog.text
    assert 'test_token' not in caplog.text


def test_invoke_plain_string_store_makes_no_request(mock_request: MagicMock) -> None:
    """Test that a store holding plain strings fails validation before any request."""
    store = CredentialStore('test_key', 'test_token')  # type: ignore[arg-type]

    with pytest.raises(ValidationError):
        invoke(store, '/boards/b1')

    mock_request.assert_not_called()


def test_sanitize_url_short_token_keeps_parameter_names() -> None:
    """Test that a token found inside parameter names does not garble them."""
    store = create('test_key', 'tok')

    url = sanitize_url(store, '/boards/b1', {'fields': 'name'})

    assert url == 'https://api.trello.com/1/boards/b1?fields=name&key=XXXX&token=XXXX'


def test_sanitize_url_ignores_credential_parameters(store: CredentialStore) -> None:
    """Test that caller-supplied key and token parameters are replaced, not repeated."""
    url = sanitize_url(store, '/boards/b1', {'key': 'other', 'fields': 'name'})

    assert url == 'https://api.trello.com/1/boards/b1?fields=name&key=XXXX&token=XXXX'
    assert build_url(store, '/boards/b1', {'key': 'other', 'fields': 'name'}).endswith(
        '?fields=name&key=test_key&token=test_token'
    )


def test_redact_single_pass() -> None:
    """Test that inserted placeholders are not masked a second time."""
    store = create('XX', 'test_token')

    assert redact('id=XX&name=test_token', store) == 'id=XXXX&name=XXXX'
