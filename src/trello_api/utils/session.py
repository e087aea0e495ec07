"""Credential store and session persistence for the Trello API."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import SecretStr

TRELLO_BASE_URL = 'https://api.trello.com/1'
SESSION_FILE_NAME = 'session.yaml'

logger = logging.getLogger(__name__)


class ValidationError(ValueError):
    """Invalid credential store or invalid caller input."""

    pass


class SessionIOError(OSError):
    """Session file could not be read or written."""

    pass


@dataclass(frozen=True)
class CredentialStore:
    """Trello API key, token and base URL.

    Key and token are held as ``SecretStr`` so that ``repr`` and ``str`` never
    show them. Use ``get_secret_value()`` only where the plaintext is needed.
    """

    key: SecretStr
    token: SecretStr
    base_url: str = TRELLO_BASE_URL


def _secret_value(value: Any) -> str:
    if isinstance(value, SecretStr):
        return value.get_secret_value()
    if value is None:
        return ''
    return str(value)


def create(key: str, token: str, base_url: str = TRELLO_BASE_URL) -> CredentialStore:
    """Create a credential store.

    Args:
        key: Trello API key.
        token: Trello API token.
        base_url: API base URL.

    Returns:
        A validated CredentialStore.

    Raises:
        ValidationError: If key, token or base_url is empty.
    """
    if not key:
        raise ValidationError("API key must not be empty")
    if not token:
        raise ValidationError("API token must not be empty")

    store = CredentialStore(
        key=SecretStr(str(key)),
        token=SecretStr(str(token)),
        base_url=base_url,
    )
    validate(store)
    return store


def validate(store: CredentialStore | None) -> None:
    """Check that a credential store is usable.

    Raises:
        ValidationError: If the store is missing or any field is empty.
    """
    if store is None:
        raise ValidationError("No Trello session given")
    if not isinstance(store, CredentialStore):
        raise ValidationError(
            f"Expected a CredentialStore, got {type(store).__name__}"
        )
    if not isinstance(store.key, SecretStr) or not isinstance(store.token, SecretStr):
        raise ValidationError("Trello session key and token must be SecretStr values")
    if not store.key.get_secret_value():
        raise ValidationError("Trello session is missing the API key")
    if not store.token.get_secret_value():
        raise ValidationError("Trello session is missing the API token")
    if not store.base_url or not isinstance(store.base_url, str):
        raise ValidationError("Trello session is missing the base URL")


def from_env() -> CredentialStore:
    """Create a credential store from environment variables.

    Reads TRELLO_API_KEY, TRELLO_TOKEN (or TRELLO_API_TOKEN) and the optional
    TRELLO_BASE_URL.

    Raises:
        ValidationError: If the key or token variable is not set.
    """
    api_key = os.getenv('TRELLO_API_KEY')
    token = os.getenv('TRELLO_TOKEN') or os.getenv('TRELLO_API_TOKEN')
    if not api_key or not token:
        raise ValidationError(
            "TRELLO_API_KEY and TRELLO_TOKEN (or TRELLO_API_TOKEN) must be set in the environment"
        )
    base_url = os.getenv('TRELLO_BASE_URL') or TRELLO_BASE_URL
    return create(api_key, token, base_url)


def default_session_path() -> Path:
    """Get the session file location.

    Returns:
        TRELLO_SESSION_FILE if set, otherwise ~/.trello-api/session.yaml.
    """
    session_file = os.getenv('TRELLO_SESSION_FILE')
    if session_file:
        return Path(session_file).expanduser()
    return Path.home() / '.trello-api' / SESSION_FILE_NAME


def save(store: CredentialStore, path: Path | str) -> None:
    """Write a credential store to a file readable only by its owner.

    Args:
        store: The credential store to persist.
        path: Destination file.

    Raises:
        ValidationError: If the store is invalid.
        SessionIOError: If the file cannot be written.
    """
    validate(store)
    path = Path(path)

    data = {
        'key': store.key.get_secret_value(),
        'token': store.token.get_secret_value(),
        'base_url': store.base_url,
    }

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
        os.chmod(path, 0o600)
    except OSError as e:
        raise SessionIOError(f"Error writing session file {path}: {e.strerror}") from e

    logger.info("Saved Trello session to %s", path)


def load(path: Path | str) -> CredentialStore:
    """Read a credential store written by ``save``.

    Args:
        path: Session file.

    Returns:
        The restored CredentialStore.

    Raises:
        SessionIOError: If the file is missing or unreadable.
        ValidationError: If the file does not hold a valid session.
    """
    path = Path(path)

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise SessionIOError(f"Error reading session file {path}: {e.strerror}") from e
    except yaml.YAMLError:
        # The parser error quotes file content, which would leak secrets.
        raise ValidationError(f"Invalid YAML in session file {path}") from None

    if not isinstance(data, dict):
        raise ValidationError(f"Session file {path} does not contain a session")

    store = CredentialStore(
        key=SecretStr(_secret_value(data.get('key'))),
        token=SecretStr(_secret_value(data.get('token'))),
        base_url=_secret_value(data.get('base_url')),
    )
    validate(store)

    logger.info("Loaded Trello session from %s", path)
    return store
