"""Session and filtering utilities for the Trello API wrapper."""

from trello_api.utils.filters import filter_entities
from trello_api.utils.session import (
    TRELLO_BASE_URL,
    CredentialStore,
    SessionIOError,
    ValidationError,
    create,
    default_session_path,
    from_env,
    load,
    save,
    validate,
)

__all__ = [
    'TRELLO_BASE_URL',
    'CredentialStore',
    'SessionIOError',
    'ValidationError',
    'create',
    'default_session_path',
    'filter_entities',
    'from_env',
    'load',
    'save',
    'validate',
]
