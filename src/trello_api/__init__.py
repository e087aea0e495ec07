"""Trello API - Thin wrapper over the Trello REST API."""

__version__ = '0.1.0'

from trello_api.cli import cli
from trello_api.services import (
    ApiError,
    add_card,
    add_list,
    find_list,
    get_board,
    get_board_cards,
    get_card,
    get_list_cards,
    get_lists,
    get_member_boards,
    invoke,
)
from trello_api.utils import (
    CredentialStore,
    SessionIOError,
    ValidationError,
    create,
    load,
    save,
    validate,
)

__all__ = [
    'ApiError',
    'CredentialStore',
    'SessionIOError',
    'ValidationError',
    'add_card',
    'add_list',
    'cli',
    'create',
    'find_list',
    'get_board',
    'get_board_cards',
    'get_card',
    'get_list_cards',
    'get_lists',
    'get_member_boards',
    'invoke',
    'load',
    'save',
    'validate',
]
