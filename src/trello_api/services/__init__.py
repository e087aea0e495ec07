"""Trello API request and resource services."""

from trello_api.services.invoker import ApiError, build_url, invoke, sanitize_url
from trello_api.services.resources import (
    add_card,
    add_list,
    find_list,
    get_board,
    get_board_cards,
    get_card,
    get_list_cards,
    get_lists,
    get_member_boards,
)

__all__ = [
    'ApiError',
    'add_card',
    'add_list',
    'build_url',
    'find_list',
    'get_board',
    'get_board_cards',
    'get_card',
    'get_list_cards',
    'get_lists',
    'get_member_boards',
    'invoke',
    'sanitize_url',
]
