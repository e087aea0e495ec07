"""Trello boards, lists and cards."""

import json
from typing import Any

from trello_api.services.invoker import ApiError, invoke
from trello_api.utils.filters import compile_name_pattern, filter_entities
from trello_api.utils.session import CredentialStore, ValidationError, validate


def _resolve_body(body: str | None, options: dict[str, Any]) -> str:
    """Pick the raw body or build one from structured options.

    ``options['name']`` decides which form the caller chose.
    """
    name = options.get('name')
    if body is not None and name is not None:
        raise ValidationError("Pass either a raw body or a name, not both")
    if body is not None:
        if not body.strip():
            raise ValidationError("Raw body must not be empty")
        return body
    if not name:
        raise ValidationError("A name or a raw body is required")
    return json.dumps(options)


def _get_filtered(
    store: CredentialStore,
    endpoint: str,
    include_closed: bool,
    filter_name_exact: str | None,
    filter_name_regex: str | None,
) -> list[dict[str, Any]]:
    if filter_name_exact is not None and filter_name_regex is not None:
        raise ValidationError(
            "filter_name_exact and filter_name_regex cannot be used together"
        )
    pattern = compile_name_pattern(filter_name_regex)
    entities = invoke(store, endpoint)
    if not isinstance(entities, list) or not all(isinstance(e, dict) for e in entities):
        raise ApiError(
            f"Expected a list of objects from {endpoint}, got {type(entities).__name__}",
            method='GET',
        )
    return filter_entities(entities, include_closed, filter_name_exact, pattern)


def get_board(store: CredentialStore, board_id: str) -> dict[str, Any]:
    """Get board details.

    Args:
        store: Credential store.
        board_id: The ID of the board to retrieve.

    Returns:
        Board dictionary.
    """
    validate(store)
    return invoke(store, f'/boards/{board_id}')


def get_card(store: CredentialStore, card_id: str) -> dict[str, Any]:
    """Get card details."""
    validate(store)
    return invoke(store, f'/cards/{card_id}')


def get_lists(
    store: CredentialStore,
    board_id: str,
    include_closed: bool = False,
    filter_name_exact: str | None = None,
    filter_name_regex: str | None = None,
) -> list[dict[str, Any]]:
    """Get the lists on a board.

    Args:
        store: Credential store.
        board_id: The ID of the board.
        include_closed: Include archived lists.
        filter_name_exact: Return only the first list with this name.
        filter_name_regex: Return only the first list whose name matches this pattern.

    Returns:
        List of list dictionaries.
    """
    validate(store)
    endpoint = f'/boards/{board_id}/lists'
    if include_closed:
        endpoint += '/all'
    return _get_filtered(store, endpoint, include_closed, filter_name_exact, filter_name_regex)


def get_list_cards(
    store: CredentialStore,
    list_id: str,
    include_closed: bool = False,
    filter_name_exact: str | None = None,
    filter_name_regex: str | None = None,
) -> list[dict[str, Any]]:
    """Get the cards in a list.

    Filtering works as in ``get_lists``.
    """
    validate(store)
    endpoint = f'/lists/{list_id}/cards'
    if include_closed:
        endpoint += '/all'
    return _get_filtered(store, endpoint, include_closed, filter_name_exact, filter_name_regex)


def get_board_cards(
    store: CredentialStore,
    board_id: str,
    include_closed: bool = False,
    filter_name_exact: str | None = None,
    filter_name_regex: str | None = None,
) -> list[dict[str, Any]]:
    """Get all cards on a board.

    Filtering works as in ``get_lists``.
    """
    validate(store)
    endpoint = f'/boards/{board_id}/cards'
    if include_closed:
        endpoint += '/all'
    return _get_filtered(store, endpoint, include_closed, filter_name_exact, filter_name_regex)


def get_member_boards(
    store: CredentialStore,
    member: str = 'me',
    include_closed: bool = False,
    filter_name_exact: str | None = None,
    filter_name_regex: str | None = None,
) -> list[dict[str, Any]]:
    """Get the boards a member belongs to.

    Closed boards are always fetched and dropped locally unless include_closed is set.
    """
    validate(store)
    return _get_filtered(
        store,
        f'/members/{member}/boards',
        include_closed,
        filter_name_exact,
        filter_name_regex,
    )


def find_list(store: CredentialStore, board_id: str, list_name: str) -> dict[str, Any] | None:
    """Find the single open list with the given name.

    Args:
        store: Credential store.
        board_id: The ID of the board.
        list_name: Exact list name.

    Returns:
        The list dictionary, or None if no open list or more than one has that name.
    """
    validate(store)
    matches = [
        list_data for list_data in get_lists(store, board_id)
        if list_data.get('name') == list_name and not list_data.get('closed', False)
    ]
    if len(matches) != 1:
        return None
    return matches[0]


def add_list(
    store: CredentialStore,
    board_id: str,
    name: str | None = None,
    position: str = 'bottom',
    *,
    body: str | None = None,
) -> dict[str, Any]:
    """Create a list on a board.

    Args:
        store: Credential store.
        board_id: The ID of the board.
        name: Name of the new list.
        position: ``top``, ``bottom`` or a positive number.
        body: Raw JSON document to send instead of name and position.

    Returns:
        The created list.

    Raises:
        ValidationError: If both or neither of name and body are given.
    """
    validate(store)
    payload = _resolve_body(body, {'name': name, 'pos': position})
    return invoke(store, f'/boards/{board_id}/lists', method='POST', body=payload)


def add_card(
    store: CredentialStore,
    list_id: str,
    name: str | None = None,
    position: str = 'bottom',
    description: str = '',
    *,
    body: str | None = None,
) -> dict[str, Any]:
    """Create a card in a list.

    Args:
        store: Credential store.
        list_id: The ID of the list.
        name: Name of the new card.
        position: ``top``, ``bottom`` or a positive number.
        description: Card description.
        body: Raw JSON document to send instead of name, position and description.

    Returns:
        The created card.

    Raises:
        ValidationError: If both or neither of name and body are given.
    """
    validate(store)
    payload = _resolve_body(body, {'name': name, 'pos': position, 'desc': description})
    return invoke(store, f'/lists/{list_id}/cards', method='POST', body=payload)
