"""CLI command definitions for the Trello API wrapper."""

import json
import logging
from pathlib import Path
from typing import Any

import click
from dotenv import load_dotenv

from trello_api.services.invoker import ApiError
from trello_api.services.resources import (
    add_card,
    add_list,
    find_list,
    get_board,
    get_board_cards,
    get_list_cards,
    get_lists,
    get_member_boards,
)
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
)

# Load environment variables
load_dotenv()


def _get_store(ctx: click.Context) -> CredentialStore:
    """Resolve credentials from --session, the environment, or the default session file."""
    session_path: Path | None = ctx.obj.get('session_path')
    if session_path is not None:
        return load(session_path)

    try:
        return from_env()
    except ValidationError:
        default_path = default_session_path()
        if default_path.exists():
            return load(default_path)
        raise


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _echo_entities(entities: list[dict[str, Any]], as_json: bool) -> None:
    if as_json:
        _echo_json(entities)
        return

    click.echo(f"\nFound {len(entities)}:\n")
    for entity in entities:
        closed = " (closed)" if entity.get('closed') else ""
        click.echo(f"  {entity.get('id', ''):24} {entity.get('name', '')}{closed}")
    click.echo()


def _fail(action: str, error: Exception) -> click.ClickException:
    if isinstance(error, (ValidationError, SessionIOError)):
        return click.ClickException(str(error))
    return click.ClickException(f"Error {action}: {error}")


name_filter_options = [
    click.option('--all', 'include_closed', is_flag=True, help='Include closed (archived) entries'),
    click.option('--name', 'filter_name_exact', help='Return only the first entry with this exact name'),
    click.option('--match', 'filter_name_regex', help='Return only the first entry whose name matches this regex'),
    click.option('--json', 'as_json', is_flag=True, help='Print raw JSON'),
]


def with_name_filters(func: Any) -> Any:
    for option in reversed(name_filter_options):
        func = option(func)
    return func


@click.group()
@click.option(
    '--session',
    'session_path',
    type=click.Path(dir_okay=False, path_type=Path),
    help='Saved session file (default: environment, then TRELLO_SESSION_FILE or ~/.trello-api/session.yaml)',
)
@click.option('--verbose', '-v', is_flag=True, help='Log requests (credentials are masked)')
@click.pass_context
def cli(ctx: click.Context, session_path: Path | None, verbose: bool) -> None:
    """Trello API CLI - Work with Trello boards, lists and cards."""
    ctx.ensure_object(dict)
    ctx.obj['session_path'] = session_path
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s %(name)s: %(message)s')


@cli.command()
@click.option('--key', envvar='TRELLO_API_KEY', prompt='API key', hide_input=True, help='Trello API key')
@click.option(
    '--token',
    envvar=['TRELLO_TOKEN', 'TRELLO_API_TOKEN'],
    prompt='API token',
    hide_input=True,
    help='Trello API token',
)
@click.option('--base-url', envvar='TRELLO_BASE_URL', default=TRELLO_BASE_URL, show_default=True)
@click.option('--path', 'path', type=click.Path(dir_okay=False, path_type=Path), help='Where to save the session')
@click.pass_context
def session_save(ctx: click.Context, key: str, token: str, base_url: str, path: Path | None) -> None:
    """Create a session and save it to a file.

    Args:
        key: Trello API key.
        token: Trello API token.
        base_url: API base URL.
        path: Destination file.
    """
    try:
        target = path or ctx.obj.get('session_path') or default_session_path()
        store = create(key, token, base_url)
        save(store, target)
        click.echo(f"Session saved to {target}")
    except (ValidationError, SessionIOError) as e:
        raise _fail('saving session', e)


@cli.command()
@click.option('--member', default='me', show_default=True, help='Member ID or username')
@with_name_filters
@click.pass_context
def boards(
    ctx: click.Context,
    member: str,
    include_closed: bool,
    filter_name_exact: str | None,
    filter_name_regex: str | None,
    as_json: bool,
) -> None:
    """List boards of a member."""
    try:
        store = _get_store(ctx)
        result = get_member_boards(store, member, include_closed, filter_name_exact, filter_name_regex)
        _echo_entities(result, as_json)
    except (ValidationError, SessionIOError, ApiError) as e:
        raise _fail('listing boards', e)


@cli.command()
@click.argument('board_id')
@click.pass_context
def board(ctx: click.Context, board_id: str) -> None:
    """Show board details.

    Args:
        board_id: The ID of the board to show.
    """
    try:
        store = _get_store(ctx)
        _echo_json(get_board(store, board_id))
    except (ValidationError, SessionIOError, ApiError) as e:
        raise _fail('showing board', e)


@cli.command()
@click.argument('board_id')
@with_name_filters
@click.pass_context
def lists(
    ctx: click.Context,
    board_id: str,
    include_closed: bool,
    filter_name_exact: str | None,
    filter_name_regex: str | None,
    as_json: bool,
) -> None:
    """List the lists on a board."""
    try:
        store = _get_store(ctx)
        result = get_lists(store, board_id, include_closed, filter_name_exact, filter_name_regex)
        _echo_entities(result, as_json)
    except (ValidationError, SessionIOError, ApiError) as e:
        raise _fail('listing lists', e)


@cli.command()
@click.argument('list_id')
@with_name_filters
@click.pass_context
def cards(
    ctx: click.Context,
    list_id: str,
    include_closed: bool,
    filter_name_exact: str | None,
    filter_name_regex: str | None,
    as_json: bool,
) -> None:
    """List the cards in a list."""
    try:
        store = _get_store(ctx)
        result = get_list_cards(store, list_id, include_closed, filter_name_exact, filter_name_regex)
        _echo_entities(result, as_json)
    except (ValidationError, SessionIOError, ApiError) as e:
        raise _fail('listing cards', e)


@cli.command()
@click.argument('board_id')
@with_name_filters
@click.pass_context
def board_cards(
    ctx: click.Context,
    board_id: str,
    include_closed: bool,
    filter_name_exact: str | None,
    filter_name_regex: str | None,
    as_json: bool,
) -> None:
    """List all cards on a board."""
    try:
        store = _get_store(ctx)
        result = get_board_cards(store, board_id, include_closed, filter_name_exact, filter_name_regex)
        _echo_entities(result, as_json)
    except (ValidationError, SessionIOError, ApiError) as e:
        raise _fail('listing board cards', e)


@cli.command('find-list')
@click.argument('board_id')
@click.argument('list_name')
@click.pass_context
def find_list_cmd(ctx: click.Context, board_id: str, list_name: str) -> None:
    """Find the single open list with an exact name."""
    try:
        store = _get_store(ctx)
        result = find_list(store, board_id, list_name)
    except (ValidationError, SessionIOError, ApiError) as e:
        raise _fail('finding list', e)

    if result is None:
        raise click.ClickException(f"No unique open list named '{list_name}'")
    _echo_json(result)


@cli.command('add-list')
@click.argument('board_id')
@click.argument('name', required=False)
@click.option('--position', default='bottom', show_default=True, help='top, bottom or a positive number')
@click.option('--body', help='Raw JSON body to send instead of NAME and --position')
@click.pass_context
def add_list_cmd(
    ctx: click.Context,
    board_id: str,
    name: str | None,
    position: str,
    body: str | None,
) -> None:
    """Create a list on a board."""
    try:
        store = _get_store(ctx)
        _echo_json(add_list(store, board_id, name, position, body=body))
    except (ValidationError, SessionIOError, ApiError) as e:
        raise _fail('adding list', e)


@cli.command('add-card')
@click.argument('list_id')
@click.argument('name', required=False)
@click.option('--position', default='bottom', show_default=True, help='top, bottom or a positive number')
@click.option('--description', '-d', default='', help='Card description')
@click.option('--body', help='Raw JSON body to send instead of NAME and options')
@click.pass_context
def add_card_cmd(
    ctx: click.Context,
    list_id: str,
    name: str | None,
    position: str,
    description: str,
    body: str | None,
) -> None:
    """Create a card in a list."""
    try:
        store = _get_store(ctx)
        _echo_json(add_card(store, list_id, name, position, description, body=body))
    except (ValidationError, SessionIOError, ApiError) as e:
        raise _fail('adding card', e)


