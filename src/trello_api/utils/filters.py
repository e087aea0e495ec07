"""Client-side filtering of Trello boards, lists and cards."""

import re
from typing import Any

from trello_api.utils.session import ValidationError


def compile_name_pattern(pattern: str | re.Pattern[str] | None) -> re.Pattern[str] | None:
    """Compile a name filter pattern.

    Raises:
        ValidationError: If the pattern is not a valid regular expression.
    """
    if pattern is None or isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ValidationError(f"Invalid name pattern {pattern!r}: {e}") from e


def filter_entities(
    entities: list[dict[str, Any]],
    include_closed: bool = False,
    filter_name_exact: str | None = None,
    filter_name_regex: str | re.Pattern[str] | None = None,
) -> list[dict[str, Any]]:
    """Filter entities by closed status and name.

    Args:
        entities: Entities as returned by the API.
        include_closed: Keep entities with ``closed`` set.
        filter_name_exact: Keep only the first entity with exactly this name.
        filter_name_regex: Keep only the first entity whose name matches this
            pattern, given as a string or a compiled pattern.

    Returns:
        The filtered entities. A name filter yields at most one entity.

    Raises:
        ValidationError: If both name filters are given or the pattern is invalid.
    """
    if filter_name_exact is not None and filter_name_regex is not None:
        raise ValidationError(
            "filter_name_exact and filter_name_regex cannot be used together"
        )
    pattern = compile_name_pattern(filter_name_regex)

    result = list(entities)

    if not include_closed:
        result = [entity for entity in result if not entity.get('closed', False)]

    if filter_name_exact is not None:
        result = [entity for entity in result if entity.get('name') == filter_name_exact]
        return result[:1]

    if pattern is not None:
        result = [
            entity for entity in result
            if isinstance(entity.get('name'), str) and pattern.search(entity['name'])
        ]
        return result[:1]

    return result
