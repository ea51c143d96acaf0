"""
PostRunner Bearer Token Handling

Reads and rewrites bearer-auth declarations on flattened request items.

Postman exports carry bearer auth in two shapes:
- v2.0: {"type": "bearer", "bearer": {"token": "..."}}
- v2.1: {"type": "bearer", "bearer": [{"key": "token", "value": "..."}]}
"""

from typing import Any, Iterable, Optional

from .flattener import RequestItem


def _bearer_block(item: RequestItem) -> Optional[Any]:
    request = item.request
    if not request:
        return None
    auth = request.get('auth')
    if not isinstance(auth, dict):
        return None
    bearer = auth.get('bearer')
    if isinstance(bearer, (dict, list)):
        return bearer
    return None


def has_bearer_auth(item: RequestItem) -> bool:
    """Check whether the item's request declares a bearer-auth structure."""
    return _bearer_block(item) is not None


def get_bearer_token(item: RequestItem) -> Optional[str]:
    """
    Read the bearer token declared on an item.

    Returns:
        Token string ('' when the structure has no value), or None when the
        item declares no bearer auth at all
    """
    bearer = _bearer_block(item)
    if bearer is None:
        return None

    if isinstance(bearer, dict):
        return bearer.get('token') or ''

    for entry in bearer:
        if isinstance(entry, dict) and entry.get('key') == 'token':
            return entry.get('value') or ''
    return ''


def set_bearer_token(item: RequestItem, token: str) -> bool:
    """
    Overwrite the bearer token on an item that already declares bearer auth.

    Items without a bearer structure are left untouched.

    Returns:
        True if the item was updated
    """
    bearer = _bearer_block(item)
    if bearer is None:
        return False

    if isinstance(bearer, dict):
        bearer['token'] = token
        return True

    for entry in bearer:
        if isinstance(entry, dict) and entry.get('key') == 'token':
            entry['value'] = token
            return True

    bearer.append({'key': 'token', 'value': token, 'type': 'string'})
    return True


def resolve_initial_token(items: Iterable[RequestItem]) -> str:
    """
    Find the collection token from its flattened items.

    The last item declaring bearer auth wins.
    """
    token = ''
    for item in items:
        declared = get_bearer_token(item)
        if declared is not None:
            token = declared
    return token


def inject_token(items: Iterable[RequestItem], token: str) -> int:
    """
    Rewrite the bearer token on every item that declares bearer auth.

    Returns:
        Number of items updated
    """
    return sum(1 for item in items if set_bearer_token(item, token))
