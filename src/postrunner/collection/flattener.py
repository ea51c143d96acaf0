"""
PostRunner Collection Flattener

Walks a nested Postman item tree (folders of requests) and produces a flat,
ordered list of request items, each addressable by a path-derived global id.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


PATH_SEPARATOR = "/"


@dataclass
class RequestItem:
    """A single leaf request from a collection tree."""

    name: str
    full_path: str
    global_id: str
    source: Dict[str, Any] = field(default_factory=dict)

    @property
    def request(self) -> Optional[Dict[str, Any]]:
        """The Postman request definition, if the leaf declares one."""
        request = self.source.get('request')
        return request if isinstance(request, dict) else None

    @property
    def method(self) -> Optional[str]:
        """Method with its original casing."""
        request = self.request or {}
        return request.get('method')

    @property
    def url(self) -> str:
        """Resolved URL string."""
        request = self.request or {}
        return extract_url(request.get('url'))

    @property
    def headers(self) -> List[Dict[str, Any]]:
        """Declared headers as an ordered list of key/value entries."""
        request = self.request or {}
        headers = request.get('header')
        if not isinstance(headers, list):
            return []
        return [h for h in headers if isinstance(h, dict)]

    @property
    def body_raw(self) -> Optional[str]:
        """Raw body string, or None when the request has no raw body."""
        request = self.request or {}
        body = request.get('body')
        if isinstance(body, dict):
            raw = body.get('raw')
            if isinstance(raw, str):
                return raw
        return None

    def is_valid(self) -> bool:
        """Check that the item carries the minimum fields needed to send it."""
        request = self.request
        if not request or not request.get('url'):
            return False
        method = request.get('method')
        return isinstance(method, str) and bool(method)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = copy.deepcopy(self.source)
        data['fullPath'] = self.full_path
        data['globalId'] = self.global_id
        return data


def extract_url(url_data: Any) -> str:
    """
    Extract URL from the Postman formats.

    Args:
        url_data: Either a string, or an object with 'raw' or host/path parts

    Returns:
        URL string ('' when nothing usable is present)
    """
    if isinstance(url_data, str):
        return url_data

    if not isinstance(url_data, dict):
        return ''

    raw = url_data.get('raw')
    if raw:
        return raw

    # Reconstruct from components
    protocol = url_data.get('protocol', 'https')
    host = url_data.get('host', [])
    path = url_data.get('path', [])
    query = url_data.get('query', [])

    url_parts = []

    if host:
        host_str = '.'.join(host) if isinstance(host, list) else str(host)
        url_parts.append(f"{protocol}://{host_str}")

    if path:
        path_str = '/'.join(path) if isinstance(path, list) else str(path)
        if not path_str.startswith('/'):
            path_str = '/' + path_str
        url_parts.append(path_str)

    if query and isinstance(query, list):
        query_params = []
        for param in query:
            if isinstance(param, dict) and not param.get('disabled', False):
                query_params.append(f"{param.get('key', '')}={param.get('value', '')}")
        if query_params:
            url_parts.append('?' + '&'.join(query_params))

    return ''.join(url_parts)


def is_folder(node: Dict[str, Any]) -> bool:
    """A node is a folder when it holds a child item list."""
    return isinstance(node.get('item'), list)


def flatten_items(items: List[Dict[str, Any]], parent_path: str = '') -> List[RequestItem]:
    """
    Flatten a nested item tree into its ordered leaf requests.

    Each node's path segment is its name, or "Item N" (1-based position among
    its siblings) when unnamed. Folders are expanded in place, so the output is
    the pre-order leaf sequence. Names are not escaped: a name containing the
    separator reads like a folder boundary.

    Args:
        items: Child nodes of a collection or folder
        parent_path: Path of the enclosing folder ('' at the root)

    Returns:
        List of RequestItem objects, independent of the input tree
    """
    flat_items: List[RequestItem] = []

    for index, node in enumerate(items, 1):
        if not isinstance(node, dict):
            continue

        current_path = f"{parent_path}{PATH_SEPARATOR}{node.get('name') or f'Item {index}'}"

        if is_folder(node):
            flat_items.extend(flatten_items(node['item'], current_path))
        else:
            flat_items.append(RequestItem(
                name=node.get('name') or f"Item {index}",
                full_path=current_path,
                global_id=f"{parent_path}{PATH_SEPARATOR}{node.get('name') or f'Item {index}'}",
                source=copy.deepcopy(node)
            ))

    return flat_items
