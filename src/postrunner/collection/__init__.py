"""
PostRunner Collection Module

Loading, flattening and registering exported API collections.

This module provides:
- Nested folder flattening with path-derived global ids
- In-memory collection store with replace-on-upload semantics
- Bearer token resolution and injection
"""

from .flattener import RequestItem, flatten_items, extract_url
from .loader import CollectionLoader
from .store import Collection, CollectionStore
from .tokens import resolve_initial_token, inject_token, get_bearer_token, has_bearer_auth

__all__ = [
    'RequestItem',
    'flatten_items',
    'extract_url',
    'CollectionLoader',
    'Collection',
    'CollectionStore',
    'resolve_initial_token',
    'inject_token',
    'get_bearer_token',
    'has_bearer_auth',
]
