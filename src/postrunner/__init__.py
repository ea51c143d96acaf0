"""
PostRunner

Upload exported API collections, flatten their folders into addressable
requests, manage a bearer token per collection and replay the requests
against their live endpoints.
"""

from .collection import CollectionStore, CollectionLoader, flatten_items
from .runner import BatchRunner, BatchTarget, RequestExecutor, ResponseRecord
from .config import RunnerConfig

__all__ = [
    'CollectionStore',
    'CollectionLoader',
    'flatten_items',
    'BatchRunner',
    'BatchTarget',
    'RequestExecutor',
    'ResponseRecord',
    'RunnerConfig',
]

__version__ = '1.0.0'
