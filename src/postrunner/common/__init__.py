"""
PostRunner Common Utilities

Shared errors and helpers used across PostRunner modules.
"""

from .errors import (
    PostRunnerError,
    IngestError,
    CollectionNotFoundError,
    RequestNotFoundError,
    InvalidCollectionError,
)
from .utils import safe_json_parse, setup_logging

__all__ = [
    'PostRunnerError',
    'IngestError',
    'CollectionNotFoundError',
    'RequestNotFoundError',
    'InvalidCollectionError',
    'safe_json_parse',
    'setup_logging',
]
