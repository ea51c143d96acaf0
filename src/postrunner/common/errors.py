"""
PostRunner Errors

Exception types raised at the store and runner boundaries.

Per-request failures (transport errors, malformed request items) are never
raised; they are folded into a ResponseRecord by the executor.
"""

from typing import Optional


class PostRunnerError(Exception):
    """Base class for all PostRunner errors."""


class IngestError(PostRunnerError):
    """A collection document in an upload batch could not be read."""

    def __init__(self, message: str, source: Optional[str] = None):
        self.source = source
        if source:
            message = f"{source}: {message}"
        super().__init__(message)


class CollectionNotFoundError(PostRunnerError):
    """No collection is registered under the given id."""

    def __init__(self, collection_id: int):
        self.collection_id = collection_id
        super().__init__(f"Collection not found: {collection_id}")


class RequestNotFoundError(PostRunnerError):
    """No request item in the collection carries the given global id."""

    def __init__(self, collection_id: int, global_id: str):
        self.collection_id = collection_id
        self.global_id = global_id
        super().__init__(f"API request not found: {global_id} (collection {collection_id})")


class InvalidCollectionError(PostRunnerError):
    """The collection was registered without an item tree."""

    def __init__(self, collection_id: int):
        self.collection_id = collection_id
        super().__init__(f"Invalid collection structure: {collection_id}")
