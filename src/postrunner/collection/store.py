"""
PostRunner Collection Store

In-memory registry of uploaded collections, their flattened requests and the
bearer token currently applied to each.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..common.errors import CollectionNotFoundError, IngestError
from .flattener import RequestItem, flatten_items, is_folder
from .tokens import inject_token, resolve_initial_token


DEFAULT_COLLECTION_NAME = "Unnamed Collection"

logger = logging.getLogger("postrunner.store")


@dataclass
class Collection:
    """One uploaded collection."""

    id: int
    name: str
    token: str = ''
    document: Dict[str, Any] = field(default_factory=dict)
    items: Optional[List[RequestItem]] = None
    variables: Dict[str, str] = field(default_factory=dict)

    @property
    def has_items(self) -> bool:
        """False for documents registered without an item tree."""
        return self.items is not None

    def find_item(self, global_id: str) -> Optional[RequestItem]:
        """Look up a request item by its global id."""
        for item in self.items or []:
            if item.global_id == global_id:
                return item
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        collection = copy.deepcopy(self.document)
        if self.items is not None:
            collection['item'] = [item.to_dict() for item in self.items]
        return {
            'id': self.id,
            'name': self.name,
            'token': self.token,
            'collection': collection,
        }


def collection_name(document: Dict[str, Any]) -> str:
    """Display name from the document's info block."""
    info = document.get('info')
    if isinstance(info, dict) and info.get('name'):
        return info['name']
    return DEFAULT_COLLECTION_NAME


def collection_variables(document: Dict[str, Any]) -> Dict[str, str]:
    """Collection-level variables as a name -> value mapping."""
    variables = {}
    declared = document.get('variable')
    if not isinstance(declared, list):
        return variables
    for var in declared:
        if isinstance(var, dict) and var.get('key'):
            value = var.get('value')
            variables[str(var['key'])] = '' if value is None else str(value)
    return variables


class CollectionStore:
    """
    Process-wide collection registry.

    Every upload replaces the whole registry; ids restart from 1 for each
    batch. The new registry is built aside and swapped in with a single
    assignment, so readers see either the old or the new state.

    Example:
        store = CollectionStore()
        collections = store.register_batch([document])
        store.update_token(collections[0].id, "new-token")
    """

    def __init__(self):
        self._collections: Dict[int, Collection] = {}

    def __len__(self) -> int:
        return len(self._collections)

    def _build_collection(self, collection_id: int, document: Any, source: str) -> Collection:
        if not isinstance(document, dict):
            raise IngestError(
                f"Expected a collection object, got {type(document).__name__}",
                source=source
            )

        name = collection_name(document)
        variables = collection_variables(document)

        if not is_folder(document):
            return Collection(
                id=collection_id,
                name=name,
                document=copy.deepcopy(document),
                variables=variables
            )

        items = flatten_items(document['item'])
        shell = {k: copy.deepcopy(v) for k, v in document.items() if k != 'item'}

        return Collection(
            id=collection_id,
            name=name,
            token=resolve_initial_token(items),
            document=shell,
            items=items,
            variables=variables
        )

    def register_batch(self, documents: List[Any]) -> List[Collection]:
        """
        Replace the registry with a new batch of collection documents.

        Args:
            documents: Parsed collection documents, in upload order

        Returns:
            Registered collections, ids assigned 1..N

        Raises:
            IngestError: If any document is unusable; the registry is unchanged
        """
        collections: Dict[int, Collection] = {}

        for index, document in enumerate(documents, 1):
            collection = self._build_collection(index, document, source=f"document {index}")
            collections[collection.id] = collection
            logger.debug(
                f"Flattened collection {collection.id} '{collection.name}': "
                f"{len(collection.items or [])} requests"
            )

        self._collections = collections
        logger.info(f"Registered {len(collections)} collections")
        return list(collections.values())

    def find(self, collection_id: int) -> Optional[Collection]:
        """Look up a collection by id."""
        return self._collections.get(collection_id)

    def get(self, collection_id: int) -> Collection:
        """
        Look up a collection by id.

        Raises:
            CollectionNotFoundError: If no collection has that id
        """
        collection = self.find(collection_id)
        if collection is None:
            raise CollectionNotFoundError(collection_id)
        return collection

    def all(self) -> List[Collection]:
        """All registered collections in id order."""
        return list(self._collections.values())

    def update_token(self, collection_id: int, token: str) -> Collection:
        """
        Set the collection token and rewrite it on items declaring bearer auth.

        Raises:
            CollectionNotFoundError: If no collection has that id
        """
        collection = self.get(collection_id)
        collection.token = token
        updated = inject_token(collection.items or [], token)
        logger.info(f"Updated token for collection {collection_id} ({updated} requests rewritten)")
        return collection

    def reset(self):
        """Drop every registered collection."""
        self._collections = {}
        logger.info("Collection store reset")
