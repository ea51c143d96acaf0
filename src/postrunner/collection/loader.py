"""
PostRunner Collection Loader

Turns exported collection files (or uploaded file contents) into parsed
documents for the collection store.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Union

from ..common.errors import IngestError


class CollectionLoader:
    """
    Loader for Postman collection exports.

    A document must be a JSON object. The store decides whether it carries an
    item tree; the loader only guarantees it parsed.

    Example:
        documents = CollectionLoader.load_files(["users.json", "orders.json"])
        collections = store.register_batch(documents)
    """

    def __init__(self, file_path: Union[str, Path]):
        """
        Initialize collection loader.

        Args:
            file_path: Path to a collection JSON file
        """
        self.file_path = Path(file_path)

    def load(self) -> Dict[str, Any]:
        """
        Load one collection document.

        Raises:
            IngestError: If the file is missing, unreadable or not a JSON object
        """
        if not self.file_path.exists():
            raise IngestError("Collection file not found", source=str(self.file_path))

        try:
            content = self.file_path.read_bytes()
        except OSError as e:
            raise IngestError(f"Could not read file: {e}", source=str(self.file_path)) from e

        return self.parse(content, source=str(self.file_path))

    @staticmethod
    def parse(content: Union[str, bytes], source: str = '<upload>') -> Dict[str, Any]:
        """
        Parse raw collection content.

        Args:
            content: JSON text or bytes
            source: Name used in error messages

        Returns:
            Parsed collection document
        """
        try:
            document = json.loads(content)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise IngestError(f"Invalid JSON: {e}", source=source) from e

        if not isinstance(document, dict):
            raise IngestError(
                f"Expected a JSON object, got {type(document).__name__}",
                source=source
            )

        return document

    @staticmethod
    def load_files(file_paths: List[Union[str, Path]]) -> List[Dict[str, Any]]:
        """
        Load several collection files; any failure aborts the whole batch.

        Example:
            documents = CollectionLoader.load_files(["a.json", "b.json"])
        """
        return [CollectionLoader(path).load() for path in file_paths]
