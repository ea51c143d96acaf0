"""
PostRunner Common Utilities

Shared helpers used across PostRunner modules.
"""

import json
import logging
from typing import Any, Optional


LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def safe_json_parse(json_string: Optional[str], default: Any = None) -> Any:
    """
    Safely parse JSON string with error handling.

    Args:
        json_string: JSON string to parse
        default: Default value to return if parsing fails

    Returns:
        Parsed JSON object, or default if parsing fails

    Example:
        body = safe_json_parse(item.body_raw, default=item.body_raw)
    """
    if not json_string:
        return default

    try:
        return json.loads(json_string)
    except (json.JSONDecodeError, TypeError, ValueError):
        return default


def setup_logging(level: str = "info") -> None:
    """
    Configure the root handler for command-line use.

    Args:
        level: Logging level name (debug, info, warning, error)
    """
    logging.basicConfig(format=LOG_FORMAT, level=getattr(logging, level.upper(), logging.INFO))
    logging.getLogger("postrunner").setLevel(getattr(logging, level.upper(), logging.INFO))
