"""
PostRunner Request Executor

Sends one flattened collection request to its live endpoint and folds every
outcome (success, error response, transport failure, malformed item) into a
single ResponseRecord shape.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Union

import requests
from requests.adapters import HTTPAdapter

from ..collection.flattener import RequestItem
from ..collection.store import DEFAULT_COLLECTION_NAME
from ..common.utils import safe_json_parse
from .variables import VariableSubstitutor


DEFAULT_TIMEOUT = 30
ERROR_STATUS = "Error"
INVALID_REQUEST_MESSAGE = "Invalid API request structure"
BODY_METHODS = ('post', 'put', 'patch', 'delete')

# Outcome tags
SUCCESS = "success"
HTTP_ERROR = "http_error"
TRANSPORT_ERROR = "transport_error"
INVALID_REQUEST = "invalid_request"

_NOT_JSON = object()

logger = logging.getLogger("postrunner.executor")


@dataclass
class ResponseRecord:
    """Result of executing a single request item."""

    collection_name: str
    api_name: str
    method: Optional[str]
    url: str
    status: Union[int, str]
    data: Any
    outcome: str = SUCCESS  # success, http_error, transport_error, invalid_request
    duration_ms: float = 0.0
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def ok(self) -> bool:
        """True for a 2xx response."""
        return self.outcome == SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'collectionName': self.collection_name,
            'apiName': self.api_name,
            'method': self.method,
            'url': self.url,
            'status': self.status,
            'data': self.data,
            'outcome': self.outcome,
            'durationMs': round(self.duration_ms, 2),
            'timestamp': self.timestamp,
        }


class RequestExecutor:
    """
    Execute flattened collection requests over HTTP.

    Features:
    - Declared headers applied in order (later duplicates win)
    - Bearer token override of the Authorization header
    - JSON body detection for POST/PUT/PATCH/DELETE, raw fallback
    - Collection variable substitution ({{name}})
    - No retries: each request is sent exactly once

    Example:
        executor = RequestExecutor()
        record = executor.execute(item, token='abc', collection_name='Users API')
        print(record.status, record.data)
    """

    def __init__(
        self,
        verify_ssl: bool = True,
        substitute_variables: bool = True,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize Request Executor.

        Args:
            verify_ssl: Whether to verify SSL certificates
            substitute_variables: Apply collection variables before sending
            session: Optional HTTP session (will create if None)
        """
        self.verify_ssl = verify_ssl
        self.substitute_variables = substitute_variables
        self.session = session if session is not None else self._create_session()

    def _create_session(self) -> requests.Session:
        """Create HTTP session without retry behaviour."""
        session = requests.Session()

        adapter = HTTPAdapter(max_retries=0)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        return session

    def build_headers(self, item: RequestItem, token: str = '') -> Dict[str, str]:
        """
        Build the outgoing header map for an item.

        Args:
            item: Flattened request item
            token: Collection bearer token ('' leaves Authorization alone)

        Returns:
            Header dictionary
        """
        headers: Dict[str, str] = {}

        for header in item.headers:
            key = header.get('key')
            if key is None or key == '':
                continue
            value = header.get('value')
            headers[str(key)] = '' if value is None else str(value)

        if token:
            headers = {k: v for k, v in headers.items() if k.lower() != 'authorization'}
            headers['Authorization'] = f"Bearer {token}"

        return headers

    def build_request(
        self,
        item: RequestItem,
        token: str = '',
        variables: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """
        Translate an item into keyword arguments for the HTTP session.

        Args:
            item: Flattened request item (must be valid)
            token: Collection bearer token
            variables: Collection variables for {{name}} substitution

        Returns:
            Dict with method, url, headers and optionally json or data
        """
        substitutor = VariableSubstitutor(variables if self.substitute_variables else None)

        method = item.method.lower()
        request_kwargs: Dict[str, Any] = {
            'method': method,
            'url': substitutor.substitute(item.url),
            'headers': substitutor.substitute_headers(self.build_headers(item, token)),
        }

        # GET/HEAD and friends never carry a body
        if method in BODY_METHODS and item.body_raw:
            raw = substitutor.substitute(item.body_raw)
            parsed = safe_json_parse(raw, default=_NOT_JSON)
            if parsed is _NOT_JSON:
                request_kwargs['data'] = raw.encode('utf-8')
            else:
                request_kwargs['json'] = parsed

        return request_kwargs

    @staticmethod
    def _parse_response_body(response: requests.Response) -> Any:
        """Decode a response body as JSON when possible, text otherwise."""
        try:
            return response.json()
        except ValueError:
            return response.text

    def execute(
        self,
        item: RequestItem,
        token: str = '',
        collection_name: str = DEFAULT_COLLECTION_NAME,
        variables: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = DEFAULT_TIMEOUT
    ) -> ResponseRecord:
        """
        Execute a single request item. Never raises.

        Args:
            item: Flattened request item
            token: Collection bearer token
            collection_name: Display name reported in the record
            variables: Collection variables for {{name}} substitution
            timeout: Request timeout in seconds (None waits indefinitely)

        Returns:
            ResponseRecord with the remote status/body or an error marker
        """
        if not item.is_valid():
            logger.warning(f"Skipping malformed request '{item.global_id}' in '{collection_name}'")
            return ResponseRecord(
                collection_name=collection_name,
                api_name=item.name,
                method=item.method,
                url=item.url,
                status=ERROR_STATUS,
                data=INVALID_REQUEST_MESSAGE,
                outcome=INVALID_REQUEST
            )

        url = item.url
        start_time = time.time()

        try:
            request_kwargs = self.build_request(item, token, variables)
            url = request_kwargs['url']

            logger.debug(f"Sending {item.method} {url} ({item.global_id})")
            response = self.session.request(
                timeout=timeout,
                verify=self.verify_ssl,
                **request_kwargs
            )
            duration_ms = (time.time() - start_time) * 1000

            status = response.status_code
            outcome = SUCCESS if 200 <= status < 300 else HTTP_ERROR
            if outcome == HTTP_ERROR:
                logger.warning(f"{item.method} {url} returned {status}")

            return ResponseRecord(
                collection_name=collection_name,
                api_name=item.name,
                method=item.method,
                url=url,
                status=status,
                data=self._parse_response_body(response),
                outcome=outcome,
                duration_ms=duration_ms
            )

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.warning(f"{item.method} {url} failed: {e}")

            return ResponseRecord(
                collection_name=collection_name,
                api_name=item.name,
                method=item.method,
                url=url,
                status=ERROR_STATUS,
                data=str(e),
                outcome=TRANSPORT_ERROR,
                duration_ms=duration_ms
            )
