"""
PostRunner HTTP Server

FastAPI application exposing collection upload, token update and request
execution over HTTP.

Routes:
- POST   /upload            Upload collection JSON files (replaces all)
- POST   /update-token      Set a collection's bearer token
- POST   /execute-request   Execute one request by collection id + global id
- POST   /execute           Execute whole collections sequentially
- GET    /collections       List registered collections
- GET    /collections/{id}  Read back one collection
- DELETE /collections       Reset the store
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, File, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.concurrency import run_in_threadpool
import uvicorn

from ..collection.loader import CollectionLoader
from ..collection.store import CollectionStore
from ..common.errors import (
    CollectionNotFoundError,
    IngestError,
    InvalidCollectionError,
    RequestNotFoundError,
)
from ..config import RunnerConfig
from ..runner.batch import BatchRunner, BatchTarget
from ..runner.executor import INVALID_REQUEST, INVALID_REQUEST_MESSAGE, RequestExecutor


JSON_CONTENT_TYPES = ('application/json',)


def _message(message: str, status_code: int, **extra) -> JSONResponse:
    return JSONResponse(content={'message': message, **extra}, status_code=status_code)


async def _read_json(request: Request) -> Optional[Dict[str, Any]]:
    try:
        body = await request.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def _collection_id(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class RunnerServer:
    """
    HTTP front end for the collection store and batch runner.

    One store instance is owned by the server and shared by every route.

    Example:
        server = RunnerServer(config=RunnerConfig(port=5000))
        server.start()

        # In tests
        client = TestClient(RunnerServer().get_app())
    """

    def __init__(
        self,
        config: Optional[RunnerConfig] = None,
        store: Optional[CollectionStore] = None,
        runner: Optional[BatchRunner] = None
    ):
        """
        Initialize server.

        Args:
            config: Optional RunnerConfig
            store: Optional CollectionStore (will create if None)
            runner: Optional BatchRunner (will create if None)
        """
        self.config = config or RunnerConfig()
        self.store = store if store is not None else CollectionStore()
        self.runner = runner if runner is not None else BatchRunner(
            self.store,
            executor=RequestExecutor(
                verify_ssl=self.config.verify_ssl,
                substitute_variables=self.config.substitute_variables
            ),
            request_timeout=self.config.request_timeout,
            bulk_timeout=self.config.bulk_timeout
        )

        self.logger = logging.getLogger("postrunner.server")
        self.logger.setLevel(getattr(logging, self.config.log_level.upper()))

        self.app = self._create_app()

    def _create_app(self) -> FastAPI:
        """Create FastAPI application with routes."""
        app = FastAPI(
            title="PostRunner",
            description="Upload API collections and replay their requests",
            version="1.0.0"
        )

        app.add_middleware(
            CORSMiddleware,
            allow_origins=self.config.cors_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        @app.post("/upload")
        async def upload(collections: List[UploadFile] = File(...)):
            """Upload collection files, replacing everything registered before."""
            documents = []

            for upload_file in collections:
                content_type = (upload_file.content_type or '').split(';')[0].strip()
                if content_type not in JSON_CONTENT_TYPES:
                    return _message("Only JSON files are allowed!", 400)

                content = await upload_file.read()
                if len(content) > self.config.max_upload_bytes:
                    return _message(f"File too large: {upload_file.filename}", 413)

                try:
                    documents.append(CollectionLoader.parse(content, source=upload_file.filename))
                except IngestError as e:
                    self.logger.error(f"Error processing upload: {e}")
                    return _message("Internal Server Error", 500, error=str(e))

            try:
                registered = self.store.register_batch(documents)
            except IngestError as e:
                self.logger.error(f"Error processing upload: {e}")
                return _message("Internal Server Error", 500, error=str(e))

            return JSONResponse(content={
                'message': 'Collections uploaded successfully',
                'collections': [c.to_dict() for c in registered]
            })

        @app.post("/update-token")
        async def update_token(request: Request):
            """Set the bearer token for one collection."""
            body = await _read_json(request)
            if body is None:
                return _message("Invalid request body", 400)

            token = body.get('token') or ''
            if not isinstance(token, str):
                return _message("Token must be a string", 400)

            collection_id = _collection_id(body.get('collectionId'))
            try:
                self.store.update_token(collection_id, token)
            except CollectionNotFoundError:
                return _message("Collection not found", 404)

            return JSONResponse(content={'message': 'Token updated successfully'})

        @app.post("/execute-request")
        async def execute_request(request: Request):
            """Execute one request by collection id and global id."""
            body = await _read_json(request)
            if body is None:
                return _message("Invalid request body", 400)

            collection_id = _collection_id(body.get('collectionId'))
            global_id = body.get('globalId')

            try:
                record = await run_in_threadpool(self.runner.run_single, collection_id, global_id)
            except CollectionNotFoundError:
                return _message("Collection not found", 404)
            except InvalidCollectionError:
                return _message("Invalid collection structure", 400)
            except RequestNotFoundError:
                return _message("API request not found", 404)

            if record.outcome == INVALID_REQUEST:
                return _message(INVALID_REQUEST_MESSAGE, 400)

            return JSONResponse(content=record.to_dict())

        @app.post("/execute")
        async def execute_all(request: Request):
            """Execute whole collections (or selected requests) sequentially."""
            body = await _read_json(request)
            if body is None or not isinstance(body.get('collections'), list):
                return _message("Expected a 'collections' list", 400)

            targets = []
            for entry in body['collections']:
                if not isinstance(entry, dict):
                    return _message("Each collection entry must be an object", 400)
                global_ids = entry.get('globalIds')
                targets.append(BatchTarget(
                    collection_id=_collection_id(entry.get('id')),
                    global_ids=list(global_ids) if isinstance(global_ids, list) else None
                ))

            try:
                records = await run_in_threadpool(self.runner.run_batch, targets)
            except CollectionNotFoundError as e:
                return _message("Collection not found", 404, collectionId=e.collection_id)

            return JSONResponse(content={'responses': [r.to_dict() for r in records]})

        @app.get("/collections")
        async def list_collections():
            """List registered collections."""
            collections = self.store.all()
            return JSONResponse(content={
                'total': len(collections),
                'collections': [c.to_dict() for c in collections]
            })

        @app.get("/collections/{collection_id}")
        async def get_collection(collection_id: int):
            """Read back one registered collection."""
            collection = self.store.find(collection_id)
            if collection is None:
                return _message("Collection not found", 404)
            return JSONResponse(content=collection.to_dict())

        @app.delete("/collections")
        async def reset_collections():
            """Drop every registered collection."""
            count = len(self.store)
            self.store.reset()
            return JSONResponse(content={'status': 'cleared', 'cleared_count': count})

        return app

    def start(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        access_log: bool = True
    ):
        """
        Start the server (blocking).

        Args:
            host: Host to bind to (overrides config)
            port: Port to bind to (overrides config)
            access_log: Enable access logging
        """
        actual_host = host or self.config.host
        actual_port = port or self.config.port

        self.logger.info(f"PostRunner listening on http://{actual_host}:{actual_port}")

        uvicorn.run(
            self.app,
            host=actual_host,
            port=actual_port,
            log_level=self.config.log_level,
            access_log=access_log
        )

    def get_app(self) -> FastAPI:
        """
        Get the FastAPI app instance for testing or custom deployment.

        Returns:
            FastAPI application instance
        """
        return self.app


def create_app(config: Optional[RunnerConfig] = None) -> FastAPI:
    """Build a fresh application with its own store."""
    return RunnerServer(config=config).get_app()
