"""
PostRunner Server Module

FastAPI front end for uploading collections and executing their requests.
"""

from .app import RunnerServer, create_app

__all__ = [
    'RunnerServer',
    'create_app',
]
