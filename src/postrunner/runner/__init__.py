"""
PostRunner Runner Module

Request execution against live endpoints.

This module provides:
- Single request execution with uniform success/failure records
- Sequential batch execution across collections
- Collection variable substitution
"""

from .executor import RequestExecutor, ResponseRecord, ERROR_STATUS
from .batch import BatchRunner, BatchTarget, BatchSummary
from .variables import VariableSubstitutor

__all__ = [
    'RequestExecutor',
    'ResponseRecord',
    'ERROR_STATUS',
    'BatchRunner',
    'BatchTarget',
    'BatchSummary',
    'VariableSubstitutor',
]
