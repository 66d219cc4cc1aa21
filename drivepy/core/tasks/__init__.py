"""Monitoring of server-side long-running operations."""
from .models import AsyncJobStatus, AsyncTaskStatus, AsyncTask
from .monitor import AsyncTaskMonitor

__all__ = [
    'AsyncJobStatus',
    'AsyncTaskStatus',
    'AsyncTask',
    'AsyncTaskMonitor',
]
