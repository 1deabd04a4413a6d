"""Async client data layer for the LearnHub API.

Wraps every endpoint, attaches the session token, unwraps the response
envelope, reports outcomes through a notifier and caches query results.
"""

from learnhub.client.cache import QueryCache
from learnhub.client.client import LearnHubClient
from learnhub.client.notifier import LogNotifier, Notifier
from learnhub.client.results import FETCH_ERROR, ApiError, ApiResult


__all__ = [
    "FETCH_ERROR",
    "ApiError",
    "ApiResult",
    "LearnHubClient",
    "LogNotifier",
    "Notifier",
    "QueryCache",
]
