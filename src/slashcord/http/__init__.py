"""Request execution and the Discord application command API facade."""

from slashcord.http.client import API_BASE_URL, DiscordHttpClient
from slashcord.http.executor import TRANSPORT_ERRORS, RequestExecutor
from slashcord.http.messages import ApiRequest, ApiResponse
from slashcord.http.workers import QueueWorkerPool, WorkerContext

__all__ = [
    "API_BASE_URL",
    "TRANSPORT_ERRORS",
    "ApiRequest",
    "ApiResponse",
    "DiscordHttpClient",
    "QueueWorkerPool",
    "RequestExecutor",
    "WorkerContext",
]
