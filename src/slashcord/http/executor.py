from __future__ import annotations

import asyncio
import logging
from typing import Collection, Optional

import aiohttp
from multidict import CIMultiDict, CIMultiDictProxy

from slashcord.errors import DiscordApiException
from slashcord.http.messages import ApiRequest, ApiResponse
from slashcord.http.workers import QueueWorkerPool, WorkerContext

logger = logging.getLogger(__name__)

# Failures before any response arrived. These reach callers unwrapped.
TRANSPORT_ERRORS: tuple[type[BaseException], ...] = (
    aiohttp.ClientError,
    asyncio.TimeoutError,
)


class RequestExecutor:
    """
    Runs one HTTP attempt per request on the worker context and classifies the result.

    A response whose status is in the expected set resolves the future; any other status
    resolves it with ``DiscordApiException``. There is no retry, backoff or rate-limit
    handling here.
    """

    def __init__(
        self,
        *,
        workers: Optional[WorkerContext] = None,
        session: Optional[aiohttp.ClientSession] = None,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        self._workers: WorkerContext = workers if workers is not None else QueueWorkerPool()
        self._session = session
        self._owns_session = session is None
        self._timeout_seconds = timeout_seconds

    @property
    def workers(self) -> WorkerContext:
        return self._workers

    def execute(self, request: ApiRequest, expected_codes: Collection[int]) -> asyncio.Future[ApiResponse]:
        expected = frozenset(expected_codes)
        if not expected:
            raise ValueError("expected_codes must not be empty")
        return self._workers.submit(lambda: self._perform(request, expected))

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            if self._timeout_seconds is None:
                self._session = aiohttp.ClientSession()
            else:
                self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self._timeout_seconds))
        return self._session

    async def _perform(self, request: ApiRequest, expected: frozenset[int]) -> ApiResponse:
        session = self._ensure_session()
        logger.debug("discord.http_request %s", request.describe())
        async with session.request(
            request.method,
            request.url,
            headers=dict(request.headers),
            data=request.body,
        ) as resp:
            body = await resp.read()
            response = ApiResponse(
                status=resp.status,
                reason=resp.reason,
                headers=CIMultiDictProxy(CIMultiDict(resp.headers)),
                body=body,
            )
        logger.debug("discord.http_response %s status=%s bytes=%d", request.describe(), response.status, len(body))

        if response.status not in expected:
            raise DiscordApiException(expected, request, response)
        return response

    async def close(self, *, wait: bool = True) -> None:
        await self._workers.shutdown(wait=wait)
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
