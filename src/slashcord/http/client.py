from __future__ import annotations

import asyncio
import logging
from typing import Any, Collection, Optional, Union
from urllib.parse import quote

import aiohttp

from slashcord import __version__
from slashcord.codec import WireCodec, build_codec
from slashcord.config.models import DiscordSettings
from slashcord.core.models import ApplicationCommand, Interaction, InteractionResponse
from slashcord.http.executor import RequestExecutor
from slashcord.http.messages import ApiRequest, ApiResponse
from slashcord.http.workers import QueueWorkerPool, WorkerContext

logger = logging.getLogger(__name__)

API_BASE_URL = "https://discord.com/api/v8"
JSON_CONTENT_TYPE = "application/json; charset=utf-8"
USER_AGENT = f"DiscordBot (slashcord, {__version__})"

Snowflake = Union[int, str]

_READ = frozenset({200})
_CREATE = frozenset({200, 201})
_DELETE = frozenset({204})
_REPLY = frozenset({200, 204})


class DiscordHttpClient:
    """
    Application command and interaction reply endpoints of the Discord REST API.

    Every operation returns immediately with an ``asyncio.Future`` for the raw response;
    the call itself runs on the worker context. Operations must be called from a running
    event loop. Encoding problems raise ``EncodingError`` right away, before anything is
    queued.
    """

    def __init__(
        self,
        bot_token: str,
        application_id: Snowflake,
        *,
        workers: Optional[WorkerContext] = None,
        session: Optional[aiohttp.ClientSession] = None,
        codec: Optional[WireCodec] = None,
        base_url: str = API_BASE_URL,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        self._bot_token = bot_token
        self._application_id = str(application_id)
        self._base_url = base_url.rstrip("/")
        self._codec = codec if codec is not None else build_codec()
        self._executor = RequestExecutor(workers=workers, session=session, timeout_seconds=timeout_seconds)

    @classmethod
    def from_settings(
        cls,
        settings: DiscordSettings,
        *,
        workers: Optional[WorkerContext] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> DiscordHttpClient:
        return cls(
            settings.token,
            settings.application_id,
            workers=workers if workers is not None else QueueWorkerPool(settings.workers),
            session=session,
            codec=build_codec(default_colour=settings.default_embed_colour, pretty=settings.pretty_json),
            base_url=settings.api_base_url,
            timeout_seconds=settings.request_timeout_seconds,
        )

    @property
    def codec(self) -> WireCodec:
        return self._codec

    @property
    def application_id(self) -> str:
        return self._application_id

    def _url(self, template: str, **params: Any) -> str:
        path = template.format(**{k: quote(str(v), safe="") for k, v in params.items()})
        return f"{self._base_url}{path}"

    def _headers(self, *, authenticated: bool = True, json_body: bool = False) -> dict[str, str]:
        headers = {"User-Agent": USER_AGENT}
        if authenticated:
            headers["Authorization"] = f"Bot {self._bot_token}"
        if json_body:
            headers["Content-Type"] = JSON_CONTENT_TYPE
        return headers

    def _body(self, value: Any) -> bytes:
        body = self._codec.dumps(value)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("discord.request_body type=%s\n%s", type(value).__name__, self._codec.pretty(value))
        return body.encode("utf-8")

    def _send(
        self,
        method: str,
        url: str,
        expected: Collection[int],
        *,
        body: Optional[bytes] = None,
        authenticated: bool = True,
    ) -> asyncio.Future[ApiResponse]:
        request = ApiRequest(
            method=method,
            url=url,
            headers=self._headers(authenticated=authenticated, json_body=body is not None),
            body=body,
        )
        return self._executor.execute(request, expected)

    def submit_interaction_reply(
        self, interaction: Interaction, response: InteractionResponse
    ) -> asyncio.Future[ApiResponse]:
        # The interaction token in the URL is the credential; the bot token is not sent.
        body = self._body(response)
        url = self._url("/interactions/{id}/{token}/callback", id=interaction.id, token=interaction.token)
        return self._send("POST", url, _REPLY, body=body, authenticated=False)

    def submit_global_command(self, command: ApplicationCommand) -> asyncio.Future[ApiResponse]:
        body = self._body(command)
        url = self._url("/applications/{app}/commands", app=self._application_id)
        return self._send("POST", url, _CREATE, body=body)

    def delete_global_command(self, command_id: Snowflake) -> asyncio.Future[ApiResponse]:
        url = self._url("/applications/{app}/commands/{cmd}", app=self._application_id, cmd=command_id)
        return self._send("DELETE", url, _DELETE)

    def submit_guild_command(self, command: ApplicationCommand, guild_id: Snowflake) -> asyncio.Future[ApiResponse]:
        body = self._body(command)
        url = self._url("/applications/{app}/guilds/{guild}/commands", app=self._application_id, guild=guild_id)
        return self._send("POST", url, _CREATE, body=body)

    def delete_guild_command(self, command_id: Snowflake, guild_id: Snowflake) -> asyncio.Future[ApiResponse]:
        url = self._url(
            "/applications/{app}/guilds/{guild}/commands/{cmd}",
            app=self._application_id,
            guild=guild_id,
            cmd=command_id,
        )
        return self._send("DELETE", url, _DELETE)

    def get_global_command(self, command_id: Snowflake) -> asyncio.Future[ApiResponse]:
        url = self._url("/applications/{app}/commands/{cmd}", app=self._application_id, cmd=command_id)
        return self._send("GET", url, _READ)

    def get_global_commands(self) -> asyncio.Future[ApiResponse]:
        url = self._url("/applications/{app}/commands", app=self._application_id)
        return self._send("GET", url, _READ)

    def get_guild_command(self, guild_id: Snowflake, command_id: Snowflake) -> asyncio.Future[ApiResponse]:
        url = self._url(
            "/applications/{app}/guilds/{guild}/commands/{cmd}",
            app=self._application_id,
            guild=guild_id,
            cmd=command_id,
        )
        return self._send("GET", url, _READ)

    def get_guild_commands(self, guild_id: Snowflake) -> asyncio.Future[ApiResponse]:
        url = self._url("/applications/{app}/guilds/{guild}/commands", app=self._application_id, guild=guild_id)
        return self._send("GET", url, _READ)

    async def shutdown(self, *, wait: bool = True) -> None:
        """Stop accepting work. Queued calls still run unless ``wait`` is False."""
        await self._executor.close(wait=wait)

    async def __aenter__(self) -> DiscordHttpClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.shutdown()
