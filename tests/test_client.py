import asyncio

import aiohttp
import discord
from aiohttp import web
from aiohttp.test_utils import AioHTTPTestCase, unused_port

from fake_backend import API_PREFIX, APPLICATION_ID, BOT_TOKEN, FakeDiscord
from slashcord.config.models import DiscordSettings
from slashcord.core.enums import ApplicationCommandOptionType as OptionType
from slashcord.core.enums import InteractionType
from slashcord.core.models import ApplicationCommand, ApplicationCommandOption, Interaction, InteractionResponse
from slashcord.errors import ClientClosedError, DiscordApiException, EncodingError
from slashcord.http import DiscordHttpClient, QueueWorkerPool

GUILD_ID = 555


def _ping_command(name: str = "ping") -> ApplicationCommand:
    return ApplicationCommand(
        name=name,
        description="Replies with pong",
        options=(ApplicationCommandOption(type=OptionType.STRING, name="message", description="Echo text"),),
    )


class DiscordHttpClientTests(AioHTTPTestCase):
    async def get_application(self) -> web.Application:
        self.backend = FakeDiscord()
        return self.backend.build_app()

    async def asyncSetUp(self) -> None:
        await super().asyncSetUp()
        self.discord = self._client()

    async def asyncTearDown(self) -> None:
        await self.discord.shutdown()
        await super().asyncTearDown()

    def _client(self, **kwargs) -> DiscordHttpClient:
        return DiscordHttpClient(
            BOT_TOKEN,
            APPLICATION_ID,
            base_url=str(self.server.make_url(API_PREFIX)),
            **kwargs,
        )

    async def test_global_command_lifecycle(self) -> None:
        created = await self.discord.submit_global_command(_ping_command())
        self.assertEqual(created.status, 201)
        command = self.discord.codec.decode(ApplicationCommand, created.json())
        self.assertIsNotNone(command.id)
        self.assertEqual(command.options[0].type, OptionType.STRING)

        fetched = await self.discord.get_global_command(command.id)
        self.assertEqual(fetched.json()["name"], "ping")

        listed = await self.discord.get_global_commands()
        self.assertEqual([c["name"] for c in listed.json()], ["ping"])

        deleted = await self.discord.delete_global_command(command.id)
        self.assertEqual(deleted.status, 204)

    async def test_resubmitting_a_command_updates_it(self) -> None:
        first = await self.discord.submit_global_command(_ping_command())
        second = await self.discord.submit_global_command(_ping_command())
        self.assertEqual(first.status, 201)
        self.assertEqual(second.status, 200)
        self.assertEqual(first.json()["id"], second.json()["id"])

    async def test_guild_command_lifecycle(self) -> None:
        created = await self.discord.submit_guild_command(_ping_command("guildping"), GUILD_ID)
        command_id = created.json()["id"]

        fetched = await self.discord.get_guild_command(GUILD_ID, command_id)
        self.assertEqual(fetched.json()["name"], "guildping")
        self.assertEqual(len((await self.discord.get_guild_commands(GUILD_ID)).json()), 1)
        self.assertEqual((await self.discord.get_global_commands()).json(), [])

        await self.discord.delete_guild_command(command_id, GUILD_ID)
        self.assertEqual((await self.discord.get_guild_commands(GUILD_ID)).json(), [])

    async def test_get_after_delete_is_not_found(self) -> None:
        command_id = (await self.discord.submit_global_command(_ping_command())).json()["id"]

        # Submitted back to back without awaiting in between; the single worker keeps them ordered.
        deleted = self.discord.delete_global_command(command_id)
        fetched = self.discord.get_global_command(command_id)

        self.assertEqual((await deleted).status, 204)
        with self.assertRaises(DiscordApiException) as ctx:
            await fetched
        self.assertEqual(ctx.exception.status, 404)
        self.assertEqual(ctx.exception.response.json()["code"], 10063)

    async def test_authenticated_calls_send_bot_token(self) -> None:
        await self.discord.get_global_commands()
        command_id = (await self.discord.submit_guild_command(_ping_command(), GUILD_ID)).json()["id"]
        await self.discord.get_guild_command(GUILD_ID, command_id)
        await self.discord.delete_guild_command(command_id, GUILD_ID)

        self.assertEqual(len(self.backend.calls), 4)
        for call in self.backend.calls:
            self.assertEqual(call.authorization, f"Bot {BOT_TOKEN}")

    async def test_wrong_token_is_classified_as_unauthorized(self) -> None:
        other = DiscordHttpClient(
            "not-the-token", APPLICATION_ID, base_url=str(self.server.make_url(API_PREFIX))
        )
        try:
            with self.assertRaises(DiscordApiException) as ctx:
                await other.get_global_commands()
            self.assertEqual(ctx.exception.status, 401)
        finally:
            await other.shutdown()

    async def test_interaction_reply_uses_only_interaction_token(self) -> None:
        tokenless = DiscordHttpClient("", APPLICATION_ID, base_url=str(self.server.make_url(API_PREFIX)))
        interaction = Interaction(id=786008729715212338, type=InteractionType.APPLICATION_COMMAND, token="A_UNIQUE_TOKEN")
        response = InteractionResponse.message("pong", embeds=[discord.Embed(title="Pong", description="hi")])
        try:
            result = await tokenless.submit_interaction_reply(interaction, response)
        finally:
            await tokenless.shutdown()

        self.assertEqual(result.status, 204)
        reply = self.backend.replies[0]
        self.assertEqual(reply.path, f"{API_PREFIX}/interactions/786008729715212338/A_UNIQUE_TOKEN/callback")
        self.assertIsNone(reply.authorization)
        self.assertEqual(
            reply.body,
            {"type": 4, "data": {"content": "pong", "embeds": [{"title": "Pong", "description": "hi"}]}},
        )

    async def test_encoding_error_is_raised_before_any_request(self) -> None:
        bad = ApplicationCommand(
            name="bad",
            description="Leaf option with children",
            options=(
                ApplicationCommandOption(
                    type=OptionType.STRING,
                    name="q",
                    description="q",
                    options=(ApplicationCommandOption(type=OptionType.STRING, name="x", description="x"),),
                ),
            ),
        )
        with self.assertRaises(EncodingError):
            self.discord.submit_global_command(bad)
        await asyncio.sleep(0)
        self.assertEqual(self.backend.calls, [])

    async def test_operations_after_shutdown_are_refused(self) -> None:
        await self.discord.shutdown()
        await self.discord.shutdown()
        with self.assertRaises(ClientClosedError):
            self.discord.get_global_commands()

    async def test_concurrent_reads_with_worker_pool(self) -> None:
        self.backend.latency = 0.01
        pooled = self._client(workers=QueueWorkerPool(8))
        await self.discord.submit_global_command(_ping_command())
        try:
            results = await asyncio.gather(*[pooled.get_global_commands() for _ in range(100)])
        finally:
            await pooled.shutdown()

        self.assertEqual(len(results), 100)
        self.assertTrue(all(r.status == 200 for r in results))
        self.assertTrue(all(r.json()[0]["name"] == "ping" for r in results))
        self.assertGreater(self.backend.max_in_flight, 1)

    async def test_from_settings(self) -> None:
        settings = DiscordSettings(
            token=BOT_TOKEN,
            application_id=APPLICATION_ID,
            api_base_url=str(self.server.make_url(API_PREFIX)),
            workers=2,
            default_embed_colour=0x112233,
        )
        async with DiscordHttpClient.from_settings(settings) as client:
            self.assertEqual(client.codec.encode(discord.Embed(title="x"))["color"], 0x112233)
            response = await client.get_global_commands()
        self.assertEqual(response.json(), [])

    async def test_connection_failure_reaches_the_caller_unwrapped(self) -> None:
        unreachable = DiscordHttpClient(BOT_TOKEN, APPLICATION_ID, base_url=f"http://127.0.0.1:{unused_port()}/api/v8")
        try:
            with self.assertRaises(aiohttp.ClientConnectionError) as ctx:
                await unreachable.get_global_commands()
            self.assertNotIsInstance(ctx.exception, DiscordApiException)
            # The worker is still alive for the next call.
            with self.assertRaises(aiohttp.ClientConnectionError):
                await asyncio.wait_for(unreachable.get_global_command(1), 2)
        finally:
            await unreachable.shutdown()

    async def test_configured_timeout_reaches_the_caller_unwrapped(self) -> None:
        self.backend.latency = 0.5
        settings = DiscordSettings(
            token=BOT_TOKEN,
            application_id=APPLICATION_ID,
            api_base_url=str(self.server.make_url(API_PREFIX)),
            request_timeout_seconds=0.05,
        )
        async with DiscordHttpClient.from_settings(settings) as client:
            with self.assertRaises(asyncio.TimeoutError) as ctx:
                await client.get_global_commands()
            self.assertNotIsInstance(ctx.exception, DiscordApiException)
