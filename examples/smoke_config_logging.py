from __future__ import annotations

import asyncio
import logging

from slashcord.config import YamlConfigLoader
from slashcord.config.models import ConfigLoadRequest
from slashcord.core.models import ApplicationCommand
from slashcord.http import DiscordHttpClient
from slashcord.logging import init_logging


async def main() -> None:
    config = await YamlConfigLoader().load(ConfigLoadRequest(yaml_path="examples/slashcord.yaml"))
    init_logging(config.logging)

    logger = logging.getLogger("smoke")
    logger.info("Config loaded application_id=%s workers=%s", config.discord.application_id, config.discord.workers)

    async with DiscordHttpClient.from_settings(config.discord) as client:
        response = await client.get_global_commands()
        commands = [client.codec.decode(ApplicationCommand, item) for item in response.json()]
        logger.info("Global commands count=%d names=%s", len(commands), [c.name for c in commands])


if __name__ == "__main__":
    asyncio.run(main())
