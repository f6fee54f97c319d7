from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Iterator, Optional, Sequence

import yaml

from slashcord.config import YamlConfigLoader
from slashcord.config.models import AppConfig, ConfigLoadRequest
from slashcord.core.models import ApplicationCommand, ApplicationCommandOption
from slashcord.errors import CodecError, DiscordApiException, SlashcordError
from slashcord.http import TRANSPORT_ERRORS, DiscordHttpClient
from slashcord.logging import init_logging

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="slashcord", description="Manage Discord application commands")
    parser.add_argument(
        "--config",
        default="slashcord.yaml",
        help="Path to the YAML config (default: slashcord.yaml). Use '-' to rely on environment only.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True, help="Command to run")

    list_parser = subparsers.add_parser("list", help="List registered commands")
    list_parser.add_argument("--guild", default=None, help="Guild id (default: global commands)")

    register_parser = subparsers.add_parser("register", help="Register commands from a YAML or JSON file")
    register_parser.add_argument("file", help="File holding one command or a list of commands")
    register_parser.add_argument("--guild", default=None, help="Guild id (default: global commands)")

    delete_parser = subparsers.add_parser("delete", help="Delete a registered command")
    delete_parser.add_argument("command_id", help="Command id")
    delete_parser.add_argument("--guild", default=None, help="Guild id (default: global commands)")

    return parser


async def _load_config(args: argparse.Namespace) -> AppConfig:
    yaml_path: Optional[str] = None if args.config == "-" else args.config
    return await YamlConfigLoader().load(ConfigLoadRequest(yaml_path=yaml_path))


class CommandFileError(SlashcordError):
    pass


def _read_command_file(path: Path) -> list[Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise CommandFileError(f"Could not read command file {path}: {exc}") from exc
    if isinstance(data, dict):
        return [data]
    if isinstance(data, list):
        return data
    raise CommandFileError(f"Command file must hold an object or a list of objects: {path}")


def _unknown_option_types(options: Sequence[ApplicationCommandOption], prefix: str = "") -> Iterator[str]:
    for option in options:
        path = f"{prefix}{option.name}"
        if option.type is None:
            yield path
        yield from _unknown_option_types(option.options, f"{path}.")


async def _list(client: DiscordHttpClient, args: argparse.Namespace) -> None:
    if args.guild is None:
        response = await client.get_global_commands()
    else:
        response = await client.get_guild_commands(args.guild)
    payload = response.json() or []
    for command in (client.codec.decode(ApplicationCommand, item) for item in payload):
        for option in _unknown_option_types(command.options):
            logger.warning("commands.unknown_option_type command=%s option=%s", command.name, option)
    logger.info("commands.listed count=%d guild=%s", len(payload), args.guild)
    # Printed as received, so option types this client does not model survive.
    print(client.codec.pretty(payload))


async def _register(client: DiscordHttpClient, args: argparse.Namespace) -> None:
    commands = [client.codec.decode(ApplicationCommand, item) for item in _read_command_file(Path(args.file))]
    for command in commands:
        if args.guild is None:
            response = await client.submit_global_command(command)
        else:
            response = await client.submit_guild_command(command, args.guild)
        registered = client.codec.decode(ApplicationCommand, response.json())
        logger.info(
            "commands.registered name=%s id=%s status=%s guild=%s",
            registered.name,
            registered.id,
            response.status,
            args.guild,
        )


async def _delete(client: DiscordHttpClient, args: argparse.Namespace) -> None:
    if args.guild is None:
        await client.delete_global_command(args.command_id)
    else:
        await client.delete_guild_command(args.command_id, args.guild)
    logger.info("commands.deleted id=%s guild=%s", args.command_id, args.guild)


_HANDLERS = {
    "list": _list,
    "register": _register,
    "delete": _delete,
}


async def _main_async(argv: Optional[list[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    config = await _load_config(args)
    init_logging(config.logging)
    logger.info("Starting command. command=%s application_id=%s", args.command, config.discord.application_id)

    async with DiscordHttpClient.from_settings(config.discord) as client:
        try:
            await _HANDLERS[args.command](client, args)
        except DiscordApiException as exc:
            logger.error("Discord rejected the request. %s body=%s", exc, exc.response.text())
            return 1
        except TRANSPORT_ERRORS as exc:
            logger.error("Could not reach Discord. error=%s: %s", type(exc).__name__, exc)
            return 1
        except CodecError as exc:
            logger.error("Invalid command payload. error=%s", exc)
            return 1
        except CommandFileError as exc:
            logger.error("Invalid command file. error=%s", exc)
            return 1
    return 0


def main() -> None:
    try:
        sys.exit(asyncio.run(_main_async()))
    except KeyboardInterrupt:
        logger.info("Interrupted by user.")


if __name__ == "__main__":
    main()
