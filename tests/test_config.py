import logging
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from pydantic import ValidationError

from slashcord.config import ConfigLoadRequest, YamlConfigLoader
from slashcord.config.models import AppConfig, LoggingSettings
from slashcord.logging import init_logging

_YAML = """
discord:
  token: yaml-token
  application_id: "123"
  workers: 2
logging:
  level: DEBUG
"""


class YamlConfigLoaderTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.dir = Path(self._tmp.name)
        self.yaml_path = self.dir / "slashcord.yaml"
        self.yaml_path.write_text(_YAML, encoding="utf-8")
        # Keep the developer's own SLASHCORD__ variables out of the tests.
        env = {k: v for k, v in os.environ.items() if not k.startswith("SLASHCORD__")}
        patcher = patch.dict(os.environ, env, clear=True)
        patcher.start()
        self.addCleanup(patcher.stop)

    def _request(self, **kwargs) -> ConfigLoadRequest:
        return ConfigLoadRequest(yaml_path=str(self.yaml_path), dotenv_path=None, **kwargs)

    async def test_yaml_values_override_defaults(self) -> None:
        config = await YamlConfigLoader().load(self._request())
        self.assertEqual(config.discord.token, "yaml-token")
        self.assertEqual(config.discord.application_id, "123")
        self.assertEqual(config.discord.workers, 2)
        self.assertEqual(config.discord.api_base_url, "https://discord.com/api/v8")
        self.assertEqual(config.logging.level, "DEBUG")

    async def test_env_overrides_are_coerced(self) -> None:
        with patch.dict(
            os.environ,
            {
                "SLASHCORD__DISCORD__TOKEN": "env-token",
                "SLASHCORD__DISCORD__WORKERS": "4",
                "SLASHCORD__DISCORD__PRETTY_JSON": "yes",
                "SLASHCORD__DISCORD__DEFAULT_EMBED_COLOUR": "65280",
            },
        ):
            config = await YamlConfigLoader().load(self._request())
        self.assertEqual(config.discord.token, "env-token")
        self.assertEqual(config.discord.workers, 4)
        self.assertTrue(config.discord.pretty_json)
        self.assertEqual(config.discord.default_embed_colour, 0x00FF00)

    async def test_unknown_env_key_is_rejected(self) -> None:
        with patch.dict(os.environ, {"SLASHCORD__DISCORD__NOPE": "x"}):
            with self.assertRaises(KeyError):
                await YamlConfigLoader().load(self._request())

    async def test_uncoercible_env_value_is_rejected(self) -> None:
        with patch.dict(os.environ, {"SLASHCORD__DISCORD__WORKERS": "many"}):
            with self.assertRaises(ValueError):
                await YamlConfigLoader().load(self._request())

    async def test_dotenv_fills_missing_variables(self) -> None:
        dotenv = self.dir / ".env"
        dotenv.write_text("SLASHCORD__DISCORD__APPLICATION_ID=999\n", encoding="utf-8")
        config = await YamlConfigLoader().load(ConfigLoadRequest(yaml_path=None, dotenv_path=str(dotenv)))
        self.assertEqual(config.discord.application_id, "999")

    async def test_missing_yaml_file_is_an_error(self) -> None:
        with self.assertRaises(FileNotFoundError):
            await YamlConfigLoader().load(ConfigLoadRequest(yaml_path=str(self.dir / "absent.yaml"), dotenv_path=None))

    async def test_invalid_worker_count_fails_validation(self) -> None:
        self.yaml_path.write_text("discord:\n  workers: 0\n", encoding="utf-8")
        with self.assertRaises(ValidationError):
            await YamlConfigLoader().load(self._request())

    async def test_unknown_yaml_key_fails_validation(self) -> None:
        self.yaml_path.write_text("discord:\n  tokn: typo\n", encoding="utf-8")
        with self.assertRaises(ValidationError):
            await YamlConfigLoader().load(self._request())


class InitLoggingTests(unittest.TestCase):
    def setUp(self) -> None:
        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level

        def restore() -> None:
            for handler in list(root.handlers):
                root.removeHandler(handler)
                handler.close()
            for handler in saved_handlers:
                root.addHandler(handler)
            root.setLevel(saved_level)

        self.addCleanup(restore)

    def test_file_handler_is_added_when_path_is_set(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "logs" / "slashcord.log"
            settings = LoggingSettings.model_validate({"level": "info", "file": {"path": str(path)}})
            init_logging(settings)
            logging.getLogger("slashcord.test").info("hello")
            for handler in logging.getLogger().handlers:
                handler.flush()
            self.assertIn("hello", path.read_text(encoding="utf-8"))
            self.assertEqual(logging.getLogger().level, logging.INFO)
            for handler in list(logging.getLogger().handlers):
                logging.getLogger().removeHandler(handler)
                handler.close()

    def test_unknown_level_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            init_logging(AppConfig().logging.model_copy(update={"level": "LOUD"}))


if __name__ == "__main__":
    unittest.main()
