"""Configuration loading: bundled local-config.yaml plus the message catalog it points to."""

import hashlib
import logging
import os
import urllib.parse
from importlib.resources import files
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
import yaml
from jsonschema import Draft7Validator

from .exceptions import ConfigurationError
from .translation import MessageCatalog

logger = logging.getLogger(__name__)

DEFAULT_TYPING_LIMIT_MS = 1000

CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "typing_limit_ms": {"type": "integer", "minimum": 0},
        "strict_rule_names": {"type": "boolean"},
        "locale": {"type": "string"},
        "message_catalog_uri": {"type": "string"},
        "custom_rules": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "pattern", "message_key"],
                "properties": {
                    "name": {"type": "string", "minLength": 1},
                    "pattern": {"type": "string"},
                    "message_key": {"type": "string", "minLength": 1},
                },
            },
        },
    },
}


def schema_errors(instance: Any, schema: Dict[str, Any]) -> List[str]:
    """
    Collect readable jsonschema errors for an instance.

    Returns:
        One "<path>: <message>" string per violation, in path order
    """
    validator = Draft7Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.path])
    messages = []
    for error in errors:
        location = ".".join(str(p) for p in error.path) or "root"
        messages.append(f"{location}: {error.message}")
    return messages


class ConfigLoader:
    """Loads local configuration and the message catalog it references."""

    CACHE_DIR = Path.home() / ".cache" / "field-validation-lib"
    FETCH_TIMEOUT = 10

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            config_path: Optional path to a local config file. Defaults to the
                local-config.yaml bundled in the field_validation package.

        Raises:
            ConfigurationError: If the file cannot be read or fails schema checks
        """
        if config_path is None:
            config_file = files("field_validation").joinpath("local-config.yaml")
            self.local_config_path = str(config_file)
        else:
            self.local_config_path = os.path.abspath(config_path)

        self.cache_dir = self.CACHE_DIR
        self.local_config = self._load_yaml(self.local_config_path) or {}

        problems = schema_errors(self.local_config, CONFIG_SCHEMA)
        if problems:
            raise ConfigurationError(
                f"Invalid configuration in {self.local_config_path}: " + "; ".join(problems)
            )

        self._catalog: Optional[MessageCatalog] = None

    def _load_yaml(self, path: str) -> Dict[str, Any]:
        """Load YAML file from disk."""
        try:
            with open(path, encoding="utf-8") as f:
                return yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load configuration from {path}: {e}") from e

    def get_local_config(self) -> Dict[str, Any]:
        return self.local_config

    def get_typing_limit_ms(self) -> int:
        """Debounce window in milliseconds (default 1000)."""
        return self.local_config.get("typing_limit_ms", DEFAULT_TYPING_LIMIT_MS)

    def get_strict_rule_names(self) -> bool:
        return bool(self.local_config.get("strict_rule_names", False))

    def get_locale(self) -> str:
        return self.local_config.get("locale", "en")

    def get_custom_rules(self) -> List[Dict[str, str]]:
        return self.local_config.get("custom_rules") or []

    def get_message_catalog(self) -> MessageCatalog:
        """
        Load (once) the message catalog named by message_catalog_uri.

        Without a configured URI an empty catalog is returned, so message keys
        are used as-is.
        """
        if self._catalog is None:
            uri = self.local_config.get("message_catalog_uri")
            if not uri:
                logger.info("No message catalog configured, messages will show their keys")
                self._catalog = MessageCatalog(locale=self.get_locale())
            else:
                try:
                    self._catalog = MessageCatalog.from_yaml(
                        self._read_uri(uri), locale=self.get_locale()
                    )
                except ValueError as e:
                    raise ConfigurationError(f"Invalid message catalog at {uri}: {e}") from e
                logger.debug(
                    "Message catalog loaded",
                    extra={"uri": uri, "entries": len(self._catalog.messages)},
                )
        return self._catalog

    def _read_uri(self, uri: str) -> str:
        """
        Read text from a URI (with caching for remote files).

        Supports:
        - Relative paths, resolved against the local config directory
        - file:// - Local filesystem (absolute paths)
        - https:// and http:// - fetched once, then served from the cache dir
        """
        parsed = urllib.parse.urlparse(uri)

        if not parsed.scheme:
            config_dir = os.path.dirname(os.path.abspath(self.local_config_path))
            return self._read_file(os.path.join(config_dir, uri))

        if parsed.scheme == "file":
            return self._read_file(urllib.parse.unquote(parsed.path))

        if parsed.scheme in ("http", "https"):
            cache_key = hashlib.sha256(uri.encode()).hexdigest()
            cache_path = self.cache_dir / f"catalog_{cache_key}.yaml"
            if cache_path.exists():
                return cache_path.read_text(encoding="utf-8")

            content = self._fetch_uri(uri)
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            cache_path.write_text(content, encoding="utf-8")
            return content

        raise ConfigurationError(f"Unsupported URI scheme: {parsed.scheme} in {uri}")

    def _read_file(self, path: str) -> str:
        try:
            with open(path, encoding="utf-8") as f:
                return f.read()
        except OSError as e:
            raise ConfigurationError(f"Failed to read message catalog {path}: {e}") from e

    def _fetch_uri(self, uri: str) -> str:
        """Fetch content from HTTP/HTTPS URI."""
        try:
            response = requests.get(uri, timeout=self.FETCH_TIMEOUT)
            response.raise_for_status()
            return response.text
        except requests.RequestException as e:
            raise RuntimeError(f"Failed to fetch message catalog from {uri}: {e}") from e
