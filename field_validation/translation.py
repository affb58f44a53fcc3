"""
Message translation contract.

The engine only needs a callable `translate(message_key) -> str`. MessageCatalog
is the default implementation: a flat key -> text map loaded from YAML. Keys
missing from the catalog are returned unchanged so a misconfigured catalog
still produces a readable (if untranslated) message.
"""

import logging
from typing import Callable, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

Translator = Callable[[str], str]


class MessageCatalog:
    """Key -> message text lookup."""

    def __init__(self, messages: Optional[Dict[str, str]] = None, locale: str = "en"):
        self.messages = dict(messages or {})
        self.locale = locale

    @classmethod
    def from_yaml(cls, text: str, locale: str = "en") -> "MessageCatalog":
        """
        Build a catalog from YAML text.

        Raises:
            ValueError: If the document is not a mapping
        """
        data = yaml.safe_load(text) or {}
        if not isinstance(data, dict):
            raise ValueError(
                f"Message catalog must be a mapping of keys to text, got {type(data).__name__}"
            )
        return cls({str(k): str(v) for k, v in data.items()}, locale)

    def translate(self, key: str) -> str:
        try:
            return self.messages[key]
        except KeyError:
            logger.debug(
                "No translation for message key, using key",
                extra={"message_key": key, "locale": self.locale},
            )
            return key

    __call__ = translate

    def __contains__(self, key: str) -> bool:
        return key in self.messages


def identity_translator(key: str) -> str:
    """Translator that returns message keys unchanged."""
    return key
