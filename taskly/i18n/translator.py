"""Message translation.

Lookups fall back to the key itself, so English never needs a catalog.
Placeholders use str.format syntax; a missing parameter leaves its
placeholder untouched instead of raising.
"""

import logging
import os
from typing import Dict, Mapping, Optional

from dotenv import load_dotenv

from taskly.i18n.catalog import MESSAGES

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = os.getenv("APP_LOCALE", "en")


class _KeepMissing(dict):
    def __missing__(self, key):
        return "{" + key + "}"


class Translator:
    def __init__(self, locale: Optional[str] = None, messages: Optional[Dict[str, Dict[str, str]]] = None):
        self.locale = (locale or DEFAULT_LOCALE).lower()
        self.messages = messages if messages is not None else MESSAGES

    def format(self, key: str, params: Optional[Mapping[str, object]] = None) -> str:
        template = self.messages.get(self.locale, {}).get(key, key)
        if not params:
            return template
        try:
            return template.format_map(_KeepMissing({k: v for k, v in params.items()}))
        except (ValueError, IndexError) as e:
            logger.warning(f"Bad translation template for {key!r} ({self.locale}): {e}")
            return key
