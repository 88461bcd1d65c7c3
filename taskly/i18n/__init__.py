"""Translation support for taskly."""

from taskly.i18n.translator import Translator

__all__ = ["Translator"]
