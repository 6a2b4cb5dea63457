# -*- coding: utf-8 -*-
"""Language code canonicalization for food datasets."""

from __future__ import annotations

from typing import Dict, Iterable, Optional

from ..config import settings
from .errors import UnsupportedLanguage

# Aliases resolve before the supported-set check so one language never maps to two cache keys.
LANGUAGE_ALIASES: Dict[str, str] = {"en": "us"}


def normalize_language(raw: Optional[str], supported: Optional[Iterable[str]] = None) -> str:
    lang = (raw or "").strip().lower()
    lang = LANGUAGE_ALIASES.get(lang, lang)
    allowed = set(supported if supported is not None else settings.supported_languages)
    if not lang or lang not in allowed:
        raise UnsupportedLanguage(details=f"'{raw}' is not one of {', '.join(sorted(allowed))}")
    return lang
