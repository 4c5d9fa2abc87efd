"""Kanji to hiragana suggestion for the kana name fields."""

import asyncio
import logging
from typing import Protocol

import pykakasi

logger = logging.getLogger(__name__)


class KanaConverter(Protocol):
    """Fallible kanji -> hiragana conversion. Returns "" when no suggestion is available."""

    async def convert(self, text: str) -> str: ...


class PykakasiConverter:
    """KanaConverter backed by pykakasi.

    The converter is created once, on first use, and reused for the rest of
    the session. If creation fails every later call returns "".
    """

    def __init__(self) -> None:
        self._kakasi: pykakasi.kakasi | None = None
        self._init_failed = False

    def _get_kakasi(self) -> "pykakasi.kakasi | None":
        if self._kakasi is None and not self._init_failed:
            try:
                self._kakasi = pykakasi.kakasi()
            except Exception as e:
                logger.error(f"Failed to initialize kana converter: {e}")
                self._init_failed = True
        return self._kakasi

    def _convert_sync(self, text: str) -> str:
        kakasi = self._get_kakasi()
        if kakasi is None:
            return ""
        return "".join(item["hira"] for item in kakasi.convert(text))

    async def convert(self, text: str) -> str:
        if not text.strip():
            return ""
        try:
            return await asyncio.to_thread(self._convert_sync, text.strip())
        except Exception as e:
            logger.error(f"Failed to convert to hiragana: {e}")
            return ""
