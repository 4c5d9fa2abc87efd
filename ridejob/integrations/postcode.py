"""Static postal code -> prefecture table (ken_all.json)."""

import json
import logging
import re
from functools import lru_cache
from pathlib import Path

logger = logging.getLogger(__name__)

_SEVEN_DIGITS_RE = re.compile(r"^\d{7}$")


class PostcodeTable:
    """
    Lookup table built from a JSON list of `{"postal_code": int, "prefecture": str}`.

    The file is read on first use and kept in memory. A missing or unreadable
    file yields an empty table (every lookup misses) and is retried on the
    next call.
    """

    def __init__(self, data_path: str | Path):
        self.data_path = Path(data_path)
        self._map: dict[str, str] | None = None

    def load(self) -> dict[str, str]:
        """Load (or return the cached) postal code map."""
        if self._map is not None:
            return self._map

        try:
            with open(self.data_path, "r", encoding="utf-8") as f:
                data = json.load(f)

            mapping: dict[str, str] = {}
            for item in data:
                if not isinstance(item, dict):
                    continue
                code = item.get("postal_code")
                prefecture = item.get("prefecture")
                if code is None or not prefecture:
                    continue
                code_str = str(code).zfill(7)
                if not _SEVEN_DIGITS_RE.match(code_str):
                    continue
                mapping[code_str] = prefecture

            self._map = mapping
            logger.info(f"Loaded {len(mapping)} postal codes")
            return mapping

        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Failed to load postcode data from {self.data_path}: {e}")
            return {}

    def get_prefecture(self, postal_code: str) -> str | None:
        """Prefecture name for a normalized 7-digit code, or None."""
        if not _SEVEN_DIGITS_RE.match(postal_code):
            return None
        return self.load().get(postal_code)


@lru_cache
def get_postcode_table(data_path: str) -> PostcodeTable:
    """Shared table instance per data file."""
    return PostcodeTable(data_path)
