"""Marketing attribution labels derived from UTM parameters."""

import logging

from ridejob.form.models import UTMParams

logger = logging.getLogger(__name__)

DIRECT_ACCESS = "直接アクセス"
COUPANG_MEDIA_NAME = "Meta広告"
COUPANG_DEFAULT_SOURCE = "RIDEJOB HP"

# source -> (medium -> label), plus the label used for any other medium
_MEDIA_TABLE: dict[str, tuple[dict[str, str], str]] = {
    "google": ({"search": "Googleリスティング"}, "Google"),
    "tiktok": ({"ad": "TikTok広告", "organic": "TikTokオーガニック"}, "TikTok"),
    "meta": ({"ad": "Meta広告"}, "Meta"),
    "youtube": ({"organic": "YouTubeオーガニック"}, "YouTube"),
    "threads": ({"organic": "スレッドオーガニック"}, "スレッド"),
}


def format_source(source: str, medium: str | None) -> str:
    """`source(medium)`, or just `source` when there is no medium."""
    return f"{source}({medium})" if medium else source


def get_media_name(utm_params: UTMParams | None) -> str:
    """Map UTM source/medium to the media name used by the recruiting team.

    The source is matched case-insensitively, the medium exactly.

    Examples:
        google/search -> Googleリスティング
        tiktok/ad     -> TikTok広告
        newsletter/x  -> newsletter(x)
        (no source)   -> 直接アクセス
    """
    source = utm_params.utm_source if utm_params else ""
    medium = utm_params.utm_medium if utm_params else ""

    if not source:
        return DIRECT_ACCESS

    entry = _MEDIA_TABLE.get(source.lower())
    if entry is None:
        return format_source(source, medium)

    by_medium, default_label = entry
    label = by_medium.get(medium, default_label)
    logger.debug(f"Media name for {source}/{medium}: {label}")
    return label


def get_coupang_source_display(utm_params: UTMParams | None) -> str:
    """Inflow label shown in the Coupang chat message."""
    if not utm_params or not utm_params.utm_source:
        return COUPANG_DEFAULT_SOURCE
    return format_source(utm_params.utm_source, utm_params.utm_medium)
