"""microCMS integration (job inventory, prefectures, municipalities)."""

from ridejob.integrations.microcms.client import (
    MicroCMSClient,
    MicroCMSError,
    Municipality,
    Prefecture,
)

__all__ = [
    "MicroCMSClient",
    "MicroCMSError",
    "Municipality",
    "Prefecture",
]
