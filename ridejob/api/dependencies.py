"""FastAPI dependencies."""

from collections.abc import AsyncIterator
from typing import Annotated

import httpx
from fastapi import Depends

from ridejob.config import Settings, get_settings
from ridejob.integrations.microcms import MicroCMSClient
from ridejob.integrations.postcode import PostcodeTable, get_postcode_table
from ridejob.integrations.zipcloud import AddressLookup, ZipcloudClient
from ridejob.services.notifications import WebhookNotifier

SettingsDep = Annotated[Settings, Depends(get_settings)]


async def get_http_client(settings: SettingsDep) -> AsyncIterator[httpx.AsyncClient]:
    """Per-request outbound HTTP client."""
    async with httpx.AsyncClient(timeout=settings.webhook_timeout) as client:
        yield client


HttpClientDep = Annotated[httpx.AsyncClient, Depends(get_http_client)]


async def get_microcms_client(settings: SettingsDep) -> AsyncIterator[MicroCMSClient]:
    """
    microCMS client for the request.

    The client is created even when microCMS is not configured; calls then
    raise MicroCMSError, which the routes turn into their 500 bodies.
    """
    async with MicroCMSClient(
        base_url=settings.microcms_base_url,
        api_key=settings.microcms_api_key,
        timeout=settings.microcms_timeout,
    ) as client:
        yield client


MicroCMSDep = Annotated[MicroCMSClient, Depends(get_microcms_client)]


def get_postcode_dependency(settings: SettingsDep) -> PostcodeTable:
    return get_postcode_table(settings.postcode_data_path)


PostcodeDep = Annotated[PostcodeTable, Depends(get_postcode_dependency)]


def get_address_lookup(settings: SettingsDep, client: HttpClientDep) -> AddressLookup | None:
    """ZipCloud lookup, or None when disabled."""
    if not settings.zipcloud_enabled:
        return None
    return ZipcloudClient(client, endpoint=settings.zipcloud_endpoint)


AddressLookupDep = Annotated[AddressLookup | None, Depends(get_address_lookup)]


def get_notifier(client: HttpClientDep) -> WebhookNotifier:
    return WebhookNotifier(client)


NotifierDep = Annotated[WebhookNotifier, Depends(get_notifier)]
