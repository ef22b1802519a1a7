"""Provider list cache.

CMR providers change rarely, so the list is fetched at startup and then
refreshed in the background. Request handlers only ever read an immutable
ProviderSnapshot; a refresh swaps in new snapshots as a whole.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Literal

import httpx

from cmr_stac.core.cmr_client import CmrClient
from cmr_stac.core.exceptions import CmrError
from cmr_stac.stac.providers import Provider, ProviderSnapshot

logger = logging.getLogger(__name__)

CatalogKind = Literal["standard", "cloud"]


class ProviderCache:
    """Holds the standard and cloud provider snapshots."""

    def __init__(self, client: CmrClient, refresh_interval: float = 0) -> None:
        self.client = client
        self.refresh_interval = refresh_interval
        self._snapshots: dict[str, ProviderSnapshot] = {
            "standard": ProviderSnapshot(),
            "cloud": ProviderSnapshot(),
        }
        self._task: asyncio.Task[None] | None = None

    def snapshot(self, kind: CatalogKind = "standard") -> ProviderSnapshot:
        return self._snapshots[kind]

    def list_providers(self, kind: CatalogKind = "standard") -> list[Provider]:
        return list(self._snapshots[kind])

    async def refresh(self) -> None:
        """Fetch providers and which of them host cloud collections."""
        providers = await self.client.list_providers()
        cloud_flags = await asyncio.gather(
            *(self.client.has_cloud_collections(p.provider_id) for p in providers)
        )
        cloud = tuple(p for p, is_cloud in zip(providers, cloud_flags) if is_cloud)

        self._snapshots = {
            "standard": ProviderSnapshot(tuple(providers)),
            "cloud": ProviderSnapshot(cloud),
        }
        logger.info(f"Provider list refreshed: {len(providers)} providers, {len(cloud)} cloud")

    async def start(self) -> None:
        """Load the initial snapshot and schedule periodic refreshes."""
        await self._refresh_logged()
        if self.refresh_interval > 0:
            self._task = asyncio.create_task(self._refresh_loop())

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    async def _refresh_loop(self) -> None:
        while True:
            await asyncio.sleep(self.refresh_interval)
            await self._refresh_logged()

    async def _refresh_logged(self) -> None:
        # A failed refresh keeps serving the previous snapshot
        try:
            await self.refresh()
        except (CmrError, httpx.HTTPError) as e:
            logger.error(f"Provider list refresh failed, keeping previous list: {e}")
