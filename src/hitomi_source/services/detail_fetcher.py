"""Concurrent fan-out of gallery block fetches for a page of ids."""

from __future__ import annotations

import asyncio
import logging

from ..config import Settings
from ..domain.model import SummaryRecord
from ..utils.gallery_block import parse_gallery_block
from ..utils.transport import HttpTransport


logger = logging.getLogger(__name__)


class DetailFetcher:
    """Turns gallery ids into listing entries, one concurrent fetch per id.

    With ``fail_fast`` (the default) the batch is all-or-nothing: the first
    failing fetch or parse cancels every sibling still in flight and its
    exception propagates unchanged. With ``fail_fast=False`` failed ids are
    logged and dropped, and the surviving entries keep input order.
    """

    def __init__(self, settings: Settings, transport: HttpTransport, *, fail_fast: bool | None = None):
        self.settings = settings
        self.transport = transport
        self.fail_fast = settings.detail_fetch_fail_fast if fail_fast is None else fail_fast
        self.semaphore = asyncio.Semaphore(settings.max_concurrent_requests)

    def block_url(self, gallery_id: int) -> str:
        return self.settings.ltn_url(f"galleryblock/{gallery_id}.html")

    async def fetch_summary(self, gallery_id: int) -> SummaryRecord:
        async with self.semaphore:
            html = await self.transport.get_text(self.block_url(gallery_id))
        return parse_gallery_block(
            html,
            base_url=self.settings.base_url,
            high_quality_thumbs=self.settings.use_high_quality_thumbs,
        )

    async def fetch_summaries(self, ids: list[int]) -> list[SummaryRecord]:
        if not ids:
            return []
        if self.fail_fast:
            return await self._fetch_all_or_nothing(ids)
        return await self._fetch_partial(ids)

    async def _fetch_all_or_nothing(self, ids: list[int]) -> list[SummaryRecord]:
        tasks = [asyncio.create_task(self.fetch_summary(gallery_id)) for gallery_id in ids]
        try:
            done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        except asyncio.CancelledError:
            await self._cancel(tasks)
            raise

        failed = next((task for task in tasks if task in done and not task.cancelled() and task.exception()), None)
        if failed is not None:
            await self._cancel(pending)
            index = tasks.index(failed)
            logger.debug("Gallery block %s failed, cancelled %s sibling fetches", ids[index], len(pending))
            raise failed.exception()

        return [task.result() for task in tasks]

    async def _fetch_partial(self, ids: list[int]) -> list[SummaryRecord]:
        results = await asyncio.gather(*(self.fetch_summary(gallery_id) for gallery_id in ids), return_exceptions=True)
        summaries = []
        for gallery_id, result in zip(ids, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, Exception):
                logger.warning("Dropping gallery %s from page: %s", gallery_id, result)
                continue
            summaries.append(result)
        return summaries

    @staticmethod
    async def _cancel(tasks) -> None:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
