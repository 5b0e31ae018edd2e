"""Resolve page image URLs by running the site's descrambling scripts.

The site computes image paths in JavaScript from a page's content hash. Two
scripts are involved: ``gg.js`` (rotating per-hash routing tables) and
``common.js`` (the ``url_from_url_from_hash`` helper). Both are fetched
fresh on every call because ``gg.js`` changes frequently.

Evaluation happens in a QuickJS context created for one call and dropped
afterwards. QuickJS without its ``std``/``os`` modules gives the script
plain computation only: no filesystem, network or host objects.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import logging

import anyio
import orjson
import quickjs

from ..config import Settings
from ..domain.errors import ScriptEvaluationError
from ..utils.transport import HttpTransport


logger = logging.getLogger(__name__)

GG_SCRIPT = "gg.js"
COMMON_SCRIPT = "common.js"
GG_START_MARKER = "'use strict';"
COMMON_START_MARKER = "navigator.userAgent);"
COMMON_END_MARKER = "function show_loading()"


def substring_after(text: str, marker: str) -> str:
    """Text after the first ``marker``; the whole text when it is absent."""
    _, found, rest = text.partition(marker)
    return rest if found else text


def substring_before(text: str, marker: str) -> str:
    head, found, _ = text.partition(marker)
    return head if found else text


def trim_gg_script(script: str) -> str:
    return substring_after(script, GG_START_MARKER)


def trim_common_script(script: str) -> str:
    return substring_before(substring_after(script, COMMON_START_MARKER), COMMON_END_MARKER)


def build_invocation(content_hash: str) -> str:
    hash_literal = orjson.dumps(content_hash).decode("utf-8")
    return f"url_from_url_from_hash('', {{'hash':{hash_literal}}}, 'webp', undefined, 'a');"


@contextmanager
def script_sandbox(memory_limit: int, time_limit: float) -> Iterator[quickjs.Context]:
    """A single-use QuickJS context, released on every exit path."""
    context = quickjs.Context()
    context.set_memory_limit(memory_limit)
    context.set_time_limit(time_limit)
    try:
        yield context
    finally:
        context.gc()


def evaluate_descrambler(
    gg_script: str,
    common_script: str,
    invocation: str,
    *,
    memory_limit: int,
    time_limit: float,
) -> str:
    """Load both scripts into a fresh sandbox and evaluate ``invocation``."""
    with script_sandbox(memory_limit, time_limit) as context:
        try:
            context.eval(gg_script)
            context.eval(common_script)
            result = context.eval(invocation)
        except quickjs.JSException as exc:
            raise ScriptEvaluationError(f"Descrambling script failed: {exc}") from exc
        except MemoryError as exc:
            raise ScriptEvaluationError("Descrambling script exceeded its memory limit") from exc

    if not isinstance(result, str) or not result:
        raise ScriptEvaluationError(f"Descrambling script returned {type(result).__name__}, expected a URL string")
    return result


class AssetUrlResolver:
    """Computes the absolute image URL for a page content hash."""

    def __init__(self, settings: Settings, transport: HttpTransport):
        self.settings = settings
        self.transport = transport

    async def fetch_scripts(self) -> tuple[str, str]:
        gg_script = await self.transport.get_text(self.settings.ltn_url(GG_SCRIPT))
        common_script = await self.transport.get_text(self.settings.ltn_url(COMMON_SCRIPT))
        return trim_gg_script(gg_script), trim_common_script(common_script)

    async def resolve_url(self, content_hash: str) -> str:
        gg_script, common_script = await self.fetch_scripts()
        invocation = build_invocation(content_hash)

        # Each call runs in its own worker thread with its own context
        image_url = await anyio.to_thread.run_sync(
            lambda: evaluate_descrambler(
                gg_script,
                common_script,
                invocation,
                memory_limit=self.settings.script_memory_limit_bytes,
                time_limit=self.settings.script_time_limit_seconds,
            )
        )
        logger.debug("Resolved %s -> %s", content_hash, image_url)
        return image_url
