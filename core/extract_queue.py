"""
Extract Queue

Accumulates entries from many producers (build plugins, watchers) and writes
them through the reconciler in coalesced flushes, then schedules translation
of the keys that were added.
"""

import asyncio
from typing import Dict, Iterable, List, Optional, Set, Tuple

import i18nmark_config as config
from i18nmark_enums import QueueMode
from i18nmark_logger import get_logger
from i18nmark_models import Entry
from models.config_model import I18nConfig
from core.reconciler import write_extract_file

logger = get_logger("core.extract_queue")


class ExtractQueue:
    """
    One accumulator per session, bound to the running event loop.

    Args:
        config: Resolved options
        mode: INTERACTIVE flushes at the end of the current burst of work
            (next loop iteration); PRODUCTION waits a short delay first
        orchestrator: TranslationOrchestrator for newly added keys; no
            translation is scheduled when None
        auto_remove_key: Passed to the reconciler; keep False for partial
            (incremental) runs so keys of unseen files survive
    """

    def __init__(self, config: I18nConfig, mode: QueueMode = QueueMode.INTERACTIVE,
                 orchestrator=None, auto_remove_key: bool = False):
        self.config = config
        self.mode = QueueMode(mode)
        self.orchestrator = orchestrator
        self.auto_remove_key = auto_remove_key

        self._buffer: Dict[Tuple[str, Optional[str]], Entry] = {}
        self._flushing = False
        self._translating = False
        self._flush_handle: Optional[asyncio.Handle] = None
        self._pending_keys: List[str] = []
        self._tasks: Set[asyncio.Task] = set()
        self.added_keys: List[str] = []

    def __len__(self) -> int:
        return len(self._buffer)

    # -------------------------------------------------------------------------
    # Producers
    # -------------------------------------------------------------------------

    def add(self, entries: Iterable[Entry]):
        """Buffer entries (deduplicated by key and file) and schedule a flush."""
        count = 0
        for entry in entries:
            self._buffer[(entry.key, entry.file_path)] = entry
            count += 1
        if count:
            self._schedule_flush()

    def _schedule_flush(self):
        if self._flush_handle is not None:
            return
        loop = asyncio.get_running_loop()
        if self.mode == QueueMode.PRODUCTION:
            self._flush_handle = loop.call_later(config.PRODUCTION_FLUSH_DELAY, self._start_flush)
        else:
            self._flush_handle = loop.call_soon(self._start_flush)

    def _start_flush(self):
        self._flush_handle = None
        self._track(self.flush())

    def _track(self, coro) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    # -------------------------------------------------------------------------
    # Flush
    # -------------------------------------------------------------------------

    async def flush(self) -> List[str]:
        """
        Write the buffered entries through the reconciler.

        A flush requested while another one runs waits with backoff; when the
        wait is exhausted the request is re-scheduled instead of dropped.

        Returns:
            Newly added keys of this flush
        """
        for attempt in range(config.FLUSH_RETRY_LIMIT):
            if not self._flushing:
                break
            await asyncio.sleep(config.FLUSH_RETRY_DELAY * (attempt + 1))
        else:
            logger.debug("Flush still in progress; re-requesting")
            if self._buffer:
                self._schedule_flush()
            return []

        if not self._buffer:
            return []

        self._flushing = True
        entries = list(self._buffer.values())
        self._buffer.clear()
        try:
            # File IO runs in a worker thread; other flush requests wait on the flag meanwhile
            added = await asyncio.to_thread(write_extract_file, entries, self.config,
                                            auto_remove_key=self.auto_remove_key)
        finally:
            self._flushing = False

        logger.debug(f"Flushed {len(entries)} entries, {len(added)} new key(s)")
        if added:
            self.added_keys.extend(added)
            self._schedule_translation(added)
        return added

    # -------------------------------------------------------------------------
    # Translation
    # -------------------------------------------------------------------------

    def _schedule_translation(self, keys: List[str]):
        if self.orchestrator is None:
            return
        self._pending_keys.extend(keys)
        if not self._translating:
            self._translating = True
            self._track(self._translate_pending())

    async def _translate_pending(self):
        try:
            while self._pending_keys:
                keys = list(dict.fromkeys(self._pending_keys))
                self._pending_keys.clear()
                await self.orchestrator.translate_keys(keys)
        finally:
            self._translating = False

    # -------------------------------------------------------------------------
    # Drain
    # -------------------------------------------------------------------------

    async def wait_for_all_operations(self):
        """
        Wait until no flush or translation is pending, including work started
        while waiting.
        """
        while True:
            if self._flush_handle is not None:
                self._flush_handle.cancel()
                self._start_flush()
            if not self._tasks:
                if not self._buffer:
                    return
                self._start_flush()
            await asyncio.gather(*list(self._tasks))
