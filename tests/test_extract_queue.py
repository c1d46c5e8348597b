# -*- coding: utf-8 -*-
"""
Tests for the extract queue: coalescing, pacing and draining.
"""

import asyncio
import threading
import time
from unittest.mock import AsyncMock, MagicMock, patch

from core.extract_queue import ExtractQueue
from core.locale_files import read_json_file
from i18nmark_enums import QueueMode
from i18nmark_models import Entry


def _entry(key, path="src/a.js"):
    return Entry(key=key, text=key, file_path=path)


class TestExtractQueue:

    def test_burst_coalesced_into_one_flush(self, i18n_config):
        """Entries added in one burst reach the reconciler in a single call."""
        queue = ExtractQueue(i18n_config)

        async def scenario():
            with patch("core.extract_queue.write_extract_file", return_value=["甲", "乙"]) as writer:
                queue.add([_entry("甲")])
                queue.add([_entry("乙"), _entry("甲")])
                await queue.wait_for_all_operations()
            return writer

        writer = asyncio.run(scenario())
        assert writer.call_count == 1
        entries = writer.call_args[0][0]
        assert sorted(e.key for e in entries) == ["乙", "甲"]

    def test_deduplicated_by_key_and_file(self, i18n_config):
        queue = ExtractQueue(i18n_config)

        async def scenario():
            queue.add([_entry("甲", "a.js"), _entry("甲", "a.js"), _entry("甲", "b.js")])
            size = len(queue)
            await queue.wait_for_all_operations()
            return size

        assert asyncio.run(scenario()) == 2
        assert read_json_file(i18n_config.file_mapping_path) == {"甲": ["a.js", "b.js"]}

    def test_production_mode_waits(self, i18n_config):
        queue = ExtractQueue(i18n_config, mode=QueueMode.PRODUCTION)

        async def scenario():
            queue.add([_entry("甲")])
            await asyncio.sleep(0)
            flushed_early = i18n_config.file_mapping_path.exists()
            await asyncio.sleep(0.3)
            return flushed_early

        assert asyncio.run(scenario()) is False
        assert i18n_config.file_mapping_path.exists()
        assert queue.added_keys == ["甲"]

    def test_translation_scheduled_for_new_keys(self, i18n_config):
        orchestrator = MagicMock()
        orchestrator.translate_keys = AsyncMock(return_value={})
        queue = ExtractQueue(i18n_config, orchestrator=orchestrator)

        async def scenario():
            queue.add([_entry("甲"), _entry("乙")])
            await queue.wait_for_all_operations()
            queue.add([_entry("甲"), _entry("丙")])
            await queue.wait_for_all_operations()

        asyncio.run(scenario())
        calls = [call.args[0] for call in orchestrator.translate_keys.await_args_list]
        assert calls == [["甲", "乙"], ["丙"]]

    def test_no_translation_without_provider(self, i18n_config):
        queue = ExtractQueue(i18n_config)

        async def scenario():
            queue.add([_entry("甲")])
            await queue.wait_for_all_operations()

        asyncio.run(scenario())
        assert queue.added_keys == ["甲"]

    def test_wait_drains_work_started_while_waiting(self, i18n_config):
        """Entries added by a translation still get flushed before wait returns."""
        queue = ExtractQueue(i18n_config)

        async def translate(keys):
            if "甲" in keys:
                queue.add([_entry("乙")])
            return {}

        orchestrator = MagicMock()
        orchestrator.translate_keys = AsyncMock(side_effect=translate)
        queue.orchestrator = orchestrator

        async def scenario():
            queue.add([_entry("甲")])
            await queue.wait_for_all_operations()

        asyncio.run(scenario())
        assert set(read_json_file(i18n_config.language_file("zh"))) == {"甲", "乙"}
        assert orchestrator.translate_keys.await_count == 2

    def test_end_to_end_with_mock_provider(self, i18n_config, fake_sleep):
        from core.translation_service import TranslationOrchestrator
        orchestrator = TranslationOrchestrator(i18n_config, sleep=fake_sleep)
        queue = ExtractQueue(i18n_config, orchestrator=orchestrator)

        async def scenario():
            queue.add([_entry("你好")])
            await queue.wait_for_all_operations()
            await orchestrator.close()

        asyncio.run(scenario())
        assert read_json_file(i18n_config.language_file("en")) == {"你好": "[en] 你好"}

    def test_concurrent_flushes_serialized(self, i18n_config, monkeypatch):
        """A flush requested during a write waits, re-requests, and never overlaps it."""
        monkeypatch.setattr("i18nmark_config.FLUSH_RETRY_LIMIT", 1)
        lock = threading.Lock()
        active, peak, written = [], [], []

        def slow_writer(entries, cfg, auto_remove_key=False):
            with lock:
                active.append(1)
                peak.append(len(active))
            time.sleep(0.2)
            with lock:
                active.pop()
            written.append(sorted(e.key for e in entries))
            return [e.key for e in entries]

        queue = ExtractQueue(i18n_config)

        async def scenario():
            with patch("core.extract_queue.write_extract_file", side_effect=slow_writer):
                queue.add([_entry("甲")])
                await asyncio.sleep(0.05)
                queue.add([_entry("乙")])
                second = await queue.flush()
                await queue.wait_for_all_operations()
            return second

        assert asyncio.run(scenario()) == []
        assert written == [["甲"], ["乙"]]
        assert max(peak) == 1
        assert queue.added_keys == ["甲", "乙"]
