# -*- coding: utf-8 -*-
"""
Tests for translation providers, their helpers and the registry.
"""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from i18nmark_enums import ErrorType
from i18nmark_exceptions import ProviderNotFoundError, TranslationError
from models.config_model import ServiceConfig
from plugins.base import (
    TranslationResult, error_from_status, split_by_characters, validate_translation_quality,
)
from plugins.built_in.baidu import BaiduTranslator, TOKEN_URL, map_language
from plugins.built_in.dummy_engine import DummyEngine
from plugins.built_in.gemini import GeminiTranslator, parse_batch_response
from plugins.built_in.google_translator import GoogleTranslatePlugin
from plugins.built_in.tencent import TencentTranslator, build_authorization, error_type_for_code
from plugins.registry import ProviderRegistry, get_registry


class TestHelpers:

    def test_status_classification(self):
        assert error_from_status(401, "x").error_type == ErrorType.AUTH_ERROR
        assert error_from_status(403, "x").error_type == ErrorType.AUTH_ERROR
        assert error_from_status(429, "x").error_type == ErrorType.RATE_LIMIT
        assert error_from_status(500, "x").error_type == ErrorType.NETWORK_ERROR

    def test_quality_checks(self):
        assert validate_translation_quality(TranslationResult("你好", "", 0.9, "x")).error_type == ErrorType.QUALITY_LOW
        assert validate_translation_quality(TranslationResult("你好", "你好", 0.0, "x")) is not None
        assert validate_translation_quality(TranslationResult("你好", "你好", 1.0, "x")) is not None
        assert validate_translation_quality(TranslationResult("OK", "OK", 1.0, "x")) is None
        assert validate_translation_quality(TranslationResult("你好{a}", "Hi", 0.9, "x")) is not None
        assert validate_translation_quality(TranslationResult("你好{a}", "Hi {a}", 0.9, "x")) is None

    def test_retryable_types(self):
        assert TranslationError("x", ErrorType.QUALITY_LOW).is_retryable
        assert not TranslationError("x", ErrorType.AUTH_ERROR).is_retryable
        assert not TranslationError("x", ErrorType.CONFIG_ERROR).is_retryable

    def test_error_text(self):
        error = TranslationError("boom", ErrorType.RATE_LIMIT, service="baidu")
        assert str(error) == "baidu: [RATE_LIMIT] boom"

    def test_split_by_characters(self):
        assert split_by_characters(["aa", "bb", "cccccc", "d"], 4) == [["aa", "bb"], ["cccccc"], ["d"]]


class TestRegistry:

    def test_built_ins(self):
        assert get_registry().names() == ["baidu", "gemini", "google", "mock", "tencent"]

    def test_unknown_service(self):
        with pytest.raises(ProviderNotFoundError) as exc:
            ProviderRegistry().create(ServiceConfig(name="deepl"))
        assert exc.value.error_type == ErrorType.CONFIG_ERROR

    def test_duplicate_ignored_unless_replaced(self):
        registry = ProviderRegistry()
        registry.register("mock", DummyEngine)
        registry.register("mock", MagicMock())
        assert isinstance(registry.create(ServiceConfig(name="mock")), DummyEngine)
        registry.register("mock", lambda cfg: "replaced", replace=True)
        assert registry._factories["mock"](None) == "replaced"
        registry.unregister("mock")
        assert not registry.is_supported("mock")


class TestDummyEngine:

    def test_prefix(self):
        engine = DummyEngine(ServiceConfig(name="mock"))
        results = asyncio.run(engine.batch_translate(["你好", "再见"], "zh", "en"))
        assert [r.translated for r in results] == ["[en] 你好", "[en] 再见"]
        assert all(r.is_translated for r in results)

    def test_custom_prefix(self):
        engine = DummyEngine(ServiceConfig(name="mock", options={"prefix": "<{target}>"}))
        result = asyncio.run(engine.translate("你好", "zh", "ja"))
        assert result.translated == "<ja>你好"


class TestTencentSigning:

    PAYLOAD = json.dumps({"SourceText": "你好", "Source": "zh", "Target": "en", "ProjectId": 0},
                         ensure_ascii=False, separators=(",", ":"))

    def test_reference_signature(self):
        """Signature is bit-exact for a fixed payload, timestamp and secret."""
        header = build_authorization(self.PAYLOAD, 1700000000, "AKIDexample", "secretKeyExample")
        assert header == (
            "TC3-HMAC-SHA256 Credential=AKIDexample/2023-11-14/tmt/tc3_request, "
            "SignedHeaders=content-type;host, "
            "Signature=08335af615f69e7cffd8f78eb91d9f06ccb2a471cd6e2ea76551f014d491cb12"
        )

    def test_deterministic(self):
        first = build_authorization(self.PAYLOAD, 1700000000, "id", "key")
        assert first == build_authorization(self.PAYLOAD, 1700000000, "id", "key")
        assert first != build_authorization(self.PAYLOAD, 1700000001, "id", "key")

    def test_error_codes(self):
        assert error_type_for_code("AuthFailure.SignatureExpire") == ErrorType.AUTH_ERROR
        assert error_type_for_code("RequestLimitExceeded") == ErrorType.RATE_LIMIT
        assert error_type_for_code("InternalError") == ErrorType.NETWORK_ERROR

    def test_batch_request(self):
        seen = []

        def handler(request):
            seen.append(request)
            body = json.loads(request.content)
            targets = [f"T:{text}" for text in body["SourceTextList"]]
            return httpx.Response(200, json={"Response": {"TargetTextList": targets}})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        provider = TencentTranslator(ServiceConfig(name="tencent", api_key="id", api_secret="key"),
                                     client=client, clock=lambda: 1700000000)
        results = asyncio.run(provider.batch_translate(["你好", "再见"], "zh", "en"))

        assert [r.translated for r in results] == ["T:你好", "T:再见"]
        assert seen[0].headers["X-TC-Action"] == "TextTranslateBatch"
        assert seen[0].headers["X-TC-Timestamp"] == "1700000000"
        assert seen[0].headers["Authorization"].startswith("TC3-HMAC-SHA256 Credential=id/2023-11-14/")

    def test_api_error(self):
        def handler(request):
            return httpx.Response(200, json={"Response": {"Error": {
                "Code": "AuthFailure.SecretIdNotFound", "Message": "bad id"}}})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        provider = TencentTranslator(ServiceConfig(name="tencent", api_key="id", api_secret="key"), client=client)
        with pytest.raises(TranslationError) as exc:
            asyncio.run(provider.translate("你好", "zh", "en"))
        assert exc.value.error_type == ErrorType.AUTH_ERROR

    def test_missing_credentials(self):
        provider = TencentTranslator(ServiceConfig(name="tencent"))
        assert not provider.is_configured()
        with pytest.raises(TranslationError) as exc:
            asyncio.run(provider.translate("你好", "zh", "en"))
        assert exc.value.error_type == ErrorType.CONFIG_ERROR


class FakeClock:

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestBaidu:

    def _provider(self, handler, clock):
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        config = ServiceConfig(name="baidu", api_key="ak", api_secret="sk", options={"item_delay": 0})
        return BaiduTranslator(config, client=client, clock=clock)

    def test_language_aliases(self):
        assert map_language("ja") == "jp"
        assert map_language("ko") == "kor"
        assert map_language("en") == "en"

    def test_token_refreshed_before_expiry(self):
        token_requests = []

        def handler(request):
            if str(request.url).startswith(TOKEN_URL):
                token_requests.append(request)
                return httpx.Response(200, json={"access_token": f"tok{len(token_requests)}", "expires_in": 3600})
            body = json.loads(request.content)
            assert request.url.params["access_token"] == f"tok{len(token_requests)}"
            return httpx.Response(200, json={"result": {"trans_result": [{"src": body["q"], "dst": "Hello"}]}})

        clock = FakeClock()
        provider = self._provider(handler, clock)

        async def scenario():
            await provider.translate("你好", "zh", "en")
            clock.now += 3600 - 400
            await provider.translate("你好", "zh", "en")
            clock.now += 200
            await provider.translate("你好", "zh", "en")

        asyncio.run(scenario())
        # token lives 3600 s and is renewed within the last 300 s
        assert len(token_requests) == 2

    def test_auth_error_not_swallowed(self):
        def handler(request):
            if str(request.url).startswith(TOKEN_URL):
                return httpx.Response(200, json={"access_token": "tok", "expires_in": 3600})
            return httpx.Response(200, json={"error_code": 52003, "error_msg": "Unauthorized user"})

        provider = self._provider(handler, FakeClock())
        with pytest.raises(TranslationError) as exc:
            asyncio.run(provider.batch_translate(["你好"], "zh", "en"))
        assert exc.value.error_type == ErrorType.AUTH_ERROR

    def test_rate_limited_item_kept_untranslated(self):
        def handler(request):
            if str(request.url).startswith(TOKEN_URL):
                return httpx.Response(200, json={"access_token": "tok", "expires_in": 3600})
            body = json.loads(request.content)
            if body["q"] == "慢":
                return httpx.Response(200, json={"error_code": 54003, "error_msg": "limited"})
            return httpx.Response(200, json={"result": {"trans_result": [{"dst": "Fast"}]}})

        provider = self._provider(handler, FakeClock())
        results = asyncio.run(provider.batch_translate(["快", "慢"], "zh", "en"))
        assert results[0].translated == "Fast"
        assert results[1].confidence == 0.0
        assert results[1].translated == "慢"


class TestGemini:

    def test_parse_strict(self):
        assert parse_batch_response('{"translations": [{"i": 0, "t": "Hello"}, {"i": 1, "t": "Bye"}]}') == {
            0: "Hello", 1: "Bye"}

    def test_parse_fenced(self):
        text = '```json\n{"translations": [{"i": 0, "t": "Hello"}]}\n```'
        assert parse_batch_response(text) == {0: "Hello"}

    def test_wrong_schema_rejected(self):
        assert parse_batch_response('{"translation": "Hello"}') is None
        assert parse_batch_response('"Hello"') is None
        assert parse_batch_response("") is None

    def test_regex_recovery(self):
        text = '{"translations": [{"i": 0, "t": "Say \\"hi\\""}, {"i": 1, "t": "Bye"}'
        assert parse_batch_response(text) == {0: 'Say "hi"', 1: "Bye"}

    def test_batch_with_missing_item(self):
        model = MagicMock()
        model.generate_content_async = AsyncMock(
            return_value=MagicMock(text='{"translations": [{"i": 0, "t": "Hello"}]}'))
        provider = GeminiTranslator(ServiceConfig(name="gemini"), model=model)

        results = asyncio.run(provider.batch_translate(["你好", "再见"], "zh", "en"))

        assert results[0].translated == "Hello"
        assert results[1].confidence == 0.0

    def test_auth_error(self):
        model = MagicMock()
        model.generate_content_async = AsyncMock(side_effect=RuntimeError("API key not valid"))
        provider = GeminiTranslator(ServiceConfig(name="gemini"), model=model)
        with pytest.raises(TranslationError) as exc:
            asyncio.run(provider.batch_translate(["你好"], "zh", "en"))
        assert exc.value.error_type == ErrorType.AUTH_ERROR
        assert model.generate_content_async.await_count == 1

    def test_missing_api_key(self):
        provider = GeminiTranslator(ServiceConfig(name="gemini"))
        assert not provider.is_configured()


class TestGoogle:

    def test_batch(self):
        provider = GoogleTranslatePlugin(ServiceConfig(name="google"))
        with patch("plugins.built_in.google_translator.GoogleTranslator") as translator_cls:
            translator_cls.return_value.translate_batch.return_value = ["Hello", ""]
            results = asyncio.run(provider.batch_translate(["你好", "空"], "zh", "en"))

        translator_cls.assert_called_once_with(source="zh-CN", target="en")
        assert results[0].translated == "Hello"
        assert results[1].confidence == 0.0

    def test_rate_limit_classified(self):
        from deep_translator.exceptions import TooManyRequests
        provider = GoogleTranslatePlugin(ServiceConfig(name="google"))
        with patch("plugins.built_in.google_translator.GoogleTranslator") as translator_cls:
            translator_cls.return_value.translate.side_effect = TooManyRequests()
            with pytest.raises(TranslationError) as exc:
                asyncio.run(provider.translate("你好", "zh", "en"))
        assert exc.value.error_type == ErrorType.RATE_LIMIT
