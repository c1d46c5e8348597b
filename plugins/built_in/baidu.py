"""
Baidu Translate provider (texttrans v1 with OAuth client credentials).
"""

import asyncio
import time
from typing import Any, Dict, List, Optional

import httpx

from i18nmark_enums import ErrorType, ServiceName
from i18nmark_exceptions import TranslationError
from i18nmark_logger import get_logger
from models.config_model import ServiceConfig
from plugins.base import (
    TranslationProvider, TranslationResult, UsageLimit,
    create_error, error_from_status, untranslated, validate_translation_quality,
)

logger = get_logger("plugins.baidu")

ENDPOINT = "https://aip.baidubce.com/rpc/2.0/mt/texttrans/v1"
TOKEN_URL = "https://aip.baidubce.com/oauth/2.0/token"

# Refresh the access token this many seconds before it expires
TOKEN_REFRESH_MARGIN = 5 * 60
ITEM_DELAY = 0.1
CONFIDENCE = 0.9

LANGUAGE_CODES = {
    'ja': 'jp',
    'ko': 'kor',
    'fr': 'fra',
    'es': 'spa',
    'ar': 'ara',
}

AUTH_ERROR_CODES = {52001, 52002, 52003}
RATE_LIMIT_ERROR_CODES = {54003, 54005}

ERROR_MESSAGES = {
    52001: "Request timed out",
    52002: "System error",
    52003: "Unauthorized user",
    54000: "Required parameter is empty",
    54001: "Invalid signature",
    54003: "Access frequency limited",
    54004: "Insufficient account balance",
    54005: "Long query requests too frequent",
    58000: "Client IP not allowed",
    58001: "Target language not supported",
    58002: "Service is closed",
    90107: "Certification failed or not effective",
}


def map_language(lang: str) -> str:
    return LANGUAGE_CODES.get(lang, lang)


def error_type_for_code(code) -> ErrorType:
    try:
        code = int(code)
    except (TypeError, ValueError):
        return ErrorType.NETWORK_ERROR
    if code in AUTH_ERROR_CODES:
        return ErrorType.AUTH_ERROR
    if code in RATE_LIMIT_ERROR_CODES:
        return ErrorType.RATE_LIMIT
    return ErrorType.NETWORK_ERROR


class BaiduTranslator(TranslationProvider):
    """
    Baidu machine translation.

    `api_key` / `api_secret` are the application's API Key and Secret Key.
    """

    name = ServiceName.BAIDU.value

    def __init__(self, service_config: ServiceConfig, client: Optional[httpx.AsyncClient] = None,
                 clock=time.time):
        super().__init__(service_config)
        self.endpoint = service_config.endpoint or ENDPOINT
        self.item_delay = float(service_config.options.get("item_delay", ITEM_DELAY))
        self._client = client
        self._clock = clock
        self._access_token: Optional[str] = None
        self._token_expires_at = 0.0

    def is_configured(self) -> bool:
        return bool(self.config.api_key and self.config.api_secret)

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout)
        return self._client

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # -------------------------------------------------------------------------
    # Access token
    # -------------------------------------------------------------------------

    def token_needs_refresh(self) -> bool:
        return not self._access_token or self._clock() >= self._token_expires_at - TOKEN_REFRESH_MARGIN

    async def ensure_access_token(self) -> str:
        if self.token_needs_refresh():
            await self._refresh_access_token()
        return self._access_token

    async def _refresh_access_token(self):
        if not self.is_configured():
            raise create_error(ErrorType.CONFIG_ERROR, "Baidu requires api_key and api_secret", self.name)

        params = {
            "grant_type": "client_credentials",
            "client_id": self.config.api_key,
            "client_secret": self.config.api_secret,
        }
        try:
            response = await self.client.post(
                TOKEN_URL, params=params,
                headers={"Content-Type": "application/x-www-form-urlencoded"})
        except httpx.HTTPError as e:
            raise create_error(ErrorType.NETWORK_ERROR, f"Token request failed: {e}", self.name)

        if response.status_code != 200:
            raise error_from_status(response.status_code, self.name, body=response.text)

        data = response.json()
        if data.get("error"):
            raise create_error(ErrorType.AUTH_ERROR,
                               f"Access token error: {data.get('error_description') or data['error']}",
                               self.name, details=data)

        self._access_token = data["access_token"]
        self._token_expires_at = self._clock() + float(data.get("expires_in", 0))
        logger.info("Baidu access token refreshed")

    # -------------------------------------------------------------------------
    # Translation
    # -------------------------------------------------------------------------

    async def translate(self, text: str, source_lang: str, target_lang: str) -> TranslationResult:
        token = await self.ensure_access_token()
        body = {
            "q": text,
            "from": map_language(source_lang),
            "to": map_language(target_lang),
            "termIds": "",
        }
        try:
            response = await self.client.post(self.endpoint, params={"access_token": token}, json=body)
        except httpx.HTTPError as e:
            raise create_error(ErrorType.NETWORK_ERROR, f"Request failed: {e}", self.name, text)

        if response.status_code != 200:
            raise error_from_status(response.status_code, self.name, text, response.text)

        logger.debug(f"[Baidu] Translating \"{text}\" from {source_lang} to {target_lang}")
        return self._parse_response(response.json(), text)

    def _parse_response(self, data: Dict[str, Any], text: str) -> TranslationResult:
        if data.get("error_code") or data.get("error_msg"):
            code = data.get("error_code")
            try:
                message = data.get("error_msg") or ERROR_MESSAGES.get(int(code), f"Unknown error {code}")
            except (TypeError, ValueError):
                message = f"Unknown error {code}"
            raise create_error(error_type_for_code(code), message, self.name, text, details=data)

        items = (data.get("result") or {}).get("trans_result") or data.get("trans_result")
        if not items:
            raise create_error(ErrorType.NETWORK_ERROR, "Unexpected response format", self.name, text, details=data)

        result = TranslationResult(original=text, translated=items[0].get("dst", ""),
                                   confidence=CONFIDENCE, service=self.name)
        error = validate_translation_quality(result)
        if error is not None:
            raise error
        return result

    async def batch_translate(self, texts: List[str], source_lang: str, target_lang: str) -> List[TranslationResult]:
        """One request per text (the API has no batch form), paced by `item_delay`."""
        results = []
        for index, text in enumerate(texts):
            try:
                results.append(await self.translate(text, source_lang, target_lang))
            except TranslationError as e:
                if not e.is_retryable:
                    raise
                logger.warning(f"[Baidu] {e}")
                results.append(untranslated(text, self.name))
            if index < len(texts) - 1 and self.item_delay:
                await asyncio.sleep(self.item_delay)
        return results

    def supported_languages(self) -> List[str]:
        return ['zh', 'en', 'ja', 'ko', 'fr', 'de', 'es', 'ru', 'th', 'ar']

    def usage_limit(self) -> UsageLimit:
        return UsageLimit(requests_per_second=10, chars_per_day=1_000_000, chars_per_request=6000)
