"""
Tencent Cloud machine translation (TMT) provider with TC3-HMAC-SHA256 signing.
"""

import asyncio
import hashlib
import hmac
import json
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from i18nmark_enums import ErrorType, ServiceName
from i18nmark_logger import get_logger
from models.config_model import ServiceConfig
from plugins.base import (
    TranslationProvider, TranslationResult, UsageLimit,
    create_error, error_from_status, split_by_characters, validate_translation_quality,
)

logger = get_logger("plugins.tencent")

HOST = "tmt.tencentcloudapi.com"
SERVICE = "tmt"
VERSION = "2018-03-21"
REGION = "ap-beijing"
ALGORITHM = "TC3-HMAC-SHA256"
SIGNED_HEADERS = "content-type;host"

MAX_CHARS_PER_REQUEST = 5000
BATCH_DELAY = 0.2
CONFIDENCE = 0.9

AUTH_ERROR_PREFIX = "AuthFailure"
RATE_LIMIT_PREFIX = "RequestLimitExceeded"


def _sha256_hex(data: str) -> str:
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def _hmac_sha256(key: bytes, message: str) -> bytes:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def build_authorization(payload: str, timestamp: int, secret_id: str, secret_key: str,
                        host: str = HOST, service: str = SERVICE) -> str:
    """
    Compute the TC3-HMAC-SHA256 Authorization header.

    Args:
        payload: Exact JSON request body that will be sent
        timestamp: Unix seconds, also sent as X-TC-Timestamp
        secret_id: SecretId
        secret_key: SecretKey

    Returns:
        Header value; a pure function of its arguments
    """
    date = datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d")

    canonical_headers = f"content-type:application/json\nhost:{host}\n"
    canonical_request = "\n".join([
        "POST",
        "/",
        "",
        canonical_headers,
        SIGNED_HEADERS,
        _sha256_hex(payload),
    ])

    credential_scope = f"{date}/{service}/tc3_request"
    string_to_sign = "\n".join([
        ALGORITHM,
        str(timestamp),
        credential_scope,
        _sha256_hex(canonical_request),
    ])

    secret_date = _hmac_sha256(f"TC3{secret_key}".encode("utf-8"), date)
    secret_service = _hmac_sha256(secret_date, service)
    secret_signing = _hmac_sha256(secret_service, "tc3_request")
    signature = hmac.new(secret_signing, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()

    return (f"{ALGORITHM} Credential={secret_id}/{credential_scope}, "
            f"SignedHeaders={SIGNED_HEADERS}, Signature={signature}")


def error_type_for_code(code: str) -> ErrorType:
    code = code or ""
    if code.startswith(AUTH_ERROR_PREFIX):
        return ErrorType.AUTH_ERROR
    if code.startswith(RATE_LIMIT_PREFIX):
        return ErrorType.RATE_LIMIT
    return ErrorType.NETWORK_ERROR


class TencentTranslator(TranslationProvider):
    """
    Tencent Cloud TMT.

    `api_key` is the SecretId, `api_secret` the SecretKey.
    """

    name = ServiceName.TENCENT.value
    batch_by_characters = True

    def __init__(self, service_config: ServiceConfig, client: Optional[httpx.AsyncClient] = None,
                 clock=time.time):
        super().__init__(service_config)
        self.host = service_config.endpoint or HOST
        self.region = service_config.region or REGION
        self.batch_delay = float(service_config.options.get("batch_delay", BATCH_DELAY))
        self._client = client
        self._clock = clock

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

    async def _call(self, action: str, payload: Dict[str, Any], text: str = None) -> Dict[str, Any]:
        if not self.is_configured():
            raise create_error(ErrorType.CONFIG_ERROR, "Tencent requires api_key and api_secret", self.name, text)

        timestamp = int(self._clock())
        body = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
        headers = {
            "Authorization": build_authorization(body, timestamp, self.config.api_key,
                                                 self.config.api_secret, host=self.host),
            "Content-Type": "application/json",
            "Host": self.host,
            "X-TC-Action": action,
            "X-TC-Timestamp": str(timestamp),
            "X-TC-Version": VERSION,
            "X-TC-Region": self.region,
        }
        try:
            response = await self.client.post(f"https://{self.host}", content=body.encode("utf-8"), headers=headers)
        except httpx.HTTPError as e:
            raise create_error(ErrorType.NETWORK_ERROR, f"Request failed: {e}", self.name, text)

        if response.status_code != 200:
            raise error_from_status(response.status_code, self.name, text, response.text)

        data = response.json().get("Response") or {}
        error = data.get("Error")
        if error:
            raise create_error(error_type_for_code(error.get("Code")),
                               f"Tencent API Error: {error.get('Message')}", self.name, text, details=error)
        return data

    async def translate(self, text: str, source_lang: str, target_lang: str) -> TranslationResult:
        payload = {"SourceText": text, "Source": source_lang, "Target": target_lang, "ProjectId": 0}
        data = await self._call("TextTranslate", payload, text)

        if not data.get("TargetText"):
            raise create_error(ErrorType.QUALITY_LOW, "Invalid translation response format", self.name, text)
        result = TranslationResult(text, data["TargetText"], CONFIDENCE, self.name)
        error = validate_translation_quality(result)
        if error is not None:
            raise error
        return result

    async def batch_translate(self, texts: List[str], source_lang: str, target_lang: str) -> List[TranslationResult]:
        """TextTranslateBatch requests of at most 5000 characters each."""
        results = []
        batches = split_by_characters(texts, MAX_CHARS_PER_REQUEST)
        for index, batch in enumerate(batches):
            payload = {"SourceTextList": batch, "Source": source_lang, "Target": target_lang, "ProjectId": 0}
            data = await self._call("TextTranslateBatch", payload)
            targets = data.get("TargetTextList") or []
            for position, text in enumerate(batch):
                translated = targets[position] if position < len(targets) else ""
                results.append(TranslationResult(text, translated or text,
                                                 CONFIDENCE if translated else 0.0, self.name))
            if index < len(batches) - 1 and self.batch_delay:
                await asyncio.sleep(self.batch_delay)
        return results

    def supported_languages(self) -> List[str]:
        return ['zh', 'en', 'ja', 'ko', 'fr', 'de', 'es', 'ru', 'th', 'ar', 'pt', 'it']

    def usage_limit(self) -> UsageLimit:
        return UsageLimit(requests_per_second=5, chars_per_day=5_000_000, chars_per_request=MAX_CHARS_PER_REQUEST)
