from __future__ import annotations

import base64
import logging
from typing import Any

import httpx

from consent.config import DEFAULT_FORM_CONFIG, FormConfig
from consent.data_models import ExtractionResult
from consent.response_parsing import ResponseParseError, collect_text, parse_json_object
from consent.upload import normalise_media_type, source_type_for

logger = logging.getLogger(__name__)


class ExtractionError(Exception):
    """The AI endpoint gave nothing usable for this upload."""


class DocumentExtractor:
    """Async client that pulls consent-form fields out of an insurance slip.

    Sends the upload to the Anthropic Messages API as a base64 ``document``
    (PDF) or ``image`` block next to a fixed JSON-only instruction, then
    parses the reply. Every failure mode surfaces as :class:`ExtractionError`.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.anthropic.com",
        api_version: str = "2023-06-01",
        model: str | None = None,
        max_tokens: int | None = None,
        timeout_seconds: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
        config: FormConfig = DEFAULT_FORM_CONFIG,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self.model = model or config.extraction_model
        self.max_tokens = max_tokens or config.extraction_max_tokens
        self.timeout_seconds = timeout_seconds
        self.config = config
        self._transport = transport
        self._enabled = bool(api_key)

    def build_request(self, data: bytes, media_type: str) -> dict[str, Any]:
        declared = normalise_media_type(media_type)
        # The API only knows the canonical JPEG type.
        wire_media_type = "image/jpeg" if declared == "image/jpg" else declared
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {
                            "type": source_type_for(declared, self.config),
                            "source": {
                                "type": "base64",
                                "media_type": wire_media_type,
                                "data": base64.b64encode(data).decode("ascii"),
                            },
                        },
                        {"type": "text", "text": self.config.extraction_prompt},
                    ],
                }
            ],
        }

    async def _post(self, body: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base_url}/v1/messages"
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": self.api_version,
            "content-type": "application/json",
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
                resp = await client.post(url, json=body, headers=headers)
                resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as exc:
            raise ExtractionError(f"extraction endpoint returned {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise ExtractionError(f"extraction request failed: {exc}") from exc
        except ValueError as exc:
            raise ExtractionError("extraction endpoint returned non-JSON body") from exc
        if not isinstance(payload, dict):
            raise ExtractionError("extraction endpoint returned an unexpected payload")
        return payload

    async def extract(self, data: bytes, media_type: str) -> ExtractionResult:
        if not self._enabled:
            raise ExtractionError("extraction_not_configured")

        payload = await self._post(self.build_request(data, media_type))
        content = payload.get("content")
        if not isinstance(content, list) or not content:
            raise ExtractionError("no content received from extraction endpoint")

        text = collect_text(content)
        if not text:
            raise ExtractionError("no text content in extraction reply")

        try:
            parsed = parse_json_object(text)
        except ResponseParseError as exc:
            raise ExtractionError(str(exc)) from exc

        result = ExtractionResult.from_payload(parsed)
        logger.info(
            "Extracted %d of 5 fields from %s upload",
            sum(1 for v in result.as_updates().values() if v),
            media_type,
        )
        return result
