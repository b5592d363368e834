from __future__ import annotations

import logging

import httpx

from consent.config import DEFAULT_FORM_CONFIG, FormConfig
from consent.data_models import VinLookupResult
from consent.vin_fields import derive_vin_fields

logger = logging.getLogger(__name__)


class VinDecoder:
    """Best-effort NHTSA vPIC lookup for make, model and model year."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
        config: FormConfig = DEFAULT_FORM_CONFIG,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.config = config
        self._transport = transport

    def should_lookup(self, vin: str) -> bool:
        return len(vin) == self.config.vin_length

    async def decode(self, vin: str) -> VinLookupResult | None:
        """Return the decoded fields, or ``None`` when the lookup failed."""
        try:
            url = f"{self.base_url}/DecodeVin/{vin}"
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
                resp = await client.get(url, params={"format": "json"})
                resp.raise_for_status()
            payload = resp.json()
            rows = payload.get("Results")
            if not isinstance(rows, list):
                logger.warning("VIN decode for %s returned no Results list", vin)
                return None
        except Exception as exc:
            logger.warning("VIN decode failed for %s: %s", vin, exc)
            return None

        result = derive_vin_fields(vin, rows, self.config)
        logger.debug(
            "VIN %s decoded",
            vin,
            extra={"extra_data": {"make": result.make, "model": result.model, "year": result.model_year}},
        )
        return result
