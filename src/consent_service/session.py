from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from uuid import uuid4

from consent.data_models import TEXT_FIELDS, FormRecord, FormStatus
from consent.merge import fill_if_present
from consent.renderer import LetterRenderer, export_filename
from consent.upload import validate_upload
from consent_service.extraction import DocumentExtractor, ExtractionError
from consent_service.vin import VinDecoder

logger = logging.getLogger(__name__)

EXTRACTION_FAILED_MESSAGE = (
    "Could not extract information from this file. Please fill the form manually below."
)
EMPTY_UPLOAD_MESSAGE = "The uploaded file is empty"
EXPORT_READY_HINT = "Downloads as JPG image file"
EXPORT_BLOCKED_HINT = "Please enter customer name to continue"


@dataclass(frozen=True)
class RenderedLetter:
    filename: str
    content: bytes
    media_type: str = "image/jpeg"


@dataclass
class ConsentFormSession:
    """One consent form: the record plus the flags the page shows.

    Every step works on the same :class:`FormRecord`. Upload runs the
    validator and then extraction; field edits can trigger VIN enrichment;
    export renders the letter. None of the failure paths raise, each one
    leaves the record editable.
    """

    extractor: DocumentExtractor
    vin_decoder: VinDecoder
    renderer: LetterRenderer
    form_id: str = field(default_factory=lambda: uuid4().hex)
    record: FormRecord = field(default_factory=FormRecord)
    status: FormStatus = FormStatus.IDLE
    extracting: bool = False
    extraction_complete: bool = False
    error: str = ""
    file_name: str = ""

    # ── Upload / extraction ─────────────────────────────────────────

    async def upload(self, file_name: str, media_type: str | None, data: bytes) -> bool:
        """Validate and extract an upload. Returns True when fields were merged."""
        rejection = validate_upload(media_type, self.extractor.config)
        if rejection is None and not data:
            rejection = EMPTY_UPLOAD_MESSAGE
        if rejection is not None:
            logger.info("Rejected upload %r (%s)", file_name, media_type, extra={"form_id": self.form_id})
            self.error = rejection
            return False

        self.file_name = file_name
        self.error = ""
        self.extraction_complete = False
        return await self._extract(data, media_type or "")

    async def _extract(self, data: bytes, media_type: str) -> bool:
        self.extracting = True
        self.status = FormStatus.EXTRACTING
        try:
            result = await self.extractor.extract(data, media_type)
        except ExtractionError as exc:
            logger.warning("Extraction failed: %s", exc, extra={"form_id": self.form_id})
            self.error = EXTRACTION_FAILED_MESSAGE
            self.status = FormStatus.EXTRACTION_FAILED
            return False
        finally:
            self.extracting = False

        fill_if_present(self.record, result.as_updates())
        self.extraction_complete = True
        self.status = FormStatus.EXTRACTED
        return True

    # ── User edits / VIN enrichment ─────────────────────────────────

    async def update_field(self, name: str, value: str | dt.date) -> None:
        if name == "date":
            if not isinstance(value, dt.date):
                value = dt.date.fromisoformat(value)
            self.record.date = value
            return
        if name not in TEXT_FIELDS:
            raise KeyError(name)
        if not isinstance(value, str):
            raise TypeError(f"{name} must be a string")

        setattr(self.record, name, value)
        if name == "vin" and self.vin_decoder.should_lookup(value):
            await self.enrich_vin(value)

    async def enrich_vin(self, vin: str) -> None:
        result = await self.vin_decoder.decode(vin)
        if result is None:
            return
        self.record.vin = result.vin
        fill_if_present(self.record, result.as_updates())

    # ── Export ──────────────────────────────────────────────────────

    @property
    def can_export(self) -> bool:
        return bool(self.record.full_name.strip())

    @property
    def export_hint(self) -> str:
        return EXPORT_READY_HINT if self.can_export else EXPORT_BLOCKED_HINT

    def export(self) -> RenderedLetter | None:
        """Render the letter; ``None`` when export is disabled or rendering failed."""
        if not self.can_export:
            return None
        try:
            content = self.renderer.render(self.record)
        except Exception as exc:
            logger.exception("Letter rendering failed", extra={"form_id": self.form_id})
            self.error = f"Failed to generate image: {exc}"
            return None

        self.error = ""
        self.status = FormStatus.RENDERED
        return RenderedLetter(filename=export_filename(self.record.full_name, self.renderer.config), content=content)
