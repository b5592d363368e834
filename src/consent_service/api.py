from __future__ import annotations

import datetime as dt
import uuid
from typing import Any
from urllib.parse import quote

from fastapi import FastAPI, File, HTTPException, Request, Response, UploadFile, status
from pydantic import BaseModel, ConfigDict, Field

from consent.renderer import LetterFonts, LetterRenderer
from consent.upload import validate_upload
from consent_service.extraction import DocumentExtractor
from consent_service.logging_config import configure_logging, correlation_id, new_correlation_id
from consent_service.session import ConsentFormSession
from consent_service.settings import ServiceSettings
from consent_service.storage import FormSessionStore
from consent_service.vin import VinDecoder


# ── Request / Response Models ───────────────────────────────────────

class FormFields(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    full_name: str = Field(alias="fullName")
    address: str
    year: str
    make_model: str = Field(alias="makeModel")
    vin: str
    date: dt.date


class FormUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    full_name: str | None = Field(default=None, alias="fullName")
    address: str | None = None
    year: str | None = None
    make_model: str | None = Field(default=None, alias="makeModel")
    vin: str | None = None
    date: dt.date | None = None


class FormStateResponse(BaseModel):
    form_id: str
    status: str
    extracting: bool
    extraction_complete: bool
    error: str
    file_name: str
    can_export: bool
    export_hint: str
    form: FormFields


class HealthResponse(BaseModel):
    status: str


def _state(session: ConsentFormSession) -> FormStateResponse:
    record = session.record
    return FormStateResponse(
        form_id=session.form_id,
        status=session.status.value,
        extracting=session.extracting,
        extraction_complete=session.extraction_complete,
        error=session.error,
        file_name=session.file_name,
        can_export=session.can_export,
        export_hint=session.export_hint,
        form=FormFields(
            full_name=record.full_name,
            address=record.address,
            year=record.year,
            make_model=record.make_model,
            vin=record.vin,
            date=record.date,
        ),
    )


# ── App Factory ─────────────────────────────────────────────────────

def create_app(
    settings: ServiceSettings | None = None,
    *,
    extractor: DocumentExtractor | None = None,
    vin_decoder: VinDecoder | None = None,
    renderer: LetterRenderer | None = None,
) -> FastAPI:
    settings = settings or ServiceSettings()
    configure_logging(level=settings.log_level, fmt=settings.log_format)

    extractor = extractor or DocumentExtractor(
        api_key=settings.anthropic_api_key,
        base_url=settings.anthropic_base_url,
        api_version=settings.anthropic_version,
        model=settings.extraction_model,
        max_tokens=settings.extraction_max_tokens,
        timeout_seconds=settings.extraction_timeout_seconds,
    )
    vin_decoder = vin_decoder or VinDecoder(
        base_url=settings.nhtsa_base_url,
        timeout_seconds=settings.vin_timeout_seconds,
    )
    renderer = renderer or LetterRenderer(
        fonts=LetterFonts.load(settings.letter_font_path, settings.letter_bold_font_path),
        company_name=settings.letter_company_name,
        recipient=settings.letter_recipient,
    )
    store = FormSessionStore(ttl_seconds=settings.form_session_ttl_seconds)

    app = FastAPI(title="Consent Form Service", version="0.1.0")
    app.state.forms = store

    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next: Any) -> Response:
        cid = request.headers.get("X-Correlation-ID") or new_correlation_id()
        correlation_id.set(cid)
        response = await call_next(request)
        response.headers["X-Correlation-ID"] = cid
        return response

    def _session_or_404(form_id: str) -> ConsentFormSession:
        session = store.get(form_id)
        if session is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Form not found")
        return session

    # ── Health ──────────────────────────────────────────────────────

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    # ── Forms ───────────────────────────────────────────────────────

    @app.post("/forms", response_model=FormStateResponse, status_code=status.HTTP_201_CREATED)
    async def create_form() -> FormStateResponse:
        session = store.add(
            ConsentFormSession(
                extractor=extractor,
                vin_decoder=vin_decoder,
                renderer=renderer,
                form_id=uuid.uuid4().hex,
            )
        )
        return _state(session)

    @app.get("/forms/{form_id}", response_model=FormStateResponse)
    async def get_form(form_id: str) -> FormStateResponse:
        return _state(_session_or_404(form_id))

    @app.post("/forms/{form_id}/upload", response_model=FormStateResponse)
    async def upload_document(form_id: str, file: UploadFile = File(...)) -> FormStateResponse:
        session = _session_or_404(form_id)
        data = b""
        # Unsupported types are reported on the form without reading the body.
        if validate_upload(file.content_type) is None:
            data = await file.read(settings.max_upload_bytes + 1)
            if len(data) > settings.max_upload_bytes:
                raise HTTPException(
                    status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    detail=f"Upload exceeds {settings.max_upload_bytes} bytes",
                )
        await session.upload(file.filename or "", file.content_type, data)
        return _state(session)

    @app.patch("/forms/{form_id}", response_model=FormStateResponse)
    async def update_form(form_id: str, payload: FormUpdateRequest) -> FormStateResponse:
        session = _session_or_404(form_id)
        for name, value in payload.model_dump(exclude_unset=True).items():
            if value is None:
                continue
            await session.update_field(name, value)
        return _state(session)

    @app.get("/forms/{form_id}/letter")
    async def download_letter(form_id: str) -> Response:
        session = _session_or_404(form_id)
        if not session.can_export:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=session.export_hint)
        letter = session.export()
        if letter is None:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=session.error)
        return Response(
            content=letter.content,
            media_type=letter.media_type,
            headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(letter.filename)}"},
        )

    @app.delete("/forms/{form_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def discard_form(form_id: str) -> Response:
        if not store.discard(form_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Form not found")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return app


app = create_app()
