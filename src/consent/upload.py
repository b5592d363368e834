from __future__ import annotations

from consent.config import DEFAULT_FORM_CONFIG, FormConfig

UNSUPPORTED_UPLOAD_MESSAGE = "Please upload a PDF or image file (JPG/PNG)"


def normalise_media_type(media_type: str | None) -> str:
    if not media_type:
        return ""
    return media_type.split(";", 1)[0].strip().lower()


def validate_upload(media_type: str | None, config: FormConfig = DEFAULT_FORM_CONFIG) -> str | None:
    """Return a user-facing error for unsupported uploads, ``None`` if accepted."""
    if normalise_media_type(media_type) not in config.accepted_media_types:
        return UNSUPPORTED_UPLOAD_MESSAGE
    return None


def source_type_for(media_type: str, config: FormConfig = DEFAULT_FORM_CONFIG) -> str:
    return "document" if normalise_media_type(media_type) == config.document_media_type else "image"
