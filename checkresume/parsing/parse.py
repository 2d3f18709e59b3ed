from __future__ import annotations

import hashlib
import logging
from io import BytesIO

from checkresume.core.errors import ExternalServiceError, ValidationError

from .models import DocumentMetadata, ExtractedResume
from .text import clean_resume_text, extract_resume_sections

logger = logging.getLogger(__name__)

MIN_PDF_TEXT_CHARS = 50
SUPPORTED_EXTENSIONS = ("pdf", "docx", "txt")


def _compute_doc_id(text: str, filename: str) -> str:
    cleaned = clean_resume_text(text).lower()
    seed = cleaned or filename
    digest = hashlib.sha256(seed.encode("utf-8", errors="ignore")).hexdigest()
    return digest[:16]


def _meta_value(info, key: str) -> str | None:
    value = info.get(key) if info else None
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_txt(content: bytes) -> tuple[str, int | None, DocumentMetadata | None, list[str]]:
    return content.decode("utf-8", errors="replace"), None, None, []


def _parse_pdf(content: bytes) -> tuple[str, int | None, DocumentMetadata | None, list[str]]:
    from pypdf import PdfReader

    warnings: list[str] = []
    try:
        reader = PdfReader(BytesIO(content))
        text_parts: list[str] = []
        for page in reader.pages:
            page_text = (page.extract_text() or "").strip()
            if page_text:
                text_parts.append(page_text)
        info = reader.metadata
        metadata = DocumentMetadata(
            title=_meta_value(info, "/Title"),
            author=_meta_value(info, "/Author"),
            creator=_meta_value(info, "/Creator"),
            producer=_meta_value(info, "/Producer"),
        ) if info else None
        pages = len(reader.pages)
    except Exception as exc:  # noqa: BLE001
        logger.warning("pdf_parse_failed: %s", exc)
        raise ExternalServiceError(
            "Failed to process PDF file. Please ensure the file is a valid, readable PDF document.",
            service="PDF_PROCESSING",
        ) from exc

    text = "\n".join(text_parts).strip()
    if len(text) < MIN_PDF_TEXT_CHARS:
        raise ExternalServiceError(
            "Unable to extract readable text from PDF. "
            "Please ensure the PDF is not scanned or password-protected.",
            service="PDF_PROCESSING",
        )
    return text, pages, metadata, warnings


def _parse_docx(content: bytes) -> tuple[str, int | None, DocumentMetadata | None, list[str]]:
    from docx import Document

    warnings: list[str] = []
    try:
        document = Document(BytesIO(content))
    except Exception as exc:  # noqa: BLE001
        logger.warning("docx_parse_failed: %s", exc)
        raise ExternalServiceError("Failed to process Word document.", service="DOCX_PROCESSING") from exc

    paragraphs = [p.text.strip() for p in document.paragraphs if p.text and p.text.strip()]
    if not paragraphs:
        warnings.append("No extractable text found in DOCX.")
    props = document.core_properties
    metadata = DocumentMetadata(title=props.title or None, author=props.author or None)
    return "\n".join(paragraphs), None, metadata, warnings


def extract_text(filename: str, content: bytes) -> ExtractedResume:
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if ext == "txt":
        text, pages, metadata, warnings = _parse_txt(content)
    elif ext == "pdf":
        text, pages, metadata, warnings = _parse_pdf(content)
    elif ext == "docx":
        text, pages, metadata, warnings = _parse_docx(content)
    else:
        raise ValidationError(
            f"Unsupported file type '.{ext}'. Supported types: {', '.join(SUPPORTED_EXTENSIONS)}"
        )

    text = text.strip()
    words = [word for word in text.split() if word]
    logger.info(
        "resume_text_extracted file_type=%s chars=%s words=%s pages=%s",
        ext,
        len(text),
        len(words),
        pages,
    )
    return ExtractedResume(
        doc_id=_compute_doc_id(text=text, filename=filename),
        source_type=ext,
        text=text,
        pages=pages,
        word_count=len(words),
        character_count=len(text),
        metadata=metadata,
        sections=extract_resume_sections(text),
        parsing_warnings=warnings,
    )
