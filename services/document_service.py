"""Clinical document ingest for the profile context."""

from __future__ import annotations

import base64
import io
import logging
import mimetypes
import re
import uuid
from dataclasses import dataclass, field
from typing import Any, Mapping

from pypdf import PdfReader

from services.errors import DocumentError


logger = logging.getLogger(__name__)

MAX_DOCUMENT_BYTES = 5 * 1024 * 1024
MAX_PHOTO_BYTES = 2 * 1024 * 1024
MAX_DOCUMENT_CHARS = 8_000
ALLOWED_EXTENSIONS = (".pdf", ".txt", ".doc", ".docx")


@dataclass(frozen=True)
class ClinicalDocument:
    name: str
    size: int
    mime: str
    content: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ClinicalDocument":
        try:
            size = int(payload.get("size") or 0)
        except (TypeError, ValueError):
            size = 0
        return cls(
            name=str(payload.get("name") or "document"),
            size=size,
            mime=str(payload.get("type") or payload.get("mime") or "application/octet-stream"),
            content=str(payload.get("content") or ""),
            id=str(payload.get("id") or uuid.uuid4().hex),
        )

    def asdict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "size": self.size,
            "type": self.mime,
            "content": self.content,
        }


def format_file_size(size: int) -> str:
    if size <= 0:
        return "0 Bytes"
    value = float(size)
    for unit in ("Bytes", "KB", "MB"):
        if value < 1024:
            return f"{value:.2f}".rstrip("0").rstrip(".") + f" {unit}"
        value /= 1024
    return f"{value:.2f}".rstrip("0").rstrip(".") + " GB"


def _normalize_text(text: str) -> str:
    text = (text or "").replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _extract_pdf_text(data: bytes) -> str | None:
    try:
        reader = PdfReader(io.BytesIO(data))
        return "\n\n".join(filter(None, (page.extract_text() for page in reader.pages)))
    except Exception as exc:
        logger.warning("PDF text extraction failed: %s", exc)
        return None


def ingest_document(name: str, data: bytes, mime: str | None = None) -> ClinicalDocument:
    """Turn an uploaded file into a :class:`ClinicalDocument`.

    Raises :class:`DocumentError` for unsupported, empty or oversized files.
    """

    name = name or "document"
    mime = mime or mimetypes.guess_type(name)[0] or "application/octet-stream"
    lowered = name.lower()
    if not lowered.endswith(ALLOWED_EXTENSIONS) and not mime.startswith("text/"):
        raise DocumentError(f'"{name}" is not a supported document type.')
    if not data:
        raise DocumentError(f'"{name}" is empty.')
    if len(data) > MAX_DOCUMENT_BYTES:
        raise DocumentError(f'File "{name}" is too large. Maximum size is 5MB.')

    text: str | None = None
    if mime == "application/pdf" or lowered.endswith(".pdf"):
        text = _extract_pdf_text(data)
    elif mime.startswith("text/") or lowered.endswith(".txt"):
        for encoding in ("utf-8", "utf-16", "latin-1"):
            try:
                text = data.decode(encoding)
                break
            except UnicodeDecodeError:
                continue

    if not text:
        text = f"Document: {name}\nType: {mime}\n\n[Document uploaded]"
    text = _normalize_text(text)
    if len(text) > MAX_DOCUMENT_CHARS:
        text = f"{text[:MAX_DOCUMENT_CHARS]}\n… (truncated)"
    return ClinicalDocument(name=name, size=len(data), mime=mime, content=text)


def photo_data_url(data: bytes, mime: str | None) -> str:
    """Encode a profile photo as a data URL, enforcing the 2MB image limit."""

    if not mime or not mime.startswith("image/"):
        raise DocumentError("Please select an image file.")
    if len(data) > MAX_PHOTO_BYTES:
        raise DocumentError("Image must be smaller than 2MB.")
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime};base64,{encoded}"


__all__ = [
    "ALLOWED_EXTENSIONS",
    "ClinicalDocument",
    "MAX_DOCUMENT_BYTES",
    "format_file_size",
    "ingest_document",
    "photo_data_url",
]
