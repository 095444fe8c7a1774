from __future__ import annotations

import io
import re

from docx import Document
from pypdf import PdfReader


TEXT_EXTENSIONS = (".txt", ".md")
SUPPORTED_EXTENSIONS = (".pdf", ".docx") + TEXT_EXTENSIONS


class UnsupportedDocumentError(ValueError):
    pass


def _normalize(text: str) -> str:
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    # collapse excessive spaces
    text = re.sub(r"[ \t]+", " ", text)
    # collapse 3+ newlines into 2
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _extract_pdf_text(file_bytes: bytes) -> str:
    reader = PdfReader(io.BytesIO(file_bytes))
    pages = []
    for p in reader.pages:
        pages.append(p.extract_text() or "")
    return _normalize("\n".join(pages))


def _extract_docx_text(file_bytes: bytes) -> str:
    doc = Document(io.BytesIO(file_bytes))
    paras = [p.text for p in doc.paragraphs if p.text and p.text.strip()]
    return _normalize("\n".join(paras))


def _extract_plain_text(file_bytes: bytes) -> str:
    text = file_bytes.decode("utf-8", errors="replace")
    # a renamed PDF would otherwise come through as binary noise
    if text.startswith("%PDF-"):
        raise ValueError("File looks like a PDF but has a text extension.")
    return _normalize(text)


def is_supported(filename: str) -> bool:
    return filename.lower().endswith(SUPPORTED_EXTENSIONS)


def extract_text(file_bytes: bytes, filename: str) -> str:
    """Extract plain text from an uploaded CV or job description."""
    name = filename.lower()
    if name.endswith(".pdf"):
        text = _extract_pdf_text(file_bytes)
    elif name.endswith(".docx"):
        text = _extract_docx_text(file_bytes)
    elif name.endswith(TEXT_EXTENSIONS):
        text = _extract_plain_text(file_bytes)
    else:
        raise UnsupportedDocumentError(
            f"Unsupported file type. Allowed: {', '.join(SUPPORTED_EXTENSIONS)}"
        )

    if not text:
        raise ValueError("Could not extract any text from the document.")

    return text
