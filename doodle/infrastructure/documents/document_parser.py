import io
import logging
import os
import re
from typing import List

import PyPDF2
from docx import Document as DocxDocument

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOC_MIME = "application/msword"
DEFAULT_MIME = "application/octet-stream"

ALLOWED_MIME_TYPES = {PDF_MIME, DOCX_MIME, DOC_MIME}

_EXTENSION_MIME = {
    ".pdf": PDF_MIME,
    ".docx": DOCX_MIME,
    ".doc": DOC_MIME,
}

_SENTENCE_SPLIT = re.compile(r"[.!?]+")


def mime_type_for(file_name: str) -> str:
    ext = os.path.splitext(file_name or "")[1].lower()
    return _EXTENSION_MIME.get(ext, DEFAULT_MIME)


def extract_text_from_pdf(content: bytes) -> str:
    try:
        reader = PyPDF2.PdfReader(io.BytesIO(content))
        text = ""
        for page in reader.pages:
            text += (page.extract_text() or "") + "\n"
        return text
    except Exception as e:
        logger.error(f"Error parsing PDF: {e}", exc_info=True)
        raise ValueError("Failed to parse PDF file") from e


def extract_text_from_docx(content: bytes) -> str:
    try:
        doc = DocxDocument(io.BytesIO(content))
        text = ""
        for paragraph in doc.paragraphs:
            text += paragraph.text + "\n"
        return text
    except Exception as e:
        logger.error(f"Error parsing DOCX: {e}", exc_info=True)
        raise ValueError("Failed to parse DOCX file") from e


def parse_document(content: bytes, mime_type: str) -> str:
    """Extract raw text from a PDF or Word upload."""
    if mime_type == PDF_MIME:
        return extract_text_from_pdf(content)
    if mime_type in (DOCX_MIME, DOC_MIME):
        return extract_text_from_docx(content)
    raise ValueError("Unsupported file type. Only PDF and DOCX are supported.")


def chunk_text(text: str, chunk_size: int = 1000) -> List[str]:
    """
    Split text into sentence-aligned chunks of roughly ``chunk_size`` characters.

    Sentences are never broken; a single sentence longer than ``chunk_size``
    becomes its own chunk.
    """
    chunks: List[str] = []
    current = ""

    for sentence in _SENTENCE_SPLIT.split(text or ""):
        if not sentence.strip():
            continue
        if len(current + sentence) > chunk_size and current:
            chunks.append(current.strip())
            current = sentence + ". "
        else:
            current += sentence + ". "

    if current.strip():
        chunks.append(current.strip())

    return chunks
