"""
Résumé keyword extraction.

Candidates upload a résumé; the most frequent meaningful words in it
become the ``keywords`` of their :class:`jobrank.schema.Profile` and feed
both ranking paths.  Text is pulled out of PDF files with pdfplumber and
out of Word files with python‑docx.
"""

from __future__ import annotations

import logging
import os
import re
from collections import Counter
from typing import List, Optional

import docx  # type: ignore
import pdfplumber  # type: ignore
from docx.opc.exceptions import PackageNotFoundError  # type: ignore
from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS  # type: ignore

from ..errors import DataFileError

logger = logging.getLogger(__name__)

DEFAULT_KEYWORD_LIMIT = 20
MIN_RESUME_KEYWORD_LENGTH = 4

_WORD = re.compile(r"\w+")
_ALPHA = re.compile(r"^[a-z]+$")


def extract_text_from_file(file_path: str) -> str:
    """Extract text from a résumé file.

    For plain text files the contents are read as UTF‑8.  PDF files are
    read page by page with ``pdfplumber`` and ``.docx`` files paragraph
    by paragraph with ``python-docx``.  Legacy binary ``.doc`` files are
    not readable and yield no text.

    Args:
        file_path: Path to the résumé file.

    Returns:
        A single string containing the extracted text.

    Raises:
        FileNotFoundError: If the file does not exist.
        DataFileError: If a ``.docx`` file is not a Word document.
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"Resume file not found: {file_path}")
    ext = os.path.splitext(file_path)[1].lower()
    if ext == ".pdf":
        text = ""
        with pdfplumber.open(file_path) as pdf:
            for page in pdf.pages:
                page_text = page.extract_text() or ""
                text += page_text + "\n"
        return text
    if ext == ".doc":
        logger.warning("Legacy .doc files are not supported; no text extracted from %s", file_path)
        return ""
    if ext == ".docx":
        try:
            document = docx.Document(file_path)
        except PackageNotFoundError as exc:
            raise DataFileError(f"Cannot read Word document {file_path}: {exc}") from exc
        return "\n".join(p.text for p in document.paragraphs)
    with open(file_path, "r", encoding="utf-8", errors="ignore") as f:
        return f.read()


def extract_resume_keywords(text: Optional[str], limit: int = DEFAULT_KEYWORD_LIMIT) -> List[str]:
    """Return up to ``limit`` keywords of ``text``, most frequent first.

    Only alphabetic words of four or more letters that are not English
    stop words count.  Ties keep the order of first appearance.
    """
    if not text:
        return []
    tokens = [
        token
        for token in _WORD.findall(text.lower())
        if len(token) >= MIN_RESUME_KEYWORD_LENGTH
        and _ALPHA.match(token)
        and token not in ENGLISH_STOP_WORDS
    ]
    counts = Counter(tokens)
    return [word for word, _ in counts.most_common(max(limit, 0))]


def resume_keywords_from_file(file_path: str, limit: int = DEFAULT_KEYWORD_LIMIT) -> List[str]:
    keywords = extract_resume_keywords(extract_text_from_file(file_path), limit)
    logger.info("Extracted %d keywords from %s", len(keywords), file_path)
    return keywords
