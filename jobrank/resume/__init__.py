"""
Résumé utilities.

Extracts text from uploaded résumé files and reduces it to the keyword
list stored on the candidate profile.
"""

from .keywords import (  # noqa: F401
    extract_resume_keywords,
    extract_text_from_file,
    resume_keywords_from_file,
)
