from __future__ import annotations

import logging

import pymupdf as fitz
from reportlab.pdfbase import pdfmetrics


logger = logging.getLogger(__name__)

# PyMuPDF base-14 aliases and their reportlab names
_REPORTLAB_FONT_ALIASES: dict[str, str] = {
    'helv': 'Helvetica',
    'hebo': 'Helvetica-Bold',
    'tiro': 'Times-Roman',
    'cour': 'Courier',
}


def measure_text_width(text: str, *, font_name: str = 'helv', font_size: float = 11.0) -> float:
    text_value = str(text or '')
    if not text_value:
        return 0.0
    size = max(1.0, float(font_size))

    try:
        return float(fitz.get_text_length(text_value, fontname=font_name, fontsize=size))
    except Exception as exc:
        logger.debug('PyMuPDF cannot measure with font %s: %s', font_name, exc)

    reportlab_name = _REPORTLAB_FONT_ALIASES.get(font_name.lower(), font_name)
    try:
        return float(pdfmetrics.stringWidth(text_value, reportlab_name, size))
    except Exception:
        return float(pdfmetrics.stringWidth(text_value, 'Helvetica', size))


def wrap_text(
    text: str,
    *,
    max_width: float,
    font_name: str = 'helv',
    font_size: float = 11.0,
) -> list[str]:
    """Greedy word wrap: fill each line while it still fits ``max_width``.

    A word wider than ``max_width`` on its own is kept whole on a line of its
    own rather than split.
    """
    words = str(text or '').split()
    lines: list[str] = []
    line = ''
    for word in words:
        candidate = f'{line} {word}' if line else word
        if measure_text_width(candidate, font_name=font_name, font_size=font_size) > max_width:
            if line:
                lines.append(line)
            line = word
        else:
            line = candidate
    if line:
        lines.append(line)
    return lines
