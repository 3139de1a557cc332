from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

import pymupdf as fitz
from reportlab.lib.pagesizes import A4

from truckinspect.checklist import all_item_ids
from truckinspect.errors import TemplateLoadError
from truckinspect.layout import CoordinateRegistry
from truckinspect.report.text_wrap import wrap_text
from truckinspect.state import collect_comment_entries, resolve_checks
from truckinspect.types import (
    HEADER_FIELDS,
    CheckState,
    CommentEntry,
    HeaderInfo,
    MarkKind,
    Placement,
)


logger = logging.getLogger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = A4

COMMENTS_TITLE = 'Comments'
COMMENTS_CONTINUED_TITLE = 'Comments (cont.)'
COMMENTS_TITLE_SIZE = 18.0
COMMENTS_CONTINUED_TITLE_SIZE = 14.0
COMMENTS_HEADING_SIZE = 12.0
COMMENTS_BODY_SIZE = 11.0
COMMENTS_LEFT_X = 40.0
COMMENTS_BODY_X = 60.0
COMMENTS_TITLE_Y = 800.0
COMMENTS_FIRST_ENTRY_Y = 770.0
COMMENTS_MAX_LINE_WIDTH = 515.0
COMMENTS_BOTTOM_MARGIN = 60.0
COMMENTS_LINE_HEIGHT = 14.0

BLACK = (0.0, 0.0, 0.0)


@dataclass(frozen=True)
class OverlayOptions:
    font_name: str = 'helv'
    header_font_size: float = 10.0
    mark_size: float = 10.0
    mark_line_width: float = 1.2
    color: tuple[float, float, float] = BLACK

    @classmethod
    def from_settings(cls, settings: Any) -> OverlayOptions:
        return cls(
            font_name=str(settings.pdf_font_name or 'helv'),
            header_font_size=float(settings.header_font_size),
            mark_size=float(settings.mark_size),
            mark_line_width=float(settings.mark_line_width),
        )


@dataclass(frozen=True)
class DrawnText:
    name: str
    text: str
    page: int
    x: float
    y: float


@dataclass(frozen=True)
class DrawnMark:
    item_id: str
    kind: MarkKind
    page: int
    x: float
    y: float


@dataclass
class OverlayResult:
    pdf_bytes: bytes
    template_page_count: int
    page_count: int
    header_fields: list[DrawnText] = field(default_factory=list)
    marks: list[DrawnMark] = field(default_factory=list)
    comment_entries: list[CommentEntry] = field(default_factory=list)
    comment_pages: int = 0

    def summary(self) -> dict[str, Any]:
        return {
            'pages': self.page_count,
            'template_pages': self.template_page_count,
            'comment_pages': self.comment_pages,
            'header_fields': [item.name for item in self.header_fields],
            'marks': len(self.marks),
            'issues': [mark.item_id for mark in self.marks if mark.kind == MarkKind.issue],
            'comments': len(self.comment_entries),
        }


def _to_page_point(page, x: float, y: float):
    # Layout coordinates are PDF user space; map them through the page's rotation and CropBox.
    return fitz.Point(float(x), float(y)) * page.transformation_matrix


def _resolve_font_name(font_name: str) -> str:
    token = str(font_name or '').strip() or 'helv'
    try:
        fitz.get_text_length('x', fontname=token, fontsize=10)
        return token
    except Exception as exc:
        logger.warning('Font %s unavailable for overlay, falling back to helv: %s', token, exc)
        return 'helv'


def _open_template(template_bytes: bytes):
    if not template_bytes:
        raise TemplateLoadError('template is empty')
    try:
        doc = fitz.open(stream=template_bytes, filetype='pdf')
    except Exception as exc:
        raise TemplateLoadError(f'template is not a readable PDF: {exc}') from exc

    if doc.is_encrypted:
        authenticated = False
        try:
            authenticated = bool(doc.authenticate(''))
        except Exception:
            authenticated = False
        if not authenticated:
            doc.close()
            raise TemplateLoadError('template is encrypted')
    if doc.page_count < 1:
        doc.close()
        raise TemplateLoadError('template has no pages')
    return doc


def _page_for(doc, placement: Placement, *, target: str):
    if placement.page >= doc.page_count:
        logger.debug(
            'Skip %s: placement page %d beyond template page count %d',
            target,
            placement.page,
            doc.page_count,
        )
        return None
    return doc.load_page(placement.page)


def _mark_segments(
    x: float,
    y: float,
    size: float,
    kind: MarkKind,
) -> list[tuple[tuple[float, float], tuple[float, float]]]:
    if kind == MarkKind.ok:
        return [
            ((x, y + size * 0.4), (x + size * 0.35, y)),
            ((x + size * 0.35, y), (x + size, y + size)),
        ]
    return [
        ((x, y), (x + size, y + size)),
        ((x, y + size), (x + size, y)),
    ]


def _draw_mark(page, placement: Placement, kind: MarkKind, options: OverlayOptions) -> None:
    shape = page.new_shape()
    for start, end in _mark_segments(placement.x, placement.y, options.mark_size, kind):
        shape.draw_line(_to_page_point(page, *start), _to_page_point(page, *end))
    shape.finish(color=options.color, width=options.mark_line_width, closePath=False)
    shape.commit(overlay=True)


def _draw_header(
    doc,
    header: HeaderInfo,
    registry: CoordinateRegistry,
    *,
    font_name: str,
    options: OverlayOptions,
) -> list[DrawnText]:
    drawn: list[DrawnText] = []
    for field_name in HEADER_FIELDS:
        placement = registry.resolve_header(field_name)
        if placement is None:
            continue
        text = header.display_value(field_name)
        if not text:
            continue
        page = _page_for(doc, placement, target=f'header field {field_name}')
        if page is None:
            continue
        page.insert_text(
            _to_page_point(page, placement.x, placement.y),
            text,
            fontsize=options.header_font_size,
            fontname=font_name,
            color=options.color,
            overlay=True,
        )
        drawn.append(DrawnText(name=field_name, text=text, page=placement.page, x=placement.x, y=placement.y))
    return drawn


def _draw_marks(
    doc,
    checks: Mapping[str, CheckState],
    registry: CoordinateRegistry,
    item_ids: Iterable[str],
    *,
    options: OverlayOptions,
) -> list[DrawnMark]:
    drawn: list[DrawnMark] = []
    for item_id in item_ids:
        placement = registry.resolve(item_id)
        if placement is None:
            continue
        page = _page_for(doc, placement, target=f'item {item_id}')
        if page is None:
            continue
        # Checked means an issue was found; unchecked items passed.
        kind = MarkKind.issue if checks[item_id].checked else MarkKind.ok
        _draw_mark(page, placement, kind, options)
        drawn.append(DrawnMark(item_id=item_id, kind=kind, page=placement.page, x=placement.x, y=placement.y))
    return drawn


@dataclass
class _CommentFlow:
    doc: Any
    font_name: str
    color: tuple[float, float, float]
    page: Any = None
    cursor_y: float = 0.0
    pages_added: int = 0

    def start(self) -> None:
        self._add_page(COMMENTS_TITLE, COMMENTS_TITLE_SIZE)
        self.cursor_y = COMMENTS_FIRST_ENTRY_Y

    def _add_page(self, title: str, title_size: float) -> None:
        self.page = self.doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        self.pages_added += 1
        self._draw(title, x=COMMENTS_LEFT_X, y=COMMENTS_TITLE_Y, size=title_size)

    def _ensure_room(self, needed: float = 0.0) -> None:
        if self.cursor_y - needed >= COMMENTS_BOTTOM_MARGIN:
            return
        self._add_page(COMMENTS_CONTINUED_TITLE, COMMENTS_CONTINUED_TITLE_SIZE)
        self.cursor_y = COMMENTS_TITLE_Y - COMMENTS_LINE_HEIGHT * 2

    def _draw(self, text: str, *, x: float, y: float, size: float) -> None:
        self.page.insert_text(
            _to_page_point(self.page, x, y),
            text,
            fontsize=size,
            fontname=self.font_name,
            color=self.color,
            overlay=True,
        )

    def write_entry(self, number: int, entry: CommentEntry) -> None:
        lines = wrap_text(
            entry.comment,
            max_width=COMMENTS_MAX_LINE_WIDTH,
            font_name=self.font_name,
            font_size=COMMENTS_BODY_SIZE,
        )
        # A heading stays on the same page as its first body line.
        self._ensure_room(COMMENTS_LINE_HEIGHT + 2 if lines else 0.0)
        self._draw(f'{number}. {entry.id}', x=COMMENTS_LEFT_X, y=self.cursor_y, size=COMMENTS_HEADING_SIZE)
        self.cursor_y -= COMMENTS_LINE_HEIGHT + 2

        for line in lines:
            self._ensure_room()
            self._draw(line, x=COMMENTS_BODY_X, y=self.cursor_y, size=COMMENTS_BODY_SIZE)
            self.cursor_y -= COMMENTS_LINE_HEIGHT
        self.cursor_y -= COMMENTS_LINE_HEIGHT


def _append_comment_pages(
    doc,
    entries: list[CommentEntry],
    *,
    font_name: str,
    options: OverlayOptions,
) -> int:
    if not entries:
        return 0
    flow = _CommentFlow(doc=doc, font_name=font_name, color=options.color)
    flow.start()
    for number, entry in enumerate(entries, start=1):
        flow.write_entry(number, entry)
    return flow.pages_added


def render_inspection_pdf(
    template_bytes: bytes,
    *,
    header: HeaderInfo,
    checks: Mapping[str, CheckState],
    registry: CoordinateRegistry,
    item_ids: Iterable[str] | None = None,
    options: OverlayOptions | None = None,
) -> OverlayResult:
    options = options or OverlayOptions()
    ordered_ids = list(item_ids) if item_ids is not None else all_item_ids()
    resolved = resolve_checks(checks, ordered_ids)
    entries = collect_comment_entries(resolved, ordered_ids)

    doc = _open_template(template_bytes)
    try:
        template_page_count = doc.page_count
        font_name = _resolve_font_name(options.font_name)

        header_fields = _draw_header(doc, header, registry, font_name=font_name, options=options)
        marks = _draw_marks(doc, resolved, registry, ordered_ids, options=options)
        comment_pages = _append_comment_pages(doc, entries, font_name=font_name, options=options)

        page_count = doc.page_count
        pdf_bytes = doc.tobytes(garbage=3, deflate=True)
    finally:
        doc.close()

    logger.info(
        'Rendered inspection PDF: %d header fields, %d marks, %d comment page(s)',
        len(header_fields),
        len(marks),
        comment_pages,
    )
    return OverlayResult(
        pdf_bytes=pdf_bytes,
        template_page_count=template_page_count,
        page_count=page_count,
        header_fields=header_fields,
        marks=marks,
        comment_entries=entries,
        comment_pages=comment_pages,
    )
