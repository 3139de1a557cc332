from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from pathlib import Path

from truckinspect.adapters.template_source import load_template
from truckinspect.checklist import all_item_ids
from truckinspect.config import Settings, get_settings
from truckinspect.errors import ExportInProgressError, ExportWriteError
from truckinspect.layout import CoordinateRegistry, load_layout
from truckinspect.report.overlay_pdf import OverlayOptions, OverlayResult, render_inspection_pdf
from truckinspect.session import InspectionSession
from truckinspect.storage import export_filename, write_bytes_atomic


logger = logging.getLogger(__name__)

_IN_FLIGHT_LOCK = threading.Lock()
_IN_FLIGHT: set[int] = set()


@dataclass
class ExportResult:
    path: Path
    report: OverlayResult

    def to_payload(self) -> dict:
        return {
            'status': 'ok',
            'path': str(self.path),
            **self.report.summary(),
        }


def _claim(session: InspectionSession) -> None:
    with _IN_FLIGHT_LOCK:
        if id(session) in _IN_FLIGHT:
            raise ExportInProgressError('an export for this inspection is already running')
        _IN_FLIGHT.add(id(session))


def _release(session: InspectionSession) -> None:
    with _IN_FLIGHT_LOCK:
        _IN_FLIGHT.discard(id(session))


async def export_inspection(
    session: InspectionSession,
    *,
    settings: Settings | None = None,
    registry: CoordinateRegistry | None = None,
    template_source: str | None = None,
    output_dir: Path | None = None,
) -> ExportResult:
    settings = settings or get_settings()
    _claim(session)
    try:
        source = template_source or settings.template_source
        template_bytes = await load_template(source, timeout_seconds=settings.template_timeout_seconds)

        checks = session.merged_checks()
        registry = registry or load_layout(settings.layout_path)
        report = render_inspection_pdf(
            template_bytes,
            header=session.header,
            checks=checks,
            registry=registry,
            item_ids=all_item_ids(),
            options=OverlayOptions.from_settings(settings),
        )

        path = Path(output_dir or settings.output_dir) / export_filename(session.header.date)
        try:
            write_bytes_atomic(path, report.pdf_bytes)
        except OSError as exc:
            raise ExportWriteError(f'Failed to write inspection PDF {path}: {exc}', path=str(path)) from exc
        logger.info('Wrote inspection PDF %s (%d bytes)', path, len(report.pdf_bytes))
        return ExportResult(path=path, report=report)
    finally:
        _release(session)


def run_export(session: InspectionSession, **kwargs) -> ExportResult:
    return asyncio.run(export_inspection(session, **kwargs))
