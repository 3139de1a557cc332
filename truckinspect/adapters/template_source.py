from __future__ import annotations

import asyncio
import logging
from io import BytesIO
from pathlib import Path

import httpx
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from truckinspect.errors import TemplateLoadError, TemplateNotFoundError, TemplateTimeoutError


logger = logging.getLogger(__name__)


def _is_remote(source: str) -> bool:
    token = source.strip().lower()
    return token.startswith('http://') or token.startswith('https://')


async def _fetch_remote(
    url: str,
    *,
    timeout_seconds: float,
    transport: httpx.AsyncBaseTransport | None = None,
) -> bytes:
    try:
        async with httpx.AsyncClient(timeout=timeout_seconds, transport=transport, follow_redirects=True) as client:
            response = await client.get(url)
    except httpx.TimeoutException as exc:
        raise TemplateTimeoutError(
            f'Timed out after {timeout_seconds:g}s fetching template {url}',
            source=url,
        ) from exc
    except httpx.HTTPError as exc:
        raise TemplateLoadError(f'Failed to fetch template {url}: {exc}', source=url) from exc

    if response.status_code == 404:
        raise TemplateNotFoundError(f'Template not found at {url}', source=url)
    if response.status_code >= 400:
        raise TemplateLoadError(
            f'Template fetch failed ({response.status_code}) for {url}',
            source=url,
        )
    return response.content


async def _read_local(path: Path, *, timeout_seconds: float) -> bytes:
    if not path.is_file():
        raise TemplateNotFoundError(
            f'{path} not found. Place the inspection template PDF there or set TEMPLATE_SOURCE.',
            source=str(path),
        )
    try:
        return await asyncio.wait_for(asyncio.to_thread(path.read_bytes), timeout=timeout_seconds)
    except asyncio.TimeoutError as exc:
        raise TemplateTimeoutError(
            f'Timed out after {timeout_seconds:g}s reading template {path}',
            source=str(path),
        ) from exc
    except OSError as exc:
        raise TemplateLoadError(f'Failed to read template {path}: {exc}', source=str(path)) from exc


def validate_template_bytes(data: bytes, *, source: str | None = None) -> int:
    label = source or 'template'
    if not data:
        raise TemplateLoadError(f'{label} is empty', source=source)
    try:
        reader = PdfReader(BytesIO(data))
        if reader.is_encrypted:
            try:
                reader.decrypt('')
            except Exception as exc:
                raise TemplateLoadError(f'{label} is encrypted', source=source) from exc
        page_count = len(reader.pages)
    except TemplateLoadError:
        raise
    except (PyPdfError, ValueError, OSError) as exc:
        raise TemplateLoadError(f'{label} is not a readable PDF: {exc}', source=source) from exc

    if page_count < 1:
        raise TemplateLoadError(f'{label} has no pages', source=source)
    return page_count


async def load_template(
    source: str | Path,
    *,
    timeout_seconds: float = 15.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> bytes:
    timeout_seconds = max(0.1, float(timeout_seconds))
    token = str(source or '').strip()
    if not token:
        raise TemplateNotFoundError('No template source configured', source=None)

    if _is_remote(token):
        data = await _fetch_remote(token, timeout_seconds=timeout_seconds, transport=transport)
    else:
        data = await _read_local(Path(token).expanduser(), timeout_seconds=timeout_seconds)

    page_count = validate_template_bytes(data, source=token)
    logger.debug('Loaded template %s (%d bytes, %d pages)', token, len(data), page_count)
    return data
