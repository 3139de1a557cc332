from __future__ import annotations

import asyncio
import time
from pathlib import Path

import httpx
import pytest

from truckinspect.adapters.template_source import load_template, validate_template_bytes
from truckinspect.errors import TemplateLoadError, TemplateNotFoundError, TemplateTimeoutError

from builders import make_template_pdf


URL = 'https://forms.example.com/template.pdf'


def _load(source, **kwargs) -> bytes:
    return asyncio.run(load_template(source, **kwargs))


def test_local_template(template_path: Path, template_bytes: bytes) -> None:
    assert _load(template_path) == template_bytes


def test_local_template_missing(tmp_path: Path) -> None:
    with pytest.raises(TemplateNotFoundError) as excinfo:
        _load(tmp_path / 'template.pdf')
    assert not isinstance(excinfo.value, TemplateLoadError)
    assert 'template.pdf' in str(excinfo.value)


def test_local_template_not_a_pdf(tmp_path: Path) -> None:
    path = tmp_path / 'template.pdf'
    path.write_bytes(b'this is not a pdf document')
    with pytest.raises(TemplateLoadError):
        _load(path)


def test_empty_source() -> None:
    with pytest.raises(TemplateNotFoundError):
        _load('  ')


def test_validate_counts_pages() -> None:
    assert validate_template_bytes(make_template_pdf(3)) == 3
    with pytest.raises(TemplateLoadError):
        validate_template_bytes(b'')


def test_remote_template() -> None:
    payload = make_template_pdf(2)

    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == URL
        return httpx.Response(200, content=payload)

    assert _load(URL, transport=httpx.MockTransport(handler)) == payload


def test_remote_template_not_found() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(404))
    with pytest.raises(TemplateNotFoundError):
        _load(URL, transport=transport)


def test_remote_server_error_is_a_load_error() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(503))
    with pytest.raises(TemplateLoadError) as excinfo:
        _load(URL, transport=transport)
    assert not isinstance(excinfo.value, TemplateNotFoundError)


def test_remote_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout('slow', request=request)

    with pytest.raises(TemplateTimeoutError):
        _load(URL, timeout_seconds=1.0, transport=httpx.MockTransport(handler))


def test_remote_connection_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError('refused', request=request)

    with pytest.raises(TemplateLoadError):
        _load(URL, transport=httpx.MockTransport(handler))


def test_local_read_is_bounded(template_path: Path, monkeypatch) -> None:
    def stalled_read(self) -> bytes:
        time.sleep(1.0)
        return b''

    monkeypatch.setattr(Path, 'read_bytes', stalled_read)
    with pytest.raises(TemplateTimeoutError) as excinfo:
        _load(template_path, timeout_seconds=0.1)
    assert excinfo.value.source == str(template_path)
