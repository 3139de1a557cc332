from __future__ import annotations

from pathlib import Path

import pytest

from truckinspect.config import Settings
from truckinspect.layout import CoordinateRegistry, load_layout
from truckinspect.types import HeaderInfo

from builders import make_template_pdf


@pytest.fixture
def template_bytes() -> bytes:
    return make_template_pdf()


@pytest.fixture
def template_path(tmp_path: Path, template_bytes: bytes) -> Path:
    path = tmp_path / 'template.pdf'
    path.write_bytes(template_bytes)
    return path


@pytest.fixture
def registry() -> CoordinateRegistry:
    return load_layout()


@pytest.fixture
def sample_header() -> HeaderInfo:
    return HeaderInfo.model_validate(
        {
            'date': '2024-05-01',
            'truck': '47',
            'operator': 'J. Doe',
            'startHour': '08:00',
            'endHour': '16:00',
            'fuel': 'Diesel',
        }
    )


@pytest.fixture
def settings(tmp_path: Path, template_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        template_source=str(template_path),
        output_dir=tmp_path / 'out',
        template_timeout_seconds=5.0,
    )
