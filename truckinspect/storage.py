from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any


def export_filename(inspection_date: date | str, *, extension: str = 'pdf') -> str:
    if isinstance(inspection_date, date):
        token = inspection_date.isoformat()
    else:
        token = str(inspection_date or '').strip() or 'undated'
    return f'truck-inspection-{token}.{extension.lstrip(".")}'


def write_bytes_atomic(path: Path, content: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + '.tmp')
    try:
        tmp.write_bytes(content)
        tmp.replace(path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


def read_json(path: Path) -> dict[str, Any]:
    return json.loads(path.read_text(encoding='utf-8'))
