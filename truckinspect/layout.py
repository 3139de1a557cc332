from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Mapping

from pydantic import ValidationError

from .errors import LayoutError
from .types import HEADER_FIELDS, LayoutConfig, Placement


logger = logging.getLogger(__name__)

DEFAULT_LAYOUT_PATH = Path(__file__).resolve().parent / 'data' / 'layout.json'


class CoordinateRegistry:
    """Read-only lookup from header field / checklist item id to a page position."""

    def __init__(
        self,
        *,
        header: Mapping[str, Placement] | None = None,
        items: Mapping[str, Placement] | None = None,
    ):
        self._header: dict[str, Placement] = dict(header or {})
        self._items: dict[str, Placement] = dict(items or {})

    @classmethod
    def from_config(cls, config: LayoutConfig) -> CoordinateRegistry:
        return cls(header=config.header, items=config.items)

    def resolve(self, item_id: str) -> Placement | None:
        return self._items.get(item_id)

    def resolve_header(self, field: str) -> Placement | None:
        return self._header.get(field)

    @property
    def item_ids(self) -> list[str]:
        return list(self._items)

    @property
    def header_fields(self) -> list[str]:
        return list(self._header)

    def to_config(self) -> LayoutConfig:
        return LayoutConfig(header=dict(self._header), items=dict(self._items))


def parse_layout(payload: str | bytes | dict) -> LayoutConfig:
    try:
        if isinstance(payload, dict):
            return LayoutConfig.model_validate(payload)
        return LayoutConfig.model_validate_json(payload)
    except ValidationError as exc:
        raise LayoutError(f'invalid layout configuration: {exc}') from exc


def load_layout(path: Path | str | None = None) -> CoordinateRegistry:
    layout_path = Path(path).expanduser() if path else DEFAULT_LAYOUT_PATH
    try:
        raw = layout_path.read_text(encoding='utf-8')
    except OSError as exc:
        raise LayoutError(f'cannot read layout file {layout_path}: {exc}') from exc

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise LayoutError(f'layout file {layout_path} is not valid JSON: {exc}') from exc
    if not isinstance(payload, dict):
        raise LayoutError(f'layout file {layout_path} must contain a JSON object')

    registry = CoordinateRegistry.from_config(parse_layout(payload))
    logger.debug(
        'Loaded layout %s: %d header fields, %d items',
        layout_path,
        len(registry.header_fields),
        len(registry.item_ids),
    )
    return registry


def find_unknown_ids(registry: CoordinateRegistry, item_ids: Iterable[str]) -> dict[str, list[str]]:
    known_items = set(item_ids)
    unknown = {
        'header': [field for field in registry.header_fields if field not in HEADER_FIELDS],
        'items': [item_id for item_id in registry.item_ids if item_id not in known_items],
    }
    for section, ids in unknown.items():
        if ids:
            logger.warning('Layout %s entries do not match any known id: %s', section, ', '.join(ids))
    return unknown
