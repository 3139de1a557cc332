from __future__ import annotations

import json
from pathlib import Path

import pytest

from truckinspect.checklist import all_item_ids
from truckinspect.errors import LayoutError
from truckinspect.layout import CoordinateRegistry, find_unknown_ids, load_layout, parse_layout
from truckinspect.types import HEADER_FIELDS, Placement


def test_default_layout_places_every_item_and_header_field(registry: CoordinateRegistry) -> None:
    for item_id in all_item_ids():
        placement = registry.resolve(item_id)
        assert placement is not None, item_id
        assert placement.page >= 0
    for field in HEADER_FIELDS:
        assert registry.resolve_header(field) is not None, field


def test_default_layout_coordinates(registry: CoordinateRegistry) -> None:
    assert registry.resolve('V1') == Placement(page=0, x=39, y=436)
    assert registry.resolve('O-F-4') == Placement(page=0, x=241, y=315)
    assert registry.resolve_header('fuel') == Placement(page=0, x=283, y=516)


def test_unknown_id_resolves_to_none(registry: CoordinateRegistry) -> None:
    assert registry.resolve('not-an-item') is None
    assert registry.resolve_header('signature') is None


def test_load_custom_layout(tmp_path: Path) -> None:
    path = tmp_path / 'layout.json'
    path.write_text(
        json.dumps({'header': {'date': {'page': 1, 'x': 10, 'y': 20}}, 'items': {'V1': {'x': 5, 'y': 6}}}),
        encoding='utf-8',
    )
    registry = load_layout(path)
    assert registry.resolve_header('date') == Placement(page=1, x=10, y=20)
    assert registry.resolve('V1') == Placement(page=0, x=5, y=6)
    assert registry.resolve('V2') is None


def test_missing_layout_file(tmp_path: Path) -> None:
    with pytest.raises(LayoutError):
        load_layout(tmp_path / 'nope.json')


def test_layout_must_be_json_object(tmp_path: Path) -> None:
    path = tmp_path / 'layout.json'
    path.write_text('[1, 2]', encoding='utf-8')
    with pytest.raises(LayoutError):
        load_layout(path)


def test_negative_page_is_rejected() -> None:
    with pytest.raises(LayoutError):
        parse_layout({'items': {'V1': {'page': -1, 'x': 0, 'y': 0}}})


def test_find_unknown_ids() -> None:
    registry = CoordinateRegistry(
        header={'date': Placement(x=1, y=1), 'shift': Placement(x=2, y=2)},
        items={'V1': Placement(x=1, y=1), 'V99': Placement(x=1, y=1)},
    )
    assert find_unknown_ids(registry, all_item_ids()) == {'header': ['shift'], 'items': ['V99']}
