from __future__ import annotations

from functools import lru_cache
from typing import Iterable

from .errors import DuplicateItemError
from .types import ChecklistGroup, ChecklistItem


def _item(item_id: str, label: str, *children: tuple[str, str]) -> ChecklistItem:
    return ChecklistItem(
        id=item_id,
        label=label,
        children=tuple(ChecklistItem(id=child_id, label=child_label) for child_id, child_label in children),
    )


# Walk-around order on the inspection sheet
VISUAL_ITEMS: tuple[ChecklistItem, ...] = (
    _item(
        'V1',
        'Propane',
        ('V1-a', 'Relief Valve'),
        ('V1-b', 'Fuel Level'),
        ('V1-c', 'No Leaks'),
        ('V1-d', 'Safety Straps'),
    ),
    _item('V2', 'Rear Tire (Left)'),
    _item(
        'V3',
        'Engine Compartment',
        ('V3-a', 'Oil'),
        ('V3-b', 'Battery'),
        ('V3-c', 'Radiator'),
        ('V3-d', 'Air Filter'),
        ('V3-e', 'Fan Belt'),
    ),
    _item('V4', 'Overhead Guard'),
    _item('V5', 'Front Tire (Left)'),
    _item('V6', 'Tilt Cylinder'),
    _item('V7', 'Carriage'),
    _item('V8', 'Fork Locking Pin (Left)'),
    _item('V9', 'Fork (Left)', ('V9-a', 'Attachment Applicable')),
    _item('V10', 'Mast'),
    _item('V11', 'Lift Cylinder', ('V11-a', 'Lift Chains')),
    _item('V12', 'Fork (Right)', ('V12-a', 'Attachment Applicable')),
    _item('V13', 'Fork Locking Pin (Right)'),
    _item('V14', 'Carriage'),
    _item('V15', 'Tilt Cylinder'),
    _item('V16', 'Front Tire (Right)'),
    _item('V17', 'Hydraulic Oil'),
    _item('V18', 'Data Plate'),
    _item('V19', 'Seat & Seat Belt'),
    _item('V20', 'Operator Manual'),
    _item('V21', 'Rear Tire (Right)'),
)

OPERATIONAL_ITEMS: tuple[ChecklistItem, ...] = (
    _item('O-A', 'A - Listen for Unusual Noise'),
    _item('O-B', 'B - Check Service & Parking Brake'),
    _item('O-C', 'C - Lifting Control'),
    _item('O-D', 'D - Tilt Control'),
    _item(
        'O-E',
        'E - Forward Driving',
        ('O-E-1', 'Accelerator'),
        ('O-E-2', 'Steering'),
        ('O-E-3', 'Braking'),
    ),
    _item(
        'O-F',
        'F - Reverse Driving',
        ('O-F-1', 'Accelerator'),
        ('O-F-2', 'Steering'),
        ('O-F-3', 'Braking'),
        ('O-F-4', 'Backup Alarm'),
    ),
    _item('O-G', 'G - Lights'),
    _item('O-H', 'H - Horn'),
    _item('O-I', 'I - Gauges'),
    _item('O-J', 'J - Oil Spot on Floor'),
)

GROUP_TITLES: dict[ChecklistGroup, str] = {
    ChecklistGroup.visual: 'Visual Inspection',
    ChecklistGroup.operational: 'Operational Inspection (A-J)',
}


def group_items(group: ChecklistGroup | str) -> tuple[ChecklistItem, ...]:
    group = ChecklistGroup(group)
    if group == ChecklistGroup.visual:
        return VISUAL_ITEMS
    return OPERATIONAL_ITEMS


def flatten_items(items: Iterable[ChecklistItem]) -> list[ChecklistItem]:
    flat: list[ChecklistItem] = []
    for item in items:
        flat.append(item)
        flat.extend(item.children)
    return flat


def _assert_unique_ids(items: Iterable[ChecklistItem]) -> None:
    seen: set[str] = set()
    duplicates: set[str] = set()
    for item in items:
        if item.id in seen:
            duplicates.add(item.id)
        seen.add(item.id)
    if duplicates:
        raise DuplicateItemError(duplicates)


@lru_cache(maxsize=1)
def all_items() -> tuple[ChecklistItem, ...]:
    return tuple(flatten_items(VISUAL_ITEMS + OPERATIONAL_ITEMS))


def all_item_ids() -> list[str]:
    return [item.id for item in all_items()]


def group_item_ids(group: ChecklistGroup | str) -> list[str]:
    return [item.id for item in flatten_items(group_items(group))]


@lru_cache(maxsize=1)
def label_map() -> dict[str, str]:
    return {item.id: item.label for item in all_items()}


@lru_cache(maxsize=1)
def _group_index() -> dict[str, ChecklistGroup]:
    index: dict[str, ChecklistGroup] = {}
    for group in ChecklistGroup:
        for item_id in group_item_ids(group):
            index[item_id] = group
    return index


def group_for_item(item_id: str) -> ChecklistGroup | None:
    return _group_index().get(item_id)


def schema_payload() -> dict[str, list[dict]]:
    return {
        group.value: [item.model_dump(mode='json') for item in group_items(group)]
        for group in ChecklistGroup
    }


_assert_unique_ids(all_items())
