from __future__ import annotations

from typing import Iterable, Iterator, Mapping

from .errors import DuplicateItemError, UnknownItemError
from .types import CheckState, CommentEntry


class InspectionStore:
    """Check state for one checklist group, keyed by item id.

    Ids that were never written read back as unchecked with no comment.
    """

    def __init__(self, group: str, item_ids: Iterable[str] | None = None):
        self.group = group
        self._allowed: frozenset[str] | None = frozenset(item_ids) if item_ids is not None else None
        self._states: dict[str, CheckState] = {}

    def _require_known(self, item_id: str) -> None:
        if self._allowed is not None and item_id not in self._allowed:
            raise UnknownItemError(item_id, self.group)

    def set_checked(self, item_id: str, checked: bool) -> CheckState:
        self._require_known(item_id)
        current = self._states.get(item_id) or CheckState()
        checked = bool(checked)
        state = CheckState(checked=checked, comment=current.comment if checked else '')
        self._states[item_id] = state
        return state.model_copy()

    def set_comment(self, item_id: str, comment: str) -> CheckState:
        self._require_known(item_id)
        current = self._states.get(item_id) or CheckState()
        state = CheckState(checked=current.checked, comment=str(comment or ''))
        self._states[item_id] = state
        return state.model_copy()

    def get(self, item_id: str) -> CheckState:
        state = self._states.get(item_id)
        if state is None:
            return CheckState()
        return state.model_copy()

    def snapshot(self) -> dict[str, CheckState]:
        return {item_id: state.model_copy() for item_id, state in self._states.items()}

    def clear(self) -> None:
        self._states.clear()

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._states

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._states))

    def __len__(self) -> int:
        return len(self._states)


def _as_mapping(value: InspectionStore | Mapping[str, CheckState]) -> dict[str, CheckState]:
    if isinstance(value, InspectionStore):
        return value.snapshot()
    return {item_id: CheckState.model_validate(state) for item_id, state in value.items()}


def merge_states(
    first: InspectionStore | Mapping[str, CheckState],
    second: InspectionStore | Mapping[str, CheckState],
) -> dict[str, CheckState]:
    left = _as_mapping(first)
    right = _as_mapping(second)
    overlap = set(left) & set(right)
    if overlap:
        raise DuplicateItemError(overlap)
    return {**left, **right}


def resolve_checks(checks: Mapping[str, CheckState], item_ids: Iterable[str]) -> dict[str, CheckState]:
    resolved: dict[str, CheckState] = {}
    for item_id in item_ids:
        state = checks.get(item_id)
        if state is None:
            resolved[item_id] = CheckState()
            continue
        resolved[item_id] = CheckState(checked=bool(state.checked), comment=str(state.comment or ''))
    return resolved


def collect_comment_entries(checks: Mapping[str, CheckState], item_ids: Iterable[str]) -> list[CommentEntry]:
    entries: list[CommentEntry] = []
    for item_id in item_ids:
        state = checks.get(item_id)
        if state is None or not state.checked:
            continue
        comment = str(state.comment or '').strip()
        if comment:
            entries.append(CommentEntry(id=item_id, comment=comment))
    return entries
