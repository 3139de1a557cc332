from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .checklist import (
    GROUP_TITLES,
    all_item_ids,
    flatten_items,
    group_for_item,
    group_item_ids,
    group_items,
    label_map,
)
from .errors import UnknownItemError
from .state import InspectionStore, collect_comment_entries, merge_states
from .types import HEADER_FIELDS, CheckState, ChecklistGroup, HeaderInfo, WizardStep


@dataclass
class ReviewLine:
    item_id: str
    label: str
    comment: str

    def render(self) -> str:
        if self.comment:
            return f'{self.label} — {self.comment}'
        return self.label


@dataclass
class ReviewSummary:
    header: dict[str, str]
    issues: dict[str, list[ReviewLine]] = field(default_factory=dict)
    has_comments: bool = False

    @property
    def comments_notice(self) -> str:
        if self.has_comments:
            return 'Comments page will be added to the PDF.'
        return 'No comments added.'

    def to_payload(self) -> dict[str, Any]:
        return {
            'header': dict(self.header),
            'issues': {
                group: [{'id': line.item_id, 'text': line.render()} for line in lines]
                for group, lines in self.issues.items()
            },
            'has_comments': self.has_comments,
            'notice': self.comments_notice,
        }


class InspectionSession:
    """One pass through the inspection wizard: header, visual, operational, review."""

    def __init__(self, header: HeaderInfo | None = None):
        self.header = header or HeaderInfo()
        self.visual = InspectionStore(ChecklistGroup.visual.value, group_item_ids(ChecklistGroup.visual))
        self.operational = InspectionStore(
            ChecklistGroup.operational.value,
            group_item_ids(ChecklistGroup.operational),
        )
        self.step = WizardStep.HEADER

    @property
    def total_steps(self) -> int:
        return len(WizardStep)

    def next_step(self) -> WizardStep:
        self.step = WizardStep(min(int(self.step) + 1, len(WizardStep) - 1))
        return self.step

    def previous_step(self) -> WizardStep:
        self.step = WizardStep(max(int(self.step) - 1, 0))
        return self.step

    def update_header(self, **fields: Any) -> HeaderInfo:
        aliases = {'startHour': 'start_hour', 'endHour': 'end_hour'}
        for key, value in fields.items():
            name = aliases.get(key, key)
            if name not in HEADER_FIELDS:
                raise KeyError(f'unknown header field: {key}')
            setattr(self.header, name, value)
        return self.header

    def store_for(self, item_id: str) -> InspectionStore:
        group = group_for_item(item_id)
        if group is None:
            raise UnknownItemError(item_id)
        if group == ChecklistGroup.visual:
            return self.visual
        return self.operational

    def set_checked(self, item_id: str, checked: bool) -> CheckState:
        return self.store_for(item_id).set_checked(item_id, checked)

    def set_comment(self, item_id: str, comment: str) -> CheckState:
        return self.store_for(item_id).set_comment(item_id, comment)

    def merged_checks(self) -> dict[str, CheckState]:
        return merge_states(self.visual, self.operational)

    def has_comments(self) -> bool:
        return bool(collect_comment_entries(self.merged_checks(), all_item_ids()))

    def review(self) -> ReviewSummary:
        labels = label_map()
        issues: dict[str, list[ReviewLine]] = {}
        for group, store in ((ChecklistGroup.visual, self.visual), (ChecklistGroup.operational, self.operational)):
            lines: list[ReviewLine] = []
            for item in flatten_items(group_items(group)):
                state = store.get(item.id)
                if not state.checked:
                    continue
                lines.append(ReviewLine(item_id=item.id, label=labels[item.id], comment=state.comment.strip()))
            issues[GROUP_TITLES[group]] = lines

        return ReviewSummary(
            header={name: self.header.display_value(name) for name in HEADER_FIELDS},
            issues=issues,
            has_comments=self.has_comments(),
        )

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> InspectionSession:
        header_payload = payload.get('header') or {}
        session = cls(HeaderInfo.model_validate(header_payload))

        checks = payload.get('checks') or {}
        for item_id, raw in checks.items():
            state = CheckState.model_validate(raw) if not isinstance(raw, bool) else CheckState(checked=raw)
            session.set_checked(item_id, state.checked)
            if state.comment:
                session.set_comment(item_id, state.comment)
        session.step = WizardStep.REVIEW
        return session
