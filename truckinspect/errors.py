from __future__ import annotations


class InspectionError(Exception):
    """Base class for errors raised by truckinspect."""


class TemplateError(InspectionError):
    def __init__(self, message: str, *, source: str | None = None):
        super().__init__(message)
        self.source = source


class TemplateNotFoundError(TemplateError):
    pass


class TemplateLoadError(TemplateError):
    pass


class TemplateTimeoutError(TemplateLoadError):
    pass


class LayoutError(InspectionError):
    pass


class DuplicateItemError(InspectionError):
    def __init__(self, item_ids: list[str] | set[str]):
        self.item_ids = sorted(item_ids)
        super().__init__(f'duplicate checklist item id(s): {", ".join(self.item_ids)}')


class UnknownItemError(InspectionError, KeyError):
    def __init__(self, item_id: str, group: str | None = None):
        self.item_id = item_id
        self.group = group
        scope = f' in group {group!r}' if group else ''
        super().__init__(f'unknown checklist item id {item_id!r}{scope}')

    def __str__(self) -> str:
        return str(self.args[0])


class ExportInProgressError(InspectionError):
    pass


class ExportWriteError(InspectionError):
    def __init__(self, message: str, *, path: str | None = None):
        super().__init__(message)
        self.path = path
