from __future__ import annotations

from datetime import date as Date
from enum import Enum, IntEnum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def today() -> Date:
    return Date.today()


class ChecklistGroup(str, Enum):
    visual = 'visual'
    operational = 'operational'


class ChecklistItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    children: tuple[ChecklistItem, ...] = ()


class CheckState(BaseModel):
    checked: bool = False
    comment: str = ''


class CommentEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    comment: str


class FuelType(str, Enum):
    propane = 'Propane'
    diesel = 'Diesel'
    gasoline = 'Gasoline'
    electric = 'Electric'


HEADER_FIELDS: tuple[str, ...] = ('date', 'truck', 'operator', 'start_hour', 'end_hour', 'fuel')


class HeaderInfo(BaseModel):
    model_config = ConfigDict(validate_assignment=True, populate_by_name=True)

    date: Date = Field(default_factory=today)
    truck: str = ''
    operator: str = ''
    start_hour: str = Field(default='', validation_alias=AliasChoices('start_hour', 'startHour'))
    end_hour: str = Field(default='', validation_alias=AliasChoices('end_hour', 'endHour'))
    # Either a fuel category or a gauge reading in percent
    fuel: FuelType | float = FuelType.propane

    @field_validator('truck', 'operator', 'start_hour', 'end_hour', mode='before')
    @classmethod
    def _coerce_text(cls, value: object) -> str:
        return str(value if value is not None else '').strip()

    @field_validator('fuel')
    @classmethod
    def _check_fuel_percentage(cls, value: FuelType | float) -> FuelType | float:
        if isinstance(value, FuelType):
            return value
        if not 0.0 <= float(value) <= 100.0:
            raise ValueError('fuel percentage must be between 0 and 100')
        return float(value)

    def display_value(self, field: str) -> str:
        if field not in HEADER_FIELDS:
            raise KeyError(field)
        value = getattr(self, field)
        if isinstance(value, FuelType):
            return value.value
        if field == 'fuel':
            return f'{value:g}%'
        if isinstance(value, Date):
            return value.isoformat()
        return str(value or '')


class Placement(BaseModel):
    model_config = ConfigDict(frozen=True)

    page: int = Field(default=0, ge=0)
    x: float
    y: float


class LayoutConfig(BaseModel):
    header: dict[str, Placement] = Field(default_factory=dict)
    items: dict[str, Placement] = Field(default_factory=dict)


class MarkKind(str, Enum):
    ok = 'ok'
    issue = 'issue'


class WizardStep(IntEnum):
    HEADER = 0
    VISUAL = 1
    OPERATIONAL = 2
    REVIEW = 3
