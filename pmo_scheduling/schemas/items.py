"""
Input record schemas.

Records arrive from the store layer as plain dicts (camelCase keys) or from
CSV exports (snake_case columns); both spellings are accepted.
"""

import re
from datetime import date, datetime
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..cpm.models import SchedulableItem

ID_LIST_SEPARATOR = re.compile(r"[;,]")


def _split_ids(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in ID_LIST_SEPARATOR.split(value) if part.strip()]
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


class SchedulableItemRecord(BaseModel):
    """
    A task or project record as supplied by the store layer.

    Converted to an immutable SchedulableItem with ``to_item``.
    """
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    id: str = Field(description="Unique item identifier")
    name: str = Field(default='', description="Display name")
    start_date: Optional[date] = Field(default=None, alias='startDate', description="Planned start (ISO date)")
    end_date: Optional[date] = Field(default=None, alias='endDate', description="Planned end (ISO date)")
    progress: float = Field(default=0.0, description="Percent complete, 0-100")
    priority: Optional[str] = Field(default=None, description="Priority code (P0, P1, P2)")
    dependencies: list[str] = Field(default_factory=list, description="Predecessor item ids")
    resource_requirements: list[str] = Field(
        default_factory=list, alias='resourceRequirements',
        description="Required resource ids (portfolio mode)",
    )
    status: Optional[str] = Field(default=None, description="Lifecycle status")

    @field_validator('id', mode='before')
    @classmethod
    def _coerce_id(cls, v):
        if isinstance(v, float) and v.is_integer():
            v = int(v)
        return str(v).strip() if v is not None else v

    @field_validator('name', mode='before')
    @classmethod
    def _coerce_name(cls, v):
        return '' if v is None else str(v)

    @field_validator('start_date', 'end_date', mode='before')
    @classmethod
    def _parse_date(cls, v):
        if v is None or v == '':
            return None
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str) and 'T' in v:
            return v.split('T', 1)[0]
        return v

    @field_validator('progress', mode='before')
    @classmethod
    def _default_progress(cls, v):
        return 0.0 if v is None or v == '' else v

    @field_validator('dependencies', mode='before')
    @classmethod
    def _parse_dependencies(cls, v):
        return _split_ids(v)

    @field_validator('resource_requirements', mode='before')
    @classmethod
    def _parse_resources(cls, v):
        if isinstance(v, (list, tuple)):
            v = [
                r.get('resourceId', r.get('resource_id')) if isinstance(r, dict) else r
                for r in v
            ]
        return _split_ids(v)

    def to_item(self) -> SchedulableItem:
        return SchedulableItem(
            id=self.id,
            name=self.name,
            start_date=self.start_date,
            end_date=self.end_date,
            progress=self.progress,
            priority=self.priority,
            dependencies=tuple(self.dependencies),
            resource_requirements=tuple(self.resource_requirements),
            status=self.status,
        )
