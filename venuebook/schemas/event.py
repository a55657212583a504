from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field


class BlockDateCreate(BaseModel):
    date: date
    reason: str = Field(default="", max_length=255)


class EventOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    event_date: date
    event_type: str
    status: str
    event_name: str
    description: str | None
