from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PackageCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    price: float = Field(default=0.0, ge=0)
    description: str = ""
    max_guests: int | None = Field(default=None, ge=1)
    is_active: bool = True
    order_index: int = 0


class PackageUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    price: float | None = Field(default=None, ge=0)
    description: str | None = None
    max_guests: int | None = Field(default=None, ge=1)
    is_active: bool | None = None
    order_index: int | None = None


class PackageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    price: float
    description: str
    max_guests: int | None
    is_active: bool
    order_index: int
