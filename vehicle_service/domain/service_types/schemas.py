"""Service type schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

COLOR_CODE_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class ServiceTypeCreate(BaseModel):
    """Schema for creating a catalog entry"""

    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    estimated_duration_minutes: int = Field(..., ge=15, le=480)
    price: float = Field(..., ge=0, le=100000)
    icon_class: Optional[str] = Field(None, max_length=50)
    color_code: Optional[str] = Field(None, pattern=COLOR_CODE_PATTERN)
    sort_order: int = 0

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Service name is required")
        return v


class ServiceTypeUpdate(BaseModel):
    """Schema for updating a catalog entry"""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    estimated_duration_minutes: Optional[int] = Field(None, ge=15, le=480)
    price: Optional[float] = Field(None, ge=0, le=100000)
    icon_class: Optional[str] = Field(None, max_length=50)
    color_code: Optional[str] = Field(None, pattern=COLOR_CODE_PATTERN)
    sort_order: Optional[int] = None


class ServiceTypeResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    estimated_duration_minutes: int
    formatted_duration: str
    price: float
    icon_class: Optional[str] = None
    color_code: Optional[str] = None
    sort_order: int
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ServiceTypeDetailResponse(ServiceTypeResponse):
    appointment_count: int = 0
