"""Manager-account DTOs shared across services."""

from __future__ import annotations

from datetime import datetime
from pydantic import BaseModel, EmailStr


class ManagerView(BaseModel):
    manager_id: str
    business_email: EmailStr
    company_name: str
    company_description: str | None = None
    company_address: str | None = None
    business_phone: str | None = None
    state: str | None = None
    image_url: str | None = None
    is_active: bool = True
    created_at: datetime
    updated_at: datetime | None = None
