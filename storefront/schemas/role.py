from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from storefront.schemas.common import RequestPayload


class RoleCreate(RequestPayload):
    name: str
    description: Optional[str] = None


class RoleUpdate(RequestPayload):
    name: Optional[str] = None
    description: Optional[str] = None


class RoleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
