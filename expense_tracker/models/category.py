from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class CategoryCreate(BaseModel):
    name: str
    description: Optional[str] = None
    color: str
    icon: Optional[str] = None
    user_id: Optional[int] = None  # None creates a global category


class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None


class Category(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    color: str
    icon: Optional[str] = None
    user_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
