"""Category schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field
from typing import Optional, List


class CategoryCreate(BaseModel):
    """Schema for creating a category."""
    name: str = Field(..., min_length=1, max_length=255)
    parent: str = "root"


class CategoryUpdate(BaseModel):
    """Schema for renaming a category."""
    name: str = Field(..., min_length=1, max_length=255)


class CategoryResponse(BaseModel):
    """Schema for category response."""
    id: int
    owner_id: str
    name: str
    parent: Optional[str] = None

    class Config:
        from_attributes = True


class CategoryNode(BaseModel):
    """Category with its nested children."""
    name: str
    parent: Optional[str] = None
    children: List[CategoryNode] = []
