from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, ConfigDict

Language = Literal["bn", "en"]

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=300)
    language: Language = "bn"

class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=300)
    language: Optional[Language] = None

class Category(BaseModel):
    id: UUID
    name: str
    slug: str
    description: Optional[str] = None
    language: Language
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class CategoryList(BaseModel):
    categories: List[Category]
