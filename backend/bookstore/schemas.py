from __future__ import annotations
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class AuthorIn(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    bio: Optional[str] = Field(None, max_length=1000)
    nationality: Optional[str] = Field(None, max_length=50)

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, v):
        if not v.strip():
            raise ValueError("name cannot be blank")
        return v.strip()


class CategoryIn(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, v):
        if not v.strip():
            raise ValueError("name cannot be blank")
        return v.strip()


class BookIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    isbn: str = Field(..., min_length=1, max_length=32)
    description: str = Field(..., min_length=10, max_length=1000)
    price: Decimal = Field(..., ge=Decimal("0.01"), max_digits=10, decimal_places=2)
    stock_quantity: int = Field(..., ge=0)
    publication_year: Optional[int] = None
    pages: Optional[int] = Field(None, ge=1)
    language: Optional[str] = Field(None, max_length=50)
    author_id: int
    category_id: int

    @field_validator("title", "isbn", "description")
    @classmethod
    def text_must_not_be_blank(cls, v, info):
        if not v.strip():
            raise ValueError(f"{info.field_name} cannot be blank")
        return v.strip()


class StockUpdate(BaseModel):
    stock_quantity: int = Field(..., ge=0)
