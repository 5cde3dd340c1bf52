#!/usr/bin/env python
"""
    Book Schema for Circulation,
    the inventory view of a catalogued title.

    :copyright: (c) 2015 by AUTHORS
    :license: see LICENSE for more details
"""

import enum
from typing import Optional
from pydantic import BaseModel, Field, model_validator


class BookStatus(str, enum.Enum):
    AVAILABLE = "available"
    BORROWED = "borrowed"
    RESERVED = "reserved"


class Book(BaseModel):
    id: str
    title: str
    author: str
    isbn: Optional[str] = None
    category: Optional[str] = None
    total_copies: int = Field(..., ge=0)
    available_copies: int = Field(..., ge=0)
    status: BookStatus = BookStatus.AVAILABLE

    @model_validator(mode="after")
    def check_copies(self):
        if self.available_copies > self.total_copies:
            raise ValueError("available_copies cannot exceed total_copies")
        return self

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "id": "bk_3f2a9c1d0b7e",
                "title": "1984",
                "author": "George Orwell",
                "isbn": "9780451524935",
                "category": "Fiction",
                "total_copies": 3,
                "available_copies": 1,
                "status": "available"
            }
        }
