"""
Web Service Models

Form payloads, items and action results of the server-rendered pages.
"""

from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field, field_validator
from enum import Enum


class ItemActionType(str, Enum):
    """CRUD form action types"""
    ADD = "addItem"
    EDIT = "editItem"
    DELETE = "deleteItem"


class Item(BaseModel):
    """Row of the items table"""
    id: Union[int, str] = Field(..., description="Item ID")
    name: str = Field(default="", description="Item name")
    description: Optional[str] = Field(default="", description="Item description")
    created_at: Optional[str] = None

    class Config:
        from_attributes = True
        extra = "ignore"


# Form Models

class CredentialsForm(BaseModel):
    """Email + password form (login and register)"""
    email: str = Field(default="", description="User email")
    password: str = Field(default="", description="User password")

    @field_validator("email")
    @classmethod
    def strip_email(cls, v: str) -> str:
        return v.strip()


class ItemForm(BaseModel):
    """CRUD form submission"""
    action_type: Optional[str] = Field(None, alias="actionType", description="addItem | editItem | deleteItem")
    id: Optional[str] = Field(None, description="Item ID (edit/delete)")
    name: Optional[str] = Field(None, description="Item name")
    description: Optional[str] = Field(None, description="Item description")

    class Config:
        populate_by_name = True


# Response Models

class ActionResult(BaseModel):
    """Outcome of a form action"""
    data: Optional[List[Dict[str, Any]]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class PageMeta(BaseModel):
    """Page title and description"""
    title: str
    description: str = ""
