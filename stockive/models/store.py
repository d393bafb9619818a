from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import field_validator
from sqlmodel import Field, SQLModel
from .base import TimestampMixin, new_id, as_utc

class POSType(str, Enum):
    SQUARE = "square"
    SHOPIFY = "shopify"
    CUSTOM = "custom"
    NONE = "none"

class Store(TimestampMixin, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    name: str = Field(index=True)
    address: str = ""
    phone: str = ""
    email: str = ""
    description: str = ""
    is_verified: bool = Field(default=False)
    currency: Optional[str] = None
    is_sub_store: bool = Field(default=False)
    # Not a foreign key: a dangling parent is tolerated
    parent_id: Optional[str] = Field(default=None, index=True)
    owner_id: str = Field(index=True)

    # POS link, passed through as-is
    pos_enabled: bool = Field(default=False)
    pos_type: str = Field(default=POSType.NONE.value)
    pos_api_key: Optional[str] = None
    pos_sync_enabled: bool = Field(default=False)
    pos_last_sync: Optional[datetime] = None

class StoreCreate(SQLModel):
    name: str
    address: str = ""
    phone: str = ""
    email: str = ""
    description: str = ""
    currency: Optional[str] = None
    is_sub_store: bool = False
    parent_id: Optional[str] = None

class StoreUpdate(SQLModel):
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    description: Optional[str] = None
    currency: Optional[str] = None
    is_sub_store: Optional[bool] = None
    parent_id: Optional[str] = None

class POSConfig(SQLModel):
    enabled: bool = False
    type: POSType = POSType.NONE
    api_key: Optional[str] = None
    sync_enabled: bool = False
    last_sync: Optional[datetime] = None

    @field_validator("last_sync")
    @classmethod
    def last_sync_in_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value) if value is not None else None
