from typing import Optional, List
from sqlmodel import Field, SQLModel
from .base import TimestampMixin, new_id

class ProductFields(SQLModel):
    name: str
    category: str = ""
    supplier: str = ""
    price: float = Field(default=0.0)
    quantity: int = Field(default=0)
    expiry_date: str = ""
    description: str = ""
    brand: str = ""
    barcode: str = ""
    image_url: str = ""
    cost_price: Optional[float] = None
    selling_price: Optional[float] = None
    min_stock_level: Optional[int] = None
    location: str = ""  # Aisle/shelf location
    synced_with_pos: bool = False
    pos_id: Optional[str] = None

class Product(ProductFields, TimestampMixin, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    # A store id, or for legacy rows a store name, an address or "default"
    supermarket_id: str = Field(default="", index=True)
    owner_id: str = Field(index=True)

class ProductCreate(ProductFields):
    supermarket_id: Optional[str] = None

class MultiStoreProductCreate(ProductFields):
    store_ids: List[str] = []

class ProductUpdate(SQLModel):
    name: Optional[str] = None
    category: Optional[str] = None
    supplier: Optional[str] = None
    price: Optional[float] = None
    quantity: Optional[int] = None
    expiry_date: Optional[str] = None
    supermarket_id: Optional[str] = None
    description: Optional[str] = None
    brand: Optional[str] = None
    barcode: Optional[str] = None
    cost_price: Optional[float] = None
    selling_price: Optional[float] = None
    min_stock_level: Optional[int] = None
    location: Optional[str] = None
