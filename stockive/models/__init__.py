from .base import TimestampMixin, utcnow, as_utc
from .store import Store, StoreCreate, StoreUpdate, POSConfig, POSType
from .product import Product, ProductCreate, ProductUpdate, MultiStoreProductCreate
from .user import User, UserSignup
