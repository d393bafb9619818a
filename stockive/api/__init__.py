from .users import router as users_router
from .stores import router as stores_router
from .products import router as products_router
from .context import router as context_router
