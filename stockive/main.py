import logging
from fastapi import FastAPI, Depends, HTTPException, status, Request
from sqlmodel import Session, select
import secrets
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from fastapi.middleware.cors import CORSMiddleware

from stockive.core import limiter
from stockive.core.config import settings
from stockive.core.security import get_password_hash, verify_password
from stockive.database import create_db_and_tables, get_session, engine
from stockive.models import User
from stockive.api import users_router, stores_router, products_router, context_router
from stockive.cache import invalidate, PREFIX_STORES, PREFIX_CONTEXT

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Stockive API")

# Setup rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Setup CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

def bootstrap_admin(session: Session) -> User:
    """Create the admin user if not exists."""
    admin = session.exec(select(User).where(User.username == settings.ADMIN_USERNAME)).first()
    if admin:
        logger.info("Admin user exists")
        return admin

    admin = User(
        username=settings.ADMIN_USERNAME,
        email=settings.ADMIN_EMAIL,
        hashed_password=get_password_hash(settings.ADMIN_PASSWORD),
        api_key=secrets.token_urlsafe(32),
        is_active=True,
        is_admin=True,
        plan="other"
    )
    session.add(admin)
    session.commit()
    session.refresh(admin)
    # The key itself stays out of the logs; fetch it via /generate-api-key
    logger.info(f"Admin user {admin.username} created")
    return admin


# Create tables on startup
@app.on_event("startup")
def on_startup():
    create_db_and_tables()
    logger.info("Database tables created.")
    with Session(engine) as session:
        bootstrap_admin(session)


# Cache invalidation middleware
@app.middleware("http")
async def cache_invalidation_middleware(request: Request, call_next):
    response = await call_next(request)

    # Invalidate cache on write operations
    if request.method in ["POST", "PUT", "PATCH", "DELETE"] and response.status_code < 400:
        path = request.url.path
        if path.startswith("/stores"):
            # Store changes reshape the derived context as well
            invalidate((PREFIX_STORES, PREFIX_CONTEXT))

    return response


# Include routers
app.include_router(
    users_router,
    prefix="/users",
    tags=["Users"]
)
app.include_router(
    stores_router,
    prefix="/stores",
    tags=["Stores"]
)
app.include_router(
    products_router,
    prefix="/products",
    tags=["Products"]
)
app.include_router(
    context_router,
    prefix="/context",
    tags=["Store Context"]
)

@app.post("/generate-api-key")
def generate_api_key(
    username: str,
    password: str,
    session: Session = Depends(get_session)
):
    user = session.exec(select(User).where(User.username == username)).first()
    if not user or not verify_password(password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password"
        )

    # Generate new API key
    user.api_key = secrets.token_urlsafe(32)
    session.add(user)
    session.commit()

    return {"api_key": user.api_key}

@app.get("/")
def read_root():
    return {"message": "Welcome to Stockive API"}
