from typing import Optional
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader
from sqlmodel import Session, select

from stockive.models import User
from stockive.database import get_session

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# API Key header
API_KEY_NAME = "X-API-Key"
api_key_header = APIKeyHeader(name=API_KEY_NAME, auto_error=True)
optional_api_key_header = APIKeyHeader(name=API_KEY_NAME, auto_error=False)

def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password):
    return pwd_context.hash(password)

# Simple API key validation
async def get_api_key(
    api_key: str = Depends(api_key_header),
    session: Session = Depends(get_session)
):
    user = session.exec(select(User).where(User.api_key == api_key)).first()
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key or inactive user"
        )
    return user

# Same lookup, but anonymous callers get None instead of a 401
async def get_optional_user(
    api_key: Optional[str] = Depends(optional_api_key_header),
    session: Session = Depends(get_session)
) -> Optional[User]:
    if not api_key:
        return None
    user = session.exec(select(User).where(User.api_key == api_key)).first()
    if not user or not user.is_active:
        return None
    return user

# Check if user is admin
async def check_admin_permission(current_user: User = Depends(get_api_key)):
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions"
        )
    return current_user
