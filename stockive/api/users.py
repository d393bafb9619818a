import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlmodel import Session, select
from typing import List, Dict, Any
import secrets
from stockive.models import User, UserSignup
from stockive.database import get_session
from stockive.core import limiter
from stockive.core.config import settings
from stockive.core.security import get_password_hash, get_api_key, check_admin_permission
from stockive.api.stores import create_default_store, serialize_store
from stockive.services.navigation import PLAN_BASIC, PLAN_STANDARD, PLAN_OTHER

logger = logging.getLogger(__name__)

router = APIRouter()

KNOWN_PLANS = (PLAN_BASIC, PLAN_STANDARD, PLAN_OTHER)

@router.get("/", response_model=List[Dict[str, Any]])
def get_users(
    skip: int = 0,
    limit: int = 100,
    session: Session = Depends(get_session),
    current_user: User = Depends(check_admin_permission)  # Admin only
):
    users = session.exec(select(User).offset(skip).limit(limit)).all()
    # Don't expose API keys or hashes in the response
    return [
        {**user.model_dump(exclude={"hashed_password"}), "api_key": "***"}
        for user in users
    ]

@router.post("/signup", response_model=Dict[str, Any])
@limiter.limit(settings.SIGNUP_RATE_LIMIT)
def signup(
    request: Request,
    signup_data: UserSignup,
    session: Session = Depends(get_session)
):
    # Check if username or email already exists
    db_user = session.exec(
        select(User).where(
            (User.username == signup_data.username) | (User.email == signup_data.email)
        )
    ).first()

    if db_user:
        raise HTTPException(
            status_code=400,
            detail="Username or email already registered"
        )

    plan = signup_data.plan.strip().lower()
    if plan not in KNOWN_PLANS:
        raise HTTPException(status_code=400, detail=f"Unknown plan: {signup_data.plan}")

    new_user = User(
        username=signup_data.username,
        email=signup_data.email,
        hashed_password=get_password_hash(signup_data.password),
        api_key=secrets.token_urlsafe(32),
        is_active=True,
        is_admin=False,
        plan=plan
    )
    session.add(new_user)
    session.commit()
    session.refresh(new_user)

    # Every account starts with its main store
    store = create_default_store(session, new_user, name=signup_data.store_name)
    logger.info(f"User {new_user.username} signed up on plan {plan}")

    # API key is only returned here and on regeneration
    return {
        "id": new_user.id,
        "username": new_user.username,
        "email": new_user.email,
        "plan": new_user.plan,
        "api_key": new_user.api_key,
        "main_store": serialize_store(store),
    }

@router.get("/me", response_model=Dict[str, Any])
def read_users_me(current_user: User = Depends(get_api_key)):
    return {
        "id": current_user.id,
        "username": current_user.username,
        "email": current_user.email,
        "is_admin": current_user.is_admin,
        "plan": current_user.plan,
    }
