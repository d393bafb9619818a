from dataclasses import asdict
from fastapi import APIRouter, Depends
from sqlmodel import Session
from typing import Any, Dict, List, Optional

from stockive.models import User
from stockive.database import get_session
from stockive.core.security import get_api_key, get_optional_user
from stockive.cache import cache, PREFIX_CONTEXT
from stockive.api.stores import load_user_stores, serialize_store
from stockive.services import StoreContext, analyze_store_context, get_navigation_items

router = APIRouter()


def serialize_context(ctx: StoreContext) -> Dict[str, Any]:
    return {
        "is_multi_store": ctx.is_multi_store,
        "user_stores": [serialize_store(s) for s in ctx.user_stores],
        "main_store": serialize_store(ctx.main_store) if ctx.main_store is not None else None,
        "sub_stores": [serialize_store(s) for s in ctx.sub_stores],
        "total_stores": ctx.total_stores,
        "dangling_sub_store_ids": [s.id for s in ctx.dangling_sub_stores],
    }


@router.get("/", response_model=Dict[str, Any])
@cache(prefix=PREFIX_CONTEXT)
async def get_store_context(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_api_key)
):
    ctx = analyze_store_context(load_user_stores(session, current_user), current_user)
    return serialize_context(ctx)


@router.get("/navigation", response_model=List[Dict[str, str]])
def get_navigation(
    session: Session = Depends(get_session),
    current_user: Optional[User] = Depends(get_optional_user)
):
    """Menu entries for the caller; anonymous callers only get login and signup."""
    stores = load_user_stores(session, current_user) if current_user else []
    ctx = analyze_store_context(stores, current_user)
    items = get_navigation_items(ctx, current_user is not None, current_user)
    return [asdict(item) for item in items]
