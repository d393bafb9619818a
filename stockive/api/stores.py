import logging
from fastapi import APIRouter, Body, Depends, HTTPException, Request
from sqlmodel import Session, select
from typing import Any, Dict, List, Optional
from stockive.models import Store, StoreCreate, StoreUpdate, POSConfig, POSType, Product, User, utcnow
from stockive.database import get_session
from stockive.core import limiter
from stockive.core.config import settings
from stockive.core.security import get_api_key
from stockive.cache import cache, invalidate, PREFIX_CONTEXT, PREFIX_STORES
from stockive.services import (
    analyze_store_context,
    get_parent_store,
    get_store_options,
    normalize_store_payload,
    unwrap_collection,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def serialize_store(store: Store) -> Dict[str, Any]:
    return store.model_dump(exclude={"pos_api_key"})


def load_user_stores(session: Session, user: User) -> List[Store]:
    return list(session.exec(
        select(Store).where(Store.owner_id == user.id).order_by(Store.created_at, Store.name)
    ).all())


def create_default_store(session: Session, user: User, name: Optional[str] = None) -> Store:
    store = Store(
        name=name or settings.DEFAULT_STORE_NAME,
        address="Default Address",
        phone="N/A",
        email=user.email,
        description="Default store created automatically for new user.",
        owner_id=user.id,
        is_sub_store=False,
    )
    session.add(store)
    session.commit()
    session.refresh(store)
    logger.info(f"Created default store {store.id} for user {user.username}")
    # Also reached from GET /stores/, which the write middleware skips
    invalidate((PREFIX_CONTEXT,))
    return store


def get_owned_store(session: Session, user: User, store_id: str) -> Store:
    store = session.get(Store, store_id)
    if not store or store.owner_id != user.id:
        raise HTTPException(status_code=404, detail="Store not found")
    return store


def is_foreign_store(session: Session, user: User, store_id: Optional[str]) -> bool:
    """True when ``store_id`` names an existing store of another user."""
    if not store_id:
        return False
    store = session.get(Store, store_id)
    return store is not None and store.owner_id != user.id


def check_parent(session: Session, user: User, parent_id: Optional[str]) -> None:
    if not parent_id:
        return
    if is_foreign_store(session, user, parent_id):
        raise HTTPException(status_code=404, detail="Parent store not found")
    if session.get(Store, parent_id) is None:
        # Unknown parents are kept as given and reported as dangling
        logger.warning(f"Parent store {parent_id} not found, keeping reference as-is")


@router.get("/", response_model=List[Dict[str, Any]])
@cache(prefix=PREFIX_STORES)
async def list_stores(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_api_key)
):
    stores = load_user_stores(session, current_user)
    if not stores and settings.AUTO_CREATE_DEFAULT_STORE:
        logger.info(f"No stores found for user {current_user.username}, creating default store")
        stores = [create_default_store(session, current_user)]

    response = []
    for store in stores:
        item = serialize_store(store)
        parent = get_parent_store(store, stores)
        item["parent_name"] = parent.name if parent else None
        response.append(item)
    return response


@router.post("/", response_model=Dict[str, Any])
def create_store(
    store_data: StoreCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_api_key)
):
    check_parent(session, current_user, store_data.parent_id)

    store = Store(**store_data.model_dump(), owner_id=current_user.id)
    session.add(store)
    session.commit()
    session.refresh(store)
    return serialize_store(store)


@router.get("/options", response_model=List[Dict[str, str]])
def get_options(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_api_key)
):
    ctx = analyze_store_context(load_user_stores(session, current_user), current_user)
    return get_store_options(ctx)


@router.post("/import", response_model=Dict[str, Any])
@limiter.limit(settings.IMPORT_RATE_LIMIT)
def import_stores(
    request: Request,
    payload: Any = Body(...),
    session: Session = Depends(get_session),
    current_user: User = Depends(get_api_key)
):
    """
    Import stores from a raw backend response.

    Any of the historical envelopes and field spellings is accepted. Stores
    whose id already exists are skipped.
    """
    records = unwrap_collection(payload)
    created = []
    seen = set()
    skipped = 0
    for raw in records:
        if not isinstance(raw, dict):
            skipped += 1
            continue
        fields = normalize_store_payload(raw, owner_id=current_user.id)
        # Imported stores always belong to the importing user
        fields["owner_id"] = current_user.id
        if fields["pos_type"] not in {t.value for t in POSType}:
            fields["pos_type"] = POSType.NONE.value
        if not fields["name"]:
            skipped += 1
            continue
        if is_foreign_store(session, current_user, fields["parent_id"]):
            logger.warning(f"Skipping imported store {fields['name']!r}: parent belongs to another user")
            skipped += 1
            continue
        if fields["id"] is None:
            fields.pop("id")
        elif fields["id"] in seen or session.get(Store, fields["id"]) is not None:
            skipped += 1
            continue
        else:
            seen.add(fields["id"])
        store = Store(**fields)
        session.add(store)
        created.append(store)

    session.commit()
    for store in created:
        session.refresh(store)

    logger.info(f"Imported {len(created)} stores for {current_user.username}, skipped {skipped}")
    return {
        "created": [serialize_store(store) for store in created],
        "skipped": skipped,
    }


@router.get("/{store_id}", response_model=Dict[str, Any])
def get_store(
    store_id: str,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_api_key)
):
    store = get_owned_store(session, current_user, store_id)
    return serialize_store(store)


@router.put("/{store_id}", response_model=Dict[str, Any])
def update_store(
    store_id: str,
    store_data: StoreUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_api_key)
):
    db_store = get_owned_store(session, current_user, store_id)

    store_data_dict = store_data.model_dump(exclude_unset=True)
    if store_data_dict.get("parent_id") == store_id:
        raise HTTPException(status_code=400, detail="A store cannot be its own parent")
    check_parent(session, current_user, store_data_dict.get("parent_id"))

    # Update store attributes
    for key, value in store_data_dict.items():
        setattr(db_store, key, value)
    db_store.updated_at = utcnow()

    session.add(db_store)
    session.commit()
    session.refresh(db_store)
    return serialize_store(db_store)


@router.put("/{store_id}/pos", response_model=Dict[str, Any])
def update_pos_config(
    store_id: str,
    pos_config: POSConfig,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_api_key)
):
    db_store = get_owned_store(session, current_user, store_id)

    db_store.pos_enabled = pos_config.enabled
    db_store.pos_type = pos_config.type.value
    db_store.pos_api_key = pos_config.api_key
    db_store.pos_sync_enabled = pos_config.sync_enabled
    db_store.pos_last_sync = pos_config.last_sync
    db_store.updated_at = utcnow()

    session.add(db_store)
    session.commit()
    session.refresh(db_store)
    return serialize_store(db_store)


@router.delete("/{store_id}", response_model=Dict[str, Any])
def delete_store(
    store_id: str,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_api_key)
):
    db_store = get_owned_store(session, current_user, store_id)

    # Products of the store go with it
    products = session.exec(
        select(Product).where(
            Product.owner_id == current_user.id,
            Product.supermarket_id == store_id
        )
    ).all()
    for product in products:
        session.delete(product)

    session.delete(db_store)
    session.commit()
    return {"deleted": store_id, "products_removed": len(products)}
