import logging
from collections import Counter
from fastapi import APIRouter, Body, Depends, HTTPException, Request
from sqlmodel import Session, select
from typing import Any, Dict, List, Optional

from stockive.models import Product, ProductCreate, ProductUpdate, MultiStoreProductCreate, User, utcnow
from stockive.database import get_session
from stockive.core import limiter
from stockive.core.config import settings
from stockive.core.security import get_api_key
from stockive.api.stores import is_foreign_store, load_user_stores
from stockive.services import (
    DEFAULT_STORE_REF,
    StoreContext,
    Unresolved,
    analyze_store_context,
    can_access_store,
    get_default_store_for_product,
    normalize_product_payload,
    ref_or_default,
    resolve_store,
    resolve_store_name,
    unwrap_collection,
    validate_store_selection,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def serialize_product(product: Product, ctx: StoreContext) -> Dict[str, Any]:
    item = product.model_dump()
    fallback = ctx.main_store.name if ctx.main_store is not None else None
    item["store_name"] = resolve_store_name(ctx.user_stores, product.supermarket_id, fallback)
    return item


def get_owned_product(session: Session, user: User, product_id: str) -> Product:
    product = session.get(Product, product_id)
    if not product or product.owner_id != user.id:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


def load_context(session: Session, user: User) -> StoreContext:
    return analyze_store_context(load_user_stores(session, user), user)


def check_store_ref(session: Session, user: User, ref: Optional[str]) -> None:
    # Store names and addresses stay valid references, other users' ids do not
    if is_foreign_store(session, user, ref):
        raise HTTPException(status_code=403, detail="Store not accessible")


@router.get("/", response_model=List[Dict[str, Any]])
def get_products(
    store: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_api_key)
):
    ctx = load_context(session, current_user)

    query = select(Product).where(Product.owner_id == current_user.id).order_by(Product.created_at)
    products = session.exec(query).all()

    if store and store != "all":
        if not can_access_store(store, ctx):
            raise HTTPException(status_code=403, detail="Store not accessible")
        products = [
            p for p in products
            if getattr(resolve_store(ctx.user_stores, p.supermarket_id), "id", None) == store
        ]

    return [serialize_product(p, ctx) for p in products[skip:skip + limit]]


@router.post("/", response_model=Dict[str, Any])
def create_product(
    product_data: ProductCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_api_key)
):
    check_store_ref(session, current_user, product_data.supermarket_id)
    ctx = load_context(session, current_user)
    fields = product_data.model_dump()
    fields["supermarket_id"] = (
        fields.get("supermarket_id") or get_default_store_for_product(ctx) or DEFAULT_STORE_REF
    )
    if fields.get("selling_price") is not None:
        fields["price"] = fields["selling_price"]

    product = Product(**fields, owner_id=current_user.id)
    session.add(product)
    session.commit()
    session.refresh(product)
    return serialize_product(product, ctx)


@router.post("/multi-store", response_model=List[Dict[str, Any]])
def create_multi_store_product(
    product_data: MultiStoreProductCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_api_key)
):
    """Create one copy of the product in each selected store."""
    ctx = load_context(session, current_user)

    is_valid, error = validate_store_selection(product_data.store_ids, ctx)
    if not is_valid:
        raise HTTPException(status_code=400, detail=error)

    fields = product_data.model_dump(exclude={"store_ids"})
    created = []
    for store_id in product_data.store_ids:
        product = Product(**fields, supermarket_id=store_id, owner_id=current_user.id)
        session.add(product)
        created.append(product)

    session.commit()
    for product in created:
        session.refresh(product)
    return [serialize_product(p, ctx) for p in created]


@router.post("/import", response_model=Dict[str, Any])
@limiter.limit(settings.IMPORT_RATE_LIMIT)
def import_products(
    request: Request,
    payload: Any = Body(...),
    session: Session = Depends(get_session),
    current_user: User = Depends(get_api_key)
):
    """
    Import products from a raw backend response.

    The store reference is reconciled from whichever field the record
    carries. Records without a usable reference go to the user's default
    store; the counts per reason are returned so callers can see them.
    """
    ctx = load_context(session, current_user)
    default_ref = get_default_store_for_product(ctx) or DEFAULT_STORE_REF

    created = []
    unresolved = Counter()
    for raw in unwrap_collection(payload):
        if not isinstance(raw, dict):
            unresolved["invalid"] += 1
            continue
        fields = normalize_product_payload(raw)
        ref = fields.pop("supermarket_id")
        if isinstance(ref, Unresolved):
            unresolved[ref.reason] += 1
        elif is_foreign_store(session, current_user, ref.value):
            unresolved["inaccessible"] += 1
            ref = Unresolved("inaccessible")
        fields["supermarket_id"] = ref_or_default(ref, default_ref)

        product = Product(**fields, owner_id=current_user.id)
        session.add(product)
        created.append(product)

    session.commit()
    for product in created:
        session.refresh(product)

    if unresolved:
        logger.warning(
            f"{sum(unresolved.values())} imported products had no usable store reference: {dict(unresolved)}"
        )
    return {
        "created": [serialize_product(p, ctx) for p in created],
        "unresolved": dict(unresolved),
    }


@router.get("/{product_id}", response_model=Dict[str, Any])
def get_product(
    product_id: str,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_api_key)
):
    product = get_owned_product(session, current_user, product_id)
    return serialize_product(product, load_context(session, current_user))


@router.put("/{product_id}", response_model=Dict[str, Any])
def update_product(
    product_id: str,
    product_data: ProductUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_api_key)
):
    db_product = get_owned_product(session, current_user, product_id)

    # Update product attributes
    product_data_dict = product_data.model_dump(exclude_unset=True)
    check_store_ref(session, current_user, product_data_dict.get("supermarket_id"))
    for key, value in product_data_dict.items():
        setattr(db_product, key, value)
    db_product.updated_at = utcnow()

    session.add(db_product)
    session.commit()
    session.refresh(db_product)
    return serialize_product(db_product, load_context(session, current_user))


@router.delete("/{product_id}", response_model=Dict[str, Any])
def delete_product(
    product_id: str,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_api_key)
):
    db_product = get_owned_product(session, current_user, product_id)
    session.delete(db_product)
    session.commit()
    return {"deleted": product_id}
