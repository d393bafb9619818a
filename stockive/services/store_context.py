"""
Store hierarchy helpers.

Everything here is a pure function over in-memory lists of stores and
products; the routers load the rows and call in.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

UNKNOWN_STORE = "Unknown Store"
ALL_STORES_OPTION = "all"


@dataclass
class StoreContext:
    is_multi_store: bool = False
    user_stores: List[Any] = field(default_factory=list)
    main_store: Optional[Any] = None
    sub_stores: List[Any] = field(default_factory=list)
    total_stores: int = 0
    # Sub-stores whose parent_id is missing or names no known store
    dangling_sub_stores: List[Any] = field(default_factory=list)


def _store_id(store: Any) -> str:
    value = getattr(store, "id", None)
    return "" if value is None else str(value)


def _normalized(value: Any) -> str:
    return "" if value is None else str(value).strip().lower()


def analyze_store_context(stores: Sequence[Any], current_user: Optional[Any]) -> StoreContext:
    """Split the user's stores into the main store and its sub-stores."""
    if current_user is None:
        return StoreContext()

    # Store listings are scoped to the requesting user before they get here
    user_stores = list(stores)

    main_store = next((s for s in user_stores if not getattr(s, "is_sub_store", False)), None)
    sub_stores = [s for s in user_stores if getattr(s, "is_sub_store", False)]

    known_ids = {_store_id(s) for s in user_stores}
    dangling = []
    for store in sub_stores:
        parent_id = getattr(store, "parent_id", None)
        if not parent_id or str(parent_id) not in known_ids:
            logger.warning(
                "Sub-store %s has no resolvable parent (parent_id=%r)",
                _store_id(store), parent_id,
            )
            dangling.append(store)

    total_stores = len(user_stores)
    return StoreContext(
        is_multi_store=total_stores > 1,
        user_stores=user_stores,
        main_store=main_store,
        sub_stores=sub_stores,
        total_stores=total_stores,
        dangling_sub_stores=dangling,
    )


def get_store_display_name(store: Any) -> str:
    suffix = " (Sub-Store)" if getattr(store, "is_sub_store", False) else " (Main Store)"
    return f"{getattr(store, 'name', '')}{suffix}"


def get_parent_store(store: Any, stores: Iterable[Any]) -> Optional[Any]:
    """Return the parent of a sub-store, or None when it cannot be found."""
    parent_id = getattr(store, "parent_id", None)
    if not parent_id:
        return None
    return next((s for s in stores if _store_id(s) == str(parent_id)), None)


def resolve_store_name(stores: Sequence[Any], ref: Optional[str], fallback: Optional[str] = None) -> str:
    """
    Turn a product's store reference into a display name.

    Tries the store id, then the name, then the address; legacy rows carry
    either of the latter two in the reference field.
    """
    if ref is not None and str(ref) != "":
        by_id = next((s for s in stores if _store_id(s) == str(ref)), None)
        if by_id is not None and getattr(by_id, "name", None):
            return by_id.name

        wanted = _normalized(ref)
        if wanted:
            by_name = next((s for s in stores if _normalized(getattr(s, "name", None)) == wanted), None)
            if by_name is not None:
                return by_name.name

            by_address = next((s for s in stores if _normalized(getattr(s, "address", None)) == wanted), None)
            if by_address is not None and getattr(by_address, "name", None):
                return by_address.name

    if fallback:
        return fallback
    return UNKNOWN_STORE


def resolve_store(stores: Sequence[Any], ref: Optional[str]) -> Optional[Any]:
    """Same lookup order as ``resolve_store_name`` but returns the store."""
    if ref is None or str(ref) == "":
        return None
    by_id = next((s for s in stores if _store_id(s) == str(ref)), None)
    if by_id is not None:
        return by_id
    wanted = _normalized(ref)
    if not wanted:
        return None
    for attr in ("name", "address"):
        match = next((s for s in stores if _normalized(getattr(s, attr, None)) == wanted), None)
        if match is not None:
            return match
    return None


def filter_products_by_user_stores(products: Iterable[Any], ctx: StoreContext) -> List[Any]:
    if not ctx.user_stores:
        return []
    store_ids = {_store_id(s) for s in ctx.user_stores}
    return [p for p in products if str(getattr(p, "supermarket_id", "")) in store_ids]


def get_store_options(ctx: StoreContext) -> List[dict]:
    """Options for store pickers, main store first."""
    options = []
    if ctx.is_multi_store:
        options.append({"value": ALL_STORES_OPTION, "label": "All My Stores"})
        if ctx.main_store is not None:
            options.append({
                "value": _store_id(ctx.main_store),
                "label": get_store_display_name(ctx.main_store),
            })
        for store in ctx.sub_stores:
            options.append({"value": _store_id(store), "label": get_store_display_name(store)})
    elif ctx.main_store is not None:
        options.append({"value": _store_id(ctx.main_store), "label": ctx.main_store.name})
    return options


def can_access_store(store_id: str, ctx: StoreContext) -> bool:
    return any(_store_id(s) == str(store_id) for s in ctx.user_stores)


def get_default_store_for_product(ctx: StoreContext) -> str:
    if ctx.main_store is not None:
        return _store_id(ctx.main_store)
    if ctx.user_stores:
        return _store_id(ctx.user_stores[0])
    return ""


def validate_store_selection(store_ids: Sequence[str], ctx: StoreContext) -> Tuple[bool, Optional[str]]:
    if not store_ids:
        return False, "At least one store must be selected"

    invalid = [store_id for store_id in store_ids if not can_access_store(store_id, ctx)]
    if invalid:
        return False, f"You don't have access to stores: {', '.join(invalid)}"
    return True, None
