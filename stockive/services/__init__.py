from .identifiers import (
    DEFAULT_STORE_REF,
    Resolved,
    Unresolved,
    StoreRef,
    reconcile_identifier,
    reconcile_store_ref,
    ref_or_default,
    unwrap_collection,
    normalize_store_payload,
    normalize_product_payload,
)
from .store_context import (
    UNKNOWN_STORE,
    StoreContext,
    analyze_store_context,
    resolve_store_name,
    resolve_store,
    get_store_display_name,
    get_parent_store,
    get_store_options,
    get_default_store_for_product,
    can_access_store,
    validate_store_selection,
)
from .navigation import NavItem, get_navigation_items, get_user_plan
