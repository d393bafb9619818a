"""
Identifier reconciliation for store and product payloads.

Historical API versions named the same field in several ways (snake_case,
camelCase, ``*_uuid``, nested objects). The tables below list the synonyms in
lookup order; the first present value wins.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
import math
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

DEFAULT_STORE_REF = "default"

STORE_REF_FIELDS = (
    "supermarket", "supermarket_id", "supermarketId", "supermarket_uuid",
    "store", "store_id", "store_uuid",
    "market", "market_id", "market_uuid",
    "supermarketRef", "supermarket_ref",
    # parent relationships of sub-stores
    "supermarket_parent", "supermarket_parent_name",
    "parent", "parent_id", "parent_uuid", "parent_name",
)

NESTED_ID_FIELDS = ("id", "pk", "uuid", "uid", "identifier", "name")

STORE_NAME_FIELDS = (
    "supermarket_name", "supermarketName",
    "store_name", "storeName",
    "market_name", "marketName",
)

COLLECTION_KEYS = ("results", "supermarkets", "my_stores", "items", "data")


@dataclass(frozen=True)
class Resolved:
    value: str


@dataclass(frozen=True)
class Unresolved:
    # "missing": no candidate field present
    # "unrecognized": a nested object without any usable id field
    # "inaccessible": an id of a store the caller does not own
    reason: str = "missing"


StoreRef = Union[Resolved, Unresolved]


def _is_present(value: Any) -> bool:
    if value is None:
        return False
    return str(value).strip() != ""


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def first_present(record: Any, fields: Sequence[str]) -> Any:
    """Return the first value of ``fields`` in ``record`` that is non-empty."""
    if not isinstance(record, Mapping):
        return None
    for field in fields:
        value = record.get(field)
        if _is_present(value):
            return value
    return None


def reconcile_identifier(
    record: Any,
    fields: Sequence[str],
    nested_fields: Sequence[str] = NESTED_ID_FIELDS,
) -> StoreRef:
    """
    Collapse synonymous fields of ``record`` into one identifier.

    A winning value that is itself an object is searched again with
    ``nested_fields``.
    """
    value = first_present(record, fields)
    if value is None:
        return Unresolved("missing")

    if isinstance(value, Mapping):
        nested = first_present(value, nested_fields)
        if nested is None or isinstance(nested, Mapping):
            return Unresolved("unrecognized")
        return Resolved(_as_text(nested))

    return Resolved(_as_text(value))


def reconcile_store_ref(record: Any) -> StoreRef:
    """Resolve the store a product payload points at."""
    ref = reconcile_identifier(record, STORE_REF_FIELDS)
    if isinstance(ref, Resolved) or ref.reason == "unrecognized":
        return ref
    # No reference field at all: fall back to names so the row can still be
    # matched against store names later on.
    return reconcile_identifier(record, STORE_NAME_FIELDS)


def ref_or_default(ref: StoreRef, default: str = DEFAULT_STORE_REF) -> str:
    if isinstance(ref, Resolved):
        return ref.value
    return default


def unwrap_collection(payload: Any) -> List[Any]:
    """Pull the list of records out of any of the known response envelopes."""
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, Mapping):
        return []

    for key in COLLECTION_KEYS:
        if isinstance(payload.get(key), list):
            return payload[key]

    data = payload.get("data")
    if isinstance(data, Mapping) and isinstance(data.get("results"), list):
        return data["results"]
    return []


def _pick(raw: Mapping, *fields: str, default: Any = None) -> Any:
    for field in fields:
        value = raw.get(field)
        if value is not None:
            return value
    return default


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _as_optional_text(value: Any) -> Optional[str]:
    # Nested objects and lists are not usable as column values
    if isinstance(value, (Mapping, list, tuple)) or not _is_present(value):
        return None
    return _as_text(value)


def _as_float(value: Any, default: float = 0.0) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def _as_optional_float(value: Any) -> Optional[float]:
    if not _is_present(value):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _as_min_stock(value: Any) -> Optional[int]:
    level = _as_optional_float(value)
    return None if level is None else int(level)


def _as_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        parsed = value
    elif not _is_present(value):
        return None
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def normalize_store_payload(raw: Mapping, owner_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Map one raw store record onto the canonical store fields.

    Records without an owner are assigned to ``owner_id``: store listings are
    already filtered to the requesting user.
    """
    store_id = first_present(raw, ("id", "uuid", "pk"))
    parent = first_present(raw, ("parent_id", "parentId", "parent"))
    if isinstance(parent, Mapping):
        parent = first_present(parent, NESTED_ID_FIELDS)
    owner = first_present(raw, ("owner_id", "ownerId", "owner", "user_id", "userId"))
    if isinstance(owner, Mapping):
        owner = first_present(owner, NESTED_ID_FIELDS)
    if owner is None:
        owner = owner_id

    pos = raw.get("pos_system") or raw.get("posSystem") or {}
    if not isinstance(pos, Mapping):
        pos = {}

    return {
        "id": _as_text(store_id) if store_id is not None else None,
        "name": _as_text(_pick(raw, "name", "title", default="")),
        "address": _as_text(_pick(raw, "address", "location", default="")),
        "phone": _as_text(_pick(raw, "phone", "contact_phone", default="")),
        "email": _as_text(_pick(raw, "email", "contact_email", default="")),
        "description": _as_text(_pick(raw, "description", default="")),
        "is_verified": _as_bool(_pick(raw, "is_verified", "isVerified", "verified", default=False)),
        "currency": _as_optional_text(_pick(raw, "currency")),
        "is_sub_store": _as_bool(_pick(raw, "is_sub_store", "isSubStore", "sub_store", default=False)),
        "parent_id": _as_text(parent) if parent is not None else None,
        "owner_id": _as_text(owner) if owner is not None else "",
        "pos_enabled": _as_bool(pos.get("enabled", False)),
        "pos_type": _as_optional_text(_pick(pos, "type")) or "none",
        "pos_api_key": _as_optional_text(_pick(pos, "api_key", "apiKey")),
        "pos_sync_enabled": _as_bool(_pick(pos, "sync_enabled", "syncEnabled", default=False)),
        "pos_last_sync": _as_datetime(_pick(pos, "last_sync", "lastSync")),
    }


def normalize_product_payload(raw: Mapping) -> Dict[str, Any]:
    """
    Map one raw product record onto the canonical product fields.

    ``supermarket_id`` is returned as a ``StoreRef``; the caller decides what
    an unresolved reference becomes.
    """
    pos_id = raw.get("pos_id")
    return {
        "name": _as_text(_pick(raw, "name", default="")),
        "category": _as_text(_pick(raw, "category_name", "category_name_display", "category", default="")),
        "supplier": _as_text(_pick(raw, "supplier_name", "supplier_name_display", "supplier", default="")),
        "quantity": int(_as_float(_pick(raw, "quantity", default=0))),
        "price": _as_float(_pick(raw, "selling_price", "price", default=0)),
        "expiry_date": _as_text(_pick(raw, "expiry_date", "expiryDate", default="")),
        "supermarket_id": reconcile_store_ref(raw),
        "description": _as_text(_pick(raw, "description", default="")),
        "brand": _as_text(_pick(raw, "brand", default="")),
        "barcode": _as_text(_pick(raw, "barcode", default="")),
        "image_url": _as_text(_pick(raw, "image", "image_url", "imageUrl", default="")),
        "cost_price": _as_optional_float(_pick(raw, "cost_price", "costPrice")),
        "selling_price": _as_optional_float(_pick(raw, "selling_price", "sellingPrice", "price")),
        "min_stock_level": _as_min_stock(_pick(raw, "min_stock_level", "minStockLevel")),
        "location": _as_text(_pick(raw, "location", default="")),
        "synced_with_pos": _as_bool(_pick(raw, "synced_with_pos", "syncedWithPOS", default=False)),
        "pos_id": _as_text(pos_id) if _is_present(pos_id) else None,
    }
