"""
Navigation entries per subscription plan.

The tables are listed in menu order. Higher plans only ever add entries.
"""
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from .store_context import StoreContext

PLAN_BASIC = "basic"
PLAN_STANDARD = "standard"
PLAN_OTHER = "other"

STANDARD_PLANS = (PLAN_STANDARD, PLAN_OTHER)


@dataclass(frozen=True)
class NavItem:
    id: str
    label: str
    icon: str


AUTH_ITEMS = (
    NavItem("login", "Login", "🔑"),
    NavItem("signup", "Sign Up", "📝"),
)

DASHBOARD_ITEM = NavItem("stockive-dashboard", "Stockive UI", "✨")

MULTI_STORE_ITEMS = (
    NavItem("supermarket-overview", "Store Overview", "🏬"),
    NavItem("catalog", "Multi-Store Catalog", "📦"),
    NavItem("add-product", "Add Products", "➕"),
    NavItem("orders", "Orders", "📋"),
    NavItem("stores", "Store Management", "🏪"),
)

SINGLE_STORE_ITEMS = (
    NavItem("catalog", "Product Catalog", "📦"),
    NavItem("add-product", "Add Product", "➕"),
    NavItem("orders", "Orders", "📋"),
    NavItem("stores", "Store Settings", "🏪"),
)

OTHER_PLAN_ITEMS = (
    NavItem("multi-channel-orders", "Multi-Channel Orders", "🌐"),
    NavItem("channel-management", "Channel Management", "🌐"),
    NavItem("stock-management", "Stock Management", "📊"),
    NavItem("warehouse-management", "Warehouse Management", "🏢"),
)

STANDARD_PLAN_ITEMS = (
    NavItem("clearance", "Clearance", "🏷️"),
    NavItem("barcode-demo", "Barcodes & Tickets", "🏷️"),
    NavItem("analytics", "Analytics", "📈"),
    NavItem("suppliers", "Suppliers", "🤝"),
    NavItem("purchase-orders", "Purchase Orders", "🧾"),
    NavItem("purchasing-reports", "Purchasing Reports", "📑"),
)

SCANNER_ITEM = NavItem("scanner", "Scanner", "📱")
POS_SYNC_ITEM = NavItem("pos-sync", "POS Sync", "🔄")

FOOTER_ITEMS = (
    NavItem("settings", "Settings", "⚙️"),
    NavItem("help", "Help & Support", "❓"),
)


def get_user_plan(current_user: Optional[Any]) -> str:
    """Lower-cased plan of the user; anything unset counts as basic."""
    if current_user is None:
        return PLAN_BASIC

    if isinstance(current_user, Mapping):
        plan = current_user.get("plan")
        subscription = current_user.get("subscription")
    else:
        plan = getattr(current_user, "plan", None)
        subscription = getattr(current_user, "subscription", None)

    if plan is None:
        if isinstance(subscription, Mapping):
            plan = subscription.get("plan")
        elif subscription is not None:
            plan = getattr(subscription, "plan", None)

    if not plan or not str(plan).strip():
        return PLAN_BASIC
    return str(plan).strip().lower()


def get_navigation_items(ctx: StoreContext, is_authenticated: bool, current_user: Optional[Any]) -> List[NavItem]:
    if not is_authenticated:
        return list(AUTH_ITEMS)

    plan = get_user_plan(current_user)
    has_standard = plan in STANDARD_PLANS

    items = [
        DASHBOARD_ITEM,
        NavItem(
            "dashboard",
            "Multi-Store Dashboard" if ctx.is_multi_store else "Dashboard",
            "📊",
        ),
    ]

    if ctx.is_multi_store and has_standard:
        items.extend(MULTI_STORE_ITEMS)
    else:
        items.extend(SINGLE_STORE_ITEMS)

    if plan == PLAN_OTHER:
        items.extend(OTHER_PLAN_ITEMS)

    if has_standard:
        items.extend(STANDARD_PLAN_ITEMS)

    items.append(SCANNER_ITEM)

    if has_standard:
        items.append(POS_SYNC_ITEM)

    items.extend(FOOTER_ITEMS)
    return items
