"""
Unit tests for plan-gated navigation entries.
"""
import unittest
from types import SimpleNamespace

from stockive.services.navigation import get_navigation_items, get_user_plan
from stockive.services.store_context import StoreContext


def ids(items):
    return [item.id for item in items]


SINGLE = StoreContext(is_multi_store=False, total_stores=1)
MULTI = StoreContext(is_multi_store=True, total_stores=2)


class TestNavigationItems(unittest.TestCase):

    def test_anonymous_gets_login_and_signup(self):
        for ctx in (SINGLE, MULTI, StoreContext()):
            for user in (None, SimpleNamespace(plan="other")):
                self.assertEqual(ids(get_navigation_items(ctx, False, user)), ["login", "signup"])

    def test_basic_single_store_order(self):
        items = get_navigation_items(SINGLE, True, SimpleNamespace(plan="basic"))
        self.assertEqual(ids(items), [
            "stockive-dashboard", "dashboard",
            "catalog", "add-product", "orders", "stores",
            "scanner", "settings", "help",
        ])
        self.assertEqual(items[1].label, "Dashboard")
        self.assertEqual(items[2].label, "Product Catalog")

    def test_standard_multi_store_order(self):
        items = get_navigation_items(MULTI, True, SimpleNamespace(plan="standard"))
        self.assertEqual(ids(items), [
            "stockive-dashboard", "dashboard",
            "supermarket-overview", "catalog", "add-product", "orders", "stores",
            "clearance", "barcode-demo", "analytics", "suppliers",
            "purchase-orders", "purchasing-reports",
            "scanner", "pos-sync", "settings", "help",
        ])
        self.assertEqual(items[1].label, "Multi-Store Dashboard")
        self.assertEqual(items[3].label, "Multi-Store Catalog")
        self.assertEqual(items[6].label, "Store Management")

    def test_other_plan_adds_channel_entries_before_standard_block(self):
        items = ids(get_navigation_items(SINGLE, True, SimpleNamespace(plan="other")))
        start = items.index("multi-channel-orders")
        self.assertEqual(items[start:start + 4], [
            "multi-channel-orders", "channel-management",
            "stock-management", "warehouse-management",
        ])
        self.assertLess(start, items.index("clearance"))
        self.assertNotIn("supermarket-overview", items)

    def test_basic_multi_store_keeps_single_store_labels(self):
        items = get_navigation_items(MULTI, True, SimpleNamespace(plan="basic"))
        self.assertEqual(items[1].label, "Multi-Store Dashboard")
        self.assertEqual(items[2].label, "Product Catalog")
        self.assertNotIn("supermarket-overview", ids(items))

    def test_tiers_are_strict_supersets(self):
        for ctx in (SINGLE, MULTI):
            basic = set(ids(get_navigation_items(ctx, True, {"subscription": {"plan": "basic"}})))
            standard = set(ids(get_navigation_items(ctx, True, {"subscription": {"plan": "standard"}})))
            other = set(ids(get_navigation_items(ctx, True, {"subscription": {"plan": "other"}})))
            self.assertTrue(basic < standard)
            self.assertTrue(standard < other)

    def test_unknown_plan_behaves_as_basic(self):
        basic = get_navigation_items(SINGLE, True, SimpleNamespace(plan="basic"))
        for plan in ("premium", "free", "", None):
            self.assertEqual(get_navigation_items(SINGLE, True, SimpleNamespace(plan=plan)), basic)
        self.assertEqual(get_navigation_items(SINGLE, True, None), basic)

    def test_ids_are_unique(self):
        items = ids(get_navigation_items(MULTI, True, SimpleNamespace(plan="other")))
        self.assertEqual(len(items), len(set(items)))


class TestUserPlan(unittest.TestCase):

    def test_plan_sources(self):
        self.assertEqual(get_user_plan(SimpleNamespace(plan=" Standard ")), "standard")
        self.assertEqual(get_user_plan({"plan": "OTHER"}), "other")
        self.assertEqual(get_user_plan({"subscription": {"plan": "standard"}}), "standard")
        self.assertEqual(
            get_user_plan(SimpleNamespace(subscription=SimpleNamespace(plan="other"))), "other"
        )

    def test_missing_plan_is_basic(self):
        self.assertEqual(get_user_plan(None), "basic")
        self.assertEqual(get_user_plan({"id": "u1"}), "basic")
        self.assertEqual(get_user_plan(SimpleNamespace(id="u1")), "basic")


if __name__ == '__main__':
    unittest.main()
