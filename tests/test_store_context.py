"""
Unit tests for the store hierarchy helpers and the store name resolver.
"""
import unittest
from types import SimpleNamespace

from stockive.services.store_context import (
    UNKNOWN_STORE,
    StoreContext,
    analyze_store_context,
    can_access_store,
    filter_products_by_user_stores,
    get_default_store_for_product,
    get_parent_store,
    get_store_display_name,
    get_store_options,
    resolve_store,
    resolve_store_name,
    validate_store_selection,
)


def make_store(id, name=None, is_sub_store=False, parent_id=None, address=""):
    return SimpleNamespace(
        id=id,
        name=name or f"Store {id}",
        is_sub_store=is_sub_store,
        parent_id=parent_id,
        address=address,
    )


USER = SimpleNamespace(id="u1")


class TestAnalyzeStoreContext(unittest.TestCase):

    def setUp(self):
        self.main = make_store("s1", "Main Street")
        self.sub = make_store("s2", "Harbour", is_sub_store=True, parent_id="s1")

    def test_no_user_gives_empty_context(self):
        ctx = analyze_store_context([self.main, self.sub], None)
        self.assertFalse(ctx.is_multi_store)
        self.assertEqual(ctx.user_stores, [])
        self.assertIsNone(ctx.main_store)
        self.assertEqual(ctx.sub_stores, [])
        self.assertEqual(ctx.total_stores, 0)

    def test_main_and_sub_store(self):
        ctx = analyze_store_context([self.main, self.sub], USER)
        self.assertEqual(ctx.main_store.id, "s1")
        self.assertEqual(ctx.sub_stores, [self.sub])
        self.assertTrue(ctx.is_multi_store)
        self.assertEqual(ctx.dangling_sub_stores, [])

    def test_user_stores_is_input_unchanged(self):
        stores = [self.sub, self.main]
        ctx = analyze_store_context(stores, USER)
        self.assertEqual(ctx.user_stores, stores)

    def test_main_store_is_first_non_sub_store(self):
        other = make_store("s3")
        ctx = analyze_store_context([self.sub, self.main, other], USER)
        self.assertIs(ctx.main_store, self.main)

    def test_zero_stores(self):
        ctx = analyze_store_context([], USER)
        self.assertFalse(ctx.is_multi_store)
        self.assertIsNone(ctx.main_store)
        self.assertEqual(ctx.total_stores, 0)

    def test_single_store_is_not_multi_store(self):
        ctx = analyze_store_context([self.main], USER)
        self.assertFalse(ctx.is_multi_store)
        self.assertEqual(ctx.total_stores, 1)

    def test_only_sub_stores_has_no_main_store(self):
        orphan = make_store("s4", is_sub_store=True, parent_id="gone")
        ctx = analyze_store_context([self.sub, orphan], USER)
        self.assertIsNone(ctx.main_store)
        self.assertEqual(len(ctx.sub_stores), 2)
        # s2 points at s1, which is not in this list either
        self.assertEqual(ctx.dangling_sub_stores, [self.sub, orphan])

    def test_sub_store_without_parent_is_kept_and_flagged(self):
        orphan = make_store("s5", is_sub_store=True)
        with self.assertLogs("stockive.services.store_context", level="WARNING"):
            ctx = analyze_store_context([self.main, orphan], USER)
        self.assertIn(orphan, ctx.sub_stores)
        self.assertEqual(ctx.dangling_sub_stores, [orphan])

    def test_totals_match_for_many_shapes(self):
        shapes = [
            [],
            [self.main],
            [self.sub],
            [self.main, self.sub],
            [make_store(str(i), is_sub_store=i % 2 == 0) for i in range(7)],
        ]
        for stores in shapes:
            for user in (None, USER):
                ctx = analyze_store_context(stores, user)
                self.assertEqual(ctx.total_stores, len(ctx.user_stores))
                self.assertEqual(ctx.is_multi_store, ctx.total_stores > 1)


class TestResolveStoreName(unittest.TestCase):

    def setUp(self):
        self.stores = [
            make_store("s1", "Main Street", address="1 Main St"),
            make_store("s9", "Downtown Branch", address="9 Harbour Rd"),
        ]

    def test_empty_store_list(self):
        self.assertEqual(resolve_store_name([], "anything"), UNKNOWN_STORE)
        self.assertEqual(resolve_store_name([], "anything", "My Shop"), "My Shop")

    def test_id_match(self):
        for store in self.stores:
            self.assertEqual(resolve_store_name(self.stores, store.id), store.name)

    def test_id_match_is_string_compared(self):
        stores = [make_store(5, "Numeric")]
        self.assertEqual(resolve_store_name(stores, "5"), "Numeric")

    def test_id_beats_name(self):
        stores = [make_store("Harbour", "First"), make_store("x", "Harbour")]
        self.assertEqual(resolve_store_name(stores, "Harbour"), "First")

    def test_case_insensitive_name(self):
        self.assertEqual(resolve_store_name(self.stores, "MAIN STREET"), "Main Street")
        self.assertEqual(resolve_store_name(self.stores, "  downtown branch "), "Downtown Branch")

    def test_name_reference_from_legacy_product(self):
        product = {"supermarketId": "Downtown Branch"}
        self.assertEqual(resolve_store_name(self.stores, product["supermarketId"]), "Downtown Branch")

    def test_address_match(self):
        self.assertEqual(resolve_store_name(self.stores, "9 harbour rd"), "Downtown Branch")

    def test_fallback_then_unknown(self):
        self.assertEqual(resolve_store_name(self.stores, "nowhere", "Main Street"), "Main Street")
        self.assertEqual(resolve_store_name(self.stores, "nowhere"), UNKNOWN_STORE)
        self.assertEqual(resolve_store_name(self.stores, "nowhere", ""), UNKNOWN_STORE)

    def test_empty_reference(self):
        self.assertEqual(resolve_store_name(self.stores, ""), UNKNOWN_STORE)
        self.assertEqual(resolve_store_name(self.stores, None, "Fallback"), "Fallback")

    def test_sentinel_reference(self):
        self.assertEqual(resolve_store_name(self.stores, "default"), UNKNOWN_STORE)

    def test_resolve_store_follows_same_order(self):
        self.assertIs(resolve_store(self.stores, "s9"), self.stores[1])
        self.assertIs(resolve_store(self.stores, "main street"), self.stores[0])
        self.assertIs(resolve_store(self.stores, "1 MAIN ST"), self.stores[0])
        self.assertIsNone(resolve_store(self.stores, "elsewhere"))
        self.assertIsNone(resolve_store(self.stores, None))


class TestStoreHelpers(unittest.TestCase):

    def setUp(self):
        self.main = make_store("s1", "Main Street")
        self.sub = make_store("s2", "Harbour", is_sub_store=True, parent_id="s1")
        self.multi = analyze_store_context([self.main, self.sub], USER)
        self.single = analyze_store_context([self.main], USER)

    def test_display_name(self):
        self.assertEqual(get_store_display_name(self.main), "Main Street (Main Store)")
        self.assertEqual(get_store_display_name(self.sub), "Harbour (Sub-Store)")

    def test_parent_store(self):
        self.assertIs(get_parent_store(self.sub, [self.main, self.sub]), self.main)
        self.assertIsNone(get_parent_store(self.main, [self.main, self.sub]))
        self.assertIsNone(get_parent_store(self.sub, [self.sub]))

    def test_options_multi_store(self):
        options = get_store_options(self.multi)
        self.assertEqual([o["value"] for o in options], ["all", "s1", "s2"])
        self.assertEqual(options[0]["label"], "All My Stores")
        self.assertEqual(options[2]["label"], "Harbour (Sub-Store)")

    def test_options_single_store(self):
        self.assertEqual(get_store_options(self.single), [{"value": "s1", "label": "Main Street"}])

    def test_options_without_stores(self):
        self.assertEqual(get_store_options(StoreContext()), [])

    def test_access_and_default_store(self):
        self.assertTrue(can_access_store("s2", self.multi))
        self.assertFalse(can_access_store("s3", self.multi))
        self.assertEqual(get_default_store_for_product(self.multi), "s1")
        only_sub = analyze_store_context([self.sub], USER)
        self.assertEqual(get_default_store_for_product(only_sub), "s2")
        self.assertEqual(get_default_store_for_product(StoreContext()), "")

    def test_validate_selection(self):
        self.assertEqual(validate_store_selection([], self.multi),
                         (False, "At least one store must be selected"))
        self.assertEqual(validate_store_selection(["s1", "x", "y"], self.multi),
                         (False, "You don't have access to stores: x, y"))
        self.assertEqual(validate_store_selection(["s1", "s2"], self.multi), (True, None))

    def test_filter_products(self):
        products = [
            SimpleNamespace(id="p1", supermarket_id="s1"),
            SimpleNamespace(id="p2", supermarket_id="s2"),
            SimpleNamespace(id="p3", supermarket_id="elsewhere"),
        ]
        kept = filter_products_by_user_stores(products, self.multi)
        self.assertEqual([p.id for p in kept], ["p1", "p2"])
        self.assertEqual(filter_products_by_user_stores(products, StoreContext()), [])


if __name__ == '__main__':
    unittest.main()
