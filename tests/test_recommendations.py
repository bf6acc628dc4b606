"""
Co-purchase aggregation tests (pure functions, no database)
"""

from types import SimpleNamespace

import pytest

from buytogether.recommendations import (
    LineItem,
    OrderSnapshot,
    count_product_sets,
    find_most_frequent_set,
    product_set_signature,
    resolve_products,
)


def _p(pk):
    return SimpleNamespace(pk=pk)


A, B, C, D, E = _p(1), _p(2), _p(3), _p(4), _p(5)


def _order(oid, *entities, state="completed"):
    return OrderSnapshot(id=oid, state=state, items=tuple(LineItem(e) for e in entities))


class TestProductSetSignature:

    def test_independent_of_purchase_order(self):
        assert product_set_signature([3, 1, 2]) == product_set_signature([2, 3, 1]) == "1_2_3"

    def test_integers_sort_numerically(self):
        assert product_set_signature([10, 9, 100]) == "9_10_100"

    def test_strings_sort_lexicographically_after_integers(self):
        assert product_set_signature(["b", 2, "a"]) == "2_a_b"

    def test_duplicates_collapse(self):
        assert product_set_signature([2, 1, 2]) == "1_2"


class TestResolveProducts:

    def test_missing_entities_are_skipped(self):
        order = _order(1, A, None, B)
        assert resolve_products(order) == [A, B]

    def test_keeps_line_item_order_and_first_occurrence(self):
        order = _order(1, C, A, C, B)
        assert resolve_products(order) == [C, A, B]


class TestFindMostFrequentSet:

    def test_worked_example(self):
        orders = [
            _order(1, A, B, C),
            _order(2, B, C, A),
            _order(3, A, B, C, D),
        ]
        result = find_most_frequent_set(orders)

        assert result.signature == "1_2_3"
        assert result.count == 2
        # Representatives come from the first order, unsorted.
        assert result.products == [A, B, C]

        counts = count_product_sets(orders)
        assert counts["1_2_3_4"].count == 1

    def test_representatives_are_not_replaced(self):
        orders = [_order(1, C, B, A), _order(2, A, B, C)]
        result = find_most_frequent_set(orders)
        assert result.products == [C, B, A]
        assert result.product_ids == [3, 2, 1]

    def test_no_orders(self):
        assert find_most_frequent_set([]) is None

    def test_all_orders_below_floor(self):
        orders = [_order(1, A, B), _order(2, C), _order(3, D, E)]
        assert find_most_frequent_set(orders) is None

    def test_two_products_never_count_three_do(self):
        orders = [_order(1, A, B), _order(2, A, B), _order(3, C, D, E)]
        result = find_most_frequent_set(orders)
        assert result.signature == "3_4_5"
        assert result.count == 1
        assert "1_2" not in count_product_sets(orders)

    def test_floor_applies_after_resolution(self):
        orders = [_order(1, A, None, B), _order(2, A, None, B, C)]
        result = find_most_frequent_set(orders)
        assert result.signature == "1_2_3"
        assert result.count == 1

    def test_repeated_product_counts_once_toward_floor(self):
        assert find_most_frequent_set([_order(1, A, A, B)]) is None

    def test_only_completed_orders(self):
        orders = [
            _order(1, A, B, C, state="draft"),
            _order(2, A, B, C, state="canceled"),
            _order(3, C, D, E),
        ]
        result = find_most_frequent_set(orders)
        assert result.signature == "3_4_5"
        assert result.count == 1

    def test_tie_goes_to_first_seen_signature(self):
        orders = [
            _order(1, C, D, E),
            _order(2, A, B, C),
            _order(3, A, B, C),
            _order(4, E, D, C),
        ]
        result = find_most_frequent_set(orders)
        assert result.signature == "3_4_5"
        assert result.count == 2

    def test_higher_count_beats_earlier_signature(self):
        orders = [
            _order(1, C, D, E),
            _order(2, A, B, C),
            _order(3, A, B, C),
        ]
        assert find_most_frequent_set(orders).signature == "1_2_3"

    def test_deterministic(self):
        orders = [_order(i, *combo) for i, combo in enumerate([(A, B, C), (C, D, E), (E, C, D), (B, A, C)])]
        first = find_most_frequent_set(orders)
        for _ in range(5):
            again = find_most_frequent_set(orders)
            assert (again.signature, again.count) == (first.signature, first.count)

    @pytest.mark.parametrize("min_products, expected", [(2, "1_2"), (4, None)])
    def test_custom_floor(self, min_products, expected):
        orders = [_order(1, A, B), _order(2, B, A), _order(3, C, D, E)]
        result = find_most_frequent_set(orders, min_products=min_products)
        assert (result.signature if result else None) == expected

    def test_custom_state(self):
        orders = [_order(1, A, B, C, state="placed")]
        assert find_most_frequent_set(orders) is None
        assert find_most_frequent_set(orders, state="placed").count == 1
