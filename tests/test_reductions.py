import pytest
from functools import reduce as builtin_reduce
from lazyseq import (
    Sequence, all, any, collect, count, find, for_each, for_each_with_index,
    index_of, reduce,
)


class TestReductions:
    """Test folding and draining consumers"""

    def test_reduce_with_initial(self):
        """reduce equals the standard left fold from initial"""
        data = [1, 2, 3, 4, 5]
        result = reduce(data, lambda acc, x: acc * 10 + x, 7)
        expected = builtin_reduce(lambda acc, x: acc * 10 + x, data, 7)
        assert result == expected, f"Expected {expected}, got {result}"

    def test_reduce_without_initial_seeds_from_first(self):
        """Without initial the first value is the seed"""
        assert reduce([1, 2, 3, 4, 5], lambda a, b: a * b) == 120
        assert reduce(["a", "b", "c"], lambda a, b: b + a) == "cba"

    def test_reduce_single_value(self):
        """A single value with no initial is returned untouched"""
        calls = []
        assert reduce([42], lambda a, b: calls.append(b)) == 42
        assert calls == [], "func should not run for a single value"

    def test_reduce_empty_has_no_result(self):
        """An empty sequence without initial gives the default"""
        assert reduce([], lambda a, b: a + b) is None
        assert reduce([], lambda a, b: a + b, default="empty") == "empty"

    def test_reduce_empty_with_initial(self):
        """An empty sequence with initial returns initial"""
        assert reduce([], lambda a, b: a + b, 0) == 0

    def test_reduce_keeps_none_accumulator(self):
        """A None accumulator does not reseed the fold"""
        seen = []

        def step(acc, x):
            seen.append((acc, x))
            return None

        assert reduce([1, 2, 3], step) is None
        assert seen == [(1, 2), (None, 3)]

    def test_reduce_method_form(self):
        """s.reduce(f, init) is reduce(s, f, init)"""
        assert count(1, 1, 100).reduce(lambda a, b: a + b, 0) == 5050

    def test_collect_preserves_order(self):
        """collect drains into a list in yield order"""
        assert collect((3, 1, 2)) == [3, 1, 2]
        assert collect([]) == []

    def test_multiple_consumers_share_one_pass(self):
        """Consumers on the same Sequence pick up where the last one stopped"""
        s = Sequence([1, 2, 3, 4, 5])
        assert s.find(lambda x: x > 1) == 2
        assert s.collect() == [3, 4, 5]


class TestPredicates:
    """Test all, any, find and index_of"""

    def test_all(self):
        """all is true when every value passes"""
        assert all([2, 4, 6], lambda x: x % 2 == 0) is True
        assert all([2, 3, 6], lambda x: x % 2 == 0) is False

    def test_all_empty(self):
        """all over nothing is true"""
        assert all([], lambda x: False) is True

    def test_all_short_circuits(self, counting_pull):
        """all stops pulling at the first failure"""
        pull = counting_pull([1, 2, 3, 4])
        assert all(pull, lambda x: x < 2) is False
        assert pull.calls == 2

    def test_any(self):
        """any is true when some value passes"""
        assert any([1, 3, 4], lambda x: x % 2 == 0) is True
        assert any([1, 3, 5], lambda x: x % 2 == 0) is False

    def test_any_empty(self):
        """any over nothing is false"""
        assert any([], lambda x: True) is False

    def test_any_short_circuits_on_infinite_input(self):
        """any returns as soon as a value passes, even on an infinite input"""
        assert any(count(), lambda x: x > 100) is True

    def test_find(self):
        """find returns the first passing value"""
        assert find([1, 2, 3, 4, 5], lambda x: x > 3) == 4

    def test_find_not_found(self):
        """find signals 'not found' with its default"""
        assert find([1, 2, 3], lambda x: x > 10) is None
        assert find([1, 2, 3], lambda x: x > 10, default=-1) == -1

    def test_index_of(self):
        """index_of is the 1-based position of the first equal element"""
        assert index_of(["a", "b", "c", "b"], "b") == 2
        assert index_of(count(5), 9) == 5

    def test_index_of_uses_equality(self):
        """index_of compares with ==, not identity"""
        assert index_of([1.0, 2.0], 2) == 2
        assert index_of([[1], [2]], [2]) == 2

    def test_index_of_not_found(self):
        """index_of returns None when nothing matches"""
        assert index_of([1, 2, 3], 7) is None
        assert index_of([], 7) is None


class TestSideEffectConsumers:
    """Test for_each and for_each_with_index"""

    def test_for_each(self):
        """for_each visits each value once, in order, and returns None"""
        seen = []
        assert for_each(["a", "b"], seen.append) is None
        assert seen == ["a", "b"]

    def test_for_each_with_index(self):
        """for_each_with_index passes a 1-based index before the value"""
        seen = []
        result = for_each_with_index(["x", "y", "z"], lambda i, v: seen.append((i, v)))
        assert result is None
        assert seen == [(1, "x"), (2, "y"), (3, "z")]

    def test_for_each_method_form(self):
        """Method forms match the module functions"""
        seen = []
        Sequence([1, 2]).for_each_with_index(lambda i, v: seen.append(i * v))
        assert seen == [1, 4]
