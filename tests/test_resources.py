"""Tests for gaiasim.economy.resources (the ledger)."""

from numpy.random import Generator

from gaiasim.economy.resources import ResourceKind, Resources

E = ResourceKind.ENERGY
M = ResourceKind.MATERIAL


class TestResources:
    """Tests for stock and diff bookkeeping."""

    def test_starts_empty(self) -> None:
        res = Resources()
        assert all(v == 0.0 for v in res.stock.values())
        assert all(v == 0.0 for v in res.diff.values())

    def test_with_stock(self) -> None:
        res = Resources.with_stock({E: 50.0})
        assert res.stock_of(E) == 50.0
        assert res.stock_of(M) == 0.0

    def test_add_and_remove(self) -> None:
        res = Resources.with_stock({E: 10.0})
        assert res.add(E, 5.0) is False
        assert res.add(E, -12.0) is False
        assert res.stock_of(E) == 3.0

    def test_clamps_at_zero_and_reports_depletion(self) -> None:
        res = Resources.with_stock({E: 10.0})
        assert res.add(E, -25.0) is True
        assert res.stock_of(E) == 0.0

    def test_diff_accumulates_requested_amounts(self) -> None:
        res = Resources.with_stock({E: 10.0})
        res.add(E, 4.0)
        res.add(E, -30.0)
        assert res.diff_of(E) == -26.0
        assert res.stock_of(E) == 0.0

    def test_reset_diffs(self) -> None:
        res = Resources()
        res.add(E, 4.0)
        res.add(M, 2.0)
        res.reset_diffs()
        assert res.diff_of(E) == 0.0
        assert res.diff_of(M) == 0.0
        assert res.stock_of(E) == 4.0

    def test_set_diff_overwrites(self) -> None:
        res = Resources()
        res.add(E, 4.0)
        res.set_diff(E, -1.0)
        assert res.diff_of(E) == -1.0

    def test_stock_never_negative(self, rng: Generator) -> None:
        res = Resources.with_stock({E: 5.0})
        for amount in rng.uniform(-20.0, 15.0, size=500):
            res.add(E, float(amount))
            assert res.stock_of(E) >= 0.0


class TestSpending:
    """Tests for all-or-nothing payments."""

    def test_can_afford(self) -> None:
        res = Resources.with_stock({E: 10.0, M: 5.0})
        assert res.can_afford({E: 10.0, M: 5.0})
        assert not res.can_afford({E: 10.0, M: 6.0})

    def test_spend_success(self) -> None:
        res = Resources.with_stock({E: 10.0, M: 5.0})
        assert res.spend({E: 4.0, M: 5.0})
        assert res.stock_of(E) == 6.0
        assert res.stock_of(M) == 0.0

    def test_spend_failure_changes_nothing(self) -> None:
        res = Resources.with_stock({E: 10.0, M: 5.0})
        assert not res.spend({E: 4.0, M: 50.0})
        assert res.stock_of(E) == 10.0
        assert res.diff_of(E) == 0.0

    def test_dict_round_trip(self) -> None:
        res = Resources.with_stock({E: 10.0})
        res.add(M, 3.5)
        assert Resources.from_dict(res.to_dict()) == res
