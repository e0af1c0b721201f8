import pytest

from dicebot.errors import ModifierError
from dicebot.operations import Operation, OperationKind, Selector, SelectorMode


class TestSelector:
    @pytest.mark.parametrize(
        "mode,value,expected",
        [
            (SelectorMode.EXACT, 3, [2]),
            (SelectorMode.LESS_THAN, 3, [1, 4]),
            (SelectorMode.GREATER_THAN, 3, [0, 3]),
            (SelectorMode.HIGHEST, 2, [0, 3]),
            (SelectorMode.LOWEST, 2, [1, 4]),
        ],
    )
    def test_select(self, mode, value, expected):
        assert Selector(mode, value).select([5, 1, 3, 6, 2]) == expected

    def test_ranked_ties_prefer_earlier_dice(self):
        assert Selector(SelectorMode.HIGHEST, 2).select([4, 4, 4]) == [0, 1]
        assert Selector(SelectorMode.LOWEST, 1).select([2, 1, 1]) == [1]

    def test_count_larger_than_pool(self):
        assert Selector(SelectorMode.HIGHEST, 10).select([1, 2]) == [0, 1]

    def test_ranked_selector_cannot_match(self):
        with pytest.raises(ModifierError):
            Selector(SelectorMode.HIGHEST, 1).matches(3)

    def test_negative_value(self):
        with pytest.raises(ModifierError):
            Selector(SelectorMode.EXACT, -1)


class TestOperation:
    def test_reroll_rejects_ranked_selectors(self):
        with pytest.raises(ModifierError):
            Operation(OperationKind.REROLL, Selector(SelectorMode.HIGHEST, 1))

    def test_reroll_once_accepts_ranked_selectors(self):
        operation = Operation(OperationKind.REROLL_ONCE, Selector(SelectorMode.LOWEST, 1))
        assert str(operation) == "rol1"

    @pytest.mark.parametrize("kind", [OperationKind.MIN, OperationKind.MAX])
    @pytest.mark.parametrize(
        "mode", [SelectorMode.LESS_THAN, SelectorMode.GREATER_THAN, SelectorMode.HIGHEST]
    )
    def test_clamps_need_plain_threshold(self, kind, mode):
        with pytest.raises(ModifierError):
            Operation(kind, Selector(mode, 3))

    def test_clamp(self):
        minimum = Operation.from_codes("mi", "", 3)
        maximum = Operation.from_codes("ma", "", 3)

        assert [minimum.clamp(x) for x in (1, 3, 5)] == [3, 3, 5]
        assert [maximum.clamp(x) for x in (1, 3, 5)] == [1, 3, 3]

    def test_from_codes_unknown(self):
        with pytest.raises(ModifierError):
            Operation.from_codes("zz", "", 1)

    def test_exact_operations(self):
        assert Operation.from_codes("k", "h", 1).exact
        assert Operation.from_codes("mi", "", 1).exact
        assert not Operation.from_codes("e", "", 6).exact
        assert not Operation.from_codes("ro", "", 1).exact
