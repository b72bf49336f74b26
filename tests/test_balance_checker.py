"""Tests for BalanceChecker."""
from storyguard.models.density import DensityAnalysis, DensityPoint
from storyguard.tools.balance_checker import BalanceChecker


def make_curve(densities):
    count = len(densities)
    return [
        DensityPoint(position=i / (count - 1), density=d, score=0.5)
        for i, d in enumerate(densities)
    ]


def test_all_high_is_unbalanced():
    result = BalanceChecker().check_balance(make_curve(["high"] * 10))
    assert result.balanced is False
    assert len(result.issues) == 1
    assert result.issues[0].severity == "medium"
    assert "高水平" in result.issues[0].message
    assert result.issues[0].suggestion == "添加低密度段落作为缓冲"


def test_all_low_is_unbalanced():
    result = BalanceChecker().check_balance(make_curve(["low"] * 10))
    assert result.balanced is False
    assert len(result.issues) == 1
    assert "低水平" in result.issues[0].message
    assert result.issues[0].suggestion == "增加事件密度，推进情节"


def test_half_high_half_low_is_balanced():
    result = BalanceChecker().check_balance(make_curve(["high"] * 5 + ["low"] * 5))
    assert result.balanced is True
    assert result.issues == []


def test_exactly_seventy_percent_is_still_balanced():
    result = BalanceChecker().check_balance(make_curve(["high"] * 7 + ["medium"] * 3))
    assert result.balanced is True


def test_eighty_percent_high_is_unbalanced():
    result = BalanceChecker().check_balance(make_curve(["high"] * 8 + ["medium"] * 2))
    assert result.balanced is False


def test_empty_curve_is_balanced():
    assert BalanceChecker().check_balance([]).balanced is True


def test_accepts_density_analysis():
    analysis = DensityAnalysis(curve=make_curve(["low"] * 9 + ["high"]))
    assert BalanceChecker().check_balance(analysis).balanced is False


def test_accepts_curve_as_dict():
    result = BalanceChecker().check_balance({"curve": [{"position": 0, "density": "high"}]})
    assert result.balanced is False


def test_accepts_list_of_point_dicts():
    curve = [{"position": i / 9, "density": "low"} for i in range(10)]
    assert BalanceChecker().check_balance(curve).balanced is False


def test_unreadable_curve_is_balanced():
    assert BalanceChecker().check_balance({"curve": [{"density": "sideways"}]}).balanced is True
    assert BalanceChecker().check_balance(None).balanced is True
