"""Tests for CurveComparator."""
import pytest
from storyguard.models.density import DensityAnalysis, DensityPoint, TargetCurve, TargetPoint
from storyguard.tools.curve_comparator import CurveComparator
from storyguard.tools.density_controller import DensityController


def make_curve(*densities):
    count = len(densities)
    return [
        DensityPoint(position=i / (count - 1) if count > 1 else 0.0, density=d, score=0.5)
        for i, d in enumerate(densities)
    ]


def make_target(*points):
    return TargetCurve(variations=[TargetPoint(position=p, density=d) for p, d in points])


@pytest.fixture
def comparator():
    return CurveComparator()


def test_missing_target_is_trivial_match(comparator):
    result = comparator.compare(make_curve("low", "high"), None)
    assert result.match is True
    assert result.score == 100
    assert result.issues == []


def test_target_without_points_is_trivial_match(comparator):
    result = comparator.compare(make_curve("low", "high"), TargetCurve())
    assert result.match is True
    assert result.score == 100
    assert result.issues == []


def test_low_high_mismatch_raises_one_high_issue(comparator):
    """target low vs actual high at 0.5: diff 2"""
    curve = make_curve("medium", "high", "medium")
    result = comparator.compare(curve, make_target((0.5, "low")))

    assert len(result.issues) == 1
    issue = result.issues[0]
    assert issue.severity == "high"
    assert issue.position == 0.5
    assert issue.target == "low"
    assert issue.actual == "high"
    assert result.score == pytest.approx(40)
    assert result.match is False
    assert result.match_rate == 0


def test_one_step_difference_is_not_an_issue(comparator):
    curve = make_curve("medium", "medium", "medium")
    result = comparator.compare(curve, make_target((0.0, "medium"), (1.0, "high")))
    assert result.issues == []
    assert result.score == pytest.approx(85)
    assert result.match is True
    assert result.match_rate == 0.5


def test_exact_match(comparator):
    curve = make_curve("low", "medium", "high")
    result = comparator.compare(curve, make_target((0.0, "low"), (0.5, "medium"), (1.0, "high")))
    assert result.score == 100
    assert result.match_rate == 1.0


def test_nearest_point_tie_keeps_first_point(comparator):
    """Equal distance to 0.0 and 1.0: the earlier point is used"""
    curve = make_curve("low", "high")
    assert comparator.find_nearest_point(curve, 0.5).position == 0.0

    result = comparator.compare(curve, make_target((0.5, "low")))
    assert result.issues == []
    assert result.match_rate == 1.0


def test_nearest_point_picks_closest(comparator):
    curve = make_curve("low", "medium", "high")
    assert comparator.find_nearest_point(curve, 0.8).density == "high"
    assert comparator.find_nearest_point(curve, 0.3).density == "medium"
    assert comparator.find_nearest_point([], 0.3) is None


def test_unknown_density_label_treated_as_medium(comparator):
    curve = make_curve("medium", "medium")
    result = comparator.compare(curve, make_target((0.0, "extreme")))
    assert result.match_rate == 1.0


def test_empty_actual_curve_counts_toward_average(comparator):
    result = comparator.compare([], make_target((0.0, "high")))
    assert result.score == 100
    assert result.match_rate == 0


def test_accepts_density_analysis(comparator):
    analysis = DensityAnalysis(curve=make_curve("high", "high", "high"))
    result = comparator.compare(analysis, make_target((0.0, "low"), (1.0, "low")))
    assert len(result.issues) == 2
    assert result.score == pytest.approx(40)


def test_score_never_negative(comparator):
    # avg diff 2 → 100 - 60; the floor at 0 guards larger penalties
    result = comparator.compare(make_curve("high"), make_target((0.0, "low")))
    assert result.score >= 0


# ==================== PLAIN DICT INPUT ====================

def test_accepts_target_as_dict(comparator):
    target = {"variations": [{"position": 0.5, "density": "low"}]}
    result = comparator.compare(make_curve("high", "high", "high"), target)
    assert result.match is False
    assert [issue.target for issue in result.issues] == ["low"]


def test_accepts_target_as_list_of_dicts(comparator):
    result = comparator.compare(make_curve("high"), [{"position": 0.0, "density": "high"}])
    assert result.match_rate == 1.0


def test_accepts_actual_as_dict(comparator):
    analysis = {"curve": [{"position": 0.0, "density": "high"}, {"position": 1.0, "density": "high"}]}
    result = comparator.compare(analysis, make_target((1.0, "low")))
    assert len(result.issues) == 1
    assert result.issues[0].actual == "high"


def test_unreadable_target_is_trivial_match(comparator):
    result = comparator.compare(make_curve("high"), {"variations": "not a list"})
    assert result.match is True
    assert result.score == 100


def test_unreadable_actual_curve_is_ignored(comparator):
    result = comparator.compare({"curve": [{"position": 7, "density": "high"}]}, make_target((0.0, "low")))
    assert result.issues == []
    assert result.match_rate == 0


def test_density_controller_accepts_dicts():
    controller = DensityController()
    analysis = controller.analyze_density("战斗" * 200)
    comparison = controller.compare_with_target(
        analysis, {"variations": [{"position": 0.5, "density": "low"}]}
    )
    assert comparison.issues[0].severity == "high"
    assert controller.check_balance(analysis.model_dump()).balanced is False
