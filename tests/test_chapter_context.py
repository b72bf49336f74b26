"""Tests for chapter context parsing and the per-draft state models."""
import pytest
from storyguard.models import (
    BalanceResult, ChapterContext, ComparisonResult, Issue, QualityReport,
    SceneGenerationState, TargetCurve, TargetPoint
)
from storyguard.utils.json_parser import repair_json


# ==================== JSON REPAIR ====================

def test_repair_json_strips_markdown_fence_and_trailing_comma():
    raw = '```json\n{"target_word_count": 1200,}\n```'
    context = ChapterContext.from_llm_output(raw)
    assert context.target_word_count == 1200


def test_repair_json_drops_trailing_explanation():
    raw = '以下是章节规划：{"target_word_count": 900} 希望对你有帮助 {"x": 1}'
    assert repair_json(raw) == '{"target_word_count": 900}'


def test_repair_json_keeps_braces_inside_strings():
    raw = '{"note": "a } b"}'
    assert repair_json(raw) == raw


def test_repair_json_empty_input():
    assert repair_json("") == ""


def test_from_llm_output_full_plan():
    raw = """
    {
      "target_word_count": 3000,
      "pacing_curve": {"variations": [{"position": 0.0, "pacing": "slow"}]},
      "emotion_curve": {"points": [{"position": 0.0, "emotion": 0.3}, {"position": 0.8, "emotion": 0.9}]},
      "chapter_structure": {"scenes": [{"word_count": 800}]},
      "density_curve": {"variations": [{"position": 0.5, "density": "high"}]}
    }
    """
    context = ChapterContext.from_llm_output(raw)
    assert context.pacing_at(0) == "slow"
    assert context.emotion_at(1) == 0.9
    assert context.word_count_at(0) == 800
    assert context.density_curve.variations[0].density == "high"


# ==================== INDEX-ALIGNED LOOKUPS ====================

def test_missing_entries_are_none():
    context = ChapterContext.model_validate({
        "pacing_curve": {"variations": [{"pacing": "fast"}]},
    })
    assert context.pacing_at(0) == "fast"
    assert context.pacing_at(1) is None
    assert context.emotion_at(0) is None
    assert context.word_count_at(0) is None


def test_empty_context():
    context = ChapterContext()
    assert context.target_word_count is None
    assert context.density_curve is None


# ==================== TARGET CURVE SLICE ====================

def test_slice_rescales_points_inside_range():
    curve = TargetCurve(variations=[
        TargetPoint(position=0.0, density="low"),
        TargetPoint(position=0.5, density="medium"),
        TargetPoint(position=0.75, density="high"),
        TargetPoint(position=1.0, density="low"),
    ])
    sliced = curve.slice(0.5, 1.0)
    assert [(p.position, p.density) for p in sliced.variations] == [
        (0.0, "medium"), (0.5, "high"), (1.0, "low")
    ]


def test_slice_empty_range():
    curve = TargetCurve(variations=[TargetPoint(position=0.3, density="high")])
    assert curve.slice(0.5, 0.5).variations == []
    assert curve.slice(0.6, 0.9).variations == []


# ==================== QUALITY REPORT ====================

def test_default_report_passes():
    report = QualityReport()
    assert report.passed is True
    assert report.issues == []


def test_high_issue_fails_report():
    report = QualityReport(
        comparison=ComparisonResult(match=True, score=80, issues=[
            Issue(severity="high", message="密度不匹配", suggestion="放缓节奏")
        ])
    )
    assert report.passed is False


def test_unbalanced_or_unmatched_fails_report():
    assert QualityReport(balance=BalanceResult(balanced=False)).passed is False
    assert QualityReport(comparison=ComparisonResult(match=False, score=40)).passed is False


def test_revision_instructions_sorted_and_deduplicated():
    report = QualityReport(
        balance=BalanceResult(balanced=False, issues=[
            Issue(severity="medium", message="密度长时间保持高水平", suggestion="添加缓冲"),
        ]),
        comparison=ComparisonResult(match=False, score=40, issues=[
            Issue(severity="high", message="密度不匹配", suggestion="放缓节奏"),
            Issue(severity="high", message="密度不匹配", suggestion="放缓节奏"),
        ]),
        extra_issues=[Issue(severity="low", message="字数偏少")],
    )
    assert report.revision_instructions() == [
        "密度不匹配：放缓节奏",
        "密度长时间保持高水平：添加缓冲",
        "字数偏少",
    ]


# ==================== GENERATION STATE ====================

def test_first_attempt_has_no_revision_inputs():
    state = SceneGenerationState(scene_id="scene_1")
    assert state.last_report is None
    assert state.revision_inputs() == {"previous_draft": "", "revision_instructions": ""}


def test_revision_inputs_from_last_report():
    state = SceneGenerationState(scene_id="scene_1", draft_text="旧稿")
    state.reports.append(QualityReport(extra_issues=[
        Issue(severity="low", message="字数偏少", suggestion="补充细节和描写")
    ]))

    inputs = state.revision_inputs()
    assert inputs["previous_draft"] == "旧稿"
    assert inputs["revision_instructions"] == "- 字数偏少：补充细节和描写"


@pytest.mark.parametrize("attempt", [0, 1, 2])
def test_state_tracks_attempts(attempt):
    state = SceneGenerationState(current_attempt=attempt)
    assert state.current_attempt == attempt


# ==================== TOLERANT PARSING ====================

def test_invalid_entries_are_dropped_individually():
    context = ChapterContext.model_validate({
        "target_word_count": 1500,
        "pacing_curve": {"variations": [{"pacing": "brisk"}, {"pacing": "slow"}]},
        "emotion_curve": {"points": [{"emotion": "very"}, {"emotion": 0.8}]},
        "chapter_structure": {"scenes": [{"word_count": "lots"}, {"word_count": 600}]},
        "density_curve": {"variations": "high everywhere"},
    })

    assert context.target_word_count == 1500
    assert context.pacing_at(0) is None
    assert context.pacing_at(1) == "slow"
    assert context.emotion_at(0) is None
    assert context.emotion_at(1) == 0.8
    assert context.word_count_at(0) is None
    assert context.word_count_at(1) == 600
    assert context.density_curve is None


def test_invalid_chapter_length_keeps_curves():
    context = ChapterContext.from_llm_output(
        '{"target_word_count": "about two thousand", "pacing_curve": {"variations": [{"pacing": "fast"}]}}'
    )
    assert context.target_word_count is None
    assert context.pacing_at(0) == "fast"
