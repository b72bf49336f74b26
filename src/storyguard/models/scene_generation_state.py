"""Scene generation state model for tracking drafts between rewrites."""
from typing import List, Optional
from pydantic import BaseModel, Field

from storyguard.models.quality_report import QualityReport


class SceneGenerationState(BaseModel):
    """场景生成过程中的中间状态

    Attributes:
        scene_id: 场景 ID（scene_1, scene_2, ...）
        draft_text: 最近一次生成的草稿
        current_attempt: 当前尝试次数（0-based）
        reports: 每次草稿的质量报告
    """

    scene_id: Optional[str] = None
    draft_text: Optional[str] = None
    current_attempt: int = 0
    reports: List[QualityReport] = Field(default_factory=list)

    @property
    def last_report(self) -> Optional[QualityReport]:
        return self.reports[-1] if self.reports else None

    def revision_inputs(self) -> dict:
        """下一轮重写需要的输入：上一版草稿和修改意见"""
        report = self.last_report
        if report is None or self.draft_text is None:
            return {"previous_draft": "", "revision_instructions": ""}
        return {
            "previous_draft": self.draft_text,
            "revision_instructions": "\n".join(
                f"- {line}" for line in report.revision_instructions()
            ),
        }
