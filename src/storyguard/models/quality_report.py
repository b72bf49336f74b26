"""Quality report for one generated scene draft."""
from typing import List, Optional
from pydantic import BaseModel, Field

from storyguard.models.density import BalanceResult, ComparisonResult, DensityAnalysis
from storyguard.models.issue import Issue


class QualityReport(BaseModel):
    """密度与字数检查结果，用于决定是否请求重写"""
    scene_id: Optional[str] = None
    word_count: int = 0
    target_word_count: Optional[int] = None

    density: DensityAnalysis = Field(default_factory=DensityAnalysis)
    comparison: ComparisonResult = Field(default_factory=ComparisonResult)
    balance: BalanceResult = Field(default_factory=BalanceResult)

    # Length and other findings that do not belong to a density check
    extra_issues: List[Issue] = Field(default_factory=list)

    @property
    def issues(self) -> List[Issue]:
        return [*self.comparison.issues, *self.balance.issues, *self.extra_issues]

    @property
    def passed(self) -> bool:
        """Match the target curve, stay balanced and carry no high-severity issue."""
        if not self.comparison.match or not self.balance.balanced:
            return False
        return not any(issue.severity == "high" for issue in self.issues)

    def revision_instructions(self) -> List[str]:
        """Rewrite hints built from issue suggestions, high severity first."""
        order = {"high": 0, "medium": 1, "low": 2}
        instructions = []
        for issue in sorted(self.issues, key=lambda i: order[i.severity]):
            line = issue.message
            if issue.suggestion:
                line = f"{line}：{issue.suggestion}"
            if line not in instructions:
                instructions.append(line)
        return instructions
