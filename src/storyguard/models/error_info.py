"""Error classification and retry policy models."""
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Literal
from pydantic import BaseModel, Field

ErrorType = Literal[
    "type_error", "reference_error", "llm_error", "network_error", "unknown_error"
]


class ErrorInfo(BaseModel):
    """标准化错误信息

    在失败边界创建，由调用方检查 type / recoverable 决定如何恢复。

    Attributes:
        message: 错误消息
        type: 错误分类
        severity: 严重程度（high / medium）
        recoverable: 是否可恢复；None 表示未标记（由调用方的 should_retry 决定）
        context: 调用方附加的上下文
        timestamp: ISO 格式时间戳
        stack: 格式化的堆栈信息
    """
    message: str
    type: ErrorType = "unknown_error"
    severity: Literal["low", "medium", "high"] = "medium"
    recoverable: Optional[bool] = None
    context: Dict[str, Any] = Field(default_factory=dict)
    timestamp: str = Field(default_factory=lambda: datetime.now().isoformat())
    stack: Optional[str] = None


class RecoverySuggestion(BaseModel):
    action: Literal["retry", "manual"]
    message: str
    max_retries: int = 0


class RetryPolicy(BaseModel):
    """Retry settings for ErrorHandler.with_retry.

    Delay before attempt n+2 is base_delay_ms * 2**n.
    """
    max_retries: int = Field(default=3, ge=0)
    base_delay_ms: float = Field(default=1000, ge=0)
    on_retry: Optional[Callable[[int, BaseException], Any]] = None
    should_retry: Optional[Callable[[BaseException], bool]] = None
