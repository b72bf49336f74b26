"""Error Handler - 统一错误处理工具

提供错误分类、指数退避重试和超时竞速，用于包装所有外部异步调用（LLM 生成等）。
"""
import asyncio
import functools
import logging
import re
import traceback
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar, Union

from storyguard.models.error_info import ErrorInfo, RecoverySuggestion, RetryPolicy

logger = logging.getLogger("StoryGuard")

T = TypeVar("T")

Operation = Union[Callable[[], Awaitable[T]], Awaitable[T]]

RECOVERABLE_PATTERNS = [
    re.compile(r"LLM.*失败", re.IGNORECASE),
    re.compile(r"网络"),
    re.compile(r"timeout", re.IGNORECASE),
    re.compile(r"连接"),
    re.compile(r"重试"),
]


class LLMError(Exception):
    """Raised by generation collaborators when the LLM call itself fails."""


class OperationTimeoutError(TimeoutError):
    """The timer won the race in ErrorHandler.with_timeout."""

    def __init__(self, message: str = "操作超时", timeout_ms: Optional[float] = None):
        super().__init__(message)
        self.message = message
        self.timeout_ms = timeout_ms


class OperationError(Exception):
    """Failure wrapped by ErrorHandler.wrap_async, carrying its classification."""

    def __init__(self, info: ErrorInfo):
        super().__init__(info.message)
        self.info = info

    @property
    def recoverable(self) -> bool:
        return bool(self.info.recoverable)


def _discard_outcome(task: "asyncio.Future[Any]") -> None:
    """Consume the result of an operation that lost a timeout race."""
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.debug(f"[TIMEOUT] Late failure of timed-out operation discarded: {error}")


class ErrorHandler:
    """错误处理器：分类、重试、超时"""

    @staticmethod
    def handle_error(error: BaseException, context: Optional[Dict[str, Any]] = None) -> ErrorInfo:
        """处理错误并返回标准格式

        分类规则：
        - TypeError → type_error（high，不可恢复）
        - NameError / ReferenceError → reference_error（high，不可恢复）
        - LLMError 或消息包含 "LLM" → llm_error（medium，可恢复）
        - ConnectionError 或消息包含 "网络"/"network" → network_error（medium，可恢复）
        - 其他 → unknown_error（medium，未标记）
        """
        message = str(error) or "未知错误"
        stack = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )
        info = ErrorInfo(message=message, context=dict(context or {}), stack=stack)

        if isinstance(error, TypeError):
            info.type = "type_error"
            info.severity = "high"
            info.recoverable = False
        elif isinstance(error, (NameError, ReferenceError)):
            info.type = "reference_error"
            info.severity = "high"
            info.recoverable = False
        elif isinstance(error, LLMError) or "LLM" in message:
            info.type = "llm_error"
            info.severity = "medium"
            info.recoverable = True
        elif isinstance(error, ConnectionError) or "网络" in message or "network" in message:
            info.type = "network_error"
            info.severity = "medium"
            info.recoverable = True
        else:
            info.type = "unknown_error"
            info.severity = "medium"

        return info

    @staticmethod
    def is_recoverable(error: BaseException) -> bool:
        """判断错误消息是否属于可恢复类型（LLM 失败、网络、超时、连接、重试）"""
        message = str(error)
        return any(pattern.search(message) for pattern in RECOVERABLE_PATTERNS)

    @staticmethod
    def generate_recovery_suggestion(error: BaseException) -> RecoverySuggestion:
        """生成错误恢复建议"""
        message = str(error)
        if "LLM" in message:
            return RecoverySuggestion(action="retry", message="LLM 调用失败，建议重试", max_retries=3)
        if "网络" in message or "network" in message:
            return RecoverySuggestion(
                action="retry", message="网络错误，建议检查网络连接后重试", max_retries=2
            )
        return RecoverySuggestion(action="manual", message="需要手动处理", max_retries=0)

    @classmethod
    def wrap_async(
        cls,
        fn: Callable[..., Awaitable[T]],
        context: Optional[Dict[str, Any]] = None,
    ) -> Callable[..., Awaitable[T]]:
        """包装异步函数：失败时抛出携带 ErrorInfo 的 OperationError"""

        @functools.wraps(fn)
        async def wrapper(*args, **kwargs):
            try:
                return await fn(*args, **kwargs)
            except OperationError:
                raise
            except Exception as error:
                info = cls.handle_error(error, context)
                logger.error(f"❌ 执行失败: [{info.type}] {info.message} context={info.context}")
                raise OperationError(info) from error

        return wrapper

    @staticmethod
    async def sleep(ms: float) -> None:
        await asyncio.sleep(ms / 1000)

    @classmethod
    async def with_retry(
        cls,
        operation: Callable[[], Awaitable[T]],
        policy: Optional[RetryPolicy] = None,
    ) -> T:
        """带重试的异步执行

        最多执行 max_retries + 1 次，按顺序进行。每次失败后：
        1. 若提供了 should_retry 且返回 False，立即重新抛出
        2. 若还有剩余次数，先调用 on_retry(attempt_number, error)，
           再等待 base_delay_ms * 2^attempt_index 毫秒（指数退避）
        全部失败后抛出最后一次的错误。

        Args:
            operation: 无参协程函数，每次尝试调用一次
            policy: 重试策略（默认 3 次重试，1000ms 基础延迟）

        Returns:
            operation 的返回值
        """
        policy = policy or RetryPolicy()
        last_error: Optional[Exception] = None

        for attempt in range(policy.max_retries + 1):
            try:
                return await operation()
            except Exception as error:
                last_error = error

                if policy.should_retry is not None and not policy.should_retry(error):
                    logger.warning(f"[RETRY] Error not retryable, giving up: {error}")
                    raise

                if attempt < policy.max_retries:
                    delay = policy.base_delay_ms * (2 ** attempt)
                    logger.warning(
                        f"⏳ 重试中... ({attempt + 1}/{policy.max_retries})，{delay:.0f}ms 后重试: {error}"
                    )
                    if policy.on_retry is not None:
                        policy.on_retry(attempt + 1, error)
                    await cls.sleep(delay)

        logger.error(f"[RETRY] All {policy.max_retries + 1} attempts failed: {last_error}")
        raise last_error

    @staticmethod
    async def with_timeout(
        operation: Operation,
        timeout_ms: float,
        message: str = "操作超时",
    ) -> T:
        """超时包装

        operation 与计时器竞速，先完成者决定结果。计时器获胜时抛出
        OperationTimeoutError(message)；原操作不会被取消，其后续结果被丢弃。

        Args:
            operation: 协程函数或 awaitable
            timeout_ms: 超时时间（毫秒）
            message: 超时错误消息
        """
        awaitable = operation() if callable(operation) else operation
        task = asyncio.ensure_future(awaitable)

        done, _ = await asyncio.wait({task}, timeout=timeout_ms / 1000)
        if task in done:
            return task.result()

        task.add_done_callback(_discard_outcome)
        logger.error(f"[TIMEOUT] {message} (after {timeout_ms:.0f}ms)")
        raise OperationTimeoutError(message, timeout_ms)
