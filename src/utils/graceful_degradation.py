"""
Graceful Degradation Utilities

Settle-all fan-out for independent upstream calls. Every operation runs
concurrently under its own timeout and yields exactly one TaskResult; a
failure or timeout in one operation never cancels or blocks its siblings.
Whether the caller may continue is decided afterwards by the strategy.

Usage:
    from src.utils.graceful_degradation import (
        execute_with_degradation,
        DegradationConfig,
        DegradationStrategy,
    )

    batch = await execute_with_degradation(
        tasks=[yahoo.fetch_quote(symbol), fmp.fetch_profile(symbol)],
        config=DegradationConfig(
            strategy=DegradationStrategy.CRITICAL_ONLY,
            critical_indices=[0],
            task_timeouts={"profile": 10.0},
        ),
        task_names=["quote", "profile"],
    )

    if not batch.should_proceed:
        raise ...
    quote = batch.by_name("quote").result
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Generic,
    List,
    Optional,
    TypeVar,
    Union,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")

TaskInput = Union[Awaitable[T], Callable[[], Awaitable[T]]]


class DegradationStrategy(str, Enum):
    """When a batch with failures may still be used"""

    # At least min_required tasks (and min_success_ratio, if set) must succeed
    THRESHOLD = "threshold"

    # One success is enough
    ANY_SUCCESS = "any_success"

    # Every task listed in critical_indices must succeed
    CRITICAL_ONLY = "critical_only"

    # Always usable, even if nothing succeeded
    BEST_EFFORT = "best_effort"


@dataclass
class DegradationConfig:
    strategy: DegradationStrategy = DegradationStrategy.BEST_EFFORT
    critical_indices: List[int] = field(default_factory=list)
    min_required: int = 1
    min_success_ratio: Optional[float] = None

    # Outer bound per task, seconds. Adapters carry their own HTTP timeouts.
    task_timeout: Optional[float] = 30.0

    # Per-task overrides of task_timeout, keyed by task name
    task_timeouts: Dict[str, float] = field(default_factory=dict)

    # Decides whether a returned value counts as success. Lets an adapter's
    # explicit "unavailable" outcome be reported as a failed task.
    result_predicate: Optional[Callable[[Any], bool]] = None

    log_failures: bool = True

    def timeout_for(self, name: str) -> Optional[float]:
        return self.task_timeouts.get(name, self.task_timeout)


@dataclass
class TaskResult(Generic[T]):
    """Settled outcome of one task. ``result`` may be set even on failure."""

    index: int
    task_name: str
    success: bool
    result: Optional[T] = None
    error: Optional[str] = None
    elapsed_ms: float = 0.0
    timed_out: bool = False


@dataclass
class DegradationResult(Generic[T]):
    should_proceed: bool
    all_results: List[TaskResult[T]]
    degradation_message: Optional[str] = None

    @property
    def successful_results(self) -> List[T]:
        return [r.result for r in self.all_results if r.success]

    @property
    def failed_results(self) -> List[TaskResult[T]]:
        return [r for r in self.all_results if not r.success]

    @property
    def total_count(self) -> int:
        return len(self.all_results)

    @property
    def success_count(self) -> int:
        return self.total_count - len(self.failed_results)

    @property
    def is_partial(self) -> bool:
        return self.should_proceed and bool(self.failed_results)

    def by_name(self, name: str) -> Optional[TaskResult[T]]:
        for task_result in self.all_results:
            if task_result.task_name == name:
                return task_result
        return None


def _describe_error(error: BaseException) -> str:
    message = str(error)
    return f"{type(error).__name__}: {message}" if message else type(error).__name__


async def _settle(index: int, name: str, task: TaskInput, config: DegradationConfig) -> TaskResult:
    """Run one task to completion. Never raises."""
    timeout = config.timeout_for(name)
    started = time.perf_counter()

    def _elapsed() -> float:
        return (time.perf_counter() - started) * 1000

    try:
        awaitable = task() if callable(task) else task
        if timeout:
            value = await asyncio.wait_for(awaitable, timeout=timeout)
        else:
            value = await awaitable
    except asyncio.TimeoutError:
        if config.log_failures:
            logger.warning(f"[DEGRADATION] Task '{name}' timed out after {timeout}s")
        return TaskResult(index, name, success=False, error=f"timed out after {timeout}s",
                          elapsed_ms=_elapsed(), timed_out=True)
    except Exception as e:
        if config.log_failures:
            logger.warning(f"[DEGRADATION] Task '{name}' failed: {e}")
        return TaskResult(index, name, success=False, error=_describe_error(e), elapsed_ms=_elapsed())

    if config.result_predicate is not None and not config.result_predicate(value):
        reason = getattr(value, "error", None) or "no data"
        if config.log_failures:
            logger.info(f"[DEGRADATION] Task '{name}' returned no data: {reason}")
        return TaskResult(index, name, success=False, result=value, error=reason, elapsed_ms=_elapsed())

    return TaskResult(index, name, success=True, result=value, elapsed_ms=_elapsed())


def _should_proceed(config: DegradationConfig, results: List[TaskResult]) -> bool:
    succeeded = sum(1 for r in results if r.success)

    if config.strategy == DegradationStrategy.CRITICAL_ONLY:
        return all(
            results[i].success for i in config.critical_indices if i < len(results)
        )
    if config.strategy == DegradationStrategy.ANY_SUCCESS:
        return succeeded > 0
    if config.strategy == DegradationStrategy.THRESHOLD:
        if succeeded < config.min_required:
            return False
        if config.min_success_ratio is not None and results:
            return succeeded / len(results) >= config.min_success_ratio
    return True


async def execute_with_degradation(
    tasks: List[TaskInput],
    config: Optional[DegradationConfig] = None,
    task_names: Optional[List[str]] = None,
) -> DegradationResult:
    """
    Run tasks concurrently and collect every outcome.

    Args:
        tasks: Awaitables or zero-argument async callables
        config: Strategy, timeouts and success predicate
        task_names: Names for logs and by_name lookup; missing ones become task_<i>

    Returns:
        DegradationResult with one TaskResult per task, in input order
    """
    config = config or DegradationConfig()
    names = list(task_names or [])
    names += [f"task_{i}" for i in range(len(names), len(tasks))]

    results: List[TaskResult] = list(await asyncio.gather(
        *(_settle(i, names[i], task, config) for i, task in enumerate(tasks))
    ))

    batch = DegradationResult(
        should_proceed=_should_proceed(config, results),
        all_results=results,
    )

    if batch.is_partial:
        unavailable = ", ".join(r.task_name for r in batch.failed_results)
        batch.degradation_message = (
            f"Partial results from {batch.success_count}/{batch.total_count} sources; "
            f"unavailable: {unavailable}"
        )
    elif not batch.should_proceed:
        batch.degradation_message = (
            f"Unable to proceed: only {batch.success_count}/{batch.total_count} sources available"
        )

    logger.info(
        f"[DEGRADATION] {batch.success_count}/{batch.total_count} succeeded, "
        f"proceed={batch.should_proceed}, partial={batch.is_partial}"
    )
    return batch
