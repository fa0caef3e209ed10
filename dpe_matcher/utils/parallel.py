"""
Parallel execution utilities for dpe_matcher.

Settle-all fan-out: every task runs to completion (or failure), no task's
error cancels its siblings, and the caller gets one outcome per item.
"""

import logging
import sys
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Generic, TypeVar

from tqdm import tqdm

logger = logging.getLogger(__name__)

T = TypeVar("T")  # Input type
R = TypeVar("R")  # Result type


@dataclass
class TaskOutcome(Generic[T, R]):
    """Outcome of one task: exactly one of result/error is meaningful."""

    item: T
    result: R | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def execute_parallel(
    items: Iterable[T],
    worker_func: Callable[[T], R],
    max_workers: int = 4,
    desc: str = "Processing",
    unit: str = "item",
    show_progress: bool = False,
    error_handler: Callable[[T, Exception], None] | None = None,
) -> list[TaskOutcome[T, R]]:
    """
    Run worker_func over items in a thread pool and collect every outcome.

    Exceptions raised by worker_func are captured per item, never re-raised.
    Outcomes are returned in input order regardless of completion order, so
    downstream merging stays deterministic.

    Args:
        items: Items to process
        worker_func: Function called once per item
        max_workers: Maximum number of parallel workers
        desc: Progress bar description
        unit: Progress bar unit name
        show_progress: Whether to show a tqdm progress bar on stderr
        error_handler: Optional callback for errors (item, exception) -> None;
            errors are logged at DEBUG when omitted

    Returns:
        One TaskOutcome per item, in input order

    Example:
        outcomes = execute_parallel(strategies, run_strategy, max_workers=2)
        for outcome in outcomes:
            if not outcome.ok:
                print(f"{outcome.item} failed: {outcome.error}")
    """
    items_list = list(items)
    total = len(items_list)

    if total == 0:
        return []

    outcomes: list[TaskOutcome[T, R] | None] = [None] * total

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, total))) as executor:
        future_to_index = {
            executor.submit(worker_func, item): index for index, item in enumerate(items_list)
        }

        progress_bar = None
        if show_progress:
            progress_bar = tqdm(
                total=total,
                desc=desc,
                unit=unit,
                file=sys.stderr,  # Keep stdout clean for results
                dynamic_ncols=True,
            )

        try:
            for future in as_completed(future_to_index):
                index = future_to_index[future]
                item = items_list[index]
                try:
                    outcomes[index] = TaskOutcome(item=item, result=future.result())
                except Exception as e:
                    outcomes[index] = TaskOutcome(item=item, error=e)
                    if error_handler:
                        error_handler(item, e)
                    else:
                        logger.debug(f"Error processing {item}: {e}")
                finally:
                    if progress_bar:
                        progress_bar.update(1)
        finally:
            if progress_bar:
                progress_bar.close()

    return [outcome for outcome in outcomes if outcome is not None]
