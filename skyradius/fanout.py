"""
Concurrent fan-out bounded by a deadline.

Launches independent tasks on a thread pool and waits until either all
of them finish or the deadline passes. Whatever is done by then is
collected; the rest is abandoned. Abandoned tasks are not interrupted,
they run to completion (or to their own I/O timeout) in the background
and their results are never read.
"""

import concurrent.futures as CF
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, Mapping

logger = logging.getLogger(__name__)


@dataclass
class FanOutResult:
    """Outcome of a deadline-bounded fan-out."""
    results: Dict[Hashable, Any] = field(default_factory=dict)
    completed: int = 0
    failed: int = 0
    abandoned: int = 0
    elapsed: float = 0.0

    @property
    def timed_out(self) -> bool:
        return self.abandoned > 0


def run_with_deadline(
    tasks: Mapping[Hashable, Callable[[], Any]],
    deadline: float,
    max_workers: int = 16,
) -> FanOutResult:
    """
    Run every task concurrently, returning results ready within deadline.

    Args:
        tasks: key -> zero-argument callable
        deadline: seconds to wait for all tasks
        max_workers: thread pool size

    Returns:
        FanOutResult whose results map keys of tasks that returned normally.
        Tasks that raised are counted as failed; tasks still pending at the
        deadline are counted as abandoned.
    """
    result = FanOutResult()
    if not tasks:
        return result

    start = time.perf_counter()
    executor = CF.ThreadPoolExecutor(
        max_workers=max(1, min(max_workers, len(tasks))),
        thread_name_prefix='fanout-worker',
    )
    try:
        futures = {executor.submit(fn): key for key, fn in tasks.items()}

        done, not_done = CF.wait(
            futures,
            timeout=deadline,
            return_when=CF.ALL_COMPLETED,
        )

        for future in done:
            key = futures[future]
            exc = future.exception()
            if exc is not None:
                result.failed += 1
                logger.debug(f'Fan-out task {key!r} failed: {exc}')
                continue
            result.results[key] = future.result()
            result.completed += 1

        result.abandoned = len(not_done)
    finally:
        # Do not block on stragglers; drop anything not yet started
        executor.shutdown(wait=False, cancel_futures=True)

    result.elapsed = time.perf_counter() - start

    if result.abandoned:
        logger.info(
            f'Fan-out deadline {deadline:.1f}s reached: '
            f'{result.completed} done, {result.abandoned} abandoned'
        )

    return result
