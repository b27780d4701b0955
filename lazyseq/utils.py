"""
Executors and the batch-parallel dispatcher for lazy sequences.

An executor only has to offer ``wait_for_all(units)``: run every zero-argument
unit and block until all of them have finished. The dispatcher collects a
sequence, cuts it into batches and hands one unit per batch to the executor.
"""

import logging
import sys
import time
from concurrent.futures import ALL_COMPLETED, FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Protocol, Sequence, Tuple

from .lazy import collect
from .models import DispatchConfig, FailurePolicy

logger = logging.getLogger('lazyseq.dispatch')


# ---------- Logging Setup ----------

def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Setup structured logging for lazy sequence dispatch"""
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    root = logging.getLogger('lazyseq')
    root.setLevel(level)
    return root


# ---------- Executors ----------

class Executor(Protocol):
    """Protocol for anything that can run a set of units and wait for them"""

    def wait_for_all(self, units: Sequence[Callable[[], Any]]) -> None:
        """Run every unit and block until all of them have finished"""
        ...


class ThreadPoolWaiter:
    """
    Runs units on a fresh thread pool and waits for them.

    Under RUN_ALL every unit runs even when a sibling fails; under FAIL_FAST
    units that have not started yet are cancelled after the first failure.
    Either way the failure of the lowest-numbered failed unit is re-raised
    as is once the pool has drained.
    """

    def __init__(self, max_workers: int = 4, failure_policy: FailurePolicy = FailurePolicy.RUN_ALL):
        self.max_workers = max_workers
        self.failure_policy = FailurePolicy(failure_policy)

    def wait_for_all(self, units: Sequence[Callable[[], Any]]) -> None:
        if not units:
            return

        fail_fast = self.failure_policy is FailurePolicy.FAIL_FAST
        workers = min(self.max_workers, len(units))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix='lazyseq') as pool:
            futures = [pool.submit(unit) for unit in units]
            _, pending = wait(futures, return_when=FIRST_EXCEPTION if fail_fast else ALL_COMPLETED)
            for future in pending:
                future.cancel()

        cancelled = sum(1 for future in futures if future.cancelled())
        if cancelled:
            logger.warning(f"Cancelled {cancelled} of {len(futures)} units after a failure")

        first_failure = None
        for number, future in enumerate(futures, start=1):
            if future.cancelled():
                continue
            error = future.exception()
            if error is not None:
                logger.error(f"Unit {number} failed: {error}", exc_info=error)
                if first_failure is None:
                    first_failure = error

        if first_failure is not None:
            raise first_failure


class SerialWaiter:
    """Runs units one after another in the calling thread."""

    def __init__(self, failure_policy: FailurePolicy = FailurePolicy.RUN_ALL):
        self.failure_policy = FailurePolicy(failure_policy)

    def wait_for_all(self, units: Sequence[Callable[[], Any]]) -> None:
        first_failure = None
        for number, unit in enumerate(units, start=1):
            try:
                unit()
            except Exception as e:
                logger.error(f"Unit {number} failed: {e}", exc_info=True)
                if self.failure_policy is FailurePolicy.FAIL_FAST:
                    raise
                if first_failure is None:
                    first_failure = e

        if first_failure is not None:
            raise first_failure


# ---------- Batch Parallel Dispatcher ----------

@dataclass(frozen=True)
class BatchInfo:
    """One slice of the collected sequence."""
    number: int
    offset: int  # 1-based position of items[0] in the full sequence
    items: Tuple[Any, ...]


def make_batches(elements: Sequence[Any], batch_size: int) -> List[BatchInfo]:
    """Cut ``elements`` into consecutive batches of at most ``batch_size``"""
    if batch_size < 1:
        raise ValueError("batch_size must be >= 1")
    return [
        BatchInfo(number=number, offset=start + 1, items=tuple(elements[start:start + batch_size]))
        for number, start in enumerate(range(0, len(elements), batch_size), start=1)
    ]


def _make_unit(func: Callable[[Any, int], Any], batch: BatchInfo) -> Callable[[], None]:
    def run_batch():
        logger.debug(f"Batch {batch.number}: {len(batch.items)} items from index {batch.offset}")
        for k, value in enumerate(batch.items):
            func(value, batch.offset + k)
    return run_batch


def parallel_for_each(source, func: Callable[[Any, int], Any], batch_size: Optional[int] = None,
                      *, executor: Optional[Executor] = None,
                      config: Optional[DispatchConfig] = None) -> None:
    """
    Call ``func(value, index)`` for every element of ``source``, batch by batch.

    The source is collected first, so it must be finite. ``index`` is the
    element's 1-based position in the collected sequence. Elements of one
    batch are visited in order; batches themselves may run in any order.
    ``batch_size`` overrides the one in ``config``.
    """
    settings = config if config is not None else DispatchConfig()
    if batch_size is not None:
        settings = DispatchConfig(**{**settings.model_dump(), 'batch_size': batch_size})
    if executor is None:
        executor = ThreadPoolWaiter(max_workers=settings.max_workers,
                                    failure_policy=settings.failure_policy)

    start_time = time.perf_counter()
    elements = collect(source)
    batches = make_batches(elements, settings.batch_size)
    if not batches:
        logger.debug("Nothing to dispatch")
        return

    logger.info(f"Dispatching {len(elements)} elements in {len(batches)} batches "
                f"of up to {settings.batch_size}")
    executor.wait_for_all([_make_unit(func, batch) for batch in batches])

    processing_time_ms = (time.perf_counter() - start_time) * 1000
    logger.info(f"Parallel dispatch finished in {processing_time_ms:.2f} ms")
