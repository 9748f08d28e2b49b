"""
tasks.py

Running an applicator over its elements, sequentially or on a thread pool.

`TaskFunctors` carries one functor per concurrency unit for callables that are
not safe to share between threads (pyproj transformers, GEOS contexts, open
file handles). Unit `k` only ever sees functor `k`.

`maptasks(applicator, threaded=..., extent=...)` is the only scheduler:
- sequential: elements in order on the calling thread
- threaded: the elements are split into contiguous chunks, one chunk per unit,
  submitted to a `ThreadPoolExecutor`. Each unit writes to its own result
  slots and its own extent accumulator. The call blocks until all units are
  done, then re-raises the first exception observed.
"""
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional
import logging

from geotraverse.config import default_workers
from geotraverse.core.extent import ExtentAccumulator
from geotraverse.errors import ConfigurationError, TaskCountMismatchError

logger = logging.getLogger(__name__)


class TaskFunctors(Sequence):
    """Fixed, ordered collection of functors, one per concurrency unit.

    Parameters
    - functors: sequence of callables. Must not be empty.
    - ntasks: optional expected unit count, checked against `len(functors)`.
    """

    def __init__(self, functors, ntasks: Optional[int] = None):
        functors = tuple(functors)
        if not functors:
            raise ConfigurationError('TaskFunctors needs at least one functor')
        if ntasks is not None and ntasks != len(functors):
            raise TaskCountMismatchError(len(functors), ntasks)
        self._functors = functors

    @classmethod
    def from_factory(cls, factory: Callable[[], Callable], n: int) -> 'TaskFunctors':
        """Build `n` independent functors by calling `factory()` `n` times."""
        if n < 1:
            raise ConfigurationError(f'cannot build {n} task functors')
        return cls([factory() for _ in range(n)])

    def __getitem__(self, i):
        return self._functors[i]

    def __len__(self):
        return len(self._functors)

    def __call__(self, *args, **kwargs):
        # outside of threaded scheduling the first functor stands in for all of them
        return self._functors[0](*args, **kwargs)

    def check(self, nunits: Optional[int]) -> int:
        """Validate a requested unit count; returns the unit count to use."""
        if nunits is not None and nunits != len(self._functors):
            raise TaskCountMismatchError(len(self._functors), nunits)
        return len(self._functors)

    def __repr__(self):
        return f'TaskFunctors({len(self._functors)} functors)'


def chunk_ranges(n: int, nunits: int) -> List[range]:
    """Split `range(n)` into `nunits` contiguous, nearly equal ranges."""
    nunits = max(1, min(nunits, n))
    size, extra = divmod(n, nunits)
    out = []
    start = 0
    for k in range(nunits):
        stop = start + size + (1 if k < extra else 0)
        out.append(range(start, stop))
        start = stop
    return out


def maptasks(applicator, *, threaded: bool = False, extent: Optional[ExtentAccumulator] = None):
    """Run `applicator(i, extent)` for every element and assemble the results."""
    n = len(applicator)
    functors = applicator.f if isinstance(applicator.f, TaskFunctors) else None
    max_workers = applicator.opts.max_workers

    if not threaded:
        results = [applicator(i, extent) for i in range(n)]
        return applicator.assemble(results)

    if functors is not None:
        nunits = functors.check(max_workers)
    else:
        nunits = max_workers or default_workers()
    if nunits < 1:
        raise ConfigurationError(f'max_workers must be positive, got {nunits}')
    if n == 0:
        return applicator.assemble([])

    chunks = chunk_ranges(n, nunits)
    accumulators = [None if extent is None else ExtentAccumulator() for _ in chunks]
    results = [None] * n
    logger.debug('dispatching %d elements over %d units (chunk sizes %s)',
                 n, len(chunks), [len(c) for c in chunks])

    def run_unit(k, rng):
        app = applicator if functors is None else applicator.rebuild(functors[k])
        acc = accumulators[k]
        for i in rng:
            results[i] = app(i, acc)

    first_error = None
    with ThreadPoolExecutor(max_workers=len(chunks)) as executor:
        futures = {executor.submit(run_unit, k, rng): k for k, rng in enumerate(chunks)}
        for future in as_completed(futures):
            if future.cancelled() or future.exception() is None:
                continue
            if first_error is None:
                first_error = future
                logger.debug('unit %d failed; cancelling pending units', futures[future])
                for other in futures:
                    other.cancel()

    if first_error is not None:
        first_error.result()

    if extent is not None:
        for acc in accumulators:
            extent.merge(acc)
    return applicator.assemble(results)
