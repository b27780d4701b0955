"""Lazy, pull-based sequence combinators with a batch-parallel consumer."""

from .lazy import __all__ as _lazy_all
from .lazy import (
    END, InvalidSourceKind, Sequence, seq, get_pull,
    count, filter, map, take, take_while, zip, zip_with, chain, enumerate,
    pairs, ipairs, wrapped, unwrapped,
    reduce, all, any, find, collect, for_each, for_each_with_index, index_of,
)
from .models import DispatchConfig, FailurePolicy
from .utils import (
    BatchInfo, Executor, SerialWaiter, ThreadPoolWaiter, make_batches,
    parallel_for_each, setup_logging,
)

# builtin-shadowing names stay importable by name but out of star imports
__all__ = list(_lazy_all) + [
    'DispatchConfig', 'FailurePolicy',
    'BatchInfo', 'Executor', 'SerialWaiter', 'ThreadPoolWaiter', 'make_batches',
    'parallel_for_each', 'setup_logging',
]
