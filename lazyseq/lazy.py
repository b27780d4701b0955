"""
Lazy, pull-based sequences and the combinators that build and consume them.

A pull function is any callable that returns the next value each time it is
called, or ``END`` once there is nothing left. ``Sequence`` wraps one pull
function and exposes every combinator over an upstream sequence as a
method, so ``map(s, f)`` and ``s.map(f)`` build the same pipeline. Nothing
runs until a consumer pulls.

``filter``, ``map``, ``zip``, ``enumerate``, ``all`` and ``any`` share their
names with builtins, so they are left out of ``__all__`` and a
star import does not replace the builtins. Import them by name or use the
``Sequence`` methods.
"""

import math
from collections.abc import Mapping
from collections.abc import Sequence as OrderedCollection
from typing import Any, Callable, List, Optional


__all__: List[str] = [
    'END', 'InvalidSourceKind', 'Sequence', 'seq', 'get_pull',
    'count', 'take', 'take_while', 'zip_with', 'chain', 'pairs', 'ipairs',
    'wrapped', 'unwrapped',
    'reduce', 'find', 'collect', 'for_each', 'for_each_with_index', 'index_of',
]


class _End:
    """Type of the end-of-sequence marker. ``END`` is its only instance."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "END"


END = _End()

_MISSING = object()


class InvalidSourceKind(TypeError):
    """Raised when a value is not a pull function, ordered collection or Sequence."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"Invalid source type: {kind}")


# --------- pull states ----------

class _PullState:
    """
    Base for every pull function built here. Once ``_advance`` returns END
    the state is latched and upstream is never pulled again.
    """

    def __init__(self):
        self._done = False

    def __call__(self):
        if self._done:
            return END
        value = self._advance()
        if value is END:
            self._done = True
        return value

    def _advance(self):
        raise NotImplementedError


class _CollectionPull(_PullState):
    """Walks an ordered collection by ascending position."""

    def __init__(self, items):
        super().__init__()
        self._items = items
        self._pos = 0

    def _advance(self):
        if self._pos >= len(self._items):
            return END
        value = self._items[self._pos]
        self._pos += 1
        return value


def get_pull(source) -> Callable[..., Any]:
    """
    Normalize a source into a pull function.

    A Sequence gives up its own pull function, any other callable is taken as
    a pull function already, and an ordered collection gets a positional walker.
    """
    if isinstance(source, Sequence):
        return source._pull
    if callable(source):
        return source
    if isinstance(source, OrderedCollection):
        return _CollectionPull(source)
    raise InvalidSourceKind(type(source).__name__)


def _values(source):
    # Consumers drain through this; combinators never do.
    pull = get_pull(source)
    while True:
        value = pull()
        if value is END:
            return
        yield value


class Sequence:
    """
    A lazy, single-pass sequence over one pull function.

    Pulling advances it; once it reports END it stays exhausted. It also
    speaks the iterator protocol, so ``for x in seq`` and ``list(seq)`` work.
    """

    def __init__(self, source):
        self._pull = get_pull(source)

    def __call__(self, *args, **kwargs):
        return self._pull(*args, **kwargs)

    def __iter__(self):
        return self

    def __next__(self):
        value = self._pull()
        if value is END:
            raise StopIteration
        return value

    def __repr__(self):
        return f"Sequence({self._pull!r})"

    # --------- chainable operators (lazy) ----------
    def filter(self, predicate):
        return filter(self, predicate)

    def map(self, func):
        return map(self, func)

    def take(self, n):
        return take(self, n)

    def take_while(self, predicate):
        return take_while(self, predicate)

    def zip(self, *others):
        return zip(self, *others)

    def zip_with(self, func, *others):
        return zip_with(func, self, *others)

    def chain(self, *others):
        return chain(self, *others)

    def enumerate(self):
        return enumerate(self)

    def wrapped(self):
        return wrapped(self)

    def unwrapped(self):
        return unwrapped(self)

    # --------- consuming operations (eager) ----------
    def reduce(self, func, initial=_MISSING, default=None):
        return reduce(self, func, initial, default)

    def all(self, predicate):
        return all(self, predicate)

    def any(self, predicate):
        return any(self, predicate)

    def find(self, predicate, default=None):
        return find(self, predicate, default)

    def collect(self):
        return collect(self)

    def for_each(self, func):
        return for_each(self, func)

    def for_each_with_index(self, func):
        return for_each_with_index(self, func)

    def index_of(self, value):
        return index_of(self, value)

    def parallel_for_each(self, func, batch_size=None, *, executor=None, config=None):
        from .utils import parallel_for_each
        return parallel_for_each(self, func, batch_size, executor=executor, config=config)


seq = Sequence


# --------- combinators ----------

class _Count(_PullState):
    def __init__(self, start, step, final):
        super().__init__()
        self._start = start
        self._step = step
        self._final = final
        self._k = 0

    def _advance(self):
        value = self._start + self._k * self._step
        if self._step > 0 and value > self._final:
            return END
        if self._step < 0 and value < self._final:
            return END
        self._k += 1
        return value


def count(start=1, step=1, final=None) -> Sequence:
    """
    Arithmetic progression from ``start``, inclusive of ``final`` when it is hit
    exactly. Without ``final`` it never ends, counting up or down with ``step``.
    """
    if step == 0:
        raise ValueError("count() step must not be zero")
    if final is None:
        final = math.inf if step > 0 else -math.inf
    return Sequence(_Count(start, step, final))


class _Filter(_PullState):
    def __init__(self, pull, predicate):
        super().__init__()
        self._pull = pull
        self._predicate = predicate

    def _advance(self):
        while True:
            value = self._pull()
            if value is END or self._predicate(value):
                return value


def filter(source, predicate) -> Sequence:
    return Sequence(_Filter(get_pull(source), predicate))


class _Map(_PullState):
    def __init__(self, pull, func):
        super().__init__()
        self._pull = pull
        self._func = func

    def _advance(self):
        value = self._pull()
        if value is END:
            return END
        return self._func(value)


def map(source, func) -> Sequence:
    return Sequence(_Map(get_pull(source), func))


class _Take(_PullState):
    def __init__(self, pull, n):
        super().__init__()
        self._pull = pull
        self._remaining = n

    def _advance(self):
        if self._remaining <= 0:
            return END
        value = self._pull()
        if value is not END:
            self._remaining -= 1
        return value


def take(source, n) -> Sequence:
    """At most ``n`` values; upstream is not pulled once ``n`` have been yielded."""
    return Sequence(_Take(get_pull(source), n))


class _TakeWhile(_PullState):
    def __init__(self, pull, predicate):
        super().__init__()
        self._pull = pull
        self._predicate = predicate

    def _advance(self):
        value = self._pull()
        if value is END or not self._predicate(value):
            return END
        return value


def take_while(source, predicate) -> Sequence:
    return Sequence(_TakeWhile(get_pull(source), predicate))


class _Zip(_PullState):
    def __init__(self, pulls):
        super().__init__()
        self._pulls = pulls

    def _advance(self):
        if not self._pulls:
            return END
        values = []
        for pull in self._pulls:
            value = pull()
            if value is END:
                return END
            values.append(value)
        return tuple(values)


class _ZipWith(_Zip):
    def __init__(self, func, pulls):
        super().__init__(pulls)
        self._func = func

    def _advance(self):
        values = super()._advance()
        if values is END:
            return END
        return self._func(*values)


def zip(*sources) -> Sequence:
    """
    Step through every source together, yielding one tuple per step.

    Sources are pulled left to right; the first one to run out ends the zip
    and whatever was already pulled for that step is dropped.
    """
    return Sequence(_Zip([get_pull(source) for source in sources]))


def zip_with(func, *sources) -> Sequence:
    return Sequence(_ZipWith(func, [get_pull(source) for source in sources]))


class _Chain(_PullState):
    def __init__(self, pulls):
        super().__init__()
        self._pulls = pulls
        self._index = 0

    def _advance(self):
        while self._index < len(self._pulls):
            value = self._pulls[self._index]()
            if value is not END:
                return value
            self._index += 1
        return END


def chain(*sources) -> Sequence:
    return Sequence(_Chain([get_pull(source) for source in sources]))


def enumerate(source) -> Sequence:
    """Pair every value with its 1-based position."""
    return zip(count(), source)


class _MappingPairs(_PullState):
    def __init__(self, mapping):
        super().__init__()
        self._items = iter(mapping.items())

    def _advance(self):
        return next(self._items, END)


class _PositionPairs(_PullState):
    def __init__(self, items):
        super().__init__()
        self._items = items
        self._pos = 0

    def _advance(self):
        if self._pos >= len(self._items):
            return END
        self._pos += 1
        return (self._pos, self._items[self._pos - 1])


class _MappingIPairs(_PullState):
    def __init__(self, mapping):
        super().__init__()
        self._mapping = mapping
        self._key = 1

    def _advance(self):
        if self._key not in self._mapping:
            return END
        key = self._key
        self._key += 1
        return (key, self._mapping[key])


def pairs(collection) -> Sequence:
    """
    ``(key, value)`` tuples from a mapping, in its own iteration order, or
    ``(position, value)`` tuples from an ordered collection.
    """
    if isinstance(collection, Mapping):
        return Sequence(_MappingPairs(collection))
    if isinstance(collection, OrderedCollection):
        return Sequence(_PositionPairs(collection))
    raise InvalidSourceKind(type(collection).__name__)


def ipairs(collection) -> Sequence:
    """
    ``(position, value)`` tuples in ascending 1-based order.

    A mapping is read at keys 1, 2, 3, ... up to the first missing key.
    """
    if isinstance(collection, Mapping):
        return Sequence(_MappingIPairs(collection))
    if isinstance(collection, OrderedCollection):
        return Sequence(_PositionPairs(collection))
    raise InvalidSourceKind(type(collection).__name__)


# --------- multi-value adapters ----------

class _Unwrapped(_PullState):
    def __init__(self, pull):
        super().__init__()
        self._pull = pull

    def _advance(self):
        value = self._pull()
        if value is END:
            return END
        return tuple(value)


def unwrapped(source) -> Sequence:
    """Each upstream collection becomes one multi-value step (a tuple of its contents)."""
    return Sequence(_Unwrapped(get_pull(source)))


class _Wrapped(_PullState):
    def __init__(self, pull):
        super().__init__()
        self._pull = pull

    def _advance(self):
        value = self._pull()
        if value is END:
            return END
        if isinstance(value, tuple):
            # a step with zero values ends the sequence
            return list(value) if len(value) else END
        return [value]


def wrapped(source) -> Sequence:
    """Inverse of ``unwrapped``: every value of one step is packed into a single list."""
    return Sequence(_Wrapped(get_pull(source)))


# --------- consumers ----------

def reduce(source, func, initial=_MISSING, default=None):
    """
    Left fold over the sequence.

    Without ``initial`` the first value seeds the accumulator; an empty
    sequence then has no result and ``default`` is returned instead.
    """
    values = _values(source)
    if initial is _MISSING:
        accumulator = next(values, END)
        if accumulator is END:
            return default
    else:
        accumulator = initial
    for value in values:
        accumulator = func(accumulator, value)
    return accumulator


def all(source, predicate) -> bool:
    for value in _values(source):
        if not predicate(value):
            return False
    return True


def any(source, predicate) -> bool:
    for value in _values(source):
        if predicate(value):
            return True
    return False


def find(source, predicate, default=None):
    """First value satisfying ``predicate``, or ``default`` when none does."""
    for value in _values(source):
        if predicate(value):
            return value
    return default


def collect(source) -> List[Any]:
    """Drain into a list. Never returns for an infinite sequence."""
    return list(_values(source))


def for_each(source, func) -> None:
    for value in _values(source):
        func(value)


def for_each_with_index(source, func) -> None:
    for index, value in _values(enumerate(source)):
        func(index, value)


def index_of(source, value) -> Optional[int]:
    """1-based position of the first element equal to ``value``, or None."""
    for index, item in _values(enumerate(source)):
        if item == value:
            return index
    return None
