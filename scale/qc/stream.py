"""
The :obj:`scale.qc.stream` module provides a persistent, lazily-forced stream.

Only the spine is lazy. A stream is a memoizing suspension which, when forced,
yields either ``None`` (the empty stream) or a :obj:`Cons` cell holding a head
value and the tail stream. Forcing the same stream twice never recomputes the
node, so a stream can be traversed any number of times and shared between
consumers. Streams may be infinite; only :meth:`Stream.fold`,
:meth:`Stream.to_list` and :meth:`Stream.length` require a finite stream.

This is the foundation of shrinking: a shrinker returns a stream of candidates,
and the minimizer walks it with :meth:`Stream.find_first_mapped`, which stops at
the first hit so the rest of the candidate space is never built.

.. code::

    import scale.qc.stream as stream

    stream.iterate(lambda x: x * 2, 1).take(4).to_list()  # [1, 2, 4, 8]

Functions that look for something (:meth:`Stream.find`,
:meth:`Stream.find_first_mapped`, :meth:`Stream.decons`) return ``None`` when
nothing is there instead of raising. As a consequence, ``None`` cannot be used
as a meaningful element value with :meth:`Stream.filter_map` or
:func:`generate`.
"""
from enum import Enum
from typing import Any, Callable, Iterable, NamedTuple, Optional, Sequence

__all__ = [
    "Lazy",
    "Cons",
    "Stream",
    "Side",
    "LengthMismatch",
    "empty",
    "cons",
    "singleton",
    "of_list",
    "of_array",
    "generate",
    "iterate",
    "repeat",
    "repeat_n",
    "enum",
    "enum_then",
    "guard",
    "guard1",
    "defer",
    "concat",
    "zip_with",
    "zip_with_strict",
    "zip_with_stricti",
    "unzip",
]

_UNFORCED = object()


class Lazy:
    """A suspended computation which is evaluated at most once.

    Examples:

        >>> calls = []
        >>> x = Lazy(lambda: calls.append(1) or 42)
        >>> x.is_forced()
        False
        >>> x.force(), x.force()
        (42, 42)
        >>> calls
        [1]

    """

    __slots__ = ("_thunk", "_value")

    def __init__(self, thunk: Callable[[], Any]):
        self._thunk = thunk
        self._value = _UNFORCED

    @classmethod
    def of_value(cls, value):
        """Return an already forced suspension."""
        z = cls.__new__(cls)
        z._thunk = None
        z._value = value
        return z

    def is_forced(self) -> bool:
        return self._value is not _UNFORCED

    def force(self):
        if self._value is _UNFORCED:
            # Keep the thunk until it succeeds so a failed force can be retried.
            value = self._thunk()
            self._value = value
            self._thunk = None
        return self._value


class Cons(NamedTuple):
    head: Any
    tail: "Stream"


class Stream(Lazy):
    """A lazy stream, i.e. a suspension of ``None`` or a :obj:`Cons` cell.

    Streams are normally built with the module functions (:func:`empty`,
    :func:`cons`, :func:`of_list`, :func:`iterate`, ...) and transformed with
    the methods below, all of which are lazy unless documented otherwise.

    Examples:

        >>> s = of_list([1, 2, 3, 4])
        >>> s.map(lambda x: 10 * x).filter(lambda x: x > 15).to_list()
        [20, 30, 40]
        >>> list(s.take(2))
        [1, 2]

    """

    __slots__ = ()

    def is_empty(self) -> bool:
        """Force one level and report whether the stream is empty."""
        return self.force() is None

    def decons(self):
        """Return ``(head, tail)`` or ``None`` for the empty stream."""
        node = self.force()
        if node is None:
            return None
        return node.head, node.tail

    def __iter__(self):
        node = self.force()
        while node is not None:
            yield node.head
            node = node.tail.force()

    def map(self, f: Callable[[Any], Any]) -> "Stream":
        def go(s):
            node = s.force()
            if node is None:
                return None
            tail = node.tail
            return Cons(f(node.head), Stream(lambda: go(tail)))

        return Stream(lambda: go(self))

    def mapi(self, f: Callable[[int, Any], Any]) -> "Stream":
        """Like :meth:`map` but ``f`` also receives the index of the element."""

        def go(i, s):
            node = s.force()
            if node is None:
                return None
            tail = node.tail
            return Cons(f(i, node.head), Stream(lambda: go(i + 1, tail)))

        return Stream(lambda: go(0, self))

    def filter(self, p: Callable[[Any], bool]) -> "Stream":
        def go(s):
            node = s.force()
            while node is not None and not p(node.head):
                node = node.tail.force()
            if node is None:
                return None
            tail = node.tail
            return Cons(node.head, Stream(lambda: go(tail)))

        return Stream(lambda: go(self))

    def filter_map(self, f: Callable[[Any], Any]) -> "Stream":
        """Map with ``f`` and drop the elements for which ``f`` returns None."""

        def go(s):
            node = s.force()
            while node is not None:
                y = f(node.head)
                if y is not None:
                    tail = node.tail
                    return Cons(y, Stream(lambda: go(tail)))
                node = node.tail.force()
            return None

        return Stream(lambda: go(self))

    def append(self, other: "Stream") -> "Stream":
        """All of this stream followed by all of ``other``.

        ``other`` is not forced until this stream is exhausted.
        """

        def go(s):
            node = s.force()
            if node is None:
                return other.force()
            tail = node.tail
            return Cons(node.head, Stream(lambda: go(tail)))

        return Stream(lambda: go(self))

    def take(self, n: int) -> "Stream":
        """The first ``n`` elements. Never forces more than ``n`` nodes."""

        def go(n, s):
            if n <= 0:
                return None
            node = s.force()
            if node is None:
                return None
            tail = node.tail
            return Cons(node.head, Stream(lambda: go(n - 1, tail)))

        return Stream(lambda: go(n, self))

    def take_while(self, p: Callable[[Any], bool]) -> "Stream":
        def go(s):
            node = s.force()
            if node is None or not p(node.head):
                return None
            tail = node.tail
            return Cons(node.head, Stream(lambda: go(tail)))

        return Stream(lambda: go(self))

    def drop_while(self, p: Callable[[Any], bool]) -> "Stream":
        def go(s):
            node = s.force()
            while node is not None and p(node.head):
                node = node.tail.force()
            return node

        return Stream(lambda: go(self))

    def fold(self, f: Callable[[Any, Any], Any], init):
        """Strict left fold. Only valid on finite streams."""
        y = init
        for x in self:
            y = f(y, x)
        return y

    def find(self, p: Callable[[Any], bool]):
        """Return the first element satisfying ``p`` or None."""
        for x in self:
            if p(x):
                return x
        return None

    def find_first_mapped(self, f: Callable[[Any], Any]):
        """Return the first non-None ``f(x)``, forcing no further than needed."""
        for x in self:
            y = f(x)
            if y is not None:
                return y
        return None

    def to_list(self) -> list:
        return list(self)

    def length(self) -> int:
        n = 0
        node = self.force()
        while node is not None:
            n += 1
            node = node.tail.force()
        return n


def empty() -> Stream:
    return Stream.of_value(None)


def cons(x, tail: Stream) -> Stream:
    """A stream with head ``x``. The tail is not forced."""
    return Stream.of_value(Cons(x, tail))


def singleton(x) -> Stream:
    return cons(x, empty())


def defer(make: Callable[[], Stream]) -> Stream:
    """A stream whose construction is postponed until it is first forced."""
    return Stream(lambda: make().force())


def of_list(xs: Iterable) -> Stream:
    """A stream over a snapshot of ``xs``."""
    return of_array(tuple(xs))


def of_array(a: Sequence) -> Stream:
    """A stream over a random-access sequence, read lazily by index."""
    n = len(a)

    def go(i):
        if i >= n:
            return None
        return Cons(a[i], Stream(lambda: go(i + 1)))

    return Stream(lambda: go(0))


def generate(step: Callable[[], Any]) -> Stream:
    """Build a stream by calling ``step`` until it returns None.

    Each call happens when the corresponding node is first forced.
    """

    def go():
        x = step()
        if x is None:
            return None
        return Cons(x, Stream(go))

    return Stream(go)


def iterate(f: Callable[[Any], Any], x) -> Stream:
    """The infinite stream ``x, f(x), f(f(x)), ...``."""
    return Stream(lambda: Cons(x, iterate(f, f(x))))


def repeat(f: Callable[[], Any]) -> Stream:
    """The infinite stream ``f(), f(), ...``."""
    return Stream(lambda: Cons(f(), repeat(f)))


def repeat_n(n: int, f: Callable[[], Any]) -> Stream:
    return repeat(f).take(n)


def enum(start: int, end: int) -> Stream:
    """The integers from ``start`` to ``end`` inclusive."""
    return enum_then(start, start + 1, end)


def enum_then(start: int, nxt: int, end: int) -> Stream:
    """The integers ``start, nxt, ...`` stepping by ``nxt - start`` up to ``end``.

    Examples:

        >>> enum_then(10, 7, 0).to_list()
        [10, 7, 4, 1]

    """
    step = nxt - start

    def go(i):
        if (step > 0 and i <= end) or (step < 0 and i >= end):
            return Cons(i, Stream(lambda: go(i + step)))
        return None

    return Stream(lambda: go(start))


def guard(b: bool, s: Stream) -> Stream:
    return s if b else empty()


def guard1(b: bool, x) -> Stream:
    return singleton(x) if b else empty()


def concat(xss: Stream) -> Stream:
    """Flatten a stream of streams, preserving order."""

    def go(xs, rest):
        node = xs.force()
        while node is None:
            outer = rest.force()
            if outer is None:
                return None
            node = outer.head.force()
            rest = outer.tail
        tail = node.tail
        return Cons(node.head, Stream(lambda: go(tail, rest)))

    return Stream(lambda: go(empty(), xss))


def zip_with(f: Callable[[Any, Any], Any], xs: Stream, ys: Stream) -> Stream:
    """Pairwise ``f``; the longer stream is cut short."""

    def go(xs, ys):
        nx = xs.force()
        if nx is None:
            return None
        ny = ys.force()
        if ny is None:
            return None
        return Cons(f(nx.head, ny.head), Stream(lambda: go(nx.tail, ny.tail)))

    return Stream(lambda: go(xs, ys))


class Side(str, Enum):
    LEFT = "left"
    RIGHT = "right"


class LengthMismatch(ValueError):
    """Raised by the strict zips when the two streams have different lengths.

    Attributes:
        side: the stream that still had elements when the other one ran out.
    """

    def __init__(self, side: Side):
        super().__init__(f"stream length mismatch: {side.value} stream is longer")
        self.side = side


def zip_with_stricti(
    f: Callable[[int, Any, Any], Any], xs: Stream, ys: Stream
) -> Stream:
    """Pairwise ``f(i, x, y)``; raises :obj:`LengthMismatch` when forced past the
    end of only one of the streams."""

    def go(i, xs, ys):
        nx = xs.force()
        ny = ys.force()
        if nx is None and ny is None:
            return None
        if nx is None:
            raise LengthMismatch(Side.RIGHT)
        if ny is None:
            raise LengthMismatch(Side.LEFT)
        return Cons(
            f(i, nx.head, ny.head), Stream(lambda: go(i + 1, nx.tail, ny.tail))
        )

    return Stream(lambda: go(0, xs, ys))


def zip_with_strict(f: Callable[[Any, Any], Any], xs: Stream, ys: Stream) -> Stream:
    """Pairwise ``f``; raises :obj:`LengthMismatch` if the lengths differ.

    Examples:

        >>> zip_with_strict(lambda x, y: x + y, of_list([1, 2]), of_list([3, 4])).to_list()
        [4, 6]

    """
    return zip_with_stricti(lambda i, x, y: f(x, y), xs, ys)


def unzip(xys: Stream):
    """Split a stream of pairs into two streams which share the forcing work."""

    def go(s):
        node = s.force()
        if node is None:
            return None, None
        x, y = node.head
        rest = Lazy(lambda: go(node.tail))
        return (
            Cons(x, Stream(lambda: rest.force()[0])),
            Cons(y, Stream(lambda: rest.force()[1])),
        )

    pair = Lazy(lambda: go(xys))
    return Stream(lambda: pair.force()[0]), Stream(lambda: pair.force()[1])
