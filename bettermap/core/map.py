"""
BetterMap — 保持插入顺序的键值容器 + 类数组操作。

在普通 dict 之上提供 at / first / last / slice / shift、
map / filter / reduce / split、random / sort / shuffle、
combine / union / intersect 等操作。

除 combine() 外，所有返回容器的操作都会创建新的实例，不会修改原容器。
"""

from __future__ import annotations

import functools
import json as _json
import logging
import random as _random
from collections.abc import Mapping, MutableMapping
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Iterable,
    Iterator,
    List,
    Optional,
    TYPE_CHECKING,
    Tuple,
    TypeVar,
    Union,
)

if TYPE_CHECKING:
    from bettermap.core.config import MapConfig

logger = logging.getLogger("bettermap.core")

K = TypeVar("K")
V = TypeVar("V")
T = TypeVar("T")

DEFAULT_NAME = "unknown items"

Predicate = Callable[[V, K], bool]
Comparator = Callable[[V, V, K, K], float]
EntrySource = Union[Mapping, Iterable[Tuple[Any, Any]]]


# ──────────────────────────────────────────────
# Exceptions
# ──────────────────────────────────────────────


class BetterMapError(Exception):
    """Base class for errors raised by this package."""


class EntryShapeError(BetterMapError, TypeError):
    """Raised when a bulk input element is not a ``(key, value)`` pair."""

    def __init__(self, entry: Any) -> None:
        self.entry = entry
        super().__init__(f"Expected a (key, value) pair, got {entry!r}")


# ──────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────


def _iter_entries(data: EntrySource) -> Iterator[Tuple[Any, Any]]:
    """Yield ``(key, value)`` pairs from a mapping or an iterable of pairs."""
    if isinstance(data, Mapping):
        yield from list(data.items())
        return
    for entry in data:
        try:
            key, value = entry
        except (TypeError, ValueError):
            raise EntryShapeError(entry) from None
        yield key, value


def _wrap_position(pos: int, size: int) -> int:
    """Normalize *pos* with the ``size - 1`` wrap used by at / key_at / shift.

    Positions past the end are reduced modulo ``size - 1``; negative positions
    become ``size + rem(pos, size - 1)`` with a truncated remainder, so the
    result may still land on ``size`` (callers treat that as absent).
    A container with at most one entry always resolves to position 0.
    """
    if size <= 1:
        return 0
    if pos > size - 1:
        pos = pos % (size - 1)
    if pos < 0:
        pos = size - (-pos % (size - 1))
    return pos


# ──────────────────────────────────────────────
# BetterMap
# ──────────────────────────────────────────────


class BetterMap(MutableMapping, Generic[K, V]):
    """An insertion-ordered map with array-like helpers.

    Parameters:
        name: A friendly label used by ``str()`` (default ``"unknown items"``).
        rng: Random source for :meth:`random` and :meth:`shuffle`. Defaults
            to the module-level ``random`` functions.

    Usage::

        people = BetterMap("People")
        people.set("Doraemon", 10).set("Dora", 28).set("Pikachu", 7)
        people.at(-1)                 # 7
        people.filter(lambda v, k: v > 10)
    """

    def __init__(
        self,
        name: Optional[str] = None,
        *,
        rng: Optional[_random.Random] = None,
    ) -> None:
        self.name = name if isinstance(name, str) else DEFAULT_NAME
        self._rng = rng
        self._data: Dict[K, V] = {}

    def _spawn(self) -> "BetterMap":
        """Create an empty map of the same type sharing name and rng."""
        return type(self)(self.name, rng=self._rng)

    def _snapshot(self) -> List[Tuple[K, V]]:
        return list(self._data.items())

    # ── Mapping protocol ──

    def __getitem__(self, key: K) -> V:
        return self._data[key]

    def __setitem__(self, key: K, value: V) -> None:
        self._data[key] = value

    def __delitem__(self, key: K) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[K]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __str__(self) -> str:
        return f"[{type(self).__name__}[{len(self)}] of <{self.name}>]"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, {self._data!r})"

    # ── Core storage ──

    @property
    def size(self) -> int:
        return len(self._data)

    def set(self, key: K, value: V) -> "BetterMap[K, V]":
        """Insert or update *key*. Existing keys keep their position."""
        self._data[key] = value
        return self

    def get(self, key: K, default: Any = None) -> Optional[V]:
        return self._data.get(key, default)

    def has(self, key: K) -> bool:
        return key in self._data

    def delete(self, key: K) -> bool:
        """Remove *key*. Returns True if it was present."""
        if key in self._data:
            del self._data[key]
            return True
        return False

    def clear(self) -> None:
        self._data.clear()

    def entries(self) -> Iterator[Tuple[K, V]]:
        return iter(self._data.items())

    def for_each(self, fn: Callable[[V, K], Any]) -> None:
        for k, v in self._snapshot():
            fn(v, k)

    def copy(self) -> "BetterMap[K, V]":
        new_map = self._spawn()
        new_map._data = dict(self._data)
        return new_map

    def array(self, keys: bool = False) -> List[Any]:
        """Return the keys (``keys=True``) or values as a list."""
        return list(self._data) if keys else list(self._data.values())

    # ── Positional access ──

    def _nth(self, pos: int, keys: bool) -> Any:
        if not self._data:
            return None
        pos = _wrap_position(pos, len(self._data))
        source = self._data.keys() if keys else self._data.values()
        for i, item in enumerate(source):
            if i == pos:
                return item
        return None

    def at(self, pos: int) -> Optional[V]:
        """Return the value at *pos* (negative counts from the end)."""
        return self._nth(pos, keys=False)

    def key_at(self, pos: int) -> Optional[K]:
        """Return the key at *pos* (negative counts from the end)."""
        return self._nth(pos, keys=True)

    def _head(self, n: Optional[int], keys: bool) -> Any:
        if n is not None and n < 0:
            return self._tail(-n, keys)
        source = self.array(keys)
        if n is None:
            return source[0] if source else None
        if n > len(source):
            return None
        return source[:n]

    def _tail(self, n: Optional[int], keys: bool) -> Any:
        if n is not None and n < 0:
            return self._head(-n, keys)
        source = self.array(keys)
        if n is None:
            return source[-1] if source else None
        if n > len(source):
            return None
        return source[len(source) - n:]

    def first(self, n: Optional[int] = None) -> Union[V, List[V], None]:
        """First value, or a list of the first *n* values.

        Negative *n* returns ``last(-n)``. Returns None when *n* exceeds the
        size of the map.
        """
        return self._head(n, keys=False)

    def first_key(self, n: Optional[int] = None) -> Union[K, List[K], None]:
        """Key counterpart of :meth:`first`."""
        return self._head(n, keys=True)

    def last(self, n: Optional[int] = None) -> Union[V, List[V], None]:
        """Last value, or a list of the last *n* values (in map order)."""
        return self._tail(n, keys=False)

    def last_key(self, n: Optional[int] = None) -> Union[K, List[K], None]:
        """Key counterpart of :meth:`last`."""
        return self._tail(n, keys=True)

    def slice(self, start: int = 0, end: Optional[int] = None) -> "BetterMap[K, V]":
        """Return a new map with the entries in ``[start, end)``."""
        new_map = self._spawn()
        for k, v in self._snapshot()[start:end]:
            new_map.set(k, v)
        return new_map

    def shift(self, n: int) -> "BetterMap[K, V]":
        """Rotate entries *n* places to the left (right if negative).

        Usage::

            m.shift(1)   # a, b, c -> b, c, a
            m.shift(-1)  # a, b, c -> c, a, b
        """
        items = self._snapshot()
        n = _wrap_position(n, len(items))
        new_map = self._spawn()
        for k, v in items[n:] + items[:n]:
            new_map.set(k, v)
        return new_map

    # ── Functional operations ──

    def every(self, fn: Predicate) -> bool:
        for k, v in self._snapshot():
            if not fn(v, k):
                return False
        return True

    def some(self, fn: Predicate) -> bool:
        for k, v in self._snapshot():
            if fn(v, k):
                return True
        return False

    def filter(self, fn: Predicate) -> "BetterMap[K, V]":
        """Return a new map with the entries for which ``fn(value, key)`` holds."""
        new_map = self._spawn()
        for k, v in self._snapshot():
            if fn(v, k):
                new_map.set(k, v)
        return new_map

    def find(self, fn: Predicate) -> Optional[V]:
        for k, v in self._snapshot():
            if fn(v, k):
                return v
        return None

    def find_key(self, fn: Predicate) -> Optional[K]:
        for k, v in self._snapshot():
            if fn(v, k):
                return k
        return None

    def map(self, fn: Callable[[V, K], T]) -> List[T]:
        """Project every entry to ``fn(value, key)`` and return a list."""
        return [fn(v, k) for k, v in self._snapshot()]

    def transform(self, fn: Callable[[V, K], T]) -> "BetterMap[K, T]":
        """Like :meth:`map` but keeps the keys and returns a new map."""
        new_map = self._spawn()
        for k, v in self._snapshot():
            new_map.set(k, fn(v, k))
        return new_map

    def reduce(self, fn: Callable[[Any, Tuple[K, V]], T], initial: Optional[T] = None) -> Optional[T]:
        """Left fold over ``(key, value)`` pairs.

        When *initial* is None the first pair seeds the accumulator; an empty
        map then yields None.

        Usage::

            m.reduce(lambda acc, kv: acc + kv[1], 0)
        """
        items = self._snapshot()
        if initial is None:
            if not items:
                return None
            result: Any = items[0]
            items = items[1:]
        else:
            result = initial
        for entry in items:
            result = fn(result, entry)
        return result

    def split(self, fn: Predicate) -> Tuple["BetterMap[K, V]", "BetterMap[K, V]"]:
        """Partition into ``(passed, failed)`` maps, preserving order."""
        passed = self._spawn()
        failed = self._spawn()
        for k, v in self._snapshot():
            if fn(v, k):
                passed.set(k, v)
            else:
                failed.set(k, v)
        return passed, failed

    # ── Sampling and ordering ──

    def _random_float(self) -> float:
        return self._rng.random() if self._rng is not None else _random.random()

    def _draw(self, keys: bool) -> Any:
        size = len(self._data)
        if size == 0:
            return None
        index = self._rng.randrange(size) if self._rng is not None else _random.randrange(size)
        source = self._data.keys() if keys else self._data.values()
        for i, item in enumerate(source):
            if i == index:
                return item
        return None

    def random(self, count: Optional[int] = None) -> Union[V, List[V], None]:
        """One random value, or *count* independent draws (with replacement)."""
        if not count:
            return self._draw(keys=False)
        if not self._data:
            return []
        return [self._draw(keys=False) for _ in range(count)]

    def random_key(self, count: Optional[int] = None) -> Union[K, List[K], None]:
        """Key counterpart of :meth:`random`."""
        if not count:
            return self._draw(keys=True)
        if not self._data:
            return []
        return [self._draw(keys=True) for _ in range(count)]

    def sort(self, fn: Optional[Comparator] = None) -> "BetterMap[K, V]":
        """Return a new map ordered by ``fn(v1, v2, k1, k2)``.

        The comparator follows the usual negative / zero / positive
        convention. The sort is stable; without *fn* the order is unchanged.

        Usage::

            m.sort(lambda v1, v2, k1, k2: v1 - v2)
        """
        items = self._snapshot()
        if fn is not None:
            items.sort(key=functools.cmp_to_key(lambda a, b: fn(a[1], b[1], a[0], b[0])))
        new_map = self._spawn()
        for k, v in items:
            new_map.set(k, v)
        return new_map

    def shuffle(self) -> "BetterMap[K, V]":
        """Return a new map sorted by a random comparator.

        This is a comparator shuffle, so permutations are not equally likely.
        """
        return self.sort(lambda *_: self._random_float() - 0.5)

    # ── Combinators ──

    def combine(self, *maps: EntrySource) -> "BetterMap[K, V]":
        """Add every entry whose key is not already present. Mutates self."""
        before = len(self._data)
        for other in maps:
            for k, v in _iter_entries(other):
                if k not in self._data:
                    self._data[k] = v
        logger.debug("Combined %d map(s) into %s: +%d entries", len(maps), self, len(self._data) - before)
        return self

    @classmethod
    def from_entries(cls, data: EntrySource, name: Optional[str] = None) -> "BetterMap":
        """Build a map from another mapping or an iterable of ``(key, value)`` pairs."""
        new_map = cls(name)
        for k, v in _iter_entries(data):
            new_map.set(k, v)
        return new_map

    @classmethod
    def from_record(cls, data: Any, name: Optional[str] = None) -> "BetterMap":
        """Build a map from a flat record.

        *data* may be a mapping or any object with instance attributes
        (dataclass instances, ``SimpleNamespace`` ...), read in their own
        order.
        """
        record = data if isinstance(data, Mapping) else vars(data)
        new_map = cls(name)
        for key in record:
            new_map.set(key, record[key])
        return new_map

    @classmethod
    def from_config(cls, config: MapConfig, name: Optional[str] = None) -> "BetterMap":
        """Create an empty map using a :class:`~bettermap.core.config.MapConfig`."""
        return cls(name if name is not None else config.default_name, rng=config.make_rng())

    @classmethod
    def union(cls, *maps: EntrySource) -> "BetterMap":
        """Key-based union. The first map wins on duplicate keys.

        Values are not compared. No argument is modified.
        """
        if not maps:
            return cls()
        head, rest = maps[0], maps[1:]
        if isinstance(head, BetterMap):
            result = head.copy()
        else:
            result = cls.from_entries(head)
        for other in rest:
            for k, v in _iter_entries(other):
                if k not in result:
                    result.set(k, v)
        logger.debug("Union of %d map(s): %d keys", len(maps), len(result))
        return result

    @classmethod
    def intersect(cls, *maps: EntrySource) -> "BetterMap":
        """Entries of the first map whose key exists in every other map.

        Values are taken from the first map and never compared.
        """
        if not maps:
            return cls()
        head = maps[0] if isinstance(maps[0], BetterMap) else cls.from_entries(maps[0])
        others = [m if isinstance(m, Mapping) else dict(_iter_entries(m)) for m in maps[1:]]
        result = head.filter(lambda _v, k: all(k in m for m in others))
        logger.debug("Intersection of %d map(s): %d keys", len(maps), len(result))
        return result

    # ── Serialization ──

    def json(self) -> Dict[str, V]:
        """Flat ``{str(key): value}`` record in insertion order.

        Keys that stringify the same (``1`` and ``"1"``) overwrite each other.
        """
        record: Dict[str, V] = {}
        for k, v in self._data.items():
            text = f"{k}"
            if text in record:
                logger.debug("Key %r collides with an earlier key as %r", k, text)
            record[text] = v
        return record

    def to_json(self) -> Dict[str, V]:
        """Alias of :meth:`json`."""
        return self.json()

    def dumps(self, **kwargs: Any) -> str:
        """Serialize :meth:`to_json` with the ``json`` module."""
        kwargs.setdefault("ensure_ascii", False)
        return _json.dumps(self.to_json(), **kwargs)
