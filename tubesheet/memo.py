"""Optional memoisation for pure layout functions.

Results are keyed by the exact bound argument tuple (defaults applied), so
``f(a, b)`` and ``f(a, b, offset="AUTO")`` share an entry. The cache never
evicts; one session only touches a handful of parameter sets.
"""
import functools, inspect, threading
from typing import Any, Callable

_MISSING = object()


class ResultCache:
    """Thread-safe mapping from a canonical parameter tuple to a result."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.hits = 0
        self.misses = 0
        self._store: dict[tuple, Any] = {}
        self._lock = threading.Lock()

    def get(self, key: tuple, default: Any = None) -> Any:
        with self._lock:
            value = self._store.get(key, _MISSING)
            if value is _MISSING:
                self.misses += 1
                return default
            self.hits += 1
            return value

    def put(self, key: tuple, value: Any) -> None:
        with self._lock:
            self._store.setdefault(key, value)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self.hits = self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, key: tuple) -> bool:
        with self._lock:
            return key in self._store


def memoize(cache: ResultCache) -> Callable[[Callable], Callable]:
    """Decorate a pure function so repeated calls are served from *cache*.

    Cached values are shared between callers and must be immutable.
    Exceptions are not cached. With ``cache.enabled`` false the function
    is called straight through.
    """
    def decorator(func):
        sig = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            if not cache.enabled:
                return func(*args, **kwargs)
            bound = sig.bind(*args, **kwargs)
            bound.apply_defaults()
            key = (func.__qualname__,) + tuple(bound.arguments.values())
            value = cache.get(key, _MISSING)
            if value is _MISSING:
                value = func(*args, **kwargs)
                cache.put(key, value)
            return value

        wrapper.cache = cache
        return wrapper
    return decorator
