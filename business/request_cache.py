"""Request-scoped memoization.

An object that lives for one request keeps a ``_memo`` dict; methods wrapped
with ``memoized`` compute once per distinct argument tuple on that object.
There is no cross-request cache: a new object always recomputes.
"""
import copy
import functools
from typing import Any, Callable


def memoized(method: Callable) -> Callable:
    """Cache a method's result on the instance for the instance's lifetime.

    Callers receive a deep copy, so mutating a returned dict never changes
    later results.
    """
    @functools.wraps(method)
    def wrapper(self, *args: Any, **kwargs: Any) -> Any:
        key = (method.__name__, args, tuple(sorted(kwargs.items())))
        if key not in self._memo:
            self._memo[key] = method(self, *args, **kwargs)
        return copy.deepcopy(self._memo[key])

    return wrapper
