"""Property injection metadata.

Classes declare fields that a container fills in after construction. The
declarations live in an `InjectionRegistry`, independent of any container:

  class Greeter:
      logger = Inject(LOGGER)

or, without touching the class body:

  @inject_property("logger", LOGGER)
  class Greeter: ...

Both forms write to `default_registry` unless another registry is given.
"""

from __future__ import annotations

import logging
import threading
import weakref
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar


if TYPE_CHECKING:
    from collections.abc import Callable

    from ._tokens import Token

logger = logging.getLogger(__name__)

T = TypeVar("T")
C = TypeVar("C", bound=type)


@dataclass(frozen=True)
class InjectionPoint:
    field: str
    token: Token[Any]


class InjectionRegistry:
    """Maps classes to the fields a container must inject after construction.

    Keys are held weakly, so declarations disappear together with their class.
    """

    def __init__(self) -> None:
        self._points: weakref.WeakKeyDictionary[type, list[InjectionPoint]] = weakref.WeakKeyDictionary()
        self._lock = threading.RLock()

    def declare(self, owner: type, field: str, token: Token[Any]) -> None:
        with self._lock:
            points = self._points.setdefault(owner, [])
            # redeclaring a field replaces its token but keeps its position
            for i, point in enumerate(points):
                if point.field == field:
                    points[i] = InjectionPoint(field, token)
                    break
            else:
                points.append(InjectionPoint(field, token))

        logger.debug("Declared injected field %s.%s", owner.__qualname__, field)

    def points_for(self, cls: type) -> list[InjectionPoint]:
        """Injection points of `cls`, including those declared on its bases (bases first)."""
        with self._lock:
            collected: dict[str, InjectionPoint] = {}
            for klass in reversed(cls.__mro__):
                for point in self._points.get(klass, ()):
                    collected[point.field] = point
            return list(collected.values())

    def clear(self, owner: type | None = None) -> None:
        with self._lock:
            if owner is None:
                self._points.clear()
            else:
                self._points.pop(owner, None)


default_registry = InjectionRegistry()


class Inject(Generic[T]):
    """Class-body marker declaring a field filled in by the container.

    The declaration happens at class-definition time. Until a container injects
    the field, reading it from an instance raises `AttributeError`.
    """

    def __init__(self, token: Token[T], *, registry: InjectionRegistry | None = None) -> None:
        self.token = token
        self.name: str | None = None
        self._registry = registry if registry is not None else default_registry

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name
        self._registry.declare(owner, name, self.token)

    def __get__(self, obj: object | None, owner: type | None = None) -> Any:
        if obj is None:
            return self
        msg = f"'{type(obj).__name__}' field '{self.name}' has not been injected yet"
        raise AttributeError(msg)

    def __repr__(self) -> str:
        return f"Inject({self.token!r})"


def inject_property(field: str, token: Token[Any], *, registry: InjectionRegistry | None = None) -> Callable[[C], C]:
    """Class decorator declaring `field` as injected with `token`."""

    def decorator(cls: C) -> C:
        (registry if registry is not None else default_registry).declare(cls, field, token)
        return cls

    return decorator
