from __future__ import annotations

import asyncio
import functools
import inspect
import logging
import threading
from typing import (
    TYPE_CHECKING,
    Any,
    Protocol,
    TypeVar,
    overload,
    runtime_checkable,
)

from ._errors import CircularDependencyError, ProviderNotFoundError, ResolutionError
from ._injection import InjectionRegistry, default_registry
from ._providers import ClassProvider, FactoryProvider, Provider, Scope, ValueProvider, as_provider
from ._tokens import token_to_string


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence
    from types import TracebackType

    from ._tokens import Symbol, Token

    InitErrorHandler = Callable[[object, BaseException], None]

T = TypeVar("T")


@runtime_checkable
class OnInit(Protocol):
    """Instances implementing `on_init` are notified once after construction and injection.

    `on_init` may be a coroutine function. The container schedules it on the running
    event loop without awaiting it; failures are logged and passed to the container's
    `on_init_error` callback instead of being raised from `resolve`.
    """

    def on_init(self) -> object: ...


class Container:
    """Token based DI container.

    - register class / value / factory providers
    - resolve with positional constructor injection and property injection
    - scopes: singleton (cached per container) / transient
    - child containers that delegate provider lookup to their parent.

    Example:
      LOGGER = Symbol("Logger")
      container = Container().register(
          ClassProvider(LOGGER, ConsoleLogger),
          ValueProvider("config", {"app_name": "MyApp"}),
          FactoryProvider("greeting", make_greeting, deps=["config"], scope=Scope.TRANSIENT),
      )
      container.resolve("greeting")

    """

    def __init__(
        self,
        parent: Container | None = None,
        *,
        injections: InjectionRegistry | None = None,
        on_init_error: InitErrorHandler | None = None,
    ) -> None:
        self._parent = parent
        self._providers: dict[Any, Provider] = {}
        self._singletons: dict[Any, object] = {}
        self._pending_init: set[asyncio.Future[Any]] = set()
        self._injections = injections if injections is not None else default_registry
        self._on_init_error = on_init_error
        self._lock = threading.RLock()

    @property
    def parent(self) -> Container | None:
        return self._parent

    def register(self, *providers: Provider | Mapping[str, Any]) -> Container:
        """Register one or more providers, replacing earlier ones for the same token.

        Example:
          container.register(ClassProvider(Greeter, Greeter, scope=Scope.TRANSIENT))
          container.register({"token": "config", "use_value": {"debug": True}})

        """
        for spec in providers:
            provider = as_provider(spec)
            with self._lock:
                self._providers[provider.token] = provider
            logger.debug("Registered %s for %r", type(provider).__name__, provider.token)

        return self

    def create_child(self) -> Container:
        """Create a container that looks up providers in itself first, then in this container.

        The child keeps its own singleton cache, even for providers declared here.
        """
        child = Container(self, injections=self._injections, on_init_error=self._on_init_error)
        logger.debug("Created child container %#x of %#x", id(child), id(self))
        return child

    def get_provider(self, token: Token[Any]) -> Provider | None:
        container: Container | None = self
        while container is not None:
            with container._lock:  # noqa: SLF001
                provider = container._providers.get(token)  # noqa: SLF001
            if provider is not None:
                return provider
            container = container._parent  # noqa: SLF001
        return None

    def __contains__(self, token: object) -> bool:
        return self.get_provider(token) is not None  # type: ignore[arg-type]

    def is_cached(self, token: Token[Any]) -> bool:
        with self._lock:
            return token in self._singletons

    @overload
    def resolve(self, token: type[T], _stack: Sequence[Token[Any]] = ...) -> T: ...

    @overload
    def resolve(self, token: str | Symbol, _stack: Sequence[Token[Any]] = ...) -> Any: ...

    def resolve(self, token: Token[T], _stack: Sequence[Token[Any]] = ()) -> object:
        """Resolve the token to an instance.

        `_stack` holds the tokens being resolved further up the call chain; callers
        leave it empty.
        """
        stack = tuple(_stack)
        if token in stack:
            raise CircularDependencyError((*stack, token))

        provider = self.get_provider(token)
        if provider is None:
            raise ProviderNotFoundError(token)

        scope = provider.effective_scope

        # Return cached singleton if present
        if scope is Scope.SINGLETON:
            with self._lock:
                if provider.token in self._singletons:
                    logger.debug("Resolved %r from cache", token)
                    return self._singletons[provider.token]

        instance = self._instantiate(provider, (*stack, token))
        self._inject_properties(instance)
        self._run_init_hook(instance)

        if scope is Scope.SINGLETON:
            with self._lock:
                self._singletons[provider.token] = instance

        logger.debug("Constructed %r (%s)", token, scope.value)
        return instance

    def dispose(self) -> None:
        """Release the singleton cache and cancel pending asynchronous initializers.

        Safe to call repeatedly. Providers stay registered, so the container can still
        resolve afterwards, building fresh singletons.
        """
        with self._lock:
            pending = list(self._pending_init)
            self._pending_init.clear()
            self._singletons.clear()

        for task in pending:
            task.cancel()

        logger.debug("Disposed container %#x", id(self))

    def __enter__(self) -> Container:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.dispose()

    def _instantiate(self, provider: Provider, stack: tuple[Token[Any], ...]) -> object:
        if isinstance(provider, ClassProvider):
            args = [self.resolve(dep, stack) for dep in provider.dependencies]
            return provider.cls(*args)

        if isinstance(provider, FactoryProvider):
            args = [self.resolve(dep, stack) for dep in provider.deps]
            return provider.factory(*args)

        if isinstance(provider, ValueProvider):
            return provider.value

        msg = f"Unknown provider type {type(provider).__name__} for token: {token_to_string(provider.token)}"
        raise ResolutionError(msg)

    def _inject_properties(self, instance: object) -> None:
        if inspect.isclass(instance):
            return

        for point in self._injections.points_for(type(instance)):
            # fresh stack: property dependencies are not part of the constructor chain
            object.__setattr__(instance, point.field, self.resolve(point.token))

    def _run_init_hook(self, instance: object) -> None:
        if inspect.isclass(instance) or not isinstance(instance, OnInit) or not callable(instance.on_init):
            return

        result = instance.on_init()
        if inspect.isawaitable(result):
            self._schedule_init(instance, result)

    def _schedule_init(self, instance: object, awaitable: Awaitable[Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            msg = f"{type(instance).__name__}.on_init() is asynchronous but no event loop is running"
            raise ResolutionError(msg) from None

        task = asyncio.ensure_future(awaitable, loop=loop)
        with self._lock:
            self._pending_init.add(task)
        task.add_done_callback(functools.partial(self._init_done, instance))

    def _init_done(self, instance: object, task: asyncio.Future[Any]) -> None:
        with self._lock:
            self._pending_init.discard(task)

        if task.cancelled():
            return

        exc = task.exception()
        if exc is None:
            return

        logger.error("Asynchronous on_init of %s failed", type(instance).__name__, exc_info=exc)
        if self._on_init_error is not None:
            self._on_init_error(instance, exc)


class ContainerModule:
    """Batch of registration callbacks applied together.

    Example:
      core = ContainerModule([
          lambda c: c.register(ClassProvider(LOGGER, ConsoleLogger)),
          lambda c: c.register(ValueProvider("config", {"app_name": "MyApp"})),
      ])
      core.load(container)

    Callbacks run in order; one that raises leaves the earlier registrations in place.
    """

    def __init__(self, loaders: Iterable[Callable[[Container], object]]) -> None:
        self._loaders = tuple(loaders)

    @property
    def loaders(self) -> tuple[Callable[[Container], object], ...]:
        return self._loaders

    def load(self, container: Container) -> Container:
        for loader in self._loaders:
            loader(container)
        return container
