from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping, Sequence
from dataclasses import KW_ONLY, dataclass
from enum import Enum
from typing import Any

from ._errors import ResolutionError
from ._tokens import Token, token_to_string


class Scope(Enum):
    SINGLETON = "singleton"
    TRANSIENT = "transient"


@dataclass(frozen=True)
class Provider:
    """Recipe for producing the value of a token.

    Use one of the concrete variants; a bare `Provider` registers fine but cannot
    be instantiated by a container.
    """

    token: Token[Any]
    _: KW_ONLY
    scope: Scope | None = None

    @property
    def effective_scope(self) -> Scope:
        return self.scope if self.scope is not None else Scope.SINGLETON


@dataclass(frozen=True)
class ClassProvider(Provider):
    """Construct `cls`, passing the tokens listed in `cls.inject` positionally."""

    cls: type

    @property
    def dependencies(self) -> tuple[Token[Any], ...]:
        declared = getattr(self.cls, "inject", ())
        if isinstance(declared, str):
            msg = f"{self.cls.__name__}.inject must be a sequence of tokens, got the string {declared!r}"
            raise ResolutionError(msg)
        return tuple(declared)


@dataclass(frozen=True)
class ValueProvider(Provider):
    """Return a pre-built value verbatim."""

    value: Any


@dataclass(frozen=True)
class FactoryProvider(Provider):
    """Call `factory` with the resolved `deps`, in order."""

    factory: Callable[..., Any]
    deps: Sequence[Token[Any]] = ()


_PAYLOAD_KEYS = ("use_class", "use_value", "use_factory")


def as_provider(spec: Provider | Mapping[str, Any]) -> Provider:
    """Coerce a registration argument into a validated provider.

    Accepts provider instances and mappings shaped like
    `{"token": ..., "use_class" | "use_value" | "use_factory": ..., "deps": [...], "scope": ...}`.
    The mapping variant is picked from whichever payload key is present.
    """
    if isinstance(spec, Mapping):
        spec = _from_mapping(spec)

    if not isinstance(spec, Provider):
        msg = f"Invalid provider: expected a Provider or a mapping, got {type(spec).__name__}"
        raise ResolutionError(msg)

    validate_provider(spec)
    return spec


def validate_provider(provider: Provider) -> None:
    if provider.token is None or (isinstance(provider.token, str) and not provider.token):
        msg = "Invalid provider: missing token"
        raise ResolutionError(msg)

    label = token_to_string(provider.token)

    if provider.scope is not None and not isinstance(provider.scope, Scope):
        msg = f"Invalid provider for {label}: unknown scope {provider.scope!r}"
        raise ResolutionError(msg)

    if isinstance(provider, ClassProvider):
        if not inspect.isclass(provider.cls):
            msg = f"Invalid provider for {label}: `cls` must be a class, got {provider.cls!r}"
            raise ResolutionError(msg)
        if isinstance(getattr(provider.cls, "inject", ()), str):
            msg = (
                f"Invalid provider for {label}: {provider.cls.__name__}.inject must be a sequence of tokens, "
                "not a string"
            )
            raise ResolutionError(msg)

    elif isinstance(provider, ValueProvider):
        # None is indistinguishable from "no value given"
        if provider.value is None:
            msg = f"Invalid provider for {label}: missing value"
            raise ResolutionError(msg)

    elif isinstance(provider, FactoryProvider):
        if not callable(provider.factory):
            msg = f"Invalid provider for {label}: `factory` must be callable, got {provider.factory!r}"
            raise ResolutionError(msg)
        if isinstance(provider.deps, str):
            msg = f"Invalid provider for {label}: `deps` must be a sequence of tokens, got {provider.deps!r}"
            raise ResolutionError(msg)


def _from_mapping(spec: Mapping[str, Any]) -> Provider:
    present = [key for key in _PAYLOAD_KEYS if key in spec]
    if "use_value" in present and spec["use_value"] is None:
        present.remove("use_value")

    token = spec.get("token")
    if token is None or (isinstance(token, str) and not token):
        msg = "Invalid provider: missing token"
        raise ResolutionError(msg)

    if len(present) != 1:
        msg = (
            f"Invalid provider for {token_to_string(token)}: expected exactly one of "
            f"{', '.join(_PAYLOAD_KEYS)}, got {', '.join(present) or 'none'}"
        )
        raise ResolutionError(msg)

    key = present[0]
    scope = spec.get("scope")

    if key == "use_class":
        return ClassProvider(token=token, scope=scope, cls=spec[key])
    if key == "use_value":
        return ValueProvider(token=token, scope=scope, value=spec[key])
    return FactoryProvider(token=token, scope=scope, factory=spec[key], deps=spec.get("deps") or ())
