"""Token based dependency injection container.

This package maps tokens (strings, `Symbol`s or classes) to providers that build
values, and resolves object graphs on demand with singleton/transient scoping,
cycle detection, property injection and parent/child containers.

Exports:
- `Container`: registers providers and resolves tokens; `create_child()` builds a
  container that falls back to its parent for provider lookup.
- `ContainerModule`: batch of registration callbacks loaded into a container.
- `ClassProvider`, `ValueProvider`, `FactoryProvider`: the provider variants.
- `Scope`: singleton or transient lifetime of a provider's value.
- `Symbol`: unique token compared by identity.
- `Inject`, `inject_property`, `InjectionRegistry`: property injection declarations.
- `OnInit`: protocol for instances notified after construction.
"""

from ._container import Container, ContainerModule, OnInit
from ._errors import CircularDependencyError, ContainerError, ProviderNotFoundError, ResolutionError
from ._injection import Inject, InjectionPoint, InjectionRegistry, default_registry, inject_property
from ._providers import ClassProvider, FactoryProvider, Provider, Scope, ValueProvider, as_provider
from ._tokens import Symbol, Token, token_to_string


__all__ = [
    "CircularDependencyError",
    "ClassProvider",
    "Container",
    "ContainerError",
    "ContainerModule",
    "FactoryProvider",
    "Inject",
    "InjectionPoint",
    "InjectionRegistry",
    "OnInit",
    "Provider",
    "ProviderNotFoundError",
    "ResolutionError",
    "Scope",
    "Symbol",
    "Token",
    "ValueProvider",
    "as_provider",
    "default_registry",
    "inject_property",
    "token_to_string",
]
