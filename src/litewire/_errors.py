from __future__ import annotations

from typing import Any

from ._tokens import Token, token_to_string


class ContainerError(RuntimeError):
    """Base class for every error raised by a container."""


class ResolutionError(ContainerError):
    """A provider is malformed or cannot be turned into a value."""


class ProviderNotFoundError(ContainerError):
    def __init__(self, token: Token[Any]) -> None:
        super().__init__(f"No provider for token: {token_to_string(token)}")
        self.token = token


class CircularDependencyError(ContainerError):
    def __init__(self, chain: tuple[Token[Any], ...]) -> None:
        path = " -> ".join(token_to_string(t) for t in chain)
        super().__init__(f"Circular dependency detected: {path}")
        self.chain = chain
