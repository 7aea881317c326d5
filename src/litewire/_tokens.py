from __future__ import annotations

import inspect
from typing import Any, TypeVar, Union


T = TypeVar("T")


class Symbol:
    """Unique token compared by identity.

    Two symbols never compare equal, even when created with the same description:

      LOGGER = Symbol("Logger")
      LOGGER == Symbol("Logger")  # False
    """

    __slots__ = ("_description",)

    def __init__(self, description: str | None = None) -> None:
        self._description = description

    @property
    def description(self) -> str | None:
        return self._description

    def __repr__(self) -> str:
        if self._description is None:
            return "Symbol()"
        return f"Symbol({self._description})"


Token = Union[Symbol, str, type[T]]


def token_to_string(token: Any) -> str:
    """Human readable label for a token, used in error messages only."""
    if isinstance(token, str):
        return token

    if isinstance(token, Symbol):
        return token.description if token.description is not None else repr(token)

    if inspect.isclass(token):
        return token.__name__ or "[AnonymousClass]"

    return str(token)
