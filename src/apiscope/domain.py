"""Domain models used throughout the framework."""

from dataclasses import dataclass
from typing import Any, Callable, Generic, Mapping, TypeVar

__all__ = ["ApiRef", "AnyApiRef", "ApiFactory", "AnyApiFactory", "MaterialisedApi"]

T = TypeVar("T")


@dataclass(frozen=True)
class ApiRef(Generic[T]):
    """A reference to an API, used to look up its implementation.

    The type parameter only exists for type checkers: it lets a factory's
    construction function and the callers of ``resolve`` agree on the type of
    the API without the reference ever holding a value.

    Attributes:
        id: The unique identifier of the API.

    Example:
        >>> database_ref: ApiRef[Database] = ApiRef("core.database")
    """

    id: str

    def __post_init__(self):
        if not isinstance(self.id, str) or not self.id:
            raise ValueError(f"API reference id must be a non-empty string, got {self.id!r}")

    def __str__(self) -> str:
        return f"apiRef{{{self.id}}}"


AnyApiRef = ApiRef[Any]


@dataclass(frozen=True)
class ApiFactory(Generic[T]):
    """Describes how to build one API from the APIs it depends on.

    Attributes:
        api: Reference to the API this factory produces.
        deps: Mapping from local dependency names to the references they require.
        factory: Construction function. It receives a mapping from the same local
            names to the resolved dependency values, and returns the API.
    """

    api: ApiRef[T]
    deps: Mapping[str, AnyApiRef]
    factory: Callable[[Mapping[str, Any]], T]

    @property
    def dependency_ids(self) -> list[str]:
        return [ref.id for ref in self.deps.values()]


AnyApiFactory = ApiFactory[Any]


@dataclass(frozen=True)
class MaterialisedApi:
    """
    Represents an instantiated API.

    Attributes:
        id: The identifier of the API.
        value: The instantiated API object.
        dependencies: Identifiers of the APIs this one was built from.
    """

    id: str
    value: Any
    dependencies: list[str]
