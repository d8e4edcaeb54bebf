"""Registration and introspection utilities for API factories."""

import inspect
from dataclasses import dataclass
from typing import (
    Annotated,
    Any,
    Callable,
    Mapping,
    Optional,
    get_args,
    get_origin,
    get_type_hints,
)

from apiscope.domain import AnyApiFactory, AnyApiRef, ApiFactory, ApiRef
from apiscope.errors import DependencyError

__all__ = [
    "FactoryRegistration",
    "FactoryRegistry",
]


@dataclass(frozen=True)
class FactoryRegistration:
    """A factory together with the profiles under which it is active.

    Attributes:
        factory: The registered factory.
        profiles: List of profile names under which the factory is active.
            Empty list means active in all profiles.

    Example:
        >>> @registry.provides(database_ref, profiles=["prod"])
        >>> def make_database() -> Database:
        ...     return Database()
        >>>
        >>> # Creates FactoryRegistration with:
        >>> # - factory.api: database_ref
        >>> # - factory.deps: {}
        >>> # - profiles: ["prod"]
    """

    factory: AnyApiFactory
    profiles: list[str]


class FactoryRegistry:
    """Registry for API factories, supporting registration and profile-based filtering."""

    def __init__(self):
        self._registrations: list[FactoryRegistration] = []

    def register(self, factory: AnyApiFactory, profiles: Optional[list[str]] = None):
        """Register a factory explicitly.

        Args:
            factory: The factory to be registered.
            profiles: Optional list of profiles for which the factory is active.
        """
        self._registrations.append(FactoryRegistration(factory, list(profiles or [])))

    def registrations(self) -> list[FactoryRegistration]:
        return list(self._registrations)

    def registered_factories(
        self, profiles: Optional[set[str]] = None
    ) -> list[AnyApiFactory]:
        """Retrieve factories, optionally filtered by active profiles.

        Args:
            profiles: A set of active profile names. If None, returns all factories.

        Returns:
            A list of factories whose profiles match the given profile set.
        """
        return [
            registration.factory
            for registration in self._registrations
            if profiles is None or _profiles_match(registration.profiles, profiles)
        ]

    def provides(
        self,
        api: AnyApiRef,
        deps: Optional[Mapping[str, AnyApiRef]] = None,
        profiles: Optional[list[str]] = None,
    ) -> Callable:
        """Decorator to register a function or class as the factory of an API.

        The decorated callable receives its dependencies as keyword arguments.
        If ``deps`` is not given, dependencies are read from the parameters'
        ``Annotated`` hints, whose first metadata item names the API either by
        reference or by id.

        Args:
            api: Reference to the API produced by the decorated callable.
            deps: Optional explicit mapping of parameter names to references.
            profiles: Optional list of profiles for which the factory is active.

        Returns:
            A decorator that registers the callable and returns it unchanged.

        Example:
            @registry.provides(greeter_ref, profiles=["dev"])
            def make_greeter(prefix: Annotated[str, prefix_ref]) -> Greeter:
                return Greeter(prefix)
        """

        def decorator(obj):
            if not (inspect.isclass(obj) or inspect.isfunction(obj)):
                raise DependencyError(f"{obj} is not a class or function")

            dependencies = dict(deps) if deps is not None else _get_dependencies(obj)
            self.register(ApiFactory(api, dependencies, _keyword_factory(obj)), profiles)
            return obj

        return decorator


def _keyword_factory(target: Callable) -> Callable[[Mapping[str, Any]], Any]:
    def factory(dependencies: Mapping[str, Any]) -> Any:
        return target(**dependencies)

    return factory


def _profiles_match(stated: list[str], selected: set[str]) -> bool:
    """Check if a factory's profile requirements match the selected profiles.

    Profile matching supports inclusion and exclusion patterns:
    - Normal profiles ("dev", "prod") must be in the selected set
    - Exclusion profiles ("!test") must NOT be in the selected set
    - Empty stated profiles match all selected profiles

    Example:
        >>> _profiles_match(["dev"], {"dev"})          # True
        >>> _profiles_match(["!test"], {"dev"})        # True
        >>> _profiles_match(["!test"], {"test"})       # False
        >>> _profiles_match(["prod"], {"dev"})         # False
    """
    provided = [p for p in stated if not p.startswith("!")]
    excluded = [p[1:] for p in stated if p.startswith("!")]

    return not any(e in selected for e in excluded) and (
        not provided or any(p in selected for p in provided)
    )


def _get_dependencies(target: Callable) -> dict[str, AnyApiRef]:
    """Extract dependency references from a callable's type annotations.

    Example:
        >>> def make_service(db: Annotated[Database, database_ref],
        ...                  cache: Annotated[Cache, "core.cache"]) -> Service:
        ...     pass
        >>> _get_dependencies(make_service)
        >>> # Returns:
        >>> # {"db": database_ref, "cache": ApiRef("core.cache")}
    """
    sig = inspect.signature(target)
    if not sig.parameters:
        return {}
    hints = get_type_hints(
        target.__init__ if inspect.isclass(target) else target, include_extras=True
    )
    return {
        name: _make_dependency(hints.get(name), name, target)
        for name in sig.parameters
    }


def _make_dependency(annotation, name: str, target: Callable) -> AnyApiRef:
    if get_origin(annotation) is Annotated:
        _base_type, *metadata = get_args(annotation)
        qualifier = next(iter(metadata), None)
        if isinstance(qualifier, ApiRef):
            return qualifier
        if isinstance(qualifier, str):
            return ApiRef(qualifier)

    raise DependencyError(
        f"Dependency {name} of {target.__name__} is not annotated with an API reference"
    )
