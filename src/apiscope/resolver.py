"""
Module for instantiating API factories into an immutable, layered resolver.

Factories declare the APIs they depend on by reference. Merging a batch of
factories into a resolver orders them so that every dependency is built
before its dependents, invokes them in that order and returns a new resolver
holding the results. The original resolver is never modified, so resolvers
can be layered freely: a child may depend on APIs in its parent, but not vice
versa.
"""

import logging
from typing import Iterable, Optional, TypeVar

from apiscope.api_builder import ApiBuilder
from apiscope.api_set import ApiSet
from apiscope.domain import AnyApiFactory, ApiRef, MaterialisedApi
from apiscope.ordering import instantiation_order

__all__ = ["ApiResolver"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ApiResolver:
    """
    Handles the on-demand instantiation and memoization of APIs.

    Every API held by a resolver was produced by exactly one factory, and is
    never replaced once present. Resolvers are immutable; ``with_factories``
    returns a new resolver that shares all existing entries with the original.
    """

    def __init__(self, apis: Optional[ApiSet] = None, builder: Optional[ApiBuilder] = None):
        self._apis = apis if apis is not None else ApiSet({})
        self._builder = builder or ApiBuilder()

    @classmethod
    def empty(cls, builder: Optional[ApiBuilder] = None) -> "ApiResolver":
        """Create a resolver that holds no APIs."""
        return cls(ApiSet({}), builder)

    @classmethod
    def from_factories(
        cls, factories: Iterable[AnyApiFactory], builder: Optional[ApiBuilder] = None
    ) -> "ApiResolver":
        """Create a resolver that instantiates and holds a set of initial APIs.

        Args:
            factories: The API factories to instantiate.
            builder: Optional builder used to invoke the factories.

        Raises:
            DependencyError: If the factories contain duplicates, missing
                dependencies or cycles.
        """
        return cls.empty(builder).with_factories(factories)

    def with_factories(self, factories: Iterable[AnyApiFactory]) -> "ApiResolver":
        """Create a resolver holding both the APIs of this one and the given factories' APIs.

        The factories' dependencies must be resolved either by each other or by
        the APIs already held by this resolver. Any attempt to overwrite an
        already registered API is rejected. Either every factory is
        instantiated, or an error is raised and nothing is kept.

        Args:
            factories: The API factories to merge in.

        Returns:
            A new resolver. This resolver is left unchanged.

        Raises:
            DuplicateRegistrationError: If an API is already registered, or
                produced twice by the batch.
            MissingDependencyError: If a dependency cannot be resolved.
            CircularDependencyError: If the dependencies form a cycle.
        """
        built: dict[str, MaterialisedApi] = {}
        parent = self._apis

        def get_api(api_id: str) -> MaterialisedApi:
            if api_id in built:
                return built[api_id]
            return parent[api_id]

        for factory in instantiation_order(list(factories), parent):
            dependencies = {
                dependency_name: get_api(ref.id).value
                for dependency_name, ref in factory.deps.items()
            }
            logger.debug("Instantiating API %s", factory.api.id)
            built[factory.api.id] = self._builder.build(factory, dependencies)

        return ApiResolver(ApiSet(built, parent), self._builder)

    def resolve(self, ref: ApiRef[T]) -> Optional[T]:
        """Return the API for ``ref``, or None if it was never registered."""
        api = self._apis.get(ref.id)
        return api.value if api is not None else None

    def ids(self) -> frozenset[str]:
        return self._apis.ids()

    def __contains__(self, ref: ApiRef) -> bool:
        return ref.id in self._apis
