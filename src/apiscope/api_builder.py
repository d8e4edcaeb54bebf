"""Utilities for constructing MaterialisedApi objects.

This module provides the ApiBuilder class, which is responsible for invoking
factory construction functions and turning the results into MaterialisedApi
instances. It supports a transformer pattern that allows post-processing of
every API after creation, e.g. wrapping it for instrumentation.
"""

from functools import reduce
from typing import Any, Callable, Iterable, Mapping

from apiscope.domain import AnyApiFactory, MaterialisedApi
from apiscope.errors import DependencyError

__all__ = ["ApiBuilder", "Transformer"]

Transformer = Callable[[MaterialisedApi], MaterialisedApi]


class ApiBuilder:
    """Build :class:`MaterialisedApi` instances from factories."""

    def __init__(self, transformers: Iterable[Transformer] = ()):
        self._transformers = tuple(transformers)

    def build(
        self, factory: AnyApiFactory, dependencies: Mapping[str, Any]
    ) -> MaterialisedApi:
        """Invoke a factory and apply transformers to the result.

        Args:
            factory: The factory being executed.
            dependencies: Mapping of the factory's local dependency names to
                resolved values.

        Returns:
            The resulting :class:`MaterialisedApi`.

        Raises:
            DependencyError: If a transformer changes the identifier of the API.
        """
        untransformed = MaterialisedApi(
            factory.api.id,
            factory.factory(dependencies),
            factory.dependency_ids,
        )
        transformed = reduce(
            lambda api, transformer: transformer(api),
            self._transformers,
            untransformed,
        )
        if transformed.id != untransformed.id:
            raise DependencyError(
                f"Transformer changed the id of API {untransformed.id} to {transformed.id}"
            )
        return transformed
