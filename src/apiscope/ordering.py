"""Instantiation ordering for batches of API factories.

This module holds the dependency resolution logic of the framework. Given a
batch of factories and the identifiers that are already available, it works
out an order in which the factories can be invoked so that every dependency
is built before anything that depends on it, and rejects batches that can
never be built: duplicates, dangling references and cycles.
"""

import logging
from typing import Container, Iterable, Iterator, Sequence

from apiscope.domain import AnyApiFactory
from apiscope.errors import (
    CircularDependencyError,
    DuplicateRegistrationError,
    MissingDependencyError,
)

__all__ = ["instantiation_order"]

logger = logging.getLogger(__name__)


def instantiation_order(
    factories: Sequence[AnyApiFactory], available: Container[str]
) -> list[AnyApiFactory]:
    """Arrange factories so that dependencies appear before all dependents.

    Args:
        factories: The batch of factories to arrange.
        available: Identifiers that are already instantiated and can be
            depended upon without being produced by the batch.

    Returns:
        The factories of the batch, each exactly once, in a valid build order.
        No ordering is guaranteed between factories that do not depend on
        each other.

    Raises:
        DuplicateRegistrationError: If a factory produces an identifier that is
            already available, or that another factory in the batch produces.
        MissingDependencyError: If a dependency is neither available nor
            produced by the batch.
        CircularDependencyError: If a factory depends on itself, directly or
            transitively.
    """
    factories_by_id = _factories_by_unique_id(factories, available)

    order: list[AnyApiFactory] = []
    placed: set[str] = set()
    for factory in factories:
        if factory.api.id not in placed:
            _place_depth_first(factory, factories_by_id, available, order, placed)

    logger.debug("Instantiation order: %s", [factory.api.id for factory in order])
    return order


def _factories_by_unique_id(
    factories: Iterable[AnyApiFactory], available: Container[str]
) -> dict[str, AnyApiFactory]:
    factories_by_id: dict[str, AnyApiFactory] = {}

    for factory in factories:
        api_id = factory.api.id
        if api_id in available or api_id in factories_by_id:
            raise DuplicateRegistrationError(api_id)
        factories_by_id[api_id] = factory

    return factories_by_id


def _place_depth_first(
    root: AnyApiFactory,
    factories_by_id: dict[str, AnyApiFactory],
    available: Container[str],
    order: list[AnyApiFactory],
    placed: set[str],
) -> None:
    """Place ``root`` and everything it transitively needs from the batch.

    The traversal keeps an explicit stack instead of recursing, so the depth of
    the dependency graph is not bounded by the interpreter's recursion limit.
    ``path`` holds the identifiers currently being resolved, outermost first,
    and is reported verbatim when a cycle or a missing dependency is found.
    """
    path: list[str] = [root.api.id]
    stack: list[tuple[AnyApiFactory, Iterator[str]]] = [
        (root, iter(root.dependency_ids))
    ]

    while stack:
        factory, pending = stack[-1]
        dependency_id = next(pending, None)

        if dependency_id is None:
            stack.pop()
            path.pop()
            if factory.api.id not in placed:
                placed.add(factory.api.id)
                order.append(factory)
            continue

        if dependency_id in path:
            raise CircularDependencyError(path + [dependency_id])
        if dependency_id in available or dependency_id in placed:
            continue

        dependency_factory = factories_by_id.get(dependency_id)
        if dependency_factory is None:
            raise MissingDependencyError(path + [dependency_id])

        path.append(dependency_id)
        stack.append((dependency_factory, iter(dependency_factory.dependency_ids)))
