"""High level entry points for constructing resolvers and contexts."""

from typing import Optional

from apiscope.api_builder import ApiBuilder
from apiscope.context import RootContext
from apiscope.registry import FactoryRegistry
from apiscope.resolver import ApiResolver

__all__ = ["make_resolver", "make_context"]


def make_resolver(
    registry: FactoryRegistry,
    profiles: Optional[set[str]] = None,
    parent: Optional[ApiResolver] = None,
    builder: Optional[ApiBuilder] = None,
) -> ApiResolver:
    """Construct and return a fully materialised :class:`ApiResolver`.

    Factories are selected from the registry and instantiated in dependency
    order, on top of the parent resolver if one is given.

    Args:
        registry: The factory registry containing declared factories.
        profiles: An optional set of profile names used to filter active factories.
            If None, all factories are included regardless of profile.
        parent: An optional resolver holding already-materialised APIs.
            The new factories can depend on parent APIs but not vice versa.
        builder: Optional builder used when there is no parent. A parent's
            resolver keeps its own builder.

    Returns:
        The new :class:`ApiResolver`.

    Raises:
        DependencyError: If factories are duplicated, missing dependencies or cyclic.

    Example:
        >>> registry = FactoryRegistry()
        >>> resolver = make_resolver(registry, {"dev"})
        >>> resolver.resolve(database_ref)
    """
    base = parent if parent is not None else ApiResolver.empty(builder)
    return base.with_factories(registry.registered_factories(profiles))


def make_context(
    registry: FactoryRegistry,
    profiles: Optional[set[str]] = None,
    parent: Optional[RootContext] = None,
) -> RootContext:
    """Construct a context able to resolve every API the registry provides.

    With a parent context, the new context is derived from it: it shares the
    parent's abort signal and can resolve the parent's APIs as well.
    """
    factories = registry.registered_factories(profiles)
    if parent is not None:
        return parent.with_api(factories)
    return RootContext.create(apis=ApiResolver.from_factories(factories))
