"""Apiscope: scoped, dependency-ordered API resolution.

Apiscope instantiates named APIs from factories that declare, by reference,
which other APIs they need. Factories are invoked once, in dependency order,
and their results are held in immutable resolvers that can be layered to
model application, request, or other scopes.

Key Features:
    - Typed API references and factories
    - Dependency ordering with duplicate, missing-dependency and cycle detection
    - Immutable, layered resolvers; deriving a scope never alters its parent
    - Decorator-based registration with profile filtering
    - Contexts combining resolvable APIs with abort signals and timeouts

Basic Usage:
    >>> from apiscope.domain import ApiRef, ApiFactory
    >>> from apiscope.resolver import ApiResolver
    >>>
    >>> config_ref: ApiRef[dict] = ApiRef("core.config")
    >>> greeting_ref: ApiRef[str] = ApiRef("core.greeting")
    >>>
    >>> resolver = ApiResolver.from_factories([
    ...     ApiFactory(config_ref, {}, lambda deps: {"name": "world"}),
    ...     ApiFactory(greeting_ref, {"config": config_ref},
    ...                lambda deps: f"Hello {deps['config']['name']}"),
    ... ])
    >>> resolver.resolve(greeting_ref)
    'Hello world'

The framework consists of several core modules:
    - domain: Core domain models (ApiRef, ApiFactory, MaterialisedApi)
    - resolver: The immutable API resolver
    - ordering: Instantiation ordering and validation of factory batches
    - registry: Factory registration and profile filtering
    - builders: High-level resolver and context construction functions
    - context: Abortable contexts holding a resolver
    - fetch: Identity-aware fetch middleware
    - errors: Framework-specific exceptions
"""
