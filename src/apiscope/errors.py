from typing import Iterable

__all__ = [
    "DependencyError",
    "DuplicateRegistrationError",
    "MissingDependencyError",
    "CircularDependencyError",
]


class DependencyError(Exception):
    """Raised when an API's dependencies cannot be resolved or are misannotated."""

    pass


class DuplicateRegistrationError(DependencyError):
    """Raised when a factory would overwrite an API that is already registered."""

    def __init__(self, api_id: str):
        super().__init__(f"API {api_id} was already registered")
        self.api_id = api_id


class MissingDependencyError(DependencyError):
    """Raised when a dependency is neither registered nor produced by the batch.

    ``chain`` runs from the factory the lookup started at to the missing identifier.
    """

    def __init__(self, chain: Iterable[str]):
        self.chain = tuple(chain)
        super().__init__(
            f"Could not resolve API dependency in chain, {' -> '.join(self.chain)}"
        )


class CircularDependencyError(DependencyError):
    """Raised when an API appears in its own dependency chain.

    ``chain`` repeats the identifier that closes the cycle, e.g. ``a -> b -> a``.
    """

    def __init__(self, chain: Iterable[str]):
        self.chain = tuple(chain)
        super().__init__(f"Circular API dependencies: {' -> '.join(self.chain)}")
