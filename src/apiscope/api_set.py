"""Layered, read-only store of materialised APIs.

Each resolver owns one layer holding the APIs it instantiated itself, and
falls back to the layer of the resolver it was derived from. Deriving a new
resolver therefore never copies or touches the entries of its parent: the
parent stays exactly as it was, and all of its entries remain visible from
the child.
"""
from types import MappingProxyType
from typing import Iterator, Optional

from apiscope.domain import MaterialisedApi

__all__ = ["ApiSet"]


class ApiSet:
    """Collection of materialised APIs with hierarchical lookup.

    Attributes:
        apis: Read-only mapping of identifiers to the APIs held by this layer.
        parent: Optional parent ApiSet consulted for identifiers not held here.

    Example:
        >>> global_apis = ApiSet({"db": db_api})
        >>> request_apis = ApiSet({"session": session_api}, global_apis)
        >>> request_apis["db"]       # Found in parent
        >>> request_apis["session"]  # Found locally
    """

    def __init__(
        self,
        apis: dict[str, MaterialisedApi],
        parent: Optional["ApiSet"] = None,
    ):
        self.apis = MappingProxyType(dict(apis))
        self.parent = parent

    def _layers(self) -> Iterator["ApiSet"]:
        layer = self
        while layer is not None:
            yield layer
            layer = layer.parent

    def get(self, api_id: str) -> Optional[MaterialisedApi]:
        for layer in self._layers():
            if api_id in layer.apis:
                return layer.apis[api_id]
        return None

    def ids(self) -> frozenset[str]:
        return frozenset(api_id for layer in self._layers() for api_id in layer.apis)

    def __getitem__(self, api_id: str) -> MaterialisedApi:
        api = self.get(api_id)
        if api is None:
            raise KeyError(api_id)
        return api

    def __contains__(self, api_id: str) -> bool:
        return any(api_id in layer.apis for layer in self._layers())

    def __len__(self) -> int:
        return len(self.ids())
