"""Fetch middleware that injects the signed-in identity's token into requests."""

import threading
from typing import Any, Callable, Optional

__all__ = ["TokenProvider", "FetchFunction", "TokenSlot", "IdentityAwareFetchMiddleware"]

TokenProvider = Callable[[], Optional[str]]
FetchFunction = Callable[..., Any]

DEFAULT_HEADER_NAME = "identity-token"


class TokenSlot:
    """Holds the token provider of the current session, if any.

    The slot is read on every request, so signing in and out takes effect for
    fetch functions that were created before the change.
    """

    def __init__(self, provider: Optional[TokenProvider] = None):
        self._lock = threading.Lock()
        self._provider = provider

    def get(self) -> Optional[TokenProvider]:
        with self._lock:
            return self._provider

    def set(self, provider: Optional[TokenProvider]) -> None:
        with self._lock:
            self._provider = provider

    def clear(self) -> None:
        self.set(None)


class IdentityAwareFetchMiddleware:
    """A fetch middleware whose signed-in state can change throughout its lifetime.

    While signed in, every request passing through it gets a header carrying
    the token returned by the current token provider.

    Example:
        >>> middleware = IdentityAwareFetchMiddleware()
        >>> fetch = middleware.apply(requests.request)
        >>> middleware.set_signed_in(lambda: session.token)
        >>> fetch("GET", "https://example.com/api")
    """

    def __init__(self, header_name: str = DEFAULT_HEADER_NAME, slot: Optional[TokenSlot] = None):
        self._header_name = header_name
        self._slot = slot or TokenSlot()

    @property
    def header_name(self) -> str:
        return self._header_name

    def apply(self, next_fetch: FetchFunction) -> FetchFunction:
        """Wrap ``next_fetch`` so that requests carry the identity token.

        The returned function takes the same positional arguments as
        ``next_fetch``. Without a token the call is forwarded untouched;
        with one, a copy of the ``headers`` keyword argument carrying the
        token is passed on and the caller's mapping is left as it was.
        """

        def fetch(*args, **kwargs):
            provider = self._slot.get()
            token = provider() if provider is not None else None
            if token is None:
                return next_fetch(*args, **kwargs)

            headers: dict[str, str] = dict(kwargs.get("headers") or {})
            headers[self._header_name] = token
            return next_fetch(*args, **{**kwargs, "headers": headers})

        return fetch

    def set_header_name(self, name: str) -> "IdentityAwareFetchMiddleware":
        """Change the header name from the default value to a custom one."""
        self._header_name = name
        return self

    def set_signed_in(self, provider: Optional[TokenProvider]) -> None:
        """Mark the session as signed in.

        Args:
            provider: Optionally returns the token of the signed-in identity.
        """
        self._slot.set(provider)

    def set_signed_out(self) -> None:
        self._slot.clear()
