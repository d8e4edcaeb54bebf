import pytest

from apiscope.fetch import IdentityAwareFetchMiddleware, TokenSlot


@pytest.fixture
def requests_made():
    return []


@pytest.fixture
def next_fetch(requests_made):
    def fetch(url, headers=None, **kwargs):
        requests_made.append((url, headers, kwargs))
        return "response"

    return fetch


@pytest.fixture
def middleware():
    return IdentityAwareFetchMiddleware()


def test_passes_through_when_signed_out(middleware, next_fetch, requests_made):
    fetch = middleware.apply(next_fetch)

    assert fetch("https://example.com", headers={"a": "b"}, method="GET") == "response"
    assert requests_made == [("https://example.com", {"a": "b"}, {"method": "GET"})]


def test_injects_token_when_signed_in(middleware, next_fetch, requests_made):
    fetch = middleware.apply(next_fetch)
    middleware.set_signed_in(lambda: "secret")
    headers = {"a": "b"}

    fetch("https://example.com", headers=headers)

    assert requests_made == [
        ("https://example.com", {"a": "b", "identity-token": "secret"}, {})
    ]
    assert headers == {"a": "b"}


def test_reads_sign_in_state_on_every_call(middleware, next_fetch, requests_made):
    fetch = middleware.apply(next_fetch)

    fetch("https://example.com/1")
    middleware.set_signed_in(lambda: "token")
    fetch("https://example.com/2")
    middleware.set_signed_out()
    fetch("https://example.com/3")

    assert [headers for _, headers, _ in requests_made] == [
        None,
        {"identity-token": "token"},
        None,
    ]


def test_provider_without_token_passes_through(middleware, next_fetch, requests_made):
    middleware.set_signed_in(lambda: None)

    middleware.apply(next_fetch)("https://example.com")

    assert requests_made == [("https://example.com", None, {})]


def test_signed_in_without_provider_passes_through(middleware, next_fetch, requests_made):
    middleware.set_signed_in(None)

    middleware.apply(next_fetch)("https://example.com")

    assert requests_made == [("https://example.com", None, {})]


def test_custom_header_name(next_fetch, requests_made):
    middleware = IdentityAwareFetchMiddleware().set_header_name("authorization")
    middleware.set_signed_in(lambda: "Bearer abc")

    middleware.apply(next_fetch)("https://example.com")

    assert middleware.header_name == "authorization"
    assert requests_made == [("https://example.com", {"authorization": "Bearer abc"}, {})]


def test_shared_slot(next_fetch, requests_made):
    slot = TokenSlot()
    middleware = IdentityAwareFetchMiddleware(slot=slot)
    fetch = middleware.apply(next_fetch)

    slot.set(lambda: "from-slot")
    fetch("https://example.com")
    slot.clear()

    assert slot.get() is None
    assert requests_made == [("https://example.com", {"identity-token": "from-slot"}, {})]


def test_signed_out_call_is_forwarded_untouched(middleware):
    requests_made = []

    def fetch_without_headers(url):
        requests_made.append(url)
        return "response"

    fetch = middleware.apply(fetch_without_headers)

    assert fetch("https://example.com") == "response"
    assert requests_made == ["https://example.com"]


def test_token_is_added_when_caller_passed_no_headers(middleware, next_fetch, requests_made):
    middleware.set_signed_in(lambda: "secret")

    middleware.apply(next_fetch)("https://example.com", method="POST")

    assert requests_made == [
        ("https://example.com", {"identity-token": "secret"}, {"method": "POST"})
    ]
